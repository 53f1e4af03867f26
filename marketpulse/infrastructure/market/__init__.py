"""
Market data adapters: the httpx client for the remote REST API and
the pydantic models of its payloads.
"""
