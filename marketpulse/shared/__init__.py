"""
Shared cross-cutting concerns.

Contains error handling, security middleware, and logging.
No business logic belongs here.
"""
