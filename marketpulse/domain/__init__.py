"""
Domain layer package.

Contains entities, port interfaces and errors for market data.
This layer has ZERO external dependencies.
No framework imports, no IO, no side effects.
"""
