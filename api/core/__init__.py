"""
Shared, cross-cutting code for the API: settings, logger construction, the
asyncpg pool wrapper and the error taxonomy. Comment SQL and business logic
live in `comments/`.
"""
