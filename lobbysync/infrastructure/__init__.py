"""
Infrastructure layer - External adapters for lobbysync.

This layer contains:
- PostgreSQL session store (SQLAlchemy async + asyncpg)
- Local JSON key-value store
- System clock
- In-memory stubs for development and tests
- structlog configuration

IMPORT RULES:
- CAN import from: domain, application, config
- Implements ports defined in application layer
"""
