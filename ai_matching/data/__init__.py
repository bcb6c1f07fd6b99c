"""
Data layer for the matching engine.

Provides database connections, data models, and repository classes
for data access throughout the application.

Submodules:
- database: MongoDB connection management
- models: Pydantic data models/schemas
- repositories: Database operations and queries
"""

from .database import (
    DatabaseManager,
    get_database_manager,
)

__all__ = [
    "DatabaseManager",
    "get_database_manager",
]
