"""
Database Models
===============

All models are imported here to ensure they are registered
with SQLAlchemy's metadata for migrations.
"""

from app.models.todo import (
    DOCUMENT_FIELDS,
    TodoCategory,
    TodoDocument,
    TodoPriority,
)

__all__ = [
    "DOCUMENT_FIELDS",
    "TodoCategory",
    "TodoDocument",
    "TodoPriority",
]
