"""
Todo Models
===========

Enumerations for todo fields and the SQLAlchemy table backing the
SQL document store.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum as SQLEnum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.config import settings
from app.db.base import Base, generate_document_id


# =============================================================================
# Enums
# =============================================================================

class TodoCategory(str, Enum):
    """Todo category."""
    WORK = "work"
    PERSONAL = "personal"
    SHOPPING = "shopping"
    HEALTH = "health"
    OTHER = "other"


class TodoPriority(str, Enum):
    """Todo priority level."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Document field name -> column attribute
DOCUMENT_FIELDS: dict[str, str] = {
    "title": "title",
    "completed": "completed",
    "category": "category",
    "priority": "priority",
    "deadline": "deadline",
    "imageUrl": "image_url",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "userId": "user_id",
}


# =============================================================================
# Models
# =============================================================================

class TodoDocument(Base):
    """
    A todo stored as a row.

    Columns mirror the document fields; NULL means the field is absent.
    Timestamps are written by the service, not by the database, so that
    createdAt is assigned once and toggling leaves updatedAt alone.
    """

    __tablename__ = settings.TODOS_COLLECTION

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=generate_document_id,
    )
    title: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    category: Mapped[Optional[TodoCategory]] = mapped_column(
        SQLEnum(TodoCategory, name="todocategory", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    priority: Mapped[Optional[TodoPriority]] = mapped_column(
        SQLEnum(TodoPriority, name="todopriority", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    deadline: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    image_url: Mapped[Optional[str]] = mapped_column(
        String(2048),
        nullable=True,
    )
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(128),
        nullable=True,
    )

    __table_args__ = (
        Index("idx_todo_created_at", "created_at"),
        Index("idx_todo_user_created_at", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TodoDocument(id={self.id}, title={self.title[:30]})>"

    def to_document(self) -> dict:
        """Return the row as a document dict, leaving out NULL columns."""
        document: dict = {}
        for field, attr in DOCUMENT_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            document[field] = value
        return document
