"""
Database Base Model
===================

Provides the base class for all SQLAlchemy models.
"""

from datetime import datetime
import uuid

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all database models.
    """

    # Type annotation for class attributes
    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


def generate_document_id() -> str:
    """Generate a new opaque document id."""
    return str(uuid.uuid4())
