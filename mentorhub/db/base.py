"""
Common model columns and helpers
"""
from datetime import datetime
from enum import Enum
from typing import Type

from sqlalchemy import Column, DateTime, Enum as SQLEnum

from mentorhub.db.session import Base  # noqa: F401


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamps"""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )


def enum_column(enum_cls: Type[Enum], name: str) -> SQLEnum:
    """String-valued enum column type storing the member values"""
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda obj: [e.value for e in obj],
        native_enum=False,
        validate_strings=True,
        length=32
    )
