"""
Base model with common fields.
"""
import enum
import uuid
from datetime import datetime, timezone
from typing import Type
from sqlalchemy import DateTime, String, Enum as SQLEnum, inspect
from sqlalchemy.orm import Mapped, mapped_column
from app.db.base import Base


def generate_id() -> str:
    """Generate a 15-character record id."""
    return uuid.uuid4().hex[:15]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_type(enum_cls: Type[enum.Enum], name: str) -> SQLEnum:
    """SQL enum storing lowercase values (e.g. 'active' not 'ACTIVE')."""
    return SQLEnum(
        enum_cls,
        name=name,
        create_constraint=True,
        values_callable=lambda x: [e.value for e in x]
    )


class TimestampMixin:
    """Mixin for created/updated timestamps."""
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        index=True
    )
    updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False
    )


class BaseModel(Base, TimestampMixin):
    """Abstract base model with id and timestamps."""
    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(15),
        primary_key=True,
        default=generate_id
    )


def loaded_relation(obj, name: str):
    """Return a relationship value only when it is already loaded (never lazy-loads)."""
    if obj is None or name in inspect(obj).unloaded:
        return None
    return getattr(obj, name)
