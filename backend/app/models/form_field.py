"""
FormField model - admin-configurable fields on the public registration forms.
"""
from typing import Any, Optional
from enum import Enum
from sqlalchemy import String, Text, Boolean, Integer, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import BaseModel, enum_type


class FormType(str, Enum):
    VOLUNTEER = "volunteer"
    MEMBER = "member"
    HUB = "hub"


class FieldType(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    TEL = "tel"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    TEXTAREA = "textarea"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    FILE = "file"


class FormField(BaseModel):
    """A field definition; field_key is unique within a form type."""
    __tablename__ = "form_fields"
    __table_args__ = (
        UniqueConstraint("form_type", "field_key", name="uq_form_fields_form_type_field_key"),
    )

    form_type: Mapped[FormType] = mapped_column(
        enum_type(FormType, "formtype"),
        nullable=False,
        index=True
    )
    field_key: Mapped[str] = mapped_column(String(100), nullable=False)
    field_type: Mapped[FieldType] = mapped_column(
        enum_type(FieldType, "fieldtype"),
        nullable=False
    )
    label: Mapped[str] = mapped_column(String(300), nullable=False)
    placeholder: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    required: Mapped[bool] = mapped_column(Boolean, default=False)
    # options: [{label, value}] for select and radio fields
    options: Mapped[list] = mapped_column(JSON, default=list)
    # validation: min_length, max_length, min, max, pattern, custom_validation
    validation: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    default_value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    section: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    admin_only: Mapped[bool] = mapped_column(Boolean, default=False)

    created_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    updated_by_id: Mapped[Optional[str]] = mapped_column(
        String(15),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<FormField {self.form_type.value}.{self.field_key}>"
