"""
Pydantic schemas for configurable registration form fields.
"""
from typing import Any, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.form_field import FormType, FieldType


class FieldOption(BaseModel):
    label: str
    value: str


class FieldValidation(BaseModel):
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=0)
    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    custom_validation: Optional[str] = None


class FormFieldCreate(BaseModel):
    form_type: FormType
    field_key: str = Field(..., min_length=1, max_length=100, pattern=r"^[A-Za-z][A-Za-z0-9_]*$")
    field_type: FieldType
    label: str = Field(..., min_length=1, max_length=300)
    placeholder: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None
    required: bool = False
    options: list[FieldOption] = Field(default_factory=list)
    validation: Optional[FieldValidation] = None
    default_value: Optional[Any] = None
    order: int = 0
    section: Optional[str] = Field(None, max_length=100)
    is_active: bool = True
    admin_only: bool = False


class FormFieldUpdate(BaseModel):
    field_type: Optional[FieldType] = None
    label: Optional[str] = Field(None, min_length=1, max_length=300)
    placeholder: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = None
    required: Optional[bool] = None
    options: Optional[list[FieldOption]] = None
    validation: Optional[FieldValidation] = None
    default_value: Optional[Any] = None
    order: Optional[int] = None
    section: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None
    admin_only: Optional[bool] = None


class FormFieldReorder(BaseModel):
    field_ids: list[str] = Field(..., min_length=1)


class FormFieldResponse(BaseModel):
    id: str
    form_type: FormType
    field_key: str
    field_type: FieldType
    label: str
    placeholder: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    options: list[dict] = Field(default_factory=list)
    validation: Optional[dict] = None
    default_value: Optional[Any] = None
    order: int = 0
    section: Optional[str] = None
    is_active: bool = True
    admin_only: bool = False
    created_by_id: Optional[str] = None
    updated_by_id: Optional[str] = None
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True
