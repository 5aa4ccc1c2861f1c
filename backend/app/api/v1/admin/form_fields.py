"""
Configurable registration form fields.

Admins and hub coordinators define the extra fields shown on the volunteer,
member and hub registration forms. Deleting a field only deactivates it so
existing answers keep their meaning.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.permissions import require_staff
from app.models.base import utcnow
from app.models.form_field import FormField, FormType
from app.models.user import User
from app.schemas.common import ItemListResponse, MessageResponse
from app.schemas.form_field import (
    FormFieldCreate, FormFieldUpdate, FormFieldReorder, FormFieldResponse
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _ordered(query):
    return query.order_by(FormField.order.asc(), FormField.created.asc())


async def get_field_or_404(db: AsyncSession, field_id: str) -> FormField:
    result = await db.execute(select(FormField).where(FormField.id == field_id))
    field = result.scalar_one_or_none()
    if field is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Form field not found"
        )
    return field


@router.get("/admin/{form_type}", response_model=ItemListResponse[FormFieldResponse])
async def list_all_fields(
    form_type: FormType,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Every field of a form, including inactive ones."""
    result = await db.execute(_ordered(select(FormField).where(FormField.form_type == form_type)))
    return ItemListResponse(items=[FormFieldResponse.model_validate(f) for f in result.scalars().all()])


@router.get("/{form_type}", response_model=ItemListResponse[FormFieldResponse])
async def list_active_fields(
    form_type: FormType,
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        _ordered(select(FormField).where(FormField.form_type == form_type, FormField.is_active == True))
    )
    return ItemListResponse(items=[FormFieldResponse.model_validate(f) for f in result.scalars().all()])


@router.post("", response_model=FormFieldResponse, status_code=status.HTTP_201_CREATED)
async def create_field(
    field_data: FormFieldCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    existing = await db.execute(
        select(FormField.id).where(
            FormField.form_type == field_data.form_type,
            FormField.field_key == field_data.field_key
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Field key already exists for this form type"
        )

    now = utcnow()
    field = FormField(
        form_type=field_data.form_type,
        field_key=field_data.field_key,
        field_type=field_data.field_type,
        label=field_data.label,
        placeholder=field_data.placeholder,
        description=field_data.description,
        required=field_data.required,
        options=[o.model_dump() for o in field_data.options],
        validation=field_data.validation.model_dump(exclude_none=True) if field_data.validation else None,
        default_value=field_data.default_value,
        order=field_data.order,
        section=field_data.section,
        is_active=field_data.is_active,
        admin_only=field_data.admin_only,
        created_by_id=current_user.id,
        updated_by_id=current_user.id,
        created=now,
        updated=now,
    )
    db.add(field)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Field key already exists for this form type"
        )

    return FormFieldResponse.model_validate(field)


@router.put("/{field_id}", response_model=FormFieldResponse)
async def update_field(
    field_id: str,
    field_data: FormFieldUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    field = await get_field_or_404(db, field_id)

    updates = field_data.model_dump(exclude_unset=True)
    for name in ("field_type", "label", "required", "order", "is_active", "admin_only"):
        if updates.get(name) is not None:
            setattr(field, name, updates[name])
    for name in ("placeholder", "description", "section", "default_value"):
        if name in updates:
            setattr(field, name, updates[name])
    if updates.get("options") is not None:
        field.options = updates["options"]
    if "validation" in updates:
        field.validation = (
            field_data.validation.model_dump(exclude_none=True) if field_data.validation else None
        )

    field.updated_by_id = current_user.id
    field.updated = utcnow()
    await db.flush()

    return FormFieldResponse.model_validate(field)


@router.delete("/{field_id}", response_model=MessageResponse)
async def delete_field(
    field_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Deactivate a field."""
    field = await get_field_or_404(db, field_id)

    field.is_active = False
    field.updated_by_id = current_user.id
    field.updated = utcnow()
    await db.flush()

    return MessageResponse(message="Form field deactivated")


@router.post("/{form_type}/reorder", response_model=ItemListResponse[FormFieldResponse])
async def reorder_fields(
    form_type: FormType,
    reorder: FormFieldReorder,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_staff)
):
    """Set each field's order to its position in field_ids."""
    result = await db.execute(
        select(FormField).where(
            FormField.form_type == form_type,
            FormField.id.in_(reorder.field_ids)
        )
    )
    fields = {f.id: f for f in result.scalars().all()}
    missing = [fid for fid in reorder.field_ids if fid not in fields]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown fields for {form_type.value} form: {', '.join(missing)}"
        )

    now = utcnow()
    for index, field_id in enumerate(reorder.field_ids):
        field = fields[field_id]
        field.order = index
        field.updated_by_id = current_user.id
        field.updated = now
    await db.flush()

    ordered = await db.execute(_ordered(select(FormField).where(FormField.form_type == form_type)))
    return ItemListResponse(items=[FormFieldResponse.model_validate(f) for f in ordered.scalars().all()])
