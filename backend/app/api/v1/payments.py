"""
Payment endpoints.

In-app payments are simulated and settled in the background. Donation and
membership checkouts are initialised through the external payment gateway.
"""
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from app.db.base import get_db
from app.core.config import settings
from app.core.deps import get_current_user, get_current_user_optional
from app.core.permissions import require_admin
from app.api.v1.pagination import paginate
from app.models.base import utcnow, loaded_relation
from app.models.membership_type import MembershipType
from app.models.payment import Payment, PaymentType, PaymentMethod, PaymentStatus
from app.models.user import User, UserRole
from app.schemas.common import ItemListResponse, expand_user
from app.schemas.payment import (
    PaymentCreate, PaymentStatusUpdate, PaymentResponse, PaymentInitiatedResponse,
    PaymentSummary, PaymentListResponse, DonationCheckout, MembershipCheckout, CheckoutResponse
)
from app.services.payments import (
    PaymentSimulator, get_payment_simulator,
    PaymentGatewayClient, PaymentGatewayError, GatewayResult, get_payment_gateway,
    generate_transaction_id, complete_payment, fail_payment
)

logger = logging.getLogger(__name__)

router = APIRouter()

GATEWAY_PROVIDER = "chapa"
# The gateway rejects titles longer than this
GATEWAY_TITLE_LIMIT = 16
DONATION_TITLE = "ERCS Donation"
MEMBERSHIP_TITLE = "ERCS Membership"
MANUAL_STATUSES = (PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED)


def payment_to_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=payment.id,
        user_id=payment.user_id,
        type=payment.type,
        amount=payment.amount,
        currency=payment.currency,
        method=payment.method,
        transaction_id=payment.transaction_id,
        status=payment.status,
        payment_provider=payment.payment_provider,
        metadata=payment.payment_metadata,
        receipt=payment.receipt,
        description=payment.description,
        related_to=payment.related_to,
        processed_at=payment.processed_at,
        failure_reason=payment.failure_reason,
        user=expand_user(loaded_relation(payment, "user")),
        created=payment.created,
        updated=payment.updated,
    )


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min)


async def ensure_transaction_unused(db: AsyncSession, transaction_id: str) -> None:
    result = await db.execute(select(Payment.id).where(Payment.transaction_id == transaction_id))
    if result.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Transaction reference already used"
        )


async def flush_new_payment(db: AsyncSession, payment: Payment) -> None:
    db.add(payment)
    try:
        await db.flush()
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Transaction reference already used"
        )


def gateway_failure(result: GatewayResult) -> JSONResponse:
    """Relay a gateway rejection with its own status and body."""
    return JSONResponse(status_code=result.status_code, content=result.data)


@router.post("", response_model=PaymentInitiatedResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payment_data: PaymentCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    simulator: PaymentSimulator = Depends(get_payment_simulator)
):
    """Start a simulated payment; it settles in the background."""
    now = utcnow()
    payment = Payment(
        user_id=current_user.id,
        type=payment_data.type,
        amount=payment_data.amount,
        currency=(payment_data.currency or settings.DEFAULT_CURRENCY).upper(),
        method=payment_data.method,
        transaction_id=generate_transaction_id(),
        status=PaymentStatus.PROCESSING,
        payment_provider="simulation",
        payment_metadata={
            "user_agent": request.headers.get("user-agent"),
            "ip_address": request.client.host if request.client else None,
            "timestamp": now.isoformat(),
        },
        description=payment_data.description,
        related_to=payment_data.related_to.model_dump(exclude_none=True) if payment_data.related_to else None,
        created=now,
        updated=now,
    )
    await flush_new_payment(db, payment)

    simulator.schedule(background_tasks, payment.id)
    logger.info("Payment %s initiated by user %s", payment.transaction_id, current_user.id)

    return PaymentInitiatedResponse(
        item=payment_to_response(payment),
        message="Payment is being processed"
    )


@router.get("/my", response_model=ItemListResponse[PaymentResponse])
async def my_payments(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(Payment)
        .where(Payment.user_id == current_user.id)
        .order_by(Payment.created.desc())
    )
    return ItemListResponse(items=[payment_to_response(p) for p in result.scalars().all()])


@router.get("", response_model=PaymentListResponse)
async def list_payments(
    page: int = Query(1, ge=1),
    perPage: int = Query(30, ge=1, le=500),
    status_filter: Optional[PaymentStatus] = Query(None, alias="status"),
    type: Optional[PaymentType] = None,
    method: Optional[PaymentMethod] = None,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """All payments with a summary of completed amounts. Admin only."""
    conditions = []
    if status_filter:
        conditions.append(Payment.status == status_filter)
    if type:
        conditions.append(Payment.type == type)
    if method:
        conditions.append(Payment.method == method)
    if start_date:
        conditions.append(Payment.created >= _day_start(start_date))
    if end_date:
        conditions.append(Payment.created < _day_start(end_date + timedelta(days=1)))

    query = select(Payment).where(*conditions).order_by(Payment.created.desc())
    payments, total_items, total_pages = await paginate(
        db, query, page, perPage, selectinload(Payment.user)
    )

    total_result = await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            *conditions, Payment.status == PaymentStatus.COMPLETED
        )
    )

    return PaymentListResponse(
        page=page,
        perPage=perPage,
        totalItems=total_items,
        totalPages=total_pages,
        items=[payment_to_response(p) for p in payments],
        summary=PaymentSummary(
            total=Decimal(str(total_result.scalar() or 0)),
            count=total_items,
        ),
    )


@router.get("/transaction/{transaction_id}", response_model=PaymentResponse)
async def get_by_transaction(
    transaction_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(select(Payment).where(Payment.transaction_id == transaction_id))
    payment = result.scalar_one_or_none()
    if payment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )
    if payment.user_id != current_user.id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to view this payment"
        )
    return payment_to_response(payment)


@router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: str,
    status_data: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """Settle a payment by hand: completed, failed or refunded. Admin only."""
    if status_data.status not in MANUAL_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Status must be completed, failed or refunded"
        )

    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if payment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Payment not found"
        )

    if status_data.status == PaymentStatus.COMPLETED:
        if payment.status == PaymentStatus.COMPLETED:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Payment is already completed"
            )
        await complete_payment(db, payment)
    elif status_data.status == PaymentStatus.FAILED:
        fail_payment(payment, status_data.failure_reason or "Marked failed by admin")
    else:
        payment.status = PaymentStatus.REFUNDED
        payment.updated = utcnow()

    if status_data.receipt is not None:
        payment.receipt = status_data.receipt
    await db.flush()
    logger.info(
        "Payment %s set to %s by admin %s", payment.transaction_id, payment.status.value, current_user.id
    )

    return payment_to_response(payment)


@router.post("/donation", response_model=CheckoutResponse)
async def initiate_donation(
    donation: DonationCheckout,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_current_user_optional),
    gateway: PaymentGatewayClient = Depends(get_payment_gateway)
):
    """Initialise a donation checkout with the gateway. Login is optional."""
    title = (donation.title or DONATION_TITLE)[:GATEWAY_TITLE_LIMIT]
    currency = (donation.currency or settings.DEFAULT_CURRENCY).upper()

    try:
        result = await gateway.initialize_donation({
            "first_name": donation.first_name or (current_user.name.split(" ")[0] if current_user else None),
            "amount": str(donation.amount),
            "email": donation.email or (current_user.email if current_user else None),
            "phone_number": donation.phone_number or (current_user.phone if current_user else None),
            "title": title,
            "return_url": donation.return_url or f"{settings.FRONTEND_URL}/donation/success",
            "currency": currency,
        })
    except PaymentGatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Payment gateway unavailable"
        )
    if not result.ok:
        return gateway_failure(result)

    transaction_id = result.tx_ref or generate_transaction_id()
    await ensure_transaction_unused(db, transaction_id)

    now = utcnow()
    payment = Payment(
        user_id=current_user.id if current_user else None,
        type=PaymentType.DONATION,
        amount=donation.amount,
        currency=currency,
        method=PaymentMethod.MOBILE_MONEY,
        transaction_id=transaction_id,
        status=PaymentStatus.PENDING,
        payment_provider=GATEWAY_PROVIDER,
        payment_metadata={
            "payment_gateway": GATEWAY_PROVIDER,
            "email": donation.email,
            "checkout_url": result.checkout_url,
        },
        description=donation.description or title,
        created=now,
        updated=now,
    )
    await flush_new_payment(db, payment)
    logger.info("Donation checkout %s initialised", transaction_id)

    return CheckoutResponse(
        response=result.data.get("response") if isinstance(result.data, dict) else None,
        transaction_id=transaction_id,
        payment_id=payment.id,
        checkout_url=result.checkout_url,
    )


@router.post("/membership", response_model=CheckoutResponse)
async def initiate_membership_payment(
    checkout: MembershipCheckout,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gateway: PaymentGatewayClient = Depends(get_payment_gateway)
):
    """Initialise a membership fee checkout; a processing fee is added to the amount."""
    membership_type = await db.get(MembershipType, checkout.membership_type_id)
    if membership_type is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Membership type not found"
        )

    membership_amount = checkout.amount if checkout.amount is not None else Decimal(str(membership_type.amount))
    processing_fee = Decimal(str(settings.MEMBERSHIP_PROCESSING_FEE))
    total_amount = membership_amount + processing_fee

    try:
        result = await gateway.initialize_checkout({
            "first_name": current_user.name.split(" ")[0] or current_user.name,
            "amount": str(total_amount),
            "email": checkout.email or current_user.email,
            "phone_number": checkout.phone_number or current_user.phone,
            "title": MEMBERSHIP_TITLE[:GATEWAY_TITLE_LIMIT],
            "return_url": f"{settings.FRONTEND_URL}/register/success?type=membership",
            "currency": settings.DEFAULT_CURRENCY,
        })
    except PaymentGatewayError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Payment gateway unavailable"
        )
    if not result.ok:
        return gateway_failure(result)

    transaction_id = result.tx_ref or generate_transaction_id()
    await ensure_transaction_unused(db, transaction_id)

    now = utcnow()
    payment = Payment(
        user_id=current_user.id,
        type=PaymentType.MEMBERSHIP_FEE,
        amount=total_amount,
        currency=settings.DEFAULT_CURRENCY,
        method=PaymentMethod.MOBILE_MONEY,
        transaction_id=transaction_id,
        status=PaymentStatus.PENDING,
        payment_provider=GATEWAY_PROVIDER,
        payment_metadata={
            "membership_type_id": membership_type.id,
            "payment_gateway": GATEWAY_PROVIDER,
            "membership_amount": float(membership_amount),
            "processing_fee": float(processing_fee),
            "total_amount": float(total_amount),
            "checkout_url": result.checkout_url,
        },
        description=f"Membership fee: {membership_type.name}",
        created=now,
        updated=now,
    )
    await flush_new_payment(db, payment)
    logger.info("Membership checkout %s initialised for user %s", transaction_id, current_user.id)

    return CheckoutResponse(
        response=result.data.get("response") if isinstance(result.data, dict) else None,
        transaction_id=transaction_id,
        payment_id=payment.id,
        checkout_url=result.checkout_url,
    )
