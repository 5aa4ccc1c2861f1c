"""
Payment processing: transaction ids, simulated settlement and the checkout
gateway proxy.

In-app payments are not charged anywhere. They are created as "processing"
and a background task settles them after a short delay with a configurable
success rate. Real checkouts (donations, membership fees) are initialised by
an external gateway service reached over HTTP.
"""
import asyncio
import logging
import random
import string
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import httpx
from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.db.base import get_session_maker
from app.models.base import utcnow
from app.models.membership_type import MembershipType
from app.models.payment import Payment, PaymentStatus, PaymentType
from app.services.membership import activate_membership
from app.services.stats import increment_user_stats

logger = logging.getLogger(__name__)

BASE36 = string.digits + string.ascii_uppercase
SIMULATED_FAILURE_REASON = "Simulated payment failure"


def generate_transaction_id(now_ms: Optional[int] = None) -> str:
    """TXN + millisecond timestamp + 9 random base-36 characters."""
    now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(random.choices(BASE36, k=9))
    return f"TXN{now_ms}{suffix}"


async def complete_payment(db: AsyncSession, payment: Payment) -> Payment:
    """Mark a payment completed and apply its side effects."""
    now = utcnow()
    payment.status = PaymentStatus.COMPLETED
    payment.processed_at = now
    payment.failure_reason = None
    payment.updated = now

    if payment.user_id is None:
        return payment

    user = await increment_user_stats(db, payment.user_id, donations_made=1)

    if payment.type == PaymentType.MEMBERSHIP_FEE and user is not None:
        membership_type_id = (payment.payment_metadata or {}).get("membership_type_id")
        membership_type = await db.get(MembershipType, membership_type_id) if membership_type_id else None
        if membership_type is not None:
            activate_membership(user, membership_type, now)
            logger.info("Activated membership %s for user %s", membership_type.id, user.id)

    return payment


def fail_payment(payment: Payment, reason: str) -> Payment:
    payment.status = PaymentStatus.FAILED
    payment.failure_reason = reason
    payment.updated = utcnow()
    return payment


async def settle_payment(db: AsyncSession, payment_id: str, succeeded: bool) -> Optional[Payment]:
    """
    Settle a simulated payment.

    Only payments still "processing" are touched, so a settlement never runs
    twice and never overrides an admin's manual decision.
    """
    result = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    if payment is None:
        logger.warning("Payment %s vanished before settlement", payment_id)
        return None
    if payment.status != PaymentStatus.PROCESSING:
        return payment

    if succeeded:
        await complete_payment(db, payment)
    else:
        fail_payment(payment, SIMULATED_FAILURE_REASON)
    await db.flush()

    logger.info("Payment %s settled as %s", payment.transaction_id, payment.status.value)
    return payment


class PaymentSimulator:
    """Schedules simulated settlement of in-app payments after the response is sent."""

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker] = None,
        success_rate: Optional[float] = None,
        delay: Optional[float] = None,
        rng: Callable[[], float] = random.random,
    ):
        self.session_maker = session_maker
        self.success_rate = settings.PAYMENT_SIMULATION_SUCCESS_RATE if success_rate is None else success_rate
        self.delay = settings.PAYMENT_SIMULATION_DELAY_SECONDS if delay is None else delay
        self.rng = rng

    def schedule(self, background_tasks: BackgroundTasks, payment_id: str) -> None:
        background_tasks.add_task(self.run, payment_id)

    async def run(self, payment_id: str) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        succeeded = self.rng() < self.success_rate
        session_maker = self.session_maker or get_session_maker()
        async with session_maker() as session:
            try:
                await settle_payment(session, payment_id, succeeded)
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Settlement of payment %s failed", payment_id)


def get_payment_simulator() -> PaymentSimulator:
    return PaymentSimulator()


class PaymentGatewayError(Exception):
    """The checkout gateway could not be reached."""


@dataclass
class GatewayResult:
    status_code: int
    data: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def tx_ref(self) -> Optional[str]:
        response = self.data.get("response") if isinstance(self.data, dict) else None
        return response.get("tx_ref") if isinstance(response, dict) else None

    @property
    def checkout_url(self) -> Optional[str]:
        response = self.data.get("response") if isinstance(self.data, dict) else None
        inner = response.get("data") if isinstance(response, dict) else None
        return inner.get("checkout_url") if isinstance(inner, dict) else None


class PaymentGatewayClient:
    """Thin client for the external checkout gateway (Chapa proxy service)."""

    DONATION_PATH = "/chapa/donation"
    CHECKOUT_PATH = "/chapa"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.PAYMENT_GATEWAY_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PAYMENT_GATEWAY_TIMEOUT
        self.transport = transport

    async def _post(self, path: str, payload: dict) -> GatewayResult:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error("Payment gateway %s%s unreachable: %s", self.base_url, path, e)
            raise PaymentGatewayError(str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = {"detail": response.text}

        if not response.is_success:
            logger.warning("Payment gateway %s rejected checkout with %d", path, response.status_code)
        return GatewayResult(status_code=response.status_code, data=data)

    async def initialize_donation(self, payload: dict) -> GatewayResult:
        return await self._post(self.DONATION_PATH, payload)

    async def initialize_checkout(self, payload: dict) -> GatewayResult:
        return await self._post(self.CHECKOUT_PATH, payload)


def get_payment_gateway() -> PaymentGatewayClient:
    return PaymentGatewayClient()
