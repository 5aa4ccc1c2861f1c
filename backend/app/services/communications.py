"""
Mass communication dispatch.

Messages are delivered through a pluggable backend. The default backend logs
every message to a file instead of talking to an SMS/email provider, and
delivery outcomes are simulated with a configurable success rate.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from fastapi import BackgroundTasks
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.db.base import get_session_maker
from app.models.base import utcnow
from app.models.communication import (
    Communication,
    CommunicationChannel,
    CommunicationStatus,
    RecipientType,
)
from app.models.hub import Hub
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class Recipient:
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    def address_for(self, channel: CommunicationChannel) -> Optional[str]:
        if channel == CommunicationChannel.EMAIL:
            return self.email
        return self.phone or self.email


async def resolve_recipients(db: AsyncSession, recipients: Optional[dict]) -> list[Recipient]:
    """Expand a recipients spec (type, roles, user_ids, hub_ids) into concrete contacts."""
    recipients = recipients or {}
    recipient_type = recipients.get("type") or RecipientType.ALL.value

    if recipient_type == RecipientType.HUBS.value:
        query = select(Hub)
        hub_ids = recipients.get("hub_ids") or []
        if hub_ids:
            query = query.where(Hub.id.in_(hub_ids))
        result = await db.execute(query.order_by(Hub.created.asc()))
        return [
            Recipient(id=h.id, name=h.name, email=h.email, phone=h.phone)
            for h in result.scalars().all()
        ]

    query = select(User)
    if recipient_type == RecipientType.VOLUNTEERS.value:
        query = query.where(User.role == UserRole.VOLUNTEER)
    elif recipient_type == RecipientType.MEMBERS.value:
        query = query.where(User.role == UserRole.MEMBER)
    elif recipient_type == RecipientType.CUSTOM.value:
        user_ids = recipients.get("user_ids") or []
        if not user_ids:
            return []
        query = query.where(User.id.in_(user_ids))
    elif recipient_type == RecipientType.ROLE.value:
        roles = [UserRole(r) for r in recipients.get("roles") or []]
        if not roles:
            return []
        query = query.where(User.role.in_(roles))

    result = await db.execute(query.order_by(User.created.asc()))
    return [
        Recipient(id=u.id, name=u.name, email=u.email, phone=u.phone or None)
        for u in result.scalars().all()
    ]


class LoggingDeliveryBackend:
    """
    Delivery backend that writes messages to a log file.

    Stands in for SMTP/SMS/push providers; a real provider implements the
    same deliver() coroutine.
    """

    def __init__(self, log_path: Optional[str] = None):
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.log_path = Path(log_path or settings.EMAIL_LOG_PATH)

    def _log_message(self, channel: CommunicationChannel, to: str, subject: Optional[str], content: str) -> None:
        timestamp = datetime.now().isoformat()
        log_entry = f"""
================================================================================
{channel.value.upper()} SENT: {timestamp}
================================================================================
TO: {to}
FROM: {self.from_name} <{self.from_email}>
SUBJECT: {subject or ''}
--------------------------------------------------------------------------------
{content}
--------------------------------------------------------------------------------
"""
        with open(self.log_path, "a") as f:
            f.write(log_entry)

    async def deliver(
        self,
        channel: CommunicationChannel,
        recipient: Recipient,
        subject: Optional[str],
        content: str,
    ) -> bool:
        address = recipient.address_for(channel)
        if not address:
            logger.info("No %s address for recipient %s", channel.value, recipient.id)
            return False
        try:
            self._log_message(channel, address, subject, content)
        except OSError as e:
            logger.error("Failed to log %s to %s: %s", channel.value, address, e)
            return False
        return True


async def dispatch_communication(
    db: AsyncSession,
    communication_id: str,
    backend: Optional[LoggingDeliveryBackend] = None,
    success_rate: Optional[float] = None,
    rng: Callable[[], float] = random.random,
) -> Optional[Communication]:
    """
    Deliver a communication to every resolved recipient and record the outcome.

    A communication that is already sent is left untouched.
    """
    backend = backend or LoggingDeliveryBackend()
    success_rate = settings.COMMUNICATION_SIMULATION_SUCCESS_RATE if success_rate is None else success_rate

    result = await db.execute(select(Communication).where(Communication.id == communication_id))
    communication = result.scalar_one_or_none()
    if communication is None:
        logger.warning("Communication %s vanished before dispatch", communication_id)
        return None
    if communication.status == CommunicationStatus.SENT:
        return communication

    communication.status = CommunicationStatus.SENDING
    communication.updated = utcnow()
    await db.flush()

    recipients = await resolve_recipients(db, communication.recipients)
    sent = failed = 0
    for recipient in recipients:
        delivered = await backend.deliver(
            communication.type, recipient, communication.subject, communication.content
        )
        # Providers fail occasionally; simulate that on top of the backend result
        if delivered and rng() < success_rate:
            sent += 1
        else:
            failed += 1

    now = utcnow()
    communication.status = CommunicationStatus.SENT
    communication.sent_at = now
    communication.sent_count = sent
    communication.failed_count = failed
    communication.updated = now
    await db.flush()

    logger.info(
        "Communication %s dispatched via %s: %d sent, %d failed",
        communication.id, communication.type.value, sent, failed
    )
    return communication


class CommunicationDispatcher:
    """Schedules dispatch of a communication after the response is sent."""

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker] = None,
        backend: Optional[LoggingDeliveryBackend] = None,
        delay: Optional[float] = None,
    ):
        self.session_maker = session_maker
        self.backend = backend
        self.delay = settings.COMMUNICATION_DISPATCH_DELAY_SECONDS if delay is None else delay

    def schedule(self, background_tasks: BackgroundTasks, communication_id: str) -> None:
        background_tasks.add_task(self.run, communication_id)

    async def run(self, communication_id: str) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
        session_maker = self.session_maker or get_session_maker()
        failed = False
        async with session_maker() as session:
            try:
                await dispatch_communication(session, communication_id, backend=self.backend)
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Dispatch of communication %s failed", communication_id)
                failed = True
        if failed:
            await self.mark_failed(session_maker, communication_id)

    async def mark_failed(self, session_maker: async_sessionmaker, communication_id: str) -> None:
        """Set a communication to failed so it can be sent again."""
        async with session_maker() as session:
            try:
                communication = await session.get(Communication, communication_id)
                if communication is None or communication.status == CommunicationStatus.SENT:
                    return
                communication.status = CommunicationStatus.FAILED
                communication.updated = utcnow()
                await session.commit()
            except Exception:
                await session.rollback()
                logger.exception("Could not mark communication %s as failed", communication_id)


def get_communication_dispatcher() -> CommunicationDispatcher:
    return CommunicationDispatcher()
