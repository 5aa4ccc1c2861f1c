"""
Tests for mass communications: creation, sending and dispatch.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.communication import (
    Communication, CommunicationChannel, CommunicationStatus, RecipientType
)
from app.models.user import UserRole
from app.services.communications import (
    CommunicationDispatcher, LoggingDeliveryBackend, Recipient, dispatch_communication, resolve_recipients
)


async def create_communication(client: AsyncClient, headers: dict, **fields) -> dict:
    payload = {
        "type": "email",
        "subject": "Blood drive",
        "content": "Join us on Saturday at the Addis Ababa branch.",
        "recipients": {"type": "volunteers"},
    }
    payload.update(fields)
    response = await client.post("/api/v1/communication", headers=headers, json=payload)
    assert response.status_code == 201
    return response.json()


class TestCreateCommunication:

    @pytest.mark.asyncio
    async def test_immediate_send_is_queued(self, client: AsyncClient, coordinator_user, coordinator_headers, dispatcher):
        data = await create_communication(client, coordinator_headers)
        assert data["message"] == "Communication queued for sending"
        assert data["item"]["status"] == "sending"
        assert data["item"]["created_by"]["id"] == coordinator_user.id
        assert dispatcher.scheduled == [data["item"]["id"]]

    @pytest.mark.asyncio
    async def test_draft_is_not_sent(self, client: AsyncClient, admin_headers, dispatcher):
        data = await create_communication(client, admin_headers, draft=True)
        assert data["message"] == "Communication saved as draft"
        assert data["item"]["status"] == "draft"
        assert dispatcher.scheduled == []

    @pytest.mark.asyncio
    async def test_future_schedule(self, client: AsyncClient, admin_headers, dispatcher):
        data = await create_communication(client, admin_headers, scheduled_at="2099-01-01T09:00:00Z")
        assert data["message"] == "Communication scheduled"
        assert data["item"]["status"] == "scheduled"
        assert dispatcher.scheduled == []

    @pytest.mark.asyncio
    async def test_past_schedule_sends_now(self, client: AsyncClient, admin_headers, dispatcher):
        data = await create_communication(client, admin_headers, scheduled_at="2020-01-01T09:00:00Z")
        assert data["item"]["status"] == "sending"
        assert len(dispatcher.scheduled) == 1

    @pytest.mark.asyncio
    async def test_volunteer_cannot_send(self, client: AsyncClient, volunteer_headers):
        response = await client.post("/api/v1/communication", headers=volunteer_headers, json={
            "type": "sms", "content": "Hello"
        })
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_list_is_admin_only(self, client: AsyncClient, admin_headers, coordinator_headers):
        await create_communication(client, admin_headers, draft=True)

        response = await client.get("/api/v1/communication", headers=admin_headers)
        assert response.status_code == 200
        assert len(response.json()["items"]) == 1

        forbidden = await client.get("/api/v1/communication", headers=coordinator_headers)
        assert forbidden.status_code == 403


class TestSendCommunication:

    @pytest.mark.asyncio
    async def test_send_draft(self, client: AsyncClient, admin_headers, dispatcher):
        draft = await create_communication(client, admin_headers, draft=True)
        response = await client.post(
            f"/api/v1/communication/{draft['item']['id']}/send", headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["item"]["status"] == "sending"
        assert dispatcher.scheduled == [draft["item"]["id"]]

    @pytest.mark.asyncio
    async def test_send_rules(self, client: AsyncClient, db_session, admin_headers):
        queued = await create_communication(client, admin_headers)
        busy = await client.post(f"/api/v1/communication/{queued['item']['id']}/send", headers=admin_headers)
        assert busy.status_code == 400
        assert busy.json()["detail"] == "Communication is already being sent"

        communication = await db_session.get(Communication, queued["item"]["id"])
        communication.status = CommunicationStatus.SENT
        await db_session.flush()
        sent = await client.post(f"/api/v1/communication/{queued['item']['id']}/send", headers=admin_headers)
        assert sent.status_code == 400
        assert sent.json()["detail"] == "Communication already sent"

        missing = await client.post("/api/v1/communication/missing/send", headers=admin_headers)
        assert missing.status_code == 404


class TestDispatch:

    @pytest.mark.asyncio
    async def test_dispatch_to_volunteers(self, client: AsyncClient, db_session, tmp_path, make_user, admin_headers):
        await make_user(UserRole.VOLUNTEER, email="first@example.com")
        await make_user(UserRole.VOLUNTEER, email="second@example.com")
        await make_user(UserRole.MEMBER, email="member-only@example.com")
        queued = await create_communication(client, admin_headers)

        log_path = tmp_path / "emails.log"
        communication = await dispatch_communication(
            db_session,
            queued["item"]["id"],
            backend=LoggingDeliveryBackend(log_path=str(log_path)),
            success_rate=1.0,
            rng=lambda: 0.0,
        )
        assert communication.status == CommunicationStatus.SENT
        assert communication.sent_at is not None
        assert communication.sent_count == 2
        assert communication.failed_count == 0

        log = log_path.read_text()
        assert "TO: first@example.com" in log
        assert "TO: second@example.com" in log
        assert "member-only@example.com" not in log
        assert "SUBJECT: Blood drive" in log

    @pytest.mark.asyncio
    async def test_simulated_failures_are_counted(
        self, client: AsyncClient, db_session, tmp_path, make_user, admin_headers
    ):
        await make_user(UserRole.VOLUNTEER)
        queued = await create_communication(client, admin_headers)

        communication = await dispatch_communication(
            db_session,
            queued["item"]["id"],
            backend=LoggingDeliveryBackend(log_path=str(tmp_path / "sms.log")),
            success_rate=0.5,
            rng=lambda: 0.9,
        )
        assert communication.sent_count == 0
        assert communication.failed_count == 1

    @pytest.mark.asyncio
    async def test_sent_communication_is_left_alone(self, client: AsyncClient, db_session, tmp_path, admin_headers):
        queued = await create_communication(client, admin_headers)
        communication = await db_session.get(Communication, queued["item"]["id"])
        communication.status = CommunicationStatus.SENT
        communication.sent_count = 7
        await db_session.flush()

        await dispatch_communication(
            db_session, communication.id, backend=LoggingDeliveryBackend(log_path=str(tmp_path / "x.log"))
        )
        assert communication.sent_count == 7

    @pytest.mark.asyncio
    async def test_missing_address_fails_delivery(self, tmp_path):
        backend = LoggingDeliveryBackend(log_path=str(tmp_path / "out.log"))
        delivered = await backend.deliver(
            CommunicationChannel.SMS, Recipient(id="r1", name="No Contact"), None, "Hello"
        )
        assert delivered is False
        assert not (tmp_path / "out.log").exists()


class TestRecipientResolution:

    @pytest.mark.asyncio
    async def test_recipient_types(self, db_session, make_user, test_hub):
        volunteer = await make_user(UserRole.VOLUNTEER)
        member = await make_user(UserRole.MEMBER)
        evaluator = await make_user(UserRole.EVALUATOR)

        everyone = await resolve_recipients(db_session, {"type": RecipientType.ALL.value})
        assert {r.id for r in everyone} == {volunteer.id, member.id, evaluator.id}

        members = await resolve_recipients(db_session, {"type": "members"})
        assert [r.id for r in members] == [member.id]

        by_role = await resolve_recipients(db_session, {"type": "role", "roles": ["evaluator", "member"]})
        assert {r.id for r in by_role} == {member.id, evaluator.id}

        custom = await resolve_recipients(db_session, {"type": "custom", "user_ids": [volunteer.id]})
        assert [r.email for r in custom] == [volunteer.email]

        hubs = await resolve_recipients(db_session, {"type": "hubs"})
        assert [(r.id, r.email) for r in hubs] == [(test_hub.id, "relief@example.com")]

    @pytest.mark.asyncio
    async def test_empty_custom_list_resolves_to_nobody(self, db_session, make_user):
        await make_user(UserRole.VOLUNTEER)
        assert await resolve_recipients(db_session, {"type": "custom", "user_ids": []}) == []
        assert await resolve_recipients(db_session, {"type": "role"}) == []


class BrokenBackend(LoggingDeliveryBackend):
    """Delivery backend whose provider is down."""

    async def deliver(self, channel, recipient, subject, content) -> bool:
        raise RuntimeError("provider unavailable")


class TestDispatcherFailure:

    @pytest.mark.asyncio
    async def test_failed_dispatch_can_be_retried(
        self, client: AsyncClient, db_engine, db_session, tmp_path, make_user, admin_headers
    ):
        await make_user(UserRole.VOLUNTEER)
        queued = await create_communication(client, admin_headers)
        communication_id = queued["item"]["id"]
        await db_session.commit()

        session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
        dispatcher = CommunicationDispatcher(
            session_maker=session_maker,
            backend=BrokenBackend(log_path=str(tmp_path / "broken.log")),
            delay=0,
        )
        await dispatcher.run(communication_id)

        async with session_maker() as session:
            communication = await session.get(Communication, communication_id)
            assert communication.status == CommunicationStatus.FAILED
            assert communication.sent_at is None

        db_session.expire_all()
        retried = await client.post(f"/api/v1/communication/{communication_id}/send", headers=admin_headers)
        assert retried.status_code == 200
        assert retried.json()["item"]["status"] == "sending"
