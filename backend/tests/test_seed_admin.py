"""
Tests for the bootstrap admin script.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.user import UserRole
from scripts.seed_admin import seed_admin


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


class TestSeedAdmin:

    @pytest.mark.asyncio
    async def test_seeded_admin_logs_in_with_email_as_typed(
        self, client: AsyncClient, session_maker
    ):
        user = await seed_admin("Root.Admin@Example.COM", "AdminPass123", session_maker=session_maker)
        assert user.role == UserRole.ADMIN

        response = await client.post("/api/v1/auth/login", json={
            "email": "Root.Admin@Example.COM",
            "password": "AdminPass123",
        })
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_rerun_reuses_existing_account(self, session_maker):
        first = await seed_admin("Root.Admin@Example.COM", "AdminPass123", session_maker=session_maker)
        again = await seed_admin("Root.Admin@example.com", "Other123", session_maker=session_maker)
        assert again.id == first.id
