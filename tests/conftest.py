"""pytest configuration: a throwaway SQLite store and user/schedule factories."""
from __future__ import annotations

import os
import sys
import tempfile
from datetime import timedelta
from pathlib import Path

# Settings are read at import time, so the environment is prepared before any app import.
_TMP_DIR = tempfile.mkdtemp(prefix="studio-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{Path(_TMP_DIR) / 'studio.db'}"
os.environ["ENVIRONMENT"] = "test"
os.environ["AUTH_DEV_BYPASS"] = "true"
os.environ["CLERK_SECRET_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["LOG_DIR"] = str(Path(_TMP_DIR) / "logs")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["STORE_RETRY_DELAY_SECONDS"] = "0"

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import cuid  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Base, AsyncSessionLocal, engine  # noqa: E402
from app.enums import SessionStatus, UserRole, CreditSource  # noqa: E402
from app.models import User, ScheduledClass, PrivateSession  # noqa: E402
from app.services.credit_ledger_service import CreditLedgerService  # noqa: E402
from app.utils.dates import utc_now  # noqa: E402


@pytest_asyncio.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def make_user(db):
    async def _make_user(role: UserRole = UserRole.CLIENT, **fields) -> User:
        user = User(
            email=fields.pop("email", f"{cuid.cuid()}@studio.test"),
            first_name=fields.pop("first_name", role.value.title()),
            role=role,
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db.add(user)
        await db.commit()
        return user

    return _make_user


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN, first_name="Ada")


@pytest_asyncio.fixture
async def trainer(make_user):
    return await make_user(UserRole.TRAINER, first_name="Tom")


@pytest_asyncio.fixture
async def client_user(make_user):
    return await make_user(UserRole.CLIENT, first_name="Cleo")


@pytest_asyncio.fixture
async def home_user(make_user):
    return await make_user(UserRole.HOME_USER, first_name="Hana")


@pytest.fixture
def make_class(db, trainer):
    async def _make_class(
        capacity: int = 4, credit_cost: int = 1, starts_in: timedelta = timedelta(days=2),
        name: str = "EMS Group", minutes: int = 30
    ) -> ScheduledClass:
        starts_at = utc_now() + starts_in
        scheduled_class = ScheduledClass(
            name=name,
            instructor_id=trainer.id,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(minutes=minutes),
            capacity=capacity,
            booked_count=0,
            credit_cost=credit_cost,
            status=SessionStatus.SCHEDULED,
        )
        db.add(scheduled_class)
        await db.commit()
        return scheduled_class

    return _make_class


@pytest.fixture
def make_private_session(db, trainer):
    async def _make_private_session(credit_cost: int = 2, starts_in: timedelta = timedelta(days=3)) -> PrivateSession:
        starts_at = utc_now() + starts_in
        session = PrivateSession(
            trainer_id=trainer.id,
            starts_at=starts_at,
            ends_at=starts_at + timedelta(minutes=45),
            credit_cost=credit_cost,
            status=SessionStatus.SCHEDULED,
        )
        db.add(session)
        await db.commit()
        return session

    return _make_private_session


@pytest.fixture
def grant(db):
    async def _grant(user_id: str, amount: int, expires_in=None, source: CreditSource = CreditSource.ADMIN):
        expiry = utc_now() + expires_in if expires_in is not None else None
        credit = await CreditLedgerService.grant(db, user_id, amount, source=source, expiry_date=expiry)
        await db.commit()
        return credit

    return _grant


@pytest_asyncio.fixture
async def api_client():
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth():
    def _auth(user: User) -> dict:
        return {"X-Development-User": user.id}

    return _auth
