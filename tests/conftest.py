import os

# Settings are read at import time, point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["SMTP_HOST"] = ""
os.environ["LOGFIRE_TOKEN"] = ""

from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app import email_service
from app.database import Base, enable_sqlite_foreign_keys, get_db
from app.main import app
from app.models.doctor import Doctor, WEEKDAYS
from app.models.user import User, UserRole
from app.security import create_access_token, hash_password
from app.services.slot_service import SlotService

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "Secret123"

# A week out, so "past date" rules never trip
FUTURE_DAY = date.today() + timedelta(days=7)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    """Capture outgoing email instead of talking to SMTP."""
    sent = []

    def fake_send_email(to, subject, html_content):
        sent.append({"to": to, "subject": subject, "html": html_content})
        return True

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


async def _persist(session_factory, obj):
    async with session_factory() as session:
        session.add(obj)
        await session.commit()
        await session.refresh(obj)
    return obj


def make_user(name: str, email: str, role: UserRole = UserRole.PATIENT) -> User:
    return User(
        name=name,
        email=email,
        phone="555-0100",
        password_hash=hash_password(TEST_PASSWORD),
        role=role.value,
    )


def make_doctor(name: str = "Dr. Lee", email: str = "lee@clinic.test", **overrides) -> Doctor:
    values = {
        "name": name,
        "email": email,
        "phone": "555-0199",
        "specialization": "General Dentistry",
        "experience": 12,
        "qualification": "DDS",
        "consultation_fee": 80.0,
        "available_days": list(WEEKDAYS),
    }
    values.update(overrides)
    return Doctor(**values)


@pytest.fixture
async def patient(session_factory):
    return await _persist(session_factory, make_user("Pat Patient", "pat@example.com"))


@pytest.fixture
async def other_patient(session_factory):
    return await _persist(session_factory, make_user("Olive Other", "olive@example.com"))


@pytest.fixture
async def admin(session_factory):
    return await _persist(
        session_factory, make_user("Ada Admin", "admin@clinic.test", UserRole.ADMIN)
    )


@pytest.fixture
async def doctor(session_factory):
    return await _persist(session_factory, make_doctor())


def _auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def patient_headers(patient):
    return _auth_headers(patient)


@pytest.fixture
def other_patient_headers(other_patient):
    return _auth_headers(other_patient)


@pytest.fixture
def admin_headers(admin):
    return _auth_headers(admin)


@pytest.fixture
def future_day():
    return FUTURE_DAY


@pytest.fixture
def add_doctor(session_factory):
    async def _add(**kwargs):
        return await _persist(session_factory, make_doctor(**kwargs))

    return _add


@pytest.fixture
def create_slots(session_factory):
    """Create slots for a doctor in their own committed session."""

    async def _create(doctor, labels, day=FUTURE_DAY):
        async with session_factory() as session:
            slots = await SlotService(session).create_slots(doctor, day, labels)
            await session.commit()
        return slots

    return _create
