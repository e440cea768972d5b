import os
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must be set BEFORE importing portal.main so settings and the engine
# pick up the throwaway SQLite database.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_portal.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STORAGE_BACKEND"] = "local"
os.environ.pop("REDIS_URL", None)

from portal.main import app
from portal.core.database import AsyncSessionLocal, init_db, drop_db
from portal.core.security import create_access_token
from portal.models.user import User
from portal.models.people import Teacher
from portal.models.enums import UserRole


@pytest_asyncio.fixture
async def database():
    """Fresh schema for every test."""
    await drop_db()
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def db_session(database):
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client(database):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


# ------------------------------------------------------------------
# Factories
# ------------------------------------------------------------------
@pytest_asyncio.fixture
async def make_user(db_session):
    counter = {"n": 0}

    async def _make(role: UserRole = UserRole.User, name: str | None = None, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.value.title()} {counter['n']}",
            email=email or f"{role.value}{counter['n']}@dept.edu",
            password_hash="not-a-real-hash",
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest_asyncio.fixture
async def make_teacher_profile(db_session):
    async def _make(user: User | None = None, name: str = "Prof. Lin") -> Teacher:
        teacher = Teacher(name=name, user_id=user.id if user else None)
        db_session.add(teacher)
        await db_session.commit()
        await db_session.refresh(teacher)
        return teacher

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token(subject=user.id, data={"role": user.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers
