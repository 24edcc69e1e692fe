import os
from datetime import date
from decimal import Decimal

import pytest

# Настройки читаются при импорте приложения
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("MAIL_ACTIVATED", "false")

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import laptop_api.db.models  # noqa: E402,F401
from laptop_api.api.deps import get_mail_service  # noqa: E402
from laptop_api.core.db import Base, get_db  # noqa: E402
from laptop_api.core.security import create_access_token  # noqa: E402
from laptop_api.db.repositories import LaptopRepository  # noqa: E402
from laptop_api.domains.laptops.entities import Brand, Image, Laptop  # noqa: E402
from laptop_api.main import app  # noqa: E402


class FakeMailService:
    """Запоминает письма вместо отправки по SMTP"""

    def __init__(self):
        self.sent = []

    async def send_mail(self, subject: str, body: str) -> None:
        self.sent.append((subject, body))


def sample_laptops():
    return [
        Laptop(
            model_number="ZB-1000",
            category="ULTRABOOK",
            price=Decimal("999.99"),
            discount=Decimal("0.1"),
            available=True,
            release_date=date(2023, 3, 1),
            homepage="https://zenbook.example.com/",
            features=["TOUCHSCREEN", "LIGHTWEIGHT"],
            brand=Brand(name="Zenbook", series="UX"),
            images=[Image(caption="Front", content_type="image/png"), Image(caption="Side", content_type="image/png")],
        ),
        Laptop(
            model_number="PB-2000",
            category="GAMING",
            price=Decimal("1999.00"),
            discount=Decimal("0.05"),
            available=True,
            features=["BACKLIT"],
            brand=Brand(name="Predator", series="Helios"),
            images=[Image(caption="Keyboard", content_type="image/jpeg")],
        ),
        Laptop(
            model_number="TP-3000",
            category="BUSINESS",
            price=Decimal("1499.00"),
            discount=Decimal("0"),
            available=False,
            features=["BATTERY", "BACKLIT"],
            brand=Brand(name="ThinkPad"),
            images=[],
        ),
    ]


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def laptops(session_factory):
    """Три Laptop с ID 1, 2, 3 и версией 0"""
    created = []
    async with session_factory() as session:
        repository = LaptopRepository(session)
        for laptop in sample_laptops():
            created.append(await repository.create(laptop))
    return created


@pytest.fixture
def mail_service():
    return FakeMailService()


@pytest.fixture
async def client(session_factory, mail_service):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_service] = lambda: mail_service
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(*roles: str, username: str = "admin") -> dict:
    token = create_access_token({"sub": username, "roles": list(roles)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    return auth_headers("admin")


@pytest.fixture
def user_headers():
    return auth_headers("user", username="user")


@pytest.fixture
def guest_headers():
    return auth_headers(username="guest")
