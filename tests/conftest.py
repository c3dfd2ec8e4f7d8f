"""Shared fixtures: a throwaway SQLite store per test and an API client bound to it."""
import os

# The engine in storefront.db.database is built at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from storefront.auth import create_token
from storefront.db.database import get_db
from storefront.db.init_db import init_db
from storefront.db.models import Category, User
from storefront.main import app


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded(session_factory):
    """Categories 1-2 and users 1-3 that the catalog and carts refer to."""
    async with session_factory() as session:
        session.add_all([
            Category(id=1, name="Footwear"),
            Category(id=2, name="Hats"),
            User(id=1, name="Alice", email="alice@example.com", address="1 Main St", phone_number="555-0101"),
            User(id=2, name="Bob", email="bob@example.com"),
            User(id=3, name="Carol", email="carol@example.com"),
        ])
        await session.commit()


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


def auth_headers(user_id: int, role: str = None) -> dict:
    return {"Authorization": f"Bearer {create_token(user_id, role)}"}


@pytest.fixture
def product_payload():
    def build(**overrides):
        payload = {
            "name": "Running Shoe",
            "description": "Lightweight trainer",
            "price": 79.9,
            "category": 1,
            "stock": 12,
        }
        payload.update(overrides)
        return payload

    return build
