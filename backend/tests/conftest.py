"""Shared fixtures: a fresh SQLite database per test and a small catalog."""
import os
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///./pricetrack-test.db")
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"
os.environ["SEED_DEMO_DATA"] = "false"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import func, select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402

from pricetrack.core.database import build_engine, get_db, init_db  # noqa: E402
from pricetrack.models import (  # noqa: E402
    Brand,
    Branch,
    Category,
    PriceObservation,
    Product,
    Purchase,
    PurchaseLineItem,
    Supermarket,
    User,
)


@pytest.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'pricetrack.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def catalog(session_factory):
    """Two supermarkets, three branches, two users and three products."""
    async with session_factory() as session:
        session.add_all([
            Supermarket(id=1, name="Lider"),
            Supermarket(id=2, name="Jumbo"),
            User(id=1, name="Ana Rojas", email="ana@example.com"),
            User(id=2, name="Bruno Diaz", email="bruno@example.com"),
            Brand(id=1, name="Colun"),
            Category(id=1, name="Dairy"),
        ])
        await session.flush()
        session.add_all([
            Branch(id=1, supermarket_id=1, name="Lider Centro"),
            Branch(id=2, supermarket_id=2, name="Jumbo Costanera"),
            Branch(id=3, supermarket_id=1, name="Lider Maipu"),
            Product(id=10, barcode="7801000000010", name="Leche Entera 1L", brand_id=1, category_id=1),
            Product(id=11, barcode="7801000000011", name="Pan de Molde", category_id=1),
            Product(id=12, barcode="7801000000012", name="Arroz 100%_Grado 1"),
        ])
        await session.commit()

    return SimpleNamespace(
        lider=1, jumbo=2,
        lider_centro=1, jumbo_costanera=2, lider_maipu=3,
        ana=1, bruno=2,
        milk=10, bread=11, rice=12,
    )


@pytest.fixture
def add_observation(session_factory):
    """Insert a price observation directly, bypassing the purchase flow."""
    async def _add(product_id, price, observed_on, branch_id=1, user_id=1, is_valid=True):
        async with session_factory() as session:
            observation = PriceObservation(
                product_id=product_id,
                branch_id=branch_id,
                user_id=user_id,
                price=Decimal(str(price)),
                observed_on=observed_on if isinstance(observed_on, date) else date.fromisoformat(observed_on),
                is_valid=is_valid,
            )
            session.add(observation)
            await session.commit()
            return observation.id

    return _add


@pytest.fixture
def count_rows(session_factory):
    """Row counts for the three tables a purchase writes to."""
    async def _count():
        async with session_factory() as session:
            return (
                await session.scalar(select(func.count()).select_from(Purchase)),
                await session.scalar(select(func.count()).select_from(PurchaseLineItem)),
                await session.scalar(select(func.count()).select_from(PriceObservation)),
            )

    return _count


@pytest.fixture
async def client(session_factory):
    from pricetrack.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
