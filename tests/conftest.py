import itertools

import httpx
import pytest

from marketplace.app import app
from marketplace.auth import token_for
from marketplace.db import Base, get_db, make_engine, make_sessionmaker
from marketplace.models import Order, Product, User

_seq = itertools.count(1)


@pytest.fixture
async def engine(tmp_path):
    eng = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_sessionmaker(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make(name="Asha", role="artisan", is_active=True, **extra):
        n = next(_seq)
        user = User(
            name=name,
            email=extra.pop("email", f"user{n}@example.com"),
            password_hash="not-a-real-hash",
            role=role,
            is_active=is_active,
            **extra,
        )
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_product(db):
    async def _make(artisan, **fields):
        data = {
            "name": "Clay pot",
            "description": "Hand-thrown terracotta pot",
            "price": 25,
            "category": "pottery",
            "image_url": "https://img.example.com/pot.jpg",
            "stock": 3,
            "is_active": True,
        }
        data.update(fields)
        product = Product(artisan_id=artisan.id, **data)
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product
    return _make


@pytest.fixture
def make_order(db):
    async def _make(user, status="pending"):
        order = Order(
            user_id=user.id,
            items=[{"productId": 1, "quantity": 1}],
            shipping_address="12 Loom Street",
            payment_method="card",
            status=status,
        )
        db.add(order)
        await db.commit()
        await db.refresh(order)
        return order
    return _make


def auth(user):
    return {"Authorization": f"Bearer {token_for(user)}"}


async def reload(db, model, pk):
    return await db.get(model, pk, populate_existing=True)
