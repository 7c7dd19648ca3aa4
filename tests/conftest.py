"""Wspolne fixture'y: sqlite w pliku per test, zmockowane powiadomienia i lock."""

import os

# przed importem app.*, engine modulu nie moze celowac w postgresa
os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.api import create_app
from app.api.deps import get_lock_service, get_notifier
from app.data import models  # noqa: F401
from app.data.database import Base, get_db, make_engine
from app.data.models import ProductModel, UserModel
from app.services.cart_service import CartService
from app.services.lock_service import LockService
from app.services.notification_service import NotificationService


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifier():
    return MagicMock(spec=NotificationService)


@pytest.fixture
def lock_service():
    lock = MagicMock(spec=LockService)
    lock.acquire_checkout_lock.return_value = True
    lock.release_checkout_lock.return_value = True
    return lock


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role="CUSTOMER", username=None):
        counter["n"] += 1
        name = username or f"{role.lower()}{counter['n']}"
        user = UserModel(id=counter["n"], username=name, email=f"{name}@example.com", role=role)
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(seller, name=None, price="100.00", stock=10, category="Electronics", is_available=None):
        counter["n"] += 1
        product = ProductModel(
            sku=f"SKU-{counter['n']:04d}",
            name=name or f"Product {counter['n']}",
            description="",
            category=category,
            price=Decimal(price),
            stock=stock,
            is_available=stock > 0 if is_available is None else is_available,
            seller_id=seller.id,
        )
        db.add(product)
        db.commit()
        return product

    return _make


@pytest.fixture
def fill_cart(db):
    def _fill(buyer, *lines):
        svc = CartService(db)
        for product, quantity in lines:
            svc.add_item(buyer.id, product.id, quantity)

    return _fill


@pytest.fixture
def client(session_factory, notifier, lock_service):
    app = create_app()

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_lock_service] = lambda: lock_service

    with TestClient(app) as test_client:
        yield test_client
