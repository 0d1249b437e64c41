"""Shared fixtures: a fresh SQLite database per test, seeded shops and members,
and an API client wired to that database."""
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from duebook.api.deps import get_db
from duebook.core.security import create_access_token
from duebook.db.init_db import init_db
from duebook.db.session import build_engine
from duebook.main import app
from duebook.models.customer import Customer
from duebook.models.enums import ShopUserRole, ShopUserStatus
from duebook.models.shop import Shop
from duebook.models.shop_user import ShopUser
from duebook.models.user import User


@pytest.fixture
def engine(tmp_path):
    # File-backed so each thread/session gets its own connection
    engine = build_engine(f"sqlite:///{tmp_path / 'duebook_test.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seed(db):
    """
    Shop "main" with an OWNER, a STAFF, a VIEWER and an INACTIVE staff member;
    shop "other" owned by an outsider.
    """
    users = {
        name: User(name=name.title(), email=f"{name}@example.com", phone=phone)
        for name, phone in [
            ("owner", "9000000001"),
            ("staff", "9000000002"),
            ("viewer", "9000000003"),
            ("former", "9000000004"),
            ("outsider", "9000000005"),
            ("newcomer", "9000000006"),
        ]
    }
    db.add_all(users.values())
    main = Shop(name="Main Street Kirana", address="12 Main St", is_active=True)
    other = Shop(name="Other Shop", is_active=True)
    db.add_all([main, other])
    db.flush()

    memberships = [
        (main, "owner", ShopUserRole.OWNER, ShopUserStatus.ACTIVE),
        (main, "staff", ShopUserRole.STAFF, ShopUserStatus.ACTIVE),
        (main, "viewer", ShopUserRole.VIEWER, ShopUserStatus.ACTIVE),
        (main, "former", ShopUserRole.STAFF, ShopUserStatus.INACTIVE),
        (other, "outsider", ShopUserRole.OWNER, ShopUserStatus.ACTIVE),
    ]
    for shop, name, role, status in memberships:
        db.add(ShopUser(shop_id=shop.id, user_id=users[name].id, role=role, status=status))
    db.commit()

    ids = {name: user.id for name, user in users.items()}
    return SimpleNamespace(shop_id=main.id, other_shop_id=other.id, **ids)


def add_customer(db, shop_id, name="Ramesh", phone="9800000001", balance="0"):
    customer = Customer(
        shop_id=shop_id,
        name=name,
        phone=phone,
        opening_balance=Decimal(balance),
        current_balance=Decimal(balance),
        is_active=True,
    )
    db.add(customer)
    db.commit()
    db.refresh(customer)
    return customer


@pytest.fixture
def customer(db, seed):
    return add_customer(db, seed.shop_id)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id):
    return {"Authorization": f"Bearer {create_access_token(str(user_id))}"}
