"""Shared pytest fixtures for the storefront tests."""

import os

# must be set before storefront.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ENVIRONMENT", "test")

import itertools
import smtplib

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from storefront.core.errors import PaymentFailure
from storefront.db.base import Base
import storefront.models.user
import storefront.models.item
import storefront.models.cart
import storefront.models.order
from storefront.models.item import Item
from storefront.models.user import Permission
from storefront.services.auth_service import AuthService
from storefront.services.context import RequestContext
from storefront.services.mail import Mailer
from storefront.services.payment import ChargeResult, PaymentGateway


class FakeGateway(PaymentGateway):
    """Records charges; can be told to decline or to settle a different amount."""

    def __init__(self):
        self.charges = []
        self.refunds = []
        self.fail = False
        self.settled_amount = None
        self._ids = itertools.count(1)

    def charge(self, amount, currency, source):
        if self.fail:
            raise PaymentFailure("Your card was declined")
        self.charges.append({"amount": amount, "currency": currency, "source": source})
        settled = amount if self.settled_amount is None else self.settled_amount
        return ChargeResult(id=f"ch_test_{next(self._ids)}", amount=settled)

    def refund(self, charge_id):
        self.refunds.append(charge_id)


class FakeMailer(Mailer):
    def __init__(self):
        super().__init__(host="localhost", port=25)
        self.sent = []
        self.fail = False

    def send_mail(self, to, subject, html):
        if self.fail:
            raise smtplib.SMTPRecipientsRefused({to: (550, b"mailbox unavailable")})
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'storefront.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def make_ctx(db, gateway, mailer):
    def _make(caller=None):
        return RequestContext(db=db, gateway=gateway, mailer=mailer, caller=caller)
    return _make


@pytest.fixture
def create_user(make_ctx, db):
    def _create(email="user@example.com", password="secret", name="Test User", permissions=None):
        user = AuthService(make_ctx()).signup(email, password, name)
        if permissions is not None:
            user.set_permissions(permissions)
            db.commit()
        return user
    return _create


@pytest.fixture
def user(create_user):
    return create_user()


@pytest.fixture
def admin(create_user):
    return create_user(email="admin@example.com", permissions=[Permission.USER, Permission.ADMIN])


@pytest.fixture
def create_item(db):
    def _create(owner, title="Shoes", price=500, description="Nice shoes"):
        item = Item(
            title=title,
            description=description,
            price=price,
            image="shoes.jpg",
            large_image="shoes-large.jpg",
            user_id=owner.id,
        )
        db.add(item)
        db.commit()
        db.refresh(item)
        return item
    return _create


@pytest.fixture
def item(create_item, admin):
    return create_item(admin)


@pytest.fixture
def client(session_factory, gateway, mailer):
    from storefront.api.deps import get_mailer, get_payment_gateway
    from storefront.db.session import get_db
    from storefront.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_mailer] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()
