"""
Pytest fixtures for the ISP stock backend tests.

Provides an in-memory database, a test client, one user per role with a
ready bearer token, and factories for stock, staff and customers.
Notifications run synchronously into a recording sender.
"""

import pytest

from ispstock import create_app
from ispstock.extensions import db
from ispstock.models import Customer, Staff, StockItem, User
from ispstock.services.auth_service import hash_password
from ispstock.services import session_service
from ispstock.time_utils import today


class RecordingSender:
    """Collects (recipient, subject, html) instead of sending mail."""

    def __init__(self):
        self.sent = []

    def send(self, recipient, subject, html):
        self.sent.append((recipient, subject, html))


@pytest.fixture(scope='session')
def sender():
    return RecordingSender()


@pytest.fixture(scope='session')
def app(sender):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'NOTIFICATIONS_ASYNC': False,
        'NOTIFICATION_SENDER': sender,
        'BCRYPT_ROUNDS': 4,
        'FRONTEND_URL': 'http://frontend.test',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app, sender):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        sender.sent.clear()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def strict_stock(app):
    app.config['STRICT_STOCK_ON_APPROVE'] = True
    yield
    app.config['STRICT_STOCK_ON_APPROVE'] = False


# =============================================================================
# USERS & TOKENS
# =============================================================================

def make_user(db_session, role: str, email: str | None = None, is_active: bool = True) -> User:
    user = User(
        name=f"{role.title()} User",
        email=email or f"{role}@isp.test",
        password_hash=hash_password("secret123", rounds=4),
        role=role,
        is_active=is_active,
    )
    db_session.add(user)
    db_session.commit()
    return user


def token_for(user: User) -> str:
    _, token = session_service.create_session(user.id, user_agent="pytest", ip_address="127.0.0.1")
    return token


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_user(db_session):
    return make_user(db_session, "admin")


@pytest.fixture(scope='function')
def supervisor_user(db_session):
    return make_user(db_session, "supervisor")


@pytest.fixture(scope='function')
def technician_user(db_session):
    return make_user(db_session, "technician")


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return auth_headers(token_for(admin_user))


@pytest.fixture(scope='function')
def supervisor_headers(supervisor_user):
    return auth_headers(token_for(supervisor_user))


@pytest.fixture(scope='function')
def technician_headers(technician_user):
    return auth_headers(token_for(technician_user))


# =============================================================================
# DOMAIN FACTORIES
# =============================================================================

def make_stock(db_session, name="Router AX1800", quantity=10, min_stock=2, category="router", price=500000) -> StockItem:
    item = StockItem(
        name=name,
        category=category,
        brand="TP-Link",
        model="AX1800",
        quantity=quantity,
        min_stock=min_stock,
        unit="pcs",
        location="Warehouse A",
        price=price,
    )
    db_session.add(item)
    db_session.commit()
    return item


def make_staff(db_session, name="Budi Santoso", email="budi@isp.test", team="Team Alpha", is_active=True, **extra) -> Staff:
    staff = Staff(
        name=name,
        email=email,
        phone="+6281234567890",
        role=extra.pop("role", "technician"),
        team=team,
        area="Jakarta Selatan",
        skills=["fiber"],
        join_date=today(),
        is_active=is_active,
        **extra,
    )
    db_session.add(staff)
    db_session.commit()
    return staff


def make_customer(db_session, name="Andi Wijaya", email="andi@example.com", **extra) -> Customer:
    customer = Customer(
        name=name,
        email=email,
        phone="+6281298765432",
        address="Jl. Melati No. 5, Depok",
        service_type=extra.pop("service_type", "residential"),
        package_type=extra.pop("package_type", "Home 30Mbps"),
        installation_date=extra.pop("installation_date", today()),
        **extra,
    )
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture(scope='function')
def stock_item(db_session):
    return make_stock(db_session)


@pytest.fixture(scope='function')
def staff_member(db_session):
    return make_staff(db_session)


@pytest.fixture(scope='function')
def customer(db_session):
    return make_customer(db_session)
