import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ordercore.data.models  # noqa: F401
from ordercore.data.database import Base
from ordercore.services.cart_service import CartService
from ordercore.services.checkout_service import CheckoutValidator
from ordercore.services.lifecycle import OrderLifecycle
from ordercore.services.notification_service import NotificationService
from ordercore.services.order_service import OrderService
from tests.fakes import DRILL, LAMP, SAW, USER, FakeCatalog, RecordingSink


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def catalog():
    catalog = FakeCatalog()
    catalog.add(DRILL, "Cordless Drill", "100.00")
    catalog.add(SAW, "Hand Saw", "50.00")
    catalog.add(LAMP, "Desk Lamp", "30.00", is_active=False)
    return catalog


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def notifications(sink):
    return NotificationService(sink)


@pytest.fixture
def cart_service(db, catalog):
    return CartService(db, catalog)


@pytest.fixture
def validator(db, catalog):
    return CheckoutValidator(db, catalog)


@pytest.fixture
def order_service(db, catalog, notifications):
    return OrderService(db, catalog, notifications)


@pytest.fixture
def lifecycle(db, notifications):
    return OrderLifecycle(db, notifications)


@pytest.fixture
def filled_cart(cart_service):
    """Drill 100 x2 + Saw 50 x1 -> 250 / 3."""
    cart_service.add_item(USER, DRILL, 2)
    return cart_service.add_item(USER, SAW, 1)


@pytest.fixture
def placed_order(filled_cart, order_service, sink):
    order = order_service.create_from_cart(USER, "Call before delivery", {"phone": "+996555123456"})
    sink.events.clear()
    return order
