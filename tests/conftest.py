"""Pytest configuration and fixtures"""
import os
import pytest
from decimal import Decimal

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("CURRENCY", "BRL")

from bakery.cart import CartStore, MemorySnapshotStorage
from bakery.services.models import PriceRule, Product
from bakery.services.notifications import RecordingNotificationSink


@pytest.fixture
def tiered_rules():
    """Flat bracket for 1-5, then 3.00 per extra unit"""
    return [
        PriceRule(min_qty=1, max_qty=5, flat_price=20),
        PriceRule(min_qty=6, extra_per_unit=3),
    ]


@pytest.fixture
def tiered_product(tiered_rules):
    """Product priced by the tiered rules"""
    return Product(
        id="prod-brigadeiro",
        name="Brigadeiro box",
        price=Decimal("10"),
        has_chocolate_option=True,
        quantity_rules=tiered_rules,
    )


@pytest.fixture
def kit_product():
    """Product that cannot be bought below 2 units"""
    return Product(
        id="prod-cesta",
        name="Easter basket",
        price=Decimal("30"),
        quantity_rules=[
            PriceRule(min_qty=2, max_qty=4, flat_price=28),
            PriceRule(min_qty=5, flat_price=25),
        ],
    )


@pytest.fixture
def plain_product():
    """Product without price rules"""
    return Product(id="prod-bolo", name="Carrot cake", price=Decimal("45.90"))


@pytest.fixture
def notifier():
    return RecordingNotificationSink()


@pytest.fixture
def storage():
    return MemorySnapshotStorage()


@pytest.fixture
def store(storage, notifier):
    """Cart store backed by an in-memory snapshot"""
    return CartStore(storage, notifier)


@pytest.fixture
def capped_product():
    """Only sold in a single 1-5 bracket"""
    return Product(
        id="prod-trufa",
        name="Truffle tray",
        price=Decimal("12"),
        quantity_rules=[PriceRule(min_qty=1, max_qty=5, flat_price=20)],
    )
