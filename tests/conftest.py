"""
Shared pytest fixtures.

Provides fixtures for:
- A fixed clock
- Reference adapters (catalog, calculator, shipping, session)
- A wired CartTotalsService
- Redis mock (fakeredis)
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from factories import LineItemFactory
from recurring_cart.application.services import CartTotalsService, TotalsHooks
from recurring_cart.config import TotalsSettings
from recurring_cart.infrastructure import (
    FlatRateShippingService,
    InMemorySubscriptionCatalog,
    MemorySessionStore,
    ShippingMethod,
    SimpleTotalsCalculator,
)

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# Clock Fixtures
# ============================================================================

@pytest.fixture
def now() -> datetime:
    """Fixed 'now' every service in a test sees."""
    return NOW


@pytest.fixture
def freeze_time():
    """
    Fixture for freezing time in tests.

    Usage:
        def test_something(freeze_time):
            with freeze_time("2026-01-15 12:00:00"):
                # time is frozen
    """
    from freezegun import freeze_time as _freeze_time
    return _freeze_time


# ============================================================================
# Adapter Fixtures
# ============================================================================

@pytest.fixture
def settings() -> TotalsSettings:
    return TotalsSettings(
        price_decimals=2,
        calc_shipping=True,
        automatic_payments_enabled=True,
    )


@pytest.fixture
def catalog() -> InMemorySubscriptionCatalog:
    return InMemorySubscriptionCatalog()


@pytest.fixture
def calculator() -> SimpleTotalsCalculator:
    return SimpleTotalsCalculator(tax_rate=Decimal("0"))


@pytest.fixture
def shipping_service() -> FlatRateShippingService:
    return FlatRateShippingService([
        ShippingMethod(id="flat_rate", label="Flat rate", cost=Decimal("10.00")),
        ShippingMethod(id="express", label="Express", cost=Decimal("20.00")),
    ])


@pytest.fixture
def session() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def hooks() -> TotalsHooks:
    return TotalsHooks()


@pytest.fixture
def service(catalog, calculator, shipping_service, session, settings, hooks, now) -> CartTotalsService:
    """CartTotalsService wired with the reference adapters and a fixed clock."""
    return CartTotalsService.create(
        catalog=catalog,
        calculator=calculator,
        shipping_service=shipping_service,
        session=session,
        settings=settings,
        hooks=hooks,
        clock=lambda: now,
    )


@pytest.fixture
def item_for(catalog):
    """
    Build a line item whose product is registered in the catalog.

    Usage:
        item = item_for(SubscriptionProductFactory(), quantity=2)
    """
    def _item_for(product, **kwargs):
        catalog.add(product)
        return LineItemFactory(product=product, **kwargs)

    return _item_for


# ============================================================================
# Redis Fixtures
# ============================================================================

@pytest.fixture
def mock_redis():
    """
    Mock Redis client for unit tests.

    Uses fakeredis for realistic Redis behavior.
    """
    import fakeredis

    redis = fakeredis.FakeRedis(decode_responses=True)
    yield redis
    redis.flushall()
    redis.close()
