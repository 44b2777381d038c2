"""
Default wiring of the cart totals service from settings.
"""
from decimal import Decimal
from typing import Optional

from .application.interfaces import SessionStore, SubscriptionCatalog
from .application.services import CartTotalsService, TotalsHooks
from .config import AppSettings, get_settings
from .infrastructure import (
    FlatRateShippingService,
    MemorySessionStore,
    RedisSessionStore,
    ShippingMethod,
    SimpleTotalsCalculator,
)


def get_session_store(session_id: str, settings: Optional[AppSettings] = None) -> SessionStore:
    """Session store for one customer session, per the configured backend."""
    settings = settings or get_settings()
    if settings.session_backend == 'redis':
        return RedisSessionStore.from_url(
            settings.redis.url,
            session_id,
            prefix=settings.redis.session_prefix,
            expire=settings.redis.session_ttl,
        )
    return MemorySessionStore()


def get_shipping_service(settings: Optional[AppSettings] = None) -> FlatRateShippingService:
    """Flat rate shipping, plus free shipping when a threshold is configured."""
    settings = settings or get_settings()
    totals = settings.totals

    methods = [
        ShippingMethod(
            id="flat_rate",
            label="Flat rate",
            cost=Decimal(str(totals.shipping_flat_rate)),
            per_item_cost=Decimal(str(totals.shipping_per_item)),
        ),
    ]
    if totals.free_shipping_min_amount is not None:
        methods.append(ShippingMethod(
            id="free_shipping",
            label="Free shipping",
            min_amount=Decimal(str(totals.free_shipping_min_amount)),
        ))

    return FlatRateShippingService(
        methods,
        tax_rate=Decimal(str(totals.tax_rate)),
        decimals=totals.price_decimals,
    )


def get_cart_totals_service(
    catalog: SubscriptionCatalog,
    session_id: str,
    settings: Optional[AppSettings] = None,
    hooks: Optional[TotalsHooks] = None,
) -> CartTotalsService:
    """Cart totals service using the reference adapters."""
    settings = settings or get_settings()
    totals = settings.totals

    calculator = SimpleTotalsCalculator(
        tax_rate=Decimal(str(totals.tax_rate)),
        prices_include_tax=totals.prices_include_tax,
        decimals=totals.price_decimals,
    )
    return CartTotalsService.create(
        catalog=catalog,
        calculator=calculator,
        shipping_service=get_shipping_service(settings),
        session=get_session_store(session_id, settings),
        settings=totals,
        hooks=hooks,
    )
