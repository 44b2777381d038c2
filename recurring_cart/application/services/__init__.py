"""
Application services - orchestration of cart totalization.
"""
from .cart_totals_service import CartTotalsService, RecurringTotals
from .hooks import HookPoint, TotalsHooks
from .recurring_cart_builder import RecurringCartBuilder
from .shipping_calculator import (
    CHOSEN_SHIPPING_METHODS,
    NOTICES,
    ONE_TIME_SHIPPING_METHODS,
    ShippingCalculator,
)
from .totals_aggregator import TotalsAggregator
from .totals_pass import TotalsPass

__all__ = [
    'CartTotalsService',
    'RecurringTotals',
    'HookPoint',
    'TotalsHooks',
    'RecurringCartBuilder',
    'CHOSEN_SHIPPING_METHODS',
    'NOTICES',
    'ONE_TIME_SHIPPING_METHODS',
    'ShippingCalculator',
    'TotalsAggregator',
    'TotalsPass',
]
