# Domain Value Objects - Immutable objects defined by their attributes

from .billing_period import BillingPeriod, SyncDate, add_periods
from .money import ZERO, round_amount, to_decimal
from .subscription_terms import SubscriptionTerms

__all__ = [
    # Periods
    'BillingPeriod',
    'SyncDate',
    'add_periods',
    # Money
    'ZERO',
    'round_amount',
    'to_decimal',
    # Terms
    'SubscriptionTerms',
]
