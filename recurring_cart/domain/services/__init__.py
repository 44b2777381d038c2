# Domain Services - Business logic that doesn't belong to a single entity

from .calculation_mode import AggregationStage, CalculationMode, TotalizationContext
from .price_resolver import PriceResolver, PriceSource
from .schedule_grouper import ScheduleGrouper
from .shipping_policy import ShippingPolicy
from .terms_resolver import effective_terms
from .subscription_dates import (
    expiration_date,
    first_renewal_payment_date,
    trial_expiration_date,
)

__all__ = [
    'AggregationStage',
    'CalculationMode',
    'TotalizationContext',
    'PriceResolver',
    'PriceSource',
    'ScheduleGrouper',
    'ShippingPolicy',
    'effective_terms',
    'expiration_date',
    'first_renewal_payment_date',
    'trial_expiration_date',
]
