# Domain Events
from .cart_events import CartTotalsCalculated, RecurringCartsBuilt

__all__ = [
    'CartTotalsCalculated',
    'RecurringCartsBuilt',
]
