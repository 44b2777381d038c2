"""
Application ports.
"""
from .services import SessionStore, ShippingService, SubscriptionCatalog, TotalsCalculator

__all__ = [
    'SessionStore',
    'ShippingService',
    'SubscriptionCatalog',
    'TotalsCalculator',
]
