"""
Infrastructure adapters for the application ports.
"""
from .calculation import SimpleTotalsCalculator
from .catalog import InMemorySubscriptionCatalog
from .session import MemorySessionStore, RedisSessionStore
from .shipping import FlatRateShippingService, ShippingMethod

__all__ = [
    'SimpleTotalsCalculator',
    'InMemorySubscriptionCatalog',
    'MemorySessionStore',
    'RedisSessionStore',
    'FlatRateShippingService',
    'ShippingMethod',
]
