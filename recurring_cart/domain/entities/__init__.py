# Domain Entities
from .base import (
    Entity,
    AggregateRoot,
    DomainEvent,
    utc_now,
)
from .product import Product
from .cart import (
    LineItem,
    Fee,
    ShippingDestination,
    ShippingRate,
    ShippingPackage,
    Cart,
)
from .recurring_cart import RecurringCartSnapshot

__all__ = [
    # Base
    'Entity',
    'AggregateRoot',
    'DomainEvent',
    'utc_now',
    # Catalog
    'Product',
    # Cart
    'LineItem',
    'Fee',
    'ShippingDestination',
    'ShippingRate',
    'ShippingPackage',
    'Cart',
    'RecurringCartSnapshot',
]
