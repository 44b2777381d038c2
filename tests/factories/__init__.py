"""
Test data factories.

Provides factory classes for generating catalog products, line items and carts.
"""
from .cart_factory import CartFactory, FeeFactory, LineItemFactory, make_cart
from .product_factory import ProductFactory, SubscriptionProductFactory, TermsFactory

__all__ = [
    "CartFactory",
    "FeeFactory",
    "LineItemFactory",
    "make_cart",
    "ProductFactory",
    "SubscriptionProductFactory",
    "TermsFactory",
]
