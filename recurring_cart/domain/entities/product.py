"""
Catalog product entity.

Products are owned by the catalog; carts only hold references to them.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

from ..value_objects import SubscriptionTerms
from .base import Entity


@dataclass(kw_only=True)
class Product(Entity):
    """
    Purchasable product with optional subscription terms.

    A product is a subscription when it carries ``terms``. ``price`` is the
    one-time price for simple products and the recurring price per billing
    period for subscriptions.
    """
    name: str
    price: Decimal = Decimal("0")
    terms: Optional[SubscriptionTerms] = None

    # Fulfilment
    virtual: bool = False
    taxable: bool = True

    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))

    @property
    def is_subscription(self) -> bool:
        return self.terms is not None

    @property
    def needs_shipping(self) -> bool:
        return not self.virtual
