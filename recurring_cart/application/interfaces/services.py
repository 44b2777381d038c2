"""
External service interfaces (ports).

These interfaces define contracts for the collaborators that cart
totalization depends on.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from ...domain.entities import Cart, Product, ShippingPackage
from ...domain.services import PriceSource
from ...domain.value_objects import BillingPeriod, SyncDate


class SubscriptionCatalog(ABC):
    """Interface for product and subscription metadata lookups."""

    @abstractmethod
    def get_product(self, product_id: UUID) -> Product:
        """
        Get a product by ID.

        Raises:
            EntityNotFoundException: If the catalog does not know the product
        """
        pass

    @abstractmethod
    def is_subscription(self, product: Product) -> bool:
        pass

    @abstractmethod
    def get_price(self, product: Product) -> Decimal:
        pass

    @abstractmethod
    def get_sign_up_fee(self, product: Product) -> Decimal:
        pass

    @abstractmethod
    def get_trial_length(self, product: Product) -> int:
        pass

    @abstractmethod
    def get_trial_period(self, product: Product) -> Optional[BillingPeriod]:
        pass

    @abstractmethod
    def get_period(self, product: Product) -> Optional[BillingPeriod]:
        pass

    @abstractmethod
    def get_interval(self, product: Product) -> int:
        pass

    @abstractmethod
    def get_length(self, product: Product) -> int:
        pass

    @abstractmethod
    def get_sync_date(self, product: Product) -> Optional[SyncDate]:
        pass

    @abstractmethod
    def get_one_time_shipping(self, product: Product) -> bool:
        pass

    @abstractmethod
    def get_trial_expiration_date(self, product: Product, from_date: datetime) -> Optional[datetime]:
        """End of the product's free trial when bought at ``from_date``."""
        pass

    @abstractmethod
    def get_first_renewal_payment_date(self, product: Product, from_date: datetime) -> Optional[datetime]:
        """First renewal payment when bought at ``from_date``; None if there is none."""
        pass

    @abstractmethod
    def get_expiration_date(self, product: Product, from_date: datetime) -> Optional[datetime]:
        """Subscription end when bought at ``from_date``; None if it never ends."""
        pass


class TotalsCalculator(ABC):
    """Interface for the line item, tax and fee arithmetic engine."""

    @abstractmethod
    def calculate_totals(self, cart: Cart, price_source: PriceSource) -> Cart:
        """
        Fill in line and aggregate totals of a cart.

        Args:
            cart: Cart to calculate (mutated and returned)
            price_source: Unit price of each line item for this pass

        Returns:
            The same cart with contents, tax and fee totals filled in
        """
        pass


class ShippingService(ABC):
    """Interface for shipping rate calculation."""

    @abstractmethod
    def reset_shipping(self) -> None:
        """Forget any packages rated so far."""
        pass

    @abstractmethod
    def calculate_shipping_for_package(self, package: ShippingPackage) -> ShippingPackage:
        """Return the package with its available rates filled in."""
        pass


class SessionStore(ABC):
    """Interface for per-customer session state."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a session value."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Set a session value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a session value."""
        pass
