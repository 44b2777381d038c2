"""
In-memory subscription catalog.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Optional
from uuid import UUID

from ...application.interfaces import SubscriptionCatalog
from ...domain.entities import Product
from ...domain.exceptions import EntityNotFoundException
from ...domain.services import expiration_date, first_renewal_payment_date, trial_expiration_date
from ...domain.value_objects import BillingPeriod, SyncDate

logger = logging.getLogger(__name__)


class InMemorySubscriptionCatalog(SubscriptionCatalog):
    """Catalog backed by a dict of products, keyed by product ID."""

    def __init__(self, products: Iterable[Product] = ()):
        self._products: Dict[UUID, Product] = {}
        for product in products:
            self.add(product)

    def add(self, product: Product) -> Product:
        self._products[product.id] = product
        return product

    def remove(self, product_id: UUID) -> None:
        self._products.pop(product_id, None)

    def get_product(self, product_id: UUID) -> Product:
        product = self._products.get(product_id)
        if product is None:
            logger.warning("Product %s not found in catalog", product_id)
            raise EntityNotFoundException("Product", product_id)
        return product

    def is_subscription(self, product: Product) -> bool:
        return product.is_subscription

    def get_price(self, product: Product) -> Decimal:
        return product.price

    def get_sign_up_fee(self, product: Product) -> Decimal:
        return product.terms.sign_up_fee if product.terms else Decimal("0")

    def get_trial_length(self, product: Product) -> int:
        return product.terms.trial_length if product.terms else 0

    def get_trial_period(self, product: Product) -> Optional[BillingPeriod]:
        if product.terms is None:
            return None
        return product.terms.trial_period or product.terms.period

    def get_period(self, product: Product) -> Optional[BillingPeriod]:
        return product.terms.period if product.terms else None

    def get_interval(self, product: Product) -> int:
        return product.terms.interval if product.terms else 1

    def get_length(self, product: Product) -> int:
        return product.terms.length if product.terms else 0

    def get_sync_date(self, product: Product) -> Optional[SyncDate]:
        return product.terms.sync_date if product.terms else None

    def get_one_time_shipping(self, product: Product) -> bool:
        return bool(product.terms and product.terms.one_time_shipping)

    def get_trial_expiration_date(self, product: Product, from_date: datetime) -> Optional[datetime]:
        terms = product.terms
        return trial_expiration_date(terms, from_date) if terms else None

    def get_first_renewal_payment_date(self, product: Product, from_date: datetime) -> Optional[datetime]:
        terms = product.terms
        return first_renewal_payment_date(terms, from_date) if terms else None

    def get_expiration_date(self, product: Product, from_date: datetime) -> Optional[datetime]:
        terms = product.terms
        return expiration_date(terms, from_date) if terms else None
