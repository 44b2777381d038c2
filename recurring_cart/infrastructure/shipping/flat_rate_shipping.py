"""
Flat rate shipping service.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence

from ...application.interfaces import ShippingService
from ...domain.entities import ShippingPackage, ShippingRate
from ...domain.value_objects import ZERO, round_amount, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShippingMethod:
    """
    A configured shipping method.

    ``min_amount`` makes the method available only for packages whose
    contents cost reaches it (e.g. free shipping thresholds).
    """
    id: str
    label: str
    cost: Decimal = Decimal("0")
    per_item_cost: Decimal = Decimal("0")
    min_amount: Optional[Decimal] = None
    taxable: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, 'cost', to_decimal(self.cost, 'cost'))
        object.__setattr__(self, 'per_item_cost', to_decimal(self.per_item_cost, 'per_item_cost'))
        if self.min_amount is not None:
            object.__setattr__(self, 'min_amount', to_decimal(self.min_amount, 'min_amount'))

    def is_available(self, package: ShippingPackage) -> bool:
        return self.min_amount is None or package.contents_cost >= self.min_amount


class FlatRateShippingService(ShippingService):
    """Rates packages with a fixed list of flat rate methods."""

    def __init__(
        self,
        methods: Optional[Sequence[ShippingMethod]] = None,
        tax_rate: Decimal = Decimal("0"),
        decimals: int = 2,
    ):
        self._methods = list(methods) if methods is not None else [
            ShippingMethod(id="flat_rate", label="Flat rate", cost=Decimal("10")),
        ]
        self._tax_rate = to_decimal(tax_rate, 'tax_rate')
        self._decimals = decimals
        self.rated_packages: List[ShippingPackage] = []

    def reset_shipping(self) -> None:
        self.rated_packages = []

    def calculate_shipping_for_package(self, package: ShippingPackage) -> ShippingPackage:
        rated = package.copy()
        rated.rates = {}

        for method in self._methods:
            if not method.is_available(rated):
                continue
            cost = round_amount(method.cost + method.per_item_cost * rated.item_count, self._decimals)
            taxes = round_amount(cost * self._tax_rate, self._decimals) if method.taxable else ZERO
            rated.rates[method.id] = ShippingRate(id=method.id, label=method.label, cost=cost, taxes=taxes)

        logger.debug(
            "Rated package of %d item(s) costing %s: %s",
            rated.item_count, rated.contents_cost, list(rated.rates)
        )
        self.rated_packages.append(rated)
        return rated
