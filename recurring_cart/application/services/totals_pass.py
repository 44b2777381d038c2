"""
One totalization pass over a cart.
"""
import logging
from decimal import Decimal

from ...domain.entities import Cart
from ...domain.services import PriceResolver, TotalizationContext
from ...domain.value_objects import ZERO, round_amount
from ..interfaces import TotalsCalculator
from .hooks import HookPoint, TotalsHooks
from .shipping_calculator import ShippingCalculator

logger = logging.getLogger(__name__)


class TotalsPass:
    """
    Runs the totals arithmetic once under the context's calculation mode.

    Line prices come from the price resolver for the active mode, shipping
    from the shipping calculator. The pass total is floored at zero and
    rounded half up.
    """

    def __init__(
        self,
        calculator: TotalsCalculator,
        shipping_calculator: ShippingCalculator,
        price_resolver: PriceResolver,
        hooks: TotalsHooks,
        decimals: int = 2,
    ):
        self._calculator = calculator
        self._shipping = shipping_calculator
        self._prices = price_resolver
        self._hooks = hooks
        self._decimals = decimals

    @property
    def shipping(self) -> ShippingCalculator:
        return self._shipping

    def run(self, cart: Cart, context: TotalizationContext) -> Decimal:
        cart.reset_totals()
        self._calculator.calculate_totals(cart, self._prices.price_source(context.mode))
        self._shipping.calculate(cart, context)

        total = max(ZERO, round_amount(cart.raw_total(), self._decimals))
        cart.total = self._hooks.apply_filters(HookPoint.CALCULATED_TOTAL, total, cart, context)

        logger.debug(
            "Pass %s for cart %s: %s",
            context.mode.value, cart.id, cart.totals_dict()
        )
        return cart.total
