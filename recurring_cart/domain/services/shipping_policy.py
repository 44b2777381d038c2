"""
Shipping Policy Domain Service.

Decides when shipping is charged for a cart that contains subscriptions
and which items each shipping package may contain.
"""
from decimal import Decimal
from typing import List

from ..entities.cart import Cart, ShippingPackage
from .calculation_mode import CalculationMode
from .terms_resolver import is_one_time_shipping, sign_up_fee_of, trial_length_of


class ShippingPolicy:
    """
    Shipping rules for initial and recurring orders.

    Subscriptions with a free trial are not shipped until the trial ends,
    and one-time-shipping subscriptions are only shipped with the initial
    order.
    """

    def __init__(self, calc_shipping: bool = True):
        self._calc_shipping = calc_shipping

    # =========================================================================
    # Cart inspection
    # =========================================================================

    @staticmethod
    def all_items_have_free_trial(cart: Cart) -> bool:
        """True when every item is a subscription with a free trial."""
        for item in cart.items.values():
            if not item.is_subscription or trial_length_of(item) == 0:
                return False
        return True

    @staticmethod
    def cart_contains_free_trial(cart: Cart) -> bool:
        return any(trial_length_of(item) > 0 for item in cart.subscription_items())

    @staticmethod
    def sign_up_fee_total(cart: Cart) -> Decimal:
        """Sum of sign-up fees of subscription items (charged once per item)."""
        return sum((sign_up_fee_of(item) for item in cart.subscription_items()), Decimal("0"))

    def cart_contains_subscriptions_needing_shipping(self, cart: Cart) -> bool:
        """True when some subscription item is shipped on every renewal."""
        if not self._calc_shipping:
            return False
        return any(
            item.needs_shipping and not is_one_time_shipping(item)
            for item in cart.subscription_items()
        )

    # =========================================================================
    # Decisions
    # =========================================================================

    def charge_shipping_up_front(self, cart: Cart) -> bool:
        """
        Whether shipping is charged on the initial order.

        Shipping is deferred to the first renewal only when every item in
        the cart is a subscription with a free trial. Any one-time item,
        shipped or virtual, keeps shipping on the initial order.
        """
        if not cart.contains_subscription:
            return True

        return not self.all_items_have_free_trial(cart)

    def needs_shipping_now(
        self,
        cart: Cart,
        needs_shipping_from_contents: bool,
        mode: CalculationMode,
    ) -> bool:
        """
        Whether the pass running under ``mode`` needs shipping at all.

        Args:
            cart: Cart being totalized
            needs_shipping_from_contents: Whether any cart item is physical
            mode: Active calculation mode

        Returns:
            True if shipping must be calculated for this pass
        """
        if not self._calc_shipping:
            return False

        if not cart.contains_subscription:
            return needs_shipping_from_contents

        if mode == CalculationMode.NONE:
            return needs_shipping_from_contents and (
                self.charge_shipping_up_front(cart)
                or self.cart_contains_subscriptions_needing_shipping(cart)
            )

        if mode == CalculationMode.RECURRING_TOTAL:
            return self.cart_contains_subscriptions_needing_shipping(cart)

        return needs_shipping_from_contents

    def filter_packages(
        self,
        packages: List[ShippingPackage],
        mode: CalculationMode,
    ) -> List[ShippingPackage]:
        """
        Remove items that must not be shipped in the pass running under ``mode``.

        - NONE: items in a free trial are not shipped with the initial order
        - RECURRING_TOTAL: one-time-shipping items were already shipped;
          their line total leaves the package cost and empty packages are
          dropped

        The input packages are left untouched.
        """
        filtered: List[ShippingPackage] = []

        for package in packages:
            package = package.copy()

            if mode == CalculationMode.NONE:
                for key in [k for k, item in package.contents.items() if trial_length_of(item) > 0]:
                    del package.contents[key]

            elif mode == CalculationMode.RECURRING_TOTAL:
                for key in [k for k, item in package.contents.items() if is_one_time_shipping(item)]:
                    package.contents_cost -= package.contents[key].line_total
                    del package.contents[key]

                if not package.contents:
                    continue

            filtered.append(package)

        return filtered
