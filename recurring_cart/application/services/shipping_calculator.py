"""
Shipping stage of a totalization pass.

Assembles the cart's shipping package, lets the shipping policy strip
items that must not ship in the active pass, rates what is left and
stores the chosen method per package in the customer session.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError

from ...domain.entities import Cart, ShippingPackage, ShippingRate
from ...domain.exceptions import ValidationException
from ...domain.services import ShippingPolicy, TotalizationContext
from ...domain.value_objects import ZERO, round_amount
from ..interfaces import SessionStore, ShippingService
from ..schemas import ShippingCalculatorForm
from .hooks import HookPoint, TotalsHooks

logger = logging.getLogger(__name__)

# Session keys
CHOSEN_SHIPPING_METHODS = "chosen_shipping_methods"
ONE_TIME_SHIPPING_METHODS = "ost_shipping_methods"
NOTICES = "notices"

ShippingFormInput = Union[ShippingCalculatorForm, Mapping[str, Any]]


class ShippingCalculator:
    """Rates the shipping of one cart under the active calculation mode."""

    def __init__(
        self,
        shipping_service: ShippingService,
        session: SessionStore,
        policy: ShippingPolicy,
        hooks: Optional[TotalsHooks] = None,
        decimals: int = 2,
    ):
        self._shipping = shipping_service
        self._session = session
        self._policy = policy
        self._hooks = hooks or TotalsHooks()
        self._decimals = decimals

    # =========================================================================
    # Customer input
    # =========================================================================

    def maybe_recalculate_shipping(self, cart: Cart, form: Optional[ShippingFormInput] = None) -> None:
        """
        Apply a shipping calculator submission and restore chosen methods.

        An invalid submission is reported as an error notice in the session
        and otherwise ignored; the cart keeps its previous destination.
        """
        parsed = self._parse_form(form) if form is not None else None

        if parsed is not None:
            self._shipping.reset_shipping()
            cart.destination = parsed.to_destination() if parsed.country else None
            logger.debug("Shipping destination for cart %s set to %s", cart.id, cart.destination)

        self.maybe_restore_chosen_shipping_methods()

        if parsed is not None and parsed.shipping_method:
            chosen = self.chosen_shipping_methods()
            for index, method_id in sorted(parsed.shipping_method.items()):
                _set_index(chosen, index, method_id)
            self._session.set(CHOSEN_SHIPPING_METHODS, chosen)

    def _parse_form(self, form: ShippingFormInput) -> Optional[ShippingCalculatorForm]:
        if isinstance(form, ShippingCalculatorForm):
            return form

        try:
            return ShippingCalculatorForm(**dict(form))
        except ValidationError as e:
            rejected = _to_validation_exception(e)
            logger.warning("Rejected shipping calculator input: %s", rejected.errors)
            self.add_notice(rejected.message, "error")
            return None

    def add_notice(self, message: str, notice_type: str = "notice") -> None:
        notices = list(self._session.get(NOTICES, []) or [])
        notices.append({'message': message, 'type': notice_type})
        self._session.set(NOTICES, notices)

    # =========================================================================
    # Chosen methods
    # =========================================================================

    def chosen_shipping_methods(self) -> List[Optional[str]]:
        return list(self._session.get(CHOSEN_SHIPPING_METHODS, []) or [])

    def backup_chosen_shipping_methods(self) -> None:
        """Remember the chosen methods before a pass may discard them."""
        self._session.set(ONE_TIME_SHIPPING_METHODS, self.chosen_shipping_methods())

    def maybe_restore_chosen_shipping_methods(self) -> None:
        """Put backed up chosen methods back if they were cleared meanwhile."""
        backup = self._session.get(ONE_TIME_SHIPPING_METHODS)
        if backup and not self.chosen_shipping_methods():
            self._session.set(CHOSEN_SHIPPING_METHODS, list(backup))
        self._session.delete(ONE_TIME_SHIPPING_METHODS)

    # =========================================================================
    # Calculation
    # =========================================================================

    def reset_shipping(self) -> None:
        """Drop rates the shipping service cached for earlier packages."""
        self._shipping.reset_shipping()

    def calculate(self, cart: Cart, context: TotalizationContext) -> None:
        """
        Calculate shipping totals of ``cart`` for the pass running in ``context``.

        Sets ``shipping_total``, ``shipping_tax_total`` and
        ``shipping_packages``; both totals are zero when the pass does not
        need shipping.
        """
        cart.zero_shipping()
        cart.shipping_packages = []

        if cart.contains_subscription:
            self.backup_chosen_shipping_methods()

        if not self._policy.needs_shipping_now(cart, cart.needs_shipping(), context.mode):
            logger.debug("No shipping needed for cart %s in mode %s", cart.id, context.mode.value)
            return

        packages = self._policy.filter_packages(self.build_packages(cart), context.mode)
        packages = self._hooks.apply_filters(HookPoint.PACKAGES_ASSEMBLED, packages, cart, context)

        chosen = self.chosen_shipping_methods()
        shipping_total = ZERO
        shipping_tax_total = ZERO
        rated: List[ShippingPackage] = []

        for index, package in enumerate(packages):
            if package.contents:
                package = self._shipping.calculate_shipping_for_package(package)
                rate = self._choose_rate(package, index, chosen)
                if rate is not None:
                    shipping_total += rate.cost
                    shipping_tax_total += rate.taxes
            rated.append(package)

        self._session.set(CHOSEN_SHIPPING_METHODS, chosen)

        cart.shipping_packages = rated
        cart.shipping_total = round_amount(shipping_total, self._decimals)
        cart.shipping_tax_total = round_amount(shipping_tax_total, self._decimals)

    def build_packages(self, cart: Cart) -> List[ShippingPackage]:
        """One package holding every cart item that needs shipping."""
        contents = {key: item for key, item in cart.items.items() if item.needs_shipping}
        if not contents:
            return []

        return [
            ShippingPackage(
                contents=contents,
                contents_cost=sum((item.line_total for item in contents.values()), Decimal("0")),
                destination=cart.destination,
            )
        ]

    @staticmethod
    def _choose_rate(
        package: ShippingPackage,
        index: int,
        chosen: List[Optional[str]],
    ) -> Optional[ShippingRate]:
        """Rate chosen for the package at ``index``, defaulting to its first rate."""
        if not package.rates:
            return None

        method_id = chosen[index] if index < len(chosen) else None
        if method_id not in package.rates:
            method_id = next(iter(package.rates))
            _set_index(chosen, index, method_id)

        return package.rates[method_id]


def _set_index(values: List[Optional[str]], index: int, value: str) -> None:
    while len(values) <= index:
        values.append(None)
    values[index] = value


def _to_validation_exception(error: ValidationError) -> ValidationException:
    errors: Dict[str, List[str]] = {}
    for detail in error.errors():
        field = str(detail['loc'][-1]) if detail.get('loc') else 'form'
        message = detail['msg']
        if message.startswith('Value error, '):
            message = message[len('Value error, '):]
        errors.setdefault(field, []).append(message)

    first = next(iter(errors.values()))[0]
    return ValidationException(message=first, errors=errors)
