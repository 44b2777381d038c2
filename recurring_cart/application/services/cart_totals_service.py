"""
Cart Totals Application Service.

Entry point for totalizing carts that contain subscriptions, and for the
questions asked about a cart once it has been totalized: does the
customer need to enter payment details, and what is charged on renewal.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional, TYPE_CHECKING
from uuid import UUID

from ...domain.entities import Cart, Fee, ShippingRate, utc_now
from ...domain.events import CartTotalsCalculated, RecurringCartsBuilt
from ...domain.services import (
    PriceResolver,
    ScheduleGrouper,
    ShippingPolicy,
    TotalizationContext,
    effective_terms,
)
from ...domain.value_objects import ZERO
from ..interfaces import SessionStore, ShippingService, SubscriptionCatalog, TotalsCalculator
from .hooks import TotalsHooks
from .recurring_cart_builder import RecurringCartBuilder
from .shipping_calculator import CHOSEN_SHIPPING_METHODS, ShippingCalculator, ShippingFormInput
from .totals_aggregator import TotalsAggregator
from .totals_pass import TotalsPass

if TYPE_CHECKING:
    from ...config import TotalsSettings

logger = logging.getLogger(__name__)


@dataclass
class RecurringTotals:
    """Sums over every recurring cart of a totalized cart."""
    total: Decimal = Decimal("0")
    contents_total: Decimal = Decimal("0")
    tax_total: Decimal = Decimal("0")
    shipping_total: Decimal = Decimal("0")
    shipping_tax_total: Decimal = Decimal("0")
    discount_total: Decimal = Decimal("0")
    fee_total: Decimal = Decimal("0")
    fees: List[Fee] = field(default_factory=list)

    @property
    def total_ex_tax(self) -> Decimal:
        return self.total - self.tax_total - self.shipping_tax_total


class CartTotalsService:
    """
    Application service for cart totalization.

    Keeps one totalization context per customer cart, so a totalization
    triggered from inside another one of the same cart, or of one of its
    recurring carts, is detected and skipped.
    """

    def __init__(
        self,
        aggregator: TotalsAggregator,
        policy: ShippingPolicy,
        session: SessionStore,
        hooks: TotalsHooks,
        automatic_payments_enabled: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._aggregator = aggregator
        self._policy = policy
        self._session = session
        self._hooks = hooks
        self._automatic_payments_enabled = automatic_payments_enabled
        self._clock = clock
        self._contexts: Dict[UUID, TotalizationContext] = {}

    @classmethod
    def create(
        cls,
        catalog: SubscriptionCatalog,
        calculator: TotalsCalculator,
        shipping_service: ShippingService,
        session: SessionStore,
        settings: Optional['TotalsSettings'] = None,
        hooks: Optional[TotalsHooks] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> 'CartTotalsService':
        """Wire a service and its collaborators from settings."""
        if settings is None:
            from ...config import get_settings
            settings = get_settings().totals

        hooks = hooks or TotalsHooks()
        policy = ShippingPolicy(calc_shipping=settings.calc_shipping)
        shipping = ShippingCalculator(
            shipping_service, session, policy, hooks, decimals=settings.price_decimals
        )
        totals_pass = TotalsPass(
            calculator, shipping, PriceResolver(), hooks, decimals=settings.price_decimals
        )
        aggregator = TotalsAggregator(
            totals_pass=totals_pass,
            grouper=ScheduleGrouper(),
            builder=RecurringCartBuilder(catalog, totals_pass),
            policy=policy,
            hooks=hooks,
            decimals=settings.price_decimals,
            clock=clock,
        )
        return cls(
            aggregator,
            policy,
            session,
            hooks,
            automatic_payments_enabled=settings.automatic_payments_enabled,
            clock=clock,
        )

    @property
    def hooks(self) -> TotalsHooks:
        return self._hooks

    def context_for(self, cart: Cart) -> TotalizationContext:
        """
        Totalization context of ``cart``, created on first use.

        Recurring carts share the context of the customer cart they were
        cloned from, so a totalization triggered from a recurring pass is
        seen as nested.
        """
        return self._contexts.setdefault(cart.root_id, TotalizationContext())

    # =========================================================================
    # Totalization
    # =========================================================================

    def calculate_totals(self, cart: Cart, form: Optional[ShippingFormInput] = None) -> Decimal:
        """
        Totalize a cart.

        Args:
            cart: Cart to totalize
            form: Optional shipping calculator submission

        Returns:
            Initial payment total
        """
        context = self.context_for(cart)
        if context.in_progress:
            return self._aggregator.calculate_totals(cart, context, form)

        total = self._aggregator.calculate_totals(cart, context, form)

        cart.record_event(CartTotalsCalculated(
            cart_id=cart.id,
            total=total,
            contains_subscription=cart.contains_subscription,
        ))
        if cart.recurring_carts:
            cart.record_event(RecurringCartsBuilt(
                cart_id=cart.id,
                schedule_keys=list(cart.recurring_carts.keys()),
                recurring_total=self.recurring_totals(cart).total,
            ))
        cart.bump_version()

        return total

    # =========================================================================
    # Queries
    # =========================================================================

    def cart_needs_payment(self, cart: Cart, needs_payment: bool) -> bool:
        """
        Whether payment details are required for a totalized cart.

        A zero initial total still needs payment details when automatic
        payments are enabled and a renewal will charge something, unless
        the cart buys a single billing period that starts today.
        """
        if needs_payment or not cart.contains_subscription or cart.total != 0:
            return needs_payment

        if not self._automatic_payments_enabled:
            return needs_payment

        recurring_total = ZERO
        is_one_period = True
        synced_first_payment: Optional[datetime] = None

        for snapshot in cart.recurring_carts.values():
            recurring_total += snapshot.total

            for item in snapshot.cart.items.values():
                terms = effective_terms(item)
                if terms is None:
                    continue
                if terms.length == 0 or terms.interval != terms.length:
                    is_one_period = False
                if terms.is_synchronized and synced_first_payment is None:
                    synced_first_payment = snapshot.next_payment_date

        has_trial = self._policy.cart_contains_free_trial(cart)
        is_synced_later = (
            synced_first_payment is not None
            and synced_first_payment.date() != self._clock().date()
        )

        if recurring_total > 0 and (not is_one_period or has_trial or is_synced_later):
            return True

        return needs_payment

    def recurring_totals(self, cart: Cart) -> RecurringTotals:
        """Sum the totals of every recurring cart of ``cart``."""
        totals = RecurringTotals()
        for snapshot in cart.recurring_carts.values():
            recurring = snapshot.cart
            totals.total += recurring.total
            totals.contents_total += recurring.contents_total
            totals.tax_total += recurring.tax_total
            totals.shipping_total += recurring.shipping_total
            totals.shipping_tax_total += recurring.shipping_tax_total
            totals.discount_total += recurring.discount_total
            totals.fee_total += recurring.fee_total
            totals.fees.extend(recurring.fees)
        return totals

    def recurring_shipping_methods(self, cart: Cart) -> Dict[str, ShippingRate]:
        """
        Chosen shipping rate of each recurring cart that ships on renewal.

        Returns:
            Mapping of schedule key to the rate charged on each renewal
        """
        methods: Dict[str, ShippingRate] = {}
        if not self._policy.cart_contains_subscriptions_needing_shipping(cart):
            return methods

        chosen = [method for method in self._session.get(CHOSEN_SHIPPING_METHODS, []) or [] if method]

        for schedule_key, snapshot in cart.recurring_carts.items():
            if not snapshot.has_further_payments:
                continue
            for package in snapshot.cart.shipping_packages:
                for method_id in chosen:
                    if method_id in package.rates:
                        methods[schedule_key] = package.rates[method_id]
                        break

        return methods
