"""
Cart domain entities.

A cart holds line items and fees (inputs) plus the aggregate totals a
totalization pass fills in (outputs).
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional
from uuid import UUID

from ..value_objects import BillingPeriod, SyncDate
from .base import AggregateRoot
from .product import Product

if TYPE_CHECKING:
    from .recurring_cart import RecurringCartSnapshot


@dataclass
class LineItem:
    """
    One cart row.

    Optional term fields override the product's catalog terms for this
    cart row only; ``None`` means "use the catalog value".
    """
    key: str
    product: Product
    quantity: int = 1

    # Overrides (None = catalog default)
    sign_up_fee: Optional[Decimal] = None
    trial_length: Optional[int] = None
    trial_period: Optional[BillingPeriod] = None
    billing_interval: Optional[int] = None
    billing_period: Optional[BillingPeriod] = None
    length: Optional[int] = None
    sync_date: Optional[SyncDate] = None
    one_time_shipping: Optional[bool] = None

    # Filled in by a totalization pass
    unit_price: Decimal = Decimal("0")
    line_subtotal: Decimal = Decimal("0")
    line_total: Decimal = Decimal("0")
    line_tax: Decimal = Decimal("0")

    @property
    def is_subscription(self) -> bool:
        return self.product.is_subscription

    @property
    def needs_shipping(self) -> bool:
        return self.product.needs_shipping

    @property
    def taxable(self) -> bool:
        return self.product.taxable

    def copy(self) -> 'LineItem':
        """Copy of this row; the catalog product is shared by reference."""
        return replace(self)


@dataclass
class Fee:
    """
    Cart-level fee. Fees are charged on the initial order only.

    ``amount`` is the configured fee; ``total`` and ``tax`` are what the
    current pass charges for it.
    """
    id: str
    name: str
    amount: Decimal = Decimal("0")
    taxable: bool = False

    # Filled in by a totalization pass
    total: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")

    def copy(self) -> 'Fee':
        return replace(self)


@dataclass(frozen=True)
class ShippingDestination:
    """Customer shipping location."""
    country: str
    state: str = ""
    postcode: str = ""
    city: str = ""


@dataclass(frozen=True)
class ShippingRate:
    """A rated shipping method for a package."""
    id: str
    label: str
    cost: Decimal = Decimal("0")
    taxes: Decimal = Decimal("0")

    @property
    def total(self) -> Decimal:
        return self.cost + self.taxes


@dataclass
class ShippingPackage:
    """A group of line items shipped together, with its rated methods."""
    contents: Dict[str, LineItem] = field(default_factory=dict)
    contents_cost: Decimal = Decimal("0")
    destination: Optional[ShippingDestination] = None
    rates: Dict[str, ShippingRate] = field(default_factory=dict)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.contents.values())

    def copy(self) -> 'ShippingPackage':
        return ShippingPackage(
            contents={key: item.copy() for key, item in self.contents.items()},
            contents_cost=self.contents_cost,
            destination=self.destination,
            rates=dict(self.rates),
        )


@dataclass(kw_only=True)
class Cart(AggregateRoot):
    """
    Shopping cart aggregate.

    Aggregate totals are outputs of one totalization pass and must not be
    read before a pass completes.
    """
    items: Dict[str, LineItem] = field(default_factory=dict)
    fees: List[Fee] = field(default_factory=list)
    destination: Optional[ShippingDestination] = None
    # Cart this one was cloned from, None for a customer cart
    origin_id: Optional[UUID] = None

    # Totals
    subtotal: Decimal = Decimal("0")
    contents_total: Decimal = Decimal("0")
    tax_total: Decimal = Decimal("0")
    shipping_total: Decimal = Decimal("0")
    shipping_tax_total: Decimal = Decimal("0")
    fee_total: Decimal = Decimal("0")
    discount_total: Decimal = Decimal("0")  # legacy after-tax discount
    total: Decimal = Decimal("0")

    shipping_packages: List[ShippingPackage] = field(default_factory=list)
    recurring_carts: Dict[str, 'RecurringCartSnapshot'] = field(default_factory=dict)

    # Transient, session-only state
    removed_contents: Dict[str, LineItem] = field(default_factory=dict)
    session_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def root_id(self) -> UUID:
        """Id of the customer cart this cart derives from."""
        return self.origin_id or self.id

    # =========================================================================
    # Contents
    # =========================================================================

    def add_item(self, item: LineItem) -> LineItem:
        """Add a line item, merging quantity when the key already exists."""
        existing = self.items.get(item.key)
        if existing is not None:
            existing.quantity += item.quantity
            return existing
        self.items[item.key] = item
        self.removed_contents.pop(item.key, None)
        return item

    def remove_item(self, key: str) -> Optional[LineItem]:
        """Remove a line item, remembering it until the session ends."""
        item = self.items.pop(key, None)
        if item is not None:
            self.removed_contents[key] = item
        return item

    def get_item(self, key: str) -> Optional[LineItem]:
        return self.items.get(key)

    def add_fee(self, fee: Fee) -> Fee:
        self.fees.append(fee)
        return fee

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def contents_count(self) -> int:
        return sum(item.quantity for item in self.items.values())

    @property
    def contains_subscription(self) -> bool:
        return any(item.is_subscription for item in self.items.values())

    def subscription_items(self) -> List[LineItem]:
        return [item for item in self.items.values() if item.is_subscription]

    def needs_shipping(self) -> bool:
        """Whether anything in the cart is a physical item."""
        return any(item.needs_shipping for item in self.items.values())

    # =========================================================================
    # Totals
    # =========================================================================

    def reset_totals(self) -> None:
        """Zero every derived aggregate before a new pass."""
        self.subtotal = Decimal("0")
        self.contents_total = Decimal("0")
        self.tax_total = Decimal("0")
        self.shipping_total = Decimal("0")
        self.shipping_tax_total = Decimal("0")
        self.fee_total = Decimal("0")
        self.total = Decimal("0")
        self.shipping_packages = []

    def raw_total(self) -> Decimal:
        """Sum of the aggregate totals, before rounding and flooring."""
        return (
            self.contents_total +
            self.tax_total +
            self.shipping_tax_total +
            self.shipping_total +
            self.fee_total
        )

    def zero_fees(self) -> None:
        """Zero what this pass charges for every fee; configured amounts are kept."""
        for fee in self.fees:
            self.tax_total -= fee.tax
            fee.total = Decimal("0")
            fee.tax = Decimal("0")
        self.fee_total = Decimal("0")

    def zero_shipping(self) -> None:
        self.shipping_total = Decimal("0")
        self.shipping_tax_total = Decimal("0")

    # =========================================================================
    # Copies
    # =========================================================================

    def clone(self, keep: Optional[Iterable[str]] = None) -> 'Cart':
        """
        Independent copy of this cart.

        Copied: line items (filtered to ``keep`` when given), fees, shipping
        packages, destination, every aggregate total and the legacy discount.
        The copy remembers the customer cart it derives from in ``origin_id``.
        Reset: recurring carts, domain events, removed contents, session data.

        Args:
            keep: Item keys to retain; None keeps every item

        Returns:
            A new Cart sharing no mutable state with this one
        """
        keep_keys = set(keep) if keep is not None else None
        items = {
            key: item.copy()
            for key, item in self.items.items()
            if keep_keys is None or key in keep_keys
        }
        return Cart(
            items=items,
            fees=[fee.copy() for fee in self.fees],
            destination=self.destination,
            origin_id=self.root_id,
            subtotal=self.subtotal,
            contents_total=self.contents_total,
            tax_total=self.tax_total,
            shipping_total=self.shipping_total,
            shipping_tax_total=self.shipping_tax_total,
            fee_total=self.fee_total,
            discount_total=self.discount_total,
            total=self.total,
            shipping_packages=[package.copy() for package in self.shipping_packages],
        )

    def strip_transient(self) -> None:
        """Drop session-only state that is not part of a recurring snapshot."""
        self.removed_contents = {}
        self.session_data = {}
        self._pending_events = []

    def totals_dict(self) -> Dict[str, str]:
        """Aggregate totals as strings, for logging and comparisons."""
        return {
            'subtotal': str(self.subtotal),
            'contents_total': str(self.contents_total),
            'tax_total': str(self.tax_total),
            'shipping_total': str(self.shipping_total),
            'shipping_tax_total': str(self.shipping_tax_total),
            'fee_total': str(self.fee_total),
            'discount_total': str(self.discount_total),
            'total': str(self.total),
        }
