"""
Unit tests for the Cart aggregate.
"""
from decimal import Decimal

from factories import FeeFactory, LineItemFactory, SubscriptionProductFactory, make_cart
from recurring_cart.domain.entities import RecurringCartSnapshot


class TestCartContents:
    """Test adding and removing items."""

    def test_add_item_merges_quantity(self):
        item = LineItemFactory(key="shirt")
        cart = make_cart(item)

        cart.add_item(LineItemFactory(key="shirt", product=item.product, quantity=2))

        assert cart.get_item("shirt").quantity == 3
        assert cart.contents_count == 3

    def test_remove_item_is_remembered(self):
        item = LineItemFactory()
        cart = make_cart(item)

        cart.remove_item(item.key)

        assert cart.is_empty
        assert item.key in cart.removed_contents

    def test_contains_subscription(self):
        cart = make_cart(LineItemFactory())
        assert not cart.contains_subscription

        cart.add_item(LineItemFactory(product=SubscriptionProductFactory()))
        assert cart.contains_subscription


class TestCartTotals:
    """Test aggregate total helpers."""

    def test_raw_total(self):
        cart = make_cart()
        cart.contents_total = Decimal("10")
        cart.tax_total = Decimal("2")
        cart.shipping_total = Decimal("5")
        cart.shipping_tax_total = Decimal("1")
        cart.fee_total = Decimal("3")

        assert cart.raw_total() == Decimal("21")

    def test_zero_fees_removes_fee_tax(self):
        fee = FeeFactory(amount=Decimal("5.00"), total=Decimal("5.00"), tax=Decimal("1.00"))
        cart = make_cart(fees=[fee])
        cart.fee_total = Decimal("5.00")
        cart.tax_total = Decimal("3.00")

        cart.zero_fees()

        assert fee.total == Decimal("0")
        assert fee.amount == Decimal("5.00")
        assert fee.tax == Decimal("0")
        assert cart.fee_total == Decimal("0")
        assert cart.tax_total == Decimal("2.00")


class TestCartClone:
    """Test independent copies."""

    def test_clone_keeps_only_requested_items(self):
        first = LineItemFactory()
        second = LineItemFactory()
        cart = make_cart(first, second, fees=[FeeFactory()])

        clone = cart.clone(keep=[second.key])

        assert list(clone.items) == [second.key]
        assert len(clone.fees) == 1
        assert clone.id != cart.id

    def test_clone_of_clone_points_at_customer_cart(self):
        cart = make_cart(LineItemFactory())

        grandchild = cart.clone().clone()

        assert cart.root_id == cart.id
        assert grandchild.origin_id == cart.id
        assert grandchild.root_id == cart.id

    def test_clone_shares_no_mutable_state(self):
        item = LineItemFactory(quantity=1)
        fee = FeeFactory()
        cart = make_cart(item, fees=[fee])

        clone = cart.clone()
        clone.items[item.key].quantity = 5
        clone.fees[0].amount = Decimal("0")

        assert cart.items[item.key].quantity == 1
        assert fee.amount == Decimal("5.00")

    def test_clone_resets_recurring_state(self):
        cart = make_cart(LineItemFactory())
        cart.recurring_carts = {"monthly": RecurringCartSnapshot(key="monthly", start_date=cart.created_at)}
        cart.session_data["coupon"] = "SAVE10"

        clone = cart.clone()

        assert clone.recurring_carts == {}
        assert clone.session_data == {}
        assert clone.pending_events == []
