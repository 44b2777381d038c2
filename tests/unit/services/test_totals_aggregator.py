"""
Unit tests for cart totalization.

Runs whole totalizations through CartTotalsService with the reference
adapters: flat rate shipping of 10.00 per package and no tax.
"""
from decimal import Decimal

import pytest

from factories import FeeFactory, LineItemFactory, ProductFactory, SubscriptionProductFactory, make_cart
from recurring_cart.application.services import CartTotalsService, HookPoint
from recurring_cart.domain.exceptions import InvalidCartStateException
from recurring_cart.domain.services import AggregationStage, CalculationMode
from recurring_cart.domain.value_objects import BillingPeriod, round_amount
from recurring_cart.infrastructure import SimpleTotalsCalculator


class TestCartsWithoutSubscriptions:
    """Test carts holding only one-time purchases."""

    def test_total_includes_shipping(self, service, item_for):
        cart = make_cart(item_for(ProductFactory(price=Decimal("10.00")), quantity=2))

        total = service.calculate_totals(cart)

        assert total == Decimal("30.00")
        assert cart.contents_total == Decimal("20.00")
        assert cart.shipping_total == Decimal("10.00")
        assert cart.recurring_carts == {}

    def test_previous_recurring_carts_are_cleared(self, service, item_for):
        sub = item_for(SubscriptionProductFactory())
        cart = make_cart(sub)
        service.calculate_totals(cart)
        assert cart.recurring_carts

        cart.remove_item(sub.key)
        cart.add_item(item_for(ProductFactory(virtual=True)))
        service.calculate_totals(cart)

        assert cart.recurring_carts == {}


class TestInitialPayment:
    """Test the initial payment of subscription carts."""

    def test_price_and_sign_up_fee(self, service, item_for):
        product = SubscriptionProductFactory(price=Decimal("25.00"), terms__sign_up_fee=Decimal("5.00"))
        cart = make_cart(item_for(product))

        assert service.calculate_totals(cart) == Decimal("30.00")

    def test_sign_up_fee_during_trial(self, service, item_for, now):
        product = SubscriptionProductFactory(
            price=Decimal("25.00"),
            terms__sign_up_fee=Decimal("10.00"),
            terms__trial_length=14,
            terms__trial_period=BillingPeriod.DAY,
        )
        cart = make_cart(item_for(product))

        total = service.calculate_totals(cart)

        assert total == Decimal("10.00")
        snapshot = cart.recurring_carts["monthly_after_a_14_day_trial"]
        assert snapshot.total == Decimal("25.00")
        assert snapshot.start_date == now
        assert snapshot.trial_end_date == now.replace(day=29)
        assert snapshot.next_payment_date == now.replace(day=29)
        assert snapshot.end_date is None

    def test_free_trial_zeroes_fees(self, service, item_for):
        product = SubscriptionProductFactory(terms__trial_length=7, terms__trial_period=BillingPeriod.DAY)
        fee = FeeFactory(amount=Decimal("5.00"))
        cart = make_cart(item_for(product), fees=[fee])

        total = service.calculate_totals(cart)

        assert total == Decimal("0")
        assert cart.fee_total == Decimal("0")
        assert fee.total == Decimal("0")
        assert fee.amount == Decimal("5.00")

    def test_fee_is_charged_again_once_trial_no_longer_covers_cart(self, service, item_for):
        product = SubscriptionProductFactory(terms__trial_length=7, terms__trial_period=BillingPeriod.DAY)
        fee = FeeFactory(amount=Decimal("5.00"))
        cart = make_cart(item_for(product), fees=[fee])
        assert service.calculate_totals(cart) == Decimal("0")

        cart.add_item(item_for(ProductFactory(price=Decimal("10.00"), virtual=True)))
        total = service.calculate_totals(cart)

        assert total == Decimal("15.00")
        assert cart.fee_total == Decimal("5.00")
        assert fee.total == Decimal("5.00")

    def test_fees_kept_with_sign_up_fee(self, service, item_for):
        product = SubscriptionProductFactory(terms__trial_length=7, terms__sign_up_fee=Decimal("10.00"))
        cart = make_cart(item_for(product), fees=[FeeFactory(amount=Decimal("5.00"))])

        assert service.calculate_totals(cart) == Decimal("15.00")

    def test_fees_are_initial_only(self, service, item_for):
        cart = make_cart(item_for(SubscriptionProductFactory()), fees=[FeeFactory(amount=Decimal("5.00"))])

        service.calculate_totals(cart)

        recurring = cart.recurring_carts["monthly"]
        assert recurring.cart.fees == []
        assert recurring.total == Decimal("25.00")
        assert cart.total == Decimal("30.00")

    def test_legacy_discount_is_subtracted(self, service, item_for):
        cart = make_cart(item_for(SubscriptionProductFactory(price=Decimal("25.00"))))
        cart.discount_total = Decimal("5.00")

        assert service.calculate_totals(cart) == Decimal("20.00")

    def test_total_is_floored_at_zero(self, service, item_for):
        cart = make_cart(item_for(SubscriptionProductFactory(price=Decimal("25.00"))))
        cart.discount_total = Decimal("40.00")

        assert service.calculate_totals(cart) == Decimal("0")


class TestShipping:
    """Test shipping across initial and recurring passes."""

    def test_shipped_subscription(self, service, item_for):
        product = SubscriptionProductFactory(virtual=False, terms__sign_up_fee=Decimal("5.00"))
        cart = make_cart(item_for(product))

        assert service.calculate_totals(cart) == Decimal("40.00")
        assert cart.shipping_total == Decimal("10.00")
        assert cart.recurring_carts["monthly"].total == Decimal("35.00")

    def test_trial_defers_shipping_to_renewal(self, service, item_for):
        product = SubscriptionProductFactory(
            virtual=False,
            terms__trial_length=7,
            terms__trial_period=BillingPeriod.DAY,
            terms__sign_up_fee=Decimal("5.00"),
        )
        cart = make_cart(item_for(product))

        total = service.calculate_totals(cart)

        assert total == Decimal("5.00")
        assert cart.shipping_total == Decimal("0")
        assert cart.shipping_tax_total == Decimal("0")
        assert cart.recurring_carts["monthly_after_a_7_day_trial"].total == Decimal("35.00")

    def test_shipping_charged_when_simple_product_ships(self, service, item_for):
        sub = SubscriptionProductFactory(virtual=False, terms__trial_length=7)
        simple = ProductFactory(price=Decimal("10.00"), virtual=False)
        cart = make_cart(item_for(sub), item_for(simple))

        assert service.calculate_totals(cart) == Decimal("20.00")
        assert cart.shipping_total == Decimal("10.00")

    def test_one_time_shipping(self, service, item_for):
        product = SubscriptionProductFactory(virtual=False, terms__one_time_shipping=True)
        cart = make_cart(item_for(product))

        assert service.calculate_totals(cart) == Decimal("35.00")
        assert cart.recurring_carts["monthly"].total == Decimal("25.00")
        assert cart.recurring_carts["monthly"].cart.shipping_total == Decimal("0")

    def test_shipping_disabled(self, catalog, calculator, shipping_service, session, settings, now, item_for):
        settings.calc_shipping = False
        service = CartTotalsService.create(
            catalog, calculator, shipping_service, session, settings=settings, clock=lambda: now
        )
        cart = make_cart(item_for(SubscriptionProductFactory(virtual=False)))

        assert service.calculate_totals(cart) == Decimal("25.00")
        assert cart.recurring_carts["monthly"].total == Decimal("25.00")


class TestRecurringCarts:
    """Test one recurring cart per billing schedule."""

    def test_group_isolation(self, service, item_for):
        monthly = item_for(SubscriptionProductFactory(price=Decimal("25.00")))
        weekly = item_for(SubscriptionProductFactory(price=Decimal("5.00"), terms__period=BillingPeriod.WEEK))
        simple = item_for(ProductFactory(price=Decimal("10.00"), virtual=True))
        cart = make_cart(monthly, weekly, simple)

        total = service.calculate_totals(cart)

        assert total == Decimal("40.00")
        assert list(cart.recurring_carts) == ["monthly", "weekly"]
        assert cart.recurring_carts["monthly"].item_keys == [monthly.key]
        assert cart.recurring_carts["weekly"].item_keys == [weekly.key]
        assert cart.recurring_carts["monthly"].total == Decimal("25.00")
        assert cart.recurring_carts["weekly"].total == Decimal("5.00")

    def test_same_schedule_shares_a_recurring_cart(self, service, item_for):
        first = item_for(SubscriptionProductFactory(price=Decimal("25.00")))
        second = item_for(SubscriptionProductFactory(price=Decimal("15.00")), quantity=2)
        cart = make_cart(first, second)

        service.calculate_totals(cart)

        assert list(cart.recurring_carts) == ["monthly"]
        assert cart.recurring_carts["monthly"].total == Decimal("55.00")

    def test_idempotent(self, service, item_for):
        cart = make_cart(
            item_for(SubscriptionProductFactory(virtual=False, terms__sign_up_fee=Decimal("5.00"))),
            item_for(SubscriptionProductFactory(terms__period=BillingPeriod.YEAR, terms__trial_length=1)),
            item_for(ProductFactory()),
        )

        first_total = service.calculate_totals(cart)
        first = {key: snapshot.to_dict() for key, snapshot in cart.recurring_carts.items()}
        second_total = service.calculate_totals(cart)
        second = {key: snapshot.to_dict() for key, snapshot in cart.recurring_carts.items()}

        assert first_total == second_total
        assert first == second

    def test_mutating_one_recurring_cart_leaves_the_others_alone(self, service, item_for):
        monthly = item_for(SubscriptionProductFactory(price=Decimal("25.00")))
        weekly = item_for(SubscriptionProductFactory(price=Decimal("5.00"), terms__period=BillingPeriod.WEEK))
        cart = make_cart(monthly, weekly, fees=[FeeFactory(amount=Decimal("2.00"))])
        service.calculate_totals(cart)

        monthly_cart = cart.recurring_carts["monthly"].cart
        monthly_cart.items[monthly.key].quantity = 4
        monthly_cart.total = Decimal("100.00")
        monthly_cart.fees.append(FeeFactory())

        weekly_cart = cart.recurring_carts["weekly"].cart
        assert weekly_cart.total == Decimal("5.00")
        assert list(weekly_cart.items) == [weekly.key]
        assert weekly_cart.fees == []
        assert cart.items[monthly.key].quantity == 1
        assert cart.total == Decimal("32.00")
        assert len(cart.fees) == 1

    def test_retotalizing_after_quantity_change(self, service, item_for):
        sub = item_for(SubscriptionProductFactory(price=Decimal("25.00")))
        cart = make_cart(sub)
        service.calculate_totals(cart)

        cart.items[sub.key].quantity = 2
        total = service.calculate_totals(cart)

        assert total == Decimal("50.00")
        assert cart.recurring_carts["monthly"].total == Decimal("50.00")

    def test_recurring_carts_are_rebuilt(self, service, item_for):
        cart = make_cart(item_for(SubscriptionProductFactory()))
        service.calculate_totals(cart)
        previous = cart.recurring_carts

        service.calculate_totals(cart)

        assert cart.recurring_carts is not previous


class TestModeRestoration:
    """Test the calculation mode is NONE whenever control returns."""

    def test_after_success(self, service, item_for):
        cart = make_cart(item_for(SubscriptionProductFactory()))

        service.calculate_totals(cart)

        context = service.context_for(cart)
        assert context.get() == CalculationMode.NONE
        assert context.stage == AggregationStage.IDLE

    def test_after_failure(self, service, item_for):
        cart = make_cart(item_for(SubscriptionProductFactory(price=Decimal("25.00"))))
        service.calculate_totals(cart)
        previous = cart.recurring_carts

        # not registered in the catalog
        cart.add_item(LineItemFactory(product=SubscriptionProductFactory(terms__period=BillingPeriod.WEEK)))

        with pytest.raises(InvalidCartStateException):
            service.calculate_totals(cart)

        context = service.context_for(cart)
        assert context.get() == CalculationMode.NONE
        assert not context.in_progress
        assert cart.total == Decimal("25.00")
        assert cart.recurring_carts is previous

    def test_modes_seen_by_passes(self, service, hooks, item_for):
        seen = []
        hooks.add(HookPoint.CALCULATED_TOTAL, lambda total, cart, context: seen.append(context.get()) or total)
        cart = make_cart(item_for(SubscriptionProductFactory()), item_for(SubscriptionProductFactory(terms__length=12)))

        service.calculate_totals(cart)

        assert seen == [
            CalculationMode.NONE,
            CalculationMode.RECURRING_TOTAL,
            CalculationMode.RECURRING_TOTAL,
            CalculationMode.NONE,
        ]


class TestReentrancy:
    """Test totalizations triggered from inside a totalization."""

    def test_nested_call_is_a_no_op(self, service, hooks, item_for):
        nested = []

        def recalculate(cart, groups, context):
            nested.append(service.calculate_totals(cart))

        hooks.add(HookPoint.AFTER_GROUPING, recalculate)
        cart = make_cart(item_for(SubscriptionProductFactory(terms__sign_up_fee=Decimal("5.00"))))

        total = service.calculate_totals(cart)

        assert nested == [Decimal("30.00")]
        assert total == Decimal("30.00")
        assert list(cart.recurring_carts) == ["monthly"]

    def test_nested_call_from_after_hook(self, service, hooks, item_for):
        calls = []
        hooks.add(HookPoint.AFTER_CALCULATE_TOTALS, lambda cart, context: calls.append(service.calculate_totals(cart)))
        cart = make_cart(item_for(SubscriptionProductFactory()))

        service.calculate_totals(cart)

        assert calls == [Decimal("25.00")]

    def test_nested_call_from_recurring_pass(self, service, hooks, item_for):
        nested_carts = []

        def recalculate(total, cart, context):
            nested_carts.append(cart.id)
            service.calculate_totals(cart)
            return total

        hooks.add(HookPoint.CALCULATED_TOTAL, recalculate)
        cart = make_cart(item_for(SubscriptionProductFactory(price=Decimal("25.00"))))

        total = service.calculate_totals(cart)

        assert total == Decimal("25.00")
        assert list(cart.recurring_carts) == ["monthly"]
        assert cart.recurring_carts["monthly"].total == Decimal("25.00")
        # initial pass, one recurring pass, reconciliation
        assert len(nested_carts) == 3
        assert service.context_for(cart.recurring_carts["monthly"].cart) is service.context_for(cart)
        assert not service.context_for(cart).in_progress


class TestCalculatedTotalFilter:
    """Test the calculated total filter on the initial payment."""

    def test_filter_applies_to_reconciled_total(self, service, hooks, item_for):
        def surcharge(total, cart, context):
            if context.get() == CalculationMode.NONE:
                return total + Decimal("1.00")
            return total

        hooks.add(HookPoint.CALCULATED_TOTAL, surcharge)
        cart = make_cart(item_for(SubscriptionProductFactory(price=Decimal("25.00"))))

        total = service.calculate_totals(cart)

        assert total == Decimal("26.00")
        assert cart.total == Decimal("26.00")
        assert cart.recurring_carts["monthly"].total == Decimal("25.00")

    def test_filter_applies_without_subscriptions(self, service, hooks, item_for):
        hooks.add(HookPoint.CALCULATED_TOTAL, lambda total, cart, context: total + Decimal("1.00"))
        cart = make_cart(item_for(ProductFactory(price=Decimal("10.00"), virtual=True)))

        assert service.calculate_totals(cart) == Decimal("11.00")


class TestRounding:
    """Test totals are rounded half up to the configured decimals."""

    def test_total_is_rounded_sum(self, catalog, shipping_service, session, settings, now, item_for):
        service = CartTotalsService.create(
            catalog,
            SimpleTotalsCalculator(tax_rate=Decimal("0.075")),
            shipping_service,
            session,
            settings=settings,
            clock=lambda: now,
        )
        cart = make_cart(item_for(SubscriptionProductFactory(price=Decimal("9.99")), quantity=3))

        total = service.calculate_totals(cart)

        assert cart.tax_total == Decimal("2.25")
        assert total == round_amount(cart.raw_total(), 2)
        assert total == Decimal("32.22")
