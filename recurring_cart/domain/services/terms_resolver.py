"""
Effective subscription terms for cart line items.
"""
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from ..entities.cart import LineItem
from ..value_objects import SubscriptionTerms

_DEFAULT_TERMS = SubscriptionTerms()


def effective_terms(item: LineItem) -> Optional[SubscriptionTerms]:
    """
    Resolve the terms a line item is billed on.

    Item overrides win over the product's catalog terms. Returns None for
    non-subscription items.
    """
    if not item.is_subscription:
        return None

    terms = item.product.terms or _DEFAULT_TERMS
    overrides = {}
    if item.billing_interval is not None:
        overrides['interval'] = item.billing_interval
    if item.billing_period is not None:
        overrides['period'] = item.billing_period
    if item.length is not None:
        overrides['length'] = item.length
    if item.trial_length is not None:
        overrides['trial_length'] = item.trial_length
    if item.trial_period is not None:
        overrides['trial_period'] = item.trial_period
    if item.sign_up_fee is not None:
        overrides['sign_up_fee'] = item.sign_up_fee
    if item.one_time_shipping is not None:
        overrides['one_time_shipping'] = item.one_time_shipping
    if item.sync_date is not None:
        overrides['sync_date'] = item.sync_date

    return replace(terms, **overrides) if overrides else terms


def trial_length_of(item: LineItem) -> int:
    """Free trial length of an item, 0 for non-subscriptions."""
    terms = effective_terms(item)
    return terms.trial_length if terms else 0


def sign_up_fee_of(item: LineItem) -> Decimal:
    """Sign-up fee of an item, 0 for non-subscriptions."""
    terms = effective_terms(item)
    return terms.sign_up_fee if terms else _DEFAULT_TERMS.sign_up_fee


def is_one_time_shipping(item: LineItem) -> bool:
    terms = effective_terms(item)
    return bool(terms and terms.one_time_shipping)
