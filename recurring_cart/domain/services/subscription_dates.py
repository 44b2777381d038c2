"""
Subscription date calculations.

Pure functions over SubscriptionTerms; catalog adapters delegate here.
"""
from datetime import datetime
from typing import Optional

from ..value_objects import SubscriptionTerms, add_periods


def trial_expiration_date(terms: SubscriptionTerms, from_date: datetime) -> Optional[datetime]:
    """End of the free trial, or None when there is no trial."""
    if terms.trial_length <= 0:
        return None
    return add_periods(from_date, terms.trial_length, terms.trial_period or terms.period)


def first_renewal_payment_date(terms: SubscriptionTerms, from_date: datetime) -> Optional[datetime]:
    """
    Date of the first payment after the initial one.

    Returns None when the initial payment is the only payment, i.e. the
    subscription lasts exactly one billing interval and has no trial.
    Synchronized subscriptions renew on the next sync day after the trial
    (or after ``from_date`` when there is no trial).
    """
    trial_end = trial_expiration_date(terms, from_date)

    if terms.is_synchronized:
        if terms.is_one_payment and trial_end is None:
            return None
        return terms.sync_date.next_occurrence(trial_end or from_date, terms.period)

    if trial_end is not None:
        return trial_end

    if terms.is_one_payment:
        return None

    return add_periods(from_date, terms.interval, terms.period)


def expiration_date(terms: SubscriptionTerms, from_date: datetime) -> Optional[datetime]:
    """When the subscription ends, or None for subscriptions without a length."""
    if terms.length <= 0:
        return None
    start = trial_expiration_date(terms, from_date) or from_date
    return add_periods(start, terms.length, terms.period)
