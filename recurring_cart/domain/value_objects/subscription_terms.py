"""
Subscription terms value object.

The effective billing terms of one cart line item, after item-level
overrides have been applied over catalog defaults.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from ..exceptions import ValidationException
from .billing_period import BillingPeriod, SyncDate


@dataclass(frozen=True)
class SubscriptionTerms:
    """
    Recurring terms used for pricing, grouping and shipping decisions.

    Two items with equal terms (and equal renewal dates) are billed
    together in the same recurring cart.
    """
    interval: int = 1
    period: BillingPeriod = BillingPeriod.MONTH
    length: int = 0  # number of billing periods, 0 = until cancelled
    trial_length: int = 0
    trial_period: Optional[BillingPeriod] = None
    sign_up_fee: Decimal = Decimal("0")
    one_time_shipping: bool = False
    sync_date: Optional[SyncDate] = None

    def __post_init__(self) -> None:
        """Validate and normalize terms."""
        errors: Dict[str, list] = {}
        if self.interval < 1:
            errors['interval'] = ['Billing interval must be at least 1']
        if self.length < 0:
            errors['length'] = ['Length cannot be negative']
        if self.trial_length < 0:
            errors['trial_length'] = ['Trial length cannot be negative']
        if errors:
            raise ValidationException(message="Invalid subscription terms", errors=errors)

        object.__setattr__(self, 'period', BillingPeriod(self.period))
        if self.trial_period is not None:
            object.__setattr__(self, 'trial_period', BillingPeriod(self.trial_period))
        if not isinstance(self.sign_up_fee, Decimal):
            object.__setattr__(self, 'sign_up_fee', Decimal(str(self.sign_up_fee)))

    @property
    def has_free_trial(self) -> bool:
        return self.trial_length > 0

    @property
    def is_synchronized(self) -> bool:
        return self.sync_date is not None

    @property
    def is_one_payment(self) -> bool:
        """True when the whole subscription is paid by the initial payment."""
        return self.length > 0 and self.length == self.interval

    def cadence_key(self) -> str:
        """Billing interval and period part of the schedule key."""
        period = self.period.value
        if self.interval == 1:
            # always gotta be one exception
            return "daily" if self.period == BillingPeriod.DAY else f"{period}ly"
        if self.interval == 2:
            return f"every_2nd_{period}"
        if self.interval == 3:
            return f"every_3rd_{period}"
        return f"every_{self.interval}th_{period}"

    def schedule_key(self, renewal_date: Optional[datetime] = None) -> str:
        """
        Build the billing schedule key for these terms.

        Examples:
            monthly
            every_3rd_week_for_6_weeks
            2026_11_01_yearly_after_a_14_day_trial

        Args:
            renewal_date: First renewal date, prefixed for synchronized items

        Returns:
            Stable string identifying the billing schedule
        """
        key = ""
        if renewal_date is not None:
            key += renewal_date.strftime("%Y_%m_%d_")

        key += self.cadence_key()

        if self.length > 0:
            key += f"_for_{self.length}_{self.period.value}"
            if self.length > 1:
                key += "s"

        if self.trial_length > 0:
            trial_period = self.trial_period.value if self.trial_period else self.period.value
            key += f"_after_a_{self.trial_length}_{trial_period}_trial"

        return key

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {
            'interval': self.interval,
            'period': self.period.value,
            'length': self.length,
            'trial_length': self.trial_length,
            'trial_period': self.trial_period.value if self.trial_period else None,
            'sign_up_fee': str(self.sign_up_fee),
            'one_time_shipping': self.one_time_shipping,
            'sync_date': self.sync_date.to_dict() if self.sync_date else None,
        }
