"""
Billing period value objects and calendar arithmetic.
"""
import calendar
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import ValidationException


class BillingPeriod(str, Enum):
    """Calendar unit a subscription is billed (or trialled) in."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def _add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping to the last day of the target month."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def add_periods(moment: datetime, count: int, period: BillingPeriod) -> datetime:
    """
    Move a timestamp forward by a number of billing periods.

    Month and year arithmetic clamps to month end, so Jan 31 + 1 month
    is Feb 28 (or 29) rather than an overflow into March.

    Args:
        moment: Starting timestamp
        count: Number of periods (0 returns the timestamp unchanged)
        period: Period unit

    Returns:
        The shifted timestamp
    """
    period = BillingPeriod(period)
    if period == BillingPeriod.DAY:
        return moment + timedelta(days=count)
    if period == BillingPeriod.WEEK:
        return moment + timedelta(weeks=count)
    if period == BillingPeriod.MONTH:
        return _add_months(moment, count)
    return _add_months(moment, count * 12)


@dataclass(frozen=True)
class SyncDate:
    """
    Day of the billing period that synchronized subscriptions renew on.

    - week: ``day`` is the ISO weekday (1 = Monday ... 7 = Sunday)
    - month: ``day`` is the day of month (1-31, clamped to month end)
    - year: ``month`` and ``day`` together
    """
    day: int
    month: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate sync day ranges."""
        errors: Dict[str, list] = {}
        if not 1 <= self.day <= 31:
            errors['day'] = ['Sync day must be between 1 and 31']
        if self.month is not None and not 1 <= self.month <= 12:
            errors['month'] = ['Sync month must be between 1 and 12']
        if errors:
            raise ValidationException(message="Invalid sync date", errors=errors)

    def next_occurrence(self, after: datetime, period: BillingPeriod) -> datetime:
        """
        First date strictly after ``after`` that falls on this sync day.

        The time of day of ``after`` is preserved.
        """
        period = BillingPeriod(period)
        if period == BillingPeriod.WEEK:
            weekday = min(self.day, 7)
            delta = (weekday - after.isoweekday()) % 7 or 7
            return after + timedelta(days=delta)

        if period == BillingPeriod.MONTH:
            candidate = self._clamped(after, after.year, after.month)
            if candidate.date() <= after.date():
                shifted = _add_months(after.replace(day=1), 1)
                candidate = self._clamped(after, shifted.year, shifted.month)
            return candidate

        if period == BillingPeriod.YEAR:
            month = self.month or 1
            candidate = self._clamped(after, after.year, month)
            if candidate.date() <= after.date():
                candidate = self._clamped(after, after.year + 1, month)
            return candidate

        # Daily subscriptions cannot be synchronized; renew the next day.
        return after + timedelta(days=1)

    def _clamped(self, moment: datetime, year: int, month: int) -> datetime:
        day = min(self.day, calendar.monthrange(year, month)[1])
        return moment.replace(year=year, month=month, day=day)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return {'day': self.day, 'month': self.month}
