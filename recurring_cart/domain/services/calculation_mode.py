"""
Calculation mode register for cart totalization.

A totalization runs the same totals arithmetic several times over one
cart; the active mode tells price resolution and shipping policy which
of those passes is running.
"""
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterator, Optional


class CalculationMode(str, Enum):
    """
    Which total a totalization pass is calculating.

    - NONE: the initial payment (sign-up fees and/or first period)
    - COMBINED_TOTAL: sign-up fee plus recurring amount
    - SIGN_UP_FEE_TOTAL: initial amount with a free trial and a sign-up fee
    - RECURRING_TOTAL: the amount charged on every renewal
    - FREE_TRIAL_TOTAL: initial amount with a free trial and no sign-up fee
    """
    NONE = "none"
    COMBINED_TOTAL = "combined_total"
    SIGN_UP_FEE_TOTAL = "sign_up_fee_total"
    RECURRING_TOTAL = "recurring_total"
    FREE_TRIAL_TOTAL = "free_trial_total"


class AggregationStage(str, Enum):
    """Stages of one full cart totalization."""
    IDLE = "idle"
    INITIAL_PASS = "initial_pass"
    GROUPING = "grouping"
    PER_GROUP_PASS = "per_group_pass"
    RECONCILIATION = "reconciliation"


@dataclass
class TotalizationContext:
    """
    Mode register threaded through one cart's totalization.

    Holds exactly one mode at a time. It is not a stack: whoever sets a
    mode other than NONE restores NONE before handing control back. A
    mode other than NONE, or a stage other than IDLE, means a
    totalization is in flight, which makes the register double as the
    reentrancy guard.
    """
    mode: CalculationMode = CalculationMode.NONE
    stage: AggregationStage = AggregationStage.IDLE
    now: Optional[datetime] = None

    def get(self) -> CalculationMode:
        return self.mode

    def set(self, mode: CalculationMode) -> CalculationMode:
        self.mode = CalculationMode(mode)
        return self.mode

    @property
    def in_progress(self) -> bool:
        return self.mode != CalculationMode.NONE or self.stage != AggregationStage.IDLE

    def reset(self) -> None:
        """Return the register to its idle state."""
        self.mode = CalculationMode.NONE
        self.stage = AggregationStage.IDLE
        self.now = None

    @contextmanager
    def using(self, mode: CalculationMode) -> Iterator['TotalizationContext']:
        """Run a block under ``mode``, restoring NONE on every exit path."""
        self.set(mode)
        try:
            yield self
        finally:
            self.set(CalculationMode.NONE)
