"""
Unit tests for the totalization context.
"""
import pytest

from recurring_cart.domain.services import AggregationStage, CalculationMode, TotalizationContext


class TestTotalizationContext:
    """Test the calculation mode register."""

    def test_starts_idle(self):
        context = TotalizationContext()

        assert context.get() == CalculationMode.NONE
        assert context.stage == AggregationStage.IDLE
        assert not context.in_progress

    def test_set_accepts_values(self):
        context = TotalizationContext()

        assert context.set("recurring_total") == CalculationMode.RECURRING_TOTAL
        assert context.in_progress

    def test_set_rejects_unknown_mode(self):
        context = TotalizationContext()

        with pytest.raises(ValueError):
            context.set("renewal_total")

        assert context.get() == CalculationMode.NONE

    def test_stage_marks_in_progress(self):
        context = TotalizationContext(stage=AggregationStage.INITIAL_PASS)

        assert context.get() == CalculationMode.NONE
        assert context.in_progress

    def test_using_restores_none(self):
        context = TotalizationContext()

        with context.using(CalculationMode.RECURRING_TOTAL):
            assert context.get() == CalculationMode.RECURRING_TOTAL

        assert context.get() == CalculationMode.NONE

    def test_using_restores_none_on_error(self):
        context = TotalizationContext()

        with pytest.raises(RuntimeError):
            with context.using(CalculationMode.RECURRING_TOTAL):
                raise RuntimeError("pass failed")

        assert context.get() == CalculationMode.NONE

    def test_reset(self):
        context = TotalizationContext(
            mode=CalculationMode.RECURRING_TOTAL,
            stage=AggregationStage.RECONCILIATION,
        )

        context.reset()

        assert not context.in_progress
        assert context.now is None
