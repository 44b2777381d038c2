from .simple_totals_calculator import SimpleTotalsCalculator

__all__ = ['SimpleTotalsCalculator']
