from .shipping_schemas import POSTCODE_PATTERNS, ShippingCalculatorForm

__all__ = [
    'POSTCODE_PATTERNS',
    'ShippingCalculatorForm',
]
