"""
Pydantic schemas for shipping calculator input.
"""
import re
from typing import Dict

from pydantic import BaseModel, Field, field_validator, model_validator

from ...domain.entities import ShippingDestination

# Postcode formats for countries we validate; other countries accept any
# alphanumeric postcode.
POSTCODE_PATTERNS: Dict[str, str] = {
    'US': r'^\d{5}(-\d{4})?$',
    'CA': r'^[A-Z]\d[A-Z] ?\d[A-Z]\d$',
    'GB': r'^[A-Z]{1,2}\d[A-Z\d]? ?\d[A-Z]{2}$',
    'DE': r'^\d{5}$',
    'FR': r'^\d{5}$',
    'PK': r'^\d{5}$',
    'AU': r'^\d{4}$',
    'NL': r'^\d{4} ?[A-Z]{2}$',
}


class ShippingCalculatorForm(BaseModel):
    """Shipping estimate request submitted from the cart page."""
    country: str = Field(default="", max_length=2, description="ISO 3166-1 alpha-2 country code")
    state: str = Field(default="", max_length=100, description="State or province")
    postcode: str = Field(default="", max_length=20, description="Postcode / ZIP")
    city: str = Field(default="", max_length=100, description="City")
    shipping_method: Dict[int, str] = Field(
        default_factory=dict,
        description="Selected shipping method per package index"
    )

    @field_validator('country', 'postcode')
    @classmethod
    def normalize_upper(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode='after')
    def validate_postcode(self) -> 'ShippingCalculatorForm':
        if not self.postcode:
            return self
        pattern = POSTCODE_PATTERNS.get(self.country, r'^[A-Z\d][A-Z\d \-]*$')
        if not re.match(pattern, self.postcode):
            raise ValueError("Please enter a valid postcode/ZIP.")
        return self

    def to_destination(self) -> ShippingDestination:
        return ShippingDestination(
            country=self.country,
            state=self.state,
            postcode=self.postcode,
            city=self.city,
        )
