"""
Flat-rate totals calculator.

Line, tax and fee arithmetic with a single tax rate for every taxable
line and fee.
"""
import logging
from decimal import Decimal
from typing import Union

from ...application.interfaces import TotalsCalculator
from ...domain.entities import Cart
from ...domain.services import PriceSource
from ...domain.value_objects import ZERO, round_amount, to_decimal

logger = logging.getLogger(__name__)


class SimpleTotalsCalculator(TotalsCalculator):
    """
    Totals calculator with one flat tax rate.

    With ``prices_include_tax`` the resolved prices are gross and the tax
    is extracted from them; otherwise tax is added on top.
    """

    def __init__(
        self,
        tax_rate: Union[Decimal, float, str] = Decimal("0"),
        prices_include_tax: bool = False,
        decimals: int = 2,
    ):
        self._tax_rate = to_decimal(tax_rate, 'tax_rate')
        self._prices_include_tax = prices_include_tax
        self._decimals = decimals

    def calculate_totals(self, cart: Cart, price_source: PriceSource) -> Cart:
        subtotal = ZERO
        contents_total = ZERO
        tax_total = ZERO

        for item in cart.items.values():
            unit_price = to_decimal(price_source(item))
            line_price = unit_price * item.quantity
            line_tax = ZERO

            if item.taxable and self._tax_rate:
                if self._prices_include_tax:
                    line_tax = round_amount(line_price - line_price / (1 + self._tax_rate), self._decimals)
                    line_price -= line_tax
                else:
                    line_tax = round_amount(line_price * self._tax_rate, self._decimals)

            item.unit_price = unit_price
            item.line_subtotal = round_amount(line_price, self._decimals)
            item.line_total = item.line_subtotal
            item.line_tax = line_tax

            subtotal += item.line_subtotal
            contents_total += item.line_total
            tax_total += line_tax

        fee_total = ZERO
        for fee in cart.fees:
            fee.total = round_amount(fee.amount, self._decimals)
            fee.tax = round_amount(fee.total * self._tax_rate, self._decimals) if fee.taxable else ZERO
            fee_total += fee.total
            tax_total += fee.tax

        cart.subtotal = subtotal
        cart.contents_total = contents_total
        cart.tax_total = tax_total
        cart.fee_total = fee_total

        logger.debug("Calculated contents %s, tax %s, fees %s", contents_total, tax_total, fee_total)
        return cart
