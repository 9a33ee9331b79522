"""Invoice total calculation

LineItemCalculator prices a single line; InvoiceAggregator combines line
totals with discount, per-item tax, invoice tax and additional charges.
Both are pure: identical inputs always produce identical outputs.

Rounding policy: every line is rounded to the cent on its own before
summation, and every aggregate term is rounded before it is combined.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence, Tuple
from src.domain.errors import ValidationError
from src.domain.money import HUNDRED, ZERO, MoneyInput, ensure_places, round_money, sum_money, to_decimal

ONE = Decimal("1")

# Fractional digits kept by the storage columns
MONEY_PLACES = 2
QUANTITY_PLACES = 4
RATE_PLACES = 6


class DiscountMode(str, Enum):
    """How the discount input of a draft is interpreted"""
    FLAT = "flat"              # Currency amount
    PERCENTAGE = "percentage"  # 0-100 percent of the subtotal


@dataclass(frozen=True)
class LineItemInput:
    """Draft line item before persistence"""
    description: str
    quantity: Decimal
    unit_rate: Decimal
    unit: str = "unit"
    tax_rate: Optional[Decimal] = None


@dataclass(frozen=True)
class ChargeInput:
    """Draft additional charge before persistence"""
    name: str
    amount: Decimal


@dataclass(frozen=True)
class LineTotals:
    total: Decimal
    tax_amount: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """Aggregated invoice amounts

    total == taxable_base + tax_amount + charges_total, where
    taxable_base == max(subtotal - discount, 0).
    """
    lines: Tuple[LineTotals, ...]
    subtotal: Decimal
    discount: Decimal
    taxable_base: Decimal
    tax_amount: Decimal
    charges_total: Decimal
    total: Decimal


def validate_rate(rate: MoneyInput, field: str = "tax_rate") -> Decimal:
    """Ensure a rate is a fraction within [0, 1]"""
    value = to_decimal(rate, field)
    if value < 0 or value > ONE:
        raise ValidationError(
            f"{field} must be between 0 and 1",
            reason=f"{field}={value}",
        )
    return ensure_places(value, RATE_PLACES, field)


class LineItemCalculator:
    """Computes a single line's monetary total"""

    def compute(self, quantity: MoneyInput, unit_rate: MoneyInput) -> Decimal:
        """
        Compute round(quantity * unit_rate, 2) with half-up rounding

        Raises:
            ValidationError: negative or non-numeric quantity or unit rate, a
                quantity finer than 4 places or a unit rate finer than a cent
        """
        qty = to_decimal(quantity, "quantity")
        rate = to_decimal(unit_rate, "unit_rate")
        if qty < 0:
            raise ValidationError("quantity cannot be negative", reason=f"quantity={qty}")
        if rate < 0:
            raise ValidationError("unit_rate cannot be negative", reason=f"unit_rate={rate}")
        ensure_places(qty, QUANTITY_PLACES, "quantity")
        ensure_places(rate, MONEY_PLACES, "unit_rate")
        return round_money(qty * rate)

    def compute_item_tax(self, line_total: Decimal, tax_rate: Optional[MoneyInput]) -> Decimal:
        """Per-item tax on the line's own rounded total"""
        if tax_rate is None:
            return ZERO
        return round_money(line_total * validate_rate(tax_rate, "line tax_rate"))

    def compute_line(self, item) -> LineTotals:
        total = self.compute(item.quantity, item.unit_rate)
        tax_amount = self.compute_item_tax(total, getattr(item, "tax_rate", None))
        return LineTotals(total=total, tax_amount=tax_amount)


class InvoiceAggregator:
    """Combines line totals, discount, charges and tax into invoice totals"""

    def __init__(
        self,
        calculator: Optional[LineItemCalculator] = None,
        discount_mode: DiscountMode = DiscountMode.FLAT,
    ):
        self.calculator = calculator or LineItemCalculator()
        self.discount_mode = DiscountMode(discount_mode)

    def resolve_discount(self, subtotal: Decimal, discount: MoneyInput) -> Decimal:
        """Turn the discount input into a flat Money amount"""
        value = to_decimal(discount, "discount")
        if value < 0:
            raise ValidationError("discount cannot be negative", reason=f"discount={value}")
        if self.discount_mode == DiscountMode.PERCENTAGE:
            if value > HUNDRED:
                raise ValidationError(
                    "discount percentage cannot exceed 100",
                    reason=f"discount={value}",
                )
            return round_money(subtotal * value / HUNDRED)
        return round_money(value)

    def aggregate(
        self,
        line_items: Sequence,
        discount: MoneyInput = ZERO,
        additional_charges: Sequence = (),
        tax_rate: MoneyInput = ZERO,
    ) -> InvoiceTotals:
        """
        Aggregate invoice totals

        Args:
            line_items: objects exposing quantity, unit_rate and optional tax_rate
            discount: flat amount, or percentage when discount_mode is PERCENTAGE
            additional_charges: objects exposing amount
            tax_rate: invoice-level tax as a 0-1 fraction

        Raises:
            ValidationError: out-of-range tax rate, negative discount or
                charge, or any line item failing its own validation
        """
        rate = validate_rate(tax_rate)
        lines = tuple(self.calculator.compute_line(item) for item in line_items)

        subtotal = sum_money(line.total for line in lines)
        flat_discount = self.resolve_discount(subtotal, discount)
        taxable_base = max(round_money(subtotal - flat_discount), ZERO)

        item_tax = sum_money(line.tax_amount for line in lines)
        tax_amount = round_money(round_money(taxable_base * rate) + item_tax)

        charge_amounts = []
        for charge in additional_charges:
            amount = round_money(charge.amount, "charge amount")
            if amount < 0:
                raise ValidationError(
                    "additional charges cannot be negative",
                    reason=f"{getattr(charge, 'name', 'charge')}={amount}",
                )
            charge_amounts.append(amount)
        charges_total = sum_money(charge_amounts)

        total = round_money(taxable_base + tax_amount + charges_total)

        return InvoiceTotals(
            lines=lines,
            subtotal=subtotal,
            discount=flat_discount,
            taxable_base=taxable_base,
            tax_amount=tax_amount,
            charges_total=charges_total,
            total=total,
        )
