"""Invoice line and total computations."""

# invoice.py

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable

from .errors import ValidationError
from .tax.gst_engine import ZERO, GSTSplit, split_gst

ROUND = Decimal("0.01")


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


def round_money(value: Decimal | int | str) -> Decimal:
    """Round ``value`` to paise for storage and display."""

    return Decimal(str(value)).quantize(ROUND, rounding=ROUND_HALF_UP)


@dataclass
class LineItem:
    """Single validated line on an invoice."""

    product_name: str
    hsn_code: str
    quantity: Decimal
    rate: Decimal
    gst_rate: Decimal
    discount: Decimal = ZERO
    unit: str = "PCS"
    description: str = ""

    def gross(self) -> Decimal:
        return self.quantity * self.rate

    def taxable_amount(self) -> Decimal:
        # discount above gross is rejected by validation, never clamped here
        return self.gross() - self.discount


@dataclass
class ComputedItem:
    """A line item with its taxable value and GST split."""

    item: LineItem
    taxable_amount: Decimal
    tax: GSTSplit

    @property
    def total_amount(self) -> Decimal:
        return self.taxable_amount + self.tax.total


@dataclass
class InvoiceTotals:
    """Per-item breakdown and invoice level sums, all unrounded."""

    items: list[ComputedItem] = field(default_factory=list)
    subtotal: Decimal = ZERO
    total_discount: Decimal = ZERO
    total_cgst: Decimal = ZERO
    total_sgst: Decimal = ZERO
    total_igst: Decimal = ZERO

    @property
    def total_tax(self) -> Decimal:
        return self.total_cgst + self.total_sgst + self.total_igst

    @property
    def grand_total(self) -> Decimal:
        return self.subtotal - self.total_discount + self.total_tax


def build_invoice(
    items: Iterable[LineItem], business_state: str, customer_state: str
) -> InvoiceTotals:
    """Compute the GST breakdown and totals for ``items``.

    Taxes are summed at full precision; callers round the resulting totals
    once with :func:`round_money`. Rounding each line first and summing can
    therefore differ from the rounded invoice total by up to one paisa per
    line.
    """

    totals = InvoiceTotals()
    for item in items:
        taxable = item.taxable_amount()
        tax = split_gst(taxable, item.gst_rate, business_state, customer_state)
        totals.items.append(ComputedItem(item=item, taxable_amount=taxable, tax=tax))
        totals.subtotal += item.gross()
        totals.total_discount += item.discount
        totals.total_cgst += tax.cgst
        totals.total_sgst += tax.sgst
        totals.total_igst += tax.igst

    if not totals.items:
        raise ValidationError("At least one item is required")
    return totals


def payment_status(amount_paid: Decimal, grand_total: Decimal) -> PaymentStatus:
    if amount_paid == 0:
        return PaymentStatus.UNPAID
    if amount_paid >= grand_total:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def amount_due(grand_total: Decimal, amount_paid: Decimal) -> Decimal:
    return grand_total - amount_paid


@dataclass
class PaymentState:
    """Payment position of one invoice.

    ``amount_due`` and ``status`` are derived on every access so they cannot
    drift from ``grand_total`` and ``amount_paid``.
    """

    grand_total: Decimal
    amount_paid: Decimal = ZERO

    @property
    def amount_due(self) -> Decimal:
        return amount_due(self.grand_total, self.amount_paid)

    @property
    def status(self) -> PaymentStatus:
        return payment_status(self.amount_paid, self.grand_total)

    def apply_payment(self, amount: Decimal) -> None:
        """Add ``amount`` to the amount paid.

        Overpayment is rejected here, so every payment path shares one
        enforcement point.
        """

        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than zero")
        due = self.amount_due
        if amount > due:
            raise ValidationError(
                f"Payment amount cannot exceed due amount of ₹{round_money(due)}",
                hint="Record at most the amount due",
            )
        self.amount_paid += amount
