"""Single validation step in front of the invoice aggregator.

Each validator collects every field problem and returns a :class:`Validated`
result instead of raising part way through.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Generic, TypeVar

from .constants import GST_RATES, PAYMENT_MODES, is_valid_gst_rate
from .errors import FieldError, ValidationError
from .invoice import LineItem
from .schemas import InvoiceCreate, PaymentCreate
from .tax.gst_engine import ZERO, validate_gstin

T = TypeVar("T")


@dataclass
class Validated(Generic[T]):
    """Either a parsed value or the list of field errors."""

    value: T | None = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def unwrap(self) -> T:
        """Return the value or raise :class:`ValidationError`."""

        if self.errors:
            raise ValidationError(self.errors[0].message, self.errors)
        return self.value  # type: ignore[return-value]


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# Stored column scales for invoice_items.
DECIMAL_PLACES = {"quantity": 3, "rate": 2, "discount": 2}


def _too_precise(value: Decimal, places: int) -> bool:
    return value.normalize().as_tuple().exponent < -places


def validate_invoice_request(request: InvoiceCreate) -> Validated[list[LineItem]]:
    errors: list[FieldError] = []

    customer = request.customer_details
    if customer is None or _blank(customer.name):
        errors.append(FieldError("customerDetails.name", "Customer name is required"))
    elif not validate_gstin((customer.gstin or "").strip()):
        errors.append(FieldError("customerDetails.gstin", "Invalid GSTIN format"))

    if not request.items:
        errors.append(FieldError("items", "At least one item is required"))

    items: list[LineItem] = []
    for idx, raw in enumerate(request.items):
        prefix = f"items[{idx}]"
        missing = [
            name
            for name, value in (
                ("productName", raw.product_name),
                ("hsnCode", raw.hsn_code),
                ("quantity", raw.quantity),
                ("rate", raw.rate),
                ("gstRate", raw.gst_rate),
            )
            if _blank(value)
        ]
        for name in missing:
            errors.append(FieldError(f"{prefix}.{name}", f"{name} is required"))
        if missing:
            continue

        discount = raw.discount if raw.discount is not None else ZERO
        item_errors: list[FieldError] = []
        if not is_valid_gst_rate(raw.gst_rate):
            allowed = ", ".join(str(r) for r in GST_RATES)
            item_errors.append(
                FieldError(f"{prefix}.gstRate", f"gstRate must be one of {allowed}")
            )
        for name, value in (
            ("quantity", raw.quantity),
            ("rate", raw.rate),
            ("discount", discount),
        ):
            if value < 0:
                item_errors.append(
                    FieldError(f"{prefix}.{name}", f"{name} cannot be negative")
                )
            elif _too_precise(value, DECIMAL_PLACES[name]):
                item_errors.append(
                    FieldError(
                        f"{prefix}.{name}",
                        f"{name} can have at most {DECIMAL_PLACES[name]} decimal places",
                    )
                )
        if not item_errors and discount > raw.quantity * raw.rate:
            item_errors.append(
                FieldError(f"{prefix}.discount", "discount cannot exceed line amount")
            )
        if item_errors:
            errors.extend(item_errors)
            continue

        items.append(
            LineItem(
                product_name=raw.product_name.strip(),
                hsn_code=raw.hsn_code.strip(),
                quantity=raw.quantity,
                rate=raw.rate,
                gst_rate=raw.gst_rate,
                discount=discount,
                unit=(raw.unit or "PCS").strip(),
                description=raw.description or "",
            )
        )

    if errors:
        return Validated(errors=errors)
    return Validated(value=items)


def validate_payment_request(request: PaymentCreate) -> Validated[Decimal]:
    errors: list[FieldError] = []
    if request.amount is None:
        errors.append(FieldError("amount", "amount is required"))
    elif request.amount <= 0:
        errors.append(FieldError("amount", "Payment amount must be greater than zero"))
    if _blank(request.payment_mode):
        errors.append(FieldError("paymentMode", "paymentMode is required"))
    elif request.payment_mode not in PAYMENT_MODES:
        errors.append(
            FieldError(
                "paymentMode", f"paymentMode must be one of {', '.join(PAYMENT_MODES)}"
            )
        )
    if errors:
        return Validated(errors=errors)
    return Validated(value=request.amount)


def validate_report_range(
    start: date | None, end: date | None
) -> Validated[tuple[date, date]]:
    if start is None or end is None:
        return Validated(
            errors=[FieldError("startDate", "Start date and end date are required")]
        )
    if start > end:
        return Validated(
            errors=[FieldError("startDate", "Start date must be before end date")]
        )
    return Validated(value=(start, end))
