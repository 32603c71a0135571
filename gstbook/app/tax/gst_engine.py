from __future__ import annotations

"""GST split and GSTR-1 classification helpers.

Everything here is pure. Amounts are handled as :class:`~decimal.Decimal` and
are never rounded; rounding to ₹0.01 happens once when values are persisted
or displayed.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ..constants import B2CL_THRESHOLD

GSTIN_RE = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


class InvoiceType(str, Enum):
    """Statutory GSTR-1 invoice buckets."""

    B2B = "B2B"
    B2CS = "B2CS"
    B2CL = "B2CL"


@dataclass(frozen=True)
class GSTSplit:
    cgst: Decimal
    sgst: Decimal
    igst: Decimal

    @property
    def total(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


def _dec(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def split_gst(
    taxable_amount: Decimal | int | str,
    rate: Decimal | int | str,
    business_state: str | None,
    customer_state: str | None,
) -> GSTSplit:
    """Split the GST on ``taxable_amount`` into CGST/SGST or IGST.

    Parameters
    ----------
    taxable_amount:
        Value of supply after discount. Must be non-negative.
    rate:
        GST percentage, e.g. ``18``. Any non-negative rate is accepted;
        restricting it to the notified slabs is the caller's job.
    business_state, customer_state:
        State names compared verbatim. Equal states make the supply
        intrastate (CGST + SGST), anything else interstate (IGST).
    """

    gst_amount = _dec(taxable_amount) * _dec(rate) / HUNDRED
    if business_state == customer_state:
        half = gst_amount / 2
        return GSTSplit(cgst=half, sgst=half, igst=ZERO)
    return GSTSplit(cgst=ZERO, sgst=ZERO, igst=gst_amount)


def classify_invoice(
    gstin: str | None,
    business_state: str | None,
    customer_state: str | None,
    invoice_amount: Decimal | int | str,
) -> InvoiceType:
    """Return the GSTR-1 bucket for an invoice.

    A registered recipient (non-blank GSTIN) is always ``B2B``. Unregistered
    interstate supplies strictly above ₹2.5 lakh are ``B2CL``; everything
    else is ``B2CS``.
    """

    if gstin and gstin.strip():
        return InvoiceType.B2B
    if business_state != customer_state and _dec(invoice_amount) > B2CL_THRESHOLD:
        return InvoiceType.B2CL
    return InvoiceType.B2CS


def resolve_state(customer_state: str | None, business_state: str) -> str:
    """Return the place of supply for an invoice.

    Walk-in customers often have no state on record; such sales are treated
    as made within the business's own state.
    """

    if customer_state and customer_state.strip():
        return customer_state
    return business_state


def validate_gstin(gstin: str | None) -> bool:
    """Return ``True`` for a blank or well-formed GSTIN."""

    if not gstin:
        return True
    return bool(GSTIN_RE.match(gstin))
