"""Static GST and billing reference data."""

from __future__ import annotations

from decimal import Decimal

GST_RATES: tuple[int, ...] = (0, 5, 12, 18, 28)

# Interstate B2C invoices strictly above this value are reported as B2CL.
B2CL_THRESHOLD = Decimal("250000")

DEFAULT_INVOICE_PREFIX = "INV"
DEFAULT_TERMS = "Payment is due within 7 days from the date of invoice."

UNITS: tuple[str, ...] = (
    "PCS", "KG", "GRAM", "LITRE", "ML",
    "METER", "CM", "FEET", "INCH",
    "HOURS", "DAYS", "BOX", "SET", "PAIR",
)

PAYMENT_MODES: tuple[str, ...] = ("CASH", "UPI", "CARD", "BANK_TRANSFER", "CHEQUE")

INDIAN_STATES: tuple[str, ...] = (
    "Andhra Pradesh", "Arunachal Pradesh", "Assam", "Bihar", "Chhattisgarh",
    "Goa", "Gujarat", "Haryana", "Himachal Pradesh", "Jharkhand", "Karnataka",
    "Kerala", "Madhya Pradesh", "Maharashtra", "Manipur", "Meghalaya", "Mizoram",
    "Nagaland", "Odisha", "Punjab", "Rajasthan", "Sikkim", "Tamil Nadu",
    "Telangana", "Tripura", "Uttar Pradesh", "Uttarakhand", "West Bengal",
    "Andaman and Nicobar Islands", "Chandigarh",
    "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi", "Jammu and Kashmir", "Ladakh", "Lakshadweep", "Puducherry",
)


def is_valid_gst_rate(rate: object) -> bool:
    """Return ``True`` when ``rate`` is one of the notified GST slabs."""

    try:
        value = Decimal(str(rate))
    except ArithmeticError:
        return False
    return value in {Decimal(r) for r in GST_RATES}
