from __future__ import annotations

"""Report aggregates over persisted invoices.

The helpers accept any objects shaped like :class:`~gstbook.app.models.Invoice`
(with ``items``) and return plain dictionaries ready for JSON or CSV output.
They never touch the database.

Counting rules
--------------
* Rate-grouped rows (GSTR-1 B2CS/B2CL and the tax summary) report
  ``itemCount``: the number of contributing line items.
* The sales register and the GSTR-1 summary report ``invoiceCount``.
"""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Iterable, Sequence

from ..invoice import PaymentStatus, round_money
from ..tax.gst_engine import InvoiceType

ZERO = Decimal("0")
TAX_FIELDS = ("taxableAmount", "cgst", "sgst", "igst", "totalAmount")


def date_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """Return inclusive datetime bounds covering ``start`` to the end of ``end``."""

    return datetime.combine(start, time.min), datetime.combine(end, time.max)


def _money(value: Decimal) -> float:
    return float(round_money(value))


def _rate_key(rate: Decimal | float | int) -> Decimal:
    return Decimal(str(rate)).quantize(Decimal("0.01"))


def _rate_out(rate: Decimal) -> float | int:
    return int(rate) if rate == rate.to_integral_value() else float(rate)


def _empty_bucket() -> dict:
    bucket: dict = {field: ZERO for field in TAX_FIELDS}
    bucket["itemCount"] = 0
    return bucket


def _add_item(bucket: dict, item) -> None:
    bucket["taxableAmount"] += Decimal(str(item.taxable_amount))
    bucket["cgst"] += Decimal(str(item.cgst))
    bucket["sgst"] += Decimal(str(item.sgst))
    bucket["igst"] += Decimal(str(item.igst))
    bucket["totalAmount"] += Decimal(str(item.total_amount))
    bucket["itemCount"] += 1


def _rows_by_rate(invoices: Iterable) -> list[dict]:
    buckets: defaultdict[Decimal, dict] = defaultdict(_empty_bucket)
    for invoice in invoices:
        for item in invoice.items:
            _add_item(buckets[_rate_key(item.gst_rate)], item)

    rows = []
    for rate in sorted(buckets):
        vals = buckets[rate]
        total_tax = vals["cgst"] + vals["sgst"] + vals["igst"]
        row = {"gstRate": _rate_out(rate)}
        row.update({field: _money(vals[field]) for field in TAX_FIELDS})
        row["totalTax"] = _money(total_tax)
        row["itemCount"] = vals["itemCount"]
        rows.append(row)
    return rows


def _sum_rows(rows: Sequence[dict], fields: Iterable[str]) -> dict:
    totals: dict = {}
    for field in fields:
        if field.endswith("Count"):
            totals[field] = sum(row[field] for row in rows)
        else:
            totals[field] = _money(sum((Decimal(str(row[field])) for row in rows), ZERO))
    return totals


def _taxable(invoice) -> Decimal:
    return Decimal(str(invoice.subtotal)) - Decimal(str(invoice.total_discount))


def sales_register(invoices: Iterable) -> dict:
    """One row per invoice in ascending invoice-date order, with totals."""

    ordered = sorted(invoices, key=lambda inv: (inv.invoice_date, inv.invoice_number))
    rows = [
        {
            "invoiceNumber": inv.invoice_number,
            "invoiceDate": inv.invoice_date.isoformat(),
            "customerName": inv.customer_name,
            "customerGstin": inv.customer_gstin or "",
            "customerState": inv.customer_state,
            "invoiceType": inv.invoice_type,
            "taxableAmount": _money(_taxable(inv)),
            "cgst": _money(inv.total_cgst),
            "sgst": _money(inv.total_sgst),
            "igst": _money(inv.total_igst),
            "grandTotal": _money(inv.grand_total),
            "amountPaid": _money(inv.amount_paid),
            "amountDue": _money(inv.amount_due),
            "paymentStatus": inv.payment_status,
        }
        for inv in ordered
    ]
    totals = _sum_rows(
        rows,
        ("taxableAmount", "cgst", "sgst", "igst", "grandTotal", "amountPaid", "amountDue"),
    )
    totals["invoiceCount"] = len(rows)
    return {"rows": rows, "totals": totals}


def gstr1(invoices: Iterable) -> dict:
    """Split invoices into the three GSTR-1 buckets.

    B2B invoices are listed individually since the return needs the
    recipient GSTIN. B2CS and B2CL are both aggregated per GST rate.
    """

    by_type: dict[str, list] = {t.value: [] for t in InvoiceType}
    for invoice in sorted(invoices, key=lambda inv: (inv.invoice_date, inv.invoice_number)):
        by_type.setdefault(invoice.invoice_type, []).append(invoice)

    b2b = [
        {
            "invoiceNumber": inv.invoice_number,
            "invoiceDate": inv.invoice_date.isoformat(),
            "customerName": inv.customer_name,
            "customerGstin": inv.customer_gstin,
            "placeOfSupply": inv.customer_state,
            "invoiceValue": _money(inv.grand_total),
            "items": [
                {
                    "hsnCode": item.hsn_code,
                    "gstRate": _rate_out(_rate_key(item.gst_rate)),
                    "taxableAmount": _money(item.taxable_amount),
                    "cgst": _money(item.cgst),
                    "sgst": _money(item.sgst),
                    "igst": _money(item.igst),
                    "totalAmount": _money(item.total_amount),
                }
                for item in inv.items
            ],
        }
        for inv in by_type[InvoiceType.B2B.value]
    ]

    return {
        "b2b": b2b,
        "b2cs": _rows_by_rate(by_type[InvoiceType.B2CS.value]),
        "b2cl": _rows_by_rate(by_type[InvoiceType.B2CL.value]),
        "summary": {
            "b2bInvoiceCount": len(by_type[InvoiceType.B2B.value]),
            "b2csInvoiceCount": len(by_type[InvoiceType.B2CS.value]),
            "b2clInvoiceCount": len(by_type[InvoiceType.B2CL.value]),
        },
    }


def tax_summary(invoices: Iterable) -> dict:
    """Sum line items per distinct GST rate plus a grand-total row."""

    rows = _rows_by_rate(invoices)
    totals = _sum_rows(rows, (*TAX_FIELDS, "totalTax", "itemCount"))
    return {"byRate": rows, "totals": totals}


def dashboard_stats(invoices: Iterable, today: date | None = None, recent: int = 10) -> dict:
    """Headline figures for the owner dashboard.

    ``invoices`` should be every non-draft invoice of the business; the
    outstanding figure spans all time while sales figures are limited to
    today and the current month.
    """

    today = today or date.today()
    day_start = datetime.combine(today, time.min)
    day_end = day_start + timedelta(days=1)
    month_start = datetime.combine(today.replace(day=1), time.min)

    invoices = list(invoices)
    today_total, today_count = ZERO, 0
    month = {"sales": ZERO, "paid": ZERO, "unpaid": ZERO, "count": 0}
    outstanding = ZERO
    for inv in invoices:
        grand_total = Decimal(str(inv.grand_total))
        if day_start <= inv.invoice_date < day_end:
            today_total += grand_total
            today_count += 1
        if month_start <= inv.invoice_date < day_end:
            month["sales"] += grand_total
            month["count"] += 1
            if inv.payment_status == PaymentStatus.PAID.value:
                month["paid"] += grand_total
            elif inv.payment_status == PaymentStatus.UNPAID.value:
                month["unpaid"] += grand_total
        if inv.payment_status != PaymentStatus.PAID.value:
            outstanding += Decimal(str(inv.amount_due))

    latest = sorted(invoices, key=lambda inv: (inv.invoice_date, inv.id), reverse=True)
    return {
        "today": {"sales": _money(today_total), "count": today_count},
        "month": {
            "sales": _money(month["sales"]),
            "paid": _money(month["paid"]),
            "unpaid": _money(month["unpaid"]),
            "count": month["count"],
        },
        "outstanding": _money(outstanding),
        "recentInvoices": [
            {
                "id": inv.id,
                "invoiceNumber": inv.invoice_number,
                "customerName": inv.customer_name,
                "grandTotal": _money(inv.grand_total),
                "paymentStatus": inv.payment_status,
                "invoiceDate": inv.invoice_date.isoformat(),
            }
            for inv in latest[:recent]
        ],
    }
