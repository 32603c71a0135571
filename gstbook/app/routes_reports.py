from __future__ import annotations

"""Routes for sales register, GSTR-1 and tax summary reports.

Each report accepts an inclusive ``startDate``/``endDate`` range and
``format=json`` (default) or ``format=csv``.
"""

import csv
from datetime import date
from io import StringIO
from typing import Iterable, Literal, Sequence

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from .db import get_db
from .deps import business_id
from .repos_sqlalchemy import invoices_repo_sql as repo
from .services import report_service
from .utils.responses import ok
from .validation import validate_report_range

router = APIRouter(prefix="/api/reports")

ReportFormat = Literal["json", "csv"]


def _invoices_in_range(
    db: Session, business: int, start_date: date | None, end_date: date | None
):
    start, end = validate_report_range(start_date, end_date).unwrap()
    lower, upper = report_service.date_bounds(start, end)
    return repo.list_invoices(db, business, lower, upper)


def _csv_response(
    filename: str, header: Sequence[str], rows: Iterable[Sequence[object]]
) -> Response:
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(header)
    writer.writerows(rows)
    response = Response(content=output.getvalue(), media_type="text/csv")
    response.headers["Content-Disposition"] = f"attachment; filename={filename}"
    return response


def _rate_rows(section: str, rows: Sequence[dict]) -> list[list[object]]:
    return [
        [
            section,
            row["gstRate"],
            row["taxableAmount"],
            row["cgst"],
            row["sgst"],
            row["igst"],
            row["totalAmount"],
            row["itemCount"],
        ]
        for row in rows
    ]


@router.get("/sales-register")
def sales_register(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    fmt: ReportFormat = Query("json", alias="format"),
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
):
    report = report_service.sales_register(
        _invoices_in_range(db, business, start_date, end_date)
    )
    if fmt == "json":
        return ok(report)

    fields = [
        "invoiceNumber", "invoiceDate", "customerName", "customerGstin",
        "customerState", "invoiceType", "taxableAmount", "cgst", "sgst", "igst",
        "grandTotal", "amountPaid", "amountDue", "paymentStatus",
    ]
    rows = [[row[f] for f in fields] for row in report["rows"]]
    totals = report["totals"]
    rows.append(
        ["TOTAL", "", "", "", "", ""]
        + [totals[f] for f in fields[6:13]]
        + [""]
    )
    return _csv_response(
        f"sales-register-{start_date}-to-{end_date}.csv", fields, rows
    )


@router.get("/gstr1")
def gstr1(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    fmt: ReportFormat = Query("json", alias="format"),
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
):
    report = report_service.gstr1(_invoices_in_range(db, business, start_date, end_date))
    if fmt == "json":
        return ok(report)

    rows: list[list[object]] = []
    for inv in report["b2b"]:
        for item in inv["items"]:
            rows.append(
                [
                    "B2B",
                    item["gstRate"],
                    item["taxableAmount"],
                    item["cgst"],
                    item["sgst"],
                    item["igst"],
                    item["totalAmount"],
                    1,
                    inv["invoiceNumber"],
                    inv["customerGstin"],
                ]
            )
    rows += [r + ["", ""] for r in _rate_rows("B2CS", report["b2cs"])]
    rows += [r + ["", ""] for r in _rate_rows("B2CL", report["b2cl"])]
    header = [
        "section", "gst_rate", "taxable_value", "cgst", "sgst", "igst",
        "total", "item_count", "invoice_number", "recipient_gstin",
    ]
    return _csv_response(f"GSTR1-{start_date}-to-{end_date}.csv", header, rows)


@router.get("/tax-summary")
def tax_summary(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    fmt: ReportFormat = Query("json", alias="format"),
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
):
    report = report_service.tax_summary(
        _invoices_in_range(db, business, start_date, end_date)
    )
    if fmt == "json":
        return ok(report)

    header = [
        "gst_rate", "taxable_value", "cgst", "sgst", "igst", "total_tax",
        "total", "item_count",
    ]
    keys = ["taxableAmount", "cgst", "sgst", "igst", "totalTax", "totalAmount", "itemCount"]
    rows = [[row["gstRate"]] + [row[k] for k in keys] for row in report["byRate"]]
    rows.append(["TOTAL"] + [report["totals"][k] for k in keys])
    return _csv_response(f"tax-summary-{start_date}-to-{end_date}.csv", header, rows)


@router.get("/dashboard")
def dashboard(
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(report_service.dashboard_stats(repo.list_invoices(db, business)))
