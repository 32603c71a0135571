from __future__ import annotations

"""Invoice endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .db import get_db
from .deps import business_id
from .repos_sqlalchemy import invoices_repo_sql as repo
from .schemas import InvoiceCreate, InvoiceUpdate
from .services.report_service import date_bounds
from .utils.responses import ok

router = APIRouter(prefix="/api/invoices")


@router.post("", status_code=201)
def create_invoice(
    payload: InvoiceCreate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    invoice = repo.create_invoice(db, business, payload)
    return ok(repo.invoice_to_dict(invoice))


@router.get("")
def list_invoices(
    payment_status: str | None = Query(None, alias="paymentStatus"),
    invoice_type: str | None = Query(None, alias="invoiceType"),
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    """List non-draft invoices, newest first."""

    start = date_bounds(start_date, start_date)[0] if start_date else None
    end = date_bounds(end_date, end_date)[1] if end_date else None
    invoices = repo.list_invoices(
        db,
        business,
        start,
        end,
        payment_status=payment_status,
        invoice_type=invoice_type,
    )
    return ok([repo.invoice_to_dict(inv) for inv in reversed(invoices)])


@router.get("/{invoice_id}")
def get_invoice(
    invoice_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.invoice_to_dict(repo.get_invoice(db, business, invoice_id)))


@router.patch("/{invoice_id}")
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    invoice = repo.update_invoice(db, business, invoice_id, payload)
    return ok(repo.invoice_to_dict(invoice))


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    repo.delete_invoice(db, business, invoice_id)
    return ok({"id": invoice_id, "deleted": True})
