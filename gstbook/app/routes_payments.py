from __future__ import annotations

"""Payment recording endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .db import get_db
from .deps import business_id
from .repos_sqlalchemy import invoices_repo_sql as repo
from .schemas import PaymentCreate
from .services.report_service import date_bounds
from .utils.responses import ok

router = APIRouter(prefix="/api/payments")


@router.post("", status_code=201)
def record_payment(
    payload: PaymentCreate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    payment, invoice = repo.add_payment(db, business, payload)
    return ok(
        {
            "payment": repo.payment_to_dict(payment),
            "invoice": {
                "id": invoice.id,
                "amountPaid": float(invoice.amount_paid),
                "amountDue": float(invoice.amount_due),
                "paymentStatus": invoice.payment_status,
            },
        }
    )


@router.get("/invoice/{invoice_id}")
def invoice_payments(
    invoice_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    payments = repo.list_payments(db, business, invoice_id)
    return ok([repo.payment_to_dict(p) for p in payments])


@router.get("")
def list_payments(
    start_date: date | None = Query(None, alias="startDate"),
    end_date: date | None = Query(None, alias="endDate"),
    payment_mode: str | None = Query(None, alias="paymentMode"),
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    start = date_bounds(start_date, start_date)[0] if start_date else None
    end = date_bounds(end_date, end_date)[1] if end_date else None
    payments = repo.list_payments_for_business(db, business, start, end, payment_mode)
    return ok([repo.payment_with_invoice_to_dict(p) for p in payments])
