"""SQLAlchemy implementation for invoice persistence.

Every helper is scoped to a single business: invoices belonging to another
business are reported as not found.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from config import get_settings

from ..constants import DEFAULT_INVOICE_PREFIX
from ..errors import (
    AllocationConflictError,
    BusinessNotFoundError,
    InvoiceLockedError,
    InvoiceNotFoundError,
)
from ..invoice import PaymentStatus, build_invoice, round_money
from ..models import Business, Invoice, InvoiceItem, Payment
from ..schemas import InvoiceCreate, InvoiceUpdate, PaymentCreate
from ..tax.gst_engine import classify_invoice, resolve_state
from ..utils.invoice_counter import CounterState, InvoiceNumberAllocator
from ..validation import validate_invoice_request, validate_payment_request
from .customers_repo_sql import get_customer
from .products_repo_sql import record_usage

logger = logging.getLogger("gstbook.invoices")

allocator = InvoiceNumberAllocator(get_settings().invoice_number_max_attempts)


class SqlCounterStore:
    """:class:`~gstbook.app.utils.invoice_counter.CounterStore` over a session.

    The counter update is only flushed; it commits together with the invoice
    that uses the allocated number.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _business(self, business_id: int) -> Business:
        business = self.session.scalar(
            select(Business)
            .where(Business.id == business_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if business is None:
            raise BusinessNotFoundError(business_id)
        return business

    def load(self, business_id: int) -> CounterState:
        business = self._business(business_id)
        return CounterState(
            prefix=business.invoice_prefix or DEFAULT_INVOICE_PREFIX,
            counter=business.invoice_counter or 0,
        )

    def existing_numbers(self, business_id: int, series: str) -> Iterable[str]:
        return self.session.scalars(
            select(Invoice.invoice_number).where(
                Invoice.business_id == business_id,
                Invoice.invoice_number.startswith(series + "-", autoescape=True),
            )
        ).all()

    def exists(self, number: str) -> bool:
        found = self.session.scalar(
            select(Invoice.id).where(Invoice.invoice_number == number).limit(1)
        )
        return found is not None

    def save_counter(self, business_id: int, counter: int) -> None:
        self._business(business_id).invoice_counter = counter
        self.session.flush()


def _get_business(session: Session, business_id: int) -> Business:
    business = session.get(Business, business_id)
    if business is None:
        raise BusinessNotFoundError(business_id)
    return business


def create_invoice(
    session: Session,
    business_id: int,
    request: InvoiceCreate,
    *,
    today: date | None = None,
) -> Invoice:
    """Validate, price, number and persist a new invoice.

    The invoice row and the advanced counter commit in one transaction. A
    unique-constraint failure on the number rolls both back and the
    allocation is retried from a fresh read.
    """

    items = validate_invoice_request(request).unwrap()
    customer = request.customer_details
    business = _get_business(session, business_id)
    saved_customer = (
        get_customer(session, business_id, request.customer_id)
        if request.customer_id is not None
        else None
    )

    customer_state = resolve_state(customer.state, business.state)
    totals = build_invoice(items, business.state, customer_state)
    grand_total = round_money(totals.grand_total)
    gstin = (customer.gstin or "").strip().upper()
    invoice_type = classify_invoice(gstin, business.state, customer_state, grand_total)

    attempts = allocator.max_attempts
    for attempt in range(1, attempts + 1):
        with allocator.hold(business_id):
            number = allocator.next_number(SqlCounterStore(session), business_id, today)
            invoice = Invoice(
                business_id=business_id,
                invoice_number=number,
                customer_id=request.customer_id,
                invoice_date=request.invoice_date or datetime.now(),
                due_date=request.due_date,
                customer_name=customer.name.strip(),
                customer_phone=customer.phone or "",
                customer_email=customer.email or "",
                customer_gstin=gstin,
                customer_address=customer.address or "",
                customer_city=customer.city or "",
                customer_state=customer_state,
                customer_pincode=customer.pincode or "",
                subtotal=round_money(totals.subtotal),
                total_discount=round_money(totals.total_discount),
                total_cgst=round_money(totals.total_cgst),
                total_sgst=round_money(totals.total_sgst),
                total_igst=round_money(totals.total_igst),
                grand_total=grand_total,
                amount_paid=round_money(0),
                invoice_type=invoice_type.value,
                notes=request.notes or "",
                terms_conditions=business.terms_conditions,
                is_draft=request.is_draft,
            )
            for position, line in enumerate(totals.items):
                invoice.items.append(
                    InvoiceItem(
                        position=position,
                        product_name=line.item.product_name,
                        hsn_code=line.item.hsn_code,
                        description=line.item.description,
                        quantity=line.item.quantity,
                        unit=line.item.unit,
                        rate=line.item.rate,
                        gst_rate=line.item.gst_rate,
                        discount=round_money(line.item.discount),
                        taxable_amount=round_money(line.taxable_amount),
                        cgst=round_money(line.tax.cgst),
                        sgst=round_money(line.tax.sgst),
                        igst=round_money(line.tax.igst),
                        total_amount=round_money(line.total_amount),
                    )
                )
            session.add(invoice)
            record_usage(session, business_id, items)
            if saved_customer is not None:
                saved_customer.usage_count = (saved_customer.usage_count or 0) + 1
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                logger.warning(
                    "invoice number taken at commit; retrying",
                    extra={"business": business_id, "number": number, "attempt": attempt},
                )
                continue
        logger.info(
            "invoice created",
            extra={"business": business_id, "number": number, "type": invoice_type.value},
        )
        return invoice
    raise AllocationConflictError(business_id, attempts)


def get_invoice(session: Session, business_id: int, invoice_id: int) -> Invoice:
    invoice = session.get(Invoice, invoice_id)
    if invoice is None or invoice.business_id != business_id:
        raise InvoiceNotFoundError(invoice_id)
    return invoice


def list_invoices(
    session: Session,
    business_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    *,
    include_drafts: bool = False,
    payment_status: str | None = None,
    invoice_type: str | None = None,
) -> Sequence[Invoice]:
    """Return invoices of ``business_id`` ordered by invoice date.

    ``start`` and ``end`` are inclusive bounds.
    """

    stmt = select(Invoice).where(Invoice.business_id == business_id)
    if not include_drafts:
        stmt = stmt.where(Invoice.is_draft.is_(False))
    if start is not None:
        stmt = stmt.where(Invoice.invoice_date >= start)
    if end is not None:
        stmt = stmt.where(Invoice.invoice_date <= end)
    if payment_status:
        stmt = stmt.where(Invoice.payment_status == payment_status)
    if invoice_type:
        stmt = stmt.where(Invoice.invoice_type == invoice_type)
    stmt = stmt.order_by(Invoice.invoice_date, Invoice.id)
    return session.scalars(stmt).all()


def update_invoice(
    session: Session, business_id: int, invoice_id: int, payload: InvoiceUpdate
) -> Invoice:
    invoice = get_invoice(session, business_id, invoice_id)
    if invoice.payment_status == PaymentStatus.PAID.value:
        raise InvoiceLockedError("edit")
    fields = payload.model_dump(exclude_unset=True)
    if "notes" in fields:
        invoice.notes = fields["notes"] or ""
    if fields.get("due_date"):
        invoice.due_date = fields["due_date"]
    session.commit()
    return invoice


def delete_invoice(session: Session, business_id: int, invoice_id: int) -> None:
    invoice = get_invoice(session, business_id, invoice_id)
    if invoice.payment_status == PaymentStatus.PAID.value:
        raise InvoiceLockedError("delete")
    session.delete(invoice)
    session.commit()
    logger.info(
        "invoice deleted", extra={"business": business_id, "number": invoice.invoice_number}
    )


def add_payment(
    session: Session, business_id: int, request: PaymentCreate
) -> tuple[Payment, Invoice]:
    """Record a payment and recompute the invoice's payment position."""

    amount = round_money(validate_payment_request(request).unwrap())
    invoice = session.scalar(
        select(Invoice)
        .where(Invoice.id == request.invoice_id, Invoice.business_id == business_id)
        .with_for_update()
    )
    if invoice is None:
        raise InvoiceNotFoundError(request.invoice_id)

    state = invoice.payment_state()
    state.apply_payment(amount)

    payment = Payment(
        business_id=business_id,
        invoice_id=invoice.id,
        amount=amount,
        payment_mode=request.payment_mode,
        payment_date=request.payment_date or datetime.now(),
        reference_number=request.reference_number or "",
        notes=request.notes or "",
    )
    session.add(payment)
    invoice.amount_paid = state.amount_paid
    session.commit()
    logger.info(
        "payment recorded",
        extra={"business": business_id, "number": invoice.invoice_number, "status": invoice.payment_status},
    )
    return payment, invoice


def list_payments(session: Session, business_id: int, invoice_id: int) -> Sequence[Payment]:
    get_invoice(session, business_id, invoice_id)
    return session.scalars(
        select(Payment)
        .where(Payment.invoice_id == invoice_id, Payment.business_id == business_id)
        .order_by(Payment.payment_date.desc(), Payment.id.desc())
    ).all()


def list_payments_for_business(
    session: Session,
    business_id: int,
    start: datetime | None = None,
    end: datetime | None = None,
    payment_mode: str | None = None,
) -> Sequence[Payment]:
    """All payments of a business, newest first; ``start``/``end`` are inclusive."""

    stmt = select(Payment).where(Payment.business_id == business_id)
    if start is not None:
        stmt = stmt.where(Payment.payment_date >= start)
    if end is not None:
        stmt = stmt.where(Payment.payment_date <= end)
    if payment_mode:
        stmt = stmt.where(Payment.payment_mode == payment_mode)
    stmt = stmt.options(selectinload(Payment.invoice))
    return session.scalars(stmt.order_by(Payment.payment_date.desc(), Payment.id.desc())).all()



def invoice_to_dict(invoice: Invoice) -> dict:
    return {
        "id": invoice.id,
        "invoiceNumber": invoice.invoice_number,
        "invoiceDate": invoice.invoice_date.isoformat() if invoice.invoice_date else None,
        "dueDate": invoice.due_date.isoformat() if invoice.due_date else None,
        "customerId": invoice.customer_id,
        "customerDetails": {
            "name": invoice.customer_name,
            "phone": invoice.customer_phone,
            "email": invoice.customer_email,
            "gstin": invoice.customer_gstin,
            "address": invoice.customer_address,
            "city": invoice.customer_city,
            "state": invoice.customer_state,
            "pincode": invoice.customer_pincode,
        },
        "items": [
            {
                "productName": item.product_name,
                "hsnCode": item.hsn_code,
                "description": item.description,
                "quantity": float(item.quantity),
                "unit": item.unit,
                "rate": float(item.rate),
                "gstRate": float(item.gst_rate),
                "discount": float(item.discount),
                "taxableAmount": float(item.taxable_amount),
                "cgst": float(item.cgst),
                "sgst": float(item.sgst),
                "igst": float(item.igst),
                "totalAmount": float(item.total_amount),
            }
            for item in invoice.items
        ],
        "subtotal": float(invoice.subtotal),
        "totalDiscount": float(invoice.total_discount),
        "totalCGST": float(invoice.total_cgst),
        "totalSGST": float(invoice.total_sgst),
        "totalIGST": float(invoice.total_igst),
        "grandTotal": float(invoice.grand_total),
        "amountPaid": float(invoice.amount_paid),
        "amountDue": float(invoice.amount_due),
        "paymentStatus": invoice.payment_status,
        "invoiceType": invoice.invoice_type,
        "notes": invoice.notes,
        "termsConditions": invoice.terms_conditions,
        "isDraft": invoice.is_draft,
    }


def payment_to_dict(payment: Payment) -> dict:
    return {
        "id": payment.id,
        "invoiceId": payment.invoice_id,
        "amount": float(payment.amount),
        "paymentMode": payment.payment_mode,
        "paymentDate": payment.payment_date.isoformat() if payment.payment_date else None,
        "referenceNumber": payment.reference_number,
        "notes": payment.notes,
    }


def payment_with_invoice_to_dict(payment: Payment) -> dict:
    data = payment_to_dict(payment)
    invoice = payment.invoice
    data["invoice"] = {
        "invoiceNumber": invoice.invoice_number,
        "customerName": invoice.customer_name,
        "grandTotal": float(invoice.grand_total),
    }
    return data
