"""SQLAlchemy helpers for saved customers.

Deleting a customer only deactivates it; invoices keep their link and their
own copy of the customer details.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from ..errors import CustomerNotFoundError, FieldError, ValidationError
from ..models import Customer
from ..schemas import CustomerCreate, CustomerUpdate
from ..tax.gst_engine import validate_gstin

logger = logging.getLogger("gstbook.customers")

CUSTOMER_TYPES = ("B2B", "B2C")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check(fields: dict, *, creating: bool) -> list[FieldError]:
    errors: list[FieldError] = []
    for name in ("name", "state"):
        if (creating or name in fields) and not _clean(fields.get(name)):
            errors.append(FieldError(name, f"{name} is required"))
    gstin = _clean(fields.get("gstin"))
    if gstin and not validate_gstin(gstin.upper()):
        errors.append(FieldError("gstin", "Invalid GSTIN format"))
    kind = fields.get("customer_type")
    if kind is not None and kind not in CUSTOMER_TYPES:
        errors.append(FieldError("type", "type must be one of B2B, B2C"))
    return errors


def _normalise(fields: dict) -> dict:
    out = {}
    for key, value in fields.items():
        value = _clean(value) if isinstance(value, str) else value
        if key == "gstin" and value:
            value = value.upper()
        elif key == "email" and value:
            value = value.lower()
        out[key] = value
    return out


def create_customer(session: Session, business_id: int, payload: CustomerCreate) -> Customer:
    fields = payload.model_dump()
    errors = _check(fields, creating=True)
    if errors:
        raise ValidationError(errors[0].message, errors)

    fields = _normalise(fields)
    if not fields["customer_type"]:
        fields["customer_type"] = "B2B" if fields["gstin"] else "B2C"
    customer = Customer(business_id=business_id, usage_count=0, is_active=True, **fields)
    session.add(customer)
    session.commit()
    logger.info("customer created", extra={"business": business_id, "customer": customer.id})
    return customer


def get_customer(session: Session, business_id: int, customer_id: int) -> Customer:
    customer = session.get(Customer, customer_id)
    if customer is None or customer.business_id != business_id:
        raise CustomerNotFoundError(customer_id)
    return customer


def list_customers(
    session: Session,
    business_id: int,
    search: str | None = None,
    customer_type: str | None = None,
) -> Sequence[Customer]:
    """Active customers, newest first.

    ``search`` matches name, phone or GSTIN case-insensitively.
    """

    stmt = select(Customer).where(
        Customer.business_id == business_id, Customer.is_active.is_(True)
    )
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(
            or_(
                Customer.name.ilike(pattern),
                Customer.phone.ilike(pattern),
                Customer.gstin.ilike(pattern),
            )
        )
    if customer_type:
        stmt = stmt.where(Customer.customer_type == customer_type)
    return session.scalars(stmt.order_by(Customer.created_at.desc(), Customer.id.desc())).all()


def update_customer(
    session: Session, business_id: int, customer_id: int, payload: CustomerUpdate
) -> Customer:
    customer = get_customer(session, business_id, customer_id)
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("customer_type", "") is None:
        del fields["customer_type"]
    errors = _check(fields, creating=False)
    if errors:
        raise ValidationError(errors[0].message, errors)
    for key, value in _normalise(fields).items():
        setattr(customer, key, value)
    session.commit()
    return customer


def delete_customer(session: Session, business_id: int, customer_id: int) -> None:
    customer = get_customer(session, business_id, customer_id)
    customer.is_active = False
    session.commit()
    logger.info("customer deactivated", extra={"business": business_id, "customer": customer_id})


def customer_to_dict(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "email": customer.email,
        "gstin": customer.gstin,
        "address": customer.address,
        "city": customer.city,
        "state": customer.state,
        "pincode": customer.pincode,
        "type": customer.customer_type,
        "usageCount": customer.usage_count,
        "isActive": customer.is_active,
    }
