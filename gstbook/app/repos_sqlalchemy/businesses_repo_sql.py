"""SQLAlchemy helpers for business records."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from config import get_settings

from ..errors import BusinessNotFoundError, FieldError, ValidationError
from ..models import Business
from ..schemas import BusinessCreate, BusinessUpdate
from ..tax.gst_engine import validate_gstin

logger = logging.getLogger("gstbook.businesses")


def _check_gstin(gstin: str | None) -> str | None:
    if not gstin or not gstin.strip():
        return None
    gstin = gstin.strip().upper()
    if not validate_gstin(gstin):
        raise ValidationError(
            "Invalid GSTIN format", [FieldError("gstin", "Invalid GSTIN format")]
        )
    return gstin


def create_business(session: Session, payload: BusinessCreate) -> Business:
    errors = [
        FieldError(name, f"{name} is required")
        for name, value in (("name", payload.name), ("state", payload.state))
        if not value.strip()
    ]
    if errors:
        raise ValidationError(errors[0].message, errors)

    business = Business(
        name=payload.name.strip(),
        state=payload.state.strip(),
        gstin=_check_gstin(payload.gstin),
        address=payload.address,
        city=payload.city,
        pincode=payload.pincode,
        phone=payload.phone,
        email=payload.email.lower() if payload.email else None,
        invoice_prefix=(payload.invoice_prefix or get_settings().default_invoice_prefix).strip(),
        invoice_counter=0,
    )
    if payload.terms_conditions:
        business.terms_conditions = payload.terms_conditions
    session.add(business)
    session.commit()
    session.refresh(business)
    logger.info("business created", extra={"business": business.id})
    return business


def get_business(session: Session, business_id: int) -> Business:
    business = session.get(Business, business_id)
    if business is None:
        raise BusinessNotFoundError(business_id)
    return business


def update_business(session: Session, business_id: int, payload: BusinessUpdate) -> Business:
    """Apply the fields present in ``payload``.

    Changing the prefix starts a new series; the counter is left alone and
    the allocator re-syncs it against numbers already issued.
    """

    business = get_business(session, business_id)
    fields = payload.model_dump(exclude_unset=True)
    if "gstin" in fields:
        business.gstin = _check_gstin(fields.pop("gstin"))
    for key, value in fields.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        setattr(business, key, value.strip() if isinstance(value, str) else value)
    session.commit()
    session.refresh(business)
    return business


def business_to_dict(business: Business) -> dict:
    return {
        "id": business.id,
        "name": business.name,
        "gstin": business.gstin,
        "address": business.address,
        "city": business.city,
        "state": business.state,
        "pincode": business.pincode,
        "phone": business.phone,
        "email": business.email,
        "invoicePrefix": business.invoice_prefix,
        "invoiceCounter": business.invoice_counter,
        "termsConditions": business.terms_conditions,
    }
