"""Request bodies accepted by the HTTP layer.

Fields are deliberately permissive: presence and range checks happen in
:mod:`gstbook.app.validation` so that every problem is reported at once.
Both ``snake_case`` and the front end's ``camelCase`` keys are accepted.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Body(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomerDetails(_Body):
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    gstin: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class InvoiceItemIn(_Body):
    product_name: str | None = None
    hsn_code: str | None = None
    description: str | None = None
    quantity: Decimal | None = None
    unit: str | None = None
    rate: Decimal | None = None
    gst_rate: Decimal | None = None
    discount: Decimal | None = None


class InvoiceCreate(_Body):
    customer_id: int | None = None
    customer_details: CustomerDetails | None = None
    items: list[InvoiceItemIn] = []
    invoice_date: datetime | None = None
    due_date: date | None = None
    notes: str | None = None
    is_draft: bool = False


class InvoiceUpdate(_Body):
    notes: str | None = None
    due_date: date | None = None


class PaymentCreate(_Body):
    invoice_id: int
    amount: Decimal | None = None
    payment_mode: str | None = None
    payment_date: datetime | None = None
    reference_number: str | None = None
    notes: str | None = None


class BusinessCreate(_Body):
    name: str
    state: str
    gstin: str | None = None
    address: str | None = None
    city: str | None = None
    pincode: str | None = None
    phone: str | None = None
    email: str | None = None
    invoice_prefix: str | None = None
    terms_conditions: str | None = None


class BusinessUpdate(_Body):
    name: str | None = None
    state: str | None = None
    gstin: str | None = None
    invoice_prefix: str | None = None
    terms_conditions: str | None = None


class CustomerCreate(_Body):
    name: str | None = None
    state: str | None = None
    phone: str | None = None
    email: str | None = None
    gstin: str | None = None
    address: str | None = None
    city: str | None = None
    pincode: str | None = None
    customer_type: str | None = Field(None, alias="type")


class CustomerUpdate(CustomerCreate):
    pass


class ProductCreate(_Body):
    name: str | None = None
    hsn_code: str | None = None
    description: str | None = None


class ProductUpdate(ProductCreate):
    pass
