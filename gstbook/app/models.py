"""Database models for businesses, customers, products, invoices and payments.

The models carry no application wiring so they can be used from tests or
scripts independently. Money columns hold two decimals; the unrounded
figures only exist while an invoice is being built.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    event,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

from .constants import DEFAULT_INVOICE_PREFIX, DEFAULT_TERMS
from .invoice import PaymentState

Base = declarative_base()


class Business(Base):
    """A billing business and its invoice numbering state."""

    __tablename__ = "businesses"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    gstin = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=False)
    pincode = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    invoice_prefix = Column(String, nullable=False, default=DEFAULT_INVOICE_PREFIX)
    invoice_counter = Column(Integer, nullable=False, default=0)
    terms_conditions = Column(Text, nullable=True, default=DEFAULT_TERMS)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Customer(Base):
    """A saved customer, listed in the invoice form."""

    __tablename__ = "customers"
    __table_args__ = (
        Index("ix_customers_business_name", "business_id", "name"),
        Index("ix_customers_business_phone", "business_id", "phone"),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    gstin = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=False)
    pincode = Column(String, nullable=True)
    customer_type = Column(String, nullable=False, default="B2C")
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Product(Base):
    """Product names remembered for autocomplete, ranked by usage."""

    __tablename__ = "products"
    __table_args__ = (
        Index("ix_products_business_name", "business_id", "name"),
        Index("ix_products_business_usage", "business_id", "usage_count"),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    name = Column(String, nullable=False)
    hsn_code = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Invoice(Base):
    """A tax invoice with its computed totals."""

    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_business_date", "business_id", "invoice_date"),
        Index("ix_invoices_business_status", "business_id", "payment_status"),
    )

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    invoice_number = Column(String, unique=True, nullable=False)
    invoice_date = Column(DateTime, nullable=False, server_default=func.now())
    due_date = Column(Date, nullable=True)

    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    customer_gstin = Column(String, nullable=True)
    customer_address = Column(String, nullable=True)
    customer_city = Column(String, nullable=True)
    customer_state = Column(String, nullable=False)
    customer_pincode = Column(String, nullable=True)

    subtotal = Column(Numeric(14, 2), nullable=False)
    total_discount = Column(Numeric(14, 2), nullable=False, default=0)
    total_cgst = Column(Numeric(14, 2), nullable=False, default=0)
    total_sgst = Column(Numeric(14, 2), nullable=False, default=0)
    total_igst = Column(Numeric(14, 2), nullable=False, default=0)
    grand_total = Column(Numeric(14, 2), nullable=False)
    amount_paid = Column(Numeric(14, 2), nullable=False, default=0)
    amount_due = Column(Numeric(14, 2), nullable=False, default=0)
    payment_status = Column(String, nullable=False, default="unpaid")
    invoice_type = Column(String, nullable=False)

    notes = Column(Text, nullable=True)
    terms_conditions = Column(Text, nullable=True)
    is_draft = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    items = relationship(
        "InvoiceItem",
        order_by="InvoiceItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    payments = relationship(
        "Payment",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="Payment.payment_date",
    )

    def payment_state(self) -> PaymentState:
        return PaymentState(
            grand_total=self.grand_total, amount_paid=self.amount_paid or 0
        )


class InvoiceItem(Base):
    """Line items belonging to an invoice, in entry order."""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
    )
    position = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    hsn_code = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(14, 3), nullable=False)
    unit = Column(String, nullable=False)
    rate = Column(Numeric(14, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), nullable=False)
    discount = Column(Numeric(14, 2), nullable=False, default=0)
    taxable_amount = Column(Numeric(14, 2), nullable=False)
    cgst = Column(Numeric(14, 2), nullable=False, default=0)
    sgst = Column(Numeric(14, 2), nullable=False, default=0)
    igst = Column(Numeric(14, 2), nullable=False, default=0)
    total_amount = Column(Numeric(14, 2), nullable=False)


class Payment(Base):
    """Payments recorded against invoices."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False)
    invoice_id = Column(
        Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False
    )
    amount = Column(Numeric(14, 2), nullable=False)
    payment_mode = Column(String, nullable=False)
    payment_date = Column(DateTime, nullable=False, server_default=func.now())
    reference_number = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    invoice = relationship("Invoice", back_populates="payments")


@event.listens_for(Invoice, "before_insert")
@event.listens_for(Invoice, "before_update")
def _sync_payment_fields(mapper, connection, target: Invoice) -> None:
    """Derive ``amount_due`` and ``payment_status`` on every write."""

    state = target.payment_state()
    target.amount_due = state.amount_due
    target.payment_status = state.status.value


__all__ = ["Base", "Business", "Customer", "Invoice", "InvoiceItem", "Payment", "Product"]
