"""Domain errors raised by the billing core and repositories."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single caller-correctable problem with a request field."""

    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class BillingError(ValueError):
    """Base class for billing failures surfaced to the caller."""

    status_code = 400

    def __init__(self, code: str, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.hint = hint


class ValidationError(BillingError):
    """Raised when a request fails validation."""

    def __init__(
        self,
        message: str,
        errors: list[FieldError] | None = None,
        *,
        hint: str | None = None,
    ) -> None:
        super().__init__("VALIDATION", message, hint=hint)
        self.errors = list(errors or [])


class BusinessNotFoundError(BillingError):
    status_code = 404

    def __init__(self, business_id: int) -> None:
        super().__init__("BUSINESS_NOT_FOUND", "Business not found")
        self.business_id = business_id


class InvoiceNotFoundError(BillingError):
    status_code = 404

    def __init__(self, invoice_id: int) -> None:
        super().__init__("INVOICE_NOT_FOUND", "Invoice not found")
        self.invoice_id = invoice_id


class InvoiceLockedError(BillingError):
    """Raised when a paid invoice would be edited or deleted."""

    def __init__(self, action: str) -> None:
        super().__init__(
            "INVOICE_LOCKED",
            f"Cannot {action} paid invoice",
            hint="Paid invoices are immutable",
        )


class AllocationConflictError(BillingError, RuntimeError):
    """Raised when no free invoice number was found within the retry budget."""

    status_code = 500

    def __init__(self, business_id: object, attempts: int) -> None:
        super().__init__(
            "ALLOCATION_CONFLICT",
            f"Could not allocate an invoice number after {attempts} attempts",
        )
        self.business_id = business_id
        self.attempts = attempts


class CustomerNotFoundError(BillingError):
    status_code = 404

    def __init__(self, customer_id: int) -> None:
        super().__init__("CUSTOMER_NOT_FOUND", "Customer not found")
        self.customer_id = customer_id


class ProductNotFoundError(BillingError):
    status_code = 404

    def __init__(self, product_id: int) -> None:
        super().__init__("PRODUCT_NOT_FOUND", "Product not found")
        self.product_id = product_id


class DuplicateProductError(BillingError):
    """Raised when a product name is already taken within the business."""

    def __init__(self, name: str) -> None:
        super().__init__(
            "PRODUCT_EXISTS",
            "Product with this name already exists",
            hint="Product names are matched case-insensitively",
        )
        self.name = name
