import pathlib
import sys
from datetime import date
from decimal import Decimal

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from gstbook.app.errors import ValidationError  # noqa: E402
from gstbook.app.schemas import InvoiceCreate, PaymentCreate  # noqa: E402
from gstbook.app.validation import (  # noqa: E402
    validate_invoice_request,
    validate_payment_request,
    validate_report_range,
)


def _request(**overrides):
    body = {
        "customerDetails": {"name": "Ravi Stores", "state": "Delhi"},
        "items": [
            {
                "productName": "Rice 5kg",
                "hsnCode": "1006",
                "quantity": "2",
                "rate": "500",
                "gstRate": "5",
            }
        ],
    }
    body.update(overrides)
    return InvoiceCreate.model_validate(body)


def _fields(result):
    return [e.field for e in result.errors]


def test_valid_request_builds_line_items():
    result = validate_invoice_request(_request())
    assert result.ok
    (item,) = result.unwrap()
    assert item.product_name == "Rice 5kg"
    assert item.quantity == Decimal("2")
    assert item.discount == 0
    assert item.unit == "PCS"


def test_missing_customer_name():
    result = validate_invoice_request(_request(customerDetails={"name": "  "}))
    assert _fields(result) == ["customerDetails.name"]
    with pytest.raises(ValidationError) as exc:
        result.unwrap()
    assert exc.value.message == "Customer name is required"


def test_bad_gstin():
    result = validate_invoice_request(
        _request(customerDetails={"name": "Ravi", "gstin": "12345"})
    )
    assert _fields(result) == ["customerDetails.gstin"]


def test_lowercase_gstin_rejected_but_padding_ignored():
    padded = validate_invoice_request(
        _request(customerDetails={"name": "Ravi", "gstin": " 27AAAAA0000A1Z5 "})
    )
    assert padded.ok
    lower = validate_invoice_request(
        _request(customerDetails={"name": "Ravi", "gstin": "27aaaaa0000a1z5"})
    )
    assert not lower.ok


def test_no_items():
    result = validate_invoice_request(_request(items=[]))
    assert _fields(result) == ["items"]
    assert result.errors[0].message == "At least one item is required"


def test_every_item_problem_is_reported():
    result = validate_invoice_request(
        _request(
            items=[
                {"productName": "A", "hsnCode": "1", "quantity": 1, "rate": 10},
                {"productName": "B", "hsnCode": "2", "quantity": 1, "rate": 10, "gstRate": 3},
                {"productName": "C", "hsnCode": "3", "quantity": -1, "rate": 10, "gstRate": 5},
                {
                    "productName": "D",
                    "hsnCode": "4",
                    "quantity": 1,
                    "rate": 10,
                    "gstRate": 5,
                    "discount": 11,
                },
            ]
        )
    )
    assert _fields(result) == [
        "items[0].gstRate",
        "items[1].gstRate",
        "items[2].quantity",
        "items[3].discount",
    ]
    assert result.value is None


def test_zero_rate_is_allowed():
    result = validate_invoice_request(
        _request(
            items=[{"productName": "Milk", "hsnCode": "0401", "quantity": 1, "rate": 60, "gstRate": 0}]
        )
    )
    assert result.ok


def test_item_precision_matches_stored_scale():
    result = validate_invoice_request(
        _request(
            items=[
                {"productName": "A", "hsnCode": "1", "quantity": "0.0005", "rate": "1000", "gstRate": 5},
                {"productName": "B", "hsnCode": "2", "quantity": "1", "rate": "10.005", "gstRate": 5},
                {
                    "productName": "C",
                    "hsnCode": "3",
                    "quantity": "1",
                    "rate": "10",
                    "gstRate": 5,
                    "discount": "0.001",
                },
            ]
        )
    )
    assert _fields(result) == ["items[0].quantity", "items[1].rate", "items[2].discount"]
    assert result.errors[0].message == "quantity can have at most 3 decimal places"

    trailing_zeros = validate_invoice_request(
        _request(
            items=[{"productName": "A", "hsnCode": "1", "quantity": "1.500", "rate": "99.90", "gstRate": 5}]
        )
    )
    assert trailing_zeros.ok


def test_payment_validation():
    ok = validate_payment_request(
        PaymentCreate.model_validate({"invoiceId": 1, "amount": "100.50", "paymentMode": "UPI"})
    )
    assert ok.unwrap() == Decimal("100.50")

    bad = validate_payment_request(
        PaymentCreate.model_validate({"invoiceId": 1, "amount": 0, "paymentMode": "BARTER"})
    )
    assert _fields(bad) == ["amount", "paymentMode"]

    missing = validate_payment_request(PaymentCreate(invoice_id=1))
    assert _fields(missing) == ["amount", "paymentMode"]


def test_report_range():
    assert validate_report_range(date(2025, 4, 1), date(2025, 4, 30)).ok
    assert validate_report_range(date(2025, 4, 1), date(2025, 4, 1)).ok

    missing = validate_report_range(None, date(2025, 4, 30))
    assert missing.errors[0].message == "Start date and end date are required"

    reversed_range = validate_report_range(date(2025, 5, 1), date(2025, 4, 1))
    assert reversed_range.errors[0].message == "Start date must be before end date"
