import pathlib
import sys
from decimal import Decimal

import pytest
from hypothesis import given
from hypothesis import strategies as st

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from gstbook.app.errors import ValidationError  # noqa: E402
from gstbook.app.invoice import (  # noqa: E402
    LineItem,
    PaymentState,
    PaymentStatus,
    build_invoice,
    payment_status,
    round_money,
)


def _item(qty="2", rate="500", gst="18", discount="0", name="Widget"):
    return LineItem(
        product_name=name,
        hsn_code="8471",
        quantity=Decimal(qty),
        rate=Decimal(rate),
        gst_rate=Decimal(gst),
        discount=Decimal(discount),
    )


def test_intrastate_invoice():
    totals = build_invoice([_item()], "Delhi", "Delhi")
    line = totals.items[0]
    assert line.taxable_amount == Decimal("1000")
    assert line.tax.cgst == Decimal("90")
    assert line.tax.sgst == Decimal("90")
    assert line.tax.igst == 0
    assert line.total_amount == Decimal("1180")
    assert totals.grand_total == Decimal("1180")


def test_interstate_invoice():
    totals = build_invoice([_item()], "Delhi", "Haryana")
    line = totals.items[0]
    assert line.tax.igst == Decimal("180")
    assert line.tax.cgst == line.tax.sgst == 0
    assert totals.total_igst == Decimal("180")
    assert totals.grand_total == Decimal("1180")


def test_discount_and_mixed_rates():
    items = [
        _item(qty="1", rate="1000", gst="5", discount="100"),
        _item(qty="3", rate="50", gst="12"),
    ]
    totals = build_invoice(items, "Goa", "Goa")
    assert totals.subtotal == Decimal("1150")
    assert totals.total_discount == Decimal("100")
    assert totals.total_cgst == Decimal("22.5") + Decimal("9")
    assert totals.total_sgst == totals.total_cgst
    assert totals.grand_total == Decimal("1050") + Decimal("63")
    assert [line.item.product_name for line in totals.items] == ["Widget", "Widget"]


def test_empty_invoice_rejected():
    with pytest.raises(ValidationError) as exc:
        build_invoice([], "Delhi", "Delhi")
    assert "At least one item" in str(exc.value)


def test_rounding_drift_is_bounded():
    # three lines of 0.10 at 5% carry 0.0025 CGST each
    items = [_item(qty="1", rate="0.10", gst="5") for _ in range(3)]
    totals = build_invoice(items, "Goa", "Goa")
    rounded_lines = sum(round_money(line.tax.cgst) for line in totals.items)
    assert rounded_lines == Decimal("0.00")
    assert round_money(totals.total_cgst) == Decimal("0.01")
    assert abs(round_money(totals.total_cgst) - rounded_lines) <= Decimal("0.01") * len(items)


@given(
    lines=st.lists(
        st.tuples(
            st.integers(min_value=1, max_value=50),
            st.decimals(min_value=0, max_value=10000, places=2),
            st.sampled_from([0, 5, 12, 18, 28]),
        ),
        min_size=1,
        max_size=8,
    ),
    same_state=st.booleans(),
)
def test_grand_total_identity(lines, same_state):
    items = [_item(qty=str(q), rate=str(r), gst=str(g)) for q, r, g in lines]
    totals = build_invoice(items, "Delhi", "Delhi" if same_state else "Punjab")
    assert totals.grand_total == (
        totals.subtotal
        - totals.total_discount
        + totals.total_cgst
        + totals.total_sgst
        + totals.total_igst
    )
    assert totals.grand_total == sum(line.total_amount for line in totals.items)


def test_payment_status_rules():
    assert payment_status(Decimal("0"), Decimal("100")) is PaymentStatus.UNPAID
    assert payment_status(Decimal("40"), Decimal("100")) is PaymentStatus.PARTIAL
    assert payment_status(Decimal("100"), Decimal("100")) is PaymentStatus.PAID
    assert payment_status(Decimal("0"), Decimal("0")) is PaymentStatus.UNPAID


@given(
    grand_total=st.decimals(min_value=1, max_value=1_000_000, places=2),
    data=st.data(),
)
def test_payments_keep_amount_due_consistent(grand_total, data):
    state = PaymentState(grand_total=grand_total)
    assert state.status is PaymentStatus.UNPAID
    for instalment in range(5):
        if state.amount_due == 0:
            break
        if instalment == 4:
            amount = state.amount_due
        else:
            amount = data.draw(
                st.decimals(min_value=Decimal("0.01"), max_value=state.amount_due, places=2)
            )
        state.apply_payment(amount)
        assert state.amount_due == state.grand_total - state.amount_paid
        expected = PaymentStatus.PAID if state.amount_due == 0 else PaymentStatus.PARTIAL
        assert state.status is expected
    assert state.status is PaymentStatus.PAID


def test_overpayment_rejected():
    state = PaymentState(grand_total=Decimal("1180"), amount_paid=Decimal("1000"))
    with pytest.raises(ValidationError) as exc:
        state.apply_payment(Decimal("180.01"))
    assert "180.00" in exc.value.message
    assert state.amount_paid == Decimal("1000")
    state.apply_payment(Decimal("180"))
    assert state.status is PaymentStatus.PAID
    assert state.amount_due == 0


def test_non_positive_payment_rejected():
    state = PaymentState(grand_total=Decimal("10"))
    with pytest.raises(ValidationError):
        state.apply_payment(Decimal("0"))
    with pytest.raises(ValidationError):
        state.apply_payment(Decimal("-5"))


def test_round_money_half_up():
    assert round_money(Decimal("0.005")) == Decimal("0.01")
    assert round_money(Decimal("2.675")) == Decimal("2.68")
    assert round_money(7) == Decimal("7.00")
