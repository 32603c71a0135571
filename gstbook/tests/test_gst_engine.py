import pathlib
import sys
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from gstbook.app.constants import GST_RATES, is_valid_gst_rate  # noqa: E402
from gstbook.app.tax.gst_engine import (  # noqa: E402
    InvoiceType,
    classify_invoice,
    resolve_state,
    split_gst,
    validate_gstin,
)

amounts = st.decimals(min_value=0, max_value=10_000_000, places=2)
rates = st.sampled_from(GST_RATES)
states = st.sampled_from(["Delhi", "Haryana", "Maharashtra", "Karnataka"])


@given(taxable=amounts, rate=rates, state=states)
def test_intrastate_splits_evenly(taxable, rate, state):
    tax = split_gst(taxable, rate, state, state)
    expected = taxable * rate / Decimal("100")
    assert tax.cgst == tax.sgst == expected / 2
    assert tax.igst == 0
    assert tax.total == expected


@given(taxable=amounts, rate=rates, pair=st.permutations(["Delhi", "Haryana"]))
def test_interstate_is_all_igst(taxable, rate, pair):
    business_state, customer_state = pair
    tax = split_gst(taxable, rate, business_state, customer_state)
    assert tax.cgst == tax.sgst == 0
    assert tax.igst == taxable * rate / Decimal("100")


def test_split_is_not_rounded():
    tax = split_gst(Decimal("0.10"), 5, "Goa", "Goa")
    assert tax.cgst == Decimal("0.0025")
    assert tax.sgst == Decimal("0.0025")


def test_split_accepts_off_table_rate():
    tax = split_gst(Decimal("100"), Decimal("3"), "Goa", "Kerala")
    assert tax.igst == Decimal("3")


def test_state_comparison_is_case_sensitive():
    tax = split_gst(Decimal("100"), 18, "Delhi", "delhi")
    assert tax.igst == Decimal("18")
    assert tax.cgst == 0


@given(
    business_state=states,
    customer_state=states,
    amount=st.decimals(min_value=0, max_value=100_000_000, places=2),
)
def test_gstin_always_means_b2b(business_state, customer_state, amount):
    result = classify_invoice("27AAAAA0000A1Z5", business_state, customer_state, amount)
    assert result is InvoiceType.B2B


def test_interstate_above_threshold_is_b2cl():
    assert classify_invoice("", "Maharashtra", "Karnataka", 300000) is InvoiceType.B2CL


def test_threshold_itself_is_small():
    assert classify_invoice("", "Maharashtra", "Karnataka", 250000) is InvoiceType.B2CS
    assert (
        classify_invoice(None, "Maharashtra", "Karnataka", Decimal("250000.01"))
        is InvoiceType.B2CL
    )


def test_intrastate_never_large():
    assert classify_invoice("", "Maharashtra", "Maharashtra", 9999999) is InvoiceType.B2CS


def test_blank_gstin_is_unregistered():
    assert classify_invoice("   ", "Delhi", "Haryana", 1180) is InvoiceType.B2CS


def test_resolve_state_falls_back_to_business():
    assert resolve_state("Haryana", "Delhi") == "Haryana"
    assert resolve_state(None, "Delhi") == "Delhi"
    assert resolve_state("  ", "Delhi") == "Delhi"


def test_validate_gstin():
    assert validate_gstin(None)
    assert validate_gstin("")
    assert validate_gstin("27AAAAA0000A1Z5")
    assert not validate_gstin("27aaaaa0000a1z5")
    assert not validate_gstin("27AAAAA0000A1X5")
    assert not validate_gstin("NOTAGSTIN")


def test_rate_table():
    for rate in GST_RATES:
        assert is_valid_gst_rate(rate)
    assert is_valid_gst_rate("18.00")
    assert not is_valid_gst_rate(3)
    assert not is_valid_gst_rate("abc")
