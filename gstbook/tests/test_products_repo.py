import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from gstbook.app.errors import (  # noqa: E402
    DuplicateProductError,
    ProductNotFoundError,
    ValidationError,
)
from gstbook.app.invoice import LineItem  # noqa: E402
from gstbook.app.repos_sqlalchemy import products_repo_sql as repo  # noqa: E402
from gstbook.app.schemas import ProductCreate, ProductUpdate  # noqa: E402


def _create(db, business_id, name="Basmati Rice", hsn="1006", **fields):
    payload = ProductCreate.model_validate({"name": name, "hsnCode": hsn, **fields})
    return repo.create_product(db, business_id, payload)


def _line(name, hsn="1006"):
    return LineItem(product_name=name, hsn_code=hsn, quantity=1, rate=10, gst_rate=5)


def test_create_and_duplicate_name(db, make_business):
    business = make_business()
    product = _create(db, business.id, name="  Basmati Rice ")
    assert product.name == "Basmati Rice"
    assert product.usage_count == 0

    with pytest.raises(DuplicateProductError) as exc:
        _create(db, business.id, name="BASMATI rice")
    assert exc.value.status_code == 400

    # Same name in another business is fine.
    _create(db, make_business(name="Other", prefix="OTH").id)


def test_name_and_hsn_required(db, make_business):
    with pytest.raises(ValidationError) as exc:
        _create(db, make_business().id, name="", hsn=None)
    assert [e.field for e in exc.value.errors] == ["name", "hsnCode"]


def test_usage_orders_list_and_search(db, make_business):
    business = make_business()
    _create(db, business.id, name="Rice Flour", hsn="1102")
    repo.record_usage(
        db, business.id, [_line("Basmati Rice"), _line("basmati rice"), _line("Rice Bran", "2302")]
    )
    db.commit()

    listed = repo.list_products(db, business.id)
    assert [(p.name, p.usage_count) for p in listed] == [
        ("Basmati Rice", 2),
        ("Rice Bran", 1),
        ("Rice Flour", 0),
    ]
    assert [p["name"] for p in repo.search_products(db, business.id, "rice")] == [
        "Basmati Rice",
        "Rice Bran",
        "Rice Flour",
    ]
    assert [p.name for p in repo.list_products(db, business.id, search="2302")] == ["Rice Bran"]


def test_short_search_returns_nothing(db, make_business):
    business = make_business()
    rice = _create(db, business.id)
    assert repo.search_products(db, business.id, None) == []
    assert repo.search_products(db, business.id, " r ") == []
    assert repo.search_products(db, business.id, "ri") == [
        {"id": rice.id, "name": "Basmati Rice", "hsnCode": "1006"}
    ]


def test_search_is_capped(db, make_business):
    business = make_business()
    for n in range(12):
        _create(db, business.id, name=f"Item {n:02d}", hsn="9999")
    assert len(repo.search_products(db, business.id, "item")) == repo.SEARCH_LIMIT


def test_update_and_soft_delete(db, make_business):
    business = make_business()
    rice = _create(db, business.id)
    dal = _create(db, business.id, name="Toor Dal", hsn="0713")

    with pytest.raises(DuplicateProductError):
        repo.update_product(db, business.id, dal.id, ProductUpdate(name="basmati rice"))
    renamed = repo.update_product(
        db, business.id, rice.id, ProductUpdate.model_validate({"hsnCode": "10063010"})
    )
    assert renamed.hsn_code == "10063010"
    assert renamed.name == "Basmati Rice"

    repo.delete_product(db, business.id, rice.id)
    assert [p.id for p in repo.list_products(db, business.id)] == [dal.id]
    assert repo.search_products(db, business.id, "basmati") == []


def test_inactive_product_still_counts_usage(db, make_business):
    business = make_business()
    rice = _create(db, business.id)
    repo.delete_product(db, business.id, rice.id)
    repo.record_usage(db, business.id, [_line("Basmati Rice")])
    db.commit()
    assert repo.get_product(db, business.id, rice.id).usage_count == 1
    assert len(repo.list_products(db, business.id)) == 0


def test_products_are_scoped_to_business(db, make_business):
    owner = make_business()
    other = make_business(name="Other", prefix="OTH")
    product = _create(db, owner.id)
    with pytest.raises(ProductNotFoundError):
        repo.get_product(db, other.id, product.id)
