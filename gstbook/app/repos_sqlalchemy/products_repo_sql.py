"""SQLAlchemy helpers for the product catalogue.

Products are matched by name case-insensitively. Invoice creation records
each line's product here so the form can suggest frequently billed items.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from ..errors import (
    DuplicateProductError,
    FieldError,
    ProductNotFoundError,
    ValidationError,
)
from ..invoice import LineItem
from ..models import Product
from ..schemas import ProductCreate, ProductUpdate

logger = logging.getLogger("gstbook.products")

SEARCH_MIN_CHARS = 2
SEARCH_LIMIT = 10


def _find_by_name(session: Session, business_id: int, name: str) -> Product | None:
    return session.scalar(
        select(Product)
        .where(
            Product.business_id == business_id,
            func.lower(Product.name) == name.strip().lower(),
        )
        .limit(1)
    )


def _check(fields: dict, *, creating: bool) -> list[FieldError]:
    errors = []
    for name, label in (("name", "name"), ("hsn_code", "hsnCode")):
        if creating or name in fields:
            value = fields.get(name)
            if value is None or not value.strip():
                errors.append(FieldError(label, f"{label} is required"))
    return errors


def create_product(session: Session, business_id: int, payload: ProductCreate) -> Product:
    fields = payload.model_dump()
    errors = _check(fields, creating=True)
    if errors:
        raise ValidationError(errors[0].message, errors)
    name = fields["name"].strip()
    if _find_by_name(session, business_id, name) is not None:
        raise DuplicateProductError(name)

    product = Product(
        business_id=business_id,
        name=name,
        hsn_code=fields["hsn_code"].strip(),
        description=fields["description"],
        usage_count=0,
        is_active=True,
    )
    session.add(product)
    session.commit()
    return product


def get_product(session: Session, business_id: int, product_id: int) -> Product:
    product = session.get(Product, product_id)
    if product is None or product.business_id != business_id:
        raise ProductNotFoundError(product_id)
    return product


def list_products(
    session: Session, business_id: int, search: str | None = None
) -> Sequence[Product]:
    stmt = select(Product).where(
        Product.business_id == business_id, Product.is_active.is_(True)
    )
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Product.name.ilike(pattern), Product.hsn_code.ilike(pattern)))
    return session.scalars(stmt.order_by(Product.usage_count.desc(), Product.name)).all()


def search_products(session: Session, business_id: int, query: str | None) -> list[dict]:
    """Autocomplete suggestions; empty for queries shorter than two characters."""

    if not query or len(query.strip()) < SEARCH_MIN_CHARS:
        return []
    rows = session.scalars(
        select(Product)
        .where(
            Product.business_id == business_id,
            Product.is_active.is_(True),
            Product.name.ilike(f"%{query.strip()}%"),
        )
        .order_by(Product.usage_count.desc(), Product.name)
        .limit(SEARCH_LIMIT)
    ).all()
    return [{"id": p.id, "name": p.name, "hsnCode": p.hsn_code} for p in rows]


def update_product(
    session: Session, business_id: int, product_id: int, payload: ProductUpdate
) -> Product:
    product = get_product(session, business_id, product_id)
    fields = payload.model_dump(exclude_unset=True)
    errors = _check(fields, creating=False)
    if errors:
        raise ValidationError(errors[0].message, errors)
    if "name" in fields:
        name = fields["name"].strip()
        other = _find_by_name(session, business_id, name)
        if other is not None and other.id != product.id:
            raise DuplicateProductError(name)
        product.name = name
    if "hsn_code" in fields:
        product.hsn_code = fields["hsn_code"].strip()
    if "description" in fields:
        product.description = fields["description"]
    session.commit()
    return product


def delete_product(session: Session, business_id: int, product_id: int) -> None:
    product = get_product(session, business_id, product_id)
    product.is_active = False
    session.commit()


def record_usage(session: Session, business_id: int, items: Sequence[LineItem]) -> None:
    """Bump ``usage_count`` for each billed product, creating unknown ones.

    Nothing is flushed here; the caller commits together with the invoice.
    """

    counts: dict[str, list] = {}
    for item in items:
        key = item.product_name.lower()
        if key in counts:
            counts[key][1] += 1
        else:
            counts[key] = [item, 1]

    for key, (item, count) in counts.items():
        product = _find_by_name(session, business_id, key)
        if product is None:
            session.add(
                Product(
                    business_id=business_id,
                    name=item.product_name,
                    hsn_code=item.hsn_code,
                    usage_count=count,
                    is_active=True,
                )
            )
        else:
            product.usage_count = (product.usage_count or 0) + count
    logger.debug("product usage recorded", extra={"business": business_id, "products": len(counts)})


def product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "hsnCode": product.hsn_code,
        "description": product.description,
        "usageCount": product.usage_count,
        "isActive": product.is_active,
    }
