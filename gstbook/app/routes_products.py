from __future__ import annotations

"""Product catalogue endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .db import get_db
from .deps import business_id
from .repos_sqlalchemy import products_repo_sql as repo
from .schemas import ProductCreate, ProductUpdate
from .utils.responses import ok

router = APIRouter(prefix="/api/products")


# Must stay above /{product_id}.
@router.get("/search")
def search_products(
    q: str | None = None,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.search_products(db, business, q))


@router.get("")
def list_products(
    search: str | None = None,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok([repo.product_to_dict(p) for p in repo.list_products(db, business, search)])


@router.post("", status_code=201)
def create_product(
    payload: ProductCreate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.product_to_dict(repo.create_product(db, business, payload)))


@router.get("/{product_id}")
def get_product(
    product_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.product_to_dict(repo.get_product(db, business, product_id)))


@router.patch("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.product_to_dict(repo.update_product(db, business, product_id, payload)))


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    repo.delete_product(db, business, product_id)
    return ok({"id": product_id})
