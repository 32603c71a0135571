from __future__ import annotations

"""Saved customer endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .db import get_db
from .deps import business_id
from .repos_sqlalchemy import customers_repo_sql as repo
from .schemas import CustomerCreate, CustomerUpdate
from .utils.responses import ok

router = APIRouter(prefix="/api/customers")


@router.post("", status_code=201)
def create_customer(
    payload: CustomerCreate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.customer_to_dict(repo.create_customer(db, business, payload)))


@router.get("")
def list_customers(
    search: str | None = None,
    customer_type: str | None = Query(None, alias="type"),
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    customers = repo.list_customers(db, business, search, customer_type)
    return ok([repo.customer_to_dict(c) for c in customers])


@router.get("/{customer_id}")
def get_customer(
    customer_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    return ok(repo.customer_to_dict(repo.get_customer(db, business, customer_id)))


@router.patch("/{customer_id}")
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    customer = repo.update_customer(db, business, customer_id, payload)
    return ok(repo.customer_to_dict(customer))


@router.delete("/{customer_id}")
def delete_customer(
    customer_id: int,
    business: int = Depends(business_id),
    db: Session = Depends(get_db),
) -> dict:
    repo.delete_customer(db, business, customer_id)
    return ok({"id": customer_id})
