from __future__ import annotations

"""Business profile endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .db import get_db
from .repos_sqlalchemy import businesses_repo_sql as repo
from .schemas import BusinessCreate, BusinessUpdate
from .utils.responses import ok

router = APIRouter(prefix="/api/businesses")


@router.post("", status_code=201)
def create_business(payload: BusinessCreate, db: Session = Depends(get_db)) -> dict:
    return ok(repo.business_to_dict(repo.create_business(db, payload)))


@router.get("/{business_id}")
def get_business(business_id: int, db: Session = Depends(get_db)) -> dict:
    return ok(repo.business_to_dict(repo.get_business(db, business_id)))


@router.patch("/{business_id}")
def update_business(
    business_id: int, payload: BusinessUpdate, db: Session = Depends(get_db)
) -> dict:
    return ok(repo.business_to_dict(repo.update_business(db, business_id, payload)))
