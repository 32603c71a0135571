"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Header


def business_id(x_business_id: int = Header(...)) -> int:
    """Return the business the request acts for.

    Authentication is handled upstream; the gateway forwards the resolved
    business in ``X-Business-ID``.
    """

    return x_business_id
