# main.py

"""FastAPI application for GST invoicing and reports."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

from . import db as app_db
from .constants import GST_RATES, INDIAN_STATES, PAYMENT_MODES, UNITS
from .errors import BillingError
from .middlewares.request_id import RequestIdMiddleware
from .obs.logging import configure_logging
from .routes_businesses import router as businesses_router
from .routes_customers import router as customers_router
from .routes_invoices import router as invoices_router
from .routes_payments import router as payments_router
from .routes_products import router as products_router
from .routes_reports import router as reports_router
from .utils.responses import billing_error, err, ok

logger = logging.getLogger("gstbook")

settings = get_settings()
configure_logging(settings.log_level, use_json=settings.log_json)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_db.init_db()
    yield


app = FastAPI(title="gstbook", lifespan=lifespan)
app.add_middleware(RequestIdMiddleware)

app.include_router(businesses_router)
app.include_router(customers_router)
app.include_router(products_router)
app.include_router(invoices_router)
app.include_router(payments_router)
app.include_router(reports_router)


@app.get("/health")
async def health() -> dict:
    return ok({"status": "ok"})


@app.get("/api/reference")
async def reference() -> dict:
    """Lookup lists for invoice forms."""
    return ok(
        {
            "gstRates": list(GST_RATES),
            "units": list(UNITS),
            "paymentModes": list(PAYMENT_MODES),
            "states": list(INDIAN_STATES),
        }
    )


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    level = logging.ERROR if exc.status_code >= 500 else logging.INFO
    logger.log(
        level,
        exc.message,
        extra={"status": exc.status_code, "route": request.url.path, "code": exc.code},
    )
    return billing_error(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
        for e in exc.errors()
    ]
    return JSONResponse(err(422, "Invalid request", details), status_code=422)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(
        exc.detail, extra={"status": exc.status_code, "route": request.url.path}
    )
    return JSONResponse(err(exc.status_code, exc.detail), status_code=exc.status_code)


@app.exception_handler(Exception)
async def general_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", extra={"status": 500, "route": request.url.path})
    return JSONResponse(err(500, "Internal Server Error"), status_code=500)
