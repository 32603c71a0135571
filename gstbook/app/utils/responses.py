from typing import Any, Dict, Iterable

from fastapi.responses import JSONResponse


def ok(data: Any) -> Dict[str, Any]:
    """Return a success envelope."""
    return {"ok": True, "data": data}


def _detail(item: Any) -> Any:
    return item.as_dict() if hasattr(item, "as_dict") else item


def err(
    code: int | str,
    message: str,
    details: Iterable[Any] | None = None,
    hint: str | None = None,
) -> Dict[str, Any]:
    """Return an error envelope tagged with the current request id.

    ``details`` may hold plain dicts or :class:`~gstbook.app.errors.FieldError`
    objects.
    """
    from ..middlewares.request_id import request_id_ctx

    error: Dict[str, Any] = {"code": code, "message": message}
    if hint:
        error["hint"] = hint
    details = [_detail(d) for d in details or ()]
    if details:
        error["details"] = details

    return {"ok": False, "request_id": request_id_ctx.get(None), "error": error}


def billing_error(exc) -> JSONResponse:
    """Render a :class:`~gstbook.app.errors.BillingError` as a JSON response."""
    return JSONResponse(
        err(exc.code, exc.message, getattr(exc, "errors", None), exc.hint),
        status_code=exc.status_code,
    )
