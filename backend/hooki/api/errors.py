"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hooki.api.request_id import get_request_id
from hooki.domain.errors import HookiError

RETRY_AFTER_SECONDS = "1"


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(HookiError)
	async def hooki_exc_handler(request: Request, exc: HookiError):  # type: ignore[override]
		rid = get_request_id(request)
		payload = {"detail": exc.reason, "request_id": rid}
		headers = {"X-Request-Id": rid}
		if exc.retryable:
			headers["Retry-After"] = RETRY_AFTER_SECONDS
		return JSONResponse(status_code=exc.status_code, content=payload, headers=headers)

	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		rid = get_request_id(request)
		payload = {"detail": exc.detail, "request_id": rid}
		return JSONResponse(status_code=exc.status_code, content=payload)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		rid = get_request_id(request)
		payload = {"detail": "validation_error", "errors": exc.errors(), "request_id": rid}
		return JSONResponse(status_code=422, content=jsonable_encoder(payload))
