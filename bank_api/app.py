import logging
import uuid
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .api import router
from .errors import (
    AccountNotFound,
    DuplicateAccount,
    InsufficientFunds,
    InvalidAmount,
    InvalidTransactionType,
    LedgerError,
)
from .logger_config import request_id_var, setup_logging
from .repo import get_registry
from .seed import seed_if_empty

# ---- logging ----
setup_logging()
log = logging.getLogger("app")

# ---- status -> code mapping ----
STATUS_TO_CODE = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "UNPROCESSABLE_ENTITY",
    500: "INTERNAL_SERVER_ERROR",
}
def code_for(status: int) -> str:
    return STATUS_TO_CODE.get(status, f"HTTP_{status}")

# ---- ledger error -> status mapping ----
LEDGER_STATUS = {
    AccountNotFound: 404,
    DuplicateAccount: 409,
    InvalidAmount: 400,
    InvalidTransactionType: 400,
    InsufficientFunds: 400,
}
def status_for(exc: LedgerError) -> int:
    for cls in type(exc).__mro__:
        if cls in LEDGER_STATUS:
            return LEDGER_STATUS[cls]
    return 400

def error_response(status: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content={"error": {"code": code_for(status), "message": message}},
    )

def cors_origins() -> list[str]:
    raw = os.getenv("BANK_CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()]

# ---- middleware ----
class EnforceJSONMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method in {"POST", "PUT", "PATCH"}:
            ct = request.headers.get("content-type", "").split(";")[0].strip().lower()
            if ct != "application/json":
                log.warning("Unsupported media type: %s %s", request.method, request.url.path)
                return error_response(415, "Content-Type must be application/json")
        return await call_next(request)

class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            return response
        finally:
            request_id_var.reset(token)

# ---- lifespan ----
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    if os.getenv("BANK_DISABLE_SEED") != "1":
        seed_if_empty(get_registry())
    log.info("Bank Account API started")
    try:
        yield
    finally:
        # Shutdown
        log.info("Bank Account API stopped")

def create_app() -> FastAPI:
    app = FastAPI(title="Bank Account API", lifespan=lifespan)

    # middleware
    app.add_middleware(EnforceJSONMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # exception handlers
    @app.exception_handler(LedgerError)
    async def ledger_handler(request: Request, exc: LedgerError):
        status = status_for(exc)
        log.info("%s %s -> %s (%s)", request.method, request.url.path, status, exc.message)
        return error_response(status, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        msg = "Invalid request."
        errors = exc.errors()
        if errors:
            err = errors[0]
            loc = ".".join(str(x) for x in err.get("loc", []))
            detail = err.get("msg", "")
            msg = f"{loc}: {detail}" if loc else (detail or msg)
        log.warning("422 validation: %s %s -> %s", request.method, request.url.path, msg)
        return error_response(422, msg)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else code_for(exc.status_code).replace("_", " ").title()
        log.warning("%s %s -> %s (%s)", request.method, request.url.path, exc.status_code, detail)
        return error_response(exc.status_code, str(detail))

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        return error_response(500, "An unexpected error occurred.")

    # routers
    app.include_router(router)
    return app

app = create_app()
