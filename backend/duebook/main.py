"""
DueBook backend: shop bookkeeping API.

Shops register customers and record BAKI (debit) / PAID (credit) entries
against them. Each customer carries a running balance that always equals the
opening balance plus effective BAKI minus effective PAID. Entries are
append-only; a mistake is undone by a REVERSAL entry, never by editing.

Access is per shop: OWNER and STAFF write, VIEWER reads. Every mutation is
audit-logged.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from duebook.api.routes import audit_logs, customers, dashboard, ledger, shops
from duebook.core.config import settings
from duebook.core.exceptions import ApplicationError
from duebook.core.logging_config import configure_logging
from duebook.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: configure logging and make sure the tables exist."""
    configure_logging()
    logger.info("Initializing database...")
    init_db()
    logger.info(f"DueBook backend started ({settings.ENVIRONMENT})")
    yield
    logger.info("DueBook backend stopped")


app = FastAPI(
    title="DueBook API",
    description="Customer ledgers, balances and reversals for small shops.",
    version="0.1.0",
    lifespan=lifespan,
)

# SECURITY: Trust only specific hosts
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=["localhost", "127.0.0.1", "testserver"],
)

# SECURITY: Restrict CORS to specific methods and headers (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
    max_age=600,
)


def error_body(request: Request, status_code: int, message: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "errorCode": error_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "status": status_code,
            "path": request.url.path,
        },
    )


@app.exception_handler(ApplicationError)
async def application_error_handler(request: Request, exc: ApplicationError):
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return error_body(request, exc.status_code, exc.message, exc.error_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid request"))
    message = "; ".join(messages) or "Invalid request"
    logger.info(f"Validation failed on {request.url.path}: {message}")
    return error_body(request, status.HTTP_400_BAD_REQUEST, message, "VALIDATION_ERROR")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    codes = {
        status.HTTP_401_UNAUTHORIZED: "UNAUTHORIZED",
        status.HTTP_403_FORBIDDEN: "FORBIDDEN",
        status.HTTP_404_NOT_FOUND: "NOT_FOUND",
        status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    }
    response = error_body(request, exc.status_code, str(exc.detail), codes.get(exc.status_code, "HTTP_ERROR"))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Details stay in the server log; the caller gets a generic message
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return error_body(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred",
        "INTERNAL_ERROR",
    )


app.include_router(ledger.router, prefix="/api/ledger", tags=["ledger"])
app.include_router(customers.router, prefix="/api/customers", tags=["customers"])
app.include_router(shops.router, prefix="/api/shops", tags=["shops"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(audit_logs.router, prefix="/api/audit-logs", tags=["audit-logs"])


@app.get("/health")
def health():
    return {"status": "ok"}
