"""
FastAPI application factory
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.responses import Response

from finwallet.config import get_settings
from finwallet.domain.errors import LedgerError, ErrorKind
from finwallet.infrastructure.db.session import check_db_connection
from finwallet.api.v1 import transactions, subscriptions, budgets, reports

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# ErrorKind -> HTTP status
ERROR_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.INSUFFICIENT_FUNDS: 409,
    ErrorKind.VALIDATION: 422,
    ErrorKind.ALREADY_PAID: 409,
    ErrorKind.INVARIANT: 500,
}


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Catches ALL unexpected exceptions including sync routes"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return Response(content=f"Internal Server Error: {exc}", status_code=500)


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    status_code = ERROR_STATUS.get(exc.kind, 400)
    if status_code >= 500:
        logger.error("Ledger invariant failure on %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind.value, "detail": exc.message},
    )


def create_app() -> FastAPI:
    """
    Application factory - создаёт и настраивает FastAPI приложение

    Returns:
        Настроенный FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title="FinWallet",
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY
    )

    app.add_exception_handler(LedgerError, ledger_error_handler)

    app.include_router(transactions.router)
    app.include_router(subscriptions.router)
    app.include_router(budgets.router)
    app.include_router(reports.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (проверяет доступность БД)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "finwallet.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
