from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from .exceptions import LedgerError

logger = logging.getLogger(__name__)

async def ledger_exception_handler(request: Request, exc: LedgerError):
    """Handle ledger domain exceptions"""
    logger.error(f"Ledger error: {exc.message} - Path: {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "message": exc.message, "type": exc.__class__.__name__}
    )

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.exception(f"Unexpected error: {str(exc)} - Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"ok": False, "message": "Internal server error", "type": "InternalError"}
    )

def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(LedgerError, ledger_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
