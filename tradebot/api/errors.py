"""Maps typed trading errors onto HTTP responses."""

import logging
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.chains.registry import UnknownNetworkError
from ..core.recovery.errors import ErrorKind, TradeError
from ..core.wallet import KeyCipherError
from ..types import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.INVALID_AMOUNT: 400,
    ErrorKind.INVALID_ADDRESS: 400,
    ErrorKind.INVALID_KEY: 400,
    ErrorKind.WALLET_NOT_FOUND: 404,
    ErrorKind.DEADLINE_EXPIRED: 409,
    ErrorKind.INSUFFICIENT_FUNDS: 422,
    ErrorKind.NO_LIQUIDITY: 422,
    ErrorKind.LIKELY_REVERT: 422,
    ErrorKind.TRANSFER_FAILED: 422,
    ErrorKind.TRANSACTION_FAILED: 422,
    ErrorKind.PROVIDER_UNAVAILABLE: 503,
    ErrorKind.PENDING_TIMEOUT: 504,
}


def status_for(error: TradeError) -> int:
    return STATUS_BY_KIND.get(error.kind, 400)


async def trade_error_handler(request: Request, exc: TradeError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"{request.url.path} failed ({exc.kind.value}): {exc.message}")
    body = ErrorResponse(
        kind=exc.kind.value,
        message=exc.message,
        reason=exc.reason,
        tx_hash=exc.tx_hash,
        details=exc.details,
    )
    return JSONResponse(status_code=status, content=body.model_dump())


async def unknown_network_handler(request: Request, exc: UnknownNetworkError) -> JSONResponse:
    body = ErrorResponse(kind="UnknownNetwork", message=str(exc.args[0]) if exc.args else "Unknown network")
    return JSONResponse(status_code=404, content=body.model_dump())


async def key_cipher_handler(request: Request, exc: KeyCipherError) -> JSONResponse:
    logger.error(f"Wallet custody unavailable: {exc}")
    body = ErrorResponse(kind="CustodyUnavailable", message="Wallet custody is not available")
    return JSONResponse(status_code=503, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TradeError, trade_error_handler)
    app.add_exception_handler(UnknownNetworkError, unknown_network_handler)
    app.add_exception_handler(KeyCipherError, key_cipher_handler)
