import json
import logging
from typing import Any, AsyncIterator, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from ..config import settings
from ..core.swap.models import SwapRequest
from ..services.trading import TradingService
from ..types import QuoteRequest, SendBody, SwapBody
from .dependencies import trading_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _swap_request(body: SwapBody) -> SwapRequest:
    return SwapRequest(
        from_token=body.from_token,
        to_token=body.to_token,
        amount_in=body.amount,
        slippage_bps=body.slippage_bps if body.slippage_bps is not None else settings.default_slippage_bps,
        network=body.network,
    )


@router.post("/swap/quote")
async def post_swap_quote(
    req: QuoteRequest,
    service: TradingService = Depends(trading_service),
) -> Dict[str, Any]:
    quote = await service.quote(req.from_token, req.to_token, req.amount, req.network)
    return quote.to_dict()


@router.post("/swap")
async def post_swap(
    body: SwapBody,
    service: TradingService = Depends(trading_service),
) -> Dict[str, Any]:
    receipt = await service.execute_swap(body.owner_id, _swap_request(body), body.wallet_id)
    return receipt.to_dict()


@router.post("/swap/stream")
async def post_swap_stream(
    body: SwapBody,
    service: TradingService = Depends(trading_service),
) -> StreamingResponse:
    """Newline-delimited JSON, one line per stage."""
    request = _swap_request(body)
    # Fail before the response starts when the wallet is missing
    await service.get_wallet_details(body.owner_id, body.wallet_id)

    async def lines() -> AsyncIterator[str]:
        async for event in service.stream_swap(body.owner_id, request, body.wallet_id):
            yield json.dumps(event.to_dict()) + "\n"

    return StreamingResponse(lines(), media_type="application/x-ndjson")


@router.post("/send")
async def post_send(
    body: SendBody,
    service: TradingService = Depends(trading_service),
) -> Dict[str, Any]:
    receipt = await service.send_asset(
        body.owner_id,
        body.asset,
        body.to,
        body.amount,
        network=body.network,
        wallet_id=body.wallet_id,
    )
    return receipt.to_dict()
