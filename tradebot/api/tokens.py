from typing import Any, Dict

from fastapi import APIRouter, Depends, Query

from ..services.trading import TradingService
from ..types import ScanResponse, TokenBalance
from .dependencies import trading_service

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("/{network}/resolve")
async def resolve_token(
    network: str,
    query: str = Query(..., description="Symbol or address to resolve"),
    service: TradingService = Depends(trading_service),
) -> Dict[str, Any]:
    resolution = service.resolve_token(query, network)
    return {
        "address": resolution.address,
        "verified": resolution.verified,
        "isNative": resolution.is_native,
        "source": resolution.source.value,
        "symbol": resolution.symbol,
        "decimals": resolution.decimals,
    }


@router.get("/{network}/{address}", response_model=ScanResponse)
async def scan_tokens(
    network: str,
    address: str,
    include_zero: bool = Query(False, description="Include tokens with a zero balance"),
    service: TradingService = Depends(trading_service),
) -> ScanResponse:
    tokens = await service.scan_all_tokens(address, network, include_zero_balances=include_zero)
    return ScanResponse(
        address=address,
        network=network.upper(),
        token_count=len(tokens),
        tokens=tokens,
    )


@router.get("/{network}/{address}/{token}", response_model=TokenBalance)
async def token_balance(
    network: str,
    address: str,
    token: str,
    service: TradingService = Depends(trading_service),
) -> TokenBalance:
    resolved = service.resolve_token(token, network).address
    return await service.get_token_balance(resolved, address, network)
