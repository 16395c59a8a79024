"""
Wallets API

Wallet custody endpoints:
- Generate a wallet (mnemonic returned once)
- Import a private key
- List and delete an owner's wallets

Private keys never appear in responses or logs.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends

from ..core.recovery.errors import WalletNotFoundError
from ..core.wallet import WalletHandle
from ..services.trading import TradingService
from ..types import WalletCreateRequest, WalletImportRequest, WalletResponse
from .dependencies import trading_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wallets", tags=["wallets"])


def _to_response(
    service: TradingService,
    handle: WalletHandle,
    mnemonic: Optional[str] = None,
) -> WalletResponse:
    return WalletResponse(
        wallet_id=handle.wallet_id,
        address=handle.address,
        name=handle.name,
        explorer_url=service.wallets.address_explorer_url(handle.address),
        mnemonic=mnemonic,
    )


@router.post("", response_model=WalletResponse)
async def create_wallet(
    body: WalletCreateRequest,
    service: TradingService = Depends(trading_service),
) -> WalletResponse:
    created = await service.generate_wallet(body.owner_id, body.name)
    return _to_response(service, created.handle, created.mnemonic)


@router.post("/import", response_model=WalletResponse)
async def import_wallet(
    body: WalletImportRequest,
    service: TradingService = Depends(trading_service),
) -> WalletResponse:
    handle = await service.import_wallet(body.owner_id, body.private_key, body.name)
    return _to_response(service, handle)


@router.get("/{owner_id}", response_model=List[WalletResponse])
async def list_wallets(
    owner_id: str,
    service: TradingService = Depends(trading_service),
) -> List[WalletResponse]:
    return [_to_response(service, handle) for handle in await service.list_wallets(owner_id)]


@router.delete("/{owner_id}/{wallet_id}")
async def delete_wallet(
    owner_id: str,
    wallet_id: str,
    service: TradingService = Depends(trading_service),
) -> Dict[str, bool]:
    if not await service.delete_wallet(owner_id, wallet_id):
        raise WalletNotFoundError("Wallet not found.", details={"walletId": wallet_id})
    return {"deleted": True}
