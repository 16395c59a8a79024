from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from .portfolio import TokenBalance


class ErrorResponse(BaseModel):
    kind: str = Field(description="Error kind (e.g. InsufficientFunds)")
    message: str = Field(description="Short human readable message")
    reason: Optional[str] = Field(default=None, description="Underlying reason from the node or contract")
    tx_hash: Optional[str] = Field(default=None, description="Transaction hash when one was produced")
    details: Dict[str, Any] = Field(default_factory=dict, description="Structured diagnostic detail")


class WalletResponse(BaseModel):
    wallet_id: str = Field(description="Wallet identifier")
    address: str = Field(description="Checksummed wallet address")
    name: str = Field(description="Wallet display name")
    explorer_url: Optional[str] = Field(default=None, description="Block explorer link for the address")
    mnemonic: Optional[str] = Field(default=None, description="Recovery phrase, only returned on generation")


class ScanResponse(BaseModel):
    address: str = Field(description="Wallet address that was scanned")
    network: str = Field(description="Network key")
    token_count: int = Field(description="Number of tokens returned")
    tokens: List[TokenBalance] = Field(description="Token balances")
