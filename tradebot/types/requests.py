from typing import Optional
from pydantic import BaseModel, Field


class WalletCreateRequest(BaseModel):
    owner_id: str = Field(description="Identifier of the user who owns the wallet")
    name: str = Field(default="Default Wallet", description="Display name for the wallet")


class WalletImportRequest(BaseModel):
    owner_id: str = Field(description="Identifier of the user who owns the wallet")
    private_key: str = Field(description="Hex private key, with or without 0x prefix")
    name: str = Field(default="Imported Wallet", description="Display name for the wallet")


class QuoteRequest(BaseModel):
    from_token: str = Field(description="Symbol or address of the input token")
    to_token: str = Field(description="Symbol or address of the output token")
    amount: str = Field(description="Human-readable input amount")
    network: Optional[str] = Field(default=None, description="Network key (defaults to settings.default_network)")


class SwapBody(BaseModel):
    owner_id: str = Field(description="Owner of the signing wallet")
    wallet_id: Optional[str] = Field(default=None, description="Wallet to sign with (first wallet when omitted)")
    from_token: str = Field(description="Symbol or address of the input token")
    to_token: str = Field(description="Symbol or address of the output token")
    amount: str = Field(description="Human-readable input amount")
    slippage_bps: Optional[int] = Field(default=None, ge=10, le=5000, description="Slippage tolerance in basis points")
    network: Optional[str] = Field(default=None, description="Network key (defaults to settings.default_network)")


class SendBody(BaseModel):
    owner_id: str = Field(description="Owner of the signing wallet")
    wallet_id: Optional[str] = Field(default=None, description="Wallet to sign with (first wallet when omitted)")
    asset: str = Field(description="Native symbol, token symbol or token address")
    to: str = Field(description="Recipient address")
    amount: str = Field(description="Human-readable amount")
    network: Optional[str] = Field(default=None, description="Network key (defaults to settings.default_network)")
