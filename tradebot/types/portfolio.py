from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class BalanceAmount(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: str = Field(description="Exact on-chain integer balance, as a string")
    formatted: str = Field(description="Decimal-shifted human readable balance")


class TokenBalance(BaseModel):
    address: str = Field(description="Token contract address")
    symbol: str = Field(description="Token symbol (e.g. USDC)")
    name: str = Field(description="Full token name")
    decimals: int = Field(description="Token decimal places")
    balance: BalanceAmount = Field(description="Raw and formatted balance")
    logo_uri: Optional[str] = Field(default=None, description="Token logo URL")
    source: str = Field(default="rpc", description="Where the entry was discovered")

    @property
    def raw_balance(self) -> int:
        return int(self.balance.raw)

    @property
    def has_balance(self) -> bool:
        return self.raw_balance > 0


class NativeBalance(BaseModel):
    symbol: str = Field(description="Native currency symbol")
    balance: BalanceAmount = Field(description="Raw and formatted balance")

