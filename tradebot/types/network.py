from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..services.address import is_evm_address


class TokenInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = Field(description="Token contract address")
    symbol: str = Field(description="Token symbol (e.g. USDC)")
    name: str = Field(description="Full token name")
    decimals: int = Field(ge=0, le=77, description="Token decimal places")
    logo_uri: Optional[str] = Field(default=None, description="Token logo URL")

    @field_validator("address")
    @classmethod
    def _check_address(cls, value: str) -> str:
        if not is_evm_address(value):
            raise ValueError(f"malformed token address: {value!r}")
        return value


class NetworkConfig(BaseModel):
    """Immutable description of one EVM network and its DEX deployment."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Network key (e.g. MONAD)")
    name: str = Field(description="Display name")
    chain_id: int = Field(description="EIP-155 chain id")
    rpc_url: str = Field(description="JSON-RPC endpoint")
    native_currency: str = Field(description="Native currency symbol")
    block_explorer_url: str = Field(description="Block explorer base URL")
    router_address: str = Field(description="Uniswap-V2-style router")
    factory_address: str = Field(description="Pair factory")
    wrapped_native_address: str = Field(description="Wrapped native ERC-20")
    tokens: Dict[str, TokenInfo] = Field(default_factory=dict, description="Known tokens keyed by symbol")
    popular_tokens: List[str] = Field(default_factory=list, description="Extra addresses probed during scans")
    indexer_chain: Optional[str] = Field(default=None, description="Chain slug used by the token indexer")

    @field_validator("router_address", "factory_address", "wrapped_native_address")
    @classmethod
    def _check_contract(cls, value: str) -> str:
        if not is_evm_address(value):
            raise ValueError(f"malformed contract address: {value!r}")
        return value

    @field_validator("popular_tokens")
    @classmethod
    def _check_popular(cls, values: List[str]) -> List[str]:
        for value in values:
            if not is_evm_address(value):
                raise ValueError(f"malformed token address: {value!r}")
        return values

    def token_by_symbol(self, symbol: str) -> Optional[TokenInfo]:
        wanted = symbol.strip().upper()
        for key, info in self.tokens.items():
            if key.upper() == wanted or info.symbol.upper() == wanted:
                return info
        return None

    def token_by_address(self, address: str) -> Optional[TokenInfo]:
        wanted = address.strip().lower()
        for info in self.tokens.values():
            if info.address.lower() == wanted:
                return info
        return None

    def is_native_symbol(self, value: str) -> bool:
        return value.strip().upper() == self.native_currency.upper()

    def is_wrapped_native(self, address: str) -> bool:
        return address.strip().lower() == self.wrapped_native_address.lower()

    def tx_explorer_url(self, tx_hash: str) -> str:
        return f"{self.block_explorer_url}/tx/{tx_hash}"

    def address_explorer_url(self, address: str) -> str:
        return f"{self.block_explorer_url}/address/{address}"
