from .network import NetworkConfig, TokenInfo
from .portfolio import BalanceAmount, NativeBalance, TokenBalance
from .requests import QuoteRequest, SendBody, SwapBody, WalletCreateRequest, WalletImportRequest
from .responses import ErrorResponse, ScanResponse, WalletResponse

__all__ = [
    "NetworkConfig",
    "TokenInfo",
    "BalanceAmount",
    "NativeBalance",
    "TokenBalance",
    "QuoteRequest",
    "SendBody",
    "SwapBody",
    "WalletCreateRequest",
    "WalletImportRequest",
    "ErrorResponse",
    "ScanResponse",
    "WalletResponse",
]
