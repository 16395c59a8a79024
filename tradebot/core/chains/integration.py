"""
Per-network capability set.

``ChainIntegration`` is the interface callers program against; the EVM
implementation below serves every router-style network in the registry.
Use ``get_chain_integration`` rather than constructing one directly.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Dict, List, Optional, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ...providers.rpc import RpcClient, RpcError, get_rpc_client
from ...services.address import is_evm_address, is_zero_address
from ...services.amounts import format_units, parse_units
from ...services.token_resolution import resolve_token
from ...services.token_scanner import TokenScanner
from ...types.network import NetworkConfig
from ...types.portfolio import NativeBalance, TokenBalance
from ..execution import abi
from ..execution.executor import TransactionExecutor
from ..execution.models import PreparedTransaction, TransactionStatus, TransferReceipt
from ..execution.tx_builder import TransactionBuilder
from ..recovery.errors import (
    InsufficientFundsError,
    InvalidAddressError,
    InvalidKeyError,
    LikelyRevertError,
    TransferFailedError,
)
from ..swap.executor import SwapExecutor
from ..swap.models import SwapEvent, SwapQuote, SwapReceipt, SwapRequest
from ..swap.quote import QuoteEngine
from .registry import get_network


logger = logging.getLogger(__name__)


class ChainIntegration(ABC):
    """Balance, swap and transfer operations for one network and wallet."""

    network: NetworkConfig

    @abstractmethod
    async def get_native_balance(self, address: Optional[str] = None) -> NativeBalance:
        pass

    @abstractmethod
    async def get_token_balance(self, token_address: str, address: Optional[str] = None) -> TokenBalance:
        pass

    @abstractmethod
    async def scan_all_tokens(
        self,
        address: Optional[str] = None,
        include_zero_balances: bool = False,
    ) -> List[TokenBalance]:
        pass

    @abstractmethod
    async def quote(self, from_token: str, to_token: str, amount: str) -> SwapQuote:
        pass

    @abstractmethod
    async def swap_exact_in(self, request: SwapRequest) -> SwapReceipt:
        pass

    @abstractmethod
    def stream_swap(self, request: SwapRequest) -> AsyncIterator[SwapEvent]:
        pass

    @abstractmethod
    async def send_native(self, to_address: str, amount: str) -> TransferReceipt:
        pass

    @abstractmethod
    async def send_token(self, token_address: str, to_address: str, amount: str) -> TransferReceipt:
        pass

    async def send_asset(self, asset: str, to_address: str, amount: str) -> TransferReceipt:
        """Send the native currency or a token, chosen by ``asset``."""
        if self.network.is_native_symbol(asset):
            return await self.send_native(to_address, amount)
        resolution = resolve_token(asset, self.network)
        if not is_evm_address(resolution.address):
            raise InvalidAddressError(f"Unknown token: {asset}", details={"token": asset})
        return await self.send_token(resolution.address, to_address, amount)


class EvmChainIntegration(ChainIntegration):
    """Router-style EVM network: JSON-RPC reads, local signing."""

    def __init__(
        self,
        network: NetworkConfig,
        rpc: Optional[RpcClient] = None,
        signer: Optional[LocalAccount] = None,
        scanner: Optional[TokenScanner] = None,
        tx_executor: Optional[TransactionExecutor] = None,
        quote_engine: Optional[QuoteEngine] = None,
    ):
        self.network = network
        self.rpc = rpc or get_rpc_client(network.rpc_url)
        self.signer = signer
        self.scanner = scanner or TokenScanner(network, self.rpc)
        self.tx_executor = tx_executor or TransactionExecutor(self.rpc, network.chain_id)
        self.quote_engine = quote_engine or QuoteEngine(network, self.rpc)

    @property
    def wallet_address(self) -> Optional[str]:
        return self.signer.address if self.signer else None

    def _require_signer(self) -> LocalAccount:
        if self.signer is None:
            raise InvalidKeyError("A wallet is required for this operation")
        return self.signer

    def _owner(self, address: Optional[str]) -> str:
        owner = address or self.wallet_address
        if not is_evm_address(owner):
            raise InvalidAddressError(f"Invalid wallet address: {owner}", details={"address": owner})
        return owner

    # Reads

    async def get_native_balance(self, address: Optional[str] = None) -> NativeBalance:
        return await self.scanner.get_native_balance(self._owner(address))

    async def get_token_balance(self, token_address: str, address: Optional[str] = None) -> TokenBalance:
        if not is_evm_address(token_address):
            raise InvalidAddressError(f"Invalid token address: {token_address}", details={"token": token_address})
        return await self.scanner.get_token_balance(token_address, self._owner(address))

    async def scan_all_tokens(
        self,
        address: Optional[str] = None,
        include_zero_balances: bool = False,
    ) -> List[TokenBalance]:
        return await self.scanner.scan_all_tokens(self._owner(address), include_zero_balances)

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict]:
        return await self.rpc.get_transaction_receipt(tx_hash)

    # Swaps

    def _swap_executor(self) -> SwapExecutor:
        return SwapExecutor(
            self.network,
            self.rpc,
            self._require_signer(),
            quote_engine=self.quote_engine,
            tx_executor=self.tx_executor,
        )

    async def _decimals(self, token_address: str) -> int:
        try:
            return abi.decode_uint(await self.rpc.eth_call(token_address, abi.DECIMALS_SELECTOR))
        except (RpcError, abi.AbiDecodeError) as e:
            raise InvalidAddressError(
                f"{token_address} does not look like an ERC-20 token",
                reason=str(e),
                details={"token": token_address},
            ) from e

    async def quote(self, from_token: str, to_token: str, amount: str) -> SwapQuote:
        """Read-only quote. Needs no wallet."""
        from_res = resolve_token(from_token, self.network)
        to_res = resolve_token(to_token, self.network)
        for res, raw in ((from_res, from_token), (to_res, to_token)):
            if not is_evm_address(res.address):
                raise InvalidAddressError(f"Unknown token: {raw}", details={"token": raw})

        from_decimals = from_res.decimals if from_res.decimals is not None else await self._decimals(from_res.address)
        to_decimals = to_res.decimals if to_res.decimals is not None else await self._decimals(to_res.address)

        return await self.quote_engine.quote(
            from_res.address,
            to_res.address,
            parse_units(amount, from_decimals),
            from_decimals=from_decimals,
            to_decimals=to_decimals,
            from_symbol=from_res.symbol or from_token,
            to_symbol=to_res.symbol or to_token,
        )

    async def swap_exact_in(self, request: SwapRequest) -> SwapReceipt:
        return await self._swap_executor().execute(request)

    def stream_swap(self, request: SwapRequest) -> AsyncIterator[SwapEvent]:
        return self._swap_executor().stream(request)

    # Transfers

    def _check_recipient(self, to_address: str) -> None:
        if not is_evm_address(to_address) or is_zero_address(to_address):
            raise InvalidAddressError("Invalid recipient address", details={"to": to_address})

    async def _estimate_transfer(self, tx: PreparedTransaction, token_level: bool) -> None:
        try:
            tx.gas_estimate = await self.tx_executor.estimate_gas(tx)
        except LikelyRevertError as e:
            # A token contract that reverts with its own reason is restricting the transfer
            if token_level and e.details.get("revertReason"):
                raise TransferFailedError(reason=e.reason, details=e.details) from e
            raise

    async def _transfer(
        self,
        tx: PreparedTransaction,
        asset: str,
        symbol: str,
        to_address: str,
        amount_raw: int,
        decimals: int,
    ) -> TransferReceipt:
        signer = self._require_signer()
        tx_hash = await self.tx_executor.submit(tx, signer)
        result = await self.tx_executor.wait_for_receipt(tx, tx_hash)
        return TransferReceipt(
            tx_hash=tx_hash,
            status="SUCCESS" if result.status == TransactionStatus.CONFIRMED else "FAILED",
            asset=asset,
            symbol=symbol,
            to=to_address,
            amount=format_units(amount_raw, decimals),
            amount_raw=amount_raw,
            gas_used=result.gas_used,
            gas_price=result.effective_gas_price,
            block_number=result.block_number,
            explorer_url=self.network.tx_explorer_url(tx_hash),
        )

    async def send_native(self, to_address: str, amount: str) -> TransferReceipt:
        signer = self._require_signer()
        self._check_recipient(to_address)
        amount_raw = parse_units(amount, 18)
        symbol = self.network.native_currency

        balance = await self.rpc.get_balance(signer.address)
        if balance < amount_raw:
            raise InsufficientFundsError(
                f"Insufficient balance. You have {format_units(balance, 18)} {symbol} "
                f"but tried to send {amount} {symbol}",
                required=format_units(amount_raw, 18),
                available=format_units(balance, 18),
                token=symbol,
            )

        tx = TransactionBuilder.build_native_transfer(
            chain_id=self.network.chain_id,
            from_address=signer.address,
            to_address=to_address,
            amount_wei=amount_raw,
            description=f"Send {amount} {symbol}",
        )
        await self._estimate_transfer(tx, token_level=False)
        logger.info(f"Sending {amount} {symbol} to {to_address}")
        return await self._transfer(tx, symbol, symbol, to_address, amount_raw, 18)

    async def send_token(self, token_address: str, to_address: str, amount: str) -> TransferReceipt:
        signer = self._require_signer()
        self._check_recipient(to_address)
        if not is_evm_address(token_address):
            raise InvalidAddressError(f"Invalid token address: {token_address}", details={"token": token_address})

        try:
            holding = await self.scanner.get_token_balance(token_address, signer.address)
        except (RpcError, abi.AbiDecodeError) as e:
            raise InvalidAddressError(
                "Invalid token address or contract",
                reason=str(e),
                details={"token": token_address},
            ) from e

        amount_raw = parse_units(amount, holding.decimals)
        if holding.raw_balance < amount_raw:
            raise InsufficientFundsError(
                f"Insufficient {holding.symbol} balance. You have {holding.balance.formatted} {holding.symbol} "
                f"but tried to send {amount} {holding.symbol}",
                required=format_units(amount_raw, holding.decimals),
                available=holding.balance.formatted,
                token=holding.symbol,
            )

        tx = TransactionBuilder.build_erc20_transfer(
            chain_id=self.network.chain_id,
            from_address=signer.address,
            token_address=token_address,
            to_address=to_address,
            amount=amount_raw,
            description=f"Send {amount} {holding.symbol}",
        )
        await self._estimate_transfer(tx, token_level=True)
        logger.info(f"Sending {amount} {holding.symbol} to {to_address}")
        return await self._transfer(tx, token_address, holding.symbol, to_address, amount_raw, holding.decimals)


def get_chain_integration(
    network: Optional[str] = None,
    signer: Union[LocalAccount, str, None] = None,
    rpc: Optional[RpcClient] = None,
) -> ChainIntegration:
    """
    Build the integration for ``network``.

    ``signer`` may be a ``LocalAccount`` or a hex private key; omit it for
    read-only use.
    """
    config = get_network(network)
    if isinstance(signer, str):
        try:
            signer = Account.from_key(signer)
        except Exception:
            raise InvalidKeyError() from None
    return EvmChainIntegration(config, rpc=rpc, signer=signer)


__all__ = [
    "ChainIntegration",
    "EvmChainIntegration",
    "get_chain_integration",
]
