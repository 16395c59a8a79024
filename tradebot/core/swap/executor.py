"""
Swap executor: one state machine for the three router call shapes.

    INIT -> AMOUNT_VALIDATED -> BALANCE_CHECKED -> [APPROVED] -> QUOTED
         -> GAS_ESTIMATED -> SUBMITTED -> CONFIRMED | FAILED

``stream`` yields a ``SwapEvent`` per transition and always ends with a
terminal CONFIRMED or FAILED event; typed errors are delivered on the FAILED
event instead of being raised. ``execute`` drains the stream and returns the
receipt or raises the error. Every step is awaited before the next because
each depends on the previous result.
"""

import logging
import time
from typing import AsyncIterator, Optional, Tuple

from eth_account.signers.local import LocalAccount

from ...config import settings
from ...logging_config import bind_swap_context, clear_swap_context
from ...providers.rpc import RpcClient, RpcError
from ...services.address import is_evm_address, is_zero_address, same_address
from ...services.amounts import format_units, parse_units, validate_amount
from ...services.token_resolution import Resolution, resolve_token
from ...types.network import NetworkConfig
from ..execution import abi
from ..execution.executor import TransactionExecutor
from ..execution.models import TransactionResult, TransactionStatus
from ..execution.tx_builder import TransactionBuilder
from ..recovery.errors import (
    InsufficientFundsError,
    InvalidAddressError,
    InvalidAmountError,
    LikelyRevertError,
    ProviderUnavailableError,
    TradeError,
)
from .models import (
    MAX_SLIPPAGE_BPS,
    MIN_SLIPPAGE_BPS,
    SwapEvent,
    SwapKind,
    SwapQuote,
    SwapReceipt,
    SwapRequest,
    SwapStage,
)
from .quote import QuoteEngine

logger = logging.getLogger(__name__)


class _Leg:
    """Resolved side of a swap."""

    def __init__(self, resolution: Resolution, symbol: str, decimals: int):
        self.address = resolution.address
        self.is_native = resolution.is_native
        self.symbol = symbol
        self.decimals = decimals


class SwapExecutor:
    """Runs swaps for one wallet on one network."""

    def __init__(
        self,
        network: NetworkConfig,
        rpc: RpcClient,
        signer: LocalAccount,
        quote_engine: Optional[QuoteEngine] = None,
        tx_executor: Optional[TransactionExecutor] = None,
        deadline_minutes: Optional[int] = None,
    ):
        self.network = network
        self.rpc = rpc
        self.signer = signer
        self.wallet_address = signer.address
        self.quote_engine = quote_engine or QuoteEngine(network, rpc)
        self.tx_executor = tx_executor or TransactionExecutor(rpc, network.chain_id)
        self.deadline_minutes = deadline_minutes or settings.deadline_minutes

    # Helpers

    def _deadline(self) -> int:
        return int(time.time()) + 60 * self.deadline_minutes

    async def _token_decimals(self, address: str) -> int:
        try:
            return abi.decode_uint(await self.rpc.eth_call(address, abi.DECIMALS_SELECTOR))
        except (RpcError, abi.AbiDecodeError) as e:
            raise InvalidAddressError(
                f"{address} does not look like an ERC-20 token",
                reason=str(e),
                details={"token": address},
            ) from e

    async def _token_symbol(self, address: str) -> str:
        try:
            return abi.decode_text(await self.rpc.eth_call(address, abi.SYMBOL_SELECTOR))
        except (RpcError, abi.AbiDecodeError):
            return "Unknown"

    async def _leg(self, resolution: Resolution) -> _Leg:
        if resolution.decimals is not None and resolution.symbol:
            return _Leg(resolution, resolution.symbol, resolution.decimals)
        decimals = await self._token_decimals(resolution.address)
        symbol = await self._token_symbol(resolution.address)
        return _Leg(resolution, symbol, decimals)

    def _validate_request(self, request: SwapRequest) -> Tuple[Resolution, Resolution]:
        """INIT checks. Nothing here touches the network."""
        validate_amount(request.amount_in)

        if not MIN_SLIPPAGE_BPS <= request.slippage_bps <= MAX_SLIPPAGE_BPS:
            raise InvalidAmountError(
                f"Slippage must be between {MIN_SLIPPAGE_BPS} and {MAX_SLIPPAGE_BPS} bps",
                details={"slippageBps": request.slippage_bps},
            )

        if is_zero_address(self.network.router_address):
            raise InvalidAddressError(
                f"No router deployed on {self.network.name}",
                details={"network": self.network.key},
            )

        from_res = resolve_token(request.from_token, self.network)
        to_res = resolve_token(request.to_token, self.network)
        for res, raw in ((from_res, request.from_token), (to_res, request.to_token)):
            if not is_evm_address(res.address):
                raise InvalidAddressError(f"Unknown token: {raw}", details={"token": raw})

        if same_address(from_res.address, to_res.address):
            raise InvalidAddressError("Cannot swap a token for itself", details={"token": from_res.address})
        return from_res, to_res

    @staticmethod
    def swap_kind(from_leg: _Leg, to_leg: _Leg) -> SwapKind:
        if from_leg.is_native:
            return SwapKind.NATIVE_TO_TOKEN
        if to_leg.is_native:
            return SwapKind.TOKEN_TO_NATIVE
        return SwapKind.TOKEN_TO_TOKEN

    async def _balance_of(self, leg: _Leg) -> int:
        if leg.is_native:
            return await self.rpc.get_balance(self.wallet_address)
        return abi.decode_uint(await self.rpc.eth_call(leg.address, abi.balance_of_call(self.wallet_address)))

    async def _allowance(self, token: str) -> int:
        data = await self.rpc.eth_call(token, abi.allowance_call(self.wallet_address, self.network.router_address))
        return abi.decode_uint(data)

    def _actual_amount_out(self, result: TransactionResult, to_leg: _Leg) -> Optional[int]:
        """Sum of Transfer logs from the output token into the wallet."""
        if to_leg.is_native:
            return None
        wallet_topic = abi.address_topic(self.wallet_address)
        total = 0
        found = False
        for log in result.logs:
            topics = [t.lower() for t in log.get("topics") or []]
            if (
                len(topics) >= 3
                and same_address(log.get("address"), to_leg.address)
                and topics[0] == abi.TRANSFER_EVENT_TOPIC
                and topics[2] == wallet_topic
            ):
                data = log.get("data") or "0x"
                if data == "0x":
                    continue
                total += int(data, 16)
                found = True
        return total if found else None

    # State machine

    async def stream(self, request: SwapRequest) -> AsyncIterator[SwapEvent]:
        tx_hash: Optional[str] = None
        bind_swap_context(wallet=self.wallet_address, network=self.network.key)
        try:
            from_res, to_res = self._validate_request(request)
            yield SwapEvent(
                SwapStage.INIT,
                f"Preparing to swap {request.amount_in} {request.from_token} for {request.to_token}",
                {"fromToken": from_res.address, "toToken": to_res.address},
            )

            from_leg = await self._leg(from_res)
            to_leg = await self._leg(to_res)
            kind = self.swap_kind(from_leg, to_leg)
            amount_in = parse_units(request.amount_in, from_leg.decimals)
            yield SwapEvent(
                SwapStage.AMOUNT_VALIDATED,
                f"Amount in raw units: {amount_in}",
                {"amountIn": str(amount_in), "kind": kind.value},
            )

            balance = await self._balance_of(from_leg)
            if balance < amount_in:
                raise InsufficientFundsError(
                    f"Insufficient balance. You have {format_units(balance, from_leg.decimals)} {from_leg.symbol} "
                    f"but tried to swap {request.amount_in} {from_leg.symbol}",
                    required=format_units(amount_in, from_leg.decimals),
                    available=format_units(balance, from_leg.decimals),
                    token=from_leg.symbol,
                )
            yield SwapEvent(
                SwapStage.BALANCE_CHECKED,
                f"Balance {format_units(balance, from_leg.decimals)} {from_leg.symbol}",
                {"balance": str(balance)},
            )

            approval_tx_hash: Optional[str] = None
            if not from_leg.is_native:
                allowance = await self._allowance(from_leg.address)
                if allowance < amount_in:
                    approval = TransactionBuilder.build_erc20_approve(
                        chain_id=self.network.chain_id,
                        owner_address=self.wallet_address,
                        token_address=from_leg.address,
                        spender_address=self.network.router_address,
                        amount=amount_in,
                        description=f"Approve {from_leg.symbol} for swap",
                    )
                    approval_result = await self.tx_executor.execute(approval, self.signer)
                    approval_tx_hash = approval_result.tx_hash
                    detail = f"Approved {request.amount_in} {from_leg.symbol} for the router"
                else:
                    detail = "Existing allowance covers the swap"
                yield SwapEvent(
                    SwapStage.APPROVED,
                    detail,
                    {"approvalTxHash": approval_tx_hash, "allowance": str(allowance)},
                )

            path = (
                self.network.wrapped_native_address if from_leg.is_native else from_leg.address,
                self.network.wrapped_native_address if to_leg.is_native else to_leg.address,
            )
            quote: SwapQuote = await self.quote_engine.quote(
                path[0],
                path[1],
                amount_in,
                slippage_bps=request.slippage_bps,
                from_decimals=from_leg.decimals,
                to_decimals=to_leg.decimals,
                from_symbol=from_leg.symbol,
                to_symbol=to_leg.symbol,
            )
            yield SwapEvent(
                SwapStage.QUOTED,
                f"Expected output: {format_units(quote.amount_out, to_leg.decimals)} {to_leg.symbol}, "
                f"minimum {format_units(quote.amount_out_min, to_leg.decimals)}",
                quote.to_dict(),
            )

            swap_tx = TransactionBuilder.build_router_swap(
                chain_id=self.network.chain_id,
                router_address=self.network.router_address,
                wallet_address=self.wallet_address,
                path=path,
                amount_in=amount_in,
                amount_out_min=quote.amount_out_min,
                deadline=self._deadline(),
                native_in=from_leg.is_native,
                native_out=to_leg.is_native,
                description=f"Swap {from_leg.symbol} -> {to_leg.symbol}",
            )
            swap_tx.gas_estimate = await self.tx_executor.estimate_gas(swap_tx)
            yield SwapEvent(
                SwapStage.GAS_ESTIMATED,
                f"Gas limit {swap_tx.gas_estimate.gas_limit}",
                {
                    "gasLimit": swap_tx.gas_estimate.gas_limit,
                    "gasEstimate": swap_tx.gas_estimate.raw_estimate,
                    "gasPrice": swap_tx.gas_estimate.gas_price_wei,
                },
            )

            tx_hash = await self.tx_executor.submit(swap_tx, self.signer)
            bind_swap_context(tx_hash=tx_hash)
            yield SwapEvent(
                SwapStage.SUBMITTED,
                f"Transaction submitted. Hash: {tx_hash}",
                {"txHash": tx_hash, "explorerUrl": self.network.tx_explorer_url(tx_hash)},
            )

            result = await self.tx_executor.wait_for_receipt(swap_tx, tx_hash)
            receipt = self._receipt(request, quote, from_leg, to_leg, result, approval_tx_hash)
            if result.status == TransactionStatus.CONFIRMED:
                yield SwapEvent(SwapStage.CONFIRMED, "Transaction confirmed successfully", {"txHash": tx_hash}, receipt=receipt)
            else:
                error = self.tx_executor.revert_error(result)
                yield SwapEvent(SwapStage.FAILED, error.message, {"txHash": tx_hash}, receipt=receipt, error=error)

        except (TradeError, RpcError) as e:
            if isinstance(e, RpcError):
                # Before submission a node error is a failed eth_call; after it, the node itself
                error = e.to_trade_error(default=ProviderUnavailableError if tx_hash else LikelyRevertError)
            else:
                error = e
            error.with_tx_hash(tx_hash)
            logger.warning(f"Swap failed ({error.kind.value}): {error.message}")
            yield SwapEvent(SwapStage.FAILED, error.message, {"txHash": error.tx_hash}, error=error)
        finally:
            clear_swap_context("wallet", "network", "tx_hash")

    def _receipt(
        self,
        request: SwapRequest,
        quote: SwapQuote,
        from_leg: _Leg,
        to_leg: _Leg,
        result: TransactionResult,
        approval_tx_hash: Optional[str],
    ) -> SwapReceipt:
        actual_out = self._actual_amount_out(result, to_leg)
        amount_out = actual_out if actual_out is not None else quote.amount_out
        return SwapReceipt(
            tx_hash=result.tx_hash,
            status="SUCCESS" if result.status == TransactionStatus.CONFIRMED else "FAILED",
            amount_in=format_units(quote.amount_in, from_leg.decimals),
            amount_out=format_units(amount_out, to_leg.decimals),
            price_impact_pct=quote.price_impact_pct,
            gas_used=result.gas_used,
            gas_price=result.effective_gas_price,
            explorer_url=self.network.tx_explorer_url(result.tx_hash),
            block_number=result.block_number,
            from_token=from_leg.address if not from_leg.is_native else self.network.native_currency,
            to_token=to_leg.address if not to_leg.is_native else self.network.native_currency,
            from_symbol=from_leg.symbol,
            to_symbol=to_leg.symbol,
            amount_out_min=format_units(quote.amount_out_min, to_leg.decimals),
            approval_tx_hash=approval_tx_hash,
            revert_reason=result.revert_reason,
        )

    async def execute(self, request: SwapRequest) -> SwapReceipt:
        """
        Run the swap to completion.

        A mined swap always returns its receipt (``status`` FAILED on a
        revert). Anything that stops the swap earlier raises its typed error,
        with the transaction hash attached once one exists.
        """
        events = self.stream(request)
        try:
            async for event in events:
                if event.receipt is not None:
                    return event.receipt
                if event.error is not None:
                    raise event.error
        finally:
            await events.aclose()
        raise RuntimeError("swap stream ended without a terminal event")


__all__ = [
    "SwapExecutor",
]
