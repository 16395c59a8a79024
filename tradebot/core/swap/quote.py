"""
Quote engine over the router's ``getAmountsOut``.

The router is the source of truth for constant-product pricing; nothing here
reimplements AMM math. The price-impact figure is a rough heuristic, see
``estimate_price_impact``.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Sequence

from ...config import settings
from ...providers.rpc import RpcClient, RpcError
from ...services.amounts import format_rate, format_units
from ...types.network import NetworkConfig
from ..execution import abi
from ..recovery.errors import (
    InvalidAddressError,
    InvalidAmountError,
    NoLiquidityError,
    decode_revert_reason,
)
from .models import MAX_SLIPPAGE_BPS, MIN_SLIPPAGE_BPS, SwapQuote

logger = logging.getLogger(__name__)

BPS_DENOMINATOR = 10_000
NORMALIZED_DECIMALS = 18


def apply_slippage(amount_out: int, slippage_bps: int) -> int:
    """``amount_out - floor(amount_out * bps / 10000)``. Non-increasing in ``slippage_bps``."""
    if not MIN_SLIPPAGE_BPS <= slippage_bps <= MAX_SLIPPAGE_BPS:
        raise InvalidAmountError(
            f"Slippage must be between {MIN_SLIPPAGE_BPS} and {MAX_SLIPPAGE_BPS} bps",
            details={"slippageBps": slippage_bps},
        )
    return amount_out - (amount_out * slippage_bps) // BPS_DENOMINATOR


def _normalize(amount: int, decimals: int) -> int:
    if decimals <= NORMALIZED_DECIMALS:
        return amount * 10 ** (NORMALIZED_DECIMALS - decimals)
    return amount // 10 ** (decimals - NORMALIZED_DECIMALS)


def estimate_price_impact(
    amount_in: int,
    amount_out: int,
    in_decimals: int = NORMALIZED_DECIMALS,
    out_decimals: int = NORMALIZED_DECIMALS,
) -> Decimal:
    """
    Rough price-impact percentage.

    Both amounts are normalized to 18 decimals and compared as if the pair
    traded 1:1. No oracle mid-price is consulted, so across unrelated assets
    this is only an order-of-magnitude warning signal, not true impact.
    Output worth "more" than the input reads as 0.
    """
    ideal = _normalize(amount_in, in_decimals)
    actual = _normalize(amount_out, out_decimals)
    if ideal <= 0 or actual <= 0 or actual >= ideal:
        return Decimal("0")
    impact_bps = ((ideal - actual) * BPS_DENOMINATOR) // ideal
    return Decimal(impact_bps) / Decimal(100)


class QuoteEngine:
    """Router quotes for direct (two-token) paths."""

    def __init__(
        self,
        network: NetworkConfig,
        rpc: RpcClient,
        warning_pct: Optional[float] = None,
    ):
        self.network = network
        self.rpc = rpc
        self.warning_pct = Decimal(str(warning_pct if warning_pct is not None else settings.price_impact_warning_pct))

    apply_slippage = staticmethod(apply_slippage)
    estimate_price_impact = staticmethod(estimate_price_impact)

    async def get_amounts_out(self, path: Sequence[str], amount_in: int) -> List[int]:
        """
        Router ``getAmountsOut(amount_in, path)``.

        Raises:
            NoLiquidityError: the router reverted or quoted zero output. Not retried.
        """
        if len(path) != 2:
            raise InvalidAddressError("Only direct two-token paths are supported", details={"path": list(path)})
        if amount_in <= 0:
            raise InvalidAmountError("Amount must be greater than zero")

        try:
            data = await self.rpc.eth_call(self.network.router_address, abi.get_amounts_out_call(amount_in, path))
            amounts = abi.decode_uint_array(data)
        except RpcError as e:
            logger.info(f"Router quote reverted for {path[0]} -> {path[1]}: {e.message}")
            raise NoLiquidityError(
                reason=decode_revert_reason(e.data) or e.message,
                details={"path": list(path)},
            ) from e
        except abi.AbiDecodeError as e:
            raise NoLiquidityError(reason=str(e), details={"path": list(path)}) from e

        if len(amounts) < 2 or amounts[-1] == 0:
            raise NoLiquidityError(reason="Router quoted zero output", details={"path": list(path)})
        return amounts

    async def quote(
        self,
        from_address: str,
        to_address: str,
        amount_in: int,
        slippage_bps: Optional[int] = None,
        from_decimals: int = NORMALIZED_DECIMALS,
        to_decimals: int = NORMALIZED_DECIMALS,
        from_symbol: str = "",
        to_symbol: str = "",
    ) -> SwapQuote:
        slippage_bps = settings.default_slippage_bps if slippage_bps is None else slippage_bps
        path = (from_address, to_address)
        amounts = await self.get_amounts_out(path, amount_in)
        amount_out = amounts[-1]

        amount_out_min = apply_slippage(amount_out, slippage_bps)
        impact = estimate_price_impact(amount_in, amount_out, from_decimals, to_decimals)

        warnings = []
        if impact > self.warning_pct:
            warnings.append(
                f"High price impact detected ({impact:.2f}%). This may result in a significant loss of funds."
            )

        logger.info(
            f"Quote {format_units(amount_in, from_decimals)} {from_symbol or from_address} -> "
            f"{format_units(amount_out, to_decimals)} {to_symbol or to_address} (impact {impact}%)"
        )

        return SwapQuote(
            path=path,
            amount_in=amount_in,
            amount_out=amount_out,
            amount_out_min=amount_out_min,
            price_impact_pct=impact,
            rate=format_rate(amount_in, from_decimals, amount_out, to_decimals),
            slippage_bps=slippage_bps,
            from_symbol=from_symbol,
            to_symbol=to_symbol,
            from_decimals=from_decimals,
            to_decimals=to_decimals,
            warnings=tuple(warnings),
        )
