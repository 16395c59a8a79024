"""
Tests for router quotes, slippage and the price-impact heuristic.
"""

from decimal import Decimal

import pytest

from tradebot.core.recovery.errors import InvalidAddressError, InvalidAmountError, NoLiquidityError
from tradebot.core.swap.quote import QuoteEngine, apply_slippage, estimate_price_impact
from tradebot.providers.rpc import RpcError


ONE = 10**18


def test_one_percent_slippage_on_hundred_tokens():
    assert apply_slippage(100 * ONE, 100) == 99 * ONE


@pytest.mark.parametrize("amount_out", [1, 999, 10**6, 123_456_789 * ONE])
def test_min_output_non_increasing_in_slippage(amount_out):
    mins = [apply_slippage(amount_out, bps) for bps in range(10, 5001, 10)]
    assert all(a >= b for a, b in zip(mins, mins[1:]))
    assert all(0 <= m <= amount_out for m in mins)


@pytest.mark.parametrize("bps", [0, 9, 5001, -100])
def test_slippage_outside_bounds_rejected(bps):
    with pytest.raises(InvalidAmountError):
        apply_slippage(10**18, bps)


def test_price_impact_normalizes_decimals():
    # 1 USDC (6 decimals) in, 0.9 of an 18-decimal token out
    assert estimate_price_impact(10**6, 9 * 10**17, 6, 18) == Decimal("10")


def test_price_impact_is_zero_when_output_is_worth_more():
    assert estimate_price_impact(ONE, 100 * ONE) == Decimal("0")


@pytest.mark.asyncio
async def test_quote_builds_min_output_rate_and_warning(fake_rpc, monad):
    weth = monad.token_by_symbol("WETH")
    fake_rpc.add_router(monad.router_address, lambda data: fake_rpc.uint_array([ONE, ONE // 2]))
    engine = QuoteEngine(monad, fake_rpc)

    quote = await engine.quote(
        monad.wrapped_native_address,
        weth.address,
        ONE,
        slippage_bps=100,
        from_symbol="MON",
        to_symbol="WETH",
    )

    assert quote.amount_out == ONE // 2
    assert quote.amount_out_min == apply_slippage(ONE // 2, 100)
    assert quote.rate == "0.5"
    assert quote.price_impact_pct == Decimal("50")
    assert quote.warnings
    assert quote.to_dict()["amountOut"]["formatted"] == "0.5"


@pytest.mark.asyncio
async def test_no_warning_below_threshold(fake_rpc, monad):
    weth = monad.token_by_symbol("WETH")
    fake_rpc.add_router(monad.router_address, lambda data: fake_rpc.uint_array([ONE, 99 * ONE // 100]))
    engine = QuoteEngine(monad, fake_rpc)

    quote = await engine.quote(monad.wrapped_native_address, weth.address, ONE)

    assert quote.price_impact_pct == Decimal("1")
    assert quote.warnings == ()


@pytest.mark.asyncio
async def test_router_revert_maps_to_no_liquidity(fake_rpc, monad):
    weth = monad.token_by_symbol("WETH")
    fake_rpc.add_router(
        monad.router_address,
        RpcError(3, "execution reverted", fake_rpc.error_string("UniswapV2Library: INSUFFICIENT_LIQUIDITY")),
    )
    engine = QuoteEngine(monad, fake_rpc)

    with pytest.raises(NoLiquidityError) as exc_info:
        await engine.get_amounts_out((monad.wrapped_native_address, weth.address), ONE)
    assert exc_info.value.reason == "UniswapV2Library: INSUFFICIENT_LIQUIDITY"


@pytest.mark.asyncio
async def test_zero_output_is_no_liquidity(fake_rpc, monad):
    weth = monad.token_by_symbol("WETH")
    fake_rpc.add_router(monad.router_address, lambda data: fake_rpc.uint_array([ONE, 0]))
    engine = QuoteEngine(monad, fake_rpc)

    with pytest.raises(NoLiquidityError):
        await engine.get_amounts_out((monad.wrapped_native_address, weth.address), ONE)


@pytest.mark.asyncio
async def test_multi_hop_paths_rejected(fake_rpc, monad):
    engine = QuoteEngine(monad, fake_rpc)
    path = [monad.wrapped_native_address] * 3

    with pytest.raises(InvalidAddressError):
        await engine.get_amounts_out(path, ONE)
    assert fake_rpc.eth_calls == []
