#!/usr/bin/env python3
"""Simple CLI for trying the trading core against a testnet"""

import argparse
import asyncio

from tradebot.core.recovery.errors import TradeError
from tradebot.logging_config import setup_logging
from tradebot.providers.rpc import close_rpc_clients
from tradebot.services.trading import get_trading_service


def print_tokens(address, network, tokens):
    """Pretty print scanned token balances"""
    print(f"\n🔄 Tokens for {address} on {network}")
    print("=" * 50)
    if not tokens:
        print("No tokens with a balance")
        return

    for i, token in enumerate(tokens, 1):
        print(f"{i:2d}. {token.balance.formatted:>18} {token.symbol:<8} ({token.source})")
        if token.name != token.symbol:
            print(f"    {token.name}")
        print(f"    {token.address}")


async def cli_scan(address: str, network: str, include_zero: bool):
    """CLI command to scan a wallet's tokens"""
    print(f"🔍 Scanning {address}...")
    service = get_trading_service()
    try:
        tokens = await service.scan_all_tokens(address, network, include_zero_balances=include_zero)
    except TradeError as e:
        print(f"❌ {e.kind.value}: {e.message}")
        return
    print_tokens(address, network, tokens)


async def cli_quote(from_token: str, to_token: str, amount: str, network: str):
    """CLI command to quote a swap"""
    service = get_trading_service()
    try:
        quote = await service.quote(from_token, to_token, amount, network)
    except TradeError as e:
        print(f"❌ {e.kind.value}: {e.message}")
        return

    data = quote.to_dict()
    print(f"\n💱 {amount} {quote.from_symbol} -> {data['amountOut']['formatted']} {quote.to_symbol}")
    print(f"Rate: 1 {quote.from_symbol} = {quote.rate} {quote.to_symbol}")
    print(f"Minimum received ({quote.slippage_bps} bps): {data['amountOutMin']['formatted']}")
    print(f"Price impact: {quote.price_impact_pct}%")
    for warning in quote.warnings:
        print(f"⚠️  {warning}")


async def cli_wallet_new(owner_id: str, name: str):
    """Generate a wallet and print its recovery phrase once"""
    service = get_trading_service()
    created = await service.generate_wallet(owner_id, name)
    print(f"\n✅ Wallet created: {created.handle.address}")
    print(f"ID: {created.handle.wallet_id}")
    print(f"Explorer: {service.wallets.address_explorer_url(created.handle.address)}")
    if created.mnemonic:
        print("\nRecovery phrase (shown once, store it offline):")
        print(f"  {created.mnemonic}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Tradebot CLI")
    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser("scan", help="List token balances for an address")
    scan_parser.add_argument("address", help="Wallet address")
    scan_parser.add_argument("--network", default=None, help="Network key (default: settings.default_network)")
    scan_parser.add_argument("--include-zero", action="store_true", help="Include zero balances")

    quote_parser = subparsers.add_parser("quote", help="Quote a swap")
    quote_parser.add_argument("from_token", help="Input token symbol or address")
    quote_parser.add_argument("to_token", help="Output token symbol or address")
    quote_parser.add_argument("amount", help="Input amount in human units")
    quote_parser.add_argument("--network", default=None, help="Network key (default: settings.default_network)")

    wallet_parser = subparsers.add_parser("wallet-new", help="Generate a wallet")
    wallet_parser.add_argument("--owner", default="cli", help="Owner id to store the wallet under")
    wallet_parser.add_argument("--name", default="Default Wallet", help="Wallet name")

    return parser


async def main():
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    setup_logging()
    command = args.command.lower()

    try:
        if command == "scan":
            await cli_scan(args.address, args.network, args.include_zero)

        elif command == "quote":
            await cli_quote(args.from_token, args.to_token, args.amount, args.network)

        elif command == "wallet-new":
            await cli_wallet_new(args.owner, args.name)

        else:
            print(f"❌ Unknown command: {command}")
            parser.print_help()
    finally:
        await close_rpc_clients()


if __name__ == "__main__":
    asyncio.run(main())
