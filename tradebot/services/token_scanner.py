"""
Token discovery for a wallet without depending on a paid indexer.

Tiers, tried in order and falling through only when a whole tier fails:

1. Indexed lookup (BlockVision) when an API key is configured.
2. Concurrent probing of the network's configured tokens plus the popular
   token list. A probe that reverts or times out yields no entry.
3. Transfer-log heuristic over a bounded window of recent blocks, run when
   tier 2 found fewer than ``scan_min_token_count`` tokens or the caller
   asked for zero balances.

If the direct scan breaks unexpectedly, the configured tokens are read one by
one as a last resort. Only a dead RPC endpoint raises
(``ProviderUnavailableError``).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from ..config import settings
from ..core.execution import abi
from ..core.recovery.errors import ProviderUnavailableError, TradeError
from ..providers.base import IndexerProvider
from ..providers.blockvision import BlockVisionError, BlockVisionProvider
from ..providers.rpc import RpcClient, RpcError
from ..types.network import NetworkConfig
from ..types.portfolio import BalanceAmount, NativeBalance, TokenBalance
from .address import checksum, is_evm_address, is_zero_address
from .amounts import format_units, is_zero_formatted, rescale

logger = logging.getLogger(__name__)

# Failures that remove a single token from the result instead of aborting the scan
PROBE_ERRORS = (RpcError, TradeError, abi.AbiDecodeError, asyncio.TimeoutError)


def _balance(raw: int, decimals: int) -> BalanceAmount:
    return BalanceAmount(raw=str(raw), formatted=format_units(raw, decimals))


def _dedupe(addresses: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    unique: List[str] = []
    for address in addresses:
        key = address.lower()
        if key not in seen:
            seen.add(key)
            unique.append(address)
    return unique


def _dedupe_tokens(tokens: Iterable[TokenBalance]) -> List[TokenBalance]:
    seen: set[str] = set()
    unique: List[TokenBalance] = []
    for token in tokens:
        key = token.address.lower()
        if key not in seen:
            seen.add(key)
            unique.append(token)
    return unique


def drop_zero_balances(tokens: Iterable[TokenBalance]) -> List[TokenBalance]:
    return [t for t in tokens if t.raw_balance > 0 and not is_zero_formatted(t.balance.formatted)]


class TokenScanner:
    """Enumerates ERC-20 balances for wallets on one network."""

    def __init__(
        self,
        network: NetworkConfig,
        rpc: RpcClient,
        indexer: Optional[IndexerProvider] = None,
        block_window: Optional[int] = None,
        min_token_count: Optional[int] = None,
        probe_timeout: Optional[float] = None,
    ):
        self.network = network
        self.rpc = rpc
        self.indexer = indexer if indexer is not None else BlockVisionProvider()
        self.block_window = block_window or settings.scan_block_window
        self.min_token_count = settings.scan_min_token_count if min_token_count is None else min_token_count
        self.probe_timeout = probe_timeout or settings.probe_timeout_seconds

    # Single balances

    async def get_native_balance(self, address: str) -> NativeBalance:
        raw = await self.rpc.get_balance(address)
        return NativeBalance(symbol=self.network.native_currency, balance=_balance(raw, 18))

    async def get_token_balance(self, token_address: str, owner: str) -> TokenBalance:
        """
        Balance of one token; raises on failure (unlike ``probe_token``).

        Known tokens use configured metadata; unknown ones are introspected.
        """
        known = self.network.token_by_address(token_address)
        raw = abi.decode_uint(await self.rpc.eth_call(token_address, abi.balance_of_call(owner)))
        if known is not None:
            return TokenBalance(
                address=known.address,
                symbol=known.symbol,
                name=known.name,
                decimals=known.decimals,
                balance=_balance(raw, known.decimals),
                logo_uri=known.logo_uri,
            )

        decimals, symbol, name = await asyncio.gather(
            self._read_decimals(token_address),
            self._read_text(token_address, abi.SYMBOL_SELECTOR),
            self._read_text(token_address, abi.NAME_SELECTOR),
        )
        return TokenBalance(
            address=token_address,
            symbol=symbol,
            name=name,
            decimals=decimals,
            balance=_balance(raw, decimals),
        )

    # Probing

    async def _read_decimals(self, token_address: str) -> int:
        return abi.decode_uint(await self.rpc.eth_call(token_address, abi.DECIMALS_SELECTOR))

    async def _read_text(self, token_address: str, selector: str) -> str:
        return abi.decode_text(await self.rpc.eth_call(token_address, selector))

    async def _probe(self, token_address: str, owner: str, source: str) -> TokenBalance:
        raw_data, decimals, symbol, name = await asyncio.gather(
            self.rpc.eth_call(token_address, abi.balance_of_call(owner)),
            self._read_decimals(token_address),
            self._read_text(token_address, abi.SYMBOL_SELECTOR),
            self._read_text(token_address, abi.NAME_SELECTOR),
        )
        raw = abi.decode_uint(raw_data)
        known = self.network.token_by_address(token_address)
        return TokenBalance(
            address=token_address,
            symbol=symbol,
            name=name,
            decimals=decimals,
            balance=_balance(raw, decimals),
            logo_uri=known.logo_uri if known else None,
            source=source,
        )

    async def probe_token(self, token_address: str, owner: str, source: str = "rpc") -> Optional[TokenBalance]:
        """All four reads or nothing. Failures are logged and isolated."""
        try:
            return await asyncio.wait_for(self._probe(token_address, owner, source), self.probe_timeout)
        except PROBE_ERRORS as e:
            logger.debug(f"Probe failed for {token_address}: {e}")
            return None

    async def is_likely_token(self, address: str) -> bool:
        """A contract that answers ``decimals()`` and ``symbol()`` without reverting."""
        try:
            await asyncio.wait_for(
                asyncio.gather(
                    self._read_decimals(address),
                    self._read_text(address, abi.SYMBOL_SELECTOR),
                ),
                self.probe_timeout,
            )
            return True
        except PROBE_ERRORS:
            return False

    async def scan_common_tokens(self, addresses: List[str], owner: str, source: str = "rpc") -> List[TokenBalance]:
        results = await asyncio.gather(*(self.probe_token(a, owner, source) for a in addresses))
        return [token for token in results if token is not None]

    # Tiers

    def _candidate_addresses(self) -> List[str]:
        configured = [token.address for token in self.network.tokens.values()]
        return _dedupe(configured + list(self.network.popular_tokens))

    async def _indexed_tokens(self, owner: str) -> List[TokenBalance]:
        if not self.network.indexer_chain or not await self.indexer.ready():
            return []
        try:
            rows = await self.indexer.get_token_balances(owner, self.network.indexer_chain)
        except BlockVisionError as e:
            logger.warning(f"Indexer unavailable, falling back to direct scanning: {e}")
            return []

        tokens: List[TokenBalance] = []
        for row in rows:
            token = self._map_indexed_row(row)
            if token is not None:
                tokens.append(token)
        logger.info(f"Found {len(tokens)} tokens via {self.indexer.name}")
        return tokens

    def _map_indexed_row(self, row: Dict) -> Optional[TokenBalance]:
        address = row.get("contractAddress") or ""
        if not is_evm_address(address) or is_zero_address(address):
            return None
        try:
            decimals = int(row.get("decimal") or 0)
            balance = str(row.get("balance") or "0")
            # Raw integers are the documented shape; decimal strings are rescaled
            raw = int(balance) if balance.isdigit() else rescale(balance, decimals)
        except (TradeError, ValueError) as e:
            logger.debug(f"Skipping malformed indexer row for {address}: {e}")
            return None
        return TokenBalance(
            address=address,
            symbol=row.get("symbol") or "UNKNOWN",
            name=row.get("name") or row.get("symbol") or "Unknown Token",
            decimals=decimals,
            balance=_balance(raw, decimals),
            logo_uri=row.get("imageURL") or None,
            source="indexer",
        )

    async def scan_recent_transfers(
        self,
        owner: str,
        current_block: int,
        exclude: Iterable[str] = (),
    ) -> List[TokenBalance]:
        """Tokens that emitted a Transfer to or from ``owner`` in the recent block window."""
        from_block = max(1, current_block - self.block_window)
        owner_topic = abi.address_topic(owner)
        try:
            sent, received = await asyncio.gather(
                self.rpc.get_logs(from_block, current_block, [abi.TRANSFER_EVENT_TOPIC, owner_topic]),
                self.rpc.get_logs(from_block, current_block, [abi.TRANSFER_EVENT_TOPIC, None, owner_topic]),
            )
        except (RpcError, TradeError) as e:
            logger.warning(f"Error scanning transfer logs: {e}")
            return []

        skip = {a.lower() for a in exclude}
        candidates = _dedupe(
            log["address"] for log in [*sent, *received]
            if log.get("address") and len(log.get("topics") or []) >= 3
        )
        candidates = [a for a in candidates if a.lower() not in skip]
        logger.info(f"Found {len(candidates)} potential token contracts in {len(sent) + len(received)} Transfer logs")

        checks = await asyncio.gather(*(self.is_likely_token(a) for a in candidates))
        likely = [checksum(a) for a, ok in zip(candidates, checks) if ok]
        return await self.scan_common_tokens(likely, owner, source="logs")

    async def _direct_scan(self, owner: str, include_zero_balances: bool) -> List[TokenBalance]:
        # Connectivity check; a dead endpoint is the one failure that surfaces
        current_block = await self.rpc.block_number()

        tokens = await self.scan_common_tokens(self._candidate_addresses(), owner)
        logger.info(f"Found {len(tokens)} known and popular tokens")

        if len(tokens) < self.min_token_count or include_zero_balances:
            found = await self.scan_recent_transfers(owner, current_block, exclude=[t.address for t in tokens])
            logger.info(f"Found {len(found)} tokens from transaction history")
            tokens.extend(found)

        return tokens

    async def _last_resort(self, owner: str) -> List[TokenBalance]:
        """Configured tokens only, read sequentially with configured metadata."""
        results: List[TokenBalance] = []
        for token in self.network.tokens.values():
            try:
                raw = abi.decode_uint(await self.rpc.eth_call(token.address, abi.balance_of_call(owner)))
            except ProviderUnavailableError:
                raise
            except PROBE_ERRORS as e:
                logger.debug(f"Last-resort read failed for {token.symbol}: {e}")
                continue
            results.append(
                TokenBalance(
                    address=token.address,
                    symbol=token.symbol,
                    name=token.name,
                    decimals=token.decimals,
                    balance=_balance(raw, token.decimals),
                    logo_uri=token.logo_uri,
                    source="config",
                )
            )
        return results

    async def scan_all_tokens(self, wallet_address: str, include_zero_balances: bool = False) -> List[TokenBalance]:
        """
        Enumerate the wallet's tokens. Order is not significant.

        Raises:
            ProviderUnavailableError: the RPC endpoint itself is unreachable
        """
        logger.info(f"Scanning for all tokens in wallet {wallet_address} on {self.network.key}")

        tokens = await self._indexed_tokens(wallet_address)
        if not tokens:
            try:
                tokens = await self._direct_scan(wallet_address, include_zero_balances)
            except ProviderUnavailableError:
                raise
            except Exception as e:
                logger.error(f"Direct token scan failed, reading configured tokens only: {e}")
                tokens = await self._last_resort(wallet_address)

        tokens = _dedupe_tokens(tokens)
        if not include_zero_balances:
            tokens = drop_zero_balances(tokens)

        logger.info(f"Returning {len(tokens)} total tokens")
        return tokens


__all__ = [
    "TokenScanner",
    "drop_zero_balances",
]
