"""
Transaction executor for on-chain execution.

Handles the full lifecycle of a signed transaction:
- Gas estimation (pre-flight; a failing estimate aborts before submission)
- Nonce management
- Signing and submission
- Confirmation monitoring
- Revert reason decoding
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_hex

from ...config import settings
from ...providers.rpc import RpcClient, RpcError
from ..recovery.errors import (
    LikelyRevertError,
    PendingTimeoutError,
    ProviderUnavailableError,
    TradeError,
    TransactionFailedError,
    decode_revert_reason,
    error_for_reason,
)
from .models import (
    GasEstimate,
    PreparedTransaction,
    TransactionResult,
    TransactionStatus,
)
from .nonce_manager import NonceManager, get_nonce_manager


logger = logging.getLogger(__name__)


class TransactionExecutor:
    """
    Executes transactions on one EVM chain.

    Responsibilities:
    - Estimate gas with a safety margin
    - Manage nonces via NonceManager
    - Sign locally and broadcast
    - Wait for exactly one confirmation
    - Map node errors onto typed errors
    """

    def __init__(
        self,
        rpc: RpcClient,
        chain_id: int,
        nonce_manager: Optional[NonceManager] = None,
        gas_multiplier: Optional[float] = None,
        confirmation_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ):
        self.rpc = rpc
        self.chain_id = chain_id
        self.nonce_manager = nonce_manager or get_nonce_manager(rpc)
        self.gas_multiplier = gas_multiplier or settings.gas_limit_multiplier
        self.confirmation_timeout = confirmation_timeout or settings.confirmation_timeout_seconds
        self.poll_interval = poll_interval or settings.receipt_poll_interval_seconds

    async def estimate_gas(self, tx: PreparedTransaction) -> GasEstimate:
        """
        Estimate gas for the exact call.

        Raises:
            LikelyRevertError (or a more specific kind decoded from the
            revert reason) when the node refuses to estimate.
        """
        try:
            raw_estimate = await self.rpc.estimate_gas(
                tx.from_address, tx.to_address, tx.data, tx.value
            )
        except RpcError as e:
            error = e.to_trade_error(default=LikelyRevertError)
            logger.warning(f"Gas estimation failed for {tx.tx_id}: {e.message}")
            raise error from e

        gas_limit = int(raw_estimate * self.gas_multiplier)
        try:
            gas_price = await self.rpc.gas_price()
        except RpcError as e:
            raise e.to_trade_error(default=ProviderUnavailableError) from e

        return GasEstimate(
            gas_limit=gas_limit,
            gas_price_wei=gas_price,
            raw_estimate=raw_estimate,
        )

    def sign(self, tx: PreparedTransaction, signer: LocalAccount) -> str:
        """Sign ``tx`` and return the raw transaction as 0x-hex."""
        signed = signer.sign_transaction(tx.to_signable())
        return to_hex(signed.raw_transaction)

    async def submit(self, tx: PreparedTransaction, signer: LocalAccount) -> str:
        """
        Assign a nonce, sign and broadcast. Never retried.

        Returns:
            The transaction hash
        """
        if tx.gas_estimate is None:
            tx.gas_estimate = await self.estimate_gas(tx)

        if tx.nonce is None:
            tx.nonce = await self.nonce_manager.get_next_nonce(
                address=tx.from_address,
                chain_id=tx.chain_id,
            )

        try:
            raw_tx = self.sign(tx, signer)
            tx_hash = await self.rpc.send_raw_transaction(raw_tx)
        except RpcError as e:
            await self.nonce_manager.release_nonce(tx.from_address, tx.chain_id, tx.nonce)
            raise e.to_trade_error(default=LikelyRevertError) from e
        except Exception:
            await self.nonce_manager.release_nonce(tx.from_address, tx.chain_id, tx.nonce)
            raise

        logger.info(f"{tx.tx_type.value} submitted: {tx_hash} (nonce={tx.nonce}, gas={tx.gas_estimate.gas_limit})")
        return tx_hash

    async def wait_for_receipt(
        self,
        tx: PreparedTransaction,
        tx_hash: str,
        timeout: Optional[float] = None,
    ) -> TransactionResult:
        """
        Poll for the receipt until one confirmation or timeout.

        Raises:
            PendingTimeoutError: not mined within ``timeout``; carries the hash
        """
        timeout = timeout or self.confirmation_timeout
        result = TransactionResult(
            tx_id=tx.tx_id,
            tx_hash=tx_hash,
            chain_id=tx.chain_id,
            status=TransactionStatus.SUBMITTED,
            submitted_at=datetime.now(timezone.utc),
        )
        deadline = time.monotonic() + timeout

        while True:
            try:
                receipt = await self.rpc.get_transaction_receipt(tx_hash)
            except (TradeError, RpcError) as e:
                logger.warning(f"Error checking transaction status for {tx_hash}: {e}")
                receipt = None

            if receipt:
                result.block_number = int(receipt["blockNumber"], 16)
                result.block_hash = receipt.get("blockHash")
                result.gas_used = int(receipt.get("gasUsed", "0x0"), 16)
                result.effective_gas_price = int(
                    receipt.get("effectiveGasPrice", "0x0"), 16
                ) or (tx.gas_estimate.gas_price_wei if tx.gas_estimate else None)
                result.logs = receipt.get("logs") or []
                result.confirmed_at = datetime.now(timezone.utc)
                # A mined transaction consumes its nonce whatever the status
                await self.nonce_manager.confirm_nonce(tx.from_address, tx.chain_id, tx.nonce)

                # 0x1 = success, 0x0 = revert
                if int(receipt.get("status", "0x1"), 16) == 0:
                    result.status = TransactionStatus.REVERTED
                    result.revert_reason = await self._replay_revert_reason(tx, result.block_number)
                    result.error = "Transaction reverted"
                    logger.warning(f"Transaction reverted: {tx_hash} ({result.revert_reason or 'no reason'})")
                else:
                    result.status = TransactionStatus.CONFIRMED
                    logger.info(f"Transaction confirmed: {tx_hash} (block {result.block_number})")
                return result

            if time.monotonic() >= deadline:
                result.status = TransactionStatus.TIMEOUT
                raise PendingTimeoutError(
                    f"Transaction not confirmed after {int(timeout)}s",
                    tx_hash=tx_hash,
                    details={"timeoutSeconds": timeout},
                )

            await asyncio.sleep(self.poll_interval)

    async def execute(
        self,
        tx: PreparedTransaction,
        signer: LocalAccount,
        timeout: Optional[float] = None,
    ) -> TransactionResult:
        """
        Estimate, submit and confirm ``tx``.

        Raises:
            TransactionFailedError (or the kind matching the decoded revert
            reason) when the receipt status is 0; the hash is attached.
        """
        tx_hash = await self.submit(tx, signer)
        result = await self.wait_for_receipt(tx, tx_hash, timeout)
        if result.status == TransactionStatus.REVERTED:
            raise self.revert_error(result)
        return result

    @staticmethod
    def revert_error(result: TransactionResult) -> TradeError:
        error_cls = error_for_reason(result.revert_reason) or TransactionFailedError
        return error_cls(
            f"Transaction reverted: {result.revert_reason}" if result.revert_reason else None,
            reason=result.revert_reason,
            tx_hash=result.tx_hash,
            details={"blockNumber": result.block_number, "gasUsed": result.gas_used},
        )

    async def _replay_revert_reason(self, tx: PreparedTransaction, block_number: int) -> Optional[str]:
        """Re-run the call against the mined block to recover the revert reason."""
        try:
            await self.rpc.call("eth_call", [tx.to_call(), hex(block_number)])
        except RpcError as e:
            return decode_revert_reason(e.data) or e.message or None
        except TradeError as e:
            logger.debug(f"Could not replay {tx.tx_id}: {e}")
        return None
