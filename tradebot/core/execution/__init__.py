"""
Transaction Execution Layer

Provides the infrastructure for executing on-chain transactions:
- TransactionExecutor: estimates gas, signs, submits and confirms
- NonceManager: reserves nonces per wallet address
- TransactionBuilder: builds router swaps, approvals and transfers

Usage:
    from eth_account import Account
    from tradebot.core.execution import TransactionBuilder, TransactionExecutor

    executor = TransactionExecutor(rpc, chain_id=10143)
    tx = TransactionBuilder.build_erc20_approve(
        chain_id=10143,
        owner_address="0x...",
        token_address="0x...",
        spender_address="0x...",
        amount=10**18,
    )
    result = await executor.execute(tx, Account.from_key(private_key))
"""

from .models import (
    TransactionType,
    TransactionStatus,
    GasEstimate,
    PreparedTransaction,
    TransactionResult,
    TransferReceipt,
)

from .nonce_manager import (
    NonceManager,
    NonceState,
    get_nonce_manager,
)

from .tx_builder import (
    TransactionBuilder,
)

from .executor import (
    TransactionExecutor,
)

__all__ = [
    # Models
    "TransactionType",
    "TransactionStatus",
    "GasEstimate",
    "PreparedTransaction",
    "TransactionResult",
    "TransferReceipt",
    # Nonce Manager
    "NonceManager",
    "NonceState",
    "get_nonce_manager",
    # Transaction Builder
    "TransactionBuilder",
    # Executor
    "TransactionExecutor",
]
