"""
Transaction builder for router swaps, approvals and transfers.
"""

import secrets
from typing import Sequence

from . import abi
from .models import PreparedTransaction, TransactionType


class TransactionBuilder:
    """
    Builds transactions for the supported call shapes.

    Handles:
    - ERC20 approvals and transfers
    - Native token transfers
    - Router swaps (native->token, token->native, token->token)
    """

    @staticmethod
    def generate_tx_id() -> str:
        """Generate a unique transaction ID."""
        return f"tx_{secrets.token_hex(16)}"

    @staticmethod
    def build_erc20_approve(
        chain_id: int,
        owner_address: str,
        token_address: str,
        spender_address: str,
        amount: int,
        description: str = "",
    ) -> PreparedTransaction:
        """
        Build an ERC20 approval transaction for exactly ``amount``.

        Args:
            chain_id: The chain ID
            owner_address: The token owner (sender)
            token_address: The ERC20 token contract
            spender_address: The address being approved to spend
            amount: The amount to approve
            description: Human-readable description
        """
        return PreparedTransaction(
            tx_id=TransactionBuilder.generate_tx_id(),
            tx_type=TransactionType.APPROVE,
            chain_id=chain_id,
            from_address=owner_address.lower(),
            to_address=token_address.lower(),
            data=abi.approve_call(spender_address, amount),
            value=0,
            description=description or f"Approve {spender_address[:10]}... to spend tokens",
        )

    @staticmethod
    def build_erc20_transfer(
        chain_id: int,
        from_address: str,
        token_address: str,
        to_address: str,
        amount: int,
        description: str = "",
    ) -> PreparedTransaction:
        return PreparedTransaction(
            tx_id=TransactionBuilder.generate_tx_id(),
            tx_type=TransactionType.TRANSFER,
            chain_id=chain_id,
            from_address=from_address.lower(),
            to_address=token_address.lower(),
            data=abi.transfer_call(to_address, amount),
            value=0,
            description=description or f"Transfer tokens to {to_address[:10]}...",
        )

    @staticmethod
    def build_native_transfer(
        chain_id: int,
        from_address: str,
        to_address: str,
        amount_wei: int,
        description: str = "",
    ) -> PreparedTransaction:
        return PreparedTransaction(
            tx_id=TransactionBuilder.generate_tx_id(),
            tx_type=TransactionType.TRANSFER,
            chain_id=chain_id,
            from_address=from_address.lower(),
            to_address=to_address.lower(),
            data="0x",
            value=amount_wei,
            description=description or f"Transfer native token to {to_address[:10]}...",
        )

    @staticmethod
    def build_router_swap(
        chain_id: int,
        router_address: str,
        wallet_address: str,
        path: Sequence[str],
        amount_in: int,
        amount_out_min: int,
        deadline: int,
        native_in: bool = False,
        native_out: bool = False,
        description: str = "",
    ) -> PreparedTransaction:
        """
        Build a router swap for one of the three call shapes.

        Native input attaches ``amount_in`` as value; the output lands in
        ``wallet_address`` in every shape.
        """
        if native_in and native_out:
            raise ValueError("A swap cannot be native on both legs")

        if native_in:
            data = abi.swap_exact_eth_for_tokens_call(amount_out_min, path, wallet_address, deadline)
            value = amount_in
        elif native_out:
            data = abi.swap_exact_tokens_for_eth_call(amount_in, amount_out_min, path, wallet_address, deadline)
            value = 0
        else:
            data = abi.swap_exact_tokens_for_tokens_call(amount_in, amount_out_min, path, wallet_address, deadline)
            value = 0

        return PreparedTransaction(
            tx_id=TransactionBuilder.generate_tx_id(),
            tx_type=TransactionType.SWAP,
            chain_id=chain_id,
            from_address=wallet_address.lower(),
            to_address=router_address.lower(),
            data=data,
            value=value,
            description=description,
        )
