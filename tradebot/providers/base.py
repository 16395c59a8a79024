from abc import ABC, abstractmethod
from typing import Any, Dict, List


class Provider(ABC):
    """Base provider interface"""

    name: str
    timeout_s: int = 10

    @abstractmethod
    async def ready(self) -> bool:
        """Check if provider is ready to serve requests"""
        pass

    @abstractmethod
    async def health_check(self) -> Dict[str, Any]:
        """Return provider health status"""
        pass


class IndexerProvider(Provider):
    """Provider for indexed token balances (tier 1 of the token scanner)"""

    @abstractmethod
    async def get_token_balances(self, address: str, chain: str) -> List[Dict[str, Any]]:
        """Get all token rows (contract, symbol, decimals, raw balance) for an address"""
        pass
