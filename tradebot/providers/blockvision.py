import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from .base import IndexerProvider


logger = logging.getLogger(__name__)


class BlockVisionError(Exception):
    """BlockVision returned an error envelope or could not be reached."""


class BlockVisionProvider(IndexerProvider):
    """BlockVision account-token indexer"""

    name = "blockvision"
    timeout_s = 15

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = settings.blockvision_api_key if api_key is None else api_key
        self.base_url = (base_url or settings.blockvision_base_url).rstrip("/")
        self._client = client

    async def ready(self) -> bool:
        return bool(self.api_key)

    async def health_check(self) -> Dict[str, Any]:
        if not await self.ready():
            return {"status": "unavailable", "reason": "API key not configured"}
        return {"status": "configured"}

    async def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"x-api-key": self.api_key, "accept": "application/json"}
        if self._client is not None:
            response = await self._client.get(url, params=params, headers=headers, timeout=self.timeout_s)
        else:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, params=params, headers=headers, timeout=self.timeout_s)
        response.raise_for_status()
        return response.json()

    async def get_token_balances(self, address: str, chain: str = "monad") -> List[Dict[str, Any]]:
        """
        Raw token rows for ``address``.

        Each row carries ``contractAddress``, ``symbol``, ``name``,
        ``decimal``, ``balance`` (raw integer string) and ``imageURL``.
        """
        url = f"{self.base_url}/{chain}/account/tokens"
        try:
            data = await self._get(url, {"address": address})
        except (httpx.HTTPError, ValueError) as e:
            raise BlockVisionError(f"Failed to fetch token balances: {e}") from e

        if data.get("code") != 0:
            raise BlockVisionError(f"BlockVision error: {data.get('reason') or data.get('message') or 'unknown'}")

        result = data.get("result") or {}
        return list(result.get("data") or [])
