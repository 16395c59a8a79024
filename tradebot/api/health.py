from fastapi import APIRouter
from typing import Dict, Any

from ..core.chains.registry import all_networks
from ..core.recovery.errors import TradeError
from ..providers.blockvision import BlockVisionProvider
from ..providers.rpc import get_rpc_client

router = APIRouter()


async def _rpc_status(rpc_url: str) -> Dict[str, Any]:
    try:
        block = await get_rpc_client(rpc_url).block_number()
    except TradeError as e:
        return {"status": "unavailable", "reason": e.reason or e.message}
    return {"status": "healthy", "block_number": block}


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that verifies RPC reachability per network"""

    networks = {}
    for key, network in all_networks().items():
        networks[key] = {"chain_id": network.chain_id, **await _rpc_status(network.rpc_url)}

    indexer = await BlockVisionProvider().health_check()

    reachable = sum(1 for status in networks.values() if status["status"] == "healthy")

    return {
        "status": "healthy" if reachable == len(networks) else "degraded",
        "networks": networks,
        "indexer": indexer,
        "reachable_networks": reachable,
        "total_networks": len(networks),
    }
