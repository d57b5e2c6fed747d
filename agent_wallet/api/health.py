from fastapi import APIRouter
from typing import Dict, Any

from ..config import settings
from ..core.chains.registry import ChainRegistry
from ..core.errors import WalletError

router = APIRouter()


@router.get("/healthz")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that verifies wallet configuration"""

    checks: Dict[str, Any] = {
        "private_key": "configured" if settings.has_private_key else "missing",
        "lifi_api_key": "configured" if settings.has_lifi_key else "anonymous",
    }

    try:
        registry = ChainRegistry.from_config(settings.evm_chains)
        checks["chains"] = registry.keys
        chains_ok = True
    except WalletError as exc:
        checks["chains"] = exc.message
        chains_ok = False

    return {
        "status": "healthy" if chains_ok and settings.has_private_key else "degraded",
        "checks": checks,
    }
