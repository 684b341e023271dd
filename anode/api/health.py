from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter

from .. import __version__
from ..config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint that reports signing configuration"""

    version = settings.resolved_version()
    return {
        "status": "ok",
        "service": "aNode Paymaster",
        "version": __version__,
        "entryPointVersion": version.value,
        "entryPoint": settings.resolve_entry_point(version),
        "chainId": settings.chain_id,
        "paymasterConfigured": settings.has_paymaster_key(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
