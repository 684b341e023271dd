import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException

from .. import __version__
from ..config import settings
from ..core.userop import (
    LocalKeySigner,
    PaymasterSponsor,
    SponsorshipPolicy,
    user_operation_from_rpc,
)
from ..types import PaymasterProcessRequest, PaymasterProcessResponse, ProcessingInfo

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/paymaster")


def get_paymaster_sponsor(version: Optional[str] = None) -> Optional[PaymasterSponsor]:
    """Build a sponsor from settings, or None when no paymaster key is configured."""
    if not settings.has_paymaster_key():
        return None
    resolved = settings.resolved_version(version)
    return PaymasterSponsor(
        signer=LocalKeySigner(settings.paymaster_private_key),
        paymaster_address=settings.paymaster_address,
        entry_point=settings.resolve_entry_point(resolved),
        chain_id=settings.chain_id,
        version=resolved,
        validity_seconds=settings.paymaster_validity_seconds,
        policy=SponsorshipPolicy(
            max_call_gas_limit=settings.paymaster_max_call_gas_limit,
            max_fee_per_gas=settings.paymaster_max_fee_per_gas,
            max_cost_per_operation=settings.paymaster_max_cost_per_operation,
        ),
    )


@router.post("/process", response_model=PaymasterProcessResponse, response_model_exclude_none=True)
async def paymaster_process(request: PaymasterProcessRequest) -> PaymasterProcessResponse:
    sponsor = get_paymaster_sponsor(request.entryPointVersion)
    if sponsor is None:
        raise HTTPException(status_code=503, detail="Paymaster signer is not configured")

    user_op = user_operation_from_rpc(request.userOperation, sponsor.version)

    start = time.perf_counter()
    result = sponsor.process(user_op, now=int(time.time()))
    duration_ms = round((time.perf_counter() - start) * 1000, 1)

    payload = result.to_dict()
    payload["processing"] = ProcessingInfo(
        modules=["basic_paymaster"],
        totalDuration=f"{duration_ms}ms",
        service=f"aNode Paymaster v{__version__}",
    )
    response = PaymasterProcessResponse(**payload)
    if not result.success:
        logger.warning("Sponsorship rejected: %s", result.error_code)
        raise HTTPException(status_code=400, detail=response.model_dump(exclude_none=True))
    return response
