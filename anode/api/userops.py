from fastapi import APIRouter

from ..config import settings
from ..core.userop import (
    compute_user_op_hash,
    to_hex,
    user_operation_from_rpc,
    validate_user_operation,
)
from ..types import (
    UserOpHashRequest,
    UserOpHashResponse,
    UserOpValidateRequest,
    UserOpValidateResponse,
)

router = APIRouter(prefix="/api/v1/userop")


def _resolve(request: UserOpHashRequest):
    version = settings.resolved_version(request.entryPointVersion)
    entry_point = request.entryPoint or settings.resolve_entry_point(version)
    chain_id = request.chainId if request.chainId is not None else settings.chain_id
    user_op = user_operation_from_rpc(request.userOperation, version)
    return user_op, version, entry_point, chain_id


@router.post("/hash", response_model=UserOpHashResponse)
async def userop_hash(request: UserOpHashRequest) -> UserOpHashResponse:
    user_op, version, entry_point, chain_id = _resolve(request)
    op_hash = compute_user_op_hash(user_op, entry_point, chain_id, version)
    return UserOpHashResponse(
        opHash=to_hex(op_hash),
        version=version.value,
        entryPoint=entry_point,
        chainId=chain_id,
    )


@router.post("/validate", response_model=UserOpValidateResponse)
async def userop_validate(request: UserOpValidateRequest) -> UserOpValidateResponse:
    user_op, version, entry_point, chain_id = _resolve(request)
    result = validate_user_operation(
        user_op,
        entry_point,
        chain_id,
        version,
        expected_signer=request.expectedSigner,
        expected_paymaster=request.expectedPaymaster,
        now=request.now,
    )
    return UserOpValidateResponse(**result.to_dict())
