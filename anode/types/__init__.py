from .requests import PaymasterProcessRequest, UserOpHashRequest, UserOpValidateRequest
from .responses import (
    PaymasterProcessResponse,
    ProcessingInfo,
    UserOpHashResponse,
    UserOpValidateResponse,
)

__all__ = [
    "UserOpHashRequest",
    "UserOpValidateRequest",
    "PaymasterProcessRequest",
    "UserOpHashResponse",
    "UserOpValidateResponse",
    "ProcessingInfo",
    "PaymasterProcessResponse",
]
