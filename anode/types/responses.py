from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class UserOpHashResponse(BaseModel):
    opHash: str = Field(description="userOpHash (0x-prefixed)")
    version: str = Field(description="EntryPoint version used for the struct layout")
    entryPoint: str = Field(description="EntryPoint address used as domain separator")
    chainId: int = Field(description="Chain id used as domain separator")


class UserOpValidateResponse(BaseModel):
    opHash: str = Field(description="userOpHash the account signature was checked against")
    valid: bool = Field(description="True when every performed check passed")
    signerValid: bool = Field(description="Whether the signature recovers to expectedSigner")
    recoveredSigner: Optional[str] = Field(default=None, description="Address recovered from the account signature")
    paymasterValid: Optional[bool] = Field(default=None, description="Whether the paymaster signature recovers to expectedPaymaster")
    recoveredPaymasterSigner: Optional[str] = Field(default=None, description="Address recovered from the paymaster signature")
    paymasterWindowValid: Optional[bool] = Field(default=None, description="Whether `now` lies inside validAfter..validUntil")


class ProcessingInfo(BaseModel):
    modules: List[str] = Field(default_factory=list, description="Processing modules applied")
    totalDuration: str = Field(description="Wall-clock processing time")
    service: str = Field(description="Service identifier")


class PaymasterProcessResponse(BaseModel):
    success: bool = Field(description="Whether the operation was sponsored or passed through")
    userOperation: Dict[str, Any] = Field(description="UserOperation with paymasterAndData attached")
    paymentMethod: str = Field(description="paymaster or direct-payment")
    sponsorOpHash: Optional[str] = Field(default=None, description="Unsponsored userOpHash the paymaster signed over")
    processing: Optional[ProcessingInfo] = Field(default=None, description="Processing metadata")
    error: Optional[Dict[str, Any]] = Field(default=None, description="Error code and message when unsuccessful")
