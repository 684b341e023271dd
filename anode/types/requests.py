from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class UserOpHashRequest(BaseModel):
    userOperation: Dict[str, Any] = Field(description="UserOperation in JSON-RPC (camelCase) form")
    entryPointVersion: Optional[str] = Field(default=None, description="EntryPoint version (0.6 or 0.7); defaults to the configured version")
    entryPoint: Optional[str] = Field(default=None, description="EntryPoint address override")
    chainId: Optional[int] = Field(default=None, description="Chain id override")


class UserOpValidateRequest(UserOpHashRequest):
    expectedSigner: str = Field(description="Address expected to have signed the userOpHash")
    expectedPaymaster: Optional[str] = Field(default=None, description="Address expected to have signed the sponsorship")
    now: Optional[int] = Field(default=None, description="Unix timestamp used to check the paymaster validity window")


class PaymasterProcessRequest(BaseModel):
    userOperation: Dict[str, Any] = Field(description="Unsponsored UserOperation in JSON-RPC form")
    entryPointVersion: Optional[str] = Field(default=None, description="EntryPoint version (0.6 or 0.7); defaults to the configured version")
