"""
Wire models for the Companionly classification service.

Request:  POST <endpoint>  {"user_message": "<trimmed text>"}
Response: {"status": "support"|"crisis", "response": "<text>", "source_info": "<citation>"}

Reply parsing is lenient: unknown keys are ignored and fields of the
wrong type are treated as missing.
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, field_validator


class ServiceRequest(BaseModel):
    """Request body sent to the service."""
    user_message: str


class ServiceReply(BaseModel):
    """Reply body from the service."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    
    status: Optional[str] = None
    response: Optional[str] = None
    source_info: Optional[str] = None
    
    @field_validator("status", "response", "source_info", mode="before")
    @classmethod
    def _drop_non_strings(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None
