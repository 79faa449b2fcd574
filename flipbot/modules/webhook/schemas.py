"""
Webhook Pydantic schemas.

DTOs for inbound signal payloads.
"""

from typing import Any, Optional
from pydantic import BaseModel, Field, ValidationError


class WebhookPayload(BaseModel):
    """Alert body sent by the charting platform."""
    message: Optional[Any] = Field(None, description="Free-text signal message")
    passphrase: Optional[str] = Field(None, description="Shared secret, required when configured")

    model_config = {
        "extra": "ignore",
        "json_schema_extra": {
            "example": {
                "message": "SuperTrend Buy!"
            }
        }
    }

    @classmethod
    def from_body(cls, body: Any) -> "WebhookPayload":
        """
        Build from any decoded JSON body.

        Arrays, scalars, null and objects with a malformed passphrase carry
        no usable fields and yield an empty payload.
        """
        if not isinstance(body, dict):
            return cls()
        try:
            return cls.model_validate(body)
        except ValidationError:
            return cls(message=body.get("message"))
