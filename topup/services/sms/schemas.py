"""API request/response schemas for SMS endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from topup.common.schemas import ApiModel

SmsStatus = Literal["received", "forwarded", "failed"]


class SmsReceive(ApiModel):
    """Payload posted by the forwarding app on the phone."""

    sender: str | None = None
    message: str = Field(min_length=1)
    timestamp: datetime | None = None
    device_id: str | None = None

    @field_validator("sender", "message", "device_id", mode="before")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if isinstance(value, str) else value


class SmsStatusUpdate(ApiModel):
    status: SmsStatus | None = None
    forwarded: bool | None = None
    notes: str | None = None


class SmsFilters(ApiModel):
    device_id: str | None = None
    sender: str | None = None
    status: SmsStatus | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class SmsRead(ApiModel):
    id: str
    sender: str
    message: str
    timestamp: datetime
    device_id: str
    status: str
    forwarded: bool
    forwarded_at: datetime | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
