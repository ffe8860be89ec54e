"""API request/response schemas for payment endpoints."""

from datetime import datetime

from pydantic import Field, field_validator

from topup.common.schemas import ApiModel


class PaymentVerifyRequest(ApiModel):
    """Payment claim posted by the storefront after the buyer pays."""

    transaction_id: str
    amount: float = Field(ge=1)
    player_id: str
    product_id: str
    product_name: str | None = None
    diamonds: int | None = Field(default=None, ge=0)
    price: float | None = None

    @field_validator("transaction_id", "player_id", "product_id", mode="before")
    @classmethod
    def _strip_required(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be empty")
        return value


class DeliverRequest(ApiModel):
    notes: str | None = None
    delivered_by: str | None = None


class MarkFailedRequest(ApiModel):
    reason: str | None = None


class SampleFormatRequest(ApiModel):
    product_type: str | None = None


class PaymentRead(ApiModel):
    """Stored payment as returned to clients."""

    payment_id: str
    transaction_id: str
    amount: float
    player_id: str
    product_id: str
    product_name: str
    diamonds: int
    price: float
    status: str
    payment_number: str
    notification_sent: bool
    notification_message_ref: str | None = None
    failed_reason: str | None = None
    created_at: datetime
    verified_at: datetime | None = None
    completed_at: datetime | None = None
    failed_at: datetime | None = None
