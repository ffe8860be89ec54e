"""Shared pydantic base and the response envelope used by every route."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Accepts and emits camelCase keys, as the storefront clients send them."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def envelope(success: bool, message: str, data: Any = None, **extra: Any) -> dict[str, Any]:
    """Build the `{success, message, data?}` body returned by all JSON routes."""

    body: dict[str, Any] = {"success": success, "message": message}
    if data is not None:
        if isinstance(data, BaseModel):
            data = data.model_dump(by_alias=True, mode="json")
        elif isinstance(data, list):
            data = [
                item.model_dump(by_alias=True, mode="json") if isinstance(item, BaseModel) else item
                for item in data
            ]
        body["data"] = data
    body.update({key: value for key, value in extra.items() if value is not None})
    return body
