"""Device data models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Device(BaseModel):
    """An Echo device registered to the account."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    serial_number: str = Field(alias="serialNumber")
    account_name: str = Field(default="", alias="accountName")
    device_type: str = Field(default="", alias="deviceType")
    software_version: str | None = Field(default=None, alias="softwareVersion")
    device_account_id: str | None = Field(default=None, alias="deviceAccountId")
    online: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)
