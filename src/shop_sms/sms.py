from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .db import SmsSettings


class SmsSettingsIn(BaseModel):
    """
    Provider config as sent by the admin UI.

    Any other keys (including a shopId) are dropped; the shop comes from the
    caller's shop context.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    sms_provider: str | None = Field(default=None, alias="smsProvider")
    api_key: str | None = Field(default=None, alias="apiKey")
    api_token: str | None = Field(default=None, alias="apiToken")
    sms_phone: str | None = Field(default=None, alias="smsPhone")


class SmsSettingsView(BaseModel):
    shop_id: str = Field(serialization_alias="shopId")
    sms_provider: str | None = Field(serialization_alias="smsProvider")
    api_key: str | None = Field(serialization_alias="apiKey")
    has_api_token: bool = Field(serialization_alias="hasApiToken")
    sms_phone: str | None = Field(serialization_alias="smsPhone")

    @classmethod
    def from_row(cls, row: SmsSettings) -> SmsSettingsView:
        return cls(
            shop_id=row.shop_id,
            sms_provider=row.sms_provider,
            api_key=row.api_key,
            has_api_token=bool(row.api_token),
            sms_phone=row.sms_phone,
        )


class SendSms(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    user_id: str = Field(alias="userId")
    shop_id: str = Field(alias="shopId")
