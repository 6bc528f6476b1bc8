from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from .db import SmsSettings, User
from .phone import format_phone_number
from .providers import DEFAULT_SENDERS, SendOutcome, SenderFactory, SmsProvider
from .sms import SmsSettingsIn

logger = logging.getLogger(__name__)


def get_settings_for_shop(db: Session, shop_id: str) -> SmsSettings | None:
    return db.query(SmsSettings).filter(SmsSettings.shop_id == shop_id).first()


def save_settings(db: Session, shop_id: str, settings: Mapping[str, Any]) -> SmsSettings:
    """
    Store the SMS provider settings of a shop.

    - the shop's existing record (if any) is updated with the supplied fields
    - otherwise a new record is inserted
    - values are stored as given; the provider name is only interpreted at send time
    """
    fields = SmsSettingsIn.model_validate(dict(settings)).model_dump(exclude_unset=True)

    row = get_settings_for_shop(db, shop_id)
    if row is None:
        row = SmsSettings(shop_id=shop_id, **fields)
        db.add(row)
    else:
        for name, value in fields.items():
            setattr(row, name, value)

    db.commit()
    db.refresh(row)
    return row


def _address_book(user: User) -> Mapping[str, Any]:
    profile = user.profile or {}
    address_book = profile.get("addressBook")
    return address_book if isinstance(address_book, Mapping) else {}


def send_message(
    db: Session,
    message: str,
    user_id: str,
    shop_id: str,
    senders: Mapping[SmsProvider, SenderFactory] | None = None,
) -> SendOutcome | None:
    """
    Text `message` to the address-book phone of `user_id` via the shop's provider.

    Best effort: returns None when there is nothing to do (unknown user, no
    phone/country, no settings, unknown provider). Provider failures are
    logged and reported through the returned SendOutcome, never raised.
    """
    user = db.get(User, user_id)
    if user is None:
        return None

    address_book = _address_book(user)
    phone = address_book.get("phone")
    country = address_book.get("country")
    if not phone or not country:
        return None

    sms_settings = get_settings_for_shop(db, shop_id)
    if sms_settings is None:
        return None

    formatted_phone = format_phone_number(str(phone), str(country))
    if formatted_phone is None:
        return None

    provider = SmsProvider.parse(sms_settings.sms_provider)
    if provider is SmsProvider.UNKNOWN:
        return None

    logger.debug("choose %s", provider.value)
    factory = (senders if senders is not None else DEFAULT_SENDERS).get(provider)
    if factory is None:
        return None

    sender = factory(sms_settings)
    return sender.send_text(formatted_phone, sms_settings.sms_phone or "", message)
