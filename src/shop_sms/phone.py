from __future__ import annotations

import phonenumbers


def format_phone_number(phone: str, country: str) -> str | None:
    """
    Turn an address-book phone string into a dialable E.164 number.

    `country` is an ISO 3166 alpha-2 code used as the default region when the
    number carries no international prefix. Returns None if the number can't
    be parsed at all.
    """
    raw = phone.strip()
    region = None if raw.startswith("+") else country.strip().upper()
    try:
        parsed = phonenumbers.parse(raw, region)
    except phonenumbers.NumberParseException:
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)
