from __future__ import annotations

import enum
import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .db import SmsSettings

logger = logging.getLogger(__name__)


class SmsProvider(enum.Enum):
    TWILIO = "twilio"
    NEXMO = "nexmo"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> SmsProvider:
        """Map a stored provider name to a member; anything unrecognized is UNKNOWN."""
        if value in (cls.TWILIO.value, cls.NEXMO.value):
            return cls(value)
        return cls.UNKNOWN


@dataclass
class SendOutcome:
    provider: SmsProvider
    ok: bool
    error: str | None = None
    raw: Any = None


class TextSender(Protocol):
    def send_text(self, to: str, from_: str, body: str) -> SendOutcome: ...


# --- Lazy SDK loading ---
# The SDKs are imported on first use only, then reused for the rest of the process.

_twilio_client_cls: type[Any] | None = None
_vonage: Any = None


def load_twilio_client() -> type[Any]:
    global _twilio_client_cls
    if _twilio_client_cls is None:
        from twilio.rest import Client

        _twilio_client_cls = Client
    return _twilio_client_cls


def load_vonage() -> Any:
    global _vonage
    if _vonage is None:
        import vonage

        _vonage = vonage
    return _vonage


class TwilioSender:
    def __init__(self, api_key: str, api_token: str, client: Any | None = None) -> None:
        self.api_key = api_key
        self.api_token = api_token
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            client_cls = load_twilio_client()
            self._client = client_cls(self.api_key, self.api_token)
        return self._client

    def send_text(self, to: str, from_: str, body: str) -> SendOutcome:
        from twilio.base.exceptions import TwilioException

        try:
            message = self.client.messages.create(to=to, from_=from_, body=body)
        except (TwilioException, OSError) as exc:
            logger.error("Twilio error: %s", exc)
            return SendOutcome(provider=SmsProvider.TWILIO, ok=False, error=str(exc))

        return SendOutcome(
            provider=SmsProvider.TWILIO, ok=True, raw=getattr(message, "sid", None)
        )


class NexmoSender:
    """Nexmo is now Vonage; the SMS API and its result payload are unchanged."""

    def __init__(self, api_key: str, api_secret: str, sms: Any | None = None) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self._sms = sms

    @property
    def sms(self) -> Any:
        if self._sms is None:
            vonage = load_vonage()
            client = vonage.Client(key=self.api_key, secret=self.api_secret)
            self._sms = vonage.Sms(client)
        return self._sms

    def send_text(self, to: str, from_: str, body: str) -> SendOutcome:
        from vonage.errors import Error as VonageError

        try:
            result = self.sms.send_message({"from": from_, "to": to, "text": body})
        except (VonageError, OSError) as exc:
            logger.error("Nexmo error: %s", exc)
            logger.debug(json.dumps(None))
            return SendOutcome(provider=SmsProvider.NEXMO, ok=False, error=str(exc))

        error_text = _first_error_text(result)
        if error_text:
            logger.error("Nexmo error sending sms: %s", error_text)

        logger.debug(json.dumps(result, default=str))
        return SendOutcome(
            provider=SmsProvider.NEXMO, ok=error_text is None, error=error_text, raw=result
        )


def _first_error_text(result: Any) -> str | None:
    if not isinstance(result, Mapping):
        return None
    messages = result.get("messages")
    if not isinstance(messages, list) or not messages:
        return None
    first = messages[0]
    if not isinstance(first, Mapping):
        return None
    return first.get("error-text") or None


SenderFactory = Callable[[SmsSettings], TextSender]

DEFAULT_SENDERS: Mapping[SmsProvider, SenderFactory] = {
    SmsProvider.TWILIO: lambda s: TwilioSender(s.api_key or "", s.api_token or ""),
    # the stored api token doubles as the Nexmo api secret
    SmsProvider.NEXMO: lambda s: NexmoSender(s.api_key or "", s.api_token or ""),
}
