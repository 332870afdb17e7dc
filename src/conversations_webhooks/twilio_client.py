from __future__ import annotations

from functools import lru_cache

from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from .config import get_settings


@lru_cache
def get_twilio_client(timeout: float | None = None) -> Client:
    """
    Build a Twilio REST client from the configured credentials.

    One client is cached per timeout value, so each resource operation
    (create / read / update / delete) can carry its own HTTP timeout.
    """
    settings = get_settings()

    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise RuntimeError(
            "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
        )

    return Client(
        settings.twilio_account_sid,
        settings.twilio_auth_token,
        http_client=TwilioHttpClient(timeout=timeout),
    )
