"""
Twilio Conversations address configuration webhook resource.

Each operation translates the declared attributes field by field into a
single call against /v1/Configuration/Addresses and maps the response
back into an AddressConfigurationWebhookState.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Final

from twilio.base import values
from twilio.rest import Client

from .errors import ImportIdError, ResourceError, is_not_found_error
from .schema import (
    INTEGRATION_TYPE,
    AddressConfigurationWebhookConfig,
    AddressConfigurationWebhookState,
    Timeouts,
)
from .twilio_client import get_twilio_client

logger = logging.getLogger(__name__)

IMPORT_ID_FORMAT: Final[str] = "/Configuration/Addresses/(.*)"
IMPORT_ID_RE = re.compile(IMPORT_ID_FORMAT)

ClientFactory = Callable[[float], Client]


def format_rfc3339(value: datetime | None) -> str | None:
    """Format a timestamp as RFC 3339 ("Z" suffix for UTC); naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        return text[: -len("+00:00")] + "Z"
    return text


def _optional(value: Any) -> Any:
    return values.unset if value is None else value


def _clearable(value: str | None, prior_value: str | None) -> Any:
    """
    Value to send for an optional string that can be removed remotely.

    - desired value set: send it
    - desired value unset but previously set: send "" so Twilio clears it
    - otherwise: leave it out of the request
    """
    if value:
        return value
    if prior_value:
        return ""
    return values.unset


def _auto_creation_params(
    config: AddressConfigurationWebhookConfig, prior_service_sid: str | None
) -> dict[str, Any]:
    return {
        "auto_creation_enabled": _optional(config.enabled),
        "auto_creation_type": INTEGRATION_TYPE,
        "auto_creation_conversation_service_sid": _clearable(config.service_sid, prior_service_sid),
        "auto_creation_webhook_filters": list(config.webhook_filters),
        "auto_creation_webhook_method": _optional(config.webhook_method),
        "auto_creation_webhook_url": _optional(config.webhook_url),
    }


def state_from_instance(instance: Any) -> AddressConfigurationWebhookState:
    """Map a fetched AddressConfigurationInstance onto the flat resource state."""
    auto_creation: dict[str, Any] = instance.auto_creation or {}
    return AddressConfigurationWebhookState(
        sid=instance.sid,
        account_sid=instance.account_sid,
        address=instance.address,
        service_sid=auto_creation.get("conversation_service_sid"),
        friendly_name=instance.friendly_name,
        enabled=auto_creation.get("enabled"),
        integration_type=auto_creation.get("type"),
        type=instance.type,
        webhook_filters=list(auto_creation.get("webhook_filters") or []),
        webhook_method=auto_creation.get("webhook_method"),
        webhook_url=auto_creation.get("webhook_url"),
        date_created=format_rfc3339(instance.date_created),
        date_updated=format_rfc3339(instance.date_updated),
        url=instance.url,
    )


class AddressConfigurationWebhookResource:
    """
    Create / read / update / delete / import for one address configuration webhook.

    `client_factory` receives the HTTP timeout (seconds) of the operation
    and returns a Twilio REST client; by default the cached client from
    get_twilio_client() is used.
    """

    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self._client_factory = client_factory or get_twilio_client

    def _addresses(self, timeout: float) -> Any:
        return self._client_factory(timeout).conversations.v1.address_configurations

    def create(
        self, config: AddressConfigurationWebhookConfig
    ) -> AddressConfigurationWebhookState | None:
        addresses = self._addresses(config.timeouts.create)
        try:
            created = addresses.create(
                type=config.type,
                address=config.address,
                friendly_name=_clearable(config.friendly_name, None),
                **_auto_creation_params(config, prior_service_sid=None),
            )
        except Exception as exc:
            logger.error("Failed to create address configuration webhook", exc_info=True)
            raise ResourceError(f"Failed to create address configuration webhook: {exc}") from exc

        logger.info(
            "Created address configuration webhook",
            extra={"extra_data": {"sid": created.sid, "address": config.address}},
        )
        return self.read(created.sid, config.timeouts)

    def read(
        self, sid: str, timeouts: Timeouts | None = None
    ) -> AddressConfigurationWebhookState | None:
        """
        Fetch the current remote state.

        Returns None if the address configuration no longer exists, so the
        caller can drop whatever state it holds for it.
        """
        timeouts = timeouts or Timeouts()
        addresses = self._addresses(timeouts.read)
        try:
            instance = addresses(sid).fetch()
        except Exception as exc:
            if is_not_found_error(exc):
                logger.info(
                    "Address configuration webhook not found",
                    extra={"extra_data": {"sid": sid}},
                )
                return None
            logger.error("Failed to read address configuration webhook", exc_info=True)
            raise ResourceError(f"Failed to read address configuration webhook: {exc}") from exc

        return state_from_instance(instance)

    def update(
        self,
        sid: str,
        config: AddressConfigurationWebhookConfig,
        prior: AddressConfigurationWebhookState | None = None,
    ) -> AddressConfigurationWebhookState | None:
        """
        Update the mutable attributes in place.

        `address` and `type` are never sent; changing them needs a replacement
        (see schema.requires_replacement).
        """
        prior_friendly_name = prior.friendly_name if prior else None
        prior_service_sid = prior.service_sid if prior else None

        addresses = self._addresses(config.timeouts.update)
        try:
            updated = addresses(sid).update(
                friendly_name=_clearable(config.friendly_name, prior_friendly_name),
                **_auto_creation_params(config, prior_service_sid=prior_service_sid),
            )
        except Exception as exc:
            logger.error("Failed to update address configuration webhook", exc_info=True)
            raise ResourceError(f"Failed to update address configuration webhook: {exc}") from exc

        logger.info(
            "Updated address configuration webhook",
            extra={"extra_data": {"sid": updated.sid}},
        )
        return self.read(updated.sid, config.timeouts)

    def delete(self, sid: str, timeouts: Timeouts | None = None) -> None:
        timeouts = timeouts or Timeouts()
        addresses = self._addresses(timeouts.delete)
        try:
            addresses(sid).delete()
        except Exception as exc:
            logger.error("Failed to delete address configuration webhook", exc_info=True)
            raise ResourceError(f"Failed to delete address configuration webhook: {exc}") from exc

        logger.info(
            "Deleted address configuration webhook",
            extra={"extra_data": {"sid": sid}},
        )

    def import_state(
        self, import_id: str, timeouts: Timeouts | None = None
    ) -> AddressConfigurationWebhookState | None:
        """
        Adopt an existing address configuration.

        The import ID must contain /Configuration/Addresses/<sid>, e.g. the
        resource URL https://conversations.twilio.com/v1/Configuration/Addresses/IG...
        An empty SID ("/Configuration/Addresses/") is rejected rather than
        adopted as a resource with no ID.
        """
        match = IMPORT_ID_RE.search(import_id)
        if match is None or not match.group(1):
            raise ImportIdError(
                f"The imported ID ({import_id}) does not match the format ({IMPORT_ID_FORMAT})"
            )
        return self.read(match.group(1), timeouts)
