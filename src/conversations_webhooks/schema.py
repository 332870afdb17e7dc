from __future__ import annotations

import re
from typing import Final, Literal
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

AddressType = Literal["sms", "whatsapp"]
WebhookMethod = Literal["GET", "POST"]
WebhookFilter = Literal[
    "onMessageAdded",
    "onMessageUpdated",
    "onMessageRemoved",
    "onConversationUpdated",
    "onConversationStateUpdated",
    "onConversationRemoved",
    "onParticipantAdded",
    "onParticipantUpdated",
    "onParticipantRemoved",
    "onDeliveryUpdated",
]

# Auto-creation integration type managed by this resource.
INTEGRATION_TYPE: Final[str] = "webhook"

CONVERSATION_SERVICE_SID_RE = re.compile(r"^IS[0-9a-fA-F]{32}$")

# Changing any of these cannot be done in place: the address configuration
# has to be deleted and created again.
FORCE_NEW_ATTRIBUTES: Final[tuple[str, ...]] = ("address", "type")


class Timeouts(BaseModel):
    """HTTP timeouts in seconds for each resource operation."""

    model_config = ConfigDict(extra="forbid")

    create: float = Field(default=10 * 60, gt=0)
    read: float = Field(default=5 * 60, gt=0)
    update: float = Field(default=10 * 60, gt=0)
    delete: float = Field(default=10 * 60, gt=0)


class AddressConfigurationWebhookConfig(BaseModel):
    """
    Desired attributes of an address configuration webhook.

    Example (JSON):

      {
        "address": "+14155550100",
        "type": "sms",
        "webhook_url": "https://example.com/conversations",
        "webhook_filters": ["onMessageAdded"]
      }
    """

    model_config = ConfigDict(extra="forbid")

    address: str = Field(min_length=1)
    type: AddressType
    webhook_filters: list[WebhookFilter]
    webhook_url: str
    service_sid: str | None = None
    friendly_name: str | None = None
    enabled: bool = True
    webhook_method: WebhookMethod = "POST"
    timeouts: Timeouts = Field(default_factory=Timeouts)

    @field_validator("service_sid")
    @classmethod
    def _check_service_sid(cls, value: str | None) -> str | None:
        if value is not None and not CONVERSATION_SERVICE_SID_RE.match(value):
            raise ValueError(
                f"expected a Conversation service SID matching {CONVERSATION_SERVICE_SID_RE.pattern}"
            )
        return value

    @field_validator("webhook_url")
    @classmethod
    def _check_webhook_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError("expected an http or https URL with a host")
        return value


class AddressConfigurationWebhookState(BaseModel):
    """Attributes of an address configuration webhook as last read from Twilio."""

    sid: str
    account_sid: str | None = None
    address: str | None = None
    service_sid: str | None = None
    friendly_name: str | None = None
    integration_type: str | None = None
    enabled: bool | None = None
    type: str | None = None
    webhook_filters: list[str] = Field(default_factory=list)
    webhook_method: str | None = None
    webhook_url: str | None = None
    date_created: str | None = None
    date_updated: str | None = None
    url: str | None = None


def requires_replacement(
    prior: AddressConfigurationWebhookState, desired: AddressConfigurationWebhookConfig
) -> bool:
    """True if applying `desired` over `prior` needs a delete + create."""
    return any(getattr(prior, name) != getattr(desired, name) for name in FORCE_NEW_ATTRIBUTES)
