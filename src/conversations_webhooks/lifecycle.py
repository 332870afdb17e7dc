from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from sqlalchemy.orm import Session

from .errors import ResourceError
from .resource import AddressConfigurationWebhookResource
from .schema import (
    AddressConfigurationWebhookConfig,
    AddressConfigurationWebhookState,
    Timeouts,
    requires_replacement,
)
from .state import delete_state, load_state, load_timeouts, save_state

logger = logging.getLogger(__name__)

Action = Literal["create", "update", "replace", "refresh", "destroy", "import", "gone"]


@dataclass
class ApplyResult:
    action: Action
    state: AddressConfigurationWebhookState | None


def _store(
    db: Session,
    name: str,
    state: AddressConfigurationWebhookState | None,
    timeouts: Timeouts | None = None,
) -> None:
    if state is None:
        delete_state(db, name)
    else:
        save_state(db, name, state, timeouts)


def apply_config(
    db: Session,
    resource: AddressConfigurationWebhookResource,
    name: str,
    config: AddressConfigurationWebhookConfig,
) -> ApplyResult:
    """
    Bring the remote address configuration in line with `config`:

    - no stored state: create
    - `address` or `type` changed: delete, then create
    - otherwise: update in place
    """
    prior = load_state(db, name)

    if prior is None:
        action: Action = "create"
        state = resource.create(config)
    elif requires_replacement(prior, config):
        action = "replace"
        # the old resource goes away under the timeouts it was applied with
        resource.delete(prior.sid, load_timeouts(db, name))
        delete_state(db, name)
        state = resource.create(config)
    else:
        action = "update"
        state = resource.update(prior.sid, config, prior)

    _store(db, name, state, config.timeouts)
    logger.info("Applied %s (%s)", name, action)
    return ApplyResult(action=action, state=state)


def refresh(
    db: Session, resource: AddressConfigurationWebhookResource, name: str
) -> ApplyResult:
    """Re-read the remote resource; stored state is dropped if it no longer exists."""
    prior = load_state(db, name)
    if prior is None:
        raise ResourceError(f"No state stored for {name}")

    state = resource.read(prior.sid, load_timeouts(db, name))
    _store(db, name, state)
    return ApplyResult(action="refresh" if state is not None else "gone", state=state)


def destroy(
    db: Session, resource: AddressConfigurationWebhookResource, name: str
) -> ApplyResult:
    prior = load_state(db, name)
    if prior is None:
        raise ResourceError(f"No state stored for {name}")

    resource.delete(prior.sid, load_timeouts(db, name))
    delete_state(db, name)
    return ApplyResult(action="destroy", state=None)


def import_resource(
    db: Session,
    resource: AddressConfigurationWebhookResource,
    name: str,
    import_id: str,
) -> ApplyResult:
    if load_state(db, name) is not None:
        raise ResourceError(f"{name} already has stored state; destroy or rename it first")

    state = resource.import_state(import_id)
    if state is None:
        raise ResourceError(f"Cannot import non-existent address configuration ({import_id})")

    save_state(db, name, state)
    return ApplyResult(action="import", state=state)
