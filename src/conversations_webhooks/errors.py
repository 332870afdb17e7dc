from __future__ import annotations

from twilio.base.exceptions import TwilioRestException


class ResourceError(Exception):
    """A resource operation failed; the underlying error is chained as __cause__."""


class ImportIdError(ResourceError):
    """An import ID did not match the expected format."""


def is_not_found_error(exc: BaseException) -> bool:
    return isinstance(exc, TwilioRestException) and exc.status == 404
