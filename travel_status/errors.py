"""Error taxonomy shared by the engine, the collaborators, and the API.

Not-found outcomes are never exceptions: lookups return ``None`` and the
aggregator returns a ``found=False`` result. Lifecycle events received out
of order are logged and ignored by the session tracker.
"""

from typing import Sequence


class TravelStatusError(Exception):
    """Base class for all errors raised by this package."""


class InputValidationError(TravelStatusError):
    """Raised when no usable identifying input was supplied."""

    def __init__(self, message: str, accepted: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.accepted = list(accepted)


class CollaboratorFailure(TravelStatusError):
    """Raised when the store or another external service cannot be reached.

    Covers timeouts, non-2xx responses, and malformed response bodies.
    Callers report it as "service unavailable", never as not-found.
    """

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
