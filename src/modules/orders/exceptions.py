"""Order lifecycle exceptions.

Raised by the Service Layer; the API layer (Views) catches them and
translates them into HTTP responses.  Only ``ConflictError`` is worth
retrying.
"""

from __future__ import annotations


class OrderLifecycleError(Exception):
    """Base class for every error raised by the order lifecycle."""


class OrderNotFound(OrderLifecycleError):
    """The requested order does not exist."""


class InvalidTransitionError(OrderLifecycleError):
    """The requested status is not reachable from the current one."""

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot transition from {from_status} to {to_status}.")


class ValidationError(OrderLifecycleError):
    """Missing or malformed input, e.g. a shipment without a courier."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"{field} {reason}")


class ConflictError(OrderLifecycleError):
    """A concurrent writer changed the order between read and write."""


class PersistenceError(OrderLifecycleError):
    """The order store failed; nothing can be assumed about partial writes."""
