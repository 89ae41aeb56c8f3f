"""Response envelope shared by every service operation.

Services never raise for expected conditions such as a missing document or
invalid input. They return an Outcome instead, and the HTTP layer renders it
with a single rule: data-bearing outcomes serialize their payload, all others
serialize as ``{"message": ...}``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class OutcomeKind(str, Enum):
    """Enumeration of outcome kinds and their transport status codes."""

    OK = "ok"
    CREATED = "created"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE_FAULT = "store_fault"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES: dict[OutcomeKind, int] = {
    OutcomeKind.OK: 200,
    OutcomeKind.CREATED: 201,
    OutcomeKind.BAD_REQUEST: 400,
    OutcomeKind.UNAUTHORIZED: 401,
    OutcomeKind.NOT_FOUND: 404,
    OutcomeKind.CONFLICT: 409,
    OutcomeKind.STORE_FAULT: 500,
}


@dataclass(frozen=True)
class Outcome:
    """Discriminated result of a service operation.

    Attributes:
        kind: What happened
        payload: Data for data-bearing successes, None otherwise
        message: Human-readable message for message-only outcomes
    """

    kind: OutcomeKind
    payload: Any = None
    message: str | None = None

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    @property
    def is_success(self) -> bool:
        return self.kind in (OutcomeKind.OK, OutcomeKind.CREATED)

    def body(self) -> Any:
        """Return the response body for this outcome."""
        if self.payload is not None:
            return self.payload
        return {"message": self.message or ""}

    @classmethod
    def ok(cls, payload: Any = None, message: str | None = None) -> "Outcome":
        return cls(OutcomeKind.OK, payload=payload, message=message)

    @classmethod
    def created(cls, payload: Any) -> "Outcome":
        return cls(OutcomeKind.CREATED, payload=payload)

    @classmethod
    def bad_request(cls, message: str = "Invalid entry") -> "Outcome":
        return cls(OutcomeKind.BAD_REQUEST, message=message)

    @classmethod
    def not_found(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.NOT_FOUND, message=message)

    @classmethod
    def conflict(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.CONFLICT, message=message)

    @classmethod
    def store_fault(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.STORE_FAULT, message=message)
