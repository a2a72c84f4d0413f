"""Operation Outcome — typed success-or-rejection result returned by every operation.

Invariants:
    - Exactly one of value / rejection is meaningful (ok decides which)
    - A Rejection is a frozen snapshot of a PortHubError: kind, code, message, http_status
    - No raw domain exception crosses the engine boundary — callers branch on ok
    - unwrap() re-raises the original error: only for service-to-service calls
      that sit inside another boundary

Design Decisions:
    - Result object over exceptions at the boundary: callers (HTTP routes, command
      dispatch, tests) handle the error path and the success path the same way
    - Rejection keeps the original error's response envelope so the HTTP shell
      renders it without re-deriving anything
"""

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from porthub.core.errors import ErrorCategory, PortHubError

T = TypeVar("T")


@dataclass(frozen=True)
class Rejection:
    """Why an operation was refused."""
    kind: ErrorCategory
    code: str
    message: str
    http_status: int
    response: dict = field(default_factory=dict, compare=False)
    error: PortHubError | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_error(cls, error: PortHubError) -> "Rejection":
        return cls(
            kind=error.category,
            code=error.code,
            message=error.context.user_message or error.message,
            http_status=error.http_status,
            response=error.to_response(),
            error=error,
        )


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success payload or rejection."""
    value: T | None = None
    rejection: Rejection | None = None

    @property
    def ok(self) -> bool:
        return self.rejection is None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def rejected(cls, error: PortHubError) -> "Outcome[T]":
        return cls(rejection=Rejection.from_error(error))

    def unwrap(self) -> T:
        if self.rejection is not None:
            raise self.rejection.error or PortHubError(
                self.rejection.message, self.rejection.code,
                self.rejection.kind, http_status=self.rejection.http_status,
            )
        return self.value
