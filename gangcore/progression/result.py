"""
Progression Result - Outcome envelope for facade mutations.

Contains:
- Whether the mutation committed
- The committed state (if it did)
- Error message and code (if it was rejected)
- Human-readable changes (for logs and UI toasts)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..errors import ProgressionError


@dataclass
class ProgressionResult:
    """Result of a serialized mutation on one gang."""
    success: bool
    new_state: Any | None = None  # GangProgressionState
    error: str | None = None
    error_code: str | None = None

    changes: list[str] = field(default_factory=list)

    # Operation-specific payload (e.g. the premium action decision)
    detail: Any | None = None

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        state: Any | None = None,
        detail: Any | None = None,
    ) -> ProgressionResult:
        """Create a failure result. `state` is the unchanged current state."""
        return cls(success=False, new_state=state, error=error, error_code=error_code, detail=detail)

    @classmethod
    def from_error(cls, exc: ProgressionError, state: Any | None = None) -> ProgressionResult:
        return cls.failure(str(exc), error_code=exc.error_code, state=state)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        detail: Any | None = None,
    ) -> ProgressionResult:
        """Create a success result with the committed state."""
        return cls(success=True, new_state=state, changes=changes or [], detail=detail)
