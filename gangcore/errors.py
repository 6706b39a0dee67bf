"""
Errors - Exception hierarchy for the progression core.

Every error carries a machine-readable error_code so callers can
translate failures into result envelopes without string matching.

Insufficient premium credits is NOT an exception: it is an expected
business outcome, reported as a Denied action result.
"""

from __future__ import annotations


class ProgressionError(Exception):
    """Base class for all progression core errors."""

    error_code = "PROGRESSION_ERROR"


class InvalidArgument(ProgressionError, ValueError):
    """Malformed numeric input (negative XP, negative credits, NaN...)."""

    error_code = "INVALID_ARGUMENT"


class UnknownUpgrade(ProgressionError):
    """Upgrade ID is not in the static catalog."""

    error_code = "UNKNOWN_UPGRADE"

    def __init__(self, upgrade_id: str):
        self.upgrade_id = upgrade_id
        super().__init__(f"Unknown upgrade: {upgrade_id}")


class AlreadyOwned(ProgressionError):
    """Gang already owns the upgrade."""

    error_code = "ALREADY_OWNED"

    def __init__(self, gang_id: str, upgrade_id: str):
        self.gang_id = gang_id
        self.upgrade_id = upgrade_id
        super().__init__(f"Gang {gang_id} already owns {upgrade_id}")


class LevelTooLow(ProgressionError):
    """Gang level is below the requirement of an upgrade or doctrine."""

    error_code = "LEVEL_TOO_LOW"

    def __init__(self, subject: str, level: int, required: int):
        self.subject = subject
        self.level = level
        self.required = required
        super().__init__(f"{subject} requires level {required} (gang is level {level})")


class UnknownDoctrine(ProgressionError):
    """Doctrine ID is not registered."""

    error_code = "UNKNOWN_DOCTRINE"

    def __init__(self, doctrine_id: str):
        self.doctrine_id = doctrine_id
        super().__init__(f"Unknown doctrine: {doctrine_id}")


class InsufficientFunds(ProgressionError):
    """Funds collaborator refused to deduct ordinary gang funds."""

    error_code = "INSUFFICIENT_FUNDS"

    def __init__(self, gang_id: str, amount: int):
        self.gang_id = gang_id
        self.amount = amount
        super().__init__(f"Gang {gang_id} cannot pay {amount}")


class GangNotFound(ProgressionError, KeyError):
    """No progression record exists for the gang."""

    error_code = "GANG_NOT_FOUND"

    def __init__(self, gang_id: str):
        self.gang_id = gang_id
        super().__init__(f"Gang not found: {gang_id}")

    def __str__(self) -> str:
        return self.args[0]


class GangAlreadyExists(ProgressionError):
    """A progression record already exists for the gang."""

    error_code = "GANG_EXISTS"

    def __init__(self, gang_id: str):
        self.gang_id = gang_id
        super().__init__(f"Gang already exists: {gang_id}")


class CatalogValidationError(ProgressionError):
    """Raised when static catalog or curve data fails validation."""

    error_code = "INVALID_CATALOG"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")
