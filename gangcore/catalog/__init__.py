"""Static progression data - upgrades, doctrines and their validation."""

from .upgrades import (
    UpgradeCatalog,
    UpgradeDefinition,
    UpgradeCategory,
    PurchaseCheck,
    RejectionReason,
    DEFAULT_UPGRADES,
)
from .doctrines import DoctrineRegistry, DoctrineDefinition, DEFAULT_DOCTRINES
from .validation import validate_catalog, ValidationResult

__all__ = [
    "UpgradeCatalog",
    "UpgradeDefinition",
    "UpgradeCategory",
    "PurchaseCheck",
    "RejectionReason",
    "DEFAULT_UPGRADES",
    "DoctrineRegistry",
    "DoctrineDefinition",
    "DEFAULT_DOCTRINES",
    "validate_catalog",
    "ValidationResult",
]
