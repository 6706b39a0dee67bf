"""
Catalog Validation - Checks static progression data at process start.

Validates that:
1. The upgrade catalog has enough entries and covers every category
2. Upgrade fields are sane (names, positive costs, non-negative levels)
3. Every DoctrineID is registered
4. The curve keeps its anti-inflation shape (caps raise the cost)
"""

from __future__ import annotations
from dataclasses import dataclass

from ..config import CurveConfig
from ..errors import CatalogValidationError
from ..progression.curve import CurveEngine
from ..progression.state import DoctrineID
from .doctrines import DoctrineRegistry
from .upgrades import UpgradeCatalog, UpgradeCategory, UpgradeDefinition

MIN_CATALOG_SIZE = 10


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]

    def raise_for_errors(self) -> None:
        if not self.valid:
            raise CatalogValidationError(self.errors)


def validate_catalog(
    catalog: UpgradeCatalog,
    doctrines: DoctrineRegistry,
    curve: CurveConfig | None = None,
) -> ValidationResult:
    """
    Validate the static data a facade is built from.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if len(catalog) < MIN_CATALOG_SIZE:
        errors.append(f"Catalog has {len(catalog)} upgrades, needs at least {MIN_CATALOG_SIZE}")

    missing = set(UpgradeCategory) - catalog.categories()
    for category in sorted(missing, key=lambda c: c.value):
        errors.append(f"No upgrade in category '{category.value}'")

    for upgrade in catalog:
        errors.extend(_validate_upgrade(upgrade))

    for doctrine_id in DoctrineID:
        definition = doctrines.get(doctrine_id)
        if definition is None:
            errors.append(f"Doctrine '{doctrine_id.value}' is not registered")
        elif not definition.name or not definition.description:
            errors.append(f"Doctrine '{doctrine_id.value}' needs a name and description")
        elif not definition.effects:
            warnings.append(f"Doctrine '{doctrine_id.value}' has no effects")

    if curve is not None:
        errors.extend(_validate_curve(curve))

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_upgrade(upgrade: UpgradeDefinition) -> list[str]:
    errors = []
    if not upgrade.upgrade_id:
        errors.append("Upgrade has empty ID")
    if not upgrade.name:
        errors.append(f"Upgrade '{upgrade.upgrade_id}' has empty name")
    if upgrade.cost <= 0:
        errors.append(f"Upgrade '{upgrade.upgrade_id}' cost must be positive")
    if upgrade.min_level < 0:
        errors.append(f"Upgrade '{upgrade.upgrade_id}' min_level must be >= 0")
    return errors


def _validate_curve(config: CurveConfig) -> list[str]:
    """Each cap must make its first level cost more than the level before."""
    errors = []
    engine = CurveEngine(config)
    for label, cap in (("soft", config.soft_cap_level), ("hard", config.hard_cap_level)):
        if engine.required_xp(cap) <= engine.required_xp(cap - 1):
            errors.append(f"Curve {label} cap at level {cap} does not raise the XP cost")
    return errors
