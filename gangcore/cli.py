"""
Gangcore CLI - Operator tooling for tuning and checking progression data.

Usage:
    gangcore curve [--levels N]     Print the XP curve table
    gangcore level <xp>             Level and progress for a total XP
    gangcore catalog                List upgrades and doctrines
    gangcore validate               Validate catalog and curve settings
    gangcore store-url              Print the resolved premium store URL

Every command accepts --config <settings.json>; GANGCORE_* environment
variables apply on top.
"""

import argparse
import sys

from pydantic import ValidationError


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Gangcore - Gang progression and economy core",
        prog="gangcore",
    )
    parser.add_argument("--config", help="Path to a JSON settings file")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    curve_parser = subparsers.add_parser("curve", help="Print the XP curve table")
    curve_parser.add_argument("--levels", type=int, default=60, help="Number of levels to show")

    level_parser = subparsers.add_parser("level", help="Level for a total XP value")
    level_parser.add_argument("xp", type=int, help="Total XP")

    subparsers.add_parser("catalog", help="List upgrades and doctrines")
    subparsers.add_parser("validate", help="Validate catalog and curve settings")
    subparsers.add_parser("store-url", help="Print the resolved premium store URL")

    args = parser.parse_args(argv)

    commands = {
        "curve": cmd_curve,
        "level": cmd_level,
        "catalog": cmd_catalog,
        "validate": cmd_validate,
        "store-url": cmd_store_url,
    }
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    settings = _load(args.config)

    from .logging_setup import configure_logging
    # stdout carries command output
    configure_logging(settings.log_level, stream=sys.stderr)

    command(args, settings)


def _load(config_path):
    from .config import load_settings
    from .errors import InvalidArgument

    try:
        return load_settings(config_path)
    except FileNotFoundError:
        print(f"Error: File not found: {config_path}")
        sys.exit(1)
    except (InvalidArgument, ValidationError) as e:
        print(f"Error: Invalid settings: {e}")
        sys.exit(1)


def cmd_curve(args, settings):
    """Print level, per-level XP, cumulative XP and cap markers."""
    from .progression import CurveEngine

    if args.levels < 1:
        print("Error: --levels must be >= 1")
        sys.exit(1)

    curve = CurveEngine(settings.curve)
    cfg = settings.curve
    print(f"{'Level':>5}  {'Required XP':>12}  {'Cumulative XP':>14}  Cap")
    for level, required, cumulative in curve.table(args.levels):
        if level >= cfg.hard_cap_level:
            marker = f"hard x{cfg.hard_cap_multiplier}"
        elif level >= cfg.soft_cap_level:
            marker = f"soft x{cfg.soft_cap_multiplier}"
        else:
            marker = ""
        print(f"{level:>5}  {required:>12,}  {cumulative:>14,}  {marker}")


def cmd_level(args, settings):
    """Print the level and progress for a total XP."""
    from .errors import InvalidArgument
    from .progression import CurveEngine

    curve = CurveEngine(settings.curve)
    try:
        progress = curve.progress(args.xp)
    except InvalidArgument as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Level: {progress.level}")
    print(f"Into level: {progress.xp_into_level:,} XP ({progress.fraction:.1%})")
    print(f"To next level: {progress.xp_to_next_level:,} XP")


def cmd_catalog(args, settings):
    """List upgrades by category, then doctrines."""
    from .catalog import DoctrineRegistry, UpgradeCatalog, UpgradeCategory

    catalog = UpgradeCatalog()
    for category in UpgradeCategory:
        print(f"[{category.value}]")
        for upgrade in sorted(catalog.by_category(category), key=lambda u: u.min_level):
            print(f"  {upgrade.upgrade_id:<20} lvl {upgrade.min_level:>2}  ${upgrade.cost:>9,}  {upgrade.name}")

    print("\n[doctrines]")
    for doctrine in DoctrineRegistry():
        print(f"  {doctrine.doctrine_id.value:<20} {doctrine.name}: {doctrine.description}")


def cmd_validate(args, settings):
    """Validate static data. Exits 1 on errors."""
    from .catalog import DoctrineRegistry, UpgradeCatalog, validate_catalog

    result = validate_catalog(UpgradeCatalog(), DoctrineRegistry(), settings.curve)

    if result.warnings:
        print("Warnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("Errors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    print("Catalog OK")


def cmd_store_url(args, settings):
    """Print the premium credits store URL the CTA would use."""
    from .premium import StoreURLResolver

    resolver = StoreURLResolver.from_config(settings.premium_store)
    print(resolver.resolve_premium_credits_store_url())


if __name__ == "__main__":
    main()
