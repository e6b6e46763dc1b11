"""
Main entry point for the game data editor command line.
Usage: python -m gamedata_editor <command> [options]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from . import __version__
from .game_data import GameDataService
from .settings import AppSettings, ConfigError, normalize_level
from .utils.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="gamedata_editor",
        description="Exchange game data tables between the JSON store and CSV files.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--profile", default="default", help="Settings profile name")
    parser.add_argument("--log-level", default=None, help="Console log level (DEBUG, INFO, ...)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_folders(sub: argparse.ArgumentParser, csv: bool = True) -> None:
        sub.add_argument("--data", type=Path, default=None, help="Data folder with <Table>.json files")
        if csv:
            sub.add_argument("--csv", type=Path, default=None, help="Folder with <Table>.csv files")

    add_folders(subparsers.add_parser("export", help="Export all tables from the data folder to CSV"))
    add_folders(subparsers.add_parser("import", help="Update the data folder from CSV files"))
    add_folders(subparsers.add_parser("load-csv", help="Rebuild the data folder from CSV files"))
    add_folders(subparsers.add_parser("fix", help="Repair fixed arrays in the data folder"), csv=False)
    subparsers.add_parser("validate", help="Validate the configuration")

    return parser


def _cmd_export(service: GameDataService, args: argparse.Namespace) -> int:
    service.load_from_folder(args.data)
    written = service.export_csv_folder(args.csv)
    print(f"Exported {len(written)} tables")
    return 0


def _cmd_import(service: GameDataService, args: argparse.Namespace) -> int:
    service.load_from_folder(args.data)
    results = service.import_csv_folder(args.csv)
    for name, result in results.items():
        print(
            f"{name}: {result.updated} updated, {result.skipped} skipped, "
            f"{len(result.failed_fields)} rejected cells"
        )
    service.save_to_folder(args.data)
    return 0


def _cmd_load_csv(service: GameDataService, args: argparse.Namespace) -> int:
    total = service.load_from_csv_folder(args.csv)
    service.save_to_folder(args.data)
    print(f"Loaded {total} rows from CSV")
    return 0


def _cmd_fix(service: GameDataService, args: argparse.Namespace) -> int:
    service.load_from_folder(args.data)
    fields_fixed, arrays_fixed = service.fix_fields()
    service.save_to_folder(args.data)
    print(f"Fixed {fields_fixed} fields and {arrays_fixed} array slots")
    return 0


def _cmd_validate(settings: AppSettings) -> int:
    validation = settings.validate()
    for warning in validation.warnings:
        print(f"warning: {warning}")
    for error in validation.errors:
        print(f"error: {error}")
    print("Configuration is valid" if validation.is_valid else "Configuration is invalid")
    return 0 if validation.is_valid else 1


COMMANDS: Dict[str, Callable[[GameDataService, argparse.Namespace], int]] = {
    "export": _cmd_export,
    "import": _cmd_import,
    "load-csv": _cmd_load_csv,
    "fix": _cmd_fix,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)
    logger = logging.getLogger(f"{__name__}.main")

    try:
        level = normalize_level(args.log_level) if args.log_level else None
        settings = AppSettings(args.profile)
        setup_logging(settings, level)
        logger.info(f"Configuration loaded from {settings.get_settings_file_path()}")

        if args.command == "validate":
            return _cmd_validate(settings)

        service = GameDataService(settings=settings)
        return COMMANDS[args.command](service, args)

    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Command '{args.command}' failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
