"""packexport CLI.

Usage:
    packexport export                          # full export to $PACKEXPORT_SYNC_DIR
    packexport export --package homepage --path ./sync --yes
    packexport archive generate --chunk-size 25
    packexport archive generate --package homepage
    packexport archive status
    packexport archive remove
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime
from typing import List, Optional

from config.defaults import DEFAULT_LOG_LEVEL
from config.settings import ExportConfig
from packexport.exceptions import ExportError
from packexport.exporter import export_to_directory, prepare_target, resolve_destination
from packexport.generation import ArtifactManager
from packexport.models.entries import ExportScope
from packexport.pipeline import ExportOrchestrator
from packexport.storage.file_storage import FileStorage
from packexport.storage.files import FileRegistry
from packexport.storage.package_storage import PackageSourceStorage
from packexport.utils.logging_utils import configure_logging

logger = logging.getLogger("packexport.cli")

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_arg_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for all packexport commands."""
    parser = argparse.ArgumentParser(
        prog="packexport",
        description="Export site configuration packages as YAML directories or archives",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging verbosity level (default: $PACKEXPORT_LOG_LEVEL or {DEFAULT_LOG_LEVEL})",
    )
    parser.add_argument(
        "--config-dir",
        type=str,
        default=None,
        help="Source configuration directory (overrides $PACKEXPORT_CONFIG_DIR)",
    )
    parser.add_argument(
        "--file-registry",
        type=str,
        default=None,
        help="Managed file registry YAML (overrides $PACKEXPORT_FILE_REGISTRY)",
    )
    parser.add_argument(
        "--site-name",
        type=str,
        default=None,
        help="Site name used for the archive filename (overrides $PACKEXPORT_SITE_NAME)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # ── export ──────────────────────────────────────────────────────────────────
    export = commands.add_parser(
        "export",
        help="Export package config and files into a directory",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    export.add_argument(
        "--package",
        type=str,
        default=None,
        help="Package id to export; full export when omitted",
    )
    export.add_argument(
        "--path",
        type=str,
        default=None,
        help="Target directory; defaults to $PACKEXPORT_SYNC_DIR",
    )
    export.add_argument(
        "-y",
        "--yes",
        action="store_true",
        default=False,
        help="Replace the contents of a non-empty target directory without asking",
    )

    # ── archive ─────────────────────────────────────────────────────────────────
    archive = commands.add_parser("archive", help="Manage the site's package archive")
    actions = archive.add_subparsers(dest="action", required=True)

    generate = actions.add_parser(
        "generate",
        help="(Re)generate the package archive in batches",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    generate.add_argument(
        "--package",
        type=str,
        default=None,
        help="Package id to export; full export when omitted",
    )
    generate.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Entries per batch (default: $PACKEXPORT_FULL_EXPORT_LIMIT)",
    )
    actions.add_parser("status", help="Show the generated archive")
    actions.add_parser("remove", help="Delete the generated archive")

    return parser


def args_to_config(args: argparse.Namespace) -> ExportConfig:
    """Build an ExportConfig from environment defaults and CLI overrides."""
    config = ExportConfig()
    if args.config_dir:
        config.config_dir = args.config_dir
    if args.file_registry:
        config.file_registry = args.file_registry
    if args.site_name:
        config.site_name = args.site_name
    if args.log_level:
        config.log_level = args.log_level
    return config


def _scope(package: Optional[str]) -> ExportScope:
    return ExportScope.named(package) if package else ExportScope.full()


def _prompt_confirm(message: str) -> bool:
    if not sys.stdin.isatty():
        return False
    answer = input(f"{message} Continue? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def cmd_export(args: argparse.Namespace, config: ExportConfig) -> int:
    """Flat-file export of one package (or everything) into a directory."""
    files = FileRegistry.from_yaml(config.file_registry)
    store = FileStorage(config.config_dir)

    destination = resolve_destination(args.path, config.sync_dir)
    source = PackageSourceStorage(
        store,
        _scope(args.package),
        files=files,
        excluded_types=config.excluded_entity_types(),
    )
    confirm = (lambda _message: True) if args.yes else _prompt_confirm
    target = prepare_target(destination, files=files, confirm=confirm)

    result = export_to_directory(source, target)
    print(result.message)
    return EXIT_SUCCESS


def cmd_archive(args: argparse.Namespace, config: ExportConfig) -> int:
    """Generate, inspect or remove the site's package archive."""
    files = FileRegistry.from_yaml(config.file_registry)
    orchestrator = ExportOrchestrator(
        FileStorage(config.config_dir),
        files=files,
        excluded_types=config.excluded_entity_types(),
    )
    manager = ArtifactManager(config, orchestrator)

    if args.action == "generate":
        summary = manager.generate(_scope(args.package), args.chunk_size)
        for message in orchestrator.last_run.messages:
            print(message)
        print(summary.message)
        print(f"Package file has been successfully generated: {summary.artifact_path}")
    elif args.action == "remove":
        manager.remove()
        print("Package file has been successfully removed.")
    else:
        status = manager.status()
        if status.generated:
            modified = datetime.fromtimestamp(status.modified).isoformat(timespec="seconds")
            print(f"Full package export generated: {status.path}")
            print(f"File size: {status.size_bytes} bytes")
            print(f"File last generated {modified}")
        elif status.in_progress:
            print(f"Package export of {status.path} is in progress.")
        else:
            print("No package export file. Use 'packexport archive generate' to create one.")
    return EXIT_SUCCESS


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entrypoint — parse arguments, build config, dispatch the command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = args_to_config(args)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return EXIT_FAILURE

    configure_logging(log_level=config.log_level)

    try:
        if args.command == "export":
            return cmd_export(args, config)
        return cmd_archive(args, config)
    except ExportError as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(str(exc), file=sys.stderr)
        return EXIT_FAILURE
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
