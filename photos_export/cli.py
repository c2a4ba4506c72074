"""Command-line entry point: export a library into a dated folder tree."""
from __future__ import annotations

import argparse
import sys
import traceback
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .core.config import ExportConfig
from .core.errors import (
    AuthorizationDeniedError,
    ExportError,
    SettingsError,
    error_details,
)
from .logging.debug_log import configure_debug_logging
from .logging.rich_logger import QuietProgressReporter, RichProgressReporter

DEFAULT_EXPORT_DIRECTORY = Path("~/Pictures/Exports")

PERMISSION_HINT = (
    "Hint: library access is denied. Grant the launching app (often the "
    "terminal) read access to the library, then re-run."
)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="photos-export",
        description="Export photos and videos into <export-directory>/<YYYY>/<MM>/ "
                    "with capture-time based filenames.",
    )
    parser.add_argument(
        "--library",
        type=Path,
        required=True,
        help="Library folder to export from",
    )
    parser.add_argument(
        "--export-directory",
        type=Path,
        default=None,
        help=f"Existing base directory for the export (default: {DEFAULT_EXPORT_DIRECTORY})",
    )
    parser.add_argument(
        "--incremental",
        action="store_true",
        help="Skip files that already exist instead of overwriting them",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="Export assets captured in this year (default: current year)",
    )
    parser.add_argument(
        "--end-year",
        type=int,
        default=None,
        help="Export through this year, inclusive (requires --year)",
    )
    parser.add_argument(
        "--metadata",
        action="store_true",
        help="Probe pixel size of written images and include it in the debug log",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to stderr",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append debug logging to this file (enables debug logging)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser


def build_config(args: argparse.Namespace) -> ExportConfig:
    """Validate arguments into an ExportConfig.

    Raises:
        SettingsError: Invalid values.
    """
    export_root = args.export_directory
    if export_root is None:
        export_root = DEFAULT_EXPORT_DIRECTORY.expanduser()
    else:
        export_root = export_root.expanduser().resolve()
        if not export_root.exists():
            raise SettingsError(f"--export-directory does not exist: {export_root}")

    try:
        return ExportConfig(
            export_root=export_root,
            incremental=args.incremental,
            debug=args.debug,
            log_file=args.log_file,
            probe_metadata=args.metadata,
            year=args.year,
            end_year=args.end_year,
        )
    except ValidationError as e:
        messages = [err["msg"].removeprefix("Value error, ") for err in e.errors()]
        raise SettingsError("; ".join(messages)) from e


def cmd_export(config: ExportConfig, library: Path, reporter) -> int:
    """Run the export and print the summary."""
    from .services.runner import ExportDependencies, ExportRunner
    from .services.sources import CopyResourceWriter, DirectoryAssetSource

    if config.debug_enabled:
        print(f"Export base: {config.export_root}", file=sys.stderr)
        print(f"Errors log:  {config.error_log_path}", file=sys.stderr)
        if config.log_file is not None:
            print(f"Debug log:   {config.log_file}", file=sys.stderr)

    reporter.print_config({
        "Library": str(library),
        "Export Directory": str(config.export_root),
        "Years": config.range_label(),
        "Incremental": config.incremental,
    })

    deps = ExportDependencies.create(
        config,
        source=DirectoryAssetSource(library.expanduser().resolve()),
        writer=CopyResourceWriter(),
        progress=reporter,
    )
    stats = ExportRunner(config, deps).run()

    if stats.total_assets == 0:
        return 0

    reporter.print_stats(stats)
    print(
        f"Export complete: {stats.exported} of {stats.total_assets} assets "
        f"exported to {config.export_root}"
    )
    if stats.error_log is not None:
        print(f"Errors logged to: {stats.error_log}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        reporter = QuietProgressReporter()
        console = None
    else:
        reporter = RichProgressReporter()
        console = reporter.console

    try:
        config = build_config(args)
    except SettingsError as e:
        reporter.error(e.description)
        return 1

    try:
        configure_debug_logging(config.debug, config.log_file, console=console)
        return cmd_export(config, args.library, reporter)
    except KeyboardInterrupt:
        # Clean exit on Ctrl+C - no stack trace
        return 130
    except ExportError as e:
        print(f"Fatal: {error_details(e)}", file=sys.stderr)
        if isinstance(e, AuthorizationDeniedError):
            print(PERMISSION_HINT, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Fatal: {error_details(e)}", file=sys.stderr)
        if config.debug_enabled:
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
