#!/usr/bin/env python3
"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

StudySweep CLI: rank cleanup suggestions for a study folder, then preview,
recycle or archive them, and look after old archives.
Nothing is ever erased outright: files go to the system trash or to a dated archive.
"""
from __future__ import annotations
import argparse
import sys
import os
import time
from pathlib import Path
from typing import List, NoReturn, Optional
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from studysweep.aliases import (
    CLEANUP_MODE_ALIASES, CLEANUP_MODE_CHOICES, CLEANUP_MODE_HELP_TEXT,
    SCAN_MODE_ALIASES, SCAN_MODE_CHOICES, SCAN_MODE_HELP_TEXT,
    EPILOG_TEXT
)
from studysweep.archive.models import CleanupMode, CleanupResult
from studysweep.commands import SweepCommand
from studysweep.context import SweepContext, default_archive_root
from studysweep.core.models import FileRecord, ScanParams, ScanResult
from studysweep.decisions import ConsoleDecisionProvider, FixedDecisionProvider
from studysweep.errors import ManifestWriteError, StudySweepError
from studysweep.utils.convert_utils import ConvertUtils


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "--archive-root",
            default=None,
            type=str,
            metavar='',
            help=f"Where archives are kept. Default: ~/{default_archive_root().name}"
        )
        common.add_argument(
            "--yes", "-y",
            action="store_true",
            help="Answer every question with yes/skip (for automation/scripts)"
        )
        common.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        common.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show debug logging and timing"
        )

        scan_options = argparse.ArgumentParser(add_help=False)
        scan_options.add_argument("path", type=str, help="Study folder to scan")
        scan_options.add_argument(
            "--age", "-a",
            default=60,
            type=int,
            metavar='',
            help="Files older than this many days count as old. Default: 60"
        )
        scan_options.add_argument(
            "--size", "-s",
            default="100MB",
            type=str,
            metavar='',
            help="Files bigger than this count as large (e.g., 50MB, 1GB). Default: 100MB"
        )
        scan_options.add_argument(
            "--mode",
            choices=SCAN_MODE_CHOICES,
            default="study",
            type=str,
            help=SCAN_MODE_HELP_TEXT
        )
        scan_options.add_argument(
            "--limit", "-n",
            default=None,
            type=int,
            metavar='',
            help="Only consider the N highest-ranked suggestions"
        )
        scan_options.add_argument(
            "--min-confidence",
            default=0.0,
            type=float,
            metavar='',
            dest="min_confidence",
            help="Only consider suggestions at or above this confidence (0-1)"
        )

        parser = argparse.ArgumentParser(
            prog="studysweep",
            description="StudySweep: cleanup suggestions for student folders",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )
        subparsers = parser.add_subparsers(dest="command", required=True)

        subparsers.add_parser(
            "scan",
            parents=[common, scan_options],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Rank files by how safe they are to remove"
        )

        clean = subparsers.add_parser(
            "clean",
            parents=[common, scan_options],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Scan, then preview/recycle/archive the suggestions"
        )
        clean.add_argument(
            "--action",
            choices=CLEANUP_MODE_CHOICES,
            default="preview",
            type=str,
            help=CLEANUP_MODE_HELP_TEXT
        )

        archive = subparsers.add_parser(
            "archive",
            parents=[common],
            formatter_class=argparse.RawTextHelpFormatter,
            help="Manage dated archives"
        )
        archive.add_argument(
            "archive_command",
            choices=["list", "check", "clean", "stats"],
            help="list  : show archive snapshots\n"
                 "check : review archives that are 30+ days old\n"
                 "clean : delete archives older than --days\n"
                 "stats : totals and stale archives"
        )
        archive.add_argument(
            "--days", "-d",
            default=30,
            type=int,
            metavar='',
            help="Age limit for 'archive clean'. Default: 30"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.command in ("scan", "clean"):
            root_path = Path(args.path).expanduser().resolve()
            if not root_path.exists():
                self.error_exit(f"Directory not found: {args.path}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {args.path}")
            if args.age < 0:
                self.error_exit("Age cannot be negative")
            if not ConvertUtils.is_valid_size_format(args.size):
                self.error_exit(f"Invalid size format: {args.size}")
            if args.limit is not None and args.limit < 1:
                self.error_exit("--limit must be at least 1")
            if not 0.0 <= args.min_confidence <= 1.0:
                self.error_exit("--min-confidence must be between 0 and 1")

        if args.command == "archive" and args.days < 0:
            self.error_exit("--days cannot be negative")

        if self.needs_interaction(args) and not args.yes:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot ask for confirmation in a non-interactive session.\n"
                    "Use --yes to proceed without prompts when piping output or running in scripts."
                )

    @staticmethod
    def needs_interaction(args: argparse.Namespace) -> bool:
        if args.command == "clean":
            return CLEANUP_MODE_ALIASES[args.action] != CleanupMode.PREVIEW
        if args.command == "archive":
            return args.archive_command in ("check", "clean")
        return False

    @staticmethod
    def create_context(args: argparse.Namespace) -> SweepContext:
        if args.yes:
            decisions = FixedDecisionProvider(proceed=True)
        else:
            decisions = ConsoleDecisionProvider()

        if args.archive_root:
            return SweepContext(decisions=decisions, archive_root=Path(args.archive_root).expanduser())
        return SweepContext(decisions=decisions)

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            return ScanParams.from_human_readable(
                root_dir=str(Path(args.path).expanduser().resolve()),
                age_days=args.age,
                size_str=args.size,
                mode=SCAN_MODE_ALIASES[args.mode],
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def run_scan(self, command: SweepCommand, params: ScanParams) -> ScanResult:
        if not self.quiet:
            print(f"Scanning directory: {params.root_dir}")
            print(f"Mode: {params.mode.display_name} - {params.mode.description}")
        try:
            result = command.scan(params)
        except StudySweepError as e:
            self.error_exit(f"Scan failed: {e}")

        if result.truncated:
            self.warning("Scan stopped early: too many files. Try a smaller folder.")
        if self.verbose:
            print("\nScan Statistics:")
            print(result.summary())
        return result

    @staticmethod
    def select_files(result: ScanResult, args: argparse.Namespace) -> List[FileRecord]:
        files = [f for f in result.files if f.confidence >= args.min_confidence]
        if args.limit is not None:
            files = files[:args.limit]
        return files

    def output_suggestions(self, files: List[FileRecord]) -> None:
        """Print suggestions in ranking order."""
        if self.quiet:
            return

        if not files:
            print("No cleanup suggestions.")
            return

        total = sum(f.size_bytes for f in files)
        print(f"\nFound {len(files)} suggestions ({ConvertUtils.bytes_to_human(total)})")
        for idx, record in enumerate(files, 1):
            markers = ""
            if record.is_cloud_synced:
                markers += " [cloud]"
            if record.is_locked:
                markers += " [locked]"
            print(f"{idx:>4}. [{record.confidence:.0%}] {record.category.value:<10} {record.path}"
                  f" [{ConvertUtils.bytes_to_human(record.size_bytes)}]{markers}")
            print(f"          Reason: {record.reason} | Course: {record.course_tag}")

    def execute_cleanup(self, command: SweepCommand, files: List[FileRecord],
                        mode: CleanupMode, force: bool = False) -> Optional[CleanupResult]:
        """Apply mode to files. Always shows the list first; asks once for the batch."""
        if not files:
            return None

        if mode == CleanupMode.PREVIEW:
            result = command.clean(files, mode)
            if not self.quiet:
                print("\nPreview only, nothing was changed.")
                print(f"Would free: {ConvertUtils.bytes_to_human(result.total_size_bytes)}")
                risky = [p for p in result.previews if p.is_cloud_synced or p.is_locked or p.protection]
                if risky:
                    print(f"{len(risky)} files will need confirmation (cloud, locked or protected)")
            return result

        if force:
            print(f"⚠️  WARNING: --yes flag skips confirmation. Proceeding ({mode.description})...")
        else:
            response = input(f"{mode.description}: {len(files)} files. Continue? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Cleanup cancelled by user.")
                return None

        try:
            result = command.clean(files, mode)
        except ManifestWriteError as e:
            if e.result is not None:
                print(e.result.summary())
            self.error_exit(str(e))

        print()
        print(result.summary())
        if result.snapshot_dir:
            print(f"Archive: {result.snapshot_dir}")
        if self.verbose:
            for skipped in result.skipped:
                print(f"  skipped ({skipped.reason.value}): {skipped.path}")
        return result

    def run_archive(self, command: SweepCommand, args: argparse.Namespace) -> None:
        if args.archive_command == "list":
            snapshots = command.list_archives()
            if not snapshots:
                print("No archives found")
                return
            for path, snapshot_date in snapshots:
                print(f"{snapshot_date.isoformat()}  {path}")

        elif args.archive_command == "stats":
            print(command.archive_stats().summary())

        elif args.archive_command == "check":
            surfaced = command.check_reminders()
            if not self.quiet:
                print(f"{len(surfaced)} archives needed attention" if surfaced else "No archives need attention")

        elif args.archive_command == "clean":
            result = command.clean_archives(args.days, skip_confirm=args.yes)
            if result.files_processed or result.failed:
                print(result.summary())
            elif not self.quiet:
                print(f"No archives older than {args.days} days were deleted")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger().setLevel(logging.DEBUG)

        self.validate_args(args)
        command = SweepCommand(self.create_context(args))

        if args.command == "archive":
            self.run_archive(command, args)
        else:
            params = self.create_params(args)
            result = self.run_scan(command, params)
            files = self.select_files(result, args)
            self.output_suggestions(files)
            if args.command == "clean":
                self.execute_cleanup(command, files, CLEANUP_MODE_ALIASES[args.action], force=args.yes)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main(argv=None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run(argv)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
