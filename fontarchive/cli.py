#!/usr/bin/env python3
"""
fontarchive – cli.py
===================

Command-line driver for the font archival workflow.

Commands
--------
- ``organize [DIR]``: extract archives in DIR, collect font files and copy
  them into ``<fonts base dir>/<format>/<family>/``, then refresh the
  FontConfig cache.
- ``download-github -r URL``: clone a font repository.
- ``full-process [-r URL]``: download (when a URL is given) + organize.
- ``inspect FILE...``: show how files would be classified, without copying.

All per-file problems are reported and counted; only precondition failures
(invalid configuration, unwritable base directory, missing ``git``) abort
the run. Exit status is 0 when no file failed, 1 otherwise, 130 when
interrupted.
"""

from __future__ import annotations

import argparse
import os
import shutil
import signal
import sys
import threading
from pathlib import Path
from typing import Any

from fontarchive.archives import extract_archives
from fontarchive.collect import collect_fonts
from fontarchive.config import ArchiverConfig, load_config
from fontarchive.family import family_from_font_metadata
from fontarchive.formats import classify_path
from fontarchive.github import download_github_fonts
from fontarchive.metadata import METADATA_BACKENDS, MetadataQuery, get_metadata_query
from fontarchive.nerd_fonts import nerd_font_from_metadata
from fontarchive.organize import (
    OrganizeStats,
    PlacementDecision,
    PlacementResult,
    organize_fonts,
)
from fontarchive.system import (
    check_dependencies,
    get_package_manager,
    install_packages,
    is_root,
    is_windows_or_wsl,
    packages_for,
    update_font_cache,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def _error(message: str) -> None:
    print(f"❌ {message}", file=sys.stderr)


# ============================================================
# Argument parsing
# ============================================================


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Base directory of the organized font tree (default: /usr/share/fonts)",
    )
    common.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="JSON configuration file (default: ~/.font_archiver_config if present)",
    )
    common.add_argument(
        "--metadata",
        choices=METADATA_BACKENDS,
        default=None,
        help="Font metadata backend (default: auto)",
    )
    common.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        default=None,
        help="Show what would be done without copying anything",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Enable verbose output",
    )
    common.add_argument(
        "-R",
        "--recursive",
        action="store_true",
        default=None,
        help="Also collect fonts from sub-directories of the work directory",
    )
    common.add_argument(
        "--no-cache-update",
        dest="update_cache",
        action="store_false",
        default=None,
        help="Do not run fc-cache after organizing",
    )
    common.add_argument(
        "--keep-temp",
        action="store_true",
        default=None,
        help="Keep the temporary archive extraction directory",
    )
    common.add_argument(
        "--install-deps",
        action="store_true",
        help="Install missing required tools with the package manager (root only)",
    )

    parser = argparse.ArgumentParser(
        prog="fontarchive",
        description="Download, classify and organize fonts into a fontconfig tree.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    p_org = sub.add_parser(
        "organize", parents=[common], help="Organize fonts from a directory"
    )
    p_org.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=None,
        help="Directory holding font files and archives (default: current directory)",
    )

    p_dl = sub.add_parser(
        "download-github",
        parents=[common],
        help="Download fonts from a GitHub repository",
    )
    p_dl.add_argument("-r", "--repo", required=True, help="GitHub repository URL")

    p_full = sub.add_parser(
        "full-process",
        parents=[common],
        help="Download (optional), extract, organize and refresh the font cache",
    )
    p_full.add_argument("-r", "--repo", default=None, help="GitHub repository URL")
    p_full.add_argument(
        "directory",
        type=Path,
        nargs="?",
        default=None,
        help="Work directory (default: current directory)",
    )

    p_inspect = sub.add_parser(
        "inspect", parents=[common], help="Show how font files would be classified"
    )
    p_inspect.add_argument("files", type=Path, nargs="+", help="Font files")

    return parser


def config_from_args(args: argparse.Namespace) -> ArchiverConfig:
    overrides: dict[str, Any] = {
        "fonts_base_dir": args.output,
        "metadata_backend": args.metadata,
        "dry_run": args.dry_run,
        "verbose": args.verbose,
        "recursive": args.recursive,
        "update_cache": args.update_cache,
        "keep_temp": args.keep_temp,
    }
    directory = getattr(args, "directory", None)
    if directory is not None:
        overrides["work_dir"] = directory.resolve()
    return load_config(args.config, overrides)


# ============================================================
# Preconditions
# ============================================================


def ensure_dependencies(command: str, install: bool, verbose: bool) -> bool:
    """Check external tools; optionally install missing required ones."""
    report = check_dependencies(command)

    if report.missing_optional and verbose:
        print("⚠️  Missing optional tools:")
        for cmd in report.missing_optional:
            print(f"   - {cmd}")

    if report.ok:
        return True

    _error("Missing required tools: " + ", ".join(report.missing_required))
    manager = get_package_manager()
    packages = packages_for(report.missing_required, manager)
    print(f"Required packages: {' '.join(packages)}")

    if not install:
        print("Hint: re-run with --install-deps as root to install them.")
        return False
    if not is_root():
        _error("--install-deps requires root privileges")
        return False

    try:
        failed = install_packages(packages, manager)
    except RuntimeError as e:
        _error(str(e))
        return False
    return not failed and check_dependencies(command).ok


def ensure_base_dir(base: Path, dry_run: bool) -> bool:
    """The base directory must exist (or be creatable) and be writable."""
    if dry_run:
        return True
    try:
        base.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        _error(f"Cannot create fonts base directory {base}: {e}")
        return False
    if not os.access(base, os.W_OK):
        _error(f"Fonts base directory is not writable: {base}")
        print("Hint: run with sudo, or choose another directory with --output.")
        return False
    return True


# ============================================================
# Reporting
# ============================================================


def make_reporter(config: ArchiverConfig):
    def report(result: PlacementResult) -> None:
        name = result.source.name
        rel = f"{result.category}/{result.family}/"
        if config.verbose:
            print(f"Processing: {name}")
            print(f"  Font family: '{result.family}'")
            if result.is_nerd:
                print("  🎯 Nerd Font detected!")
            print(f"  Target: {rel}")

        if result.decision is PlacementDecision.PLACED:
            if config.dry_run:
                print(f"  [DRY-RUN] Would copy {name} -> {result.target}")
            else:
                print(f"  ✓ Organized: {result.target}")
        elif result.decision is PlacementDecision.SKIPPED_IDENTICAL:
            print(f"  Already exists (identical): {result.target}")
        elif result.decision is PlacementDecision.SKIPPED_CONFLICT:
            print(f"  ⚠️  Already exists (different): {result.target}")
        else:
            print(f"  ✗ {name}: {result.error}", file=sys.stderr)

    return report


def print_summary(stats: OrganizeStats, dry_run: bool) -> None:
    verb = "Would organize" if dry_run else "Organized"
    print(
        f"{verb} {stats.placed} of {stats.total_files} font files "
        f"(identical: {stats.skipped_identical}, "
        f"conflicts: {stats.skipped_conflict}, failed: {stats.failed})"
    )
    if stats.errors:
        print("Errors:", file=sys.stderr)
        for filename, reason in stats.errors:
            print(f"  - {filename}: {reason}", file=sys.stderr)
    if stats.cancelled:
        print("⚠️  Interrupted: remaining files were not processed.")


# ============================================================
# Commands
# ============================================================


def run_organize(config: ArchiverConfig, query: MetadataQuery) -> int:
    """Extract, collect and organize; the shared tail of two commands."""
    if not ensure_base_dir(config.fonts_base_dir, config.dry_run):
        return EXIT_FAILURE

    try:
        print("[1/4] Extracting archives in work directory...")
        extract_archives(config.work_dir, config.extract_dir, verbose=config.verbose)

        print("[2/4] Collecting font files...")
        fonts = collect_fonts(config)
        print(f"✓ Found {len(fonts)} font files to process.")
        if not fonts:
            print("No fonts to organize.")
            return EXIT_OK

        print(f"[3/4] Organizing fonts into {config.fonts_base_dir}...")
        stop = threading.Event()

        def _on_sigint(signum, frame):
            if stop.is_set():
                raise KeyboardInterrupt
            print("\nInterrupt received, finishing current file...")
            stop.set()

        report = make_reporter(config)
        partial = OrganizeStats()

        def _on_result(result: PlacementResult) -> None:
            partial.record(result)
            report(result)

        previous = signal.signal(signal.SIGINT, _on_sigint)
        try:
            stats = organize_fonts(
                fonts,
                config.fonts_base_dir,
                query=query,
                dry_run=config.dry_run,
                should_stop=stop.is_set,
                on_result=_on_result,
            )
        except KeyboardInterrupt:
            partial.cancelled = True
            print_summary(partial, config.dry_run)
            return EXIT_INTERRUPTED
        finally:
            signal.signal(signal.SIGINT, previous)

        print_summary(stats, config.dry_run)
        if stats.cancelled:
            return EXIT_INTERRUPTED

        print("[4/4] Updating font cache...")
        if config.dry_run or not config.update_cache:
            print("Skipped.")
        elif stats.placed:
            update_font_cache(verbose=config.verbose)
        else:
            print("Nothing new was placed; cache left as is.")

        return EXIT_FAILURE if stats.failed else EXIT_OK
    finally:
        if not config.keep_temp and config.extract_dir.exists():
            if config.verbose:
                print("Cleaning up temporary extraction directory...")
            shutil.rmtree(config.extract_dir, ignore_errors=True)


def run_download(repo: str, config: ArchiverConfig) -> int:
    try:
        download_github_fonts(repo, config.clone_dir)
    except (ValueError, RuntimeError) as e:
        _error(str(e))
        return EXIT_FAILURE
    return EXIT_OK


def run_inspect(files: list[Path], query: MetadataQuery) -> int:
    status = EXIT_OK
    for path in files:
        if not path.is_file():
            _error(f"Not a file: {path}")
            status = EXIT_FAILURE
            continue
        meta = query(path)
        is_nerd = nerd_font_from_metadata(path, meta)
        print(f"{path.name}")
        print(f"  Type:      {classify_path(path)}")
        print(f"  Family:    {family_from_font_metadata(path, meta)}")
        print(f"  Nerd Font: {'yes' if is_nerd else 'no'}")
        print(f"  Declared:  {meta.family or '-'}")
    return status


# ============================================================
# Main
# ============================================================


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        config = config_from_args(args)
        query = get_metadata_query(config.metadata_backend)
    except ValueError as e:
        _error(str(e))
        return EXIT_FAILURE

    if config.verbose:
        print(f"Work directory: {config.work_dir}")
        print(f"Fonts base directory: {config.fonts_base_dir}")
        if is_windows_or_wsl():
            print("Note: running under WSL; Windows fonts are not scanned.")

    # full-process with a repository needs the same tools as download-github
    dep_command = args.command
    if args.command == "full-process" and args.repo:
        dep_command = "download-github"
    if not ensure_dependencies(dep_command, args.install_deps, config.verbose):
        return EXIT_FAILURE

    try:
        if args.command == "inspect":
            return run_inspect(args.files, query)

        if args.command == "download-github":
            return run_download(args.repo, config)

        if args.command == "full-process" and args.repo:
            status = run_download(args.repo, config)
            if status != EXIT_OK:
                return status

        status = run_organize(config, query)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    if status == EXIT_OK:
        print("✓ Done.")
    return status


if __name__ == "__main__":
    sys.exit(main())
