"""
fontarchive – organize.py
========================

Placement of font files into the canonical tree::

    <base_path>/<format category>/<family>/<original file name>

Placement never overwrites: when the target already exists the file is
either a byte-identical copy (skipped) or a conflict (skipped, the existing
file wins). Per-file problems are reported as :attr:`PlacementDecision.FAILED`
results rather than exceptions so a batch always runs to completion.
"""

from __future__ import annotations

import filecmp
import os
import shutil
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from fontarchive.family import family_from_font_metadata
from fontarchive.formats import FormatCategory, classify_path
from fontarchive.metadata import FontMetadata, MetadataQuery, fc_query_metadata
from fontarchive.nerd_fonts import nerd_font_from_metadata


class PlacementDecision(StrEnum):
    PLACED = "placed"
    SKIPPED_IDENTICAL = "skipped-identical"
    SKIPPED_CONFLICT = "skipped-conflict"
    FAILED = "failed"


@dataclass
class PlacementResult:
    """Outcome of placing one font file."""

    source: Path
    target: Path
    category: FormatCategory
    family: str
    is_nerd: bool
    decision: PlacementDecision
    error: str | None = None


@dataclass
class OrganizeStats:
    """Counters for a batch of placements."""

    total_files: int = 0
    placed: int = 0
    skipped_identical: int = 0
    skipped_conflict: int = 0
    failed: int = 0
    cancelled: bool = False
    errors: list[tuple[str, str]] = field(default_factory=list)

    def record(self, result: PlacementResult) -> None:
        self.total_files += 1
        if result.decision is PlacementDecision.PLACED:
            self.placed += 1
        elif result.decision is PlacementDecision.SKIPPED_IDENTICAL:
            self.skipped_identical += 1
        elif result.decision is PlacementDecision.SKIPPED_CONFLICT:
            self.skipped_conflict += 1
        else:
            self.failed += 1
            self.errors.append((result.source.name, result.error or "unknown error"))

    @property
    def skipped(self) -> int:
        return self.skipped_identical + self.skipped_conflict


def target_path_for(
    path: Path, base_path: Path, category: FormatCategory, family: str
) -> Path:
    return Path(base_path) / category.value / family / path.name


def _compare_existing(source: Path, target: Path) -> PlacementDecision:
    if filecmp.cmp(source, target, shallow=False):
        return PlacementDecision.SKIPPED_IDENTICAL
    return PlacementDecision.SKIPPED_CONFLICT


def _publish_copy(source: Path, target: Path) -> PlacementDecision:
    """Copy ``source`` to ``target`` without ever replacing an existing file.

    The bytes are staged in a hidden sibling file and published with a hard
    link, which fails atomically if ``target`` appeared meanwhile. On
    filesystems without hard links the existence check is repeated right
    before an ``os.replace``.
    """
    # length independent of target.name
    temp_path = target.parent / f".tmp_{uuid.uuid4().hex}"
    try:
        shutil.copyfile(source, temp_path)
        try:
            os.link(temp_path, target)
        except FileExistsError:
            return _compare_existing(source, target)
        except OSError:
            if target.exists():
                return _compare_existing(source, target)
            os.replace(temp_path, target)
        return PlacementDecision.PLACED
    finally:
        if temp_path.exists():
            temp_path.unlink()


def place_font(
    path: Path,
    base_path: Path,
    query: MetadataQuery = fc_query_metadata,
    dry_run: bool = False,
) -> PlacementResult:
    """Classify ``path`` and copy it into the tree rooted at ``base_path``.

    Args:
        path: Source font file. It is only read, never modified.
        base_path: Root of the organized tree (e.g. ``/usr/share/fonts``).
        query: Metadata backend used for family and Nerd Font detection.
        dry_run: Compute the decision without touching the filesystem; a
            file that would be copied reports ``PLACED``.

    Returns:
        A :class:`PlacementResult`; failures carry an ``error`` message.
    """
    path = Path(path)
    category = classify_path(path)
    try:
        meta = query(path)
    except Exception:
        # a raising backend counts as no metadata
        meta = FontMetadata()
    family = family_from_font_metadata(path, meta)
    is_nerd = nerd_font_from_metadata(path, meta)
    target = target_path_for(path, base_path, category, family)

    def _result(
        decision: PlacementDecision, error: str | None = None
    ) -> PlacementResult:
        return PlacementResult(
            source=path,
            target=target,
            category=category,
            family=family,
            is_nerd=is_nerd,
            decision=decision,
            error=error,
        )

    if dry_run:
        try:
            if target.exists():
                return _result(_compare_existing(path, target))
        except OSError as e:
            return _result(
                PlacementDecision.FAILED, f"Cannot compare with {target}: {e}"
            )
        return _result(PlacementDecision.PLACED)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return _result(
            PlacementDecision.FAILED, f"Failed to create directory {target.parent}: {e}"
        )

    try:
        if target.exists():
            return _result(_compare_existing(path, target))
        return _result(_publish_copy(path, target))
    except OSError as e:
        return _result(PlacementDecision.FAILED, f"Failed to copy {path}: {e}")


def plan(
    path: Path,
    base_path: Path,
    query: MetadataQuery = fc_query_metadata,
    dry_run: bool = False,
) -> PlacementDecision:
    """Place one font file and return only the decision."""
    return place_font(path, base_path, query=query, dry_run=dry_run).decision


def organize_fonts(
    paths: Iterable[Path],
    base_path: Path,
    query: MetadataQuery = fc_query_metadata,
    dry_run: bool = False,
    should_stop: Callable[[], bool] | None = None,
    on_result: Callable[[PlacementResult], None] | None = None,
) -> OrganizeStats:
    """Place a batch of font files one at a time.

    ``should_stop`` is consulted before each file; when it returns ``True``
    the batch ends early and ``stats.cancelled`` is set. ``on_result`` is
    called with every :class:`PlacementResult` (used by the CLI to report
    progress).
    """
    stats = OrganizeStats()
    for path in paths:
        if should_stop is not None and should_stop():
            stats.cancelled = True
            break
        result = place_font(path, base_path, query=query, dry_run=dry_run)
        stats.record(result)
        if on_result is not None:
            on_result(result)
    return stats
