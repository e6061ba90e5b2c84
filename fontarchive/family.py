"""
fontarchive – family.py
======================

Canonical family name resolution.

The family name decides the directory a font lands in, so every font file
of a typeface (Regular, Bold, Italic, ...) has to resolve to the same token.
Resolution order:

1. declared family name from the metadata backend, with Nerd Font branding
   removed;
2. otherwise the file name, cut before the first style keyword (or the
   first separator when there is none);
3. Nerd Font variants get an ``NF`` suffix so that patched and unpatched
   builds of a typeface stay in separate directories.
"""

from __future__ import annotations

import re
from pathlib import Path

from fontarchive.metadata import (
    UNKNOWN_FAMILY_SENTINEL,
    FontMetadata,
    MetadataQuery,
    fc_query_metadata,
)
from fontarchive.nerd_fonts import nerd_font_from_metadata
from fontarchive.sanitize import UNKNOWN_NAME, sanitize_font_name

NERD_SUFFIX = "NF"

#: Style words that end the family part of a file name.
STYLE_KEYWORDS: tuple[str, ...] = (
    "regular",
    "normal",
    "bold",
    "italic",
    "light",
    "medium",
    "heavy",
    "black",
    "thin",
    "condensed",
    "extended",
    "oblique",
    "roman",
)

_METADATA_MARKER_RE = re.compile(r"Nerd Font|NF|Powerline", re.IGNORECASE)
_FILENAME_MARKER_RE = re.compile(r"Nerd[-_ ]?Font|Nerd|NF|Powerline", re.IGNORECASE)
_STYLE_RE = re.compile(r"[-_\s]+(?:%s)" % "|".join(STYLE_KEYWORDS), re.IGNORECASE)
_SEPARATOR_RE = re.compile(r"[-_\s]")
_SPACES_RE = re.compile(r"\s+")
_TRAILING_NF_RE = re.compile(r"(?:nf)+$", re.IGNORECASE)


def family_from_metadata(declared: str | None) -> str | None:
    """Sanitized family from a declared family name, or ``None``.

    Nerd Font branding (``Nerd Font``, ``NF``, ``Powerline``) is removed
    first; ``None`` is returned when nothing is left so the caller can fall
    back to the file name.
    """
    if not declared or declared.strip() == UNKNOWN_FAMILY_SENTINEL:
        return None
    stripped = _METADATA_MARKER_RE.sub(" ", declared)
    stripped = _SPACES_RE.sub(" ", stripped).strip()
    if not stripped:
        return None
    return sanitize_font_name(stripped)


def family_from_filename(path: Path) -> str:
    """Sanitized family guessed from a font file name.

    ``JetBrainsMono-NerdFont-Bold.ttf`` gives ``jetbrainsmono`` and
    ``Inter_Variable.ttf`` gives ``inter``.
    """
    base = _FILENAME_MARKER_RE.sub("", Path(path.name).stem)

    m = _STYLE_RE.search(base)
    if m:
        raw = base[: m.start()]
    else:
        raw = _SEPARATOR_RE.split(base, maxsplit=1)[0]

    if not raw:
        raw = base

    return sanitize_font_name(raw)


def apply_nerd_suffix(family: str, is_nerd: bool) -> str:
    """Enforce the ``NF`` suffix rule and the final ``unknown`` fallback."""
    if is_nerd:
        family = _TRAILING_NF_RE.sub("", family)
        if not family.lower().endswith("nf"):
            family = f"{family}{NERD_SUFFIX}"

    if not family or family.lower() == "nf":
        return f"{UNKNOWN_NAME}{NERD_SUFFIX}" if is_nerd else UNKNOWN_NAME

    return family


def resolve_family(path: Path, query: MetadataQuery = fc_query_metadata) -> str:
    """Return the canonical family directory name for a font file.

    The result is deterministic for a given file and metadata backend
    output: lowercase ASCII alphanumerics, optionally followed by ``NF``
    for Nerd Font variants (``unknown`` / ``unknownNF`` as last resort).
    """
    return family_from_font_metadata(path, query(path))


def family_from_font_metadata(path: Path, meta: FontMetadata) -> str:
    """Resolve the family of ``path`` from already fetched metadata."""
    is_nerd = nerd_font_from_metadata(path, meta)

    family = family_from_metadata(meta.family)
    if family is None:
        family = family_from_filename(path)

    return apply_nerd_suffix(family, is_nerd)
