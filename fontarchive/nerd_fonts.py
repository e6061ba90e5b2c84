"""
fontarchive – nerd_fonts.py
==========================

Detection of "Nerd Font" variants.

Nerd Fonts are community patches that add icon glyphs in the Unicode
Private Use Area. The declared coverage is the strongest signal; when it is
not available the file name and family name are checked for the usual
branding markers.
"""

from __future__ import annotations

import re
from pathlib import Path

from fontarchive.metadata import (
    FontMetadata,
    MetadataQuery,
    fc_query_metadata,
    parse_charset,
)

#: Private Use Area sub-ranges populated by the Nerd Fonts patcher.
NERD_GLYPH_RANGES: tuple[tuple[int, int], ...] = (
    (0xE000, 0xE3FF),
    (0xF000, 0xF7FF),
)

_NERD_MARKER_RE = re.compile(r"nerd|nf|powerline", re.IGNORECASE)


def charset_has_nerd_glyphs(charset: str | None) -> bool:
    """Return ``True`` when a charset descriptor overlaps a Nerd glyph range."""
    if not charset:
        return False
    for start, end in parse_charset(charset):
        for lo, hi in NERD_GLYPH_RANGES:
            if start <= hi and end >= lo:
                return True
    return False


def has_nerd_marker(text: str | None) -> bool:
    if not text:
        return False
    return _NERD_MARKER_RE.search(text) is not None


def nerd_font_from_metadata(path: Path, meta: FontMetadata) -> bool:
    """Apply the rules of :func:`is_nerd_font` to already fetched metadata."""
    if charset_has_nerd_glyphs(meta.charset):
        return True
    return has_nerd_marker(path.name) or has_nerd_marker(meta.family)


def is_nerd_font(path: Path, query: MetadataQuery = fc_query_metadata) -> bool:
    """Decide whether ``path`` is a Nerd Font variant.

    First match wins:

    1. declared charset overlaps ``E000-E3FF`` or ``F000-F7FF``;
    2. file name or declared family contains ``nerd``, ``NF`` or
       ``powerline`` (case-insensitive);
    3. otherwise ``False``.

    Missing metadata simply skips the checks that need it.
    """
    return nerd_font_from_metadata(path, query(path))
