"""
fontarchive – sanitize.py
========================

Normalization of free-form family strings into directory-name tokens.

The output of :func:`sanitize_font_name` is used verbatim as a directory
name below ``<fonts_base_dir>/<format>/``, so it must be stable across runs
and safe on every filesystem we care about.
"""

from __future__ import annotations

import re

#: Maximum length of a sanitized family token.
MAX_NAME_LENGTH = 50

#: Fallback token when nothing usable survives sanitization.
UNKNOWN_NAME = "unknown"

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)
_SEPARATORS_RE = re.compile(r"[\s\-_.]+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def collapse_repetition(text: str) -> str:
    """Reduce a string that is an exact tiling of a shorter unit to that unit.

    ``"ababab"`` becomes ``"ab"`` and ``"aaaa"`` becomes ``"a"``, while
    ``"abcab"`` is returned unchanged because no unit tiles it without a
    remainder.

    The smallest ``i > 0`` with ``text == text[i:] + text[:i]`` is the length
    of the primitive root, so a single search gives the fixed point directly.
    """
    n = len(text)
    if n < 2:
        return text
    period = (text + text).find(text, 1)
    if period < n:
        return text[:period]
    return text


def sanitize_font_name(raw: str) -> str:
    """Turn an arbitrary family string into a canonical directory token.

    Steps, in order:

    1. ASCII lowercase (non-ASCII characters are left alone here).
    2. Drop whitespace and the ``-``, ``_`` and ``.`` separators.
    3. Drop everything outside ``[a-z0-9]``.
    4. Collapse an exact repetition to its unit (see
       :func:`collapse_repetition`).
    5. Fall back to ``"unknown"`` when empty.
    6. Truncate to :data:`MAX_NAME_LENGTH` characters, collapsing again if
       the cut left a repetition, so that the function is idempotent.

    Args:
        raw: Family name, file stem, or any other string.

    Returns:
        A string matching ``^[a-z0-9]{1,50}$``.
    """
    name = raw.translate(_ASCII_LOWER)
    name = _SEPARATORS_RE.sub("", name)
    name = _NON_ALNUM_RE.sub("", name)
    name = collapse_repetition(name)

    if not name:
        name = UNKNOWN_NAME

    if len(name) > MAX_NAME_LENGTH:
        # a cut can leave an exact repetition behind ("abab...ab|c...")
        name = collapse_repetition(name[:MAX_NAME_LENGTH])

    return name
