"""
fontarchive – metadata.py
========================

Best-effort font metadata lookup.

The classification core only needs two strings per font file: the declared
family name and the declared character coverage. Both are obtained from an
external source and either may be missing, which is never an error: callers
fall back to filename heuristics.

Two backends are provided:

- **fc-query** (FontConfig, Linux): ``fc-query -f %{family[0]}`` and
  ``fc-query -f %{charset}``.
- **fontTools**: reads the ``name`` and ``cmap`` tables directly and renders
  the coverage in the same range syntax FontConfig uses, so downstream code
  handles both identically.

A backend is any callable ``Path -> FontMetadata`` (see :data:`MetadataQuery`).
"""

from __future__ import annotations

import re
import shutil
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path

from fontTools.ttLib import TTFont  # type: ignore[import]

#: Family string FontConfig reports when it cannot determine one.
UNKNOWN_FAMILY_SENTINEL = "Unknown Family"

METADATA_BACKENDS = ("auto", "fc-query", "fonttools", "none")

_CHARSET_TOKEN_RE = re.compile(r"^([0-9a-fA-F]+)(?:-([0-9a-fA-F]+))?$")


@dataclass(frozen=True)
class FontMetadata:
    """Declared family name and charset descriptor of a font file.

    ``charset`` uses FontConfig's range syntax: space-separated hexadecimal
    code points or ``start-end`` ranges, e.g. ``"20-7e a0-17f e0a0"``.
    """

    family: str | None = None
    charset: str | None = None

    @property
    def available(self) -> bool:
        return self.family is not None or self.charset is not None


MetadataQuery = Callable[[Path], FontMetadata]


def run_command(argv: list[str]) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        argv,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        check=False,
    )


def _clean_family(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value or value == UNKNOWN_FAMILY_SENTINEL:
        return None
    return value


# -----------------------
# Charset descriptors
# -----------------------
def parse_charset(text: str) -> list[tuple[int, int]]:
    """Parse a FontConfig-style charset descriptor into inclusive ranges.

    Tokens that are not a hex code point or a ``start-end`` hex range are
    skipped, so partially garbled output still yields the usable part.
    """
    ranges: list[tuple[int, int]] = []
    for token in text.split():
        m = _CHARSET_TOKEN_RE.match(token)
        if not m:
            continue
        start = int(m.group(1), 16)
        end = int(m.group(2), 16) if m.group(2) else start
        if end < start:
            start, end = end, start
        ranges.append((start, end))
    return ranges


def format_charset(codepoints: Iterable[int]) -> str:
    """Render code points in FontConfig's compact range syntax.

    Consecutive code points are merged into ``start-end`` ranges::

        >>> format_charset([0x20, 0x21, 0x22, 0xE000])
        '20-22 e000'
    """
    cps = sorted(set(codepoints))
    parts: list[str] = []
    i = 0
    while i < len(cps):
        j = i
        while j + 1 < len(cps) and cps[j + 1] == cps[j] + 1:
            j += 1
        parts.append(_format_range(cps[i], cps[j]))
        i = j + 1
    return " ".join(parts)


def _format_range(start: int, end: int) -> str:
    if start == end:
        return f"{start:x}"
    return f"{start:x}-{end:x}"


# -----------------------
# Backends
# -----------------------
def fc_query_metadata(path: Path) -> FontMetadata:
    """Query family and charset through FontConfig's ``fc-query``.

    Returns an empty :class:`FontMetadata` when ``fc-query`` is not
    installed. A field is ``None`` when the corresponding query fails or
    prints nothing.
    """
    if shutil.which("fc-query") is None:
        return FontMetadata()

    def _query(fmt: str) -> str | None:
        try:
            proc = run_command(["fc-query", "-f", fmt, str(path)])
        except OSError:
            return None
        if proc.returncode != 0:
            return None
        out = (proc.stdout or "").strip()
        return out or None

    return FontMetadata(
        family=_clean_family(_query("%{family[0]}")),
        charset=_query("%{charset}"),
    )


def fonttools_metadata(path: Path) -> FontMetadata:
    """Read family and coverage with fontTools (first face only).

    Formats fontTools cannot open (Type 1, corrupt files) give an empty
    :class:`FontMetadata`.
    """
    try:
        with TTFont(
            path, fontNumber=0, lazy=True, recalcBBoxes=False, recalcTimestamp=False
        ) as tt:
            family: str | None = None
            if "name" in tt:
                family = tt["name"].getBestFamilyName()

            charset: str | None = None
            if "cmap" in tt:
                cmap = tt.getBestCmap() or {}
                charset = format_charset(cmap.keys()) or None
    except Exception:
        return FontMetadata()

    return FontMetadata(family=_clean_family(family), charset=charset)


def no_metadata(path: Path) -> FontMetadata:
    return FontMetadata()


def get_metadata_query(backend: str = "auto") -> MetadataQuery:
    """Return the metadata backend named by ``backend``.

    ``"auto"`` prefers FontConfig when ``fc-query`` is on ``PATH`` (it is
    the tool the system font cache itself uses) and otherwise uses fontTools.
    """
    if backend == "auto":
        if shutil.which("fc-query") is not None:
            return fc_query_metadata
        return fonttools_metadata
    if backend == "fc-query":
        return fc_query_metadata
    if backend == "fonttools":
        return fonttools_metadata
    if backend == "none":
        return no_metadata
    expected = ", ".join(METADATA_BACKENDS)
    raise ValueError(f"Unknown metadata backend {backend!r} (expected: {expected})")
