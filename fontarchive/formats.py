"""Extension → font format category lookup."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path


class FormatCategory(StrEnum):
    """Top-level directory names used under the fonts base directory."""

    TRUETYPE = "truetype"
    OPENTYPE = "opentype"
    WEBFONTS = "webfonts"
    TYPE1 = "type1"
    UNKNOWN = "unknown"


#: Lowercase extension (without dot) → format category.
FONT_TYPE_MAP: dict[str, FormatCategory] = {
    "ttf": FormatCategory.TRUETYPE,
    "otf": FormatCategory.OPENTYPE,
    "woff": FormatCategory.WEBFONTS,
    "woff2": FormatCategory.WEBFONTS,
    "pfb": FormatCategory.TYPE1,
    "pfa": FormatCategory.TYPE1,
    "pfm": FormatCategory.TYPE1,
}

#: Suffixes (with dot) considered font files during collection.
FONT_EXTENSIONS: frozenset[str] = frozenset(f".{ext}" for ext in FONT_TYPE_MAP)


def classify(extension: str) -> FormatCategory:
    """Map a file extension to its format category.

    The lookup is case-insensitive and tolerates a leading dot, so
    ``"TTF"``, ``"ttf"`` and ``".ttf"`` are equivalent. Anything not in
    :data:`FONT_TYPE_MAP` is :attr:`FormatCategory.UNKNOWN`.
    """
    return FONT_TYPE_MAP.get(extension.lower().lstrip("."), FormatCategory.UNKNOWN)


def classify_path(path: Path) -> FormatCategory:
    # Only the final suffix counts: "font.tar.ttf" is TrueType.
    return classify(path.suffix)


def is_font_file(path: Path) -> bool:
    return path.suffix.lower() in FONT_EXTENSIONS
