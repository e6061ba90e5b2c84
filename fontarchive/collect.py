"""Font file discovery for a run."""

from __future__ import annotations

from pathlib import Path

from fontarchive.config import ArchiverConfig
from fontarchive.formats import is_font_file


def find_font_files(root: Path, recursive: bool = True) -> list[Path]:
    """Font files under ``root``, sorted and de-duplicated.

    Unreadable sub-directories are skipped silently.
    """
    if not root.is_dir():
        return []

    candidates = root.rglob("*") if recursive else root.iterdir()
    found: set[Path] = set()
    try:
        for p in candidates:
            try:
                if p.is_file() and is_font_file(p):
                    found.add(p.resolve())
            except OSError:
                continue
    except OSError:
        # ignore permission issues etc.
        pass
    return sorted(found)


def collect_fonts(config: ArchiverConfig) -> list[Path]:
    """Collect all font files a run should organize.

    Sources:
    - the work directory itself (top level only, unless ``config.recursive``);
    - everything extracted from archives;
    - the repository clone directory.

    Files already inside the fonts base directory are left out.
    """
    found: set[Path] = set()
    found.update(find_font_files(config.work_dir, recursive=config.recursive))
    found.update(find_font_files(config.extract_dir, recursive=True))
    found.update(find_font_files(config.clone_dir, recursive=True))

    base = config.fonts_base_dir.resolve()
    return sorted(p for p in found if not p.is_relative_to(base))
