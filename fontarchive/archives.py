"""
fontarchive – archives.py
========================

Extraction of font archives found in the work directory.

zip and tar variants are handled in-process; 7z and rar need the external
``7z`` / ``unrar`` binaries and are skipped with a warning when those are
missing. A broken archive only produces a warning: the remaining archives
are still extracted.
"""

from __future__ import annotations

import shutil
import subprocess
import tarfile
import zipfile
from pathlib import Path

#: Archive suffix (lowercase) → archive kind. Longer suffixes first.
ARCHIVE_SUFFIXES: dict[str, str] = {
    ".tar.gz": "tar",
    ".tar.bz2": "tar",
    ".tar.xz": "tar",
    ".tgz": "tar",
    ".tbz2": "tar",
    ".zip": "zip",
    ".7z": "7z",
    ".rar": "rar",
}


def archive_kind(path: Path) -> str | None:
    """Return ``"zip"``, ``"tar"``, ``"7z"``, ``"rar"`` or ``None``."""
    name = path.name.lower()
    for suffix, kind in ARCHIVE_SUFFIXES.items():
        if name.endswith(suffix):
            return kind
    return None


def find_archives(directory: Path) -> list[Path]:
    """Archives directly inside ``directory`` (not recursive), sorted."""
    if not directory.is_dir():
        return []
    return sorted(
        p for p in directory.iterdir() if p.is_file() and archive_kind(p) is not None
    )


def extract_archive(archive: Path, dest: Path) -> None:
    """Extract one archive into ``dest``.

    Raises:
        RuntimeError: the archive could not be extracted, or the tool it
            needs is not installed.
    """
    kind = archive_kind(archive)
    dest.mkdir(parents=True, exist_ok=True)

    if kind == "zip":
        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(dest)
        except (zipfile.BadZipFile, OSError) as e:
            raise RuntimeError(f"Failed to extract {archive.name}: {e}") from e
        return

    if kind == "tar":
        try:
            with tarfile.open(archive) as tf:
                tf.extractall(dest, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise RuntimeError(f"Failed to extract {archive.name}: {e}") from e
        return

    if kind == "7z":
        argv = ["7z", "x", str(archive), f"-o{dest}", "-y"]
    elif kind == "rar":
        argv = ["unrar", "x", "-o+", str(archive), f"{dest}/"]
    else:
        raise RuntimeError(f"Unknown archive format: {archive.name}")

    if shutil.which(argv[0]) is None:
        raise RuntimeError(f"{argv[0]} not available, skipping {archive.name}")

    proc = subprocess.run(
        argv,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )
    if proc.returncode != 0:
        raise RuntimeError(f"Failed to extract {archive.name}:\n{proc.stdout}")


def extraction_dir_for(archive: Path, extract_root: Path) -> Path:
    # "fonts.tar.gz" -> "fonts.tar", same as stripping the last extension.
    return extract_root / archive.name.rsplit(".", 1)[0]


def extract_archives(
    source_dir: Path, extract_root: Path, verbose: bool = False
) -> list[Path]:
    """Extract every archive found directly in ``source_dir``.

    Each archive goes to its own sub-directory of ``extract_root`` named
    after the archive file minus its last extension.

    Returns:
        The directories that were extracted successfully.
    """
    archives = find_archives(source_dir)
    if not archives:
        if verbose:
            print("No archives found in work directory.")
        return []

    extracted: list[Path] = []
    for archive in archives:
        dest = extraction_dir_for(archive, extract_root)
        print(f"Extracting: {archive.name}")
        try:
            extract_archive(archive, dest)
        except RuntimeError as e:
            print(f"⚠️  Warning: {e}")
            continue
        extracted.append(dest)

    return extracted
