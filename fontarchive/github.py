"""
fontarchive – github.py
======================

Download of font repositories from GitHub.

Repositories are cloned with ``git``; when ``.gitattributes`` declares LFS
tracking the LFS objects are pulled as well (if ``git-lfs`` is installed),
since font repositories commonly store their binaries in LFS.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from pathlib import Path

from fontarchive.collect import find_font_files

_GITHUB_URL_RE = re.compile(r"^https://github\.com/[^/]+/[^/]+/?$")
_SHORT_REPO_RE = re.compile(r"^[^/]+/[^/]+$")


def validate_github_url(url: str) -> bool:
    """Accept ``https://github.com/<owner>/<repo>[/]`` or ``<owner>/<repo>``."""
    return bool(_GITHUB_URL_RE.match(url) or _SHORT_REPO_RE.match(url))


def normalize_github_url(url: str) -> str:
    if url.startswith("https://github.com/"):
        return url
    if _SHORT_REPO_RE.match(url):
        return f"https://github.com/{url}"
    return url


def _uses_lfs(clone_dir: Path) -> bool:
    attributes = clone_dir / ".gitattributes"
    if not attributes.is_file():
        return False
    return "lfs" in attributes.read_text(encoding="utf-8", errors="replace")


def download_github_fonts(repo_url: str, clone_dir: Path) -> int:
    """Clone ``repo_url`` into ``clone_dir`` and count the font files in it.

    An existing ``clone_dir`` is removed first so every run starts from a
    fresh clone.

    Returns:
        Number of font files found in the clone.

    Raises:
        ValueError: ``repo_url`` is not a GitHub repository reference.
        RuntimeError: ``git`` is missing or the clone failed.
    """
    if not validate_github_url(repo_url):
        raise ValueError(f"Invalid GitHub repository URL: {repo_url}")
    repo_url = normalize_github_url(repo_url)

    if shutil.which("git") is None:
        raise RuntimeError("git is not installed")

    print("Downloading fonts from GitHub repository...")
    print(f"  Repository: {repo_url}")
    print(f"  Clone directory: {clone_dir}")

    if clone_dir.exists():
        print("Removing existing clone directory...")
        shutil.rmtree(clone_dir)

    proc = subprocess.run(
        ["git", "clone", repo_url, str(clone_dir)],
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )
    if proc.returncode != 0:
        raise RuntimeError(f"Failed to clone repository:\n{proc.stdout}")

    if _uses_lfs(clone_dir):
        print("Git LFS detected, pulling LFS files...")
        if shutil.which("git-lfs") is None:
            print("⚠️  Warning: Git LFS not installed, some files may be missing")
        else:
            lfs = subprocess.run(
                ["git", "lfs", "pull"],
                cwd=clone_dir,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
            if lfs.returncode != 0:
                print(f"⚠️  Warning: git lfs pull failed:\n{lfs.stdout}")

    font_count = len(find_font_files(clone_dir, recursive=True))
    print(f"✓ Downloaded {font_count} font files from GitHub")
    return font_count
