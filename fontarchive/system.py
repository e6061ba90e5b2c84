"""
fontarchive – system.py
======================

Host integration: distribution and package-manager detection, dependency
checks, and the FontConfig cache refresh.

Distribution → package manager and command → package name are plain lookup
tables; supporting a new distribution only needs new entries.
"""

from __future__ import annotations

import os
import platform
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

OS_RELEASE = Path("/etc/os-release")

#: Marker files checked, in order, when /etc/os-release is missing.
RELEASE_FILES: tuple[tuple[str, str], ...] = (
    ("/etc/debian_version", "debian"),
    ("/etc/redhat-release", "rhel"),
    ("/etc/arch-release", "arch"),
    ("/etc/alpine-release", "alpine"),
)

#: Distribution ID prefix → package manager.
DISTRO_PACKAGE_MANAGERS: dict[str, tuple[str, ...]] = {
    "apt": ("ubuntu", "debian", "pop", "elementary", "mint"),
    "dnf": ("fedora", "rhel", "centos", "rocky", "alma"),
    "zypper": ("opensuse", "sles"),
    "pacman": ("arch", "manjaro", "endeavouros"),
    "apk": ("alpine",),
}

#: Package manager → (update argv, install argv prefix).
PACKAGE_MANAGER_COMMANDS: dict[str, tuple[list[str], list[str]]] = {
    "apt": (["apt", "update"], ["apt", "install", "-y"]),
    "dnf": (["dnf", "check-update"], ["dnf", "install", "-y"]),
    "zypper": (["zypper", "refresh"], ["zypper", "install", "-y"]),
    "pacman": (["pacman", "-Sy"], ["pacman", "-S", "--noconfirm"]),
    "apk": (["apk", "update"], ["apk", "add"]),
}

#: Command → package providing it, where the names differ.
COMMAND_PACKAGES: dict[str, str] = {
    "fc-query": "fontconfig",
    "fc-cache": "fontconfig",
    "7z": "p7zip",
}

#: Per-package-manager overrides of :data:`COMMAND_PACKAGES`.
COMMAND_PACKAGES_BY_MANAGER: dict[str, dict[str, str]] = {
    "apt": {"7z": "p7zip-full"},
}

REQUIRED_COMMANDS: dict[str, tuple[str, ...]] = {
    "download-github": ("git",),
    "organize": (),
    "full-process": (),
    "inspect": (),
}

OPTIONAL_COMMANDS: tuple[str, ...] = (
    "fc-query",
    "fc-cache",
    "7z",
    "unrar",
    "git",
    "git-lfs",
)


@dataclass
class DependencyReport:
    missing_required: list[str] = field(default_factory=list)
    missing_optional: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing_required


def _read_os_release_id(path: Path) -> str | None:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    for line in text.splitlines():
        if line.startswith("ID="):
            return line[3:].strip().strip('"').strip("'").lower() or None
    return None


def detect_distro(root: Path = Path("/")) -> str:
    """Return the distribution ID (``ubuntu``, ``fedora``, ...) or ``unknown``.

    ``root`` lets tests point at a fake filesystem tree.
    """
    distro = _read_os_release_id(root / OS_RELEASE.relative_to("/"))
    if distro:
        return distro
    for marker, name in RELEASE_FILES:
        if (root / marker.lstrip("/")).exists():
            return name
    return "unknown"


def get_package_manager(distro: str | None = None) -> str:
    distro = detect_distro() if distro is None else distro
    for manager, prefixes in DISTRO_PACKAGE_MANAGERS.items():
        if any(distro.startswith(prefix) for prefix in prefixes):
            return manager
    return "unknown"


def get_package_name(command: str, manager: str) -> str:
    override = COMMAND_PACKAGES_BY_MANAGER.get(manager, {})
    if command in override:
        return override[command]
    return COMMAND_PACKAGES.get(command, command)


def packages_for(commands: list[str], manager: str) -> list[str]:
    """Unique package names for ``commands``, in first-seen order."""
    packages: list[str] = []
    for cmd in commands:
        pkg = get_package_name(cmd, manager)
        if pkg not in packages:
            packages.append(pkg)
    return packages


def check_dependencies(command: str) -> DependencyReport:
    """Report missing external tools for a CLI command."""
    report = DependencyReport()
    required = REQUIRED_COMMANDS.get(command, ())
    for cmd in required:
        if shutil.which(cmd) is None:
            report.missing_required.append(cmd)
    for cmd in OPTIONAL_COMMANDS:
        if cmd in required:
            continue
        if shutil.which(cmd) is None:
            report.missing_optional.append(cmd)
    return report


def install_packages(packages: list[str], manager: str) -> list[str]:
    """Install ``packages`` with ``manager``.

    Returns:
        The packages that failed to install.

    Raises:
        RuntimeError: the package manager is not supported.
    """
    if manager not in PACKAGE_MANAGER_COMMANDS:
        raise RuntimeError(f"Unsupported package manager: {manager}")

    update_argv, install_argv = PACKAGE_MANAGER_COMMANDS[manager]
    print("Updating package lists...")
    subprocess.run(
        update_argv,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        check=False,
    )

    failed: list[str] = []
    for pkg in packages:
        print(f"Installing {pkg}...")
        proc = subprocess.run(
            install_argv + [pkg],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            check=False,
        )
        if proc.returncode == 0:
            print(f"  ✓ {pkg} installed")
        else:
            print(f"  ✗ Failed to install {pkg}")
            failed.append(pkg)
    return failed


def is_root() -> bool:
    return hasattr(os, "geteuid") and os.geteuid() == 0


def is_windows_or_wsl() -> bool:
    if os.environ.get("WSL_DISTRO_NAME"):
        return True
    release = platform.release()
    return "microsoft" in release.lower() or "WSL" in release


def update_font_cache(verbose: bool = False) -> bool:
    """Run ``fc-cache -f``. Returns ``False`` when it is missing or fails."""
    if shutil.which("fc-cache") is None:
        print("⚠️  fc-cache not available. Font cache not updated.")
        return False

    print("Updating font cache (this may take a moment)...")
    proc = subprocess.run(
        ["fc-cache", "-f"],
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )
    if proc.returncode != 0:
        print("⚠️  Font cache update completed with warnings.")
        if verbose and proc.stdout:
            print(proc.stdout)
        return False

    print("✓ Font cache updated successfully.")
    return True
