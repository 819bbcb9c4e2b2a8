"""Host primitives: environment lookup, filesystem checks, version queries.

Every detector reads the machine through this module. The helpers are
deliberately forgiving -- a missing directory, a permission error, or a
binary that hangs all collapse to ``False``, ``[]``, ``0`` or ``None`` so
that one unreadable path never aborts a scan.

Process-wide facts (the OS family and the home directory) are computed
once at import time and bundled into a ``HostEnvironment``. Detectors
receive the host explicitly, which lets tests fabricate a home directory,
an environment mapping, and a fake version verifier without touching the
real machine.

Usage::

    host = HostEnvironment.current()
    nvm_dir = host.resolve_base_dir("NVM_DIR", host.home / ".nvm")
    for name in list_subdirs(nvm_dir / "versions" / "node"):
        ...
"""

from __future__ import annotations

import os
import platform
import re
import subprocess
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path

DARWIN = "darwin"
LINUX = "linux"
WINDOWS = "windows"

ALL_FAMILIES: frozenset[str] = frozenset({DARWIN, LINUX, WINDOWS})
POSIX_FAMILIES: frozenset[str] = frozenset({DARWIN, LINUX})

DEFAULT_VERIFY_TIMEOUT = 5.0

# "v18.2.0", "18.2.0", "v21.0.0-nightly2023..." -> captured without the "v"
_VERSION_OUTPUT_RE = re.compile(r"v?(\d+\.\d+\.\d+(?:[-+][0-9A-Za-z.+-]+)?)")


def current_family() -> str:
    """Classify the running OS as darwin, linux or windows."""
    system = platform.system().lower()
    if system == "darwin":
        return DARWIN
    return WINDOWS if system == "windows" else LINUX


PLATFORM_FAMILY: str = current_family()
HOME: Path = Path.home()


# ---------------------------------------------------------------------------
# Environment variables
# ---------------------------------------------------------------------------


def get_env(name: str, env: Mapping[str, str] | None = None) -> str | None:
    """Return an environment variable's value, or None if it is unset."""
    source = os.environ if env is None else env
    return source.get(name)


def resolve_base_dir(
    env_var: str, fallback: Path, env: Mapping[str, str] | None = None,
) -> Path:
    """Return ``$env_var`` when set to a non-empty string, else ``fallback``.

    No existence check is made; callers decide what "not found" means.
    """
    value = get_env(env_var, env)
    return Path(value) if value else fallback


def windows_appdata_dirs(
    tool: str, home: Path, env: Mapping[str, str] | None = None,
) -> tuple[Path, Path]:
    """Return the (local, roaming) AppData candidates for a tool.

    Neither path is checked; callers prefer local over roaming when both
    exist.
    """
    local = get_env("LOCALAPPDATA", env) or str(home / "AppData" / "Local")
    roaming = get_env("APPDATA", env) or str(home / "AppData" / "Roaming")
    return Path(local) / tool, Path(roaming) / tool


def xdg_data_dir(tool: str, home: Path, env: Mapping[str, str] | None = None) -> Path:
    """Return ``$XDG_DATA_HOME/<tool>`` or ``~/.local/share/<tool>``."""
    base = get_env("XDG_DATA_HOME", env) or str(home / ".local" / "share")
    return Path(base) / tool


def mac_app_support_dir(tool: str, home: Path) -> Path:
    """Return ``~/Library/Application Support/<tool>``."""
    return home / "Library" / "Application Support" / tool


# ---------------------------------------------------------------------------
# Filesystem checks
# ---------------------------------------------------------------------------


def dir_exists(path: Path | str) -> bool:
    """True if ``path`` is a directory. Inaccessible paths count as missing."""
    try:
        return Path(path).is_dir()
    except (PermissionError, OSError):
        return False


def file_exists(path: Path | str) -> bool:
    """True if ``path`` is a regular file (symlinks are followed)."""
    try:
        return Path(path).is_file()
    except (PermissionError, OSError):
        return False


def real_path(path: Path | str) -> Path:
    """Resolve symlinks in ``path``; missing components are kept as given."""
    return Path(os.path.realpath(path))


def list_subdirs(path: Path | str) -> list[str]:
    """Return the names of the immediate, non-hidden child directories.

    Symlinked directories are skipped: managers use them as aliases
    (mise's ``20 -> 20.11.0``), and following them would report one
    install twice. Names are sorted so that discovery order is stable
    across filesystems. A missing or unreadable directory yields an
    empty list.
    """
    names: list[str] = []
    try:
        with os.scandir(path) as entries:
            for entry in entries:
                if entry.name.startswith("."):
                    continue
                try:
                    if entry.is_dir(follow_symlinks=False):
                        names.append(entry.name)
                except OSError:
                    continue
    except (PermissionError, OSError):
        return []
    return sorted(names)


def get_dir_size(path: Path | str) -> int:
    """Sum the sizes of all files below ``path``.

    Walks with an explicit directory stack rather than materialising the
    file list. Symlinks are never followed, so cycles cannot recurse, and
    any entry that cannot be listed or stat'ed contributes 0.
    """
    total = 0
    stack = [str(path)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_symlink():
                            continue
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        else:
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except (PermissionError, OSError):
            continue
    return total


# ---------------------------------------------------------------------------
# Version tokens
# ---------------------------------------------------------------------------


def normalize_version(token: str) -> str:
    """Strip surrounding whitespace and a leading "v" from a version token."""
    token = token.strip()
    if token[:1] in ("v", "V") and token[1:2].isdigit():
        return token[1:]
    return token


def parse_version_output(output: str) -> str | None:
    """Extract a normalized version from ``node --version`` style output."""
    match = _VERSION_OUTPUT_RE.search(output)
    return match.group(1) if match else None


def get_node_version(
    executable: Path | str, timeout: float = DEFAULT_VERIFY_TIMEOUT,
) -> str | None:
    """Ask a runtime binary for its own version.

    Runs ``<executable> --version`` with a bounded timeout. Returns the
    normalized version string, or None when the binary is missing, exits
    non-zero, times out, or prints something unparsable.
    """
    try:
        result = subprocess.run(
            [str(executable), "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError, ValueError):
        return None
    if result.returncode != 0:
        return None
    return parse_version_output(result.stdout)


def read_default_version(marker: Path | str) -> str | None:
    """Read a single version token from a marker file.

    Returns the first whitespace-delimited token with any leading "v"
    removed, or None if the file is absent, empty or unreadable.
    """
    try:
        content = Path(marker).read_text(encoding="utf-8", errors="replace")
    except (PermissionError, OSError):
        return None
    tokens = content.split()
    if not tokens:
        return None
    return normalize_version(tokens[0]) or None


# ---------------------------------------------------------------------------
# HostEnvironment: the injected view of the machine
# ---------------------------------------------------------------------------


Verifier = Callable[[Path], str | None]


def _skip_verification(executable: Path) -> str | None:
    return None


@dataclass(frozen=True)
class HostEnvironment:
    """Snapshot of the facts detectors need about the running machine.

    Attributes:
        home: The user's home directory.
        family: OS family (``darwin``, ``linux`` or ``windows``).
        env: Environment variable mapping.
        verifier: Callable asking an executable for its version. The
            default spawns the binary; tests pass a fake.
    """

    home: Path
    family: str = PLATFORM_FAMILY
    env: Mapping[str, str] = field(default_factory=dict)
    verifier: Verifier = get_node_version

    @classmethod
    def current(
        cls, verify: bool = True, timeout: float = DEFAULT_VERIFY_TIMEOUT,
    ) -> HostEnvironment:
        """Capture the running process's home, OS family and environment."""
        verifier: Verifier = (
            partial(get_node_version, timeout=timeout) if verify else _skip_verification
        )
        return cls(home=HOME, family=PLATFORM_FAMILY, env=dict(os.environ), verifier=verifier)

    @property
    def is_windows(self) -> bool:
        return self.family == WINDOWS

    @property
    def is_mac(self) -> bool:
        return self.family == DARWIN

    def get_env(self, name: str) -> str | None:
        return get_env(name, self.env)

    def env_is_set(self, name: str) -> bool:
        return bool(self.get_env(name))

    def resolve_base_dir(self, env_var: str, fallback: Path) -> Path:
        return resolve_base_dir(env_var, fallback, self.env)

    def appdata_dirs(self, tool: str) -> tuple[Path, Path]:
        return windows_appdata_dirs(tool, self.home, self.env)

    def xdg_data_dir(self, tool: str) -> Path:
        return xdg_data_dir(tool, self.home, self.env)

    def mac_app_support_dir(self, tool: str) -> Path:
        return mac_app_support_dir(tool, self.home)

    def first_existing_dir(self, *candidates: Path) -> Path | None:
        """Return the first candidate that is an existing directory."""
        for candidate in candidates:
            if dir_exists(candidate):
                return candidate
        return None

    def verify(self, executable: Path) -> str | None:
        """Run the verifier; any failure degrades to None."""
        try:
            return self.verifier(executable)
        except Exception:
            return None
