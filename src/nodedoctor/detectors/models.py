"""Data models for the detectors package.

Contains the records produced by every detector: individual runtime
installations, the per-manager detection result, and the PATH scan result
produced by the ``path`` pseudo-detector. They are plain data holders with
no filesystem access so that the health engine and the CLI formatters can
import them without pulling in any detection logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class Installation:
    """A single Node.js runtime found on disk.

    Attributes:
        version: Version derived from the install directory name, without
            a leading "v" (e.g. "18.2.0").
        path: The install directory.
        executable: The runtime binary inside ``path``. Always existed at
            discovery time.
        size: Recursive footprint of ``path`` in bytes (best effort).
        verified: Version the binary reported when invoked, or None when
            the invocation failed or was skipped.
        manager: Name of the owning detector (e.g. "nvm").
        arch: Architecture directory for managers that nest one
            (e.g. "x64" for nvs and nodist).
        formula: Homebrew formula name ("node", "node@18").
        real_path: Resolved symlink target for system installs.
    """

    version: str
    path: Path
    executable: Path
    size: int
    verified: str | None
    manager: str
    arch: str | None = None
    formula: str | None = None
    real_path: Path | None = None

    @property
    def major(self) -> str | None:
        """Leading numeric component of ``version``, or None if not numeric."""
        head = self.version.split(".", 1)[0]
        return head if head.isdigit() else None


@dataclass
class DetectorResult:
    """What one detector found during a scan.

    Attributes:
        base_dir: The manager's root directory, resolved whether or not it
            exists. None for detectors without a root (the PATH scan).
        versions_dir: Directory that holds the version subdirectories.
        installations: Discovered installations, in discovery order.
        default_version: The manager's active version, or None when no
            default is configured.
        env_var: Environment variable that relocates this manager's root.
        env_var_set: True when the user actually set ``env_var``.
        real_base_dir: ``base_dir`` with symlinks resolved at scan time,
            so later attribution of PATH binaries never touches the disk.
        extra: Manager-specific details (Volta's inventory directory,
            Homebrew's linked binary, nvm-windows' symlink target).
    """

    base_dir: Path | None
    versions_dir: Path | None = None
    installations: list[Installation] = field(default_factory=list)
    default_version: str | None = None
    env_var: str | None = None
    env_var_set: bool = False
    real_base_dir: Path | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def total_size(self) -> int:
        return sum(inst.size for inst in self.installations)


@dataclass(frozen=True)
class PathNode:
    """A runtime executable found on one PATH entry.

    Attributes:
        path_dir: The PATH directory containing the executable.
        executable: Full path of the executable.
        real_path: Symlink target if the executable is a link, else None.
        verified: Version reported by the executable, or None.
    """

    path_dir: Path
    executable: Path
    real_path: Path | None
    verified: str | None

    @property
    def resolved(self) -> Path:
        return self.real_path or self.executable


@dataclass
class PathScanResult(DetectorResult):
    """Result of the ``path`` pseudo-detector.

    The PATH scan is meaningful even when it finds nothing, so it is always
    returned rather than collapsing to None.

    Attributes:
        path_dirs: PATH entries in search order, duplicates removed.
        found_nodes: Executables found, in PATH priority order.
        active_node: The executable a shell would run (the first found).
    """

    path_dirs: list[Path] = field(default_factory=list)
    found_nodes: list[PathNode] = field(default_factory=list)
    active_node: Path | None = None


ScanResults = dict[str, "DetectorResult | None"]
"""Detector name -> result (or None when absent), in registry order."""
