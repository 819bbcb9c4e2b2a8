"""Shared test helpers for creating fake version-manager trees.

Each helper creates a minimal but realistic directory structure that
simulates one manager's on-disk layout. Fake ``node`` executables are
plain text files holding the version they "report"; the ``fake_verifier``
in ``tests/conftest.py`` reads them back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from nodedoctor.detectors.base import Detector
from nodedoctor.detectors.models import DetectorResult
from nodedoctor.host import HostEnvironment


def write_node(executable: Path, reports: str | None = None, padding: int = 0) -> Path:
    """Create a fake runtime binary.

    Args:
        executable: Where to create it.
        reports: Version the binary claims when run, or None for a binary
            whose output cannot be parsed.
        padding: Extra bytes appended, for size assertions.
    """
    executable.parent.mkdir(parents=True, exist_ok=True)
    text = f"v{reports}\n" if reports else "not a version\n"
    executable.write_text(text + "x" * padding)
    return executable


def create_versions(
    versions_dir: Path,
    versions: list[str],
    executable: str = "bin/node",
    arch: str | None = None,
) -> None:
    """Create one version directory per entry, each with a working binary."""
    for version in versions:
        version_dir = versions_dir / version
        if arch:
            version_dir = version_dir / arch
        write_node(version_dir / executable, version.lstrip("v"))


def create_nvm_home(root: Path, versions: list[str], default: str | None = None) -> Path:
    """Create a fake ~/.nvm with versions under versions/node."""
    create_versions(root / "versions" / "node", versions)
    if default is not None:
        alias_dir = root / "alias"
        alias_dir.mkdir(parents=True, exist_ok=True)
        (alias_dir / "default").write_text(default + "\n")
    return root


def create_fnm_home(root: Path, versions: list[str], default: str | None = None) -> Path:
    """Create a fake fnm directory (node-versions/<v>/installation/bin/node)."""
    create_versions(root / "node-versions", versions, executable="installation/bin/node")
    if default is not None:
        aliases = root / "aliases"
        aliases.mkdir(parents=True, exist_ok=True)
        (aliases / "default").write_text(default)
    return root


def create_volta_home(root: Path, versions: list[str], default: str | None = None) -> Path:
    """Create a fake ~/.volta with a platform.json default."""
    create_versions(root / "tools" / "image" / "node", versions)
    if default is not None:
        user_dir = root / "tools" / "user"
        user_dir.mkdir(parents=True, exist_ok=True)
        (user_dir / "platform.json").write_text(
            json.dumps({"node": {"runtime": default, "npm": None}})
        )
    return root


def create_homebrew_prefix(prefix: Path, formulas: dict[str, list[str]]) -> Path:
    """Create a fake Homebrew prefix with Cellar/<formula>/<version>/bin/node."""
    for formula, versions in formulas.items():
        for version in versions:
            write_node(
                prefix / "Cellar" / formula / version / "bin" / "node",
                version.split("_", 1)[0],
            )
    return prefix


# ---------------------------------------------------------------------------
# Fake detectors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaticDetector(Detector):
    """Detector that returns a canned result."""

    result: DetectorResult | None = None

    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        return self.result


@dataclass(frozen=True)
class ExplodingDetector(Detector):
    """Detector whose logic raises."""

    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        raise RuntimeError("detector exploded")
