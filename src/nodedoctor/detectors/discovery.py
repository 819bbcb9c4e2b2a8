"""Installation discovery: turning a versions directory into installations.

Almost every version manager stores one subdirectory per version and a
runtime binary at a fixed relative path inside it. They differ only in
where that binary sits (``bin/node`` on POSIX, ``node.exe`` on Windows,
``installation/bin/node`` for fnm) and in whether an extra architecture
tier is nested under each version (nvs, nodist).

Discovery Algorithm:
    1. List the immediate subdirectories of the versions directory.
    2. With ``arch_tier``, list each version directory's subdirectories
       as architecture candidates.
    3. Locate the executable via the manager's ``ExecutableLayout``.
    4. Drop candidates whose executable does not exist.
    5. Measure the footprint and ask the binary for its version.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from nodedoctor.detectors.models import Installation
from nodedoctor.host import (
    WINDOWS,
    HostEnvironment,
    file_exists,
    get_dir_size,
    list_subdirs,
    normalize_version,
)


@dataclass(frozen=True)
class ExecutableLayout:
    """Where the runtime binary lives relative to a version directory.

    Attributes:
        unix: Relative path on darwin/linux.
        windows: Relative path on Windows.
    """

    unix: str = "bin/node"
    windows: str = "node.exe"

    def locate(self, version_dir: Path, family: str) -> Path:
        """Return the candidate executable for ``version_dir``."""
        relative = self.windows if family == WINDOWS else self.unix
        return version_dir.joinpath(*PurePosixPath(relative).parts)


DEFAULT_LAYOUT = ExecutableLayout()


def build_installation(
    version: str,
    install_dir: Path,
    executable: Path,
    manager: str,
    host: HostEnvironment,
    arch: str | None = None,
    formula: str | None = None,
) -> Installation:
    """Measure and verify one install directory whose executable exists."""
    return Installation(
        version=normalize_version(version),
        path=install_dir,
        executable=executable,
        size=get_dir_size(install_dir),
        verified=host.verify(executable),
        manager=manager,
        arch=arch,
        formula=formula,
    )


def discover_installations(
    versions_dir: Path,
    layout: ExecutableLayout,
    manager: str,
    host: HostEnvironment,
    arch_tier: bool = False,
) -> list[Installation]:
    """Enumerate the installations under a manager's versions directory.

    Args:
        versions_dir: Directory holding one subdirectory per version.
        layout: Rule mapping a version directory to its executable.
        manager: Name recorded on each installation.
        host: Host used for platform branching and verification.
        arch_tier: True when each version directory nests architecture
            directories (``<version>/<arch>/...``).

    Returns:
        Installations in directory-listing order. Candidates without an
        executable are skipped, not reported.
    """
    installations: list[Installation] = []
    for version in list_subdirs(versions_dir):
        version_dir = versions_dir / version
        if arch_tier:
            candidates = [(version_dir / arch, arch) for arch in list_subdirs(version_dir)]
        else:
            candidates = [(version_dir, None)]

        for install_dir, arch in candidates:
            executable = layout.locate(install_dir, host.family)
            if not file_exists(executable):
                continue
            installations.append(
                build_installation(version, install_dir, executable, manager, host, arch=arch)
            )
    return installations
