"""Base interface for version-manager detectors.

Every detector implements the ``Detector`` abstract base class. A detector
is an immutable description of one manager (its name, where it runs,
whether its installs may be offered for removal) plus a single operation:

- ``detect(host)`` -- Inspect the machine read-only and return a populated
  ``DetectorResult``, or None when the manager is not present.

Most managers share one shape: a root directory configurable through an
environment variable, a fixed versions subdirectory under it, a runtime
binary at a fixed relative path, and a marker that names the default
version. ``LayoutDetector`` captures that shape declaratively so that a
manager such as nvm is described by data rather than by code. Managers
with genuinely different layouts subclass ``Detector`` directly (see
``nodedoctor.detectors.managers``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from nodedoctor.detectors.discovery import (
    DEFAULT_LAYOUT,
    ExecutableLayout,
    discover_installations,
)
from nodedoctor.detectors.models import DetectorResult
from nodedoctor.host import ALL_FAMILIES, HostEnvironment, dir_exists, real_path

RootResolver = Callable[[HostEnvironment], Path]
DefaultResolver = Callable[[Path, HostEnvironment], "str | None"]


@dataclass(frozen=True)
class Detector(ABC):
    """Static description of one manager plus its detection logic.

    Attributes:
        name: Stable identifier used as the scan result key (e.g. "nvm").
        display_name: Human-readable name (e.g. "NVM (Node Version Manager)").
        icon: Presentation glyph for menus and tables.
        platforms: OS families the manager is meaningful on.
        can_delete: Whether a surrounding tool may offer to remove its
            installs. False for package-manager and OS-owned runtimes.
        version_manager: False for the ``path`` and ``system``
            pseudo-detectors, which observe runtimes without managing them.
    """

    name: str
    display_name: str
    icon: str
    platforms: frozenset[str] = ALL_FAMILIES
    can_delete: bool = True
    version_manager: bool = True

    def applies_to(self, family: str) -> bool:
        """True if this detector should run on the given OS family."""
        return family in self.platforms

    def detect(self, host: HostEnvironment | None = None) -> DetectorResult | None:
        """Inspect the machine for this manager.

        Args:
            host: The machine view to inspect. Defaults to the running
                process's environment.

        Returns:
            The detection result, or None when the manager is absent.
        """
        return self._detect(host if host is not None else HostEnvironment.current())

    @abstractmethod
    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        """Manager-specific detection against an explicit host."""


def _join(base: Path, relative: str) -> Path:
    return base.joinpath(*PurePosixPath(relative).parts) if relative else base


@dataclass(frozen=True)
class LayoutDetector(Detector):
    """Detector for managers following the common root/versions layout.

    Attributes:
        env_var: Environment variable that relocates the root, if any.
        root: Callable returning the fallback root for a host, or None when
            no fallback exists. Without a fallback the manager is only
            found through ``env_var``.
        versions_subdir: Versions directory relative to the root, in POSIX
            notation ("" means the root itself).
        layout: Executable location inside each version directory.
        default: Callable reading the default version given the root.
        arch_tier: True when versions nest an architecture directory.
    """

    env_var: str | None = None
    root: RootResolver | None = None
    versions_subdir: str = "versions"
    layout: ExecutableLayout = DEFAULT_LAYOUT
    default: DefaultResolver | None = None
    arch_tier: bool = False

    def base_dir(self, host: HostEnvironment) -> Path | None:
        """Resolve the manager root, honouring ``env_var`` when set."""
        fallback = self.root(host) if self.root is not None else None
        if self.env_var is None:
            return fallback
        if fallback is None:
            return Path(host.get_env(self.env_var)) if host.env_is_set(self.env_var) else None
        return host.resolve_base_dir(self.env_var, fallback)

    def extra(self, base_dir: Path, host: HostEnvironment) -> dict:
        """Manager-specific metadata attached to a successful result."""
        return {}

    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        base_dir = self.base_dir(host)
        if base_dir is None:
            return None
        versions_dir = _join(base_dir, self.versions_subdir)
        if not dir_exists(versions_dir):
            return None

        installations = discover_installations(
            versions_dir, self.layout, self.name, host, arch_tier=self.arch_tier,
        )
        if not installations:
            return None

        default_version = self.default(base_dir, host) if self.default else None
        return DetectorResult(
            base_dir=base_dir,
            versions_dir=versions_dir,
            installations=installations,
            default_version=default_version,
            env_var=self.env_var,
            env_var_set=bool(self.env_var) and host.env_is_set(self.env_var),
            real_base_dir=real_path(base_dir),
            extra=self.extra(base_dir, host),
        )
