"""Detector registry: the ordered set of detectors a scan runs.

The ``DetectorRegistry`` holds ``Detector`` instances in registration
order and drives a full-machine scan. ``default_registry()`` returns a
registry pre-loaded with every built-in detector, and the module-level
``scan_all()`` is the zero-argument entry point presentation layers use.

Scan Algorithm
--------------
``scan_all(host)`` iterates over registered detectors in order:

1. Skip detectors whose ``platforms`` exclude the host's OS family. They
   are omitted from the results entirely, not recorded as None.
2. Call ``detect(host)`` and record the result (None means absent).
3. If a detector raises, log the failure and record None, then continue
   with the next detector. One broken manager never blanks the report.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePath

from nodedoctor.detectors.base import Detector
from nodedoctor.detectors.managers import ALL_DETECTORS
from nodedoctor.detectors.models import Installation, ScanResults
from nodedoctor.exceptions import DetectorError
from nodedoctor.host import ALL_FAMILIES, HostEnvironment

logger = logging.getLogger(__name__)

PSEUDO_DETECTORS: frozenset[str] = frozenset({"path", "system"})

# Directories an OS installer or distribution package puts the runtime in.
_SYSTEM_PREFIXES: tuple[str, ...] = (
    "/usr/bin",
    "/usr/local/bin",
    "/bin",
    r"C:\Program Files\nodejs",
    r"C:\Program Files (x86)\nodejs",
)


# ---------------------------------------------------------------------------
# Aggregation records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AggregatedInstallation:
    """An installation annotated with its detector's presentation data.

    Attributes:
        installation: The discovered installation.
        display_name: The owning detector's display name.
        icon: The owning detector's icon.
        can_delete: Whether the owning detector allows removal.
    """

    installation: Installation
    display_name: str
    icon: str
    can_delete: bool


@dataclass(frozen=True)
class ManagerSummary:
    """Per-manager totals for one scan.

    Attributes:
        name: Detector name.
        display_name: Detector display name.
        icon: Detector icon.
        count: Number of installations found.
        size: Combined footprint of those installations in bytes.
    """

    name: str
    display_name: str
    icon: str
    count: int
    size: int


def version_key(version: str) -> tuple:
    """Sort key ordering numeric versions naturally.

    Non-numeric versions ("system", "lts-iron") rank below every numeric
    one, so a newest-first sort lists them last.
    """
    core = version.split("-", 1)[0].split("+", 1)[0]
    parts = core.split(".")
    if not all(part.isdigit() for part in parts):
        return (0, version)
    return (1, tuple(int(part) for part in parts))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class DetectorRegistry:
    """Ordered registry of detectors.

    Usage::

        registry = default_registry()
        results = registry.scan_all()
        for name, result in results.items():
            print(name, "absent" if result is None else len(result.installations))

    Attributes:
        detectors: Registered detectors in registration order.
    """

    def __init__(self) -> None:
        self.detectors: list[Detector] = []

    def __len__(self) -> int:
        return len(self.detectors)

    def validate(self, detector: Detector) -> str | None:
        """Return a description of what is wrong with ``detector``, or None."""
        if not isinstance(detector, Detector):
            return "not a Detector instance"
        if not detector.name:
            return 'missing "name"'
        if not detector.display_name:
            return 'missing "display_name"'
        if not detector.platforms:
            return 'empty "platforms"'
        unknown = sorted(detector.platforms - ALL_FAMILIES)
        if unknown:
            return (
                f"unknown platform(s) {', '.join(unknown)}; "
                f"expected one of {', '.join(sorted(ALL_FAMILIES))}"
            )
        return None

    def register(self, detector: Detector) -> DetectorRegistry:
        """Add a detector after validating it.

        Raises:
            DetectorError: If the detector is invalid or its name is
                already registered.
        """
        problem = self.validate(detector)
        if problem:
            name = getattr(detector, "name", None) or "unknown"
            raise DetectorError(f"Invalid detector '{name}': {problem}")
        if self.get(detector.name) is not None:
            raise DetectorError(f"Detector '{detector.name}' is already registered")
        self.detectors.append(detector)
        return self

    def register_all(self, detectors: Iterable[Detector]) -> DetectorRegistry:
        for detector in detectors:
            self.register(detector)
        return self

    def get(self, name: str) -> Detector | None:
        for detector in self.detectors:
            if detector.name == name:
                return detector
        return None

    def for_platform(self, family: str) -> list[Detector]:
        """Detectors applicable to ``family``, in registration order."""
        return [d for d in self.detectors if d.applies_to(family)]

    def scan_all(self, host: HostEnvironment | None = None) -> ScanResults:
        """Run every applicable detector against ``host``.

        Args:
            host: The machine to scan. Defaults to the running process.

        Returns:
            Detector name -> result (None when absent or failed), in
            registration order. Inapplicable detectors have no key.
        """
        host = host if host is not None else HostEnvironment.current()
        results: ScanResults = {}
        for detector in self.for_platform(host.family):
            try:
                results[detector.name] = detector.detect(host)
            except Exception:
                logger.warning("Detector '%s' failed", detector.name, exc_info=True)
                results[detector.name] = None
        return results

    def all_installations(
        self,
        results: ScanResults,
        include_non_deletable: bool = False,
    ) -> list[AggregatedInstallation]:
        """Flatten scan results into one list, newest version first.

        Args:
            results: Output of ``scan_all``.
            include_non_deletable: Include installs of detectors with
                ``can_delete=False`` (Homebrew, system, PATH).
        """
        aggregated: list[AggregatedInstallation] = []
        for detector in self.detectors:
            if not detector.can_delete and not include_non_deletable:
                continue
            result = results.get(detector.name)
            if result is None:
                continue
            for inst in result.installations:
                aggregated.append(AggregatedInstallation(
                    installation=inst,
                    display_name=detector.display_name,
                    icon=detector.icon,
                    can_delete=detector.can_delete,
                ))
        aggregated.sort(key=lambda agg: version_key(agg.installation.version), reverse=True)
        return aggregated

    def summary(self, results: ScanResults) -> list[ManagerSummary]:
        """Per-manager counts and sizes for managers that reported installs."""
        summaries: list[ManagerSummary] = []
        for detector in self.detectors:
            if detector.name in PSEUDO_DETECTORS:
                continue
            result = results.get(detector.name)
            if result is None or not result.installations:
                continue
            summaries.append(ManagerSummary(
                name=detector.name,
                display_name=detector.display_name,
                icon=detector.icon,
                count=len(result.installations),
                size=result.total_size,
            ))
        return summaries


def _is_within(path: PurePath, root: PurePath) -> bool:
    return path == root or root in path.parents


def identify_runner(
    executable: PurePath,
    results: ScanResults,
    real_path: PurePath | None = None,
) -> str:
    """Name the manager that owns a runtime found on PATH.

    The executable and its symlink target, both as recorded by the scan,
    are matched against each detected manager's root and resolved root.
    Binaries in an OS location fall back to "system"; anything else is
    "unknown". Matching is purely lexical, so the answer depends only on
    the scan results.
    """
    candidates = [executable] if real_path is None else [executable, real_path]
    for name, result in results.items():
        if name in PSEUDO_DETECTORS or result is None or result.base_dir is None:
            continue
        roots = [result.base_dir]
        if result.real_base_dir is not None:
            roots.append(result.real_base_dir)
        if any(_is_within(c, root) for c in candidates for root in roots):
            return name
    for candidate in candidates:
        if any(_is_within(candidate.parent, PurePath(prefix)) for prefix in _SYSTEM_PREFIXES):
            return "system"
    return "unknown"


def default_registry() -> DetectorRegistry:
    """Create a DetectorRegistry pre-loaded with all built-in detectors.

    Returns:
        A registry holding the 19 version-manager detectors followed by
        the ``system`` and ``path`` pseudo-detectors.
    """
    return DetectorRegistry().register_all(ALL_DETECTORS)


def scan_all(host: HostEnvironment | None = None) -> ScanResults:
    """Scan the machine with the default registry."""
    return default_registry().scan_all(host)
