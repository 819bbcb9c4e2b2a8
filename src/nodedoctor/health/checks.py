"""The health check catalogue.

Each check is a pure function of the scan results and the active
``HealthConfig`` returning zero or more ``HealthFinding`` records. The
engine runs them in the order of ``CHECKS``; that order is also the order
findings appear in a report. Bump ``CHECKS_VERSION`` whenever a check is
added, removed, or changes what it reports, since CI pipelines match on
the output.

Checks
------
=========================  ==========  ===============================================
Check                      Severity    Condition
=========================  ==========  ===============================================
no-managers                INFO        no version manager reported an installation
node-in-path               CRITICAL    the PATH scan found no runtime
path-shadowing             WARNING     several distinct runtimes are on PATH
active-managers            WARNING     PATH runtimes belong to several managers
version-conflict           WARNING     one major version held by several managers
default-mismatch           WARNING     manager defaults disagree on the major version
dangling-default           WARNING     a default names a version that is not installed
duplicate-versions         WARNING     one exact version installed by several managers
disk-usage                 WARNING     aggregate footprint above the threshold
verification-mismatch      CRITICAL    a binary reports a different version than its dir
unverified-installations   INFO        a binary could not be run to confirm its version
=========================  ==========  ===============================================
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from nodedoctor.config import HealthConfig
from nodedoctor.detectors.models import (
    DetectorResult,
    Installation,
    PathScanResult,
    ScanResults,
)
from nodedoctor.detectors.registry import PSEUDO_DETECTORS, identify_runner, version_key
from nodedoctor.health.models import HealthFinding, Severity, format_bytes

CHECKS_VERSION = 1

CheckFunction = Callable[[ScanResults, HealthConfig], "list[HealthFinding]"]


@dataclass(frozen=True)
class HealthCheck:
    """A registered check.

    Attributes:
        name: Identifier recorded on every finding the check produces.
        category: Category recorded on those findings.
        run: The check function.
    """

    name: str
    category: str
    run: CheckFunction


# ---------------------------------------------------------------------------
# Scan result helpers
# ---------------------------------------------------------------------------


def managed_results(results: ScanResults) -> Iterator[tuple[str, DetectorResult]]:
    """Yield (name, result) for version managers that reported installations."""
    for name, result in results.items():
        if name in PSEUDO_DETECTORS or result is None or not result.installations:
            continue
        yield name, result


def _managed_installations(results: ScanResults) -> Iterator[Installation]:
    for _name, result in managed_results(results):
        yield from result.installations


def _path_scan(results: ScanResults) -> PathScanResult | None:
    result = results.get("path")
    return result if isinstance(result, PathScanResult) else None


def _major(version: str) -> str | None:
    head = version.split(".", 1)[0]
    return head if head.isdigit() else None


def _sorted_versions(versions) -> tuple[str, ...]:
    return tuple(sorted(set(versions), key=version_key))


def _default_matches(default: str, installations: list[Installation]) -> bool:
    # "18" or "18.2" name an install line; "18.2.0" must match exactly
    return any(
        inst.version == default or inst.version.startswith(default + ".")
        for inst in installations
    )


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_no_managers(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    if any(True for _ in managed_results(results)):
        return []
    return [HealthFinding(
        check="no-managers",
        severity=Severity.INFO,
        category="managers",
        message="No Node.js version managers detected",
        hint="Install a version manager such as nvm, fnm or Volta to switch between versions.",
    )]


def check_node_in_path(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    scan = _path_scan(results)
    if scan is None:
        return []
    if not scan.found_nodes:
        return [HealthFinding(
            check="node-in-path",
            severity=Severity.CRITICAL,
            category="path",
            message="No node executable found on PATH",
            hint="Activate a default version or add your manager's bin directory to PATH.",
        )]
    active = scan.found_nodes[0]
    return [HealthFinding(
        check="node-in-path",
        severity=Severity.OK,
        category="path",
        message=f"node resolves to {active.executable}",
        versions=_sorted_versions([active.verified] if active.verified else []),
    )]


def check_path_shadowing(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    scan = _path_scan(results)
    if scan is None:
        return []
    distinct: dict[Path, str | None] = {}
    for node in scan.found_nodes:
        distinct.setdefault(node.resolved, node.verified)
    if len(distinct) < 2:
        return []
    return [HealthFinding(
        check="path-shadowing",
        severity=Severity.WARNING,
        category="path",
        message=(
            f"{len(distinct)} different node executables are on PATH; "
            f"{scan.found_nodes[0].executable} shadows the others"
        ),
        hint="Remove stale PATH entries so that only one runtime is reachable.",
        versions=_sorted_versions(v for v in distinct.values() if v),
    )]


def check_active_managers(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    scan = _path_scan(results)
    if scan is None or not scan.found_nodes:
        return []
    runners: list[str] = []
    for node in scan.found_nodes:
        runner = identify_runner(node.executable, results, node.real_path)
        if runner not in runners:
            runners.append(runner)
    if len(runners) == 1:
        return [HealthFinding(
            check="active-managers",
            severity=Severity.OK,
            category="path",
            message=f"PATH runtimes are provided by {runners[0]}",
            manager=runners[0],
        )]
    return [HealthFinding(
        check="active-managers",
        severity=Severity.WARNING,
        category="path",
        message=f"PATH exposes runtimes from several sources: {', '.join(runners)}",
        hint=(
            "Keep one version manager's shell integration enabled; "
            "the first PATH entry wins."
        ),
    )]


def check_version_conflict(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    owners: dict[str, set[str]] = defaultdict(set)
    versions: dict[str, set[str]] = defaultdict(set)
    for inst in _managed_installations(results):
        major = _major(inst.version)
        if major is None:
            continue
        owners[major].add(inst.manager)
        versions[major].add(inst.version)

    findings: list[HealthFinding] = []
    for major in sorted(owners, key=int):
        managers = sorted(owners[major])
        if len(managers) < 2:
            continue
        findings.append(HealthFinding(
            check="version-conflict",
            severity=Severity.WARNING,
            category="versions",
            message=f"Node {major}.x is installed by several managers: {', '.join(managers)}",
            hint="Which copy runs depends on PATH order; keep this major in one manager.",
            versions=_sorted_versions(versions[major]),
        ))
    return findings


def check_default_mismatch(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    defaults: dict[str, str] = {}
    for name, result in managed_results(results):
        if result.default_version and _major(result.default_version):
            defaults[name] = result.default_version
    majors = {_major(v) for v in defaults.values()}
    if len(majors) < 2:
        return []
    listing = ", ".join(f"{name}={defaults[name]}" for name in sorted(defaults))
    return [HealthFinding(
        check="default-mismatch",
        severity=Severity.WARNING,
        category="versions",
        message=f"Managers disagree on the default Node major version: {listing}",
        hint="Align the defaults, or disable the managers you no longer use.",
        versions=_sorted_versions(defaults.values()),
    )]


def check_dangling_default(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    findings: list[HealthFinding] = []
    for name, result in sorted(managed_results(results)):
        default = result.default_version
        # symbolic aliases (node, lts/*, system) cannot be checked offline
        if not default or _major(default) is None:
            continue
        if _default_matches(default, result.installations):
            continue
        findings.append(HealthFinding(
            check="dangling-default",
            severity=Severity.WARNING,
            category="versions",
            message=f"{name} default version {default} is not installed",
            hint=f"Install {default} with {name} or point the default at an installed version.",
            manager=name,
            versions=(default,),
        ))
    return findings


def check_duplicate_versions(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    copies: dict[str, list[Installation]] = defaultdict(list)
    for inst in _managed_installations(results):
        copies[inst.version].append(inst)

    findings: list[HealthFinding] = []
    for version in sorted(copies, key=version_key):
        installs = copies[version]
        managers = sorted({inst.manager for inst in installs})
        if len(managers) < 2:
            continue
        reclaimable = sum(i.size for i in installs) - max(i.size for i in installs)
        findings.append(HealthFinding(
            check="duplicate-versions",
            severity=Severity.WARNING,
            category="versions",
            message=f"Node {version} is installed {len(installs)} times ({', '.join(managers)})",
            hint=f"Removing the extra copies would reclaim {format_bytes(reclaimable)}.",
            versions=(version,),
        ))
    return findings


def check_disk_usage(results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    installs = list(_managed_installations(results))
    if not installs:
        return []
    total = sum(inst.size for inst in installs)
    if total > config.disk_warning_bytes:
        return [HealthFinding(
            check="disk-usage",
            severity=Severity.WARNING,
            category="disk",
            message=(
                f"{len(installs)} installations use {format_bytes(total)} "
                f"(threshold {format_bytes(config.disk_warning_bytes)})"
            ),
            hint="Remove versions you no longer use.",
        )]
    return [HealthFinding(
        check="disk-usage",
        severity=Severity.OK,
        category="disk",
        message=f"{len(installs)} installations use {format_bytes(total)}",
    )]


def check_verification_mismatch(
    results: ScanResults, config: HealthConfig,
) -> list[HealthFinding]:
    findings: list[HealthFinding] = []
    for name, result in sorted(managed_results(results)):
        for inst in sorted(result.installations, key=lambda i: version_key(i.version)):
            reported = inst.verified
            if reported is None or _major(inst.version) is None:
                continue
            if reported == inst.version or reported.startswith(inst.version + "."):
                continue
            findings.append(HealthFinding(
                check="verification-mismatch",
                severity=Severity.CRITICAL,
                category="integrity",
                message=f"{name} {inst.version} reports version {reported} when run",
                hint=f"Reinstall {inst.version}; {inst.path} does not hold what its name says.",
                manager=name,
                versions=(inst.version,),
            ))
    return findings


def check_unverified_installations(
    results: ScanResults, config: HealthConfig,
) -> list[HealthFinding]:
    if not config.verify:
        return []
    findings: list[HealthFinding] = []
    for name, result in sorted(managed_results(results)):
        broken = _sorted_versions(i.version for i in result.installations if i.verified is None)
        if not broken:
            continue
        findings.append(HealthFinding(
            check="unverified-installations",
            severity=Severity.INFO,
            category="integrity",
            message=f"{len(broken)} {name} installation(s) could not be run to confirm their version",
            hint="The binary may be for another architecture, or the install may be incomplete.",
            manager=name,
            versions=broken,
        ))
    return findings


CHECKS: tuple[HealthCheck, ...] = (
    HealthCheck("no-managers", "managers", check_no_managers),
    HealthCheck("node-in-path", "path", check_node_in_path),
    HealthCheck("path-shadowing", "path", check_path_shadowing),
    HealthCheck("active-managers", "path", check_active_managers),
    HealthCheck("version-conflict", "versions", check_version_conflict),
    HealthCheck("default-mismatch", "versions", check_default_mismatch),
    HealthCheck("dangling-default", "versions", check_dangling_default),
    HealthCheck("duplicate-versions", "versions", check_duplicate_versions),
    HealthCheck("disk-usage", "disk", check_disk_usage),
    HealthCheck("verification-mismatch", "integrity", check_verification_mismatch),
    HealthCheck("unverified-installations", "integrity", check_unverified_installations),
)

CHECK_NAMES: tuple[str, ...] = tuple(check.name for check in CHECKS)
