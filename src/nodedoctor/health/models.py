"""Data models for the health engine: Severity, HealthFinding, HealthAssessment.

These are decoupled from the checks and the renderers so that the CLI
and CI printers can import them without pulling in any check logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


# ---------------------------------------------------------------------------
# Severity and status
# ---------------------------------------------------------------------------


class Severity(IntEnum):
    """Four-level severity scale for health findings.

    The integer encoding enables direct comparison: OK < INFO < WARNING < CRITICAL.
    """

    OK = 0
    INFO = 1
    WARNING = 2
    CRITICAL = 3

    @property
    def label(self) -> str:
        return self.name.lower()


def format_bytes(size: int) -> str:
    """Format a byte count with binary units ("1.5 GB", "320.0 MB", "12 B")."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB", "TB"):
        value /= 1024
        if value < 1024 or unit == "TB":
            return f"{value:.1f} {unit}"
    return f"{value:.1f} TB"


class HealthStatus(str, Enum):
    """Overall verdict of an assessment."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"

    @classmethod
    def from_severity(cls, severity: Severity | None) -> HealthStatus:
        """Map the worst finding severity to a status.

        Anything at or below INFO is healthy.
        """
        if severity is None or severity <= Severity.INFO:
            return cls.HEALTHY
        if severity == Severity.WARNING:
            return cls.WARNING
        return cls.CRITICAL


# ---------------------------------------------------------------------------
# HealthFinding: a single observation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HealthFinding:
    """One observation produced by a health check.

    Attributes:
        check: Identifier of the producing check (e.g. "dangling-default").
        severity: OK through CRITICAL.
        category: Broad area ("managers", "path", "versions", "disk",
            "integrity", "engine").
        message: Human-readable description.
        hint: Suggested remediation, if any.
        manager: Affected manager, if the finding concerns exactly one.
        versions: Affected versions, in sorted order.
    """

    check: str
    severity: Severity
    category: str
    message: str
    hint: str | None = None
    manager: str | None = None
    versions: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# HealthSummary / HealthAssessment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HealthSummary:
    """Counters for an assessment.

    Attributes:
        counts: (label, count) pairs for every severity, lowest first.
        total_installations: Installations reported by version managers.
        total_size: Combined footprint of those installations in bytes.
        managers_detected: Names of version managers with installations.
    """

    counts: tuple[tuple[str, int], ...]
    total_installations: int
    total_size: int
    managers_detected: tuple[str, ...]

    def count(self, label: str) -> int:
        """Number of findings with the given severity label."""
        return dict(self.counts).get(label, 0)


@dataclass(frozen=True)
class HealthAssessment:
    """The complete result of assessing one scan.

    Attributes:
        status: Overall verdict derived from the worst finding.
        findings: Findings in check-registration order.
        summary: Aggregate counters.
        checks_version: Version of the check set that produced this.
    """

    status: HealthStatus
    findings: tuple[HealthFinding, ...]
    summary: HealthSummary
    checks_version: int

    @property
    def max_severity(self) -> Severity | None:
        """Return the highest severity among all findings, or None if empty."""
        if not self.findings:
            return None
        return max(f.severity for f in self.findings)

    @property
    def exit_code(self) -> int:
        """Process exit code for CI mode: 1 when critical, else 0."""
        return 1 if self.status is HealthStatus.CRITICAL else 0

