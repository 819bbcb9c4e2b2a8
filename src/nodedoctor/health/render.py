"""Renderers for a ``HealthAssessment``.

Both renderers are pure functions: they never change a severity or a
finding, and rendering the same assessment twice yields the same text.

Machine-readable output is the contract CI pipelines match on. Its field
names are stable, keys are sorted, and no timestamp is included so that
the output is byte-identical for identical scans.
"""

from __future__ import annotations

import json
from typing import Any

from nodedoctor.health.models import HealthAssessment, HealthFinding, Severity, format_bytes

SCHEMA_VERSION = 1

_MARKERS: dict[Severity, str] = {
    Severity.OK: "[OK]",
    Severity.INFO: "[INFO]",
    Severity.WARNING: "[WARN]",
    Severity.CRITICAL: "[CRIT]",
}


def finding_to_dict(finding: HealthFinding) -> dict[str, Any]:
    return {
        "check": finding.check,
        "severity": finding.severity.label,
        "category": finding.category,
        "message": finding.message,
        "hint": finding.hint,
        "manager": finding.manager,
        "versions": list(finding.versions),
    }


def assessment_to_dict(assessment: HealthAssessment) -> dict[str, Any]:
    """Serialize an assessment to plain JSON-compatible data."""
    summary = assessment.summary
    return {
        "schema_version": SCHEMA_VERSION,
        "status": assessment.status.value,
        "exit_code": assessment.exit_code,
        "checks_version": assessment.checks_version,
        "findings": [finding_to_dict(f) for f in assessment.findings],
        "summary": {
            "counts": dict(summary.counts),
            "total_installations": summary.total_installations,
            "total_size_bytes": summary.total_size,
            "managers_detected": list(summary.managers_detected),
        },
    }


def to_machine_readable(assessment: HealthAssessment) -> str:
    """Render an assessment as deterministic JSON."""
    return json.dumps(assessment_to_dict(assessment), indent=2, sort_keys=True)


def to_human_readable(assessment: HealthAssessment) -> str:
    """Render an assessment as multi-line text for a terminal or a CI log."""
    summary = assessment.summary
    lines = [
        "Node.js Environment Health",
        "==========================",
        f"Status: {assessment.status.value.upper()}",
        "",
    ]
    if not assessment.findings:
        lines.append("No findings.")
    for finding in assessment.findings:
        marker = _MARKERS[finding.severity]
        lines.append(f"{marker:<7} {finding.check}: {finding.message}")
        if finding.hint:
            lines.append(f"        hint: {finding.hint}")

    lines.extend([
        "",
        "Summary",
        "-------",
        (
            f"critical: {summary.count('critical')}  warning: {summary.count('warning')}  "
            f"info: {summary.count('info')}  ok: {summary.count('ok')}"
        ),
        (
            f"{summary.total_installations} installation(s) across "
            f"{len(summary.managers_detected)} manager(s), {format_bytes(summary.total_size)}"
        ),
    ])
    if summary.managers_detected:
        lines.append(f"Managers: {', '.join(summary.managers_detected)}")
    return "\n".join(lines) + "\n"
