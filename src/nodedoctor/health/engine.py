"""Health assessment engine.

``run_health_assessment`` runs the check catalogue over one set of scan
results and reduces the findings to a single ``HealthAssessment``.

The engine is deterministic: it reads no clock, no environment and no
filesystem, so identical scan results always yield an identical
assessment. A check that raises is logged and replaced by a WARNING
``check-error`` finding; the remaining checks still run.

Usage::

    results = scan_all()
    assessment = run_health_assessment(results)
    print(to_human_readable(assessment))
    sys.exit(assessment.exit_code)
"""

from __future__ import annotations

import logging

from nodedoctor.config import HealthConfig
from nodedoctor.detectors.models import ScanResults
from nodedoctor.health.checks import CHECKS, CHECKS_VERSION, HealthCheck, managed_results
from nodedoctor.health.models import (
    HealthAssessment,
    HealthFinding,
    HealthStatus,
    HealthSummary,
    Severity,
)

logger = logging.getLogger(__name__)


def _run_check(check: HealthCheck, results: ScanResults, config: HealthConfig) -> list[HealthFinding]:
    try:
        return list(check.run(results, config))
    except Exception as exc:
        logger.warning("Health check '%s' failed", check.name, exc_info=True)
        return [HealthFinding(
            check="check-error",
            severity=Severity.WARNING,
            category=check.category,
            message=f"Health check '{check.name}' could not run ({type(exc).__name__})",
            hint="Re-run with --verbose to see the error.",
        )]


def summarize(findings: tuple[HealthFinding, ...], results: ScanResults) -> HealthSummary:
    """Count findings per severity and total up the managed installations."""
    counts = {severity.label: 0 for severity in Severity}
    for finding in findings:
        counts[finding.severity.label] += 1

    managers: list[str] = []
    total_installations = 0
    total_size = 0
    for name, result in managed_results(results):
        managers.append(name)
        total_installations += len(result.installations)
        total_size += result.total_size

    return HealthSummary(
        counts=tuple(counts.items()),
        total_installations=total_installations,
        total_size=total_size,
        managers_detected=tuple(managers),
    )


def run_health_assessment(
    scan_results: ScanResults,
    config: HealthConfig | None = None,
) -> HealthAssessment:
    """Assess a scan.

    Args:
        scan_results: Output of ``scan_all``.
        config: Tunables; defaults to ``HealthConfig()``.

    Returns:
        The assessment, with findings in check-registration order.
    """
    config = config if config is not None else HealthConfig()
    findings: list[HealthFinding] = []
    for check in CHECKS:
        if check.name in config.disabled_checks:
            logger.debug("Skipping disabled check '%s'", check.name)
            continue
        findings.extend(_run_check(check, scan_results, config))

    frozen = tuple(findings)
    worst = max((f.severity for f in frozen), default=None)
    return HealthAssessment(
        status=HealthStatus.from_severity(worst),
        findings=frozen,
        summary=summarize(frozen, scan_results),
        checks_version=CHECKS_VERSION,
    )
