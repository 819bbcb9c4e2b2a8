"""Health assessment for node-doctor.

Runs a fixed, versioned set of checks over scan results and renders the
resulting ``HealthAssessment`` for humans and for CI.
"""

from nodedoctor.health.checks import CHECK_NAMES, CHECKS, CHECKS_VERSION
from nodedoctor.health.engine import run_health_assessment
from nodedoctor.health.models import (
    HealthAssessment,
    HealthFinding,
    HealthStatus,
    HealthSummary,
    Severity,
)
from nodedoctor.health.render import to_human_readable, to_machine_readable

__all__ = [
    "CHECKS",
    "CHECKS_VERSION",
    "CHECK_NAMES",
    "HealthAssessment",
    "HealthFinding",
    "HealthStatus",
    "HealthSummary",
    "Severity",
    "run_health_assessment",
    "to_human_readable",
    "to_machine_readable",
]
