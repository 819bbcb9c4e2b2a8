"""Version-manager detection for node-doctor.

Each supported manager is described by a ``Detector``; the
``DetectorRegistry`` runs every detector applicable to the current OS and
collects their results into one ``ScanResults`` mapping.
"""

from nodedoctor.detectors.base import Detector, LayoutDetector
from nodedoctor.detectors.discovery import ExecutableLayout, discover_installations
from nodedoctor.detectors.managers import ALL_DETECTORS
from nodedoctor.detectors.models import (
    DetectorResult,
    Installation,
    PathNode,
    PathScanResult,
    ScanResults,
)
from nodedoctor.detectors.registry import (
    PSEUDO_DETECTORS,
    DetectorRegistry,
    default_registry,
    identify_runner,
    scan_all,
)

__all__ = [
    "ALL_DETECTORS",
    "PSEUDO_DETECTORS",
    "Detector",
    "DetectorRegistry",
    "DetectorResult",
    "ExecutableLayout",
    "Installation",
    "LayoutDetector",
    "PathNode",
    "PathScanResult",
    "ScanResults",
    "default_registry",
    "discover_installations",
    "identify_runner",
    "scan_all",
]
