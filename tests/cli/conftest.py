"""Shared fixtures for CLI tests.

CLI commands scan the real machine by default. These fixtures replace
the scan with canned results so the commands' output and exit codes can
be asserted exactly.
"""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from nodedoctor.detectors.registry import DetectorRegistry

from tests.detectors.helpers import StaticDetector
from tests.health.helpers import healthy_scan, inst, node, path_scan, result


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def healthy_results() -> dict:
    """One nvm install line, active on PATH."""
    return healthy_scan()


@pytest.fixture
def critical_results() -> dict:
    """Two managers, a dangling default and nothing on PATH."""
    return {
        "nvm": result("nvm", inst("18.2.0"), inst("20.11.0"), default="16.0.0"),
        "fnm": result("fnm", inst("20.11.0", "fnm")),
        "path": path_scan(),
    }


@pytest.fixture
def static_registry(healthy_results) -> DetectorRegistry:
    """A registry whose detectors return the healthy results."""
    detectors = [
        StaticDetector(name, name.upper(), "*", result=found)
        for name, found in healthy_results.items()
    ]
    return DetectorRegistry().register_all(detectors)


@pytest.fixture
def shadowed_results() -> dict:
    """A healthy scan with a second runtime further down PATH."""
    scan = healthy_scan()
    scan["path"] = path_scan(
        node("/home/dev/.nvm/versions/20.11.0/bin/node"),
        node("/usr/bin/node", "18.19.1"),
    )
    return scan
