"""Shared fixtures for node-doctor tests.

Detectors never touch the real machine in tests: every test builds a
``HostEnvironment`` around a temporary home directory, an explicit
environment mapping, and a fake verifier. The fake verifier reads the
fake ``node`` file's text ("v18.2.0") instead of spawning it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from pathlib import Path

import pytest

from nodedoctor.host import LINUX, HostEnvironment, parse_version_output


def fake_verifier(executable: Path) -> str | None:
    """Report the version written into a fake executable."""
    try:
        return parse_version_output(Path(executable).read_text())
    except OSError:
        return None


HostFactory = Callable[..., HostEnvironment]


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """An empty fake home directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    return home_dir


@pytest.fixture
def make_host(home: Path) -> HostFactory:
    """Factory for hosts rooted at the fake home directory."""

    def _make(
        env: Mapping[str, str] | None = None,
        family: str = LINUX,
        verifier: Callable[[Path], str | None] = fake_verifier,
    ) -> HostEnvironment:
        return HostEnvironment(home=home, family=family, env=dict(env or {}), verifier=verifier)

    return _make


@pytest.fixture
def host(make_host: HostFactory) -> HostEnvironment:
    """A Linux host with an empty environment."""
    return make_host()
