"""Configuration for health assessment.

``HealthConfig`` holds the tunables of a health run. Defaults live on the
dataclass; a YAML file can override them, and CLI options override the
file. The CLI looks for a file named by ``$NODE_DOCTOR_CONFIG`` when no
``--config`` option is given.

Example file::

    disk_warning_gb: 8
    verify: true
    verify_timeout: 3
    disabled_checks:
      - disk-usage
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from nodedoctor.exceptions import ConfigError
from nodedoctor.host import DEFAULT_VERIFY_TIMEOUT

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "NODE_DOCTOR_CONFIG"
GIB = 1024 ** 3
DEFAULT_DISK_WARNING_BYTES = 5 * GIB


@dataclass(frozen=True)
class HealthConfig:
    """Tunables for one health assessment.

    Attributes:
        disk_warning_bytes: Aggregate footprint above which the disk-usage
            check warns.
        verify: Whether discovered binaries are invoked to confirm their
            version. When False the unverified-installations check is
            skipped.
        verify_timeout: Seconds allowed per ``node --version`` call.
        disabled_checks: Check identifiers that are not run.
    """

    disk_warning_bytes: int = DEFAULT_DISK_WARNING_BYTES
    verify: bool = True
    verify_timeout: float = DEFAULT_VERIFY_TIMEOUT
    disabled_checks: frozenset[str] = frozenset()

    def with_overrides(self, **overrides: Any) -> HealthConfig:
        """Return a copy with every non-None override applied."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration option(s): {', '.join(unknown)}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "disabled_checks" in changes:
            changes["disabled_checks"] = frozenset(changes["disabled_checks"])
        return replace(self, **changes)


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def _number(key: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{key}' must be a number, got {type(value).__name__}")
    if value <= 0:
        raise ConfigError(f"'{key}' must be positive, got {value}")
    return value


def _parse(data: dict[str, Any]) -> dict[str, Any]:
    parsed: dict[str, Any] = {}
    for key, value in data.items():
        if key == "disk_warning_bytes":
            parsed["disk_warning_bytes"] = int(_number(key, value))
        elif key == "disk_warning_gb":
            parsed["disk_warning_bytes"] = int(_number(key, value) * GIB)
        elif key == "verify":
            if not isinstance(value, bool):
                raise ConfigError(f"'verify' must be true or false, got {value!r}")
            parsed["verify"] = value
        elif key == "verify_timeout":
            parsed["verify_timeout"] = float(_number(key, value))
        elif key == "disabled_checks":
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError("'disabled_checks' must be a list of check names")
            parsed["disabled_checks"] = frozenset(value)
        else:
            raise ConfigError(f"Unknown configuration key '{key}'")
    return parsed


def load_config(path: Path | str) -> HealthConfig:
    """Load a ``HealthConfig`` from a YAML file.

    An empty file yields the defaults.

    Args:
        path: The YAML file to read.

    Returns:
        The configuration with the file's values applied.

    Raises:
        ConfigError: If the file cannot be read, is not valid YAML, is not
            a mapping, or holds unknown keys or mistyped values.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")

    config = replace(HealthConfig(), **_parse(data))
    logger.debug("Loaded config from %s: %s", path, config)
    return config
