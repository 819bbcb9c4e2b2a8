"""``node-doctor check`` -- Health assessment for CI.

Scans the machine, runs the health checks and prints the assessment as
text or JSON. Configuration comes from ``--config`` (or the file named by
``$NODE_DOCTOR_CONFIG``); the remaining options override that file.

Exit Codes:
    0 -- Status is healthy or warning.
    1 -- Status is critical.
    2 -- The configuration could not be loaded.
"""

from __future__ import annotations

import sys

import click

from nodedoctor.config import CONFIG_ENV_VAR, GIB, HealthConfig, load_config
from nodedoctor.detectors import scan_all
from nodedoctor.exceptions import ConfigError
from nodedoctor.health import (
    CHECK_NAMES,
    run_health_assessment,
    to_human_readable,
    to_machine_readable,
)
from nodedoctor.host import HostEnvironment


def _build_config(
    config_path: str | None,
    disk_threshold_gb: float | None,
    no_verify: bool,
    disabled: tuple[str, ...],
) -> HealthConfig:
    config = load_config(config_path) if config_path else HealthConfig()
    disabled_checks = config.disabled_checks | set(disabled) if disabled else None
    return config.with_overrides(
        disk_warning_bytes=int(disk_threshold_gb * GIB) if disk_threshold_gb else None,
        verify=False if no_verify else None,
        disabled_checks=disabled_checks,
    )


@click.command("check")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    envvar=CONFIG_ENV_VAR,
    default=None,
    help=f"YAML configuration file (default: ${CONFIG_ENV_VAR}).",
)
@click.option(
    "--disk-threshold-gb",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Warn when installations use more than this many GiB (default: 5).",
)
@click.option(
    "--no-verify",
    is_flag=True,
    default=False,
    help="Do not run discovered binaries to confirm their versions.",
)
@click.option(
    "--disable", "disabled",
    type=click.Choice(CHECK_NAMES),
    multiple=True,
    help="Skip a check. May be given more than once.",
)
def check_command(
    output_format: str,
    config_path: str | None,
    disk_threshold_gb: float | None,
    no_verify: bool,
    disabled: tuple[str, ...],
) -> None:
    """Assess the health of this machine's Node.js setup.

    Exit code 1 if any finding is critical, 0 otherwise.
    """
    try:
        config = _build_config(config_path, disk_threshold_gb, no_verify, disabled)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)

    host = HostEnvironment.current(verify=config.verify, timeout=config.verify_timeout)
    assessment = run_health_assessment(scan_all(host), config)

    if output_format == "json":
        click.echo(to_machine_readable(assessment))
    else:
        click.echo(to_human_readable(assessment), nl=False)
    sys.exit(assessment.exit_code)
