"""node-doctor CLI -- Inventory and health checks for Node.js version managers.

Entry point for the ``node-doctor`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan      -- List installations across every detected version manager.
    check     -- Run the health checks; exits 1 when the status is critical.
    managers  -- List the supported version managers.

Usage::

    node-doctor scan
    node-doctor scan --format json
    node-doctor check --format json --disk-threshold-gb 10
    node-doctor --verbose check --config node-doctor.yaml
    node-doctor managers --all
"""

from __future__ import annotations

import logging

import click

from nodedoctor import __version__
from nodedoctor.cli.check import check_command
from nodedoctor.cli.managers_cmd import managers_command
from nodedoctor.cli.scan import scan_command

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@click.group()
@click.version_option(version=__version__, prog_name="node-doctor")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log debug output to stderr.")
def cli(verbose: bool) -> None:
    """node-doctor: find every Node.js install and diagnose conflicts.

    Detects runtimes from 19 version managers, the OS package manager and
    PATH, then reports conflicts, dangling defaults, shadowed binaries
    and disk usage.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
    )


# Register all subcommands
cli.add_command(scan_command)
cli.add_command(check_command)
cli.add_command(managers_command)
