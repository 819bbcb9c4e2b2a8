"""``node-doctor managers`` -- List the supported version managers.

Prints the detectors that run on this OS, or every detector with
``--all``.

Exit Codes:
    0 -- Always (informational command, cannot fail).
"""

from __future__ import annotations

import json

import click

from nodedoctor.detectors import default_registry
from nodedoctor.host import PLATFORM_FAMILY


@click.command("managers")
@click.option(
    "--all", "show_all",
    is_flag=True,
    default=False,
    help="Include managers that do not run on this OS.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def managers_command(show_all: bool, output_format: str) -> None:
    """List supported Node.js version managers."""
    registry = default_registry()
    detectors = registry.detectors if show_all else registry.for_platform(PLATFORM_FAMILY)

    if output_format == "json":
        payload = [
            {
                "name": d.name,
                "display_name": d.display_name,
                "platforms": sorted(d.platforms),
                "can_delete": d.can_delete,
                "version_manager": d.version_manager,
            }
            for d in detectors
        ]
        click.echo(json.dumps(payload, indent=2))
    else:
        from nodedoctor.cli.output import print_detectors
        print_detectors(detectors)
