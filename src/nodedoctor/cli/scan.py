"""``node-doctor scan`` -- Inventory every Node.js installation.

Runs every detector applicable to this OS and prints the installations
found, newest first. ``--format json`` prints the raw scan results keyed
by detector name, with ``null`` for managers that are not present.

Exit Codes:
    0 -- Always (informational command).
"""

from __future__ import annotations

import json
from typing import Any

import click

from nodedoctor.detectors import (
    DetectorResult,
    Installation,
    PathScanResult,
    ScanResults,
    default_registry,
)
from nodedoctor.host import HostEnvironment


def _installation_to_dict(inst: Installation) -> dict[str, Any]:
    return {
        "version": inst.version,
        "path": str(inst.path),
        "executable": str(inst.executable),
        "size": inst.size,
        "verified": inst.verified,
        "manager": inst.manager,
        "arch": inst.arch,
        "formula": inst.formula,
        "real_path": str(inst.real_path) if inst.real_path else None,
    }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


def _result_to_dict(result: DetectorResult | None) -> dict[str, Any] | None:
    """Convert one detector result to JSON-serializable data."""
    if result is None:
        return None
    data: dict[str, Any] = {
        "base_dir": _jsonable(result.base_dir),
        "versions_dir": _jsonable(result.versions_dir),
        "default_version": result.default_version,
        "env_var": result.env_var,
        "env_var_set": result.env_var_set,
        "real_base_dir": _jsonable(result.real_base_dir),
        "total_size": result.total_size,
        "installations": [_installation_to_dict(i) for i in result.installations],
        "extra": {k: _jsonable(v) for k, v in result.extra.items()},
    }
    if isinstance(result, PathScanResult):
        data["path_dirs"] = [str(p) for p in result.path_dirs]
        data["active_node"] = _jsonable(result.active_node)
        data["found_nodes"] = [
            {
                "path_dir": str(node.path_dir),
                "executable": str(node.executable),
                "real_path": _jsonable(node.real_path),
                "verified": node.verified,
            }
            for node in result.found_nodes
        ]
    return data


def results_to_json(results: ScanResults) -> dict[str, Any]:
    return {name: _result_to_dict(result) for name, result in results.items()}


@click.command("scan")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
@click.option(
    "--no-verify",
    is_flag=True,
    default=False,
    help="Do not run discovered binaries to confirm their versions.",
)
def scan_command(output_format: str, no_verify: bool) -> None:
    """List the Node.js installations of every version manager.

    Covers nvm, fnm, Volta, asdf, n, mise, vfox, nodenv, nvs, proto,
    nvm-windows, Nodist, Homebrew, nodebrew, gnvm, ndenv, snm,
    nvm-desktop and tnvm, plus OS-installed runtimes and PATH.
    """
    registry = default_registry()
    host = HostEnvironment.current(verify=not no_verify)
    results = registry.scan_all(host)

    if output_format == "json":
        click.echo(json.dumps(results_to_json(results), indent=2))
    else:
        from nodedoctor.cli.output import print_scan_results
        print_scan_results(results, registry)
