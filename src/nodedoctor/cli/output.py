"""Rich output formatting helpers for the node-doctor CLI.

Provides the terminal tables for the ``scan`` and ``managers`` commands.
The ``check`` command prints plain text from
``nodedoctor.health.render`` instead, so CI logs stay free of markup.

Verified Column:
    green when the binary reports its directory version, bold red when it
    reports another one, dim "-" when it could not be run.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from nodedoctor.detectors import DetectorRegistry, PathScanResult, ScanResults
from nodedoctor.detectors.base import Detector
from nodedoctor.health.models import format_bytes

console = Console()


def print_scan_results(results: ScanResults, registry: DetectorRegistry) -> None:
    """Print one row per installation, newest first, and a per-manager summary.

    Args:
        results: Output of ``scan_all``.
        registry: The registry that produced ``results``.
    """
    installs = registry.all_installations(results, include_non_deletable=True)
    if not installs:
        console.print("[dim]No Node.js installations found.[/dim]")
    else:
        table = Table(title="Node.js Installations", show_header=True, header_style="bold")
        table.add_column("Manager", style="bold")
        table.add_column("Version")
        table.add_column("Verified", justify="center")
        table.add_column("Size", justify="right")
        table.add_column("Path", style="dim")

        for agg in installs:
            inst = agg.installation
            result = results.get(inst.manager)
            is_default = result is not None and result.default_version == inst.version
            version = Text(inst.version + (" *" if is_default else ""))
            if inst.verified is None:
                verified = Text("-", style="dim")
            elif inst.verified == inst.version or inst.version == "system":
                verified = Text(inst.verified, style="green")
            else:
                verified = Text(inst.verified, style="bold red")
            table.add_row(
                f"{agg.icon} {inst.manager}", version, verified,
                format_bytes(inst.size), str(inst.path),
            )
        console.print(table)

    _print_manager_summary(results, registry)
    _print_path_summary(results)


def _print_manager_summary(results: ScanResults, registry: DetectorRegistry) -> None:
    summaries = registry.summary(results)
    if not summaries:
        return
    parts = [
        f"[bold]{s.name}[/bold] {s.count} ({format_bytes(s.size)})" for s in summaries
    ]
    console.print(" | ".join(parts))
    console.print("[dim]* = manager default[/dim]")


def _print_path_summary(results: ScanResults) -> None:
    scan = results.get("path")
    if not isinstance(scan, PathScanResult):
        return
    if scan.active_node is None:
        console.print("[bold red]No node executable on PATH[/bold red]")
        return
    console.print(f"Active node: [bold]{scan.active_node}[/bold]")
    if len(scan.found_nodes) > 1:
        console.print(f"[yellow]{len(scan.found_nodes) - 1} more node executable(s) on PATH[/yellow]")


def print_detectors(detectors: list[Detector]) -> None:
    """Print the detector catalogue."""
    table = Table(title="Supported Version Managers", show_header=True, header_style="bold")
    table.add_column("Name", style="bold")
    table.add_column("Display Name")
    table.add_column("Platforms", style="dim")
    table.add_column("Removable", justify="center")
    for detector in detectors:
        table.add_row(
            f"{detector.icon} {detector.name}",
            detector.display_name,
            ", ".join(sorted(detector.platforms)),
            "yes" if detector.can_delete else "no",
        )
    console.print(table)
