"""Builders for hand-made scan results used by the health tests.

Health checks never touch the filesystem, so these tests describe a
machine purely as data: a mapping of detector name to result.
"""

from __future__ import annotations

from pathlib import Path

from nodedoctor.detectors.models import DetectorResult, Installation, PathNode, PathScanResult

MB = 1024 ** 2

ROOTS = {
    "nvm": Path("/home/dev/.nvm"),
    "fnm": Path("/home/dev/.local/share/fnm"),
    "volta": Path("/home/dev/.volta"),
    "asdf": Path("/home/dev/.asdf"),
}


def inst(
    version: str,
    manager: str = "nvm",
    size: int = 50 * MB,
    verified: str | None | bool = True,
) -> Installation:
    """An installation under the manager's fake root.

    ``verified=True`` means the binary reported ``version``.
    """
    root = ROOTS.get(manager, Path("/opt") / manager)
    path = root / "versions" / version
    return Installation(
        version=version,
        path=path,
        executable=path / "bin" / "node",
        size=size,
        verified=version if verified is True else verified,
        manager=manager,
    )


def result(manager: str, *installations: Installation, default: str | None = None) -> DetectorResult:
    """A manager result holding ``installations``."""
    return DetectorResult(
        base_dir=ROOTS.get(manager, Path("/opt") / manager),
        installations=list(installations),
        default_version=default,
    )


def node(executable: str, verified: str | None = "20.11.0", real_path: str | None = None) -> PathNode:
    exe = Path(executable)
    return PathNode(
        path_dir=exe.parent,
        executable=exe,
        real_path=Path(real_path) if real_path else None,
        verified=verified,
    )


def path_scan(*nodes: PathNode) -> PathScanResult:
    """A PATH scan in which ``nodes`` were found, in order."""
    return PathScanResult(
        base_dir=None,
        env_var="PATH",
        env_var_set=True,
        path_dirs=[n.path_dir for n in nodes],
        found_nodes=list(nodes),
        active_node=nodes[0].executable if nodes else None,
    )


def healthy_scan() -> dict:
    """One manager, one runtime on PATH, default installed."""
    return {
        "nvm": result("nvm", inst("18.2.0"), inst("20.11.0"), default="20.11.0"),
        "fnm": None,
        "path": path_scan(node("/home/dev/.nvm/versions/20.11.0/bin/node")),
    }
