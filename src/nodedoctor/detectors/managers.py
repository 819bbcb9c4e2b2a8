"""Static registry of known Node.js version managers.

Each entry describes where one manager keeps its runtimes and how it
records the active version. Most managers fit ``LayoutDetector`` and are
declared as data; the rest (Homebrew's Cellar, nvm-windows' flat root,
the OS-bundled runtime and the PATH scan) subclass ``Detector`` here.

The list covers 19 managers plus two pseudo-detectors, in the order the
scan reports them. Probing for a missing manager costs one ``stat``, so
every detector applicable to the OS family runs on every scan.

Platform Notes:
    fnm and vfox keep their data under ``~/Library/Application Support``
    on macOS and under ``$XDG_DATA_HOME`` on Linux. Windows managers use
    ``%LOCALAPPDATA%`` before ``%APPDATA%``. nvm-windows and Nodist have
    no default root: they are only found through their environment
    variables.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from nodedoctor.detectors.base import Detector, LayoutDetector
from nodedoctor.detectors.defaults import (
    from_alias_file,
    from_json_keys,
    from_marker_file,
    from_symlink,
    from_tool_versions,
    from_toml_table,
)
from nodedoctor.detectors.discovery import ExecutableLayout, build_installation
from nodedoctor.detectors.models import (
    DetectorResult,
    Installation,
    PathNode,
    PathScanResult,
)
from nodedoctor.host import (
    POSIX_FAMILIES,
    WINDOWS,
    HostEnvironment,
    dir_exists,
    file_exists,
    list_subdirs,
    normalize_version,
    real_path,
)

_WINDOWS_ONLY: frozenset[str] = frozenset({WINDOWS})

# Homebrew keeps package revisions as a suffix: Cellar/node/20.11.0_1
_BREW_REVISION_RE = re.compile(r"_\d+$")
_NVM_WINDOWS_VERSION_RE = re.compile(r"^v?\d+")

# Substrings of a resolved path that mean a version manager owns the binary.
_MANAGED_PATH_MARKERS: tuple[str, ...] = (
    ".nvm", "fnm", ".volta", ".asdf", "/n/versions", "Cellar",
)


# ---------------------------------------------------------------------------
# Root and default resolvers
# ---------------------------------------------------------------------------


def _fnm_root(host: HostEnvironment) -> Path | None:
    if host.is_windows:
        return host.first_existing_dir(*host.appdata_dirs("fnm"))
    candidates = [host.xdg_data_dir("fnm"), host.home / ".fnm"]
    if host.is_mac:
        candidates.insert(0, host.mac_app_support_dir("fnm"))
    return host.first_existing_dir(*candidates)


def _fnm_default(base: Path, host: HostEnvironment) -> str | None:
    # aliases/default is a symlink to node-versions/<v>/installation on POSIX
    alias = base / "aliases" / "default"
    return from_symlink(alias, skip=("installation",)) or from_marker_file(alias)


def _vfox_root(host: HostEnvironment) -> Path | None:
    if host.is_windows:
        local, _roaming = host.appdata_dirs("vfox")
        return host.first_existing_dir(local)
    if host.is_mac:
        return host.first_existing_dir(
            host.mac_app_support_dir("vfox"), host.xdg_data_dir("vfox"),
        )
    return host.first_existing_dir(host.xdg_data_dir("vfox"), host.home / ".vfox")


def _nvs_root(host: HostEnvironment) -> Path | None:
    if host.is_windows:
        return host.first_existing_dir(*host.appdata_dirs("nvs"))
    return host.first_existing_dir(host.home / ".nvs", host.xdg_data_dir("nvs"))


def _nvs_default(base: Path, host: HostEnvironment) -> str | None:
    # nvs writes a full link target such as "node/20.11.0/x64"
    token = from_marker_file(base / "default")
    if not token:
        return None
    for part in token.replace("\\", "/").split("/"):
        version = normalize_version(part)
        if version[:1].isdigit():
            return version
    return token


def _mise_config(host: HostEnvironment) -> Path:
    explicit = host.get_env("MISE_GLOBAL_CONFIG_FILE")
    if explicit:
        return Path(explicit)
    config_home = host.get_env("XDG_CONFIG_HOME") or str(host.home / ".config")
    return Path(config_home) / "mise" / "config.toml"


def _gnvm_root(host: HostEnvironment) -> Path:
    node_home = host.get_env("NODE_HOME")
    if node_home:
        return Path(node_home)
    _local, roaming = host.appdata_dirs("gnvm")
    return roaming


# ---------------------------------------------------------------------------
# Detectors with their own layouts
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VoltaDetector(LayoutDetector):
    """Volta: images in ``tools/image/node``, fetched archives in the inventory."""

    def extra(self, base_dir: Path, host: HostEnvironment) -> dict:
        return {"inventory_dir": base_dir / "tools" / "inventory" / "node"}


@dataclass(frozen=True)
class NvmWindowsDetector(Detector):
    """NVM for Windows: version directories directly under ``%NVM_HOME%``.

    The root also holds settings files and the elevation helper, so only
    directories that look like versions are considered. ``%NVM_SYMLINK%``
    points at the active version.
    """

    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        home_value = host.get_env("NVM_HOME")
        if not home_value or not dir_exists(home_value):
            return None
        nvm_home = Path(home_value)

        installations = []
        for version in list_subdirs(nvm_home):
            if not _NVM_WINDOWS_VERSION_RE.match(version):
                continue
            version_dir = nvm_home / version
            executable = version_dir / "node.exe"
            if file_exists(executable):
                installations.append(
                    build_installation(version, version_dir, executable, self.name, host)
                )
        if not installations:
            return None

        symlink = host.get_env("NVM_SYMLINK")
        return DetectorResult(
            base_dir=nvm_home,
            versions_dir=nvm_home,
            installations=installations,
            default_version=from_symlink(Path(symlink)) if symlink else None,
            env_var="NVM_HOME",
            env_var_set=True,
            real_base_dir=real_path(nvm_home),
            extra={"symlink": Path(symlink) if symlink else None},
        )


@dataclass(frozen=True)
class HomebrewDetector(Detector):
    """Homebrew formulae ``node`` and ``node@<major>`` in the Cellar.

    Attributes:
        prefixes: Well-known prefixes checked after ``$HOMEBREW_PREFIX``.
    """

    prefixes: tuple[str, ...] = ("/opt/homebrew", "/usr/local", "/home/linuxbrew/.linuxbrew")

    def brew_prefix(self, host: HostEnvironment) -> Path | None:
        candidates = [host.get_env("HOMEBREW_PREFIX"), *self.prefixes]
        for candidate in candidates:
            if candidate and dir_exists(Path(candidate) / "Cellar"):
                return Path(candidate)
        return None

    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        prefix = self.brew_prefix(host)
        if prefix is None:
            return None
        cellar = prefix / "Cellar"

        installations = []
        for formula in list_subdirs(cellar):
            if formula != "node" and not formula.startswith("node@"):
                continue
            for version in list_subdirs(cellar / formula):
                version_dir = cellar / formula / version
                executable = version_dir / "bin" / "node"
                if file_exists(executable):
                    installations.append(build_installation(
                        _BREW_REVISION_RE.sub("", version), version_dir, executable,
                        self.name, host, formula=formula,
                    ))
        if not installations:
            return None

        linked = prefix / "bin" / "node"
        linked_path = real_path(linked) if file_exists(linked) else None
        default_version = None
        if linked_path is not None and "Cellar" in linked_path.parts:
            # <prefix>/Cellar/<formula>/<version>/bin/node
            default_version = _BREW_REVISION_RE.sub("", linked_path.parents[1].name)

        return DetectorResult(
            base_dir=prefix,
            versions_dir=cellar,
            installations=installations,
            default_version=default_version,
            env_var="HOMEBREW_PREFIX",
            env_var_set=host.env_is_set("HOMEBREW_PREFIX"),
            real_base_dir=real_path(prefix),
            extra={"cellar_dir": cellar, "linked_path": linked_path},
        )


@dataclass(frozen=True)
class SystemDetector(Detector):
    """Runtime installed by the OS package manager or the official installer.

    Binaries that resolve into a version manager's tree are skipped; they
    are reported by that manager's detector instead. System installs are
    not sized.
    """

    posix_paths: tuple[str, ...] = ("/usr/bin/node", "/usr/local/bin/node")

    def candidate_paths(self, host: HostEnvironment) -> list[Path]:
        if host.is_windows:
            program_files = host.get_env("ProgramFiles") or r"C:\Program Files"
            program_files_x86 = host.get_env("ProgramFiles(x86)") or r"C:\Program Files (x86)"
            return [
                Path(program_files) / "nodejs" / "node.exe",
                Path(program_files_x86) / "nodejs" / "node.exe",
            ]
        return [Path(p) for p in self.posix_paths]

    def _detect(self, host: HostEnvironment) -> DetectorResult | None:
        installations = []
        for executable in self.candidate_paths(host):
            if not file_exists(executable):
                continue
            resolved = real_path(executable)
            if any(marker in str(resolved) for marker in _MANAGED_PATH_MARKERS):
                continue
            installations.append(Installation(
                version="system",
                path=executable.parent,
                executable=executable,
                size=0,
                verified=host.verify(executable),
                manager=self.name,
                real_path=resolved if resolved != executable else None,
            ))
        if not installations:
            return None
        return DetectorResult(base_dir=None, installations=installations)


@dataclass(frozen=True)
class PathDetector(Detector):
    """Every runtime reachable through ``$PATH``, in lookup order.

    Always returns a ``PathScanResult``: an empty scan is itself the
    observation that no runtime is on PATH.
    """

    def _detect(self, host: HostEnvironment) -> PathScanResult:
        raw = host.get_env("PATH") or ""
        separator = ";" if host.is_windows else ":"
        binary = "node.exe" if host.is_windows else "node"

        path_dirs: list[Path] = []
        seen: set[str] = set()
        for entry in raw.split(separator):
            if entry and entry not in seen:
                seen.add(entry)
                path_dirs.append(Path(entry))

        found: list[PathNode] = []
        for path_dir in path_dirs:
            executable = path_dir / binary
            if not file_exists(executable):
                continue
            resolved = real_path(executable)
            found.append(PathNode(
                path_dir=path_dir,
                executable=executable,
                real_path=resolved if resolved != executable else None,
                verified=host.verify(executable),
            ))

        return PathScanResult(
            base_dir=None,
            env_var="PATH",
            env_var_set=bool(raw),
            path_dirs=path_dirs,
            found_nodes=found,
            active_node=found[0].executable if found else None,
        )


# ---------------------------------------------------------------------------
# The registry order
# ---------------------------------------------------------------------------


NVM = LayoutDetector(
    name="nvm",
    display_name="NVM (Node Version Manager)",
    icon="🌿",
    platforms=POSIX_FAMILIES,
    env_var="NVM_DIR",
    root=lambda host: host.home / ".nvm",
    versions_subdir="versions/node",
    default=lambda base, host: from_alias_file(base / "alias"),
)

FNM = LayoutDetector(
    name="fnm",
    display_name="FNM (Fast Node Manager)",
    icon="⚡",
    env_var="FNM_DIR",
    root=_fnm_root,
    versions_subdir="node-versions",
    layout=ExecutableLayout(unix="installation/bin/node", windows="installation/node.exe"),
    default=_fnm_default,
)

VOLTA = VoltaDetector(
    name="volta",
    display_name="Volta",
    icon="⚡",
    env_var="VOLTA_HOME",
    root=lambda host: host.home / ".volta",
    versions_subdir="tools/image/node",
    default=lambda base, host: from_json_keys(
        base / "tools" / "user" / "platform.json", ("node", "runtime"),
    ),
)

ASDF = LayoutDetector(
    name="asdf",
    display_name="asdf (version manager)",
    icon="🔧",
    platforms=POSIX_FAMILIES,
    env_var="ASDF_DATA_DIR",
    root=lambda host: host.home / ".asdf",
    versions_subdir="installs/nodejs",
    default=lambda base, host: from_tool_versions(
        host.home / ".tool-versions", ("nodejs", "node"),
    ),
)

N = LayoutDetector(
    name="n",
    display_name="n (node version manager)",
    icon="📦",
    platforms=POSIX_FAMILIES,
    env_var="N_PREFIX",
    root=lambda host: Path("/usr/local"),
    versions_subdir="n/versions/node",
)

MISE = LayoutDetector(
    name="mise",
    display_name="mise (polyglot version manager)",
    icon="🛠️",
    env_var="MISE_DATA_DIR",
    root=lambda host: host.xdg_data_dir("mise"),
    versions_subdir="installs/node",
    default=lambda base, host: from_toml_table(
        _mise_config(host), "tools", ("node", "nodejs"),
    ),
)

VFOX = LayoutDetector(
    name="vfox",
    display_name="vfox (version manager)",
    icon="🦊",
    env_var="VFOX_HOME",
    root=_vfox_root,
    versions_subdir="cache/nodejs",
)

NODENV = LayoutDetector(
    name="nodenv",
    display_name="nodenv",
    icon="💎",
    platforms=POSIX_FAMILIES,
    env_var="NODENV_ROOT",
    root=lambda host: host.home / ".nodenv",
    default=lambda base, host: from_marker_file(base / "version"),
)

NVS = LayoutDetector(
    name="nvs",
    display_name="NVS (Node Version Switcher)",
    icon="🔄",
    env_var="NVS_HOME",
    root=_nvs_root,
    versions_subdir="node",
    arch_tier=True,
    default=_nvs_default,
)

PROTO = LayoutDetector(
    name="proto",
    display_name="proto (moonrepo)",
    icon="🌙",
    env_var="PROTO_HOME",
    root=lambda host: host.home / ".proto",
    versions_subdir="tools/node",
    default=lambda base, host: from_toml_table(base / ".prototools", None, ("node",)),
)

NVM_WINDOWS = NvmWindowsDetector(
    name="nvm-windows",
    display_name="NVM for Windows",
    icon="🪟",
    platforms=_WINDOWS_ONLY,
)

NODIST = LayoutDetector(
    name="nodist",
    display_name="Nodist",
    icon="🎯",
    platforms=_WINDOWS_ONLY,
    env_var="NODIST_PREFIX",
    versions_subdir="v",
    layout=ExecutableLayout(unix="node.exe", windows="node.exe"),
    arch_tier=True,
)

HOMEBREW = HomebrewDetector(
    name="homebrew",
    display_name="Homebrew",
    icon="🍺",
    platforms=POSIX_FAMILIES,
    can_delete=False,
)

NODEBREW = LayoutDetector(
    name="nodebrew",
    display_name="nodebrew",
    icon="🍺",
    platforms=POSIX_FAMILIES,
    env_var="NODEBREW_ROOT",
    root=lambda host: host.home / ".nodebrew",
    versions_subdir="node",
    default=lambda base, host: from_symlink(base / "current"),
)

GNVM = LayoutDetector(
    name="gnvm",
    display_name="GNVM",
    icon="🔷",
    platforms=_WINDOWS_ONLY,
    env_var="GNVM_HOME",
    root=_gnvm_root,
    versions_subdir="",
    layout=ExecutableLayout(unix="node.exe", windows="node.exe"),
)

NDENV = LayoutDetector(
    name="ndenv",
    display_name="ndenv",
    icon="💎",
    platforms=POSIX_FAMILIES,
    env_var="NDENV_ROOT",
    root=lambda host: host.home / ".ndenv",
    default=lambda base, host: from_marker_file(base / "version"),
)

SNM = LayoutDetector(
    name="snm",
    display_name="snm",
    icon="🦀",
    platforms=POSIX_FAMILIES,
    env_var="SNM_DIR",
    root=lambda host: host.home / ".snm",
    versions_subdir="releases",
)

NVMD = LayoutDetector(
    name="nvmd",
    display_name="nvm-desktop",
    icon="🖥️",
    env_var="NVMD_DIR",
    root=lambda host: host.home / ".nvmd",
    default=lambda base, host: from_marker_file(base / "default"),
)

TNVM = LayoutDetector(
    name="tnvm",
    display_name="tnvm",
    icon="☁️",
    platforms=POSIX_FAMILIES,
    env_var="TNVM_DIR",
    root=lambda host: host.home / ".tnvm",
    versions_subdir="versions/node",
    default=lambda base, host: from_alias_file(base / "alias"),
)

SYSTEM = SystemDetector(
    name="system",
    display_name="System Installation",
    icon="💻",
    can_delete=False,
    version_manager=False,
)

PATH = PathDetector(
    name="path",
    display_name="PATH Environment",
    icon="🛤️",
    can_delete=False,
    version_manager=False,
)

ALL_DETECTORS: tuple[Detector, ...] = (
    NVM, FNM, VOLTA, ASDF, N, MISE, VFOX, NODENV, NVS, PROTO,
    NVM_WINDOWS, NODIST, HOMEBREW, NODEBREW, GNVM, NDENV, SNM, NVMD, TNVM,
    SYSTEM, PATH,
)
