"""Tests for the built-in manager detectors.

The generic tests build each layout-driven manager's tree under a
temporary root named by its environment variable. The manager-specific
tests cover default resolution, root fallbacks, and the detectors with
their own layouts (nvm-windows, Homebrew, system, PATH).
"""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path, PurePosixPath

import pytest

from nodedoctor.detectors.base import LayoutDetector
from nodedoctor.detectors.managers import (
    ALL_DETECTORS,
    ASDF,
    FNM,
    HOMEBREW,
    MISE,
    NODEBREW,
    NVM,
    NVM_WINDOWS,
    NVS,
    PATH,
    PROTO,
    SYSTEM,
    VOLTA,
)
from nodedoctor.detectors.models import PathScanResult
from nodedoctor.host import LINUX, WINDOWS

from tests.detectors.helpers import (
    create_fnm_home,
    create_homebrew_prefix,
    create_nvm_home,
    create_versions,
    create_volta_home,
    write_node,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX paths and symlinks")

LAYOUT_DETECTORS = [d for d in ALL_DETECTORS if isinstance(d, LayoutDetector)]


def _family_for(detector) -> str:
    return LINUX if LINUX in detector.platforms else WINDOWS


def _relative(path: str) -> list[str]:
    return list(PurePosixPath(path).parts) if path else []


# ---------------------------------------------------------------------------
# Generic contract for layout-driven managers
# ---------------------------------------------------------------------------


class TestLayoutDetectors:
    """Every declarative manager honours the discovery contract."""

    @pytest.mark.parametrize("detector", LAYOUT_DETECTORS, ids=lambda d: d.name)
    def test_missing_versions_dir_returns_none(self, detector, tmp_path: Path, make_host) -> None:
        host = make_host(env={detector.env_var: str(tmp_path / "empty")}, family=_family_for(detector))
        assert detector.detect(host) is None

    @pytest.mark.parametrize("detector", LAYOUT_DETECTORS, ids=lambda d: d.name)
    def test_finds_every_version(self, detector, tmp_path: Path, make_host) -> None:
        family = _family_for(detector)
        root = tmp_path / "root"
        versions_dir = root.joinpath(*_relative(detector.versions_subdir))
        layout = detector.layout.windows if family == WINDOWS else detector.layout.unix
        arch = "x64" if detector.arch_tier else None
        create_versions(versions_dir, ["16.20.2", "18.2.0", "20.11.0"], executable=layout, arch=arch)

        host = make_host(env={detector.env_var: str(root)}, family=family)
        result = detector.detect(host)

        assert result is not None
        assert len(result.installations) == 3
        assert {i.version for i in result.installations} == {"16.20.2", "18.2.0", "20.11.0"}
        assert all(i.manager == detector.name for i in result.installations)
        assert all(i.executable.is_file() and i.size >= 0 for i in result.installations)
        assert result.base_dir == root
        assert result.versions_dir == versions_dir
        assert result.env_var == detector.env_var
        assert result.env_var_set is True

    @pytest.mark.parametrize("detector", LAYOUT_DETECTORS, ids=lambda d: d.name)
    def test_version_without_executable_is_not_an_installation(
        self, detector, tmp_path: Path, make_host,
    ) -> None:
        family = _family_for(detector)
        root = tmp_path / "root"
        versions_dir = root.joinpath(*_relative(detector.versions_subdir))
        (versions_dir / "18.2.0" / "x64").mkdir(parents=True)
        host = make_host(env={detector.env_var: str(root)}, family=family)
        assert detector.detect(host) is None


# ---------------------------------------------------------------------------
# Manager-specific behaviour
# ---------------------------------------------------------------------------


class TestNvm:
    """nvm: ~/.nvm fallback and alias/default."""

    def test_home_fallback_and_default(self, home: Path, host) -> None:
        create_nvm_home(home / ".nvm", ["v18.2.0", "v20.11.0"], default="18.2.0")
        result = NVM.detect(host)
        assert result is not None
        assert result.base_dir == home / ".nvm"
        assert result.default_version == "18.2.0"
        assert result.env_var_set is False

    def test_no_default_still_reports(self, home: Path, host) -> None:
        create_nvm_home(home / ".nvm", ["v18.2.0"])
        result = NVM.detect(host)
        assert result is not None
        assert result.default_version is None

    def test_dangling_alias_is_reported_as_is(self, home: Path, host) -> None:
        create_nvm_home(home / ".nvm", ["v18.2.0"], default="v99.0.0")
        assert NVM.detect(host).default_version == "99.0.0"

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
    def test_symlinked_root_is_resolved_at_scan_time(self, tmp_path: Path, make_host) -> None:
        real_root = create_nvm_home(tmp_path / "data" / "nvm", ["v20.11.0"])
        link = tmp_path / "nvm-link"
        os.symlink(real_root, link)
        result = NVM.detect(make_host(env={"NVM_DIR": str(link)}))
        assert result is not None
        assert result.base_dir == link
        assert result.real_base_dir == Path(os.path.realpath(real_root))


class TestFnm:
    """fnm: root discovered from platform directories."""

    def test_xdg_root(self, home: Path, make_host) -> None:
        data = home / "data"
        create_fnm_home(data / "fnm", ["v20.11.0"], default="v20.11.0")
        result = FNM.detect(make_host(env={"XDG_DATA_HOME": str(data)}))
        assert result is not None
        assert result.base_dir == data / "fnm"
        assert result.default_version == "20.11.0"
        [inst] = result.installations
        assert inst.executable == data / "fnm" / "node-versions" / "v20.11.0" / "installation" / "bin" / "node"

    def test_dot_fnm_root(self, home: Path, host) -> None:
        create_fnm_home(home / ".fnm", ["v18.2.0"])
        assert FNM.detect(host).base_dir == home / ".fnm"

    def test_no_root(self, host) -> None:
        assert FNM.detect(host) is None

    @posix_only
    def test_symlinked_default(self, home: Path, host) -> None:
        root = create_fnm_home(home / ".fnm", ["v18.2.0", "v20.11.0"])
        (root / "aliases").mkdir()
        os.symlink(root / "node-versions" / "v20.11.0" / "installation", root / "aliases" / "default")
        assert FNM.detect(host).default_version == "20.11.0"


class TestVolta:
    """Volta: inventory dir and platform.json default."""

    def test_extra_and_default(self, home: Path, host) -> None:
        create_volta_home(home / ".volta", ["20.11.0"], default="20.11.0")
        result = VOLTA.detect(host)
        assert result.default_version == "20.11.0"
        assert result.extra["inventory_dir"] == home / ".volta" / "tools" / "inventory" / "node"


class TestConfigDefaults:
    """Managers whose default lives in a config file."""

    def test_asdf_tool_versions(self, home: Path, host) -> None:
        create_versions(home / ".asdf" / "installs" / "nodejs", ["20.11.0"])
        (home / ".tool-versions").write_text("nodejs 20.11.0\n")
        assert ASDF.detect(host).default_version == "20.11.0"

    def test_mise_global_config(self, home: Path, host) -> None:
        create_versions(home / ".local" / "share" / "mise" / "installs" / "node", ["20.11.0"])
        config = home / ".config" / "mise" / "config.toml"
        config.parent.mkdir(parents=True)
        config.write_text('[tools]\nnode = "20"\n')
        result = MISE.detect(host)
        assert result.base_dir == home / ".local" / "share" / "mise"
        assert result.default_version == "20"

    def test_proto_prototools(self, home: Path, host) -> None:
        create_versions(home / ".proto" / "tools" / "node", ["20.11.0"])
        (home / ".proto" / ".prototools").write_text('node = "20.11.0"\n')
        assert PROTO.detect(host).default_version == "20.11.0"

    def test_nvs_default_link_target(self, home: Path, host) -> None:
        create_versions(home / ".nvs" / "node", ["20.11.0"], arch="x64")
        (home / ".nvs" / "default").write_text("node/20.11.0/x64\n")
        result = NVS.detect(host)
        assert result.default_version == "20.11.0"
        assert result.installations[0].arch == "x64"

    @posix_only
    def test_nodebrew_current_symlink(self, home: Path, host) -> None:
        root = home / ".nodebrew"
        create_versions(root / "node", ["v18.2.0"])
        os.symlink(root / "node" / "v18.2.0", root / "current")
        assert NODEBREW.detect(host).default_version == "18.2.0"


class TestNvmWindows:
    """NVM for Windows: version dirs mixed with other files in NVM_HOME."""

    def test_only_version_dirs(self, tmp_path: Path, make_host) -> None:
        nvm_home = tmp_path / "nvm"
        write_node(nvm_home / "v20.11.0" / "node.exe", "20.11.0")
        write_node(nvm_home / "18.2.0" / "node.exe", "18.2.0")
        write_node(nvm_home / "elevate" / "node.exe", "1.0.0")
        host = make_host(env={"NVM_HOME": str(nvm_home)}, family=WINDOWS)
        result = NVM_WINDOWS.detect(host)
        assert sorted(i.version for i in result.installations) == ["18.2.0", "20.11.0"]
        assert result.env_var_set is True

    def test_requires_env_var(self, make_host) -> None:
        assert NVM_WINDOWS.detect(make_host(family=WINDOWS)) is None


class TestHomebrew:
    """Homebrew Cellar formulae."""

    def test_node_and_versioned_formulae(self, tmp_path: Path, make_host) -> None:
        prefix = create_homebrew_prefix(
            tmp_path / "brew",
            {"node": ["21.6.1_1"], "node@18": ["18.19.0"], "python@3.12": ["3.12.1"]},
        )
        brew = dataclasses.replace(HOMEBREW, prefixes=())
        result = brew.detect(make_host(env={"HOMEBREW_PREFIX": str(prefix)}))
        assert result is not None
        by_formula = {i.formula: i.version for i in result.installations}
        assert by_formula == {"node": "21.6.1", "node@18": "18.19.0"}
        assert result.base_dir == prefix

    @posix_only
    def test_linked_binary_gives_default(self, tmp_path: Path, make_host) -> None:
        prefix = create_homebrew_prefix(tmp_path / "brew", {"node@18": ["18.19.0"]})
        (prefix / "bin").mkdir()
        os.symlink(prefix / "Cellar" / "node@18" / "18.19.0" / "bin" / "node", prefix / "bin" / "node")
        brew = dataclasses.replace(HOMEBREW, prefixes=())
        result = brew.detect(make_host(env={"HOMEBREW_PREFIX": str(prefix)}))
        assert result.default_version == "18.19.0"

    def test_no_prefix(self, host) -> None:
        brew = dataclasses.replace(HOMEBREW, prefixes=())
        assert brew.detect(host) is None

    def test_not_deletable(self) -> None:
        assert HOMEBREW.can_delete is False


class TestSystem:
    """OS-installed runtimes."""

    def test_plain_binary(self, tmp_path: Path, host) -> None:
        exe = write_node(tmp_path / "usr" / "bin" / "node", "18.19.1")
        system = dataclasses.replace(SYSTEM, posix_paths=(str(exe),))
        result = system.detect(host)
        [inst] = result.installations
        assert inst.version == "system"
        assert inst.verified == "18.19.1"
        assert inst.size == 0

    @posix_only
    def test_manager_symlink_is_skipped(self, tmp_path: Path, host) -> None:
        target = write_node(tmp_path / ".nvm" / "versions" / "node" / "v20.11.0" / "bin" / "node", "20.11.0")
        link = tmp_path / "usr" / "local" / "bin" / "node"
        link.parent.mkdir(parents=True)
        os.symlink(target, link)
        system = dataclasses.replace(SYSTEM, posix_paths=(str(link),))
        assert system.detect(host) is None

    def test_absent(self, tmp_path: Path, host) -> None:
        system = dataclasses.replace(SYSTEM, posix_paths=(str(tmp_path / "missing"),))
        assert system.detect(host) is None


@posix_only
class TestPath:
    """PATH scan."""

    def test_finds_nodes_in_order(self, tmp_path: Path, make_host) -> None:
        first = tmp_path / "first"
        second = tmp_path / "second"
        write_node(first / "node", "20.11.0")
        write_node(second / "node", "18.2.0")
        (tmp_path / "empty").mkdir()
        raw = ":".join([str(tmp_path / "empty"), str(first), str(second), str(first)])
        result = PATH.detect(make_host(env={"PATH": raw}))

        assert isinstance(result, PathScanResult)
        assert result.path_dirs == [tmp_path / "empty", first, second]
        assert [n.verified for n in result.found_nodes] == ["20.11.0", "18.2.0"]
        assert result.active_node == first / "node"

    def test_empty_path_is_still_a_result(self, host) -> None:
        result = PATH.detect(host)
        assert isinstance(result, PathScanResult)
        assert result.found_nodes == []
        assert result.active_node is None


class TestCatalogue:
    """The registry order and pseudo-detector flags."""

    def test_order(self) -> None:
        names = [d.name for d in ALL_DETECTORS]
        assert names[:3] == ["nvm", "fnm", "volta"]
        assert names[-2:] == ["system", "path"]
        assert len(names) == len(set(names)) == 21

    def test_pseudo_detectors(self) -> None:
        flags = {d.name: d.version_manager for d in ALL_DETECTORS}
        assert flags["path"] is False and flags["system"] is False
        assert flags["nvm"] is True
