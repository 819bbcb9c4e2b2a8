"""Default-version resolution strategies.

Each manager records "the currently selected version" differently:

- a plain version file (nodenv ``version``, nvs ``default``, nvmd ``default``)
- an alias file that may point at another alias (nvm ``alias/default``)
- a symlink whose target directory names the version (nodebrew ``current``)
- a nested config value (asdf ``.tool-versions``, mise ``config.toml``,
  proto ``.prototools``, Volta ``platform.json``)

Every strategy reduces its source to one normalized token via
``normalize_version`` and returns None when the source is missing or
unreadable. A missing source means "no default configured"; it never
means the manager is absent.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path

import toml

from nodedoctor.host import file_exists, normalize_version, read_default_version

# nvm aliases can chain (default -> lts/iron -> 20.11.0); stop after this many hops
_MAX_ALIAS_DEPTH = 4


def _looks_like_version(token: str) -> bool:
    return token[:1].isdigit()


def from_marker_file(marker: Path) -> str | None:
    """Read a plain single-token version file."""
    return read_default_version(marker)


def from_alias_file(alias_dir: Path, name: str = "default") -> str | None:
    """Resolve an nvm-style alias, following alias-to-alias references.

    Returns the first concrete version reached. When the chain ends in a
    symbolic name with no further alias file (``node``, ``lts/*``,
    ``system``), that name is returned as-is.
    """
    token = read_default_version(alias_dir / name)
    depth = 0
    while token and not _looks_like_version(token) and depth < _MAX_ALIAS_DEPTH:
        next_file = alias_dir / token
        if not file_exists(next_file):
            break
        next_token = read_default_version(next_file)
        if not next_token:
            break
        token = next_token
        depth += 1
    return token


def from_symlink(link: Path, skip: Iterable[str] = ()) -> str | None:
    """Return the version named by the directory a symlink points at.

    Args:
        link: The symlink (nodebrew ``current``, fnm ``aliases/default``).
        skip: Trailing path components to step over before the version
            directory, e.g. ``("installation",)`` for fnm.
    """
    try:
        target = Path(os.readlink(link))
    except (OSError, ValueError):
        return None
    skipped = set(skip)
    while target.name in skipped:
        target = target.parent
    return normalize_version(target.name) or None


def from_tool_versions(path: Path, tools: Iterable[str]) -> str | None:
    """Read the first version listed for any of ``tools`` in a .tool-versions file."""
    wanted = set(tools)
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except (PermissionError, OSError):
        return None
    for line in lines:
        line = line.split("#", 1)[0].strip()
        parts = line.split()
        if len(parts) >= 2 and parts[0] in wanted:
            return normalize_version(parts[1]) or None
    return None


def _dig(data: object, keys: Iterable[str]) -> object:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _token_from_value(value: object) -> str | None:
    # mise allows a list of versions; the first one is active
    if isinstance(value, list) and value:
        value = value[0]
    if isinstance(value, dict):
        value = value.get("version")
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        token = normalize_version(str(value))
        return token or None
    return None


def from_toml_table(path: Path, table: str | None, keys: Iterable[str]) -> str | None:
    """Read a version from a TOML file, e.g. ``[tools] node = "20"``.

    Args:
        path: The TOML file.
        table: Table holding the tool entries, or None for top-level keys.
        keys: Candidate key names, tried in order.
    """
    try:
        with open(path, encoding="utf-8") as handle:
            data = toml.load(handle)
    except (OSError, toml.TomlDecodeError, UnicodeDecodeError):
        return None
    section = data.get(table) if table else data
    if not isinstance(section, dict):
        return None
    for key in keys:
        token = _token_from_value(section.get(key))
        if token:
            return token
    return None


def from_json_keys(path: Path, keys: Iterable[str]) -> str | None:
    """Read a version from a nested JSON value, e.g. ``node.runtime``."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return _token_from_value(_dig(data, keys))
