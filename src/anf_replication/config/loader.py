"""Topology loading: packaged defaults, a user YAML overlay, ${VAR} expansion."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from anf_replication.config.models import TopologyConfig

BUILTIN_TOPOLOGY = "topology.yaml"

# ${NAME} or ${NAME:-fallback}
_VAR_REF = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::-(?P<fallback>[^}]*))?\}")


def _lookup(match: re.Match[str]) -> str:
    name = match["name"]
    if name in os.environ:
        return os.environ[name]
    if match["fallback"] is None:
        msg = f"Environment variable '{name}' is not set and no default provided"
        raise ValueError(msg)
    return match["fallback"]


def expand_env(node: Any) -> Any:
    """Expand variable references in every string of a parsed YAML tree."""
    if isinstance(node, str):
        return _VAR_REF.sub(_lookup, node)
    if isinstance(node, Mapping):
        return {key: expand_env(value) for key, value in node.items()}
    if isinstance(node, list):
        return [expand_env(item) for item in node]
    return node


def overlay(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Lay *override* over *base*.

    Sections (``primary``, ``shared.tags``, ...) merge key by key; scalars
    and lists such as ``protocol_types`` are replaced outright. Neither
    input is modified.
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = overlay(current, value)
        else:
            result[key] = value
    return result


def _parse(text: str, source: str) -> dict[str, Any]:
    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        where = ""
        mark = getattr(exc, "problem_mark", None)
        if mark is not None:
            where = f" at line {mark.line + 1}, column {mark.column + 1}"
        msg = f"Failed to parse YAML in {source}{where}: {exc}"
        raise ValueError(msg) from exc
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        msg = (
            f"{source} must hold a mapping of topology sections, "
            f"got {type(document).__name__}"
        )
        raise ValueError(msg)
    return dict(document)


def builtin_topology() -> dict[str, Any]:
    """The packaged topology every user file is laid over."""
    packaged = resources.files("anf_replication.config") / "defaults" / BUILTIN_TOPOLOGY
    return _parse(packaged.read_text(encoding="utf-8"), BUILTIN_TOPOLOGY)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Read a topology override file with its variable references expanded."""
    p = Path(path)
    if not p.is_file():
        msg = f"Config file not found: {p}"
        raise FileNotFoundError(msg)
    return expand_env(_parse(p.read_text(encoding="utf-8"), str(p)))


def build_topology_config(overrides: Mapping[str, Any] | None = None) -> TopologyConfig:
    """Validate the built-in topology with *overrides* laid over it."""
    return TopologyConfig.model_validate(overlay(builtin_topology(), overrides or {}))


def load_topology_config(path: str | Path | None = None) -> TopologyConfig:
    """Load the built-in topology, optionally overridden by the file at *path*.

    Raises ``FileNotFoundError`` for a missing file and ``ValueError`` for
    anything unparsable or invalid.
    """
    overrides = load_yaml(path) if path is not None else {}
    try:
        return build_topology_config(overrides)
    except ValidationError as exc:
        source = path or "built-in defaults"
        msg = f"Invalid topology config ({source}):\n{exc}"
        raise ValueError(msg) from exc
