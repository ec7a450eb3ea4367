from __future__ import annotations

import copy
import json
from pathlib import Path

from .utils.postprocessor import GRAPH_FORMATS

DEFAULT_PROPERTIES = {
    "stub": {
        "prefix": "Stub",
        "includes": [],
        "guard": None,
        "basename": "stub",
        "workers": 1,
    },
    "callgraph": {
        "graph_format": "graphml",
        "include_types": False,
    },
    "loader": {
        "workers": 4,
    },
}


def coerce_value(raw_value: str) -> object:
    """Best-effort type coercion: bool -> int -> float -> str."""
    lowered = raw_value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return int(raw_value)
    except ValueError:
        try:
            return float(raw_value)
        except ValueError:
            return raw_value


def merge_properties(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_properties(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def parse_option(item: str) -> tuple[str, str, object]:
    if "=" not in item:
        raise ValueError(f"Invalid --option value '{item}'. Expected SECTION.KEY=VALUE.")
    key, raw_value = item.split("=", 1)
    key = key.strip()
    if "." not in key:
        raise ValueError(f"Invalid --option value '{item}': key must be SECTION.KEY.")
    section, name = key.split(".", 1)
    if not section or not name:
        raise ValueError(f"Invalid --option value '{item}': empty section or key.")
    return section, name, coerce_value(raw_value.strip())


def load_properties(config_path: str | None = None, options: list[str] | None = None) -> dict:
    """
    Defaults, overlaid by a JSON config file, overlaid by --option values.

    Raises:
        ValueError: unreadable config file, malformed option or unknown
            graph format
    """
    properties = copy.deepcopy(DEFAULT_PROPERTIES)

    if config_path:
        config_file = Path(config_path)
        try:
            payload = json.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ValueError(f"Cannot read config file {config_file}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Config file {config_file} must contain a JSON object.")
        properties = merge_properties(properties, payload)

    for item in options or []:
        section, name, value = parse_option(item)
        properties.setdefault(section, {})[name] = value

    graph_format = properties.get("callgraph", {}).get("graph_format")
    if graph_format not in GRAPH_FORMATS:
        raise ValueError(
            f"Unknown callgraph.graph_format '{graph_format}', expected one of {', '.join(GRAPH_FORMATS)}"
        )

    return properties
