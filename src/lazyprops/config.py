"""
Generator configuration and its file loader (YAML/JSON/TOML).
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Final, final

import yaml

from lazyprops.errors import ConfigError

DEFAULT_HEADER: Final = "# <auto-generated/>"


@final
@dataclass(kw_only=True, frozen=True, slots=True, weakref_slot=True)
class GeneratorConfig:
    marker_names: frozenset[str] = frozenset()
    """
    Fully qualified names accepted as the marker in addition to the built-in
    ``lazyprops.lazy_prop`` family.
    """

    extensible_names: tuple[str, ...] = ("extensible",)
    """
    Decorator names that flag a class as extensible.

    Matched syntactically against the last component of the decorator, so
    ``@extensible`` and ``@lazyprops.extensible`` both qualify.
    """

    emit_marker: bool = False
    """
    Whether each pass also emits the standalone marker module.
    """

    header: str = DEFAULT_HEADER
    """First line of every generated unit."""


def _string_items(key: str, value: object) -> tuple[str, ...]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"{key} must be a list of strings, got {value!r}")
    return tuple(value)


def config_from_mapping(data: Mapping[str, object]) -> GeneratorConfig:
    """
    Build a :class:`GeneratorConfig` from parsed configuration data.

    Keys may use either ``snake_case`` or ``kebab-case``.

    :raises ConfigError: On unknown keys or wrongly typed values.
    """
    known = {f.name for f in fields(GeneratorConfig)}
    kwargs: dict[str, object] = {}
    for raw_key, value in data.items():
        key = raw_key.replace("-", "_")
        if key not in known:
            raise ConfigError(f"Unknown configuration key: {raw_key}")
        match key:
            case "marker_names":
                kwargs[key] = frozenset(_string_items(raw_key, value))
            case "extensible_names":
                kwargs[key] = _string_items(raw_key, value)
            case "emit_marker":
                if not isinstance(value, bool):
                    raise ConfigError(f"{raw_key} must be a boolean, got {value!r}")
                kwargs[key] = value
            case "header":
                if not isinstance(value, str) or not value.startswith("#"):
                    raise ConfigError(f"{raw_key} must be a comment line, got {value!r}")
                kwargs[key] = value
    return GeneratorConfig(**kwargs)  # type: ignore[arg-type]


def load_config(file_path: Path) -> GeneratorConfig:
    """
    Load a configuration file.

    ``pyproject.toml`` is read from its ``[tool.lazyprops]`` table; other files
    hold the settings at top level.

    :param file_path: Path to a ``.yaml``/``.yml``, ``.json`` or ``.toml`` file.
    :raises ConfigError: If the format is not recognized or the content is invalid.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {file_path}: {e}") from e

    name = file_path.name.lower()
    try:
        if name.endswith((".yaml", ".yml")):
            data = yaml.safe_load(content)
        elif name.endswith(".json"):
            data = json.loads(content)
        elif name.endswith(".toml"):
            data = tomllib.loads(content)
        else:
            raise ConfigError(
                f"Unrecognized configuration format: {file_path.name}. "
                f"Expected .yaml, .yml, .json or .toml"
            )
    except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot parse {file_path.name}: {e}") from e

    if name == "pyproject.toml":
        data = data.get("tool", {}).get("lazyprops", {})
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(
            f"Configuration must be a mapping at top level, got {type(data).__name__}"
        )
    return config_from_mapping(data)
