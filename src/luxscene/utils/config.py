"""Configuration utilities."""

import json
from pathlib import Path
from typing import Any, Union

import yaml

YAML_SUFFIXES = (".yaml", ".yml")


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """
    Load a scene description or configuration from a JSON or YAML file.

    Args:
        path: Path to configuration file

    Returns:
        Configuration dictionary (empty for an empty YAML document)
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        if path.suffix in YAML_SUFFIXES:
            return yaml.safe_load(f) or {}
        elif path.suffix == ".json":
            return json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")


def save_config(config: dict[str, Any], path: Union[str, Path]) -> None:
    """
    Save configuration to JSON or YAML file.

    Args:
        config: Configuration dictionary
        path: Path to save file
    """
    path = Path(path)
    if path.suffix not in YAML_SUFFIXES and path.suffix != ".json":
        raise ValueError(f"Unsupported config format: {path.suffix}")
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if path.suffix in YAML_SUFFIXES:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(config, f, indent=2)
