"""Utility modules for luxscene."""
from .config import load_config, save_config
from .paths import ensure_dir, resolve_path
from .schema_validator import validate_description, validate_payload

__all__ = [
    "load_config",
    "save_config",
    "ensure_dir",
    "resolve_path",
    "validate_description",
    "validate_payload",
]
