"""Path utilities."""

import os
from pathlib import Path
from typing import Optional, Union


def resolve_path(
    path: Union[str, Path],
    base_path: Optional[str] = None,
    must_exist: bool = False
) -> Path:
    """
    Resolve a path, handling relative paths and environment variables.

    Args:
        path: Path to resolve
        base_path: Base path for relative paths
        must_exist: Raise error if path doesn't exist

    Returns:
        Resolved Path object
    """
    path = os.path.expanduser(os.path.expandvars(str(path)))
    resolved = Path(path)

    if not resolved.is_absolute() and base_path:
        resolved = Path(base_path) / resolved

    resolved = resolved.resolve()

    if must_exist and not resolved.exists():
        raise FileNotFoundError(f"Path does not exist: {resolved}")

    return resolved


def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def ensure_parent(path: Union[str, Path]) -> Path:
    """Ensure the directory holding ``path`` exists; return ``path`` as a Path."""
    target = Path(path)
    if target.parent != Path("."):
        ensure_dir(target.parent)
    return target
