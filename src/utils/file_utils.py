"""File I/O helpers for background documents and configs."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = {".yaml", ".yml"}


def ensure_directory(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_structured(path: str | Path) -> Any:
    """Load a JSON or YAML file, chosen by suffix."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in _YAML_SUFFIXES:
        return yaml.safe_load(text)
    return json.loads(text)


def save_json(data: Any, path: str | Path, indent: int = 2) -> None:
    """Save data to a JSON file."""
    path = Path(path)
    ensure_directory(path.parent)
    with open(path, "w") as f:
        json.dump(data, f, indent=indent, default=str)


def load_background_arg(value: str) -> Any:
    """Interpret a CLI background argument.

    An existing path is read as JSON/YAML; otherwise the value is parsed as
    inline JSON, and failing that it is passed through as a bare string
    (e.g. ``"#112233"``), which the normalizer handles as a legacy color.
    """
    candidate = Path(value)
    if candidate.suffix.lower() in _YAML_SUFFIXES | {".json"} and candidate.exists():
        return load_structured(candidate)
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        logger.debug(f"Background argument is not JSON, treating as legacy color: {value}")
        return {"color": value}
