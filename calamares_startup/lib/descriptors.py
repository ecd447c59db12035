from __future__ import annotations

from pathlib import Path
from typing import Any, Dict


def load_yaml_mapping(path: Path) -> Dict[str, Any]:
    """Load a YAML descriptor that must contain a mapping.

    Raises ValueError for unreadable, unparseable or non-mapping documents.
    """
    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML required to load descriptors") from e

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Descriptor cannot be read: {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Descriptor is not valid YAML: {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Descriptor must be a mapping/dict: {path}")
    return data
