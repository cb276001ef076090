"""I/O utilities for configuration and metadata files."""

import json
from pathlib import Path
from typing import Any, Optional, Union

import yaml


def _resolve_type(file_path: Path, file_type: Optional[str]) -> str:
    if file_type is None:
        file_type = file_path.suffix.lower().lstrip('.')
    return file_type


def load_data(
    file_path: Union[str, Path],
    file_type: Optional[str] = None,
) -> Any:
    """
    Load structured data from a JSON or YAML file.

    Args:
        file_path: Path to the data file
        file_type: Type of file (json, yaml, yml); inferred from suffix if None

    Returns:
        Loaded data
    """
    file_path = Path(file_path)
    file_type = _resolve_type(file_path, file_type)

    if file_type == 'json':
        with open(file_path, 'r') as f:
            return json.load(f)
    elif file_type in ['yaml', 'yml']:
        with open(file_path, 'r') as f:
            return yaml.safe_load(f)
    else:
        raise ValueError(f"Unsupported file type: {file_type}")


def save_data(
    data: Any,
    file_path: Union[str, Path],
    file_type: Optional[str] = None,
) -> None:
    """
    Save structured data to a JSON or YAML file.

    Args:
        data: JSON-compatible data to save
        file_path: Path to save the data
        file_type: Type of file (json, yaml, yml); inferred from suffix if None
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_type = _resolve_type(file_path, file_type)

    if file_type == 'json':
        with open(file_path, 'w') as f:
            json.dump(data, f, indent=2)
    elif file_type in ['yaml', 'yml']:
        with open(file_path, 'w') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    else:
        raise ValueError(f"Unsupported file type: {file_type}")
