"""Save and load BevelConfig settings as JSON."""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from datetime import datetime
from pathlib import Path
from typing import Any

from bevelfield.errors import ConfigError, ConfigLoadError
from bevelfield.types import BevelConfig

SCHEMA_VERSION = "1.0"


def config_to_dict(config: BevelConfig) -> dict[str, Any]:
    return asdict(config)


def config_from_dict(data: dict[str, Any]) -> BevelConfig:
    """Build a validated BevelConfig; missing keys take their defaults.

    Raises:
        ConfigLoadError: Unknown keys or invalid values
    """
    known = {f.name for f in fields(BevelConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigLoadError(f"Unknown config keys: {unknown}")
    try:
        config = BevelConfig(**data)
        config.validate()
    except (ConfigError, TypeError) as e:
        raise ConfigLoadError(f"Invalid config: {e}") from e
    return config


def save_config(config: BevelConfig, filepath: str | Path) -> Path:
    """Write config to a JSON file.

    Format:
        {
          "schema_version": "1.0",
          "created_at": "...",
          "config": {...BevelConfig fields...}
        }
    """
    filepath = Path(filepath)
    metadata = {
        'schema_version': SCHEMA_VERSION,
        'created_at': datetime.now().isoformat(),
        'config': config_to_dict(config),
    }
    filepath.write_text(json.dumps(metadata, indent=2))
    return filepath


def load_config(filepath: str | Path) -> BevelConfig:
    """Load a config written by save_config.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigLoadError: If the file is corrupt, the wrong version, or invalid
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    try:
        metadata = json.loads(filepath.read_text())
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Corrupt config file {filepath}: {e}") from e
    if not isinstance(metadata, dict) or 'config' not in metadata:
        raise ConfigLoadError(f"Missing 'config' section in {filepath}")

    schema_version = metadata.get('schema_version', '1.0')
    if schema_version != SCHEMA_VERSION:
        raise ConfigLoadError(
            f"Schema version {schema_version} not supported. Expected {SCHEMA_VERSION}."
        )
    if not isinstance(metadata['config'], dict):
        raise ConfigLoadError(f"'config' section in {filepath} must be an object")
    return config_from_dict(metadata['config'])
