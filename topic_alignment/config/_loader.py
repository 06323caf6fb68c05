"""
Cached YAML configuration loader.

Settings classes read their defaults from one YAML file, by default
configs/config.yaml. Point TOPIC_ALIGNMENT_CONFIG at another file to run
with a different set of defaults (e.g. another topic count and labels)
without touching the repository copy.

Usage:
    from topic_alignment.config._loader import load_yaml_section

    # Whole file
    config = load_yaml_section("config.yaml")

    # One top-level section
    topic_modeling = load_yaml_section("config.yaml", "topic_modeling")
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any
import yaml

CONFIG_ENV_VAR = "TOPIC_ALIGNMENT_CONFIG"
DEFAULT_CONFIG_FILE = "config.yaml"


def _get_configs_dir() -> Path:
    """Get the configs directory path."""
    return Path(__file__).parent.parent.parent / "configs"


def resolve_config_path(config_file: str = DEFAULT_CONFIG_FILE) -> Path:
    """
    Locate a configuration file.

    The default file is replaced by $TOPIC_ALIGNMENT_CONFIG when it is set;
    any other name is looked up under configs/.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override and config_file == DEFAULT_CONFIG_FILE:
        return Path(override).expanduser()
    return _get_configs_dir() / config_file


@lru_cache(maxsize=16)
def _read_yaml(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}

    with open(config_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(
            f"{config_path} must contain a mapping of sections, got {type(data).__name__}"
        )
    return data


def load_yaml_section(config_file: str = DEFAULT_CONFIG_FILE, section: str | None = None) -> dict[str, Any]:
    """
    Load a YAML configuration file, or one top-level section of it.

    Args:
        config_file: File name under configs/ (e.g., "config.yaml")
        section: Optional top-level key to extract (e.g., "topic_modeling")

    Returns:
        Configuration dictionary (empty if the file or section is missing)

    Raises:
        ValueError: If the file is not a mapping of sections

    Note:
        Parsed files are cached per path. Use clear_config_cache() to reload.
    """
    data = _read_yaml(resolve_config_path(config_file))
    if section is None:
        return data
    return data.get(section) or {}


def clear_config_cache() -> None:
    """Clear all cached configurations. Useful for testing."""
    _read_yaml.cache_clear()
