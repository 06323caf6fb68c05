"""Chart and item-sampling configuration."""

from typing import Dict

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from topic_alignment.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("config.yaml", "visualization")


class VisualizationConfig(BaseSettings):
    """Radar chart rendering and item sample settings."""
    model_config = SettingsConfigDict(
        env_prefix='VISUALIZATION_',
        case_sensitive=False
    )

    sample_size: int = Field(
        default_factory=lambda: _get_config().get('sample_size', 9)
    )
    sample_seed: int = Field(
        default_factory=lambda: _get_config().get('sample_seed', 2020)
    )
    dpi: int = Field(
        default_factory=lambda: _get_config().get('dpi', 300)
    )
    level_colors: Dict[str, str] = Field(
        default_factory=lambda: _get_config().get(
            'level_colors',
            {'Low': '#6cba6b', 'Medium': '#f79c42', 'High': '#f16a6a'},
        )
    )
    reference_color: str = Field(
        default_factory=lambda: _get_config().get('reference_color', '#9f8d82')
    )
    font_family: str = Field(
        default_factory=lambda: _get_config().get('font_family', 'DejaVu Sans')
    )
