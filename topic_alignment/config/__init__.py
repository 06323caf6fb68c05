"""
Topic Alignment Configuration Package.

This module uses Pydantic Settings to:
1. Define the schema for all configuration
2. Load defaults from configs/config.yaml
3. Automatically override with environment variables from .env or CI/CD secrets

Usage:
    from topic_alignment.config import settings

    # Access paths
    standards = settings.paths.standards_path

    # Access model settings
    k = settings.topic_modeling.model.num_topics
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from topic_alignment.config.paths import PathsConfig
from topic_alignment.config.preprocessing import PreprocessingConfig
from topic_alignment.config.topic_modeling import (
    TopicModelingConfig,
    TopicModelingModelConfig,
    TopicModelingInferenceConfig,
    TopicModelingEvaluationConfig,
)
from topic_alignment.config.visualization import VisualizationConfig


class Settings(BaseSettings):
    """
    Main settings class that combines all configuration sections.

    Usage:
        from topic_alignment.config import settings

        settings.paths.reports_dir
        settings.topic_modeling.model.random_state
        settings.visualization.sample_size
    """
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore'
    )

    paths: PathsConfig = Field(default_factory=PathsConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    topic_modeling: TopicModelingConfig = Field(default_factory=TopicModelingConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)


# ===========================
# Global Settings Instance
# ===========================

settings = Settings()


__all__ = [
    "settings",
    "Settings",
    "PathsConfig",
    "PreprocessingConfig",
    "TopicModelingConfig",
    "TopicModelingModelConfig",
    "TopicModelingInferenceConfig",
    "TopicModelingEvaluationConfig",
    "VisualizationConfig",
]
