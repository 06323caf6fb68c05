"""Topic modeling configuration."""

from typing import Dict, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from topic_alignment.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("config.yaml", "topic_modeling")


class TopicModelingModelConfig(BaseSettings):
    """LDA model settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_MODEL_',
        case_sensitive=False
    )

    num_topics: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('num_topics', 7)
    )
    passes: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('passes', 50)
    )
    iterations: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('iterations', 400)
    )
    random_state: int = Field(
        default_factory=lambda: _get_config().get('model', {}).get('random_state', 1234)
    )
    alpha: Union[str, float] = Field(
        default_factory=lambda: _get_config().get('model', {}).get('alpha', 'symmetric')
    )
    eta: Union[str, float, None] = Field(
        default_factory=lambda: _get_config().get('model', {}).get('eta', None)
    )


class TopicModelingInferenceConfig(BaseSettings):
    """Fold-in inference settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_INFERENCE_',
        case_sensitive=False
    )

    max_iterations: int = Field(
        default_factory=lambda: _get_config().get('inference', {}).get('max_iterations', 1000)
    )
    tolerance: float = Field(
        default_factory=lambda: _get_config().get('inference', {}).get('tolerance', 1e-6)
    )


class TopicModelingEvaluationConfig(BaseSettings):
    """Model evaluation settings."""
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_EVAL_',
        case_sensitive=False
    )

    compute_coherence: bool = Field(
        default_factory=lambda: _get_config().get('evaluation', {}).get('compute_coherence', False)
    )
    coherence_metric: str = Field(
        default_factory=lambda: _get_config().get('evaluation', {}).get('coherence_metric', 'u_mass')
    )
    num_top_words: int = Field(
        default_factory=lambda: _get_config().get('evaluation', {}).get('num_top_words', 10)
    )


class TopicModelingConfig(BaseSettings):
    """
    Topic modeling configuration.
    Loads from configs/config.yaml with environment variable overrides.

    topic_labels maps 1-based topic numbers to the names an analyst gave
    them after reading the top terms of a fit.
    """
    model_config = SettingsConfigDict(
        env_prefix='TOPIC_MODELING_',
        env_nested_delimiter='__',
        case_sensitive=False
    )

    model: TopicModelingModelConfig = Field(
        default_factory=TopicModelingModelConfig
    )
    inference: TopicModelingInferenceConfig = Field(
        default_factory=TopicModelingInferenceConfig
    )
    evaluation: TopicModelingEvaluationConfig = Field(
        default_factory=TopicModelingEvaluationConfig
    )
    topic_labels: Dict[int, str] = Field(
        default_factory=lambda: _get_config().get('topic_labels', {}) or {}
    )
