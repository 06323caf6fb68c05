"""
Unit tests for topic_alignment/config and PipelineConfig.from_settings.

Tests YAML defaults, environment overrides and pipeline config assembly.
"""

import pytest
from pydantic import ValidationError

from topic_alignment.config import (
    PreprocessingConfig,
    Settings,
    TopicModelingConfig,
    TopicModelingModelConfig,
    VisualizationConfig,
)
from topic_alignment.config._loader import (
    CONFIG_ENV_VAR,
    _read_yaml,
    clear_config_cache,
    load_yaml_section,
)
from topic_alignment.exceptions import TopicModelConfigError
from topic_alignment.pipeline import AlignmentPipeline, PipelineConfig


class TestYamlLoader:
    """Tests for load_yaml_section."""

    def test_loads_section(self):
        section = load_yaml_section("config.yaml", "topic_modeling")
        assert section["model"]["num_topics"] == 7

    def test_missing_section_is_empty(self):
        assert load_yaml_section("config.yaml", "no_such_section") == {}

    def test_missing_file_is_empty(self):
        assert load_yaml_section("absent.yaml") == {}

    def test_cache_can_be_cleared(self):
        load_yaml_section("config.yaml", "visualization")
        clear_config_cache()
        assert _read_yaml.cache_info().currsize == 0

    def test_env_var_replaces_default_file(self, tmp_path, monkeypatch):
        override = tmp_path / "alt.yaml"
        override.write_text("topic_modeling:\n  model:\n    num_topics: 4\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(override))
        try:
            assert load_yaml_section("config.yaml", "topic_modeling")["model"]["num_topics"] == 4
            assert load_yaml_section("config.yaml", "visualization") == {}
        finally:
            clear_config_cache()

    def test_non_mapping_file_rejected(self, tmp_path, monkeypatch):
        override = tmp_path / "list.yaml"
        override.write_text("- a\n- b\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(override))
        try:
            with pytest.raises(ValueError, match="mapping"):
                load_yaml_section("config.yaml")
        finally:
            clear_config_cache()


class TestDefaults:
    """Defaults come from configs/config.yaml."""

    def test_model_defaults(self):
        model = TopicModelingModelConfig()
        assert model.num_topics == 7
        assert model.random_state == 1234
        assert model.alpha == "symmetric"
        assert model.eta is None

    def test_topic_labels(self):
        labels = TopicModelingConfig().topic_labels
        assert labels[1] == "Motion"
        assert labels[7] == "Waves"

    def test_preprocessing_defaults(self):
        config = PreprocessingConfig()
        assert config.noise_words == ["clarification", "boundary"]
        assert config.sheet_name == 0

    def test_visualization_defaults(self):
        config = VisualizationConfig()
        assert config.sample_size == 9
        assert config.sample_seed == 2020
        assert set(config.level_colors) == {"Low", "Medium", "High"}


class TestEnvironmentOverrides:
    """Environment variables override the YAML values."""

    def test_num_topics_from_env(self, monkeypatch):
        monkeypatch.setenv("TOPIC_MODELING_MODEL_NUM_TOPICS", "8")
        assert TopicModelingModelConfig().num_topics == 8

    def test_sample_seed_from_env(self, monkeypatch):
        monkeypatch.setenv("VISUALIZATION_SAMPLE_SEED", "7")
        assert Settings().visualization.sample_seed == 7

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("TOPIC_MODELING_MODEL_NUM_TOPICS", "many")
        with pytest.raises(ValidationError):
            TopicModelingModelConfig()


class TestPipelineConfig:
    """Tests for PipelineConfig."""

    def test_from_settings(self):
        config = PipelineConfig.from_settings()
        assert config.num_topics == 7
        assert config.sample_size == 9
        assert config.topic_labels[4] == "Energy"

    def test_none_overrides_ignored(self):
        config = PipelineConfig.from_settings(num_topics=None, random_state=None)
        assert config.num_topics == 7
        assert config.random_state == 1234

    def test_overrides_applied(self):
        config = PipelineConfig.from_settings(random_state=99, sample_size=3)
        assert config.random_state == 99
        assert config.sample_size == 3

    def test_labels_dropped_when_topic_count_changes(self):
        config = PipelineConfig.from_settings(num_topics=5)
        assert config.topic_labels == {}

    def test_labels_dropped_when_env_lowers_topic_count(self, monkeypatch):
        monkeypatch.setenv("TOPIC_MODELING_MODEL_NUM_TOPICS", "5")
        config = PipelineConfig.from_settings(Settings())
        assert config.num_topics == 5
        assert config.topic_labels == {}
        pipeline = AlignmentPipeline(config)
        assert pipeline.labels.ordered() == [f"Topic {k}" for k in range(1, 6)]

    def test_labels_dropped_when_env_raises_topic_count(self, monkeypatch):
        monkeypatch.setenv("TOPIC_MODELING_MODEL_NUM_TOPICS", "8")
        config = PipelineConfig.from_settings(Settings())
        assert config.num_topics == 8
        assert config.topic_labels == {}

    def test_explicit_labels_kept(self):
        config = PipelineConfig.from_settings(num_topics=3, topic_labels={1: "Waves"})
        assert config.topic_labels == {1: "Waves"}

    def test_labels_outside_topic_range_is_config_error(self):
        config = PipelineConfig(num_topics=2, topic_labels={1: "Waves", 3: "Heat"})
        with pytest.raises(TopicModelConfigError, match="topics"):
            AlignmentPipeline(config)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            PipelineConfig(num_topic=7)

    def test_topic_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            PipelineConfig(num_topics=0)
