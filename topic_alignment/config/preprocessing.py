"""Text normalization and corpus loading configuration."""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from topic_alignment.config._loader import load_yaml_section


def _get_config() -> dict:
    return load_yaml_section("config.yaml", "preprocessing")


class PreprocessingConfig(BaseSettings):
    """
    Settings for the corpus loader and the text normalizer.

    noise_words are removed on top of the generic and domain stop-word
    lists; they were picked by inspecting early topic fits.
    """
    model_config = SettingsConfigDict(
        env_prefix='PREPROCESSING_',
        case_sensitive=False
    )

    noise_words: List[str] = Field(
        default_factory=lambda: _get_config().get('noise_words', ['clarification', 'boundary'])
    )
    use_nltk_stopwords: bool = Field(
        default_factory=lambda: _get_config().get('use_nltk_stopwords', True)
    )
    sheet_name: int | str = Field(
        default_factory=lambda: _get_config().get('sheet_name', 0),
        description="Worksheet read from .xlsx sources"
    )
