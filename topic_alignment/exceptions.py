"""Error types raised by the alignment pipeline."""

from typing import Optional


class CorpusSchemaError(ValueError):
    """A source table is malformed or lacks a required column."""

    def __init__(self, message: str, field: Optional[str] = None, source: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.source = source


class TopicModelConfigError(ValueError):
    """The topic model cannot be fit with the given matrix and settings."""
