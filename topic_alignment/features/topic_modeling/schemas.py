"""
Topic Modeling Schemas

Pydantic models for topic posteriors and fitted model metadata.
"""

from typing import Dict, List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator

from .constants import SIMPLEX_TOLERANCE


class ItemPosterior(BaseModel):
    """
    Topic mixture of a single item, as listed in the run report's item sample.

    Attributes:
        item_id: Item identifier
        probabilities: One probability per topic, ordered by topic number
        overlap_terms: Number of distinct item terms found in the model vocabulary
        dominant_topic: 1-based number of the most probable topic
        topic_entropy: Shannon entropy in bits (log2 K for a uniform mixture)
    """
    item_id: str
    probabilities: List[float] = Field(..., min_length=1)
    overlap_terms: int = Field(default=0, ge=0)
    dominant_topic: int = Field(..., ge=1)
    topic_entropy: float = Field(default=0.0, ge=0.0)

    @field_validator('probabilities')
    @classmethod
    def validate_simplex(cls, v: List[float]) -> List[float]:
        """Validate that probabilities are nonnegative and sum to 1.0."""
        if any(p < 0.0 for p in v):
            raise ValueError(f"Topic probabilities must be nonnegative, got {v}")
        total = sum(v)
        if abs(total - 1.0) > SIMPLEX_TOLERANCE:
            raise ValueError(
                f"Topic probabilities must sum to 1.0, got {total:.8f}"
            )
        return v

    @property
    def num_topics(self) -> int:
        return len(self.probabilities)

    @property
    def has_overlap(self) -> bool:
        return self.overlap_terms > 0

    @property
    def dominant_probability(self) -> float:
        return self.probabilities[self.dominant_topic - 1]


class LDAModelInfo(BaseModel):
    """
    Information about a fitted LDA model.

    Attributes:
        num_topics: Number of topics
        num_documents: Number of documents in the fitting matrix
        vocabulary_size: Size of vocabulary
        passes: Number of training passes
        iterations: Number of iterations per pass
        random_state: Seed the model was fit with
        alpha: Document-topic density hyperparameter
        eta: Topic-word density hyperparameter
        perplexity: Per-word log perplexity bound on the fitting corpus
        coherence_metric: Coherence measure used, if computed
        coherence_score: Topic coherence score
        topic_labels: Analyst labels for topics (1-based)
        topic_top_words: Top words for each topic (1-based) with probabilities
    """
    num_topics: int = Field(..., ge=1)
    num_documents: int = Field(..., ge=0)
    vocabulary_size: int = Field(..., ge=0)
    passes: int = Field(..., ge=1)
    iterations: int = Field(..., ge=1)
    random_state: int
    alpha: str | float = Field(..., description="Alpha hyperparameter")
    eta: str | float | None = Field(default=None, description="Eta hyperparameter")
    perplexity: Optional[float] = Field(default=None)
    coherence_metric: Optional[str] = Field(default=None)
    coherence_score: Optional[float] = Field(default=None)
    topic_labels: Optional[Dict[int, str]] = Field(
        default=None,
        description="Human-readable topic labels"
    )
    topic_top_words: Optional[Dict[int, List[Tuple[str, float]]]] = Field(
        default=None,
        description="Top words for each topic with probabilities"
    )
