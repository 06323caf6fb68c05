"""
Lightweight fixtures for unit tests - NO file dependencies.
Everything is built from the synthetic corpus in tests/conftest.py.
"""

import pytest

from topic_alignment.features.topic_modeling import FittedTopicModel, LDATrainer
from topic_alignment.preprocessing import DocumentTermMatrix, StopwordSet, TextNormalizer


# =============================================================================
# Normalization Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def normalizer(synthetic_corpora) -> TextNormalizer:
    """Normalizer with gensim's generic list, the domain list and the noise words."""
    stopwords = StopwordSet.build(
        domain_words=synthetic_corpora.domain_stopwords,
        noise_words=["clarification", "boundary"],
        use_nltk=False,
    )
    return TextNormalizer(stopwords)


@pytest.fixture(scope="session")
def standards_dtm(synthetic_corpora, normalizer) -> DocumentTermMatrix:
    """Standards matrix, one document per domain."""
    return DocumentTermMatrix.from_pairs(normalizer.tokens_by_document(
        (s.domain, s.standard_text) for s in synthetic_corpora.standards
    ))


@pytest.fixture(scope="session")
def items_dtm(synthetic_corpora, normalizer) -> DocumentTermMatrix:
    """Items matrix, one document per non-empty item."""
    return DocumentTermMatrix.from_pairs(normalizer.tokens_by_document(
        (item.item_id, item.prompt) for item in synthetic_corpora.items
    ))


# =============================================================================
# Model Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def fitted_model(standards_dtm) -> FittedTopicModel:
    """Seven-topic model fit on the seven domains."""
    trainer = LDATrainer(num_topics=7, passes=20, iterations=100, random_state=1234)
    return trainer.fit(standards_dtm)
