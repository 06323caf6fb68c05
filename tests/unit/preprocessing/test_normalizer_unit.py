"""
Unit tests for topic_alignment/preprocessing/normalizer.py

Tests tokenization, stop-word set construction and filtering.
No file dependencies - runs in <1 second.
"""

import pytest

from topic_alignment.preprocessing.normalizer import (
    StopwordSet,
    TextNormalizer,
    generic_stopwords,
    tokenize,
)


class TestTokenize:
    """Tests for tokenize."""

    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("Waves, ENERGY; and light!") == ["waves", "energy", "and", "light"]

    def test_keeps_duplicates_in_order(self):
        assert tokenize("wave wave energy") == ["wave", "wave", "energy"]

    def test_keeps_inner_apostrophes(self):
        assert tokenize("Earth's surface") == ["earth's", "surface"]

    def test_drops_underscores(self):
        assert tokenize("heat_flow") == ["heat", "flow"]

    @pytest.mark.parametrize("text", [None, "", "   ", "!!! ---"])
    def test_empty_text_yields_no_tokens(self, text):
        assert tokenize(text) == []

    def test_keeps_numbers(self):
        assert tokenize("Grade 5 standards") == ["grade", "5", "standards"]


class TestGenericStopwords:
    """Tests for generic_stopwords."""

    def test_gensim_words_present_without_nltk(self):
        words = generic_stopwords(use_nltk=False)
        assert "the" in words
        assert "which" in words

    def test_returns_frozenset(self):
        assert isinstance(generic_stopwords(use_nltk=False), frozenset)


class TestStopwordSet:
    """Tests for StopwordSet.build and membership."""

    def test_combines_all_three_sources(self):
        stopwords = StopwordSet.build(
            domain_words=["Students"],
            noise_words=["boundary"],
            generic_words=["the"],
        )
        assert stopwords.combined == frozenset({"the", "students", "boundary"})

    def test_words_are_lowercased_and_trimmed(self):
        stopwords = StopwordSet.build(domain_words=["  Evidence "], generic_words=[])
        assert "evidence" in stopwords.domain

    def test_blank_words_ignored(self):
        stopwords = StopwordSet.build(domain_words=["", "  "], generic_words=[])
        assert stopwords.domain == frozenset()

    def test_membership_is_case_insensitive(self):
        stopwords = StopwordSet.build(noise_words=["clarification"], generic_words=[])
        assert "Clarification" in stopwords
        assert "wave" not in stopwords

    def test_non_string_not_contained(self):
        stopwords = StopwordSet.build(generic_words=["the"])
        assert 1 not in stopwords


class TestTextNormalizer:
    """Tests for TextNormalizer."""

    @pytest.fixture
    def normalizer(self) -> TextNormalizer:
        """Normalizer with a small explicit generic list."""
        stopwords = StopwordSet.build(
            domain_words=["students"],
            noise_words=["clarification", "boundary"],
            generic_words=["the", "of", "and", "a"],
        )
        return TextNormalizer(stopwords)

    def test_generic_stopword_removed_content_word_kept(self, normalizer):
        assert normalizer.normalize("the science the") == ["science"]

    def test_all_three_filters_applied(self, normalizer):
        tokens = normalizer.normalize(
            "Students model the flow of energy. Clarification Statement: Assessment Boundary."
        )
        assert tokens == ["model", "flow", "energy", "statement", "assessment"]

    def test_no_surviving_token_is_a_stopword(self, normalizer):
        tokens = normalizer.normalize("The students and a wave of the energy")
        assert all(token not in normalizer.stopwords for token in tokens)

    def test_all_stopwords_gives_empty(self, normalizer):
        assert normalizer.normalize("The and of a") == []

    def test_tokens_by_document_groups_texts_under_one_id(self, normalizer):
        pairs = list(normalizer.tokens_by_document([
            ("Waves", "the wave"),
            ("Waves", "a frequency"),
            ("Energy", "heat"),
        ]))
        assert pairs == [("Waves", "wave"), ("Waves", "frequency"), ("Energy", "heat")]

    def test_tokens_by_document_skips_empty_texts(self, normalizer):
        pairs = list(normalizer.tokens_by_document([("Q001L", "the of"), ("Q002M", None)]))
        assert pairs == []
