"""
Unit tests for topic labels and the topic modeling schemas.

No model fitting - runs in <1 second.
"""

import pytest
from pydantic import ValidationError

from topic_alignment.features.topic_modeling import (
    ItemPosterior,
    LDAModelInfo,
    TopicLabels,
)


class TestTopicLabels:
    """Tests for TopicLabels."""

    def test_fills_unlabeled_topics(self):
        labels = TopicLabels.for_topics(3, {1: "Motion", 2: "Humans"})
        assert labels.ordered() == ["Motion", "Humans", "Topic 3"]

    def test_string_keys_accepted(self):
        labels = TopicLabels.for_topics(2, {"1": "Motion"})
        assert labels.name(1) == "Motion"

    def test_label_outside_topic_range_rejected(self):
        with pytest.raises(ValueError, match="topics \\[8\\]"):
            TopicLabels.for_topics(7, {8: "Extra"})

    def test_gaps_rejected(self):
        with pytest.raises(ValidationError):
            TopicLabels(labels={1: "Motion", 3: "Waves"})

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValidationError, match="unique"):
            TopicLabels(labels={1: "Motion", 2: "Motion"})

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match="blank"):
            TopicLabels(labels={1: "  "})

    def test_num_topics(self):
        assert TopicLabels.for_topics(7).num_topics == 7

    def test_frozen(self):
        labels = TopicLabels.for_topics(2)
        with pytest.raises(ValidationError):
            labels.labels = {1: "a", 2: "b"}


class TestItemPosterior:
    """Tests for ItemPosterior validation."""

    def test_valid(self):
        item = ItemPosterior(item_id="Q001L", probabilities=[0.5, 0.5], dominant_topic=1)
        assert item.num_topics == 2

    def test_sum_must_be_one(self):
        with pytest.raises(ValidationError, match="sum to 1.0"):
            ItemPosterior(item_id="Q001L", probabilities=[0.5, 0.6], dominant_topic=1)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="nonnegative"):
            ItemPosterior(item_id="Q001L", probabilities=[1.5, -0.5], dominant_topic=1)

    def test_dominant_probability(self):
        item = ItemPosterior(item_id="Q001L", probabilities=[0.1, 0.6, 0.3], dominant_topic=2)
        assert item.dominant_probability == pytest.approx(0.6)

    def test_topic_numbers_start_at_one(self):
        with pytest.raises(ValidationError):
            ItemPosterior(item_id="Q001L", probabilities=[1.0], dominant_topic=0)


class TestLDAModelInfo:
    """Tests for LDAModelInfo."""

    @pytest.fixture
    def info(self) -> LDAModelInfo:
        return LDAModelInfo(
            num_topics=2,
            num_documents=2,
            vocabulary_size=4,
            passes=1,
            iterations=10,
            random_state=1234,
            alpha="symmetric",
            topic_labels={1: "Waves"},
            topic_top_words={1: [("wave", 0.5), ("sound", 0.3)], 2: [("heat", 0.6)]},
        )

    def test_json_round_trip(self, info):
        assert LDAModelInfo.model_validate_json(info.model_dump_json()) == info
