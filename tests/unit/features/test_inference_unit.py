"""
Unit tests for topic_alignment/features/topic_modeling/inference.py

Tests the fold-in E-step, the posterior engine and the posterior table.
"""

import numpy as np
import pytest

from topic_alignment.features.topic_modeling import (
    TopicLabels,
    TopicPosterior,
    TopicPosteriorEngine,
    fold_in,
)
from topic_alignment.features.topic_modeling.constants import POSTERIOR_COLUMNS
from topic_alignment.preprocessing import DocumentTermMatrix


class TestFoldIn:
    """Tests for the single-document E-step."""

    def test_empty_document_gets_prior(self):
        alpha = np.full(4, 0.25)
        beta = np.ones((4, 3)) / 3
        np.testing.assert_allclose(fold_in([], [], beta, alpha), 0.25)

    def test_result_is_probability_vector(self, fitted_model):
        theta = fold_in([0, 1, 2], [3, 1, 1], fitted_model.exp_elog_beta, fitted_model.alpha)
        assert theta.shape == (7,)
        assert (theta >= 0).all()
        assert abs(theta.sum() - 1.0) < 1e-6

    def test_identical_topics_give_uniform(self):
        alpha = np.full(3, 1 / 3)
        beta = np.full((3, 4), 0.25)
        theta = fold_in([0, 2], [5, 1], beta, alpha)
        np.testing.assert_allclose(theta, 1 / 3, atol=1e-9)

    def test_concentrated_topic_dominates(self):
        alpha = np.full(2, 0.5)
        beta = np.array([[0.9, 0.1], [0.1, 0.9]])
        theta = fold_in([0], [10], beta, alpha)
        assert theta[0] > 0.8


class TestTopicPosteriorEngine:
    """Tests for TopicPosteriorEngine.infer."""

    @pytest.fixture
    def engine(self, fitted_model) -> TopicPosteriorEngine:
        return TopicPosteriorEngine(fitted_model)

    def test_every_row_sums_to_one(self, engine, items_dtm):
        posterior = engine.infer(items_dtm)
        np.testing.assert_allclose(posterior.matrix.sum(axis=1), 1.0, atol=1e-6)
        assert (posterior.matrix >= 0).all()

    def test_zero_overlap_item_near_uniform(self, engine, items_dtm):
        posterior = engine.infer(items_dtm, item_ids=["Q049M"])
        assert posterior.zero_overlap_items() == ["Q049M"]
        assert np.all(np.abs(posterior.row("Q049M") - 1 / 7) < 0.05)

    def test_empty_item_kept_with_prior(self, engine, items_dtm):
        assert "Q050H" not in items_dtm
        posterior = engine.infer(items_dtm, item_ids=["Q001L", "Q050H"])
        assert posterior.item_ids == ("Q001L", "Q050H")
        np.testing.assert_allclose(posterior.row("Q050H"), 1 / 7, atol=1e-12)
        assert posterior.overlap["Q050H"] == 0

    def test_repeated_calls_identical(self, engine, items_dtm):
        first = engine.infer(items_dtm)
        second = engine.infer(items_dtm)
        assert np.array_equal(first.matrix, second.matrix)

    def test_order_independent(self, engine, items_dtm):
        forward = engine.infer(items_dtm, item_ids=["Q001L", "Q002M", "Q003H"])
        backward = engine.infer(items_dtm, item_ids=["Q003H", "Q002M", "Q001L"])
        for item_id in forward.item_ids:
            assert np.array_equal(forward.row(item_id), backward.row(item_id))

    def test_model_unchanged_by_inference(self, fitted_model, items_dtm):
        before = fitted_model.topic_term_matrix()
        before_docs = fitted_model.document_topic_matrix()
        TopicPosteriorEngine(fitted_model).infer(items_dtm)
        assert np.array_equal(before, fitted_model.topic_term_matrix())
        assert np.array_equal(before_docs, fitted_model.document_topic_matrix())

    def test_unknown_terms_ignored(self, engine):
        known = DocumentTermMatrix.from_counts({"Q001L": {"wave": 2, "sound": 1}})
        with_unknown = DocumentTermMatrix.from_counts(
            {"Q001L": {"wave": 2, "sound": 1, "painting": 4, "colour": 1}}
        )
        assert np.array_equal(
            engine.infer(known).row("Q001L"),
            engine.infer(with_unknown).row("Q001L"),
        )
        assert engine.infer(with_unknown).overlap["Q001L"] == 2

    def test_align_rekeys_into_model_vocabulary(self, engine, fitted_model):
        dtm = DocumentTermMatrix.from_counts({"Q001L": {"painting": 1, "wave": 3}})
        term_ids, counts = engine.align(dtm, "Q001L")
        assert term_ids == [fitted_model.term_index["wave"]]
        assert counts == [3]

    def test_model_infer_matches_engine(self, fitted_model, items_dtm):
        posterior = fitted_model.infer(items_dtm, max_iterations=50, tolerance=1e-4)
        expected = TopicPosteriorEngine(fitted_model, max_iterations=50, tolerance=1e-4).infer(items_dtm)
        assert len(posterior) == items_dtm.num_documents
        np.testing.assert_array_equal(posterior.matrix, expected.matrix)


class TestTopicPosterior:
    """Tests for the posterior container."""

    @pytest.fixture
    def posterior(self) -> TopicPosterior:
        return TopicPosterior(
            item_ids=["Q001L", "Q002M"],
            matrix=[[0.7, 0.2, 0.1], [1 / 3, 1 / 3, 1 / 3]],
            overlap=[4, 0],
        )

    def test_shape_mismatch_rejected(self):
        with pytest.raises(ValueError):
            TopicPosterior(["Q001L"], [[0.5, 0.5], [0.5, 0.5]], [1])

    def test_matrix_read_only(self, posterior):
        with pytest.raises(ValueError):
            posterior.matrix[0, 0] = 0.0

    def test_item_summary(self, posterior):
        item = posterior.item("Q001L")
        assert item.dominant_topic == 1
        assert item.has_overlap
        assert item.dominant_probability == pytest.approx(0.7)

    def test_uniform_item_entropy(self, posterior):
        item = posterior.item("Q002M")
        assert item.topic_entropy == pytest.approx(np.log2(3), abs=1e-6)
        assert not item.has_overlap

    def test_subset_keeps_given_order(self, posterior):
        subset = posterior.subset(["Q002M", "Q001L"])
        assert subset.item_ids == ("Q002M", "Q001L")
        assert subset.overlap == {"Q002M": 0, "Q001L": 4}

    def test_subset_unknown_item(self, posterior):
        with pytest.raises(KeyError):
            posterior.subset(["Q999H"])

    def test_to_frame_long_table(self, posterior):
        labels = TopicLabels.for_topics(3, {1: "Motion", 2: "Humans", 3: "Waves"})
        frame = posterior.to_frame(labels=labels, levels={"Q001L": "Low", "Q002M": "Medium"})
        assert list(frame.columns) == POSTERIOR_COLUMNS
        assert len(frame) == 2 * 3
        assert sorted(frame["topic"].unique()) == [1, 2, 3]
        first = frame.iloc[0]
        assert (first["item"], first["topic"], first["label"], first["Level"]) == ("Q001L", 1, "Motion", "Low")
        assert frame.groupby("item")["probability"].sum().tolist() == pytest.approx([1.0, 1.0])

    def test_to_frame_default_labels(self, posterior):
        frame = posterior.to_frame()
        assert frame.loc[frame["topic"] == 3, "label"].iloc[0] == "Topic 3"
        assert frame["Level"].isna().all()

    def test_to_frame_label_count_mismatch(self, posterior):
        with pytest.raises(ValueError):
            posterior.to_frame(labels=TopicLabels.for_topics(2))
