"""
Posterior Inference Engine

Folds new documents (test items) into a fitted model: the topic-term
parameters stay fixed and only each document's topic mixture is inferred,
with the same variational E-step gensim runs during training.

Terms the model never saw are dropped before the E-step. A document left
with no known terms gets the normalized Dirichlet prior, which is uniform
for a symmetric alpha. Such items are kept and flagged, not filtered out.

Usage:
    from topic_alignment.features.topic_modeling.inference import TopicPosteriorEngine

    engine = TopicPosteriorEngine(model)
    posterior = engine.infer(items_dtm, item_ids=[item.item_id for item in corpora.items])
    frame = posterior.to_frame(labels=labels, levels=corpora.item_levels)
"""

import logging
import math
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from gensim.matutils import dirichlet_expectation

from topic_alignment.preprocessing.dtm import DocumentTermMatrix
from .constants import (
    DEFAULT_INFERENCE_MAX_ITERATIONS,
    DEFAULT_INFERENCE_TOLERANCE,
    POSTERIOR_COLUMNS,
)
from .labels import TopicLabels
from .schemas import ItemPosterior

if TYPE_CHECKING:
    from .lda_trainer import FittedTopicModel

logger = logging.getLogger(__name__)

_EPSILON = 1e-100


def fold_in(
    term_ids: Sequence[int],
    counts: Sequence[float],
    exp_elog_beta: np.ndarray,
    alpha: np.ndarray,
    max_iterations: int = DEFAULT_INFERENCE_MAX_ITERATIONS,
    tolerance: float = DEFAULT_INFERENCE_TOLERANCE,
) -> np.ndarray:
    """
    Variational posterior over topics for one bag of words.

    Args:
        term_ids: Column ids into exp_elog_beta
        counts: Count of each term
        exp_elog_beta: K x V exp(E[log beta]) of the fitted model
        alpha: Dirichlet prior over topics, length K
        max_iterations: Cap on E-step iterations
        tolerance: Stop once mean |gamma - last gamma| drops below this

    Returns:
        Length-K probability vector (gamma normalized to sum to 1)
    """
    alpha = np.asarray(alpha, dtype=np.float64)
    if len(term_ids) == 0:
        return alpha / alpha.sum()

    cts = np.asarray(counts, dtype=np.float64)
    beta_d = exp_elog_beta[:, list(term_ids)]

    gamma = alpha + cts.sum() / len(alpha)
    exp_elog_theta = np.exp(dirichlet_expectation(gamma))
    phinorm = exp_elog_theta @ beta_d + _EPSILON

    for _ in range(max_iterations):
        last_gamma = gamma
        gamma = alpha + exp_elog_theta * ((cts / phinorm) @ beta_d.T)
        exp_elog_theta = np.exp(dirichlet_expectation(gamma))
        phinorm = exp_elog_theta @ beta_d + _EPSILON
        if np.mean(np.abs(gamma - last_gamma)) < tolerance:
            break

    return gamma / gamma.sum()


class TopicPosterior:
    """
    Topic mixtures of a batch of items, one row per item.

    Rows are length-K probability vectors ordered by topic number; the
    overlap vector counts the distinct item terms known to the model.
    """

    def __init__(self, item_ids: Sequence[str], matrix: np.ndarray, overlap: Sequence[int]):
        matrix = np.array(matrix, dtype=np.float64, copy=True)
        if matrix.ndim != 2 or matrix.shape[0] != len(item_ids) or len(overlap) != len(item_ids):
            raise ValueError(
                f"Posterior shape {matrix.shape} does not match {len(item_ids)} items"
            )
        matrix.setflags(write=False)

        self._item_ids: Tuple[str, ...] = tuple(item_ids)
        self._matrix = matrix
        self._overlap: Tuple[int, ...] = tuple(int(n) for n in overlap)
        self._index = {item_id: i for i, item_id in enumerate(self._item_ids)}

    @property
    def item_ids(self) -> Tuple[str, ...]:
        return self._item_ids

    @property
    def matrix(self) -> np.ndarray:
        """n x K posterior matrix (read-only)."""
        return self._matrix

    @property
    def overlap(self) -> Dict[str, int]:
        return dict(zip(self._item_ids, self._overlap))

    @property
    def num_topics(self) -> int:
        return self._matrix.shape[1]

    def __len__(self) -> int:
        return len(self._item_ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def row(self, item_id: str) -> np.ndarray:
        return self._matrix[self._index[item_id]].copy()

    def zero_overlap_items(self) -> List[str]:
        """Items that share no term with the model vocabulary."""
        return [item_id for item_id, n in zip(self._item_ids, self._overlap) if n == 0]

    def item(self, item_id: str) -> ItemPosterior:
        """Validated summary of one item's mixture."""
        probabilities = self.row(item_id)
        entropy = 0.0
        for prob in probabilities:
            if prob > 0:
                entropy -= prob * math.log2(prob)

        return ItemPosterior(
            item_id=item_id,
            probabilities=[float(p) for p in probabilities],
            overlap_terms=self._overlap[self._index[item_id]],
            dominant_topic=int(np.argmax(probabilities)) + 1,
            topic_entropy=round(max(entropy, 0.0), 6),
        )

    def subset(self, item_ids: Sequence[str]) -> "TopicPosterior":
        """Posterior restricted to item_ids, in the given order."""
        missing = [item_id for item_id in item_ids if item_id not in self._index]
        if missing:
            raise KeyError(f"Items not in posterior: {missing}")
        rows = [self._index[item_id] for item_id in item_ids]
        return TopicPosterior(
            item_ids=item_ids,
            matrix=self._matrix[rows].reshape(len(rows), self.num_topics),
            overlap=[self._overlap[i] for i in rows],
        )

    def to_frame(
        self,
        labels: Optional[TopicLabels] = None,
        levels: Optional[Mapping[str, str]] = None,
    ) -> pd.DataFrame:
        """
        Long table with one row per (item, topic).

        Columns: item, topic (1-based), label, probability, Level, overlap_terms.
        """
        labels = labels or TopicLabels.for_topics(self.num_topics)
        if labels.num_topics != self.num_topics:
            raise ValueError(
                f"Got {labels.num_topics} labels for a {self.num_topics}-topic posterior"
            )
        levels = levels or {}

        records = []
        for i, item_id in enumerate(self._item_ids):
            for topic in range(1, self.num_topics + 1):
                records.append({
                    "item": item_id,
                    "topic": topic,
                    "label": labels.name(topic),
                    "probability": float(self._matrix[i, topic - 1]),
                    "Level": levels.get(item_id),
                    "overlap_terms": self._overlap[i],
                })
        return pd.DataFrame(records, columns=POSTERIOR_COLUMNS)


class TopicPosteriorEngine:
    """
    Fold-in inference against a FittedTopicModel.

    The engine only reads the model; the E-step starts from a fixed
    initialization, so the same inputs always give the same posterior and
    calls may be made in any order.
    """

    def __init__(
        self,
        model: "FittedTopicModel",
        max_iterations: int = DEFAULT_INFERENCE_MAX_ITERATIONS,
        tolerance: float = DEFAULT_INFERENCE_TOLERANCE,
    ):
        self.model = model
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self._term_index = model.term_index

    def align(self, dtm: DocumentTermMatrix, document_id: str) -> Tuple[List[int], List[int]]:
        """
        Re-key one document's counts into the model vocabulary.

        Returns:
            (term ids, counts) for the terms the model knows, sorted by term id
        """
        known = sorted(
            (self._term_index[term], count)
            for term, count in dtm.row_terms(document_id).items()
            if term in self._term_index
        )
        return [term_id for term_id, _ in known], [count for _, count in known]

    def infer(
        self,
        dtm: DocumentTermMatrix,
        item_ids: Optional[Sequence[str]] = None,
    ) -> TopicPosterior:
        """
        Compute a topic mixture for each document of dtm.

        Args:
            dtm: Items document-term matrix (any vocabulary)
            item_ids: Items to report, in order. Defaults to the matrix rows.
                Ids absent from the matrix (empty after filtering) receive
                the prior mixture.

        Returns:
            TopicPosterior
        """
        item_ids = list(dtm.document_ids if item_ids is None else item_ids)

        rows = []
        overlap = []
        for item_id in item_ids:
            term_ids, counts = self.align(dtm, item_id)
            rows.append(fold_in(
                term_ids,
                counts,
                self.model.exp_elog_beta,
                self.model.alpha,
                max_iterations=self.max_iterations,
                tolerance=self.tolerance,
            ))
            overlap.append(len(term_ids))

        matrix = np.vstack(rows) if rows else np.empty((0, self.model.num_topics))
        posterior = TopicPosterior(item_ids, matrix, overlap)

        no_overlap = posterior.zero_overlap_items()
        logger.info(f"Inferred topic mixtures for {len(posterior)} items")
        if no_overlap:
            logger.warning(
                f"{len(no_overlap)} items share no vocabulary with the fitted model "
                f"and received the prior mixture: {no_overlap}"
            )
        return posterior
