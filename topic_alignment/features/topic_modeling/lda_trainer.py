"""
LDA Model Fitting

Fits a Latent Dirichlet Allocation model on the standards document-term
matrix (one document per domain) and freezes the result.

Usage:
    from topic_alignment.features.topic_modeling.lda_trainer import LDATrainer

    trainer = LDATrainer(num_topics=7, random_state=1234)
    model = trainer.fit(standards_dtm)
    trainer.print_topics(model, num_words=10)
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from gensim.models import CoherenceModel, LdaModel

from topic_alignment.exceptions import TopicModelConfigError
from topic_alignment.preprocessing.dtm import DocumentTermMatrix
from .constants import (
    DEFAULT_ALPHA,
    DEFAULT_COHERENCE_METRIC,
    DEFAULT_ETA,
    DEFAULT_INFERENCE_MAX_ITERATIONS,
    DEFAULT_INFERENCE_TOLERANCE,
    DEFAULT_ITERATIONS,
    DEFAULT_NUM_TOP_WORDS,
    DEFAULT_NUM_TOPICS,
    DEFAULT_PASSES,
    DEFAULT_RANDOM_STATE,
    TEXT_BASED_COHERENCE_METRICS,
)
from .inference import TopicPosterior, TopicPosteriorEngine
from .labels import TopicLabels
from .schemas import LDAModelInfo

logger = logging.getLogger(__name__)


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=np.float64, copy=True)
    array.setflags(write=False)
    return array


class FittedTopicModel:
    """
    Read-only LDA parameters over the standards vocabulary.

    Holds the vocabulary, the Dirichlet prior over topics, the K x V
    topic-term distributions and the posterior of the fitting documents.
    Nothing here changes after construction, so any number of inference
    calls can share one instance.
    """

    def __init__(
        self,
        vocabulary: Sequence[str],
        alpha: np.ndarray,
        topic_term: np.ndarray,
        exp_elog_beta: np.ndarray,
        document_ids: Sequence[str],
        document_topic: np.ndarray,
        info: LDAModelInfo,
    ):
        self._vocabulary: Tuple[str, ...] = tuple(vocabulary)
        self._term_index: Dict[str, int] = {term: i for i, term in enumerate(self._vocabulary)}
        self._alpha = _frozen(alpha)
        self._topic_term = _frozen(topic_term)
        self._exp_elog_beta = _frozen(exp_elog_beta)
        self._document_ids: Tuple[str, ...] = tuple(document_ids)
        self._document_topic = _frozen(document_topic)
        self.info = info

    @classmethod
    def from_gensim(
        cls,
        lda: LdaModel,
        dtm: DocumentTermMatrix,
        document_topic: np.ndarray,
        info: LDAModelInfo,
    ) -> "FittedTopicModel":
        """Copy the parameters out of a trained gensim LdaModel."""
        return cls(
            vocabulary=dtm.vocabulary,
            alpha=lda.alpha,
            topic_term=lda.get_topics(),
            exp_elog_beta=lda.expElogbeta,
            document_ids=dtm.document_ids,
            document_topic=document_topic,
            info=info,
        )

    # ===========================
    # Accessors
    # ===========================

    @property
    def num_topics(self) -> int:
        return self._topic_term.shape[0]

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        return self._vocabulary

    @property
    def term_index(self) -> Dict[str, int]:
        return dict(self._term_index)

    @property
    def alpha(self) -> np.ndarray:
        return self._alpha

    @property
    def exp_elog_beta(self) -> np.ndarray:
        """exp(E[log beta]) under the topic-term variational posterior, K x V."""
        return self._exp_elog_beta

    @property
    def document_ids(self) -> Tuple[str, ...]:
        return self._document_ids

    def topic_term_matrix(self) -> np.ndarray:
        """K x V topic-term probabilities; each row sums to 1."""
        return self._topic_term.copy()

    def document_topic_matrix(self) -> np.ndarray:
        """D x K topic mixtures of the fitting documents; each row sums to 1."""
        return self._document_topic.copy()

    def top_terms(self, topic: int, topn: int = DEFAULT_NUM_TOP_WORDS) -> List[Tuple[str, float]]:
        """
        Most probable terms of a topic.

        Args:
            topic: 1-based topic number
            topn: Number of terms to return
        """
        if not 1 <= topic <= self.num_topics:
            raise ValueError(f"Topic must be in 1..{self.num_topics}, got {topic}")
        row = self._topic_term[topic - 1]
        order = np.argsort(-row, kind="stable")[:topn]
        return [(self._vocabulary[i], float(row[i])) for i in order]

    def infer(
        self,
        dtm: DocumentTermMatrix,
        item_ids: Optional[Sequence[str]] = None,
        max_iterations: int = DEFAULT_INFERENCE_MAX_ITERATIONS,
        tolerance: float = DEFAULT_INFERENCE_TOLERANCE,
    ) -> TopicPosterior:
        """Fold documents into this model; see TopicPosteriorEngine.infer."""
        engine = TopicPosteriorEngine(self, max_iterations=max_iterations, tolerance=tolerance)
        return engine.infer(dtm, item_ids=item_ids)

    def __repr__(self) -> str:
        return (
            f"FittedTopicModel(num_topics={self.num_topics}, "
            f"vocabulary={len(self._vocabulary)}, documents={len(self._document_ids)})"
        )


class LDATrainer:
    """
    LDA Topic Model Trainer for the standards corpus.

    This class handles:
    1. Validating the document-term matrix against the topic count
    2. Training a gensim LdaModel with a fixed seed
    3. Evaluating model quality (perplexity, optional coherence)
    4. Freezing the parameters into a FittedTopicModel

    Training runs in a single process, so the same matrix and seed always
    give identical parameters.

    Usage:
        trainer = LDATrainer(num_topics=7)
        model = trainer.fit(dtm)
        print(trainer.model_info.perplexity)
    """

    def __init__(
        self,
        num_topics: int = DEFAULT_NUM_TOPICS,
        passes: int = DEFAULT_PASSES,
        iterations: int = DEFAULT_ITERATIONS,
        random_state: int = DEFAULT_RANDOM_STATE,
        alpha: str | float = DEFAULT_ALPHA,
        eta: str | float | None = DEFAULT_ETA,
        compute_coherence: bool = False,
        coherence_metric: str = DEFAULT_COHERENCE_METRIC,
        num_top_words: int = DEFAULT_NUM_TOP_WORDS,
    ):
        """
        Initialize LDA trainer.

        Args:
            num_topics: Number of topics K
            passes: Number of training passes through corpus
            iterations: Number of iterations during training
            random_state: Random seed for reproducibility
            alpha: Document-topic prior ('symmetric', 'asymmetric', 'auto' or float)
            eta: Topic-word prior (None, 'auto' or float)
            compute_coherence: Whether to compute a coherence score after fitting
            coherence_metric: gensim CoherenceModel measure
            num_top_words: Top words recorded per topic in the model info
        """
        if num_topics < 1:
            raise TopicModelConfigError(f"num_topics must be at least 1, got {num_topics}")

        self.num_topics = num_topics
        self.passes = passes
        self.iterations = iterations
        self.random_state = random_state
        self.alpha = alpha
        self.eta = eta
        self.compute_coherence = compute_coherence
        self.coherence_metric = coherence_metric
        self.num_top_words = num_top_words

        self.model_info: Optional[LDAModelInfo] = None

        logger.info(
            f"Initialized LDATrainer with {num_topics} topics, "
            f"{passes} passes, {iterations} iterations, seed {random_state}"
        )

    @classmethod
    def from_settings(cls, config) -> "LDATrainer":
        """Build a trainer from a TopicModelingConfig."""
        return cls(
            num_topics=config.model.num_topics,
            passes=config.model.passes,
            iterations=config.model.iterations,
            random_state=config.model.random_state,
            alpha=config.model.alpha,
            eta=config.model.eta,
            compute_coherence=config.evaluation.compute_coherence,
            coherence_metric=config.evaluation.coherence_metric,
            num_top_words=config.evaluation.num_top_words,
        )

    def validate(self, dtm: DocumentTermMatrix) -> None:
        """
        Check the matrix can be fit with this topic count.

        Raises:
            TopicModelConfigError: If the matrix is empty or has fewer documents than topics
        """
        if dtm.num_documents == 0:
            raise TopicModelConfigError(
                "Document-term matrix has no documents; every document was empty after filtering"
            )
        if dtm.num_terms == 0:
            raise TopicModelConfigError("Document-term matrix has an empty vocabulary")
        if dtm.num_documents < self.num_topics:
            raise TopicModelConfigError(
                f"Cannot fit {self.num_topics} topics on {dtm.num_documents} documents; "
                f"num_topics must not exceed the number of documents"
            )

    def fit(
        self,
        dtm: DocumentTermMatrix,
        texts: Optional[Sequence[Sequence[str]]] = None,
    ) -> FittedTopicModel:
        """
        Fit LDA on a document-term matrix.

        Args:
            dtm: Fitting matrix (standards grouped by domain)
            texts: Tokenized documents, only needed for text-based coherence metrics

        Returns:
            FittedTopicModel

        Raises:
            TopicModelConfigError: If the matrix cannot be fit with num_topics
        """
        self.validate(dtm)

        corpus = dtm.corpus
        logger.info(
            f"Training LDA with {self.num_topics} topics on {dtm.num_documents} documents "
            f"({dtm.num_terms} terms)..."
        )
        lda = LdaModel(
            corpus=corpus,
            id2word=dtm.dictionary,
            num_topics=self.num_topics,
            random_state=self.random_state,
            passes=self.passes,
            iterations=self.iterations,
            alpha=self.alpha,
            eta=self.eta,
            eval_every=None,
            dtype=np.float64,
        )
        logger.info("LDA training complete!")

        gamma, _ = lda.inference(corpus)
        gamma = np.asarray(gamma, dtype=np.float64)
        document_topic = gamma / gamma.sum(axis=1, keepdims=True)

        perplexity = float(lda.log_perplexity(corpus))
        logger.info(f"Model perplexity bound: {perplexity:.4f}")

        coherence_score = None
        if self.compute_coherence:
            coherence_score = self._coherence(lda, dtm, texts)

        topic_top_words = {
            topic_id + 1: [(word, float(p)) for word, p in lda.show_topic(topic_id, topn=self.num_top_words)]
            for topic_id in range(self.num_topics)
        }

        self.model_info = LDAModelInfo(
            num_topics=self.num_topics,
            num_documents=dtm.num_documents,
            vocabulary_size=dtm.num_terms,
            passes=self.passes,
            iterations=self.iterations,
            random_state=self.random_state,
            alpha=self.alpha,
            eta=self.eta,
            perplexity=perplexity,
            coherence_metric=self.coherence_metric if self.compute_coherence else None,
            coherence_score=coherence_score,
            topic_top_words=topic_top_words,
        )

        return FittedTopicModel.from_gensim(lda, dtm, document_topic, self.model_info)

    def print_topics(
        self,
        model: FittedTopicModel,
        num_words: int = 10,
        labels: Optional[TopicLabels] = None,
    ) -> None:
        """
        Print human-readable topic descriptions.

        Args:
            model: Fitted model
            num_words: Number of top words to show per topic
            labels: Optional analyst labels
        """
        print(f"\nDiscovered Topics (n={model.num_topics}):")
        print("=" * 80)

        for topic in range(1, model.num_topics + 1):
            label = labels.name(topic) if labels else f"Topic {topic}"
            words_str = ", ".join(
                f"{word}({weight:.3f})" for word, weight in model.top_terms(topic, num_words)
            )
            print(f"\n{label}:")
            print(f"  {words_str}")

        print("\n" + "=" * 80)

    def _coherence(
        self,
        lda: LdaModel,
        dtm: DocumentTermMatrix,
        texts: Optional[Sequence[Sequence[str]]],
    ) -> float:
        if self.coherence_metric in TEXT_BASED_COHERENCE_METRICS and texts is None:
            raise ValueError(
                f"Coherence metric {self.coherence_metric!r} needs the tokenized texts"
            )

        logger.info(f"Computing {self.coherence_metric} coherence...")
        coherence_model = CoherenceModel(
            model=lda,
            corpus=dtm.corpus,
            texts=[list(t) for t in texts] if texts is not None else None,
            dictionary=dtm.dictionary,
            coherence=self.coherence_metric,
            processes=1,
        )
        score = float(coherence_model.get_coherence())
        logger.info(f"Coherence score: {score:.4f}")
        return score
