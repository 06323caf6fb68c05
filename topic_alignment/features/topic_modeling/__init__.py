"""
Topic Modeling Module

This package fits an LDA model on the curriculum standards and infers the
topic mixture of every test item against it.

Key Components:
- LDATrainer: Fits the model on the standards document-term matrix
- FittedTopicModel: Read-only fitted parameters
- TopicPosteriorEngine: Fold-in inference for items
- TopicPosterior: Item x topic mixtures, exportable as a long table
- TopicLabels: Analyst names for topics (presentation only)

Workflow:
    ```python
    from topic_alignment.features.topic_modeling import LDATrainer, TopicPosteriorEngine

    trainer = LDATrainer(num_topics=7, random_state=1234)
    model = trainer.fit(standards_dtm)
    trainer.print_topics(model, num_words=10)

    posterior = TopicPosteriorEngine(model).infer(items_dtm, item_ids=item_ids)
    frame = posterior.to_frame(labels=labels, levels=levels)
    ```
"""

from .inference import TopicPosterior, TopicPosteriorEngine, fold_in
from .labels import TopicLabels
from .lda_trainer import FittedTopicModel, LDATrainer
from .schemas import ItemPosterior, LDAModelInfo
from .constants import (
    TOPIC_MODELING_MODULE_VERSION,
    DEFAULT_NUM_TOPICS,
    DEFAULT_PASSES,
    DEFAULT_ITERATIONS,
    DEFAULT_RANDOM_STATE,
)

__all__ = [
    # Main classes
    "LDATrainer",
    "FittedTopicModel",
    "TopicPosteriorEngine",
    "TopicPosterior",
    "TopicLabels",
    "fold_in",
    # Schemas
    "ItemPosterior",
    "LDAModelInfo",
    # Constants
    "TOPIC_MODELING_MODULE_VERSION",
    "DEFAULT_NUM_TOPICS",
    "DEFAULT_PASSES",
    "DEFAULT_ITERATIONS",
    "DEFAULT_RANDOM_STATE",
]

__version__ = TOPIC_MODELING_MODULE_VERSION
