"""
Topic labels.

Labels are names an analyst gives topics after reading their top terms.
They are presentation metadata only: fitting and inference never read them.
"""

from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import TOPIC_LABEL_PREFIX


class TopicLabels(BaseModel):
    """
    Bijection from 1-based topic number to a human-readable name.

    Usage:
        labels = TopicLabels.for_topics(3, {1: "Motion", 2: "Humans"})
        labels.name(3)   # 'Topic 3'
        labels.ordered() # ['Motion', 'Humans', 'Topic 3']
    """
    model_config = ConfigDict(frozen=True)

    labels: Dict[int, str] = Field(..., description="Topic number (1..K) -> label")

    @model_validator(mode='after')
    def validate_bijection(self) -> "TopicLabels":
        numbers = sorted(self.labels)
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(
                f"Topic labels must cover topics 1..{len(numbers)}, got {numbers}"
            )
        names = [name.strip() for name in self.labels.values()]
        if any(not name for name in names):
            raise ValueError("Topic labels must not be blank")
        if len(set(names)) != len(names):
            raise ValueError(f"Topic labels must be unique, got {names}")
        return self

    @classmethod
    def for_topics(
        cls,
        num_topics: int,
        labels: Optional[Mapping[int, str]] = None,
    ) -> "TopicLabels":
        """
        Build labels for K topics, filling unlabeled topics with "Topic k".

        Raises:
            ValueError: If labels name a topic outside 1..num_topics
        """
        labels = {int(k): v for k, v in (labels or {}).items()}
        unknown = sorted(k for k in labels if not 1 <= k <= num_topics)
        if unknown:
            raise ValueError(
                f"Labels given for topics {unknown}, model has topics 1..{num_topics}"
            )
        return cls(labels={
            k: labels.get(k, f"{TOPIC_LABEL_PREFIX} {k}")
            for k in range(1, num_topics + 1)
        })

    @property
    def num_topics(self) -> int:
        return len(self.labels)

    def name(self, topic: int) -> str:
        return self.labels[topic]

    def ordered(self) -> List[str]:
        return [self.labels[k] for k in range(1, self.num_topics + 1)]
