"""
Pydantic models for the loaded corpora.

Contains the validated records read from the standards and items tables
and the bundle handed from the loader to the rest of the pipeline.
"""

from typing import Dict, FrozenSet, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import DifficultyLevel


class StandardRecord(BaseModel):
    """One curriculum standard; many standards share a domain."""
    model_config = ConfigDict(frozen=True)

    domain: str = Field(..., min_length=1)
    standard_text: str = ""

    @field_validator('domain')
    @classmethod
    def strip_domain(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("domain must not be blank")
        return v


class ItemRecord(BaseModel):
    """
    One test item.

    The difficulty level is not a column of the items table; it is parsed
    from the item identifier when the record is created.
    """
    model_config = ConfigDict(frozen=True)

    item_id: str = Field(..., min_length=1)
    prompt: str = ""
    level: DifficultyLevel

    @classmethod
    def from_row(cls, item_id: str, prompt: str) -> "ItemRecord":
        item_id = str(item_id).strip()
        return cls(
            item_id=item_id,
            prompt=prompt,
            level=DifficultyLevel.from_item_id(item_id),
        )


class AlignmentCorpora(BaseModel):
    """
    Everything the pipeline reads from disk, loaded once per run.

    Attributes:
        standards: Standards records in table order
        items: Item records in table order (item ids are unique)
        domain_stopwords: Lower-cased supplementary stop words
    """
    model_config = ConfigDict(frozen=True)

    standards: Tuple[StandardRecord, ...]
    items: Tuple[ItemRecord, ...]
    domain_stopwords: FrozenSet[str] = frozenset()

    @field_validator('items')
    @classmethod
    def validate_unique_item_ids(cls, v: Tuple[ItemRecord, ...]) -> Tuple[ItemRecord, ...]:
        seen = set()
        duplicates = []
        for item in v:
            if item.item_id in seen:
                duplicates.append(item.item_id)
            seen.add(item.item_id)
        if duplicates:
            raise ValueError(f"Duplicate item ids: {sorted(set(duplicates))}")
        return v

    @property
    def domains(self) -> List[str]:
        """Distinct domains in first-appearance order."""
        return list(dict.fromkeys(s.domain for s in self.standards))

    @property
    def item_levels(self) -> Dict[str, str]:
        return {item.item_id: item.level.value for item in self.items}
