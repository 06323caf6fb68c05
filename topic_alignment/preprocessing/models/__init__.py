"""
Pydantic data models for the alignment corpora.

- corpus: StandardRecord, ItemRecord, AlignmentCorpora
"""
from .corpus import StandardRecord, ItemRecord, AlignmentCorpora

__all__ = [
    'StandardRecord',
    'ItemRecord',
    'AlignmentCorpora',
]
