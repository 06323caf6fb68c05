"""
Corpus preprocessing for the alignment pipeline.

Flow: Load → Normalize → Count

- loader: reads and validates the standards, stop-word and items tables
- normalizer: tokenization and stop-word filtering
- dtm: sparse document-term matrices
"""

from .constants import DifficultyLevel, LEVEL_ORDER
from .dtm import DocumentTermMatrix
from .loader import load_corpora, load_items, load_standards, load_stopwords
from .models import AlignmentCorpora, ItemRecord, StandardRecord
from .normalizer import StopwordSet, TextNormalizer, tokenize

__all__ = [
    'DifficultyLevel',
    'LEVEL_ORDER',
    'DocumentTermMatrix',
    'load_corpora',
    'load_items',
    'load_standards',
    'load_stopwords',
    'AlignmentCorpora',
    'ItemRecord',
    'StandardRecord',
    'StopwordSet',
    'TextNormalizer',
    'tokenize',
]
