"""
Text Normalizer

Tokenizes free text into lower-case word tokens and removes stop words.
Three exclusion sources are combined into one set: a generic English list,
the domain-specific supplement loaded with the corpora, and a short literal
list of noise words. No stemming or lemmatization is applied.

Usage:
    from topic_alignment.preprocessing.normalizer import StopwordSet, TextNormalizer

    stopwords = StopwordSet.build(domain_words={"students"}, noise_words=["boundary"])
    normalizer = TextNormalizer(stopwords)
    normalizer.normalize("Students plan an investigation of wave energy.")
    # ['plan', 'investigation', 'wave', 'energy']
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple

from gensim.parsing.preprocessing import STOPWORDS as GENSIM_STOPWORDS
from nltk.corpus import stopwords as nltk_stopwords

from .constants import TOKEN_PATTERN

logger = logging.getLogger(__name__)


def tokenize(text: Optional[str]) -> List[str]:
    """
    Split text into lower-case word tokens, punctuation stripped.

    Document order and duplicates are kept; counting happens downstream.
    """
    if not text or not text.strip():
        return []
    return TOKEN_PATTERN.findall(text.lower())


def generic_stopwords(use_nltk: bool = True) -> FrozenSet[str]:
    """
    Load the generic English stop-word list (gensim + NLTK).

    Args:
        use_nltk: Add NLTK's English list when its corpus is installed

    Returns:
        Frozen set of lower-case stop words
    """
    words = set(GENSIM_STOPWORDS)

    if use_nltk:
        try:
            words.update(nltk_stopwords.words('english'))
        except LookupError:
            logger.warning(
                "NLTK stopwords not downloaded. "
                "Run: python -m nltk.downloader stopwords"
            )

    return frozenset(words)


@dataclass(frozen=True)
class StopwordSet:
    """
    Effective exclusion set: generic | domain | noise.

    Attributes:
        generic: Generic English stop words
        domain: Supplementary domain stop words
        noise: Literal noise words observed to pollute topics
    """
    generic: FrozenSet[str] = frozenset()
    domain: FrozenSet[str] = frozenset()
    noise: FrozenSet[str] = frozenset()

    @classmethod
    def build(
        cls,
        domain_words: Iterable[str] = (),
        noise_words: Iterable[str] = (),
        generic_words: Optional[Iterable[str]] = None,
        use_nltk: bool = True,
    ) -> "StopwordSet":
        """
        Build a stop-word set; all words are lower-cased.

        Args:
            domain_words: Supplementary list loaded with the corpora
            noise_words: Literal exclusion list from configuration
            generic_words: Override for the generic list (defaults to gensim + NLTK)
            use_nltk: Whether the default generic list includes NLTK's words
        """
        generic = generic_stopwords(use_nltk) if generic_words is None else generic_words
        stopwords = cls(
            generic=_lowered(generic),
            domain=_lowered(domain_words),
            noise=_lowered(noise_words),
        )
        logger.info(
            f"Loaded {len(stopwords.combined)} stopwords "
            f"({len(stopwords.domain)} domain, {len(stopwords.noise)} noise)"
        )
        return stopwords

    @property
    def combined(self) -> FrozenSet[str]:
        return self.generic | self.domain | self.noise

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and word.lower() in self.combined


def _lowered(words: Iterable[str]) -> FrozenSet[str]:
    return frozenset(w.strip().lower() for w in words if w and w.strip())


class TextNormalizer:
    """
    Tokenize and filter text against a StopwordSet.

    The three filters are applied as one combined set; the result is the
    same as applying them one after another.
    """

    def __init__(self, stopwords: StopwordSet):
        self.stopwords = stopwords
        self._excluded = stopwords.combined

    def normalize(self, text: Optional[str]) -> List[str]:
        """Return the filtered tokens of text in document order."""
        return [token for token in tokenize(text) if token not in self._excluded]

    def tokens_by_document(
        self,
        documents: Iterable[Tuple[str, Optional[str]]],
    ) -> Iterator[Tuple[str, str]]:
        """
        Yield (document_id, token) pairs for every surviving token.

        Several texts may share a document_id (standards grouped by domain);
        their tokens are all attributed to that document.

        Args:
            documents: (document_id, text) pairs
        """
        for document_id, text in documents:
            for token in self.normalize(text):
                yield document_id, token
