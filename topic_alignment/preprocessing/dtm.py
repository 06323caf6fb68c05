"""
Document-Term Matrix Builder

Counts (document_id, term) pairs into a sparse document-term matrix. Rows
are kept as gensim bag-of-words vectors over a gensim Dictionary built from
this matrix alone, so the standards and items matrices each carry their own
vocabulary.

Usage:
    from topic_alignment.preprocessing.dtm import DocumentTermMatrix

    dtm = DocumentTermMatrix.from_pairs([("d1", "wave"), ("d1", "wave"), ("d1", "energy")])
    dtm.entries()
    # {('d1', 'wave'): 2, ('d1', 'energy'): 1}
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd
from gensim.corpora import Dictionary

logger = logging.getLogger(__name__)

BowRow = List[Tuple[int, int]]


class DocumentTermMatrix:
    """
    Immutable sparse term-frequency matrix.

    Documents appear in order of their first token; documents without any
    surviving token never appear. Every row therefore has at least one
    nonzero count.
    """

    def __init__(self, document_ids: Sequence[str], dictionary: Dictionary, rows: Sequence[BowRow]):
        if len(document_ids) != len(rows):
            raise ValueError(
                f"Got {len(document_ids)} document ids for {len(rows)} rows"
            )
        if len(set(document_ids)) != len(document_ids):
            raise ValueError("Document ids must be unique")

        self._document_ids: Tuple[str, ...] = tuple(document_ids)
        self._dictionary = dictionary
        self._rows: Tuple[Tuple[Tuple[int, int], ...], ...] = tuple(tuple(row) for row in rows)
        self._index = {doc_id: i for i, doc_id in enumerate(self._document_ids)}

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> "DocumentTermMatrix":
        """
        Count occurrences of each distinct (document_id, term) pair.

        Args:
            pairs: (document_id, term) pairs, e.g. from TextNormalizer.tokens_by_document

        Returns:
            DocumentTermMatrix with one entry per distinct pair
        """
        counts: Dict[str, Counter] = {}
        for document_id, term in pairs:
            counts.setdefault(document_id, Counter())[term] += 1

        return cls.from_counts(counts)

    @classmethod
    def from_counts(cls, counts: Mapping[str, Mapping[str, int]]) -> "DocumentTermMatrix":
        """Build from {document_id: {term: count}}; zero counts and empty documents are dropped."""
        document_ids = []
        token_lists = []
        for document_id, term_counts in counts.items():
            kept = {term: int(n) for term, n in term_counts.items() if n > 0}
            if not kept:
                continue
            document_ids.append(document_id)
            token_lists.append(kept)

        dictionary = Dictionary()
        dictionary.add_documents([list(terms) for terms in token_lists])

        rows = []
        for terms in token_lists:
            rows.append(sorted((dictionary.token2id[term], n) for term, n in terms.items()))

        dtm = cls(document_ids, dictionary, rows)
        logger.info(
            f"Built document-term matrix: {dtm.num_documents} documents x "
            f"{dtm.num_terms} terms, {dtm.nnz} nonzero entries"
        )
        return dtm

    # ===========================
    # Accessors
    # ===========================

    @property
    def document_ids(self) -> Tuple[str, ...]:
        return self._document_ids

    @property
    def dictionary(self) -> Dictionary:
        return self._dictionary

    @property
    def vocabulary(self) -> Tuple[str, ...]:
        """Terms ordered by column id."""
        return tuple(self._dictionary[i] for i in range(len(self._dictionary)))

    @property
    def corpus(self) -> List[BowRow]:
        """Rows as gensim bag-of-words vectors (a fresh list each call)."""
        return [list(row) for row in self._rows]

    @property
    def num_documents(self) -> int:
        return len(self._document_ids)

    @property
    def num_terms(self) -> int:
        return len(self._dictionary)

    @property
    def nnz(self) -> int:
        return sum(len(row) for row in self._rows)

    def __len__(self) -> int:
        return self.num_documents

    def __contains__(self, document_id: object) -> bool:
        return document_id in self._index

    def row_terms(self, document_id: str) -> Dict[str, int]:
        """Return {term: count} for one document (empty if the document is absent)."""
        if document_id not in self._index:
            return {}
        return {
            self._dictionary[term_id]: count
            for term_id, count in self._rows[self._index[document_id]]
        }

    def count(self, document_id: str, term: str) -> int:
        """Count for (document, term); 0 for unobserved pairs."""
        return self.row_terms(document_id).get(term, 0)

    def entries(self) -> Dict[Tuple[str, str], int]:
        """The nonzero entries as {(document_id, term): count}."""
        return {
            (document_id, self._dictionary[term_id]): count
            for document_id, row in zip(self._document_ids, self._rows)
            for term_id, count in row
        }

    def to_frame(self) -> pd.DataFrame:
        """Long table with columns document, term, count."""
        records = [
            {"document": document_id, "term": term, "count": count}
            for (document_id, term), count in self.entries().items()
        ]
        return pd.DataFrame(records, columns=["document", "term", "count"])

    def __repr__(self) -> str:
        return (
            f"DocumentTermMatrix(documents={self.num_documents}, "
            f"terms={self.num_terms}, nnz={self.nnz})"
        )
