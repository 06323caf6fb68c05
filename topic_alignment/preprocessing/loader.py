"""
Corpus Loader

Reads the standards, stop-word supplement and items tables and validates
them into typed records. Column names are matched case-insensitively after
trimming; anything missing fails the run with the name of the column.

Usage:
    from topic_alignment.preprocessing.loader import load_corpora

    corpora = load_corpora(
        standards_path="data/raw/standards.xlsx",
        stopwords_path="data/raw/stopwords.xlsx",
        items_path="data/raw/items.xlsx",
    )
    print(corpora.domains)
"""

import logging
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

import pandas as pd
from pydantic import ValidationError

from topic_alignment.exceptions import CorpusSchemaError
from .constants import (
    ITEMS_COLUMNS,
    STANDARDS_COLUMNS,
    STOPWORDS_COLUMNS,
    SUPPORTED_EXTENSIONS,
)
from .models import AlignmentCorpora, ItemRecord, StandardRecord

logger = logging.getLogger(__name__)


def read_table(path: Path | str, sheet_name: int | str = 0) -> pd.DataFrame:
    """
    Read a CSV/TSV or Excel table into a DataFrame of strings.

    Args:
        path: Source file
        sheet_name: Worksheet to read for Excel sources

    Returns:
        DataFrame with every column read as string dtype

    Raises:
        FileNotFoundError: If the file does not exist
        CorpusSchemaError: If the extension is not supported
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source table not found: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise CorpusSchemaError(
            f"Unsupported table format {suffix!r} for {path.name} "
            f"(expected one of {', '.join(SUPPORTED_EXTENSIONS)})",
            source=str(path),
        )

    if suffix in (".xlsx", ".xls"):
        frame = pd.read_excel(path, sheet_name=sheet_name, dtype=str)
    elif suffix == ".tsv":
        frame = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False)
    else:
        frame = pd.read_csv(path, dtype=str, keep_default_na=False)

    logger.info(f"Read {len(frame)} rows from {path.name}")
    return frame


def select_columns(
    frame: pd.DataFrame,
    required: Sequence[str],
    source: str,
    columns: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """
    Rename source columns to canonical names and keep only the required ones.

    Args:
        frame: Raw table
        required: Canonical column names that must be present
        source: Table name used in error messages
        columns: Optional mapping of source column name -> canonical name

    Returns:
        DataFrame with exactly the required columns, nulls replaced by ""

    Raises:
        CorpusSchemaError: If a required column is missing
    """
    renames = {name.strip().lower(): canonical for name, canonical in (columns or {}).items()}
    frame = frame.rename(
        columns=lambda c: renames.get(str(c).strip().lower(), str(c).strip().lower())
    )

    for column in required:
        if column not in frame.columns:
            raise CorpusSchemaError(
                f"{source} table is missing required column '{column}' "
                f"(found: {', '.join(map(str, frame.columns)) or 'none'})",
                field=column,
                source=source,
            )

    return frame[list(required)].fillna("")


def load_standards(
    path: Path | str,
    sheet_name: int | str = 0,
    columns: Optional[Dict[str, str]] = None,
) -> Tuple[StandardRecord, ...]:
    """Load the standards table as StandardRecords in table order."""
    frame = select_columns(read_table(path, sheet_name), STANDARDS_COLUMNS, "standards", columns)

    records = []
    for row_number, row in enumerate(frame.itertuples(index=False), start=1):
        try:
            records.append(StandardRecord(domain=row.domain, standard_text=row.standard_text))
        except ValidationError as e:
            raise CorpusSchemaError(
                f"standards row {row_number}: invalid domain ({e.errors()[0]['msg']})",
                field="domain",
                source="standards",
            ) from e

    logger.info(
        f"Loaded {len(records)} standards across "
        f"{len({r.domain for r in records})} domains"
    )
    return tuple(records)


def load_stopwords(
    path: Path | str,
    sheet_name: int | str = 0,
    columns: Optional[Dict[str, str]] = None,
) -> FrozenSet[str]:
    """Load the supplementary stop-word list, lower-cased and trimmed."""
    frame = select_columns(read_table(path, sheet_name), STOPWORDS_COLUMNS, "stopwords", columns)
    words = frozenset(
        w for w in (str(word).strip().lower() for word in frame["word"]) if w
    )
    logger.info(f"Loaded {len(words)} domain stop words")
    return words


def load_items(
    path: Path | str,
    sheet_name: int | str = 0,
    columns: Optional[Dict[str, str]] = None,
) -> Tuple[ItemRecord, ...]:
    """Load the items table, parsing each item's difficulty level from its id."""
    frame = select_columns(read_table(path, sheet_name), ITEMS_COLUMNS, "items", columns)

    records: List[ItemRecord] = []
    for row_number, row in enumerate(frame.itertuples(index=False), start=1):
        if not str(row.item_id).strip():
            raise CorpusSchemaError(
                f"items row {row_number}: empty item_id",
                field="item_id",
                source="items",
            )
        try:
            records.append(ItemRecord.from_row(row.item_id, row.prompt))
        except (ValueError, ValidationError) as e:
            raise CorpusSchemaError(
                f"items row {row_number}: {e}",
                field="item_id",
                source="items",
            ) from e

    logger.info(f"Loaded {len(records)} items")
    return tuple(records)


def load_corpora(
    standards_path: Path | str,
    stopwords_path: Path | str,
    items_path: Path | str,
    sheet_name: int | str = 0,
    column_mappings: Optional[Dict[str, Dict[str, str]]] = None,
) -> AlignmentCorpora:
    """
    Load all three sources into one validated bundle.

    Args:
        standards_path: Standards table {domain, standard_text}
        stopwords_path: Stop-word supplement table {word}
        items_path: Items table {item_id, prompt}
        sheet_name: Worksheet to read for Excel sources
        column_mappings: Optional per-table column renames, keyed by
            "standards", "stopwords" or "items"

    Returns:
        AlignmentCorpora

    Raises:
        FileNotFoundError: If a source is missing
        CorpusSchemaError: If a source is malformed
    """
    mappings = column_mappings or {}
    standards = load_standards(standards_path, sheet_name, mappings.get("standards"))
    stopwords = load_stopwords(stopwords_path, sheet_name, mappings.get("stopwords"))
    items = load_items(items_path, sheet_name, mappings.get("items"))

    try:
        return AlignmentCorpora(
            standards=standards,
            items=items,
            domain_stopwords=stopwords,
        )
    except ValidationError as e:
        raise CorpusSchemaError(
            f"items table: {e.errors()[0]['msg']}",
            field="item_id",
            source="items",
        ) from e
