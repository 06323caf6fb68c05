"""
Shared pytest fixtures for the topic alignment test suite.

This module provides common fixtures used across test modules:
- A synthetic standards/items corpus (7 domains, 50 items)
- The same corpus written to CSV source tables
- Fast pipeline settings

Usage:
    Fixtures are automatically discovered by pytest.
    Import them directly in test files - no explicit import needed.
"""

import pytest
from pathlib import Path
from typing import Dict, List
import sys

import pandas as pd

# Ensure topic_alignment is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from topic_alignment.pipeline import PipelineConfig
from topic_alignment.preprocessing import AlignmentCorpora, ItemRecord, StandardRecord


# Each domain gets its own content words, so the standards documents are
# separable. None of these words is a gensim or NLTK stop word.
DOMAIN_VOCABULARY: Dict[str, List[str]] = {
    "Motion": ["force", "velocity", "acceleration", "friction", "momentum", "collision"],
    "Humans": ["organ", "tissue", "heart", "blood", "digestion", "muscle"],
    "Earth Systems": ["rock", "erosion", "volcano", "sediment", "mineral", "earthquake"],
    "Energy": ["heat", "temperature", "electricity", "circuit", "battery", "conduction"],
    "Ecosystems": ["predator", "prey", "habitat", "population", "species", "decomposer"],
    "Matter": ["atom", "molecule", "particle", "liquid", "density", "mixture"],
    "Waves": ["wave", "amplitude", "wavelength", "frequency", "sound", "reflection"],
}

DOMAIN_STOPWORDS = ["students", "demonstrate", "understanding", "analyze", "emphasis", "statement"]

# Item ids encode the level as the last letter; "Q" carries no level code
LEVEL_SUFFIXES = ["L", "M", "H"]

ZERO_OVERLAP_ITEM = "Q049M"
EMPTY_ITEM = "Q050H"


def _standards() -> List[Dict[str, str]]:
    rows = []
    for domain, words in DOMAIN_VOCABULARY.items():
        for offset in range(3):
            w = words[offset:] + words[:offset]
            rows.append({
                "domain": domain,
                "standard_text": (
                    f"Students who demonstrate understanding can analyze {w[0]}, {w[1]} and {w[2]}. "
                    f"Clarification Statement: Emphasis is on {w[3]} and {w[4]} with {w[5]}."
                ),
            })
    return rows


def _items() -> List[Dict[str, str]]:
    domains = list(DOMAIN_VOCABULARY)
    rows = []
    for i in range(48):
        words = DOMAIN_VOCABULARY[domains[i % len(domains)]]
        w = words[i % 3:] + words[:i % 3]
        rows.append({
            "item_id": f"Q{i + 1:03d}{LEVEL_SUFFIXES[i % 3]}",
            "prompt": f"Which statement explains the {w[0]} of the {w[1]} and {w[2]}?",
        })
    rows.append({"item_id": ZERO_OVERLAP_ITEM, "prompt": "Which painting uses a favorite colour?"})
    rows.append({"item_id": EMPTY_ITEM, "prompt": "Which of the above?"})
    return rows


# ===========================
# Corpus Fixtures
# ===========================

@pytest.fixture(scope="session")
def standards_rows() -> List[Dict[str, str]]:
    """Return 21 standards rows, three per domain."""
    return _standards()


@pytest.fixture(scope="session")
def items_rows() -> List[Dict[str, str]]:
    """
    Return 50 item rows.

    Items 1-48 cycle through the domains and the Low/Medium/High levels;
    ZERO_OVERLAP_ITEM shares no vocabulary with the standards and
    EMPTY_ITEM has no token left after stop-word filtering.
    """
    return _items()


@pytest.fixture(scope="session")
def synthetic_corpora(standards_rows, items_rows) -> AlignmentCorpora:
    """Return the synthetic corpus as loaded records."""
    return AlignmentCorpora(
        standards=tuple(StandardRecord(**row) for row in standards_rows),
        items=tuple(ItemRecord.from_row(row["item_id"], row["prompt"]) for row in items_rows),
        domain_stopwords=frozenset(DOMAIN_STOPWORDS),
    )


@pytest.fixture(scope="session")
def corpus_files(tmp_path_factory, standards_rows, items_rows) -> Dict[str, Path]:
    """
    Write the synthetic corpus to CSV source tables, once per session.

    Returns:
        Dict with standards, stopwords and items paths
    """
    source_dir = tmp_path_factory.mktemp("sources")
    paths = {
        "standards": source_dir / "standards.csv",
        "stopwords": source_dir / "stopwords.csv",
        "items": source_dir / "items.csv",
    }
    pd.DataFrame(standards_rows).to_csv(paths["standards"], index=False)
    pd.DataFrame({"word": DOMAIN_STOPWORDS}).to_csv(paths["stopwords"], index=False)
    pd.DataFrame(items_rows).to_csv(paths["items"], index=False)
    return paths


# ===========================
# Configuration Fixtures
# ===========================

@pytest.fixture(scope="session")
def fast_config() -> PipelineConfig:
    """
    Pipeline settings small enough for unit runs.

    NLTK's list is left out so the tests do not depend on the downloaded
    stopwords corpus; gensim's generic list is still applied.
    """
    return PipelineConfig(
        num_topics=7,
        passes=20,
        iterations=100,
        random_state=1234,
        use_nltk_stopwords=False,
        sample_size=9,
        sample_seed=2020,
        topic_labels={
            1: "Motion", 2: "Humans", 3: "Earth Systems", 4: "Energy",
            5: "Ecosystems", 6: "Matter", 7: "Waves",
        },
    )


@pytest.fixture
def temp_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for run artifacts."""
    output_dir = tmp_path / "run_output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir
