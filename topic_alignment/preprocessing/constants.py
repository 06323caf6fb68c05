"""
Constants for corpus loading and text normalization

This module contains the canonical column names of the three source
tables, the tokenizer pattern, and the difficulty codes embedded in
item identifiers.
"""

import re
from enum import Enum
from typing import Dict, Tuple


# ===========================
# Source Table Columns
# ===========================

STANDARDS_COLUMNS: Tuple[str, ...] = ("domain", "standard_text")
STOPWORDS_COLUMNS: Tuple[str, ...] = ("word",)
ITEMS_COLUMNS: Tuple[str, ...] = ("item_id", "prompt")

SUPPORTED_EXTENSIONS: Tuple[str, ...] = (".csv", ".tsv", ".txt", ".xlsx", ".xls")


# ===========================
# Tokenization
# ===========================

# Runs of letters/digits; apostrophes only between word characters ("don't")
TOKEN_PATTERN = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")


# ===========================
# Difficulty Levels
# ===========================

class DifficultyLevel(str, Enum):
    """
    Item difficulty levels, encoded in item identifiers by a code letter.

    The code is the last of L, M or H in the identifier, so prefixes such
    as "ITEM-" or "HS-" do not decide the level.

    Usage:
        >>> DifficultyLevel.from_item_id("SCI-014-M")
        <DifficultyLevel.MEDIUM: 'Medium'>
        >>> DifficultyLevel.from_item_id("ITEM-001-H")
        <DifficultyLevel.HIGH: 'High'>
    """

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def from_item_id(cls, item_id: str) -> "DifficultyLevel":
        """
        Parse the level from the code letter nearest the end of the id.

        Raises:
            ValueError: If the identifier carries no difficulty code
        """
        for char in reversed(item_id):
            if char in LEVEL_CODES:
                return LEVEL_CODES[char]
        raise ValueError(
            f"Item id {item_id!r} carries no difficulty code "
            f"(expected one of {', '.join(LEVEL_CODES)})"
        )


# Difficulty code letter -> level
LEVEL_CODES: Dict[str, DifficultyLevel] = {
    "L": DifficultyLevel.LOW,
    "M": DifficultyLevel.MEDIUM,
    "H": DifficultyLevel.HIGH,
}

LEVEL_ORDER: Tuple[str, ...] = tuple(level.value for level in DifficultyLevel)
