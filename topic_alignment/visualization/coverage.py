"""
Coverage aggregation and item sampling for the radar charts.

The aggregate value for a (topic, level) group is log(mean probability * K):
a topic represented exactly at the uniform rate 1/K maps to log(1) = 0,
over-represented topics are positive, under-represented ones negative.
"""

import logging
from typing import List, Sequence

import numpy as np
import pandas as pd

from topic_alignment.preprocessing.constants import LEVEL_ORDER

logger = logging.getLogger(__name__)

COVERAGE_COLUMNS = ["topic", "label", "Level", "n", "sum_probability", "mean_probability", "value"]


def coverage_value(sum_probability: float, n: int, num_topics: int) -> float:
    """log((sum_probability / n) * num_topics)"""
    if n <= 0:
        raise ValueError(f"Group size must be positive, got {n}")
    return float(np.log((sum_probability / n) * num_topics))


def aggregate_coverage(frame: pd.DataFrame, num_topics: int) -> pd.DataFrame:
    """
    Aggregate a long posterior table per (topic, Level).

    Args:
        frame: Posterior table with columns item, topic, label, probability, Level
        num_topics: K

    Returns:
        DataFrame with columns topic, label, Level, n, sum_probability,
        mean_probability, value; ordered by topic then Low/Medium/High
    """
    missing = [c for c in ("item", "topic", "label", "probability", "Level") if c not in frame.columns]
    if missing:
        raise ValueError(f"Posterior table is missing columns: {missing}")

    unleveled = frame["Level"].isna()
    if unleveled.any():
        logger.warning(
            f"Skipping {frame.loc[unleveled, 'item'].nunique()} items without a difficulty level"
        )
        frame = frame.loc[~unleveled]

    grouped = (
        frame.groupby(["topic", "label", "Level"], sort=False)
        .agg(n=("item", "nunique"), sum_probability=("probability", "sum"))
        .reset_index()
    )
    grouped["mean_probability"] = grouped["sum_probability"] / grouped["n"]
    grouped["value"] = [
        coverage_value(s, n, num_topics)
        for s, n in zip(grouped["sum_probability"], grouped["n"])
    ]

    level_rank = {level: i for i, level in enumerate(LEVEL_ORDER)}
    grouped["_level_rank"] = grouped["Level"].map(lambda level: level_rank.get(level, len(level_rank)))
    grouped = grouped.sort_values(["topic", "_level_rank"], kind="stable").drop(columns="_level_rank")

    return grouped[COVERAGE_COLUMNS].reset_index(drop=True)


def sample_items(item_ids: Sequence[str], size: int, seed: int) -> List[str]:
    """
    Draw a fixed-size random sample of items without replacement.

    The population is sorted first, so the sample depends only on the set
    of ids and the seed. The result is returned sorted.

    Raises:
        ValueError: If size is negative or larger than the population
    """
    population = sorted(set(item_ids))
    if size < 0 or size > len(population):
        raise ValueError(
            f"Cannot sample {size} items from a population of {len(population)}"
        )

    rng = np.random.default_rng(seed)
    chosen = rng.choice(len(population), size=size, replace=False)
    return [population[i] for i in sorted(chosen)]
