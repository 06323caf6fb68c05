"""
Radar (polar) charts of topic coverage.

Two static charts are produced:
- coverage: log-scaled mean probability per topic, one line per difficulty
  level, with the uniform baseline drawn as a circle at 0
- item sample: one small radar per sampled item showing its topic mixture,
  with the uniform baseline 1/K drawn as a circle
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from topic_alignment.features.topic_modeling.labels import TopicLabels
from topic_alignment.preprocessing.constants import LEVEL_ORDER

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChartTheme:
    """Explicit styling for the radar charts (applied per figure, never globally)."""
    level_colors: Dict[str, str] = field(default_factory=lambda: {
        "Low": "#6cba6b",
        "Medium": "#f79c42",
        "High": "#f16a6a",
    })
    reference_color: str = "#9f8d82"
    item_color: str = "#0f244d"
    font_family: str = "DejaVu Sans"
    dpi: int = 300

    @classmethod
    def from_settings(cls, config) -> "ChartTheme":
        """Build a theme from a VisualizationConfig."""
        return cls(
            level_colors=dict(config.level_colors),
            reference_color=config.reference_color,
            font_family=config.font_family,
            dpi=config.dpi,
        )

    def rc(self) -> Dict[str, object]:
        return {"font.family": self.font_family, "axes.titlesize": 10}


def _angles(num_topics: int) -> np.ndarray:
    """Spoke angles, closed by repeating the first one."""
    angles = np.linspace(0, 2 * np.pi, num_topics, endpoint=False)
    return np.concatenate([angles, angles[:1]])


def _closed(values: Sequence[float]) -> np.ndarray:
    values = np.asarray(values, dtype=np.float64)
    return np.concatenate([values, values[:1]])


class RadarChartRenderer:
    """
    Renders the coverage and item-sample radar charts to image files.

    Usage:
        with RadarChartRenderer(theme) as renderer:
            renderer.render_coverage(coverage, labels, out_dir / "coverage_radar.png")
    """

    def __init__(self, theme: Optional[ChartTheme] = None):
        self.theme = theme or ChartTheme()
        plt.switch_backend('Agg')

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        plt.close('all')

    def render_coverage(
        self,
        coverage: pd.DataFrame,
        labels: TopicLabels,
        output_path: Path | str,
    ) -> Path:
        """
        Plot log-scaled mean probability by topic and level.

        Args:
            coverage: Output of aggregate_coverage
            labels: Topic labels for the spokes
            output_path: Image file to write

        Returns:
            Path of the written image
        """
        output_path = Path(output_path)
        num_topics = labels.num_topics
        angles = _angles(num_topics)

        levels = [level for level in LEVEL_ORDER if level in set(coverage["Level"])]
        levels += sorted(set(coverage["Level"]) - set(levels))

        with plt.rc_context(self.theme.rc()):
            fig = plt.figure(figsize=(8, 8))
            try:
                ax = fig.add_subplot(projection="polar")
                ax.set_theta_offset(np.pi / 2)
                ax.set_theta_direction(-1)

                values = coverage["value"].to_numpy(dtype=np.float64)
                low = min(float(values.min()) if len(values) else 0.0, 0.0)
                high = max(float(values.max()) if len(values) else 0.0, 0.0)
                margin = max(0.25, 0.1 * (high - low))
                ax.set_ylim(low - margin, high + margin)

                ax.plot(
                    np.linspace(0, 2 * np.pi, 200),
                    np.zeros(200),
                    color=self.theme.reference_color,
                    linestyle="--",
                    linewidth=1.5,
                    label="Uniform (1/K)",
                )

                for level in levels:
                    rows = coverage[coverage["Level"] == level].set_index("topic")["value"]
                    series = [rows.get(topic, np.nan) for topic in range(1, num_topics + 1)]
                    color = self.theme.level_colors.get(level)
                    ax.plot(angles, _closed(series), color=color, linewidth=2, label=level)
                    ax.fill(angles, _closed(series), color=color, alpha=0.1)

                ax.set_xticks(angles[:-1])
                ax.set_xticklabels(labels.ordered())
                ax.set_title("Topic coverage by item difficulty\nlog(mean probability x K)")
                ax.legend(loc="upper right", bbox_to_anchor=(1.25, 1.1))

                output_path.parent.mkdir(parents=True, exist_ok=True)
                fig.savefig(output_path, dpi=self.theme.dpi, bbox_inches="tight")
            finally:
                plt.close(fig)

        logger.info(f"Saved coverage radar to {output_path}")
        return output_path

    def render_item_sample(
        self,
        frame: pd.DataFrame,
        item_ids: Sequence[str],
        labels: TopicLabels,
        output_path: Path | str,
    ) -> Path:
        """
        Plot the topic mixture of each sampled item on its own radar.

        Args:
            frame: Long posterior table (item, topic, probability, Level)
            item_ids: Items to draw, in panel order
            labels: Topic labels for the spokes
            output_path: Image file to write

        Returns:
            Path of the written image
        """
        output_path = Path(output_path)
        num_topics = labels.num_topics
        angles = _angles(num_topics)
        baseline = 1.0 / num_topics

        n_panels = max(len(item_ids), 1)
        n_cols = min(3, n_panels)
        n_rows = math.ceil(n_panels / n_cols)

        with plt.rc_context(self.theme.rc()):
            fig = plt.figure(figsize=(4 * n_cols, 4 * n_rows))
            try:
                y_max = 0.0
                panels = self._item_series(frame, item_ids, num_topics)
                for series in panels.values():
                    y_max = max(y_max, float(np.max(series)))
                y_max = max(y_max, baseline) * 1.1

                for i, item_id in enumerate(item_ids, start=1):
                    ax = fig.add_subplot(n_rows, n_cols, i, projection="polar")
                    ax.set_theta_offset(np.pi / 2)
                    ax.set_theta_direction(-1)
                    ax.set_ylim(0, y_max)

                    ax.plot(
                        np.linspace(0, 2 * np.pi, 200),
                        np.full(200, baseline),
                        color=self.theme.reference_color,
                        linestyle="--",
                        linewidth=1,
                    )
                    level = self._item_level(frame, item_id)
                    color = self.theme.level_colors.get(level, self.theme.item_color)
                    ax.plot(angles, _closed(panels[item_id]), color=color, linewidth=2)
                    ax.fill(angles, _closed(panels[item_id]), color=color, alpha=0.2)

                    ax.set_xticks(angles[:-1])
                    ax.set_xticklabels(labels.ordered(), fontsize=7)
                    ax.set_yticklabels([])
                    ax.set_title(f"{item_id} ({level})" if level else item_id)

                fig.suptitle("Topic mixture of sampled items")
                fig.tight_layout()
                output_path.parent.mkdir(parents=True, exist_ok=True)
                fig.savefig(output_path, dpi=self.theme.dpi, bbox_inches="tight")
            finally:
                plt.close(fig)

        logger.info(f"Saved item sample radar ({len(item_ids)} items) to {output_path}")
        return output_path

    @staticmethod
    def _item_series(frame: pd.DataFrame, item_ids: Sequence[str], num_topics: int) -> Dict[str, List[float]]:
        panels = {}
        for item_id in item_ids:
            rows = frame[frame["item"] == item_id].set_index("topic")["probability"]
            if rows.empty:
                raise KeyError(f"Item {item_id!r} not in posterior table")
            panels[item_id] = [float(rows.get(topic, 0.0)) for topic in range(1, num_topics + 1)]
        return panels

    @staticmethod
    def _item_level(frame: pd.DataFrame, item_id: str) -> Optional[str]:
        levels = frame.loc[frame["item"] == item_id, "Level"].dropna()
        return str(levels.iloc[0]) if not levels.empty else None
