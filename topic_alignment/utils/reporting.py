"""Markdown report for an alignment run."""

import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from topic_alignment.features.topic_modeling.labels import TopicLabels
from topic_alignment.features.topic_modeling.schemas import ItemPosterior, LDAModelInfo


class AlignmentReportGenerator:
    """
    Generate the markdown report of an alignment run.

    Sections:
    - Executive summary (corpus sizes, topics, zero-overlap finding)
    - Topics with labels and top terms
    - Coverage table (log-scaled mean probability per topic and level)
    - Item sample with dominant topic and entropy
    - Artifacts written by the run
    - Collapsible model diagnostics and configuration snapshot

    Usage:
        generator = AlignmentReportGenerator()
        content = generator.generate_run_report(
            run_id="20251228_143022",
            corpus_stats=stats,
            model_info=model.info,
            labels=labels,
            coverage=coverage,
            zero_overlap_items=posterior.zero_overlap_items(),
            artifacts=artifacts,
        )
        (output_dir / "RUN_REPORT.md").write_text(content, encoding="utf-8")
    """

    @staticmethod
    def _create_collapsible_section(title: str, content: str, open_by_default: bool = False) -> str:
        """
        Create a collapsible HTML details section for markdown.

        Args:
            title: Section title
            content: Section content (markdown supported)
            open_by_default: Whether section should be expanded by default
        """
        open_attr = " open" if open_by_default else ""
        return f"""<details{open_attr}>
<summary><strong>{title}</strong></summary>

{content}

</details>
"""

    @staticmethod
    def _format_timestamp(timestamp: Optional[str] = None) -> str:
        """Format timestamp for display."""
        if timestamp:
            return timestamp
        return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

    @staticmethod
    def _format_duration(start: str, end: str) -> str:
        """Calculate and format duration between two ISO timestamps."""
        try:
            duration = datetime.fromisoformat(end) - datetime.fromisoformat(start)
        except ValueError:
            return "N/A"

        total_seconds = int(duration.total_seconds())
        minutes, seconds = divmod(total_seconds, 60)
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"

    @staticmethod
    def _markdown_table(frame: pd.DataFrame, float_format: str = "{:.3f}") -> str:
        """Render a DataFrame as a pipe table."""
        header = "| " + " | ".join(str(c) for c in frame.columns) + " |"
        divider = "|" + "|".join("---" for _ in frame.columns) + "|"
        rows = []
        for record in frame.itertuples(index=False):
            cells = [
                float_format.format(v) if isinstance(v, float) else str(v)
                for v in record
            ]
            rows.append("| " + " | ".join(cells) + " |")
        return "\n".join([header, divider] + rows)

    def generate_run_report(
        self,
        run_id: str,
        corpus_stats: Dict[str, Any],
        model_info: LDAModelInfo,
        labels: TopicLabels,
        coverage: pd.DataFrame,
        zero_overlap_items: List[str],
        artifacts: Optional[Dict[str, Path]] = None,
        item_sample: Optional[List[ItemPosterior]] = None,
        config_snapshot: Optional[Dict[str, Any]] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> str:
        """
        Generate the markdown report for one run.

        Args:
            run_id: Run identifier (timestamp)
            corpus_stats: Counts keyed by standards, domains, items,
                standards_terms, items_terms, empty_items
            model_info: Metadata of the fitted model
            labels: Topic labels
            coverage: Output of aggregate_coverage
            zero_overlap_items: Items sharing no vocabulary with the model
            artifacts: Artifact name -> path
            item_sample: Summaries of the items drawn for the item sample chart
            config_snapshot: Environment and settings snapshot
            start_time: Optional ISO timestamp for start
            end_time: Optional ISO timestamp for end

        Returns:
            Markdown report content as string
        """
        sections = []

        # Header
        sections.append("# Standards / Items Topic Alignment Report")
        sections.append(f"\n**Run ID:** `{run_id}`")
        sections.append(f"**Generated:** {self._format_timestamp()}")
        sections.append("")

        # Executive Summary
        sections.append("## Summary")
        sections.append("")
        sections.append(
            f"- **Standards:** {corpus_stats.get('standards', 0)} "
            f"in {corpus_stats.get('domains', 0)} domains "
            f"({corpus_stats.get('standards_terms', 0)} terms after filtering)"
        )
        sections.append(
            f"- **Items:** {corpus_stats.get('items', 0)} "
            f"({corpus_stats.get('items_terms', 0)} terms after filtering)"
        )
        sections.append(f"- **Topics (K):** {model_info.num_topics}")
        sections.append(f"- **Seed:** {model_info.random_state}")
        if start_time and end_time:
            sections.append(f"- **Duration:** {self._format_duration(start_time, end_time)}")
        sections.append("")

        # Zero-overlap finding
        if zero_overlap_items:
            sections.append(
                f"**Finding:** {len(zero_overlap_items)} item(s) share no vocabulary with the "
                f"standards after filtering. Their topic mixture is the uniform prior "
                f"(1/{model_info.num_topics} per topic); they are kept in every table and chart."
            )
            sections.append("")
            sections.append(", ".join(f"`{item}`" for item in zero_overlap_items))
            sections.append("")

        # Topics
        sections.append("## Topics")
        sections.append("")
        sections.append("| Topic | Label | Top terms |")
        sections.append("|---|---|---|")
        for topic in range(1, model_info.num_topics + 1):
            words = (model_info.topic_top_words or {}).get(topic, [])
            sections.append(
                f"| {topic} | {labels.name(topic)} | {', '.join(w for w, _ in words)} |"
            )
        sections.append("")

        # Coverage
        sections.append("## Coverage by Difficulty Level")
        sections.append("")
        sections.append(
            "Values are log(mean probability x K); 0 is uniform coverage, "
            "positive values are over-represented topics."
        )
        sections.append("")
        sections.append(self._markdown_table(
            coverage[["topic", "label", "Level", "n", "mean_probability", "value"]]
        ))
        sections.append("")

        # Item sample
        if item_sample:
            sections.append("## Item Sample")
            sections.append("")
            sections.append(
                f"Entropy is in bits; a uniform mixture has log2({model_info.num_topics}) = "
                f"{math.log2(model_info.num_topics):.3f}."
            )
            sections.append("")
            sections.append("| Item | Dominant topic | Probability | Entropy | Overlap terms |")
            sections.append("|---|---|---|---|---|")
            for item in item_sample:
                sections.append(
                    f"| `{item.item_id}` | {labels.name(item.dominant_topic)} "
                    f"| {item.dominant_probability:.3f} | {item.topic_entropy:.3f} "
                    f"| {item.overlap_terms} |"
                )
            sections.append("")

        # Artifacts
        if artifacts:
            sections.append("## Artifacts")
            sections.append("")
            for name, path in artifacts.items():
                sections.append(f"- **{name}:** `{Path(path).name}`")
            sections.append("")

        # Model diagnostics (Collapsible)
        diagnostics = f"""**Documents:** {model_info.num_documents}
**Vocabulary:** {model_info.vocabulary_size}
**Passes / iterations:** {model_info.passes} / {model_info.iterations}
**Alpha / eta:** {model_info.alpha} / {model_info.eta}
**Perplexity bound:** {model_info.perplexity if model_info.perplexity is not None else 'N/A'}
**Coherence ({model_info.coherence_metric or 'not computed'}):** {model_info.coherence_score if model_info.coherence_score is not None else 'N/A'}
"""
        sections.append(self._create_collapsible_section("Model Diagnostics", diagnostics))
        sections.append("")

        # Configuration Snapshot (if available)
        if config_snapshot:
            config_content = "\n".join(
                f"**{key}:** `{value}`" for key, value in config_snapshot.items()
            )
            sections.append(self._create_collapsible_section(
                "Configuration Snapshot",
                config_content,
                open_by_default=False
            ))
            sections.append("")

        sections.append("---")
        sections.append("*Topic labels are analyst-assigned and are not used by the model.*")

        return "\n".join(sections)
