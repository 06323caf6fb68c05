"""
Alignment Pipeline

Orchestrates the complete standards/items alignment run:
1. Load - read and validate the three source tables
2. Normalize - tokenize and filter stop words
3. Count - build the standards (by domain) and items (by item) matrices
4. Fit - LDA on the standards matrix
5. Infer - fold every item into the fitted model
6. Report - coverage aggregate, radar charts, tables and RUN_REPORT.md

Stages run in this order and every error aborts the run; there is no
partial output to fall back on.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from topic_alignment.config import Settings, settings as default_settings
from topic_alignment.exceptions import TopicModelConfigError
from topic_alignment.features.topic_modeling import (
    FittedTopicModel,
    ItemPosterior,
    LDAModelInfo,
    LDATrainer,
    TopicLabels,
    TopicPosterior,
)
from topic_alignment.features.topic_modeling.constants import (
    DEFAULT_ALPHA,
    DEFAULT_COHERENCE_METRIC,
    DEFAULT_ETA,
    DEFAULT_INFERENCE_MAX_ITERATIONS,
    DEFAULT_INFERENCE_TOLERANCE,
    DEFAULT_ITERATIONS,
    DEFAULT_NUM_TOP_WORDS,
    DEFAULT_NUM_TOPICS,
    DEFAULT_PASSES,
    DEFAULT_RANDOM_STATE,
)
from topic_alignment.preprocessing import (
    AlignmentCorpora,
    DocumentTermMatrix,
    StopwordSet,
    TextNormalizer,
    load_corpora,
)
from topic_alignment.utils import AlignmentReportGenerator, RunMetadata
from topic_alignment.visualization import (
    ChartTheme,
    RadarChartRenderer,
    aggregate_coverage,
    sample_items,
)

logger = logging.getLogger(__name__)

POSTERIOR_FILENAME = "posterior.csv"
COVERAGE_FILENAME = "coverage.csv"
TOPIC_TERMS_FILENAME = "topic_terms.csv"
MODEL_INFO_FILENAME = "model_info.json"
REPORT_FILENAME = "RUN_REPORT.md"
COVERAGE_CHART_FILENAME = "coverage_radar.png"
ITEM_SAMPLE_CHART_FILENAME = "item_sample_radar.png"


class PipelineConfig(BaseModel):
    """
    Configuration for the alignment pipeline (Pydantic V2)

    Attributes:
        num_topics: Number of LDA topics K
        random_state: Seed for LDA fitting
        passes: LDA training passes
        iterations: LDA E-step iterations during training
        alpha: Document-topic prior
        eta: Topic-word prior
        noise_words: Literal exclusion list applied after the stop-word lists
        use_nltk_stopwords: Include NLTK's English list in the generic stop words
        inference_max_iterations: Fold-in E-step iteration cap
        inference_tolerance: Fold-in convergence threshold
        sample_size: Items drawn for the item sample chart
        sample_seed: Seed for the item sample
        render_charts: Whether to write the radar charts
        compute_coherence: Whether to compute a coherence score
        coherence_metric: gensim coherence measure
        num_top_words: Top words recorded per topic
        topic_labels: Analyst labels, 1-based topic number -> name
    """
    model_config = ConfigDict(
        validate_assignment=True,
        extra='forbid',  # Raise error on unknown fields
    )

    num_topics: int = Field(default=DEFAULT_NUM_TOPICS, ge=1)
    random_state: int = Field(default=DEFAULT_RANDOM_STATE)
    passes: int = Field(default=DEFAULT_PASSES, ge=1)
    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1)
    alpha: Union[str, float] = Field(default=DEFAULT_ALPHA)
    eta: Union[str, float, None] = Field(default=DEFAULT_ETA)
    noise_words: List[str] = Field(default_factory=lambda: ["clarification", "boundary"])
    use_nltk_stopwords: bool = Field(default=True)
    inference_max_iterations: int = Field(default=DEFAULT_INFERENCE_MAX_ITERATIONS, ge=1)
    inference_tolerance: float = Field(default=DEFAULT_INFERENCE_TOLERANCE, gt=0.0)
    sample_size: int = Field(default=9, ge=0)
    sample_seed: int = Field(default=2020)
    render_charts: bool = Field(default=True)
    compute_coherence: bool = Field(default=False)
    coherence_metric: str = Field(default=DEFAULT_COHERENCE_METRIC)
    num_top_words: int = Field(default=DEFAULT_NUM_TOP_WORDS, ge=1)
    topic_labels: Dict[int, str] = Field(default_factory=dict)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None, **overrides) -> "PipelineConfig":
        """Build from the YAML/env settings, with keyword overrides."""
        config = config or default_settings
        tm = config.topic_modeling
        values = dict(
            num_topics=tm.model.num_topics,
            random_state=tm.model.random_state,
            passes=tm.model.passes,
            iterations=tm.model.iterations,
            alpha=tm.model.alpha,
            eta=tm.model.eta,
            noise_words=list(config.preprocessing.noise_words),
            use_nltk_stopwords=config.preprocessing.use_nltk_stopwords,
            inference_max_iterations=tm.inference.max_iterations,
            inference_tolerance=tm.inference.tolerance,
            sample_size=config.visualization.sample_size,
            sample_seed=config.visualization.sample_seed,
            compute_coherence=tm.evaluation.compute_coherence,
            coherence_metric=tm.evaluation.coherence_metric,
            num_top_words=tm.evaluation.num_top_words,
            topic_labels=dict(tm.topic_labels),
        )
        overrides = {k: v for k, v in overrides.items() if v is not None}
        values.update(overrides)
        # Configured labels name every topic of the fit they were written for;
        # when K comes out different they no longer apply
        num_topics = values["num_topics"]
        configured = "topic_labels" not in overrides and values["topic_labels"]
        if configured and set(values["topic_labels"]) != set(range(1, num_topics + 1)):
            logger.warning(
                f"Configured topic labels cover topics {sorted(values['topic_labels'])}, "
                f"not 1..{num_topics}; topics will be shown as 'Topic k'"
            )
            values["topic_labels"] = {}
        return cls(**values)


class AlignmentResult(BaseModel):
    """
    Everything a run produced.

    Attributes:
        run_id: Run identifier (timestamp)
        output_dir: Folder holding the artifacts (None if nothing was written)
        model_info: Fitted model metadata
        num_standards / num_domains / num_items: Corpus sizes
        empty_items: Items with no tokens left after filtering
        zero_overlap_items: Items sharing no term with the model vocabulary
        sampled_items: Items drawn for the item sample chart
        artifacts: Artifact name -> path
        posterior_table: Long posterior table {item, topic, label, probability, Level, overlap_terms}
        coverage: Aggregate per (topic, Level)
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    run_id: str
    output_dir: Optional[Path] = None
    model_info: LDAModelInfo
    num_standards: int = Field(..., ge=0)
    num_domains: int = Field(..., ge=0)
    num_items: int = Field(..., ge=0)
    empty_items: List[str] = Field(default_factory=list)
    zero_overlap_items: List[str] = Field(default_factory=list)
    sampled_items: List[str] = Field(default_factory=list)
    artifacts: Dict[str, Path] = Field(default_factory=dict)
    posterior_table: pd.DataFrame = Field(exclude=True)
    coverage: pd.DataFrame = Field(exclude=True)
    model: FittedTopicModel = Field(exclude=True)
    posterior: TopicPosterior = Field(exclude=True)


class AlignmentPipeline:
    """
    Standards/items topic alignment pipeline

    Flow: Load → Normalize → Count → Fit → Infer → Report

    Example:
        >>> pipeline = AlignmentPipeline(PipelineConfig(num_topics=7))
        >>> result = pipeline.run_from_files(
        ...     "data/raw/standards.xlsx",
        ...     "data/raw/stopwords.xlsx",
        ...     "data/raw/items.xlsx",
        ...     output_dir="reports/run",
        ... )
        >>> result.posterior_table.head()
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        theme: Optional[ChartTheme] = None,
    ):
        """
        Initialize the alignment pipeline

        Args:
            config: Pipeline configuration. Uses the YAML/env settings if not provided.
            theme: Chart styling. Uses the visualization settings if not provided.
        """
        self.config = config or PipelineConfig.from_settings()
        self.theme = theme or ChartTheme.from_settings(default_settings.visualization)
        try:
            self.labels = TopicLabels.for_topics(self.config.num_topics, self.config.topic_labels)
        except ValueError as e:
            raise TopicModelConfigError(str(e)) from e
        self.trainer = LDATrainer(
            num_topics=self.config.num_topics,
            passes=self.config.passes,
            iterations=self.config.iterations,
            random_state=self.config.random_state,
            alpha=self.config.alpha,
            eta=self.config.eta,
            compute_coherence=self.config.compute_coherence,
            coherence_metric=self.config.coherence_metric,
            num_top_words=self.config.num_top_words,
        )
        self.report_generator = AlignmentReportGenerator()

    # ===========================
    # Stages
    # ===========================

    def build_normalizer(self, corpora: AlignmentCorpora) -> TextNormalizer:
        stopwords = StopwordSet.build(
            domain_words=corpora.domain_stopwords,
            noise_words=self.config.noise_words,
            use_nltk=self.config.use_nltk_stopwords,
        )
        return TextNormalizer(stopwords)

    def build_matrices(
        self,
        corpora: AlignmentCorpora,
        normalizer: TextNormalizer,
    ) -> Tuple[DocumentTermMatrix, DocumentTermMatrix, List[List[str]]]:
        """
        Build the standards (by domain) and items (by item id) matrices.

        Returns:
            (standards matrix, items matrix, standards token lists per matrix row)
        """
        standards_pairs = list(normalizer.tokens_by_document(
            (s.domain, s.standard_text) for s in corpora.standards
        ))
        standards_dtm = DocumentTermMatrix.from_pairs(standards_pairs)

        texts: Dict[str, List[str]] = {}
        for domain, token in standards_pairs:
            texts.setdefault(domain, []).append(token)
        standards_texts = [texts[domain] for domain in standards_dtm.document_ids]

        dropped_domains = [d for d in corpora.domains if d not in standards_dtm]
        if dropped_domains:
            logger.warning(f"Domains with no tokens after filtering were dropped: {dropped_domains}")

        items_dtm = DocumentTermMatrix.from_pairs(normalizer.tokens_by_document(
            (item.item_id, item.prompt) for item in corpora.items
        ))

        return standards_dtm, items_dtm, standards_texts

    def fit(self, standards_dtm: DocumentTermMatrix, texts: Optional[List[List[str]]] = None) -> FittedTopicModel:
        return self.trainer.fit(standards_dtm, texts=texts)

    def infer(
        self,
        model: FittedTopicModel,
        items_dtm: DocumentTermMatrix,
        item_ids: List[str],
    ) -> TopicPosterior:
        return model.infer(
            items_dtm,
            item_ids=item_ids,
            max_iterations=self.config.inference_max_iterations,
            tolerance=self.config.inference_tolerance,
        )

    # ===========================
    # Runs
    # ===========================

    def run_from_files(
        self,
        standards_path: Union[str, Path],
        stopwords_path: Union[str, Path],
        items_path: Union[str, Path],
        output_dir: Optional[Union[str, Path]] = None,
        sheet_name: Union[int, str] = 0,
    ) -> AlignmentResult:
        """Load the three source tables and run the pipeline on them."""
        logger.info("Step 1/6: Loading corpora...")
        corpora = load_corpora(standards_path, stopwords_path, items_path, sheet_name=sheet_name)
        return self.run(corpora, output_dir=output_dir)

    def run(
        self,
        corpora: AlignmentCorpora,
        output_dir: Optional[Union[str, Path]] = None,
        write_outputs: bool = True,
    ) -> AlignmentResult:
        """
        Run the pipeline on loaded corpora.

        Args:
            corpora: Loaded standards, stop words and items
            output_dir: Folder for artifacts (default: reports/<run_id>_alignment)
            write_outputs: Set False to skip every file output

        Returns:
            AlignmentResult
        """
        start_time = datetime.now()
        run_id = start_time.strftime("%Y%m%d_%H%M%S")

        logger.info("Step 2/6: Normalizing text...")
        normalizer = self.build_normalizer(corpora)

        logger.info("Step 3/6: Building document-term matrices...")
        standards_dtm, items_dtm, standards_texts = self.build_matrices(corpora, normalizer)

        logger.info("Step 4/6: Fitting topic model on standards...")
        model = self.fit(standards_dtm, standards_texts)

        logger.info("Step 5/6: Inferring item topic mixtures...")
        item_ids = [item.item_id for item in corpora.items]
        empty_items = [item_id for item_id in item_ids if item_id not in items_dtm]
        if empty_items:
            logger.warning(f"{len(empty_items)} items have no tokens after filtering: {empty_items}")
        posterior = self.infer(model, items_dtm, item_ids)

        logger.info("Step 6/6: Aggregating coverage...")
        posterior_table = posterior.to_frame(labels=self.labels, levels=corpora.item_levels)
        coverage = aggregate_coverage(posterior_table, model.num_topics)
        sample_size = min(self.config.sample_size, len(item_ids))
        if sample_size < self.config.sample_size:
            logger.warning(f"Only {len(item_ids)} items; sampling {sample_size} instead of {self.config.sample_size}")
        sampled = sample_items(item_ids, sample_size, self.config.sample_seed)

        model_info = model.info.model_copy(update={"topic_labels": dict(self.labels.labels)})
        result = AlignmentResult(
            run_id=run_id,
            model_info=model_info,
            num_standards=len(corpora.standards),
            num_domains=len(corpora.domains),
            num_items=len(item_ids),
            empty_items=empty_items,
            zero_overlap_items=posterior.zero_overlap_items(),
            sampled_items=sampled,
            posterior_table=posterior_table,
            coverage=coverage,
            model=model,
            posterior=posterior,
        )

        if write_outputs:
            output_dir = Path(output_dir) if output_dir else (
                default_settings.paths.reports_dir / f"{run_id}_alignment"
            )
            self.write_outputs(result, output_dir, standards_dtm, items_dtm, start_time)

        return result

    def write_outputs(
        self,
        result: AlignmentResult,
        output_dir: Path,
        standards_dtm: DocumentTermMatrix,
        items_dtm: DocumentTermMatrix,
        start_time: datetime,
    ) -> None:
        """Write tables, charts and the markdown report into output_dir."""
        output_dir.mkdir(parents=True, exist_ok=True)
        artifacts: Dict[str, Path] = {}

        artifacts["posterior"] = output_dir / POSTERIOR_FILENAME
        result.posterior_table.to_csv(artifacts["posterior"], index=False)

        artifacts["coverage"] = output_dir / COVERAGE_FILENAME
        result.coverage.to_csv(artifacts["coverage"], index=False)

        artifacts["topic_terms"] = output_dir / TOPIC_TERMS_FILENAME
        self.topic_terms_frame(result.model).to_csv(artifacts["topic_terms"], index=False)

        artifacts["model_info"] = output_dir / MODEL_INFO_FILENAME
        with open(artifacts["model_info"], 'w', encoding='utf-8') as f:
            json.dump(result.model_info.model_dump(), f, indent=2, default=str)

        if self.config.render_charts:
            with RadarChartRenderer(self.theme) as renderer:
                artifacts["coverage_chart"] = renderer.render_coverage(
                    result.coverage, self.labels, output_dir / COVERAGE_CHART_FILENAME
                )
                artifacts["item_sample_chart"] = renderer.render_item_sample(
                    result.posterior_table,
                    result.sampled_items,
                    self.labels,
                    output_dir / ITEM_SAMPLE_CHART_FILENAME,
                )

        artifacts["report"] = output_dir / REPORT_FILENAME
        snapshot = RunMetadata.gather()
        snapshot.update({
            "num_topics": self.config.num_topics,
            "random_state": self.config.random_state,
            "sample_size": self.config.sample_size,
            "sample_seed": self.config.sample_seed,
            "noise_words": ", ".join(self.config.noise_words),
        })
        report = self.report_generator.generate_run_report(
            run_id=result.run_id,
            corpus_stats={
                "standards": result.num_standards,
                "domains": result.num_domains,
                "items": result.num_items,
                "standards_terms": standards_dtm.num_terms,
                "items_terms": items_dtm.num_terms,
                "empty_items": len(result.empty_items),
            },
            model_info=result.model_info,
            labels=self.labels,
            coverage=result.coverage,
            zero_overlap_items=result.zero_overlap_items,
            artifacts=artifacts,
            item_sample=self.sample_summaries(result),
            config_snapshot=snapshot,
            start_time=start_time.isoformat(),
            end_time=datetime.now().isoformat(),
        )
        artifacts["report"].write_text(report, encoding="utf-8")

        result.output_dir = output_dir
        result.artifacts = artifacts
        logger.info(f"Wrote {len(artifacts)} artifacts to {output_dir}")

    @staticmethod
    def sample_summaries(result: AlignmentResult) -> List[ItemPosterior]:
        """Dominant topic and entropy of each sampled item, in sample order."""
        sample = result.posterior.subset(result.sampled_items)
        return [sample.item(item_id) for item_id in sample.item_ids]

    def topic_terms_frame(self, model: FittedTopicModel) -> pd.DataFrame:
        """Top terms per topic as a long table {topic, label, rank, term, probability}."""
        records = []
        for topic in range(1, model.num_topics + 1):
            for rank, (term, prob) in enumerate(model.top_terms(topic, self.config.num_top_words), start=1):
                records.append({
                    "topic": topic,
                    "label": self.labels.name(topic),
                    "rank": rank,
                    "term": term,
                    "probability": prob,
                })
        return pd.DataFrame(records, columns=["topic", "label", "rank", "term", "probability"])
