"""
CLI entry point for the standards/items alignment run.

Output layout:
    reports/
    └── {YYYYMMDD_HHMMSS}_alignment/
        ├── RUN_REPORT.md          # AlignmentReportGenerator report
        ├── posterior.csv          # item, topic, label, probability, Level, overlap_terms
        ├── coverage.csv           # log-scaled mean probability per topic and level
        ├── topic_terms.csv        # top terms per topic
        ├── model_info.json        # LDAModelInfo
        ├── coverage_radar.png
        └── item_sample_radar.png

Usage:
    # Paths from configs/config.yaml (data/raw/*.xlsx)
    python -m topic_alignment

    # Explicit sources
    python -m topic_alignment --standards data/raw/standards.xlsx \\
        --stopwords data/raw/stopwords.xlsx --items data/raw/items.xlsx

    # Override model and sample settings
    python -m topic_alignment --num-topics 8 --seed 99 --sample-size 6 --sample-seed 1
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from topic_alignment.config import settings
from topic_alignment.exceptions import CorpusSchemaError, TopicModelConfigError
from topic_alignment.pipeline import AlignmentPipeline, PipelineConfig

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m topic_alignment",
        description="Fit LDA on curriculum standards and infer topic coverage of test items.",
    )
    parser.add_argument("--standards", type=Path, default=settings.paths.standards_path,
                        help="Standards table {domain, standard_text}")
    parser.add_argument("--stopwords", type=Path, default=settings.paths.stopwords_path,
                        help="Domain stop-word table {word}")
    parser.add_argument("--items", type=Path, default=settings.paths.items_path,
                        help="Items table {item_id, prompt}")
    parser.add_argument("--output-dir", type=Path, default=None,
                        help="Artifact folder (default: reports/<run_id>_alignment)")
    parser.add_argument("--sheet", default=settings.preprocessing.sheet_name,
                        help="Worksheet to read from Excel sources")
    parser.add_argument("--num-topics", type=int, default=None, help="Number of topics K")
    parser.add_argument("--seed", type=int, default=None, help="LDA fitting seed")
    parser.add_argument("--sample-size", type=int, default=None, help="Items in the sample chart")
    parser.add_argument("--sample-seed", type=int, default=None, help="Item sample seed")
    parser.add_argument("--no-charts", action="store_true", help="Skip the radar charts")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    sheet = int(args.sheet) if str(args.sheet).isdigit() else args.sheet

    try:
        config = PipelineConfig.from_settings(
            num_topics=args.num_topics,
            random_state=args.seed,
            sample_size=args.sample_size,
            sample_seed=args.sample_seed,
            render_charts=False if args.no_charts else None,
        )
        result = AlignmentPipeline(config).run_from_files(
            args.standards,
            args.stopwords,
            args.items,
            output_dir=args.output_dir,
            sheet_name=sheet,
        )
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except (FileNotFoundError, CorpusSchemaError, TopicModelConfigError) as e:
        logger.error(str(e))
        return 1

    print(f"Report: {result.artifacts['report']}")
    if result.zero_overlap_items:
        print(
            f"{len(result.zero_overlap_items)} items share no vocabulary with the standards "
            f"(uniform mixtures): {', '.join(result.zero_overlap_items)}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
