"""Shared utilities for run metadata and reporting."""

from topic_alignment.utils.metadata import RunMetadata
from topic_alignment.utils.reporting import AlignmentReportGenerator

__all__ = [
    'RunMetadata',
    'AlignmentReportGenerator',
]
