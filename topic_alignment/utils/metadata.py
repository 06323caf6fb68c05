"""Run metadata collection for alignment reports."""

import platform
import subprocess
from datetime import datetime
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Dict, List

LIBRARY_VERSIONS: List[str] = ["gensim", "numpy", "pandas", "matplotlib", "pydantic"]


class RunMetadata:
    """
    Collects the environment a run was produced in.

    Fitting is seeded, but identical parameters also need identical library
    versions, so those are recorded next to the git state.

    Usage:
        metadata = RunMetadata.gather()

        # Returns dict with keys:
        # - timestamp, python_version, platform
        # - git_commit, git_branch
        # - working_dir
        # - <library>_version for each of LIBRARY_VERSIONS
    """

    @staticmethod
    def gather() -> Dict[str, str]:
        """
        Gather run environment metadata.

        Returns:
            Dict of metadata strings ("unknown" where unavailable)
        """
        snapshot = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "python_version": platform.python_version(),
            "platform": platform.platform(),
            "git_commit": RunMetadata._run_git(["rev-parse", "--short", "HEAD"]),
            "git_branch": RunMetadata._run_git(["rev-parse", "--abbrev-ref", "HEAD"]),
            "working_dir": str(Path.cwd()),
        }
        for library in LIBRARY_VERSIONS:
            snapshot[f"{library}_version"] = RunMetadata._version(library)
        return snapshot

    @staticmethod
    def _version(distribution: str) -> str:
        try:
            return importlib_metadata.version(distribution)
        except importlib_metadata.PackageNotFoundError:
            return "unknown"

    @staticmethod
    def _run_git(args: List[str]) -> str:
        """
        Run git command safely, return 'unknown' on error.

        Args:
            args: Git command arguments (e.g., ["rev-parse", "HEAD"])
        """
        try:
            return subprocess.check_output(
                ["git"] + args,
                stderr=subprocess.DEVNULL
            ).decode('utf-8').strip()
        except (subprocess.CalledProcessError, FileNotFoundError):
            return "unknown"
