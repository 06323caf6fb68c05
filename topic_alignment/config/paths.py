"""Project path configuration."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PathsConfig(BaseSettings):
    """
    Project path configuration.
    All paths are computed from project_root.
    """
    model_config = SettingsConfigDict(
        env_prefix='PATHS_',
        case_sensitive=False
    )

    # Project root directory (computed)
    project_root: Path = Field(default_factory=lambda: Path(__file__).parent.parent.parent)

    @property
    def data_dir(self) -> Path:
        return self.project_root / "data"

    @property
    def raw_data_dir(self) -> Path:
        """Source spreadsheets (standards, stop words, items)"""
        return self.data_dir / "raw"

    @property
    def standards_path(self) -> Path:
        return self.raw_data_dir / "standards.xlsx"

    @property
    def stopwords_path(self) -> Path:
        return self.raw_data_dir / "stopwords.xlsx"

    @property
    def items_path(self) -> Path:
        return self.raw_data_dir / "items.xlsx"

    @property
    def reports_dir(self) -> Path:
        """Root for per-run report folders"""
        return self.project_root / "reports"
