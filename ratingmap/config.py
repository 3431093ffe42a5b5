"""Configuration loading for the chapter rating browser."""

import math
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from ratingmap.models import Grouping, Metric


class GridConfig(BaseModel):
    rows: int = Field(default=5, gt=0)
    page_size: int = Field(default=100, gt=0)

    @property
    def min_columns(self) -> int:
        """Columns a full page needs; short pages never render narrower."""
        return math.ceil(self.page_size / self.rows)


class TrendConfig(BaseModel):
    window: int = Field(default=10, gt=0)
    min_review_axis: int = Field(default=10, ge=0)


class DisplayConfig(BaseModel):
    metric: Metric = Metric.RATING
    grouping: Grouping = Grouping.NONE


class RenderConfig(BaseModel):
    output_dir: str = "data/renders"
    cell_size: int = 28
    cell_gap: int = 4
    chart_width: int = 1200
    chart_height: int = 480


class Config(BaseModel):
    db_path: str = "data/ratingmap.db"
    grid: GridConfig = Field(default_factory=GridConfig)
    trend: TrendConfig = Field(default_factory=TrendConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    render: RenderConfig = Field(default_factory=RenderConfig)

    @property
    def resolved_db_path(self) -> Path:
        """Resolve db_path relative to project root."""
        return _resolve(self.db_path)

    @property
    def resolved_output_dir(self) -> Path:
        return _resolve(self.render.output_dir)


def _resolve(path: str) -> Path:
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return _project_root() / p


def _project_root() -> Path:
    """Return the ratingmap project root directory."""
    return Path(__file__).parent.parent


def load_config(config_path: Path | None = None) -> Config:
    """Load config from YAML file. Falls back to defaults if file missing."""
    if config_path is None:
        config_path = _project_root() / "config.yaml"

    if config_path.exists():
        raw: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        return Config(**raw)

    return Config()
