"""Pydantic models for the chapter rating browser."""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Metric(str, Enum):
    RATING = "rating"
    VOLUME = "volume"
    ARC = "arc"
    YEAR = "year"


class Grouping(str, Enum):
    NONE = "none"
    VOLUME = "volume"
    ARC = "arc"
    YEAR = "year"


class LegendKind(str, Enum):
    GRADIENT = "gradient"
    DISCRETE = "discrete"


# --- Row models (what comes out of the DB) ---


class MangaRow(BaseModel):
    id: str
    title: str
    author: str | None = None
    cover_image: str = ""
    description: str | None = None
    status: str | None = None
    total_chapters: int = 0


class ChapterRecord(BaseModel):
    """One chapter's metadata plus its aggregated rating statistics.

    Frozen so that sequences of records can key the memoized layout,
    color and trend computations.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    chapter_number: int | float = Field(gt=0)
    title: str | None = None
    cover_image: str = ""
    volume_number: int | None = None
    arc: str | None = None
    release_date: date | None = None
    avg_rating: float | None = Field(default=None, ge=0, le=10)
    review_count: int = Field(default=0, ge=0)
    ratings: tuple[float, ...] = ()

    @field_validator("chapter_number")
    @classmethod
    def _whole_numbers_as_int(cls, value: int | float) -> int | float:
        # SQLite REAL columns hand back 12.0 for chapter 12
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value

    @property
    def has_rating(self) -> bool:
        return self.avg_rating is not None


# --- Derived, render-ready models ---


class TrendPoint(BaseModel):
    chapter_number: int | float
    rating: float | None = None
    review_count: int = 0
    moving_average: float | None = None


class GridCell(BaseModel):
    row: int
    col: int
    chapter_id: str | None = None
    chapter_number: int | float | None = None
    background_color: str
    label_color: str
    is_selected: bool = False

    @property
    def is_empty(self) -> bool:
        return self.chapter_id is None


class LegendItem(BaseModel):
    label: str
    color: str


class Legend(BaseModel):
    kind: LegendKind
    colors: list[str] = Field(default_factory=list)  # gradient swatches, low → high
    low_label: str | None = None
    high_label: str | None = None
    items: list[LegendItem] = Field(default_factory=list)  # discrete entries


class ChapterGrid(BaseModel):
    """One page of the chapter grid, ready for a presentation layer."""
    rows: int
    columns: int
    cells: list[list[GridCell]]  # row-major
    page: int
    total_pages: int
    first_chapter: int  # 1-based position in the full sequence
    last_chapter: int
    total_chapters: int
    metric: Metric
    grouping: Grouping
    legend: Legend


class TimelineCard(BaseModel):
    chapter_id: str
    chapter_number: int | float
    cover_image: str = ""
    avg_rating: float | None = None
    is_selected: bool = False


class RatingChart(BaseModel):
    points: list[TrendPoint]
    review_axis_max: int
    selected_chapter: int | float | None = None
    window: int


class Tooltip(BaseModel):
    heading: str
    rating_line: str | None = None
    count_line: str | None = None
    moving_average_line: str | None = None


class ChapterDetail(BaseModel):
    heading: str
    chapter_number: int | float
    review_count: int
    avg_rating: float | None = None
    histogram: list[int]  # index 0 → rating 1, index 9 → rating 10
    has_ratings: bool


# --- Import models (what comes in from a catalog file) ---


class ChapterEntry(BaseModel):
    number: int | float = Field(gt=0)
    id: str | None = None
    title: str | None = None
    cover_image: str = ""
    volume: int | None = None
    arc: str | None = None
    release_date: date | None = None
    ratings: list[float] = Field(default_factory=list)

    @field_validator("ratings")
    @classmethod
    def _ratings_in_range(cls, value: list[float]) -> list[float]:
        for rating in value:
            if not 0 <= rating <= 10:
                raise ValueError(f"rating {rating} outside 0-10")
        return value


class MangaEntry(BaseModel):
    id: str
    title: str
    author: str | None = None
    cover_image: str = ""
    description: str | None = None
    status: str | None = None
    total_chapters: int | None = None
    chapters: list[ChapterEntry] = Field(default_factory=list)


class CatalogFile(BaseModel):
    manga: list[MangaEntry] = Field(default_factory=list)
