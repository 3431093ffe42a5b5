"""Chapter detail panel and hover tooltips."""

import math
from collections.abc import Sequence

from ratingmap.models import ChapterDetail, ChapterRecord, Tooltip, TrendPoint

HISTOGRAM_BUCKETS = 10


def format_number(value: int | float) -> str:
    """Chapter numbers print without a trailing .0."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def chapter_heading(chapter: ChapterRecord) -> str:
    heading = f"Chapter {format_number(chapter.chapter_number)}"
    if chapter.title:
        heading += f" • {chapter.title}"
    return heading


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def rating_histogram(ratings: Sequence[float]) -> list[int]:
    """Count ratings into 10 buckets: rating r lands in min(floor(r) - 1, 9).

    Ratings below 1 have no bucket and are not counted.
    """
    buckets = [0] * HISTOGRAM_BUCKETS
    for rating in ratings:
        index = min(math.floor(rating) - 1, HISTOGRAM_BUCKETS - 1)
        if index >= 0:
            buckets[index] += 1
    return buckets


def chapter_detail(chapter: ChapterRecord) -> ChapterDetail:
    return ChapterDetail(
        heading=chapter_heading(chapter),
        chapter_number=chapter.chapter_number,
        review_count=chapter.review_count,
        avg_rating=chapter.avg_rating,
        histogram=rating_histogram(chapter.ratings),
        has_ratings=chapter.review_count > 0,
    )


def chapter_tooltip(chapter: ChapterRecord) -> Tooltip:
    """Tooltip for a chapter hovered in the grid or timeline."""
    if chapter.avg_rating is None:
        return Tooltip(heading=chapter_heading(chapter), rating_line="No ratings yet")
    return Tooltip(
        heading=chapter_heading(chapter),
        rating_line=f"Rating: {chapter.avg_rating:.1f} / 10",
        count_line=_plural(chapter.review_count, "review"),
    )


def chart_tooltip(point: TrendPoint, window: int = 10) -> Tooltip:
    """Tooltip for a point hovered in the rating chart.

    Shorter than the grid tooltip: no chapter title and no "/ 10" scale. The
    review count is always shown, and the moving average whenever the window
    holds a rating, even for an unrated chapter.
    """
    return Tooltip(
        heading=f"Chapter {format_number(point.chapter_number)}",
        rating_line=f"Rating: {point.rating:.1f}" if point.rating is not None else None,
        count_line=_plural(point.review_count, "review"),
        moving_average_line=(
            f"{window}-ch avg: {point.moving_average:.1f}"
            if point.moving_average is not None
            else None
        ),
    )
