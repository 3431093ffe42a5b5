"""Rolling-average trend series over a title's full chapter sequence."""

from collections.abc import Sequence

from ratingmap.models import ChapterRecord, TrendPoint

DEFAULT_WINDOW = 10
DEFAULT_MIN_REVIEW_AXIS = 10


def moving_average(
    ratings: Sequence[float | None],
    window: int = DEFAULT_WINDOW,
) -> list[float | None]:
    """Backward mean over the last `window` entries ending at each index.

    Absent ratings are skipped, not counted as zero. An index whose window
    holds no rating at all gets None.
    """
    if window <= 0:
        raise ValueError(f"window must be positive, got {window}")

    averages: list[float | None] = []
    for i in range(len(ratings)):
        present = [r for r in ratings[max(0, i - window + 1):i + 1] if r is not None]
        averages.append(sum(present) / len(present) if present else None)
    return averages


def trend_points(
    chapters: Sequence[ChapterRecord],
    window: int = DEFAULT_WINDOW,
) -> list[TrendPoint]:
    """One TrendPoint per chapter, aligned with the input order."""
    averages = moving_average([c.avg_rating for c in chapters], window)
    return [
        TrendPoint(
            chapter_number=chapter.chapter_number,
            rating=chapter.avg_rating,
            review_count=chapter.review_count,
            moving_average=avg,
        )
        for chapter, avg in zip(chapters, averages)
    ]


def review_axis_max(
    points: Sequence[TrendPoint],
    floor: int = DEFAULT_MIN_REVIEW_AXIS,
) -> int:
    """Upper bound for the review-count axis: max(max review_count, floor)."""
    return max([p.review_count for p in points] + [floor])
