"""Color mapping for chapter cells — rating buckets, categorical palettes, labels."""

from collections.abc import Sequence

from ratingmap.grouping import GroupKey, group_key, is_missing
from ratingmap.models import ChapterRecord, Grouping, Legend, LegendItem, LegendKind, Metric

# --- Colors ---

NO_DATA_COLOR = "#2c3440"  # chapter present, metric value absent
EMPTY_CELL_COLOR = "#1c2228"  # gap or unfilled cell

LABEL_DARK = "rgba(0, 0, 0, 0.3)"
LABEL_LIGHT = "rgba(255, 255, 255, 0.25)"
LABEL_DARK_RGBA = (0, 0, 0, 77)
LABEL_LIGHT_RGBA = (255, 255, 255, 64)

LUMINANCE_THRESHOLD = 0.5

# Lower bound of each bucket → color, deep red (0-1) through bright green (9-10)
RATING_BUCKETS: list[tuple[int, str]] = [
    (9, "#22c55e"),
    (8, "#4ade80"),
    (7, "#84cc16"),
    (6, "#eab308"),
    (5, "#f59e0b"),
    (4, "#fb923c"),
    (3, "#f97316"),
    (2, "#ef4444"),
    (1, "#dc2626"),
    (0, "#991b1b"),
]

# Distinct, non-gradating palettes for categorical metrics (17 each)
VOLUME_PALETTE = [
    "#ef4444", "#3b82f6", "#22c55e", "#f59e0b", "#a855f7", "#ec4899",
    "#06b6d4", "#eab308", "#8b5cf6", "#10b981", "#f97316", "#6366f1",
    "#84cc16", "#d946ef", "#14b8a6", "#fb923c", "#0ea5e9",
]
ARC_PALETTE = [
    "#7c3aed", "#f59e0b", "#06b6d4", "#ef4444", "#10b981", "#ec4899",
    "#3b82f6", "#eab308", "#8b5cf6", "#22c55e", "#f97316", "#0ea5e9",
    "#a855f7", "#84cc16", "#d946ef", "#14b8a6", "#fb7185",
]
YEAR_PALETTE = [
    "#0ea5e9", "#ec4899", "#22c55e", "#8b5cf6", "#f59e0b", "#06b6d4",
    "#ef4444", "#a855f7", "#eab308", "#3b82f6", "#10b981", "#f97316",
    "#d946ef", "#14b8a6", "#84cc16", "#fb923c", "#6366f1",
]

PALETTES: dict[Metric, list[str]] = {
    Metric.VOLUME: VOLUME_PALETTE,
    Metric.ARC: ARC_PALETTE,
    Metric.YEAR: YEAR_PALETTE,
}

GRADIENT_LOW_LABEL = "Low (0)"
GRADIENT_HIGH_LABEL = "High (10)"


def rating_color(rating: float | None) -> str:
    """Map an average rating to its bucket color. None → no-data color."""
    if rating is None:
        return NO_DATA_COLOR
    for lower, color in RATING_BUCKETS:
        if rating >= lower:
            return color
    return RATING_BUCKETS[-1][1]


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    h = color.lstrip("#")
    if len(h) != 6:
        raise ValueError(f"Expected #rrggbb color, got {color!r}")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def luminance(color: str) -> float:
    """Perceived brightness in [0, 1]: (0.299R + 0.587G + 0.114B) / 255."""
    r, g, b = hex_to_rgb(color)
    return (0.299 * r + 0.587 * g + 0.114 * b) / 255


def _is_light(background: str) -> bool:
    if background in (NO_DATA_COLOR, EMPTY_CELL_COLOR):
        return False
    return luminance(background) > LUMINANCE_THRESHOLD


def label_color(background: str) -> str:
    """Subtle label color that stays legible over background."""
    return LABEL_DARK if _is_light(background) else LABEL_LIGHT


def label_rgba(background: str) -> tuple[int, int, int, int]:
    """label_color as an RGBA tuple for raster output."""
    return LABEL_DARK_RGBA if _is_light(background) else LABEL_LIGHT_RGBA


# --- Categorical ---


def _grouping_for(metric: Metric) -> Grouping:
    if metric == Metric.RATING:
        raise ValueError("Rating is a continuous metric")
    return Grouping(metric.value)


def category_colors(chapters: Sequence[ChapterRecord], metric: Metric) -> dict[GroupKey, str]:
    """Assign palette colors to the distinct values of a categorical metric.

    Volumes and years are ordered ascending, arcs by first appearance. The
    returned dict preserves that order, which is also the legend order.
    """
    mode = _grouping_for(metric)
    seen: list[GroupKey] = []
    for chapter in chapters:
        key = group_key(chapter, mode)
        if is_missing(key) or key in seen:
            continue
        seen.append(key)

    if metric in (Metric.VOLUME, Metric.YEAR):
        seen.sort()  # type: ignore[call-overload]

    palette = PALETTES[metric]
    return {key: palette[i % len(palette)] for i, key in enumerate(seen)}


def chapter_color(
    chapter: ChapterRecord,
    metric: Metric,
    categories: dict[GroupKey, str] | None = None,
) -> str:
    """Background color of a chapter's cell under metric."""
    if metric == Metric.RATING:
        return rating_color(chapter.avg_rating)
    key = group_key(chapter, _grouping_for(metric))
    if is_missing(key) or categories is None:
        return NO_DATA_COLOR
    return categories.get(key, NO_DATA_COLOR)


def color_map(chapters: Sequence[ChapterRecord], metric: Metric) -> dict[str, str]:
    """chapter id → background color for every chapter in the sequence."""
    categories = None if metric == Metric.RATING else category_colors(chapters, metric)
    return {c.id: chapter_color(c, metric, categories) for c in chapters}


# --- Legend ---


def _category_label(key: GroupKey, metric: Metric) -> str:
    if metric == Metric.VOLUME:
        return f"Vol. {key}"
    return str(key)


def build_legend(chapters: Sequence[ChapterRecord], metric: Metric) -> Legend:
    if metric == Metric.RATING:
        swatches = [NO_DATA_COLOR] + [color for _, color in reversed(RATING_BUCKETS)]
        return Legend(
            kind=LegendKind.GRADIENT,
            colors=swatches,
            low_label=GRADIENT_LOW_LABEL,
            high_label=GRADIENT_HIGH_LABEL,
        )

    categories = category_colors(chapters, metric)
    return Legend(
        kind=LegendKind.DISCRETE,
        items=[
            LegendItem(label=_category_label(key, metric), color=color)
            for key, color in categories.items()
        ],
    )
