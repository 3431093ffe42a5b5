"""Chapter section — per-session view model over one title's chapters.

Owns the page index, the metric/grouping settings, the shared selection and
the per-view hover state, and hands out render-ready grid, legend, timeline,
chart and detail models. Layout, colors and trend are pure functions of
their inputs and are memoized on the exact input tuple, so hover changes
(which are not part of any key) never trigger recomputation.
"""

import functools
import logging
from collections.abc import Callable, Iterable

from ratingmap.colors import EMPTY_CELL_COLOR, build_legend, color_map, label_color
from ratingmap.config import Config
from ratingmap.detail import chapter_detail, chapter_tooltip, chart_tooltip
from ratingmap.layout import GridLayout, layout_page
from ratingmap.models import (
    ChapterDetail,
    ChapterGrid,
    ChapterRecord,
    GridCell,
    Grouping,
    Legend,
    Metric,
    RatingChart,
    TimelineCard,
    Tooltip,
    TrendPoint,
)
from ratingmap.pagination import Paginator, page_slice
from ratingmap.selection import ChapterNumber, HoverState, SelectionState
from ratingmap.trend import review_axis_max, trend_points

logger = logging.getLogger(__name__)

SELECTION_CHANGED = "selection-changed"
PAGE_CHANGED = "page-changed"
EVENTS = (SELECTION_CHANGED, PAGE_CHANGED)

VIEWS = ("grid", "timeline", "chart")

Chapters = tuple[ChapterRecord, ...]


# --- Memoized derivations (cached values are shared; never mutate them) ---


@functools.lru_cache(maxsize=64)
def _cached_layout(
    page: Chapters, rows: int, min_columns: int, grouping: Grouping,
) -> GridLayout:
    return layout_page(page, rows, min_columns, grouping)


@functools.lru_cache(maxsize=16)
def _cached_colors(chapters: Chapters, metric: Metric) -> dict[str, str]:
    return color_map(chapters, metric)


@functools.lru_cache(maxsize=16)
def _cached_legend(chapters: Chapters, metric: Metric) -> Legend:
    return build_legend(chapters, metric)


@functools.lru_cache(maxsize=8)
def _cached_trend(chapters: Chapters, window: int) -> tuple[TrendPoint, ...]:
    return tuple(trend_points(chapters, window))


def clear_caches() -> None:
    for fn in (_cached_layout, _cached_colors, _cached_legend, _cached_trend):
        fn.cache_clear()


class ChapterSection:
    """Interactive state and derived views for one title's chapter sequence."""

    def __init__(
        self,
        chapters: Iterable[ChapterRecord],
        config: Config | None = None,
        metric: Metric | str | None = None,
        grouping: Grouping | str | None = None,
    ) -> None:
        self.config = config or Config()
        self.chapters: Chapters = tuple(chapters)
        self.metric = Metric(metric) if metric is not None else self.config.display.metric
        self.grouping = Grouping(grouping) if grouping is not None else self.config.display.grouping

        self.paginator = Paginator(len(self.chapters), self.config.grid.page_size)
        self.current_page = 0

        first = self.chapters[0].chapter_number if self.chapters else None
        self.selection = SelectionState(first)
        self.hover: dict[str, HoverState] = {view: HoverState() for view in VIEWS}

        self._by_number = {c.chapter_number: c for c in self.chapters}
        self._index_of = {c.chapter_number: i for i, c in enumerate(self.chapters)}
        self._handlers: dict[str, list[Callable]] = {event: [] for event in EVENTS}
        self.selection.subscribe(lambda number: self._emit(SELECTION_CHANGED, number))

    # --- Events ---

    def on(self, event: str, handler: Callable) -> None:
        """Register a handler for 'selection-changed' or 'page-changed'."""
        if event not in self._handlers:
            raise ValueError(f"Unknown event: {event}")
        self._handlers[event].append(handler)

    def _emit(self, event: str, payload: object) -> None:
        for handler in self._handlers[event]:
            handler(payload)

    # --- State ---

    @property
    def is_empty(self) -> bool:
        return not self.chapters

    @property
    def selected(self) -> ChapterNumber | None:
        return self.selection.selected

    @property
    def selected_chapter(self) -> ChapterRecord | None:
        if self.selection.selected is None:
            return None
        return self._by_number.get(self.selection.selected)

    def chapter(self, chapter_number: ChapterNumber) -> ChapterRecord | None:
        return self._by_number.get(chapter_number)

    def select_chapter(self, chapter_number: ChapterNumber) -> bool:
        """Select a chapter from any view. Unknown numbers are ignored."""
        if chapter_number not in self._by_number:
            logger.debug("Ignoring selection of unknown chapter %s", chapter_number)
            return False
        return self.selection.select(chapter_number)

    def clear_selection(self) -> bool:
        return self.selection.clear()

    def set_metric(self, metric: Metric | str) -> None:
        self.metric = Metric(metric)

    def set_grouping(self, grouping: Grouping | str) -> None:
        self.grouping = Grouping(grouping)

    # --- Navigation ---

    @property
    def total_pages(self) -> int:
        return self.paginator.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.paginator.has_previous(self.current_page)

    @property
    def has_next_page(self) -> bool:
        return self.paginator.has_next(self.current_page)

    def go_to_page(self, page: int) -> bool:
        """Switch page. Out-of-range or no-op requests are refused."""
        if not self.paginator.is_valid(page) or page == self.current_page:
            return False
        self.current_page = page
        logger.debug("Page changed to %d of %d", page + 1, self.total_pages)
        self._emit(PAGE_CHANGED, page)
        return True

    def next_page(self) -> bool:
        if not self.has_next_page:
            return False
        return self.go_to_page(self.current_page + 1)

    def previous_page(self) -> bool:
        if not self.has_previous_page:
            return False
        return self.go_to_page(self.current_page - 1)

    def reveal_selected(self) -> bool:
        """Move to the page holding the selected chapter."""
        if self.selection.selected is None:
            return False
        index = self._index_of.get(self.selection.selected)
        if index is None:
            return False
        return self.go_to_page(self.paginator.page_of(index))

    def page_chapters(self) -> Chapters:
        if self.is_empty:
            return ()
        return tuple(page_slice(self.chapters, self.current_page, self.paginator.page_size))

    # --- Derived views ---

    def layout(self) -> GridLayout:
        grid_cfg = self.config.grid
        return _cached_layout(
            self.page_chapters(), grid_cfg.rows, grid_cfg.min_columns, self.grouping,
        )

    def colors(self) -> dict[str, str]:
        return _cached_colors(self.chapters, self.metric)

    def legend(self) -> Legend:
        return _cached_legend(self.chapters, self.metric)

    def trend(self) -> tuple[TrendPoint, ...]:
        return _cached_trend(self.chapters, self.config.trend.window)

    def grid(self) -> ChapterGrid | None:
        """Render-ready grid for the current page, or None when there are no chapters."""
        if self.is_empty:
            return None

        layout = self.layout()
        colors = self.colors()
        cells = [
            [self._cell(r, c, chapter, colors) for c, chapter in enumerate(row)]
            for r, row in enumerate(layout.matrix)
        ]
        first, last = self.paginator.page_range(self.current_page)
        return ChapterGrid(
            rows=layout.rows,
            columns=layout.columns,
            cells=cells,
            page=self.current_page,
            total_pages=self.total_pages,
            first_chapter=first,
            last_chapter=last,
            total_chapters=len(self.chapters),
            metric=self.metric,
            grouping=self.grouping,
            legend=self.legend(),
        )

    def _cell(
        self, row: int, col: int, chapter: ChapterRecord | None, colors: dict[str, str],
    ) -> GridCell:
        if chapter is None:
            return GridCell(
                row=row, col=col,
                background_color=EMPTY_CELL_COLOR,
                label_color=label_color(EMPTY_CELL_COLOR),
            )
        background = colors[chapter.id]
        return GridCell(
            row=row,
            col=col,
            chapter_id=chapter.id,
            chapter_number=chapter.chapter_number,
            background_color=background,
            label_color=label_color(background),
            is_selected=self.selection.is_selected(chapter.chapter_number),
        )

    def timeline(self) -> list[TimelineCard]:
        return [
            TimelineCard(
                chapter_id=c.id,
                chapter_number=c.chapter_number,
                cover_image=c.cover_image,
                avg_rating=c.avg_rating,
                is_selected=self.selection.is_selected(c.chapter_number),
            )
            for c in self.chapters
        ]

    def chart(self) -> RatingChart:
        points = list(self.trend())
        return RatingChart(
            points=points,
            review_axis_max=review_axis_max(points, self.config.trend.min_review_axis),
            selected_chapter=self.selection.selected,
            window=self.config.trend.window,
        )

    def detail(self) -> ChapterDetail | None:
        chapter = self.selected_chapter
        return chapter_detail(chapter) if chapter else None

    def tooltip(self, view: str) -> Tooltip | None:
        """Tooltip for whatever the given view is hovering, if anything."""
        if view not in self.hover:
            raise ValueError(f"Unknown view: {view}")
        hovered = self.hover[view].hovered
        chapter = self._by_number.get(hovered) if hovered is not None else None
        if chapter is None:
            return None
        if view == "chart":
            point = self.trend()[self._index_of[chapter.chapter_number]]
            return chart_tooltip(point, self.config.trend.window)
        return chapter_tooltip(chapter)
