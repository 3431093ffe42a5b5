"""Tests for the ChapterSection view model: events, navigation, views, memoization."""

import pytest

from ratingmap.colors import EMPTY_CELL_COLOR, NO_DATA_COLOR, VOLUME_PALETTE
from ratingmap.config import Config, GridConfig
from ratingmap.models import Grouping, LegendKind, Metric
from ratingmap.section import (
    PAGE_CHANGED,
    SELECTION_CHANGED,
    ChapterSection,
    _cached_layout,
    _cached_trend,
)


@pytest.fixture()
def small_config():
    """Grid of 5 rows x 2 columns per page."""
    return Config(grid=GridConfig(rows=5, page_size=10))


@pytest.fixture()
def section(make_chapter, small_config):
    """25 chapters, 5 per volume, odd chapters rated."""
    chapters = [
        make_chapter(
            n,
            volume_number=(n - 1) // 5 + 1,
            avg_rating=float(n % 10) if n % 2 else None,
            review_count=n if n % 2 else 0,
        )
        for n in range(1, 26)
    ]
    return ChapterSection(chapters, small_config)


class TestInitialState:
    def test_first_chapter_selected(self, section):
        assert section.selected == 1
        assert section.selected_chapter.id == "ch-1"
        assert section.current_page == 0
        assert section.total_pages == 3

    def test_defaults_from_config(self, section):
        assert section.metric == Metric.RATING
        assert section.grouping == Grouping.NONE

    def test_empty(self):
        s = ChapterSection([])
        assert s.is_empty
        assert s.selected is None
        assert s.grid() is None
        assert s.page_chapters() == ()
        assert s.total_pages == 0
        assert s.detail() is None
        assert s.timeline() == []


class TestEvents:
    def test_selection_changed(self, section):
        seen = []
        section.on(SELECTION_CHANGED, seen.append)
        assert section.select_chapter(5)
        assert not section.select_chapter(5)
        assert seen == [5]

    def test_unknown_chapter_ignored(self, section):
        seen = []
        section.on(SELECTION_CHANGED, seen.append)
        assert not section.select_chapter(99)
        assert section.selected == 1
        assert seen == []

    def test_page_changed(self, section):
        seen = []
        section.on(PAGE_CHANGED, seen.append)
        section.next_page()
        section.go_to_page(2)
        assert seen == [1, 2]

    def test_unknown_event(self, section):
        with pytest.raises(ValueError, match="Unknown event"):
            section.on("scrolled", print)

    def test_clear_selection(self, section):
        seen = []
        section.on(SELECTION_CHANGED, seen.append)
        assert section.clear_selection()
        assert section.selected is None
        assert seen == [None]


class TestNavigation:
    def test_previous_at_first_page_refused(self, section):
        assert not section.has_previous_page
        assert not section.previous_page()
        assert section.current_page == 0

    def test_next_at_last_page_refused(self, section):
        section.go_to_page(2)
        assert not section.has_next_page
        assert not section.next_page()
        assert section.current_page == 2

    def test_out_of_range_refused(self, section):
        seen = []
        section.on(PAGE_CHANGED, seen.append)
        assert not section.go_to_page(3)
        assert not section.go_to_page(-1)
        assert not section.go_to_page(0)  # already there
        assert section.current_page == 0
        assert seen == []

    def test_selection_survives_paging(self, section):
        section.select_chapter(3)
        section.next_page()
        assert section.selected == 3
        grid = section.grid()
        assert not any(cell.is_selected for row in grid.cells for cell in row)

        section.previous_page()
        grid = section.grid()
        selected = [cell for row in grid.cells for cell in row if cell.is_selected]
        assert [c.chapter_number for c in selected] == [3]

    def test_reveal_selected(self, section):
        section.select_chapter(25)
        assert section.reveal_selected()
        assert section.current_page == 2
        assert not section.reveal_selected()

    def test_page_chapters(self, section):
        section.go_to_page(2)
        assert [c.chapter_number for c in section.page_chapters()] == [21, 22, 23, 24, 25]


class TestGrid:
    def test_last_page(self, section):
        section.go_to_page(2)
        grid = section.grid()

        assert grid.rows == 5
        assert grid.columns == 2
        assert (grid.first_chapter, grid.last_chapter, grid.total_chapters) == (21, 25, 25)
        assert grid.page == 2
        assert grid.total_pages == 3

        numbers = [[cell.chapter_number for cell in row] for row in grid.cells]
        assert numbers == [[21, 22], [23, 24], [25, None], [None, None], [None, None]]

    def test_empty_cells(self, section):
        section.go_to_page(2)
        cell = section.grid().cells[4][1]
        assert cell.is_empty
        assert cell.background_color == EMPTY_CELL_COLOR
        assert not cell.is_selected

    def test_unrated_cell_uses_no_data_color(self, section):
        cell = section.grid().cells[0][1]  # chapter 2
        assert cell.chapter_number == 2
        assert cell.background_color == NO_DATA_COLOR

    def test_gradient_legend(self, section):
        assert section.grid().legend.kind == LegendKind.GRADIENT

    def test_categorical_colors_stable_across_pages(self, section):
        section.set_metric(Metric.VOLUME)
        section.go_to_page(1)  # chapters 11-20, volumes 3 and 4
        grid = section.grid()
        first = grid.cells[0][0]
        assert first.chapter_number == 11
        assert first.background_color == VOLUME_PALETTE[2]
        assert [i.label for i in grid.legend.items] == [f"Vol. {v}" for v in range(1, 6)]

    def test_grouping_inserts_gaps(self, section):
        section.set_grouping("volume")
        grid = section.grid()  # chapters 1-10: volume 1 then volume 2
        flat = [cell.chapter_number for row in grid.cells for cell in row]
        assert flat == [1, 2, 3, 4, 5, None, 6, 7, 8, 9]
        # a full page plus one gap no longer fits the 5x2 grid
        assert section.layout().dropped == ["ch-10"]

    def test_bad_metric(self, section):
        with pytest.raises(ValueError):
            section.set_metric("popularity")


class TestDerivedViews:
    def test_timeline(self, section):
        cards = section.timeline()
        assert len(cards) == 25
        assert cards[0].is_selected
        assert not cards[1].is_selected

    def test_chart(self, section):
        section.select_chapter(9)
        chart = section.chart()
        assert len(chart.points) == 25
        assert chart.selected_chapter == 9
        assert chart.window == 10
        assert chart.review_axis_max == 25

    def test_trend_ignores_pagination(self, section):
        before = section.trend()
        section.go_to_page(2)
        assert section.trend() == before

    def test_detail_follows_selection(self, section):
        section.select_chapter(7)
        assert section.detail().heading == "Chapter 7"
        section.clear_selection()
        assert section.detail() is None


class TestHover:
    def test_tooltip_per_view(self, section):
        section.hover["grid"].enter(3)
        assert section.tooltip("grid").heading == "Chapter 3"
        assert section.tooltip("timeline") is None

    def test_chart_tooltip_has_moving_average(self, section):
        section.hover["chart"].enter(3)
        tip = section.tooltip("chart")
        assert tip.heading == "Chapter 3"
        assert tip.rating_line == "Rating: 3.0"
        assert tip.moving_average_line == "10-ch avg: 2.0"

    def test_chart_tooltip_for_unrated_chapter(self, make_chapter):
        s = ChapterSection([
            make_chapter(1, avg_rating=8.0, review_count=2),
            make_chapter(2),
        ])
        s.hover["chart"].enter(2)
        tip = s.tooltip("chart")
        assert tip.rating_line is None
        assert tip.count_line == "0 reviews"
        assert tip.moving_average_line == "10-ch avg: 8.0"

    def test_grid_tooltip_for_unrated_chapter(self, make_chapter):
        s = ChapterSection([make_chapter(1, avg_rating=8.0, review_count=2), make_chapter(2)])
        s.hover["grid"].enter(2)
        assert s.tooltip("grid").rating_line == "No ratings yet"

    def test_grid_tooltip_has_no_moving_average(self, section):
        section.hover["grid"].enter(3)
        assert section.tooltip("grid").moving_average_line is None

    def test_unknown_view(self, section):
        with pytest.raises(ValueError, match="Unknown view"):
            section.tooltip("sidebar")

    def test_hover_does_not_change_selection(self, section):
        section.hover["grid"].enter(8)
        assert section.selected == 1

    def test_hover_does_not_recompute(self, section):
        section.grid()
        section.chart()
        layout_misses = _cached_layout.cache_info().misses
        trend_misses = _cached_trend.cache_info().misses

        section.hover["grid"].enter(4)
        section.hover["chart"].enter(5)
        section.tooltip("grid")
        section.tooltip("chart")
        section.grid()
        section.chart()
        section.hover["grid"].leave()
        section.grid()

        assert _cached_layout.cache_info().misses == layout_misses
        assert _cached_trend.cache_info().misses == trend_misses

    def test_selection_does_not_recompute_layout(self, section):
        section.grid()
        misses = _cached_layout.cache_info().misses
        section.select_chapter(4)
        section.grid()
        assert _cached_layout.cache_info().misses == misses
