"""Tests for group keys and grid layout."""

from datetime import date

import pytest

from ratingmap.grouping import MISSING, UNGROUPED, group_key, is_missing
from ratingmap.layout import base_columns, layout_page
from ratingmap.models import Grouping


class TestGroupKey:
    def test_none_mode(self, make_chapter):
        assert group_key(make_chapter(1, volume_number=2), Grouping.NONE) is UNGROUPED

    def test_volume(self, make_chapter):
        assert group_key(make_chapter(1, volume_number=2), Grouping.VOLUME) == 2
        assert group_key(make_chapter(1), Grouping.VOLUME) is MISSING

    def test_arc_blank_is_missing(self, make_chapter):
        assert group_key(make_chapter(1, arc="Storm"), Grouping.ARC) == "Storm"
        assert is_missing(group_key(make_chapter(1, arc="  "), Grouping.ARC))
        assert is_missing(group_key(make_chapter(1), Grouping.ARC))

    def test_year(self, make_chapter):
        ch = make_chapter(1, release_date=date(2021, 6, 1))
        assert group_key(ch, Grouping.YEAR) == 2021
        assert group_key(make_chapter(2), Grouping.YEAR) is MISSING

    def test_missing_never_equals_real_value(self):
        assert MISSING != 0
        assert MISSING != ""
        assert MISSING != UNGROUPED


class TestBaseColumns:
    def test_short_page_uses_full_page_width(self):
        assert base_columns(23, 5, 20) == 20

    def test_wide_page_grows(self):
        assert base_columns(120, 5, 20) == 24


class TestLayoutPage:
    def test_ungrouped_row_major(self, make_chapter):
        chapters = [make_chapter(k) for k in range(1, 24)]
        layout = layout_page(chapters, rows=5, min_columns=20)

        assert layout.columns == 20
        for k in range(1, 24):
            assert layout.position_of(f"ch-{k}") == ((k - 1) // 20, (k - 1) % 20)

    def test_volume_gaps(self, make_chapter):
        chapters = [
            make_chapter(n, volume_number=v) for n, v in enumerate([1, 1, 2, 2, 3], start=1)
        ]
        layout = layout_page(chapters, rows=5, min_columns=20, grouping=Grouping.VOLUME)

        positions = [layout.position_of(c.id) for c in chapters]
        assert positions == [(0, 0), (0, 1), (0, 3), (0, 4), (0, 6)]
        assert layout.matrix[0][2] is None
        assert layout.matrix[0][5] is None

    @pytest.mark.parametrize("n_chapters", [0, 1, 7, 100])
    def test_always_fixed_rows(self, make_chapter, n_chapters):
        chapters = [make_chapter(k) for k in range(1, n_chapters + 1)]
        layout = layout_page(chapters, rows=5, min_columns=20)
        assert layout.rows == 5
        assert len(layout.matrix) == 5
        assert all(len(row) == layout.columns for row in layout.matrix)

    def test_reading_order_ascending(self, make_chapter):
        volumes = [1, 1, 1, 2, 3, 3, 4, 4, 4, 4]
        chapters = [make_chapter(n, volume_number=v) for n, v in enumerate(volumes, start=1)]
        layout = layout_page(chapters, rows=5, min_columns=3, grouping=Grouping.VOLUME)

        numbers = [c.chapter_number for c in layout.placed()]
        assert numbers == sorted(numbers)

    def test_one_gap_per_transition(self, make_chapter):
        volumes = [1, 1, 2, 3, 3, 3, None, None, 4]
        chapters = [make_chapter(n, volume_number=v) for n, v in enumerate(volumes, start=1)]
        layout = layout_page(chapters, rows=5, min_columns=4, grouping=Grouping.VOLUME)

        def linear(chapter_id):
            r, c = layout.position_of(chapter_id)
            return r * layout.columns + c

        for prev, curr in zip(chapters, chapters[1:]):
            step = linear(curr.id) - linear(prev.id)
            same_group = prev.volume_number == curr.volume_number
            assert step == (1 if same_group else 2)

    def test_consecutive_missing_share_a_group(self, make_chapter):
        chapters = [make_chapter(1), make_chapter(2)]
        layout = layout_page(chapters, rows=5, min_columns=4, grouping=Grouping.ARC)
        assert layout.position_of("ch-2") == (0, 1)

    def test_grouping_none_ignores_fields(self, make_chapter):
        chapters = [make_chapter(n, volume_number=n) for n in range(1, 5)]
        layout = layout_page(chapters, rows=5, min_columns=4)
        assert [layout.position_of(c.id) for c in chapters] == [(0, 0), (0, 1), (0, 2), (0, 3)]

    def test_overflow_dropped(self, make_chapter):
        chapters = [make_chapter(n, volume_number=n) for n in range(1, 4)]
        layout = layout_page(chapters, rows=1, min_columns=3, grouping=Grouping.VOLUME)

        assert layout.dropped == ["ch-3"]
        assert [c.id for c in layout.placed()] == ["ch-1", "ch-2"]
        assert layout.position_of("ch-3") == (1, 1)

    def test_empty_page(self):
        layout = layout_page([], rows=5, min_columns=20)
        assert layout.columns == 20
        assert layout.placed() == []

    def test_bad_rows(self, make_chapter):
        with pytest.raises(ValueError, match="rows"):
            layout_page([make_chapter(1)], rows=0, min_columns=1)
