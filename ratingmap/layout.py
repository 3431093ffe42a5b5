"""Grid layout — places one page of chapters into a fixed-row cell grid.

Rows are fixed, columns grow with the page length (never below the width a
full page needs). Chapters fill row-major: across every column of row 0,
then row 1, and so on. With a grouping mode active, one empty cell is left
at every boundary between groups.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from ratingmap.grouping import GroupKey, group_key
from ratingmap.models import ChapterRecord, Grouping

logger = logging.getLogger(__name__)


@dataclass
class GridLayout:
    """Cell assignment for one page."""
    rows: int
    columns: int
    matrix: list[list[ChapterRecord | None]]
    # chapter id → (row, col); includes positions dropped for overflowing the grid
    positions: dict[str, tuple[int, int]] = field(default_factory=dict)
    dropped: list[str] = field(default_factory=list)

    def position_of(self, chapter_id: str) -> tuple[int, int] | None:
        return self.positions.get(chapter_id)

    def placed(self) -> list[ChapterRecord]:
        """Chapters in row-major reading order, gaps skipped."""
        return [c for row in self.matrix for c in row if c is not None]


def base_columns(page_length: int, rows: int, min_columns: int) -> int:
    return max(math.ceil(page_length / rows), min_columns)


def layout_page(
    chapters: Sequence[ChapterRecord],
    rows: int,
    min_columns: int,
    grouping: Grouping = Grouping.NONE,
) -> GridLayout:
    """Lay out a page of chapters (ascending by chapter_number).

    Args:
        chapters: The page's chapters, in display order.
        rows: Fixed row count of the grid.
        min_columns: Lower bound on the column count.
        grouping: Mode whose key changes insert a one-cell gap.
    """
    if rows <= 0:
        raise ValueError(f"rows must be positive, got {rows}")

    columns = base_columns(len(chapters), rows, min_columns)

    positions: dict[str, tuple[int, int]] = {}
    row, col = 0, 0
    last_key: GroupKey | None = None
    highest_col = -1

    for index, chapter in enumerate(chapters):
        key = group_key(chapter, grouping)

        if grouping != Grouping.NONE and index > 0 and key != last_key:
            row, col = _advance(row, col, columns)

        positions[chapter.id] = (row, col)
        highest_col = max(highest_col, col)
        last_key = key

        row, col = _advance(row, col, columns)

    total_columns = max(columns, highest_col + 1)

    matrix: list[list[ChapterRecord | None]] = [
        [None] * total_columns for _ in range(rows)
    ]
    dropped: list[str] = []
    by_id = {c.id: c for c in chapters}
    for chapter_id, (r, c) in positions.items():
        if r >= rows:
            dropped.append(chapter_id)
            continue
        matrix[r][c] = by_id[chapter_id]

    if dropped:
        logger.debug(
            "Dropped %d chapter(s) past row %d after gap insertion", len(dropped), rows,
        )

    return GridLayout(
        rows=rows,
        columns=total_columns,
        matrix=matrix,
        positions=positions,
        dropped=dropped,
    )


def _advance(row: int, col: int, columns: int) -> tuple[int, int]:
    """Step the cursor one cell right, wrapping to the next row."""
    col += 1
    if col >= columns:
        return row + 1, 0
    return row, col
