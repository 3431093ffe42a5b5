"""Chapter grid image — one page of the rating grid as a PNG.

Rows = the fixed grid rows, columns = the page's computed column count.
Each cell carries its chapter number in the contrast label color; the
selected chapter gets an accent ring. The legend sits underneath.
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw

from ratingmap.browse import load_section
from ratingmap.colors import label_rgba
from ratingmap.config import Config
from ratingmap.db import CatalogDB
from ratingmap.detail import format_number
from ratingmap.models import ChapterGrid, Legend, LegendKind
from ratingmap.output._style import (
    ACCENT_ORANGE,
    BG,
    DIVIDER,
    TEXT,
    TEXT_DIM,
    blend,
    font,
    rgb,
)

logger = logging.getLogger(__name__)

# --- Layout ---

PADDING = 20
HEADER_HEIGHT = 64
LEGEND_ROW_HEIGHT = 18
LEGEND_SWATCH = 12
MIN_WIDTH = 600


def _legend_rows(legend: Legend, max_width: int) -> list[list[tuple[str, str]]]:
    """Wrap discrete legend items into rows that fit max_width."""
    measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    label_font = font(10)
    rows: list[list[tuple[str, str]]] = [[]]
    x = 0
    for item in legend.items:
        w = LEGEND_SWATCH + 6 + int(measure.textlength(item.label, font=label_font)) + 14
        if rows[-1] and x + w > max_width:
            rows.append([])
            x = 0
        rows[-1].append((item.label, item.color))
        x += w
    return rows if rows[0] else []


def render_grid(
    grid: ChapterGrid,
    output_path: Path,
    title: str = "",
    cell_size: int = 28,
    cell_gap: int = 4,
) -> Path:
    """Render a ChapterGrid as a PNG image."""
    cell_step = cell_size + cell_gap
    grid_width = grid.columns * cell_step - cell_gap
    width = max(PADDING + grid_width + PADDING, MIN_WIDTH)

    if grid.legend.kind == LegendKind.GRADIENT:
        legend_rows = 1
        discrete_rows: list[list[tuple[str, str]]] = []
    else:
        discrete_rows = _legend_rows(grid.legend, width - 2 * PADDING)
        legend_rows = max(len(discrete_rows), 1)

    height = (
        PADDING + HEADER_HEIGHT
        + grid.rows * cell_step
        + 16 + legend_rows * LEGEND_ROW_HEIGHT
        + PADDING
    )

    img = Image.new("RGB", (width, height), BG)
    draw = ImageDraw.Draw(img)

    # --- Header ---
    y = PADDING
    draw.text((PADDING, y), title or "Chapter Ratings", font=font(20, bold=True), fill=TEXT)
    y += 28
    subtitle = (
        f"Chapters {grid.first_chapter}-{grid.last_chapter} of {grid.total_chapters} · "
        f"page {grid.page + 1} of {grid.total_pages} · colored by {grid.metric.value}"
    )
    if grid.grouping.value != "none":
        subtitle += f" · grouped by {grid.grouping.value}"
    draw.text((PADDING, y), subtitle, font=font(12), fill=TEXT_DIM)
    y += 20
    draw.line([(PADDING, y + 4), (width - PADDING, y + 4)], fill=DIVIDER, width=1)
    y = PADDING + HEADER_HEIGHT

    # --- Grid ---
    label_font = font(max(cell_size // 3, 8), mono=True)
    for row in grid.cells:
        for cell in row:
            x0 = PADDING + cell.col * cell_step
            y0 = y + cell.row * cell_step
            bg = rgb(cell.background_color)
            draw.rounded_rectangle(
                [x0, y0, x0 + cell_size, y0 + cell_size],
                radius=3,
                fill=bg,
                outline=ACCENT_ORANGE if cell.is_selected else None,
                width=2 if cell.is_selected else 0,
            )
            if cell.chapter_number is None:
                continue
            label = format_number(cell.chapter_number)
            draw.text(
                (x0 + cell_size / 2, y0 + cell_size / 2),
                label,
                font=label_font,
                fill=blend(label_rgba(cell.background_color), bg),
                anchor="mm",
            )

    y += grid.rows * cell_step + 8

    # --- Legend ---
    draw.line([(PADDING, y), (width - PADDING, y)], fill=DIVIDER, width=1)
    y += 8
    legend_font = font(10)
    lx = PADDING

    if grid.legend.kind == LegendKind.GRADIENT:
        low = grid.legend.low_label or ""
        draw.text((lx, y), low, font=legend_font, fill=TEXT_DIM)
        lx += int(draw.textlength(low, font=legend_font)) + 8
        for color in grid.legend.colors:
            draw.rounded_rectangle(
                [lx, y, lx + LEGEND_SWATCH, y + LEGEND_SWATCH], radius=2, fill=rgb(color),
            )
            lx += LEGEND_SWATCH + 3
        draw.text((lx + 5, y), grid.legend.high_label or "", font=legend_font, fill=TEXT_DIM)
    else:
        for legend_row in discrete_rows:
            lx = PADDING
            for label, color in legend_row:
                draw.rounded_rectangle(
                    [lx, y, lx + LEGEND_SWATCH, y + LEGEND_SWATCH], radius=2, fill=rgb(color),
                )
                lx += LEGEND_SWATCH + 6
                draw.text((lx, y), label, font=legend_font, fill=TEXT_DIM)
                lx += int(draw.textlength(label, font=legend_font)) + 14
            y += LEGEND_ROW_HEIGHT

    # Save
    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(str(output_path), "PNG")
    logger.info("Grid saved to %s (%dx%d)", output_path, width, height)
    return output_path


def generate_grid_image(
    db: CatalogDB,
    config: Config,
    title_key: str,
    page: int | None = None,
    metric: str | None = None,
    grouping: str | None = None,
    select: int | float | None = None,
    output_path: Path | None = None,
) -> Path:
    """Render one grid page for a title. Returns output path."""
    manga, section = load_section(
        title_key, db, config, metric=metric, grouping=grouping, page=page, select=select,
    )
    grid = section.grid()
    if grid is None:
        raise ValueError(f"No chapters for {manga.title}")

    if output_path is None:
        output_path = (
            config.resolved_output_dir
            / f"{manga.id}_grid_p{grid.page + 1}_{grid.metric.value}.png"
        )

    return render_grid(
        grid,
        output_path,
        title=manga.title,
        cell_size=config.render.cell_size,
        cell_gap=config.render.cell_gap,
    )
