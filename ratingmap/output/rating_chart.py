"""Rating chart — per-chapter ratings, moving average and review volume as a PNG.

Left axis: rating 0-10 (dots + moving-average line).
Right axis: review count 0..review_axis_max (background bars).
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw

from ratingmap.browse import load_section
from ratingmap.config import Config
from ratingmap.db import CatalogDB
from ratingmap.detail import format_number
from ratingmap.models import RatingChart
from ratingmap.output._style import (
    ACCENT_GREEN,
    ACCENT_ORANGE,
    BG,
    DIVIDER,
    TEXT,
    TEXT_DIM,
    WHITE,
    blend,
    font,
)

logger = logging.getLogger(__name__)

MARGIN_LEFT = 64
MARGIN_RIGHT = 72
MARGIN_TOP = 70
MARGIN_BOTTOM = 54
MAX_X_LABELS = 12

BAR_COLOR = blend((*ACCENT_ORANGE, 56), BG)


def _x_label_step(n_points: int) -> int:
    return max(1, -(-n_points // MAX_X_LABELS))


def render_rating_chart(
    chart: RatingChart,
    output_path: Path,
    title: str = "",
    width: int = 1200,
    height: int = 480,
) -> Path:
    """Render a RatingChart as a PNG image."""
    img = Image.new("RGB", (width, height), BG)
    draw = ImageDraw.Draw(img)

    plot_left = MARGIN_LEFT
    plot_right = width - MARGIN_RIGHT
    plot_top = MARGIN_TOP
    plot_bottom = height - MARGIN_BOTTOM
    plot_w = plot_right - plot_left
    plot_h = plot_bottom - plot_top

    n = len(chart.points)
    slot = plot_w / max(n, 1)

    def x_at(i: int) -> float:
        return plot_left + (i + 0.5) * slot

    def rating_y(value: float) -> float:
        return plot_bottom - value / 10 * plot_h

    def reviews_y(count: int) -> float:
        return plot_bottom - count / max(chart.review_axis_max, 1) * plot_h

    # --- Header + series legend ---
    draw.text((plot_left, 16), title or "Chapter Ratings", font=font(18, bold=True), fill=TEXT)
    legend_font = font(11)
    lx = plot_left
    ly = 44
    draw.ellipse([lx, ly + 2, lx + 8, ly + 10], fill=ACCENT_ORANGE)
    lx += 14
    draw.text((lx, ly), "Chapter Rating", font=legend_font, fill=TEXT_DIM)
    lx += int(draw.textlength("Chapter Rating", font=legend_font)) + 20
    draw.line([(lx, ly + 6), (lx + 18, ly + 6)], fill=ACCENT_GREEN, width=3)
    lx += 24
    avg_label = f"{chart.window}-Chapter Moving Avg"
    draw.text((lx, ly), avg_label, font=legend_font, fill=TEXT_DIM)
    lx += int(draw.textlength(avg_label, font=legend_font)) + 20
    draw.rectangle([lx, ly + 1, lx + 10, ly + 11], fill=BAR_COLOR)
    lx += 16
    draw.text((lx, ly), "Review Volume", font=legend_font, fill=TEXT_DIM)

    # --- Axes + grid lines ---
    axis_font = font(10, mono=True)
    for value in range(0, 11, 2):
        y = rating_y(value)
        draw.line([(plot_left, y), (plot_right, y)], fill=DIVIDER, width=1)
        draw.text((plot_left - 8, y), str(value), font=axis_font, fill=TEXT_DIM, anchor="rm")
    for count in (0, chart.review_axis_max // 2, chart.review_axis_max):
        draw.text((plot_right + 8, reviews_y(count)), str(count), font=axis_font, fill=TEXT_DIM, anchor="lm")
    draw.text((plot_left, plot_bottom + 30), "Chapter", font=font(11), fill=TEXT_DIM)
    draw.text((8, plot_top - 24), "Rating (1-10)", font=font(10), fill=TEXT_DIM)
    draw.text((plot_right - 20, plot_top - 24), "Review Count", font=font(10), fill=TEXT_DIM)

    if n == 0:
        draw.text(
            (plot_left + plot_w / 2, plot_top + plot_h / 2),
            "No chapters yet", font=font(14), fill=TEXT_DIM, anchor="mm",
        )
    else:
        # --- Review volume bars ---
        bar_w = max(slot * 0.8, 1)
        for i, point in enumerate(chart.points):
            if point.review_count <= 0:
                continue
            cx = x_at(i)
            draw.rectangle(
                [cx - bar_w / 2, reviews_y(point.review_count), cx + bar_w / 2, plot_bottom],
                fill=BAR_COLOR,
            )

        # --- X labels ---
        step = _x_label_step(n)
        for i, point in enumerate(chart.points):
            if i % step == 0 or i == n - 1:
                draw.text(
                    (x_at(i), plot_bottom + 6), format_number(point.chapter_number),
                    font=axis_font, fill=TEXT_DIM, anchor="mt",
                )

        # --- Rating dots ---
        selected_index: int | None = None
        for i, point in enumerate(chart.points):
            if point.rating is None:
                continue
            if point.chapter_number == chart.selected_chapter:
                selected_index = i
                continue
            cx, cy = x_at(i), rating_y(point.rating)
            draw.ellipse([cx - 3, cy - 3, cx + 3, cy + 3], fill=ACCENT_ORANGE)

        # --- Moving average (connects across chapters without ratings) ---
        line = [
            (x_at(i), rating_y(p.moving_average))
            for i, p in enumerate(chart.points)
            if p.moving_average is not None
        ]
        if len(line) >= 2:
            draw.line(line, fill=ACCENT_GREEN, width=4, joint="curve")
        elif line:
            x, y = line[0]
            draw.ellipse([x - 2, y - 2, x + 2, y + 2], fill=ACCENT_GREEN)

        # Selected dot last so it sits on top
        if selected_index is not None:
            point = chart.points[selected_index]
            cx, cy = x_at(selected_index), rating_y(point.rating or 0)
            draw.ellipse([cx - 6, cy - 6, cx + 6, cy + 6], fill=WHITE, outline=ACCENT_ORANGE, width=3)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(str(output_path), "PNG")
    logger.info("Rating chart saved to %s (%dx%d)", output_path, width, height)
    return output_path


def generate_rating_chart(
    db: CatalogDB,
    config: Config,
    title_key: str,
    select: int | float | None = None,
    output_path: Path | None = None,
) -> Path:
    """Render the rating chart for a title. Returns output path."""
    manga, section = load_section(title_key, db, config, select=select)

    if output_path is None:
        output_path = config.resolved_output_dir / f"{manga.id}_ratings.png"

    return render_rating_chart(
        section.chart(),
        output_path,
        title=manga.title,
        width=config.render.chart_width,
        height=config.render.chart_height,
    )
