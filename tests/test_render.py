"""Tests for the PNG grid and chart renderers."""

import pytest
from PIL import Image

from ratingmap.config import Config, RenderConfig
from ratingmap.models import RatingChart
from ratingmap.output.grid_image import generate_grid_image, render_grid
from ratingmap.output.rating_chart import generate_rating_chart, render_rating_chart
from ratingmap.section import ChapterSection


@pytest.fixture()
def render_config(tmp_path):
    return Config(render=RenderConfig(output_dir=str(tmp_path / "renders")))


class TestRenderGrid:
    def test_writes_png(self, tmp_path, make_chapter):
        chapters = [make_chapter(n, avg_rating=n % 10) for n in range(1, 24)]
        grid = ChapterSection(chapters).grid()
        path = render_grid(grid, tmp_path / "out" / "grid.png", title="Test")

        assert path.exists()
        with Image.open(path) as img:
            assert img.format == "PNG"
            # 20 columns of 28px cells with 4px gaps, plus padding
            assert img.width == 20 + 20 * 32 - 4 + 20

    def test_discrete_legend(self, tmp_path, make_chapter):
        chapters = [make_chapter(n, volume_number=n) for n in range(1, 40)]
        grid = ChapterSection(chapters, metric="volume").grid()
        path = render_grid(grid, tmp_path / "grid.png")
        assert path.exists()


class TestGenerateGridImage:
    def test_default_path(self, populated_db, render_config, tmp_path):
        path = generate_grid_image(populated_db, render_config, "Harbor Lights")
        assert path == tmp_path / "renders" / "harbor-lights_grid_p1_rating.png"
        assert path.exists()

    def test_explicit_path(self, populated_db, render_config, tmp_path):
        out = tmp_path / "custom.png"
        path = generate_grid_image(
            populated_db, render_config, "harbor-lights",
            metric="year", grouping="volume", select=3, output_path=out,
        )
        assert path == out
        assert out.exists()

    def test_empty_title(self, populated_db, render_config):
        with pytest.raises(ValueError, match="No chapters"):
            generate_grid_image(populated_db, render_config, "quiet-orbit")


class TestRatingChart:
    def test_generate(self, populated_db, render_config, tmp_path):
        path = generate_rating_chart(populated_db, render_config, "harbor-lights", select=4)
        assert path == tmp_path / "renders" / "harbor-lights_ratings.png"
        with Image.open(path) as img:
            assert img.size == (1200, 480)

    def test_empty_chart(self, tmp_path):
        chart = RatingChart(points=[], review_axis_max=10, window=10)
        path = render_rating_chart(chart, tmp_path / "empty.png", width=400, height=200)
        with Image.open(path) as img:
            assert img.size == (400, 200)
