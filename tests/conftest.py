"""Shared test fixtures for ratingmap tests."""

from datetime import date

import pytest

from ratingmap.config import Config
from ratingmap.db import CatalogDB
from ratingmap.models import ChapterRecord
from ratingmap.section import clear_caches


@pytest.fixture(autouse=True)
def _fresh_caches():
    """Memoized layout/color/trend results never leak between tests."""
    clear_caches()
    yield
    clear_caches()


@pytest.fixture()
def make_chapter():
    """Factory for ChapterRecords keyed by chapter number."""

    def _make(number, **fields) -> ChapterRecord:
        return ChapterRecord(id=f"ch-{number}", chapter_number=number, **fields)

    return _make


@pytest.fixture()
def tmp_db(tmp_path):
    """Create a CatalogDB backed by a temp file."""
    config = Config(db_path=str(tmp_path / "test.db"))
    db = CatalogDB(config)
    db.init_db()
    yield db
    db.close()


@pytest.fixture()
def populated_db(tmp_db):
    """DB pre-loaded with 2 titles: one with 5 chapters and 7 reviews, one empty."""
    db = tmp_db

    db.upsert_manga(
        "harbor-lights", "Harbor Lights", author="M. Okada",
        description="A lighthouse keeper's daughter goes to sea.", status="ongoing",
    )
    db.upsert_manga("quiet-orbit", "Quiet Orbit", author="R. Vance", total_chapters=12)

    chapters = [
        # number, title, volume, arc, release, ratings
        (1, "Setting Sail", 1, "Departure", date(2020, 1, 5), [8, 9]),
        (2, None, 1, "Departure", date(2020, 2, 5), [6]),
        (3, None, 2, "Storm", date(2020, 3, 5), []),
        (4, None, 2, "Storm", date(2021, 1, 10), [10, 7, 7]),
        (5, None, 3, None, None, [3.5]),
    ]
    for number, title, volume, arc, released, ratings in chapters:
        chapter_id = f"harbor-lights-{number}"
        db.upsert_chapter(
            chapter_id, "harbor-lights", number,
            title=title, volume_number=volume, arc=arc, release_date=released,
        )
        if ratings:
            db.replace_reviews(chapter_id, ratings)

    return db
