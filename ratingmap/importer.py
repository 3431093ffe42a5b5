"""Catalog import — loads titles, chapters and ratings from a YAML file."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ratingmap.db import CatalogDB
from ratingmap.detail import format_number
from ratingmap.models import CatalogFile, ChapterEntry, MangaEntry

logger = logging.getLogger(__name__)


class ImportResult:
    """Summary of an import run."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.manga_new = 0
        self.manga_updated = 0
        self.chapters_new = 0
        self.chapters_updated = 0
        self.reviews_stored = 0

    @property
    def total_manga(self) -> int:
        return self.manga_new + self.manga_updated

    @property
    def total_chapters(self) -> int:
        return self.chapters_new + self.chapters_updated

    def __repr__(self) -> str:
        return (
            f"ImportResult({self.source}: "
            f"manga={self.manga_new} new/{self.total_manga}, "
            f"chapters={self.chapters_new} new/{self.total_chapters}, "
            f"reviews={self.reviews_stored})"
        )


def chapter_id_for(manga_id: str, entry: ChapterEntry) -> str:
    return entry.id or f"{manga_id}-{format_number(entry.number)}"


def parse_catalog(raw: dict[str, Any]) -> CatalogFile:
    """Validate a loaded catalog document.

    Raises:
        ValueError: with the validation details if the document is malformed.
    """
    try:
        catalog = CatalogFile(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid catalog: {e}") from e

    seen_ids: dict[str, str] = {}
    for manga in catalog.manga:
        numbers = [c.number for c in manga.chapters]
        if len(numbers) != len(set(numbers)):
            raise ValueError(f"Duplicate chapter numbers in '{manga.title}'")
        for chapter in manga.chapters:
            chapter_id = chapter_id_for(manga.id, chapter)
            if chapter_id in seen_ids:
                raise ValueError(
                    f"Chapter id {chapter_id} used by both "
                    f"'{seen_ids[chapter_id]}' and '{manga.title}'"
                )
            seen_ids[chapter_id] = manga.title
    return catalog


def load_catalog(path: Path) -> CatalogFile:
    if not path.exists():
        raise ValueError(f"Catalog file not found: {path}")
    raw = yaml.safe_load(path.read_text()) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Catalog {path} must be a mapping with a 'manga' list")
    return parse_catalog(raw)


def import_manga(entry: MangaEntry, db: CatalogDB, result: ImportResult) -> None:
    created = db.upsert_manga(
        manga_id=entry.id,
        title=entry.title,
        author=entry.author,
        cover_image=entry.cover_image,
        description=entry.description,
        status=entry.status,
        total_chapters=entry.total_chapters,
    )
    if created:
        result.manga_new += 1
    else:
        result.manga_updated += 1

    for chapter in sorted(entry.chapters, key=lambda c: c.number):
        chapter_id = chapter_id_for(entry.id, chapter)
        created = db.upsert_chapter(
            chapter_id=chapter_id,
            manga_id=entry.id,
            chapter_number=chapter.number,
            title=chapter.title,
            cover_image=chapter.cover_image,
            volume_number=chapter.volume,
            arc=chapter.arc,
            release_date=chapter.release_date,
        )
        if created:
            result.chapters_new += 1
        else:
            result.chapters_updated += 1

        if chapter.ratings:
            result.reviews_stored += db.replace_reviews(chapter_id, chapter.ratings)

    logger.info("Imported %s (%d chapters)", entry.title, len(entry.chapters))


def import_catalog(path: Path, db: CatalogDB) -> ImportResult:
    """Load a YAML catalog into the database.

    Titles and chapters are upserted by id; ratings listed for a chapter
    replace whatever reviews it had. The run is one transaction: a failure
    on any title leaves the database as it was.
    """
    catalog = load_catalog(path)
    result = ImportResult(path.name)
    with db.transaction():
        for entry in catalog.manga:
            import_manga(entry, db, result)
    return result
