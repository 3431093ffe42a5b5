"""Browse layer — title lookup and JSON-ready views for the CLI and MCP server."""

import logging

from ratingmap.config import Config
from ratingmap.db import CatalogDB
from ratingmap.detail import format_number
from ratingmap.models import ChapterRecord, Grouping, MangaRow, Metric
from ratingmap.section import ChapterSection

logger = logging.getLogger(__name__)


def resolve_title(key: str, db: CatalogDB) -> MangaRow:
    manga = db.find_manga(key)
    if not manga:
        raise ValueError(f"Title not found: {key}")
    return manga


def load_section(
    key: str,
    db: CatalogDB,
    config: Config,
    metric: Metric | str | None = None,
    grouping: Grouping | str | None = None,
    page: int | None = None,
    select: int | float | None = None,
) -> tuple[MangaRow, ChapterSection]:
    """Build a ChapterSection for a title, optionally positioned and selected.

    When a chapter is selected without an explicit page, the section moves to
    the page holding that chapter.

    Raises:
        ValueError: unknown title, metric, grouping or chapter, or a page
            outside the title's page range.
    """
    manga = resolve_title(key, db)
    chapters = db.get_chapter_records(manga.id, with_ratings=True)
    section = ChapterSection(chapters, config, metric=metric, grouping=grouping)

    if select is not None and section.chapter(select) is None:
        raise ValueError(f"Chapter {format_number(select)} not found in {manga.title}")
    if select is not None:
        section.select_chapter(select)

    # an empty title still has its (empty) first page
    if page is not None and not (section.is_empty and page == 0):
        if not section.paginator.is_valid(page):
            raise ValueError(
                f"Page {page + 1} out of range for {manga.title} "
                f"({section.total_pages} page(s))"
            )
        section.go_to_page(page)
    elif select is not None:
        section.reveal_selected()

    return manga, section


def _overall_average(chapters: list[ChapterRecord]) -> float | None:
    rated = [c.avg_rating for c in chapters if c.avg_rating is not None]
    return round(sum(rated) / len(rated), 2) if rated else None


def list_titles(db: CatalogDB) -> list[dict[str, object]]:
    """All titles with chapter and review counts, ordered by title."""
    result: list[dict[str, object]] = []
    for m in db.list_manga():
        chapters = db.get_chapter_records(m.id)
        result.append({
            "id": m.id,
            "title": m.title,
            "author": m.author,
            "cover_image": m.cover_image,
            "chapters": len(chapters),
            "reviews": sum(c.review_count for c in chapters),
            "average_rating": _overall_average(chapters),
        })
    return result


def title_overview(key: str, db: CatalogDB) -> dict[str, object]:
    """Title metadata plus rating highlights."""
    manga = resolve_title(key, db)
    chapters = db.get_chapter_records(manga.id)
    rated = [c for c in chapters if c.avg_rating is not None]
    best = max(rated, key=lambda c: c.avg_rating or 0, default=None)
    worst = min(rated, key=lambda c: c.avg_rating or 0, default=None)
    return {
        **manga.model_dump(),
        "stored_chapters": len(chapters),
        "rated_chapters": len(rated),
        "reviews": sum(c.review_count for c in chapters),
        "average_rating": _overall_average(chapters),
        "best_chapter": best.chapter_number if best else None,
        "worst_chapter": worst.chapter_number if worst else None,
    }


def get_chapter_grid(
    key: str,
    db: CatalogDB,
    config: Config,
    page: int | None = None,
    metric: str | None = None,
    grouping: str | None = None,
    select: int | float | None = None,
) -> dict[str, object]:
    """One grid page as JSON-ready data. Empty titles report empty=True."""
    manga, section = load_section(
        key, db, config, metric=metric, grouping=grouping, page=page, select=select,
    )
    grid = section.grid()
    if grid is None:
        return {"title": manga.title, "empty": True}
    return {"title": manga.title, "empty": False, **grid.model_dump(mode="json")}


def get_rating_trend(
    key: str,
    db: CatalogDB,
    config: Config,
    select: int | float | None = None,
) -> dict[str, object]:
    manga, section = load_section(key, db, config, select=select)
    return {"title": manga.title, **section.chart().model_dump(mode="json")}


def get_chapter_detail(
    key: str,
    chapter_number: int | float,
    db: CatalogDB,
    config: Config,
) -> dict[str, object]:
    manga, section = load_section(key, db, config, select=chapter_number)
    detail = section.detail()
    if detail is None:
        raise ValueError(f"Chapter {format_number(chapter_number)} not found in {manga.title}")
    return {"title": manga.title, **detail.model_dump(mode="json")}
