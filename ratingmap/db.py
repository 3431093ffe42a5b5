"""SQLite catalog store: titles, chapters and individual reviews.

Rating aggregates are computed in SQL on read; nothing derived from them
(layout, colors, trend) is ever written back.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date

from ratingmap.config import Config
from ratingmap.models import ChapterRecord, MangaRow

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS manga (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    author TEXT,
    cover_image TEXT NOT NULL DEFAULT '',
    description TEXT,
    status TEXT,
    total_chapters INTEGER,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS chapters (
    id TEXT PRIMARY KEY,
    manga_id TEXT NOT NULL REFERENCES manga(id) ON DELETE CASCADE,
    chapter_number REAL NOT NULL CHECK (chapter_number > 0),
    title TEXT,
    cover_image TEXT NOT NULL DEFAULT '',
    volume_number INTEGER,
    arc TEXT,
    release_date TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(manga_id, chapter_number)
);

CREATE TABLE IF NOT EXISTS reviews (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    chapter_id TEXT NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
    rating REAL NOT NULL CHECK (rating >= 0 AND rating <= 10),
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_chapters_manga_number ON chapters(manga_id, chapter_number);
CREATE INDEX IF NOT EXISTS idx_reviews_chapter ON reviews(chapter_id);
"""

_CHAPTER_RECORDS_SQL = """
SELECT c.id, c.chapter_number, c.title, c.cover_image, c.volume_number,
       c.arc, c.release_date,
       AVG(r.rating) AS avg_rating,
       COUNT(r.id) AS review_count
FROM chapters c
LEFT JOIN reviews r ON r.chapter_id = c.id
WHERE c.manga_id = ?
GROUP BY c.id
ORDER BY c.chapter_number
"""


class CatalogDB:
    """SQLite database wrapper for the manga catalog."""

    def __init__(self, config: Config) -> None:
        self.db_path = config.resolved_db_path
        self._conn: sqlite3.Connection | None = None
        self._in_transaction = False

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database not initialized. Call init_db() first.")
        return self._conn

    def init_db(self) -> None:
        """Create database and tables."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(SCHEMA_SQL)
        logger.info("Database initialized at %s", self.db_path)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def _commit(self) -> None:
        if not self._in_transaction:
            self.conn.commit()

    @contextmanager
    def transaction(self) -> Iterator["CatalogDB"]:
        """Group writes into one commit; any exception rolls them all back."""
        self._in_transaction = True
        try:
            yield self
        except Exception:
            self.conn.rollback()
            raise
        else:
            self.conn.commit()
        finally:
            self._in_transaction = False

    # --- Manga operations ---

    def upsert_manga(
        self,
        manga_id: str,
        title: str,
        author: str | None = None,
        cover_image: str = "",
        description: str | None = None,
        status: str | None = None,
        total_chapters: int | None = None,
    ) -> bool:
        """Insert or update a title. Returns True if it was newly created."""
        existed = self.conn.execute(
            "SELECT 1 FROM manga WHERE id = ?", (manga_id,)
        ).fetchone() is not None
        self.conn.execute(
            """INSERT INTO manga (id, title, author, cover_image, description, status, total_chapters)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                 title = excluded.title,
                 author = excluded.author,
                 cover_image = excluded.cover_image,
                 description = excluded.description,
                 status = excluded.status,
                 total_chapters = excluded.total_chapters""",
            (manga_id, title, author, cover_image, description, status, total_chapters),
        )
        self._commit()
        return not existed

    def get_manga(self, manga_id: str) -> MangaRow | None:
        row = self.conn.execute(
            f"{self._manga_select()} WHERE m.id = ?", (manga_id,)
        ).fetchone()
        return MangaRow(**dict(row)) if row else None

    def find_manga(self, key: str) -> MangaRow | None:
        """Look a title up by id, then by case-insensitive title."""
        manga = self.get_manga(key)
        if manga:
            return manga
        row = self.conn.execute(
            f"{self._manga_select()} WHERE LOWER(m.title) = LOWER(?)", (key,)
        ).fetchone()
        return MangaRow(**dict(row)) if row else None

    def list_manga(self) -> list[MangaRow]:
        rows = self.conn.execute(f"{self._manga_select()} ORDER BY m.title").fetchall()
        return [MangaRow(**dict(r)) for r in rows]

    @staticmethod
    def _manga_select() -> str:
        # Stated chapter total wins; otherwise count what's stored
        return """
            SELECT m.id, m.title, m.author, m.cover_image, m.description, m.status,
                   COALESCE(m.total_chapters,
                            (SELECT COUNT(*) FROM chapters c WHERE c.manga_id = m.id))
                       AS total_chapters
            FROM manga m"""

    # --- Chapter operations ---

    def upsert_chapter(
        self,
        chapter_id: str,
        manga_id: str,
        chapter_number: int | float,
        title: str | None = None,
        cover_image: str = "",
        volume_number: int | None = None,
        arc: str | None = None,
        release_date: date | None = None,
    ) -> bool:
        """Insert or update a chapter. Returns True if it was newly created.

        Raises:
            ValueError: if the chapter id belongs to another title, or the
                title already stores this chapter number under a different id.
        """
        existing = self.conn.execute(
            "SELECT manga_id FROM chapters WHERE id = ?", (chapter_id,)
        ).fetchone()
        if existing and existing["manga_id"] != manga_id:
            raise ValueError(
                f"Chapter id {chapter_id} already belongs to {existing['manga_id']}"
            )
        try:
            self._write_chapter(
                chapter_id, manga_id, chapter_number, title, cover_image,
                volume_number, arc, release_date,
            )
        except sqlite3.IntegrityError as e:
            if not self._in_transaction:
                self.conn.rollback()
            if "UNIQUE" not in str(e):
                raise
            raise ValueError(
                f"Chapter {chapter_number} of {manga_id} already stored under another id"
            ) from e
        self._commit()
        return existing is None

    def _write_chapter(
        self,
        chapter_id: str,
        manga_id: str,
        chapter_number: int | float,
        title: str | None,
        cover_image: str,
        volume_number: int | None,
        arc: str | None,
        release_date: date | None,
    ) -> None:
        self.conn.execute(
            """INSERT INTO chapters
               (id, manga_id, chapter_number, title, cover_image, volume_number, arc, release_date)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                 chapter_number = excluded.chapter_number,
                 title = excluded.title,
                 cover_image = excluded.cover_image,
                 volume_number = excluded.volume_number,
                 arc = excluded.arc,
                 release_date = excluded.release_date""",
            (
                chapter_id,
                manga_id,
                chapter_number,
                title,
                cover_image,
                volume_number,
                arc,
                release_date.isoformat() if release_date else None,
            ),
        )

    def count_chapters(self, manga_id: str) -> int:
        row = self.conn.execute(
            "SELECT COUNT(*) AS cnt FROM chapters WHERE manga_id = ?", (manga_id,)
        ).fetchone()
        return row["cnt"] if row else 0

    def get_chapter_records(
        self,
        manga_id: str,
        with_ratings: bool = False,
    ) -> list[ChapterRecord]:
        """All chapters of a title with rating aggregates, ascending by number.

        with_ratings also attaches each chapter's individual ratings, which
        only the detail histogram needs.
        """
        rows = self.conn.execute(_CHAPTER_RECORDS_SQL, (manga_id,)).fetchall()
        ratings: dict[str, list[float]] = {}
        if with_ratings:
            for r in self.conn.execute(
                """SELECT r.chapter_id, r.rating FROM reviews r
                   JOIN chapters c ON c.id = r.chapter_id
                   WHERE c.manga_id = ? ORDER BY r.id""",
                (manga_id,),
            ):
                ratings.setdefault(r["chapter_id"], []).append(r["rating"])

        records: list[ChapterRecord] = []
        for row in rows:
            data = dict(row)
            data["cover_image"] = data["cover_image"] or ""
            data["ratings"] = tuple(ratings.get(data["id"], ()))
            records.append(ChapterRecord(**data))
        return records

    # --- Review operations ---

    def add_review(self, chapter_id: str, rating: float) -> int:
        cursor = self.conn.execute(
            "INSERT INTO reviews (chapter_id, rating) VALUES (?, ?)",
            (chapter_id, rating),
        )
        self._commit()
        return cursor.lastrowid  # type: ignore[return-value]

    def replace_reviews(self, chapter_id: str, ratings: list[float]) -> int:
        """Drop a chapter's reviews and store ratings instead. Returns count stored."""
        self.conn.execute("DELETE FROM reviews WHERE chapter_id = ?", (chapter_id,))
        self.conn.executemany(
            "INSERT INTO reviews (chapter_id, rating) VALUES (?, ?)",
            [(chapter_id, r) for r in ratings],
        )
        self._commit()
        return len(ratings)

    def get_chapter_ratings(self, chapter_id: str) -> list[float]:
        rows = self.conn.execute(
            "SELECT rating FROM reviews WHERE chapter_id = ? ORDER BY id", (chapter_id,)
        ).fetchall()
        return [r["rating"] for r in rows]

    def count_reviews(self, manga_id: str | None = None) -> int:
        if manga_id:
            row = self.conn.execute(
                """SELECT COUNT(*) AS cnt FROM reviews r
                   JOIN chapters c ON c.id = r.chapter_id WHERE c.manga_id = ?""",
                (manga_id,),
            ).fetchone()
        else:
            row = self.conn.execute("SELECT COUNT(*) AS cnt FROM reviews").fetchone()
        return row["cnt"] if row else 0
