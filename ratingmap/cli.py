"""CLI entry point for the chapter rating browser."""

import argparse
import logging
import sys
from pathlib import Path

from ratingmap.browse import get_chapter_detail, list_titles, load_section, title_overview
from ratingmap.config import load_config
from ratingmap.db import CatalogDB
from ratingmap.detail import format_number
from ratingmap.importer import import_catalog
from ratingmap.models import Grouping, Metric

METRICS = [m.value for m in Metric]
GROUPINGS = [g.value for g in Grouping]


def _fmt_rating(value: float | None) -> str:
    return f"{value:.1f}" if value is not None else "-"


def _page_index(page: int | None) -> int | None:
    """CLI pages are 1-based."""
    return page - 1 if page is not None else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chapter rating browser")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # import command
    import_parser = sub.add_parser("import", help="Import a YAML catalog of titles and ratings")
    import_parser.add_argument("catalog", type=Path, help="Path to the catalog YAML file")

    # list command
    sub.add_parser("list", help="List titles")

    # show command
    show_parser = sub.add_parser("show", help="Show title metadata and rating highlights")
    show_parser.add_argument("title", help="Title id or name")

    # grid command
    grid_parser = sub.add_parser("grid", help="Render a page of the chapter grid as PNG")
    grid_parser.add_argument("title", help="Title id or name")
    grid_parser.add_argument("--page", type=int, default=None, help="Page number (1-based)")
    grid_parser.add_argument("--metric", choices=METRICS, default=None)
    grid_parser.add_argument("--grouping", choices=GROUPINGS, default=None)
    grid_parser.add_argument("--select", type=float, default=None, help="Chapter number to highlight")
    grid_parser.add_argument("--output", type=Path, default=None, help="Output PNG path")

    # chart command
    chart_parser = sub.add_parser("chart", help="Render the rating trend chart as PNG")
    chart_parser.add_argument("title", help="Title id or name")
    chart_parser.add_argument("--select", type=float, default=None, help="Chapter number to highlight")
    chart_parser.add_argument("--output", type=Path, default=None, help="Output PNG path")

    # trend command
    trend_parser = sub.add_parser("trend", help="Print ratings with the moving average")
    trend_parser.add_argument("title", help="Title id or name")

    # chapter command
    chapter_parser = sub.add_parser("chapter", help="Show one chapter's rating breakdown")
    chapter_parser.add_argument("title", help="Title id or name")
    chapter_parser.add_argument("number", type=float, help="Chapter number")

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return

    config = load_config(args.config)
    db = CatalogDB(config)
    db.init_db()

    try:
        if args.command == "import":
            result = import_catalog(args.catalog, db)
            print(result)

        elif args.command == "list":
            titles = list_titles(db)
            if not titles:
                print("No titles imported yet.")
                return
            for t in titles:
                print(
                    f"  {t['title']} [{t['id']}]: {t['chapters']} chapters, "
                    f"{t['reviews']} reviews, avg {_fmt_rating(t['average_rating'])}"  # type: ignore[arg-type]
                )

        elif args.command == "show":
            info = title_overview(args.title, db)
            print(f"{info['title']}" + (f" by {info['author']}" if info["author"] else ""))
            if info["status"]:
                print(f"  Status: {info['status']}")
            print(f"  Chapters: {info['total_chapters']} ({info['rated_chapters']} rated)")
            print(f"  Reviews: {info['reviews']}")
            print(f"  Average: {_fmt_rating(info['average_rating'])}")  # type: ignore[arg-type]
            if info["best_chapter"] is not None:
                print(f"  Best chapter: {format_number(info['best_chapter'])}")  # type: ignore[arg-type]
                print(f"  Worst chapter: {format_number(info['worst_chapter'])}")  # type: ignore[arg-type]
            if info["description"]:
                print(f"\n{info['description']}")

        elif args.command == "grid":
            from ratingmap.output.grid_image import generate_grid_image

            path = generate_grid_image(
                db, config, args.title,
                page=_page_index(args.page),
                metric=args.metric,
                grouping=args.grouping,
                select=args.select,
                output_path=args.output,
            )
            print(f"Output: {path}")

        elif args.command == "chart":
            from ratingmap.output.rating_chart import generate_rating_chart

            path = generate_rating_chart(
                db, config, args.title, select=args.select, output_path=args.output,
            )
            print(f"Output: {path}")

        elif args.command == "trend":
            manga, section = load_section(args.title, db, config)
            chart = section.chart()
            print(f"{manga.title}: {len(chart.points)} chapters, {chart.window}-chapter moving average")
            for p in chart.points:
                print(
                    f"  ch {format_number(p.chapter_number):>6}  "
                    f"rating {_fmt_rating(p.rating):>4}  "
                    f"avg {_fmt_rating(p.moving_average):>4}  "
                    f"reviews {p.review_count}"
                )

        elif args.command == "chapter":
            detail = get_chapter_detail(args.title, args.number, db, config)
            print(detail["heading"])
            if not detail["has_ratings"]:
                print("  No ratings yet")
                return
            print(f"  {detail['review_count']} ratings, average {_fmt_rating(detail['avg_rating'])}")  # type: ignore[arg-type]
            histogram: list[int] = detail["histogram"]  # type: ignore[assignment]
            peak = max(max(histogram), 1)
            for star, count in enumerate(histogram, start=1):
                bar = "#" * round(count / peak * 30)
                print(f"  {star:>2} | {bar} {count}")

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
