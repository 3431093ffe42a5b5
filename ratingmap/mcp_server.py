#!/usr/bin/env python3
"""Ratingmap MCP Server — browse titles and chapter ratings."""

import json
import logging
import sys
from typing import Optional

from mcp.server.fastmcp import FastMCP

from ratingmap import browse
from ratingmap.config import Config, load_config
from ratingmap.db import CatalogDB

mcp = FastMCP("ratingmap")
logger = logging.getLogger(__name__)

_db: CatalogDB | None = None
_config: Config | None = None


def _get_config() -> Config:
    global _config
    if _config is None:
        _config = load_config()
    return _config


def _get_db() -> CatalogDB:
    global _db
    if _db is None:
        _db = CatalogDB(_get_config())
        _db.init_db()
    return _db


@mcp.tool()
def list_titles() -> str:
    """List catalog titles with chapter counts, review counts and average rating."""
    try:
        return json.dumps(browse.list_titles(_get_db()))
    except ValueError as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def get_chapter_grid(
    title: str,
    page: Optional[int] = None,
    metric: Optional[str] = None,
    grouping: Optional[str] = None,
    selected_chapter: Optional[float] = None,
) -> str:
    """Get one page (0-based) of the chapter grid with cell colors and legend.

    Without a page, shows the page holding selected_chapter (or the first page).
    metric: rating | volume | arc | year. grouping: none | volume | arc | year.
    """
    try:
        result = browse.get_chapter_grid(
            title, _get_db(), _get_config(),
            page=page, metric=metric, grouping=grouping, select=selected_chapter,
        )
        return json.dumps(result)
    except ValueError as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def get_rating_trend(title: str, selected_chapter: Optional[float] = None) -> str:
    """Get per-chapter ratings, review counts and the rolling-average trend."""
    try:
        result = browse.get_rating_trend(
            title, _get_db(), _get_config(), select=selected_chapter,
        )
        return json.dumps(result)
    except ValueError as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def get_chapter_detail(title: str, chapter_number: float) -> str:
    """Get a chapter's heading, average rating and 1-10 rating histogram."""
    try:
        result = browse.get_chapter_detail(title, chapter_number, _get_db(), _get_config())
        return json.dumps(result)
    except ValueError as e:
        return json.dumps({"error": str(e)})


def main() -> None:
    # stdout carries the MCP stdio transport, so logs go to stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run()


if __name__ == "__main__":
    main()
