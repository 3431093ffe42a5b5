"""Selection and hover state shared by (or scoped to) the chapter views."""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

ChapterNumber = int | float
SelectionListener = Callable[[ChapterNumber | None], None]


class SelectionState:
    """The single selected chapter, by chapter_number.

    Grid, timeline, chart and detail views all read this value; selecting
    from any of them notifies every subscriber.
    """

    def __init__(self, selected: ChapterNumber | None = None) -> None:
        self._selected = selected
        self._listeners: list[SelectionListener] = []

    @property
    def selected(self) -> ChapterNumber | None:
        return self._selected

    def subscribe(self, listener: SelectionListener) -> None:
        self._listeners.append(listener)

    def select(self, chapter_number: ChapterNumber | None) -> bool:
        """Set the selection. Returns False (and stays quiet) if unchanged."""
        if chapter_number == self._selected:
            return False
        self._selected = chapter_number
        logger.debug("Selected chapter %s", chapter_number)
        for listener in self._listeners:
            listener(chapter_number)
        return True

    def clear(self) -> bool:
        return self.select(None)

    def is_selected(self, chapter_number: ChapterNumber | None) -> bool:
        return chapter_number is not None and chapter_number == self._selected


class HoverState:
    """Transient per-view hover. Feeds tooltips only."""

    def __init__(self) -> None:
        self.hovered: ChapterNumber | None = None

    def enter(self, chapter_number: ChapterNumber) -> None:
        self.hovered = chapter_number

    def leave(self) -> None:
        self.hovered = None
