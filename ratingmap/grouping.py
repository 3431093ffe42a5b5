"""Group keys: the categorical value of a chapter under a grouping mode."""

from ratingmap.models import ChapterRecord, Grouping


class _Sentinel:
    """Named marker that never equals a real volume, arc or year."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<{self.name}>"


UNGROUPED = _Sentinel("ungrouped")
MISSING = _Sentinel("missing")

GroupKey = int | str | _Sentinel


def group_key(chapter: ChapterRecord, mode: Grouping) -> GroupKey:
    """Return the chapter's key under mode.

    Absent source fields (and blank arc labels) map to MISSING. MISSING
    equals itself, so consecutive chapters without the field form one group.
    """
    if mode == Grouping.NONE:
        return UNGROUPED
    if mode == Grouping.VOLUME:
        return chapter.volume_number if chapter.volume_number is not None else MISSING
    if mode == Grouping.ARC:
        if chapter.arc is None or not chapter.arc.strip():
            return MISSING
        return chapter.arc
    if mode == Grouping.YEAR:
        return chapter.release_date.year if chapter.release_date is not None else MISSING
    raise ValueError(f"Unknown grouping mode: {mode}")


def is_missing(key: GroupKey) -> bool:
    return key is MISSING
