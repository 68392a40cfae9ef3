from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from datetime import date, datetime, time

from .content import Page
from .utils import extract_number_from_name, strip_number_prefix


def _date_key(value: date | None) -> tuple[bool, date, time]:
    # date and datetime do not compare with each other; split into (day, time).
    if value is None:
        return (False, date.min, time.min)
    if isinstance(value, datetime):
        return (True, value.date(), value.time())
    return (True, value, time.min)


class PageCollection(Sequence[Page]):
    """Read-only helper for filtering and ordering lists of Pages."""

    def __init__(self, pages: Iterable[Page]):
        self._pages = list(pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return PageCollection(self._pages[item])
        return self._pages[item]

    def section(self, name: str) -> PageCollection:
        return PageCollection(p for p in self._pages if p.section == name)

    def with_tag(self, tag: str) -> PageCollection:
        return PageCollection(p for p in self._pages if tag in p.tags)

    def in_category(self, category: str) -> PageCollection:
        return PageCollection(p for p in self._pages if category in p.categories)

    def drafts(self) -> PageCollection:
        return PageCollection(p for p in self._pages if p.draft)

    def published(self) -> PageCollection:
        return PageCollection(p for p in self._pages if not p.draft)

    def sorted(self, reverse: bool = True) -> PageCollection:
        """Sort pages by date, then by number prefix, then by filename.

        Sorting order (when reverse=True, the default):
        1. Date: newest first, undated pages last
        2. Number: if dates are equal, by number prefix (e.g., 01-intro.md)
        3. Filename: if dates and numbers are equal, by filename
           (excluding date and number prefixes)

        Args:
            reverse: If True (default), newest/highest first. If False, oldest/lowest first.

        Returns:
            A new PageCollection with sorted pages.
        """

        def sort_key(p: Page):
            stem = p.source.stem
            number = extract_number_from_name(stem)
            num_key = number if number is not None else (0 if not reverse else float("inf"))
            return (_date_key(p.date), num_key, strip_number_prefix(stem).lower())

        return PageCollection(sorted(self._pages, key=sort_key, reverse=reverse))

    def latest(self, count: int = 5) -> PageCollection:
        return self.sorted()[:count]

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageCollection({len(self._pages)} pages)"


class LabelCollection(Mapping[str, PageCollection]):
    """Mapping of tag or category label to PageCollection."""

    def __init__(self, mapping: dict[str, Iterable[Page]]):
        self._mapping = {k: PageCollection(v) for k, v in mapping.items()}

    def __getitem__(self, key: str) -> PageCollection:
        return self._mapping[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mapping)

    def __len__(self) -> int:
        return len(self._mapping)

    def counts(self) -> dict[str, int]:
        """Return label to page count, labels in first-appearance order."""
        return {label: len(pages) for label, pages in self._mapping.items()}

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"LabelCollection({len(self._mapping)} labels)"
