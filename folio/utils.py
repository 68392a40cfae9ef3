"""Utility functions for Folio.

This module contains small helpers used throughout the package for
filename handling, path classification, and label grouping.

Key functions:
    slugify: Convert filenames to URL slugs.
    first_paragraph: Extract a plain-text lead paragraph from a body.
    is_content_file: Check if a path has a configured content suffix.
    is_internal_path: Check if a path is hidden from the store.
    build_label_index: Build index of pages by tag or category.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

DATE_PREFIX_PARTS = 3

DEFAULT_EXTENSIONS = (".md", ".markdown", ".html")


def _split_date_prefix(name: str) -> tuple[list[str], list[str]]:
    parts = name.split("-")
    if len(parts) > DATE_PREFIX_PARTS and all(
        p.isdigit() for p in parts[:DATE_PREFIX_PARTS]
    ):
        return parts[:DATE_PREFIX_PARTS], parts[DATE_PREFIX_PARTS:]
    return [], parts


def slugify(name: str) -> str:
    """Convert filename (without extension) to slug, dropping date prefix.

    Args:
        name: Filename stem.

    Returns:
        URL-friendly slug.
    """
    _, parts = _split_date_prefix(name)
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", "-".join(parts))
    cleaned = cleaned.strip("-").lower()
    return cleaned or "index"


def first_paragraph(text: str, limit: int = 160) -> str:
    """Extract and clean the first prose paragraph from a body.

    Headings, images, code fences and horizontal rules are skipped. HTML
    tags are stripped and whitespace is collapsed.

    Args:
        text: Body text to extract from.
        limit: Maximum character length of result.

    Returns:
        Cleaned first paragraph, truncated to limit characters.
    """
    for para in (p.strip() for p in text.split("\n\n")):
        if not para or para.startswith(("#", "![", "```", "~~~", "---")):
            continue
        para = re.sub(r"<[^>]+>", "", para)
        collapsed = " ".join(para.split())
        if collapsed:
            return collapsed[:limit]
    return ""


def is_internal_path(path: Path) -> bool:
    """Check if a path is hidden (any component starts with _ or .).

    Args:
        path: Relative path to check.

    Returns:
        True if the path should never be listed as content.
    """
    return any(part.startswith(("_", ".")) for part in path.parts)


def is_content_file(path: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> bool:
    """Check if a path has one of the given content suffixes (case-insensitive)."""
    return path.suffix.lower() in {ext.lower() for ext in extensions}


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() in (".md", ".markdown")


def extract_number_from_name(name: str) -> int | None:
    """Extract a leading number from a filename for sorting.

    Handles filenames like "01-intro.md". If the filename has a date
    prefix, the number after the date is used.

    Args:
        name: Filename stem (without extension).

    Returns:
        The extracted number, or None if no number found.
    """
    _, parts = _split_date_prefix(name)
    if parts and parts[0].isdigit():
        return int(parts[0])
    return None


def strip_number_prefix(name: str) -> str:
    """Strip date and number prefixes from filename for sorting comparison."""
    _, parts = _split_date_prefix(name)
    if parts and parts[0].isdigit():
        parts = parts[1:]
    return "-".join(parts) if parts else name


def build_label_index(pages: Iterable, attribute: str = "tags") -> dict[str, list]:
    """Build an index mapping labels to the pages carrying them.

    Args:
        pages: Iterable of Page objects.
        attribute: Name of the list attribute to group on ("tags" or "categories").

    Returns:
        Dictionary mapping label to list of pages, keys in first-seen order.
    """
    index: dict[str, list] = {}
    for page in pages:
        for label in getattr(page, attribute):
            index.setdefault(label, []).append(page)
    return index
