"""Content loading for Folio.

This module discovers content files and turns each one into a Page. A page
is built from the validated frontmatter header, the verbatim body, and a few
values derived from the file's location (slug, section, permalink).

Key classes:
- Page: Dataclass representing one content file.
- FileContentLoader: Discovers content files under the content root.
- UrlDeriver: Derives a permalink from a file's location.
- DefaultPageBuilder: Builds Page objects from files.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from fnmatch import fnmatch
from pathlib import Path
from typing import Any

from .frontmatter import MalformedContent, load_metadata
from .markdown import Heading, ScannerRegistry, default_scanner_registry
from .utils import DEFAULT_EXTENSIONS, first_paragraph, is_content_file, is_internal_path, slugify

logger = logging.getLogger("folio.content")


@dataclass
class Page:
    """Represents one content file with its metadata and body.

    Attributes:
        title: Human-readable title of the page.
        body: Body text after the header, verbatim.
        date: Publication date, or None when the header has none.
        draft: Whether the page is hidden from published listings.
        tags: Free-form tag labels.
        categories: Free-form category labels.
        summary: Declared summary, if any.
        url: Declared routing override, if any.
        layout: Declared layout name, if any.
        path: Posix path relative to the content root.
        source: Absolute path of the file.
        slug: URL-friendly slug from the filename.
        section: First folder of the path, or "" at the root.
        permalink: Declared url, or one derived from the location.
        source_type: "markdown", "html", or "unknown".
        frontmatter: Raw header mapping, unknown keys included.
        headings: Headings found in the body.
        links: Link targets found in the body.
    """

    title: str
    body: str
    date: date | None
    draft: bool
    tags: list[str]
    categories: list[str]
    summary: str | None
    url: str | None
    layout: str | None
    path: str
    source: Path
    slug: str
    section: str
    permalink: str
    source_type: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    headings: list[Heading] = field(default_factory=list)
    links: list[str] = field(default_factory=list)

    @property
    def description(self) -> str:
        """Declared summary, or the first paragraph of the body."""
        if self.summary:
            return self.summary
        return first_paragraph(self.body)


class FileContentLoader:
    """Discovers content files under a directory.

    Hidden entries (names starting with _ or .), files with other suffixes,
    and files matching an ignore pattern are skipped.

    Attributes:
        content_dir: Root directory of the content store.
        extensions: Accepted content suffixes.
        ignore: Glob patterns matched against posix relative paths.
    """

    def __init__(
        self,
        content_dir: Path,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        ignore: Iterable[str] = (),
    ):
        self.content_dir = content_dir
        self.extensions = tuple(extensions)
        self.ignore = tuple(ignore)

    def is_excluded(self, rel: Path) -> bool:
        """Check whether a relative path is outside the listed content."""
        if is_internal_path(rel) or not is_content_file(rel, self.extensions):
            return True
        posix = rel.as_posix()
        return any(fnmatch(posix, pattern) for pattern in self.ignore)

    def iter_files(self) -> list[Path]:
        """List all content files, sorted by relative path.

        Returns:
            List of absolute paths to content files.
        """
        files: list[Path] = []
        for path in self.content_dir.rglob("*"):
            if path.is_dir():
                continue
            rel = path.relative_to(self.content_dir)
            if self.is_excluded(rel):
                logger.debug("Skipping %s", rel.as_posix())
                continue
            files.append(path)
        return sorted(files, key=lambda p: p.relative_to(self.content_dir).as_posix())


class UrlDeriver:
    """Derives permalinks for pages from their location."""

    def derive(self, rel: Path, slug: str) -> str:
        """Derive the permalink for a page.

        Args:
            rel: Relative path from the content root.
            slug: URL-friendly slug.

        Returns:
            URL path such as "/posts/my-post/"; index files map to their folder.
        """
        segments = [p for p in rel.parent.parts if p]
        url_parts = segments if slug == "index" else segments + [slug]
        path = "/".join(url_parts)
        return f"/{path}/" if path else "/"


class DefaultPageBuilder:
    """Builds Page objects from content files.

    Attributes:
        content_dir: Root directory of the content store.
        scanner_registry: Registry of body scanners.
        url_deriver: URL deriver instance.
    """

    def __init__(
        self,
        content_dir: Path,
        scanner_registry: ScannerRegistry | None = None,
    ):
        self.content_dir = content_dir
        self.scanner_registry = scanner_registry or default_scanner_registry
        self.url_deriver = UrlDeriver()

    def build(self, path: Path) -> Page:
        """Build a Page object from a content file.

        Args:
            path: Absolute path to the content file.

        Returns:
            Page object.

        Raises:
            MalformedContent: If the file is not UTF-8 or its header is invalid.
        """
        rel = path.relative_to(self.content_dir)
        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedContent(path, "file is not valid UTF-8", exc) from exc

        metadata, body = load_metadata(raw, path)

        scanner = self.scanner_registry.get_scanner(path)
        if scanner:
            source_type = scanner.source_type
            headings, links = scanner.scan(body)
        else:
            source_type = "unknown"
            headings, links = [], []

        slug = slugify(path.stem)
        section = rel.parts[0] if len(rel.parts) > 1 else ""
        logger.debug("Loaded %s (%s)", rel.as_posix(), source_type)

        return Page(
            title=metadata.title,
            body=body,
            date=metadata.date,
            draft=metadata.draft,
            tags=metadata.tags,
            categories=metadata.categories,
            summary=metadata.summary,
            url=metadata.url,
            layout=metadata.layout,
            path=rel.as_posix(),
            source=path,
            slug=slug,
            section=section,
            permalink=metadata.url or self.url_deriver.derive(rel, slug),
            source_type=source_type,
            frontmatter=metadata.frontmatter,
            headings=headings,
            links=links,
        )
