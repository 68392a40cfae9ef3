"""The read-only content store.

This module is what a site generator or link checker talks to. It loads the
project configuration, lists published pages lazily, looks single pages up
by path, groups pages by tag and category, and reports broken internal links.

Key names:
- ContentStore: Facade over file discovery and page construction.
- PageListing: Lazy, restartable sequence returned by list_pages.
- NotFound: Raised by get_page when no content file exists at a path.
- load_config: Loads and validates folio.yaml with defaults applied.
"""

from __future__ import annotations

import copy
import logging
import posixpath
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .collections import LabelCollection, PageCollection
from .content import DefaultPageBuilder, FileContentLoader, Page
from .frontmatter import ContentError, MalformedContent, describe_validation_error
from .protocols import ContentLoader, PageBuilder
from .utils import DEFAULT_EXTENSIONS, build_label_index, is_content_file

logger = logging.getLogger("folio.store")

CONFIG_FILENAME = "folio.yaml"

DEFAULT_CONFIG = {
    "content_dir": "content",
    "extensions": list(DEFAULT_EXTENSIONS),
    "ignore": [],
    "include_drafts": False,
}


class NotFound(ContentError, LookupError):
    """No content file exists at the requested path."""


@dataclass
class BrokenLink:
    """An internal link that does not resolve to a published page.

    Attributes:
        source: Path of the linking page, relative to the content root.
        target: The link target as written in the body.
        reason: Why the link is broken.
    """

    source: str
    target: str
    reason: str


class FolioConfig(BaseModel):
    """Validated contents of folio.yaml. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    content_dir: str = Field(default="content", strict=True)
    extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    ignore: list[str] = Field(default_factory=list)
    include_drafts: bool = Field(default=False, strict=True)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load store configuration from folio.yaml.

    Args:
        project_root: Root directory of the project.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        MalformedContent: If a known key has a value of the wrong type.
    """
    config_path = project_root / CONFIG_FILENAME
    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    try:
        return FolioConfig.model_validate(config).model_dump()
    except ValidationError as exc:
        raise MalformedContent(config_path, describe_validation_error(exc), exc) from exc


def _normalize_url(url: str) -> str:
    stripped = url.strip("/")
    return f"/{stripped}/" if stripped else "/"


class PageListing(Iterable[Page]):
    """Lazy, restartable sequence of pages.

    Each iteration walks the content directory again and parses one file at
    a time, so edits made between iterations are picked up.
    """

    def __init__(self, store: ContentStore, include_drafts: bool):
        self._store = store
        self.include_drafts = include_drafts

    def __iter__(self) -> Iterator[Page]:
        for path in self._store.content_loader.iter_files():
            page = self._store.page_builder.build(path)
            if page.draft and not self.include_drafts:
                logger.debug("Excluding draft %s", page.path)
                continue
            yield page

    def collect(self) -> PageCollection:
        """Load every page into a PageCollection."""
        return PageCollection(self)

    def __repr__(self) -> str:  # pragma: no cover - for debugging
        return f"PageListing({self._store.content_dir}, include_drafts={self.include_drafts})"


class ContentStore:
    """Read-only view over a directory of content files.

    Attributes:
        content_dir: Root directory of the content files.
        include_drafts: Default for list_pages.
        content_loader: File discovery component.
        page_builder: Page construction component.
    """

    def __init__(
        self,
        content_dir: Path,
        include_drafts: bool = False,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        ignore: Iterable[str] = (),
        content_loader: ContentLoader | None = None,
        page_builder: PageBuilder | None = None,
    ):
        """Initialize the store.

        Args:
            content_dir: Directory holding the content files.
            include_drafts: Whether list_pages includes drafts by default.
            extensions: Accepted content suffixes.
            ignore: Glob patterns of relative paths to leave out.
            content_loader: Optional custom content loader.
            page_builder: Optional custom page builder.

        Raises:
            FileNotFoundError: If content_dir is not a directory.
        """
        content_dir = Path(content_dir)
        if not content_dir.is_dir():
            raise FileNotFoundError(f"Expected content directory at {content_dir}")
        self.content_dir = content_dir
        self.include_drafts = include_drafts
        self.content_loader = content_loader or FileContentLoader(
            content_dir, extensions, ignore
        )
        self.page_builder = page_builder or DefaultPageBuilder(content_dir)

    @classmethod
    def from_project(cls, project_root: Path) -> ContentStore:
        """Create a store from a project root and its folio.yaml."""
        config = load_config(project_root)
        return cls(
            project_root / config["content_dir"],
            include_drafts=config["include_drafts"],
            extensions=config["extensions"],
            ignore=config["ignore"],
        )

    def list_pages(self, include_drafts: bool | None = None) -> PageListing:
        """List all non-excluded pages.

        Args:
            include_drafts: Whether to include draft pages; defaults to the
                store setting.

        Returns:
            A lazy PageListing in relative-path order. Use
            ``listing.collect().sorted()`` for newest-first order.

        Raises:
            MalformedContent: While iterating, at the first invalid file.
        """
        if include_drafts is None:
            include_drafts = self.include_drafts
        return PageListing(self, include_drafts)

    def get_page(self, path: str | Path) -> Page:
        """Load the page at a path.

        Args:
            path: Path relative to the content root, or an absolute path
                inside it.

        Returns:
            The Page, drafts included.

        Raises:
            NotFound: If no content file exists at that path.
            MalformedContent: If the file exists but cannot be loaded.
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.content_dir / candidate
        try:
            rel = candidate.resolve().relative_to(self.content_dir.resolve())
        except ValueError:
            raise NotFound(candidate, "path is outside the content directory") from None
        if not candidate.is_file():
            raise NotFound(candidate, "no content file at this path")
        if self.content_loader.is_excluded(rel):
            raise NotFound(candidate, "path is not a listed content file")
        return self.page_builder.build(self.content_dir / rel)

    def tag_index(self) -> LabelCollection:
        """Group listed pages by tag."""
        return LabelCollection(build_label_index(self.list_pages(), "tags"))

    def category_index(self) -> LabelCollection:
        """Group listed pages by category."""
        return LabelCollection(build_label_index(self.list_pages(), "categories"))

    def check_links(self) -> list[BrokenLink]:
        """Find internal links that do not resolve to a listed page.

        Relative file links (``../posts/raft.md``) are resolved against the
        linking page's folder. Root-relative links (``/posts/raft/``) are
        matched against page permalinks. External links, fragments, and
        links to non-content files are not checked.

        Returns:
            Broken links in page order.
        """
        pages = list(self.list_pages())
        permalinks = {_normalize_url(p.permalink) for p in pages}
        broken: list[BrokenLink] = []
        for page in pages:
            for target in page.links:
                reason = self._check_target(page, target, permalinks)
                if reason:
                    logger.warning("Broken link in %s: %s (%s)", page.path, target, reason)
                    broken.append(BrokenLink(source=page.path, target=target, reason=reason))
        logger.info(
            "Checked links in %d pages, %d broken", len(pages), len(broken)
        )
        return broken

    def _check_target(self, page: Page, target: str, permalinks: set[str]) -> str | None:
        parts = urlsplit(target)
        if parts.scheme or parts.netloc or not parts.path:
            return None
        link_path = unquote(parts.path)
        if link_path.startswith("/"):
            url = link_path
        else:
            url = posixpath.join(_normalize_url(page.permalink), link_path)
        url = _normalize_url(posixpath.normpath(url))

        if posixpath.splitext(link_path)[1]:
            if not is_content_file(Path(link_path), self._extensions()):
                # static asset
                return None
            reason = self._check_file_link(page, link_path)
            # a page may declare a suffixed permalink such as url: /cv.html
            if reason and url in permalinks:
                return None
            return reason

        if url not in permalinks:
            return "no page at this URL"
        return None

    def _check_file_link(self, page: Page, link_path: str) -> str | None:
        if link_path.startswith("/"):
            rel = posixpath.normpath(link_path.lstrip("/"))
        else:
            rel = posixpath.normpath(posixpath.join(posixpath.dirname(page.path), link_path))
        if rel.startswith(".."):
            return "points outside the content directory"
        try:
            linked = self.get_page(rel)
        except NotFound:
            return "no content file at this path"
        if linked.draft and not self.include_drafts:
            return "links to a draft"
        return None

    def _extensions(self) -> tuple[str, ...]:
        return tuple(getattr(self.content_loader, "extensions", DEFAULT_EXTENSIONS))
