"""Protocol definitions for Folio.

These interfaces describe the pluggable pieces of the content store, so a
caller can swap file discovery, page construction, or body scanning without
touching the store itself.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .content import Page
    from .markdown import Heading


@runtime_checkable
class BodyScanner(Protocol):
    """Protocol for extracting structure from a page body.

    Implementations handle one body format (Markdown, HTML).
    """

    @abstractmethod
    def can_scan(self, path: Path) -> bool:
        """Check if this scanner can handle the given file."""
        ...

    @abstractmethod
    def scan(self, body: str) -> tuple[list[Heading], list[str]]:
        """Scan a body.

        Args:
            body: Body text after the frontmatter header.

        Returns:
            Tuple of (headings, link targets).
        """
        ...

    @property
    @abstractmethod
    def source_type(self) -> str:
        """Return the source type identifier (e.g., 'markdown', 'html')."""
        ...


@runtime_checkable
class ContentLoader(Protocol):
    """Protocol for discovering content files."""

    @abstractmethod
    def iter_files(self) -> list[Path]:
        """List all content files, in a stable order."""
        ...

    @abstractmethod
    def is_excluded(self, rel: Path) -> bool:
        """Check whether a path relative to the content root is excluded."""
        ...


@runtime_checkable
class PageBuilder(Protocol):
    """Protocol for building Page objects."""

    @abstractmethod
    def build(self, path: Path) -> Page:
        """Build a Page object from a content file.

        Raises:
            MalformedContent: If the file cannot be loaded.
        """
        ...
