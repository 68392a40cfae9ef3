"""Body scanners for Folio.

This module inspects page bodies for the structure a site generator or link
checker needs: headings for tables of contents and outgoing link targets.
Each scanner handles one body format.

Key classes:
- MarkdownScanner: Parses Markdown with mistune and collects headings and links.
- HTMLScanner: Collects href/src targets from HTML bodies.
- ScannerRegistry: Picks the scanner for a file suffix.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from pathlib import Path

import mistune

from .utils import is_markdown

HTML_LINK_RE = re.compile(r'<(?:a|img)\s+[^>]*?(?:href|src)="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")


@dataclass
class Heading:
    """A heading extracted from a Markdown body.

    Attributes:
        id: Anchor ID for the heading (URL-friendly slug).
        text: The plain text of the heading.
        level: Heading level (1-6).
    """

    id: str
    text: str
    level: int


def generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-")


class _CollectingRenderer(mistune.HTMLRenderer):
    """Markdown renderer that records headings and link targets while rendering.

    Attributes:
        headings: Heading objects in document order.
        links: Link and image targets in document order, raw HTML included.
    """

    def __init__(self):
        super().__init__(escape=False)
        self.headings: list[Heading] = []
        self.links: list[str] = []
        self._issued_ids: set[str] = set()

    def _unique_id(self, base_id: str) -> str:
        heading_id = base_id
        suffix = 0
        while heading_id in self._issued_ids:
            suffix += 1
            heading_id = f"{base_id}-{suffix}"
        self._issued_ids.add(heading_id)
        return heading_id

    def heading(self, text: str, level: int, **attrs) -> str:
        # mistune hands over entity-escaped inline HTML
        plain = html.unescape(" ".join(TAG_RE.sub("", text).split()))
        heading_id = self._unique_id(generate_heading_id(plain))
        self.headings.append(Heading(id=heading_id, text=plain, level=level))
        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'

    def link(self, text: str, url: str, title: str | None = None) -> str:
        self.links.append(html.unescape(url))
        return super().link(text, url, title)

    def image(self, text: str, url: str, title: str | None = None) -> str:
        self.links.append(html.unescape(url))
        return super().image(text, url, title)

    def inline_html(self, html_text: str) -> str:
        self.links.extend(html.unescape(url) for url in HTML_LINK_RE.findall(html_text))
        return super().inline_html(html_text)

    def block_html(self, html_text: str) -> str:
        self.links.extend(html.unescape(url) for url in HTML_LINK_RE.findall(html_text))
        return super().block_html(html_text)


class MarkdownScanner:
    """Scans Markdown bodies for headings and links."""

    @property
    def source_type(self) -> str:
        return "markdown"

    def can_scan(self, path: Path) -> bool:
        return is_markdown(path)

    def scan(self, body: str) -> tuple[list[Heading], list[str]]:
        """Parse a Markdown body.

        Args:
            body: Markdown source.

        Returns:
            Tuple of (headings, link targets).
        """
        renderer = _CollectingRenderer()
        markdown = mistune.create_markdown(
            renderer=renderer, plugins=["strikethrough", "footnotes", "table", "url"]
        )
        markdown(body)
        return renderer.headings, renderer.links


class HTMLScanner:
    """Scans HTML bodies for link targets. HTML pages carry no heading list."""

    @property
    def source_type(self) -> str:
        return "html"

    def can_scan(self, path: Path) -> bool:
        return path.suffix.lower() in (".html", ".htm")

    def scan(self, body: str) -> tuple[list[Heading], list[str]]:
        return [], [html.unescape(url) for url in HTML_LINK_RE.findall(body)]


class ScannerRegistry:
    """Registry for body scanners.

    New body formats are supported by registering another scanner.
    """

    def __init__(self):
        self._scanners: list = []
        self.register(MarkdownScanner())
        self.register(HTMLScanner())

    def register(self, scanner) -> None:
        """Register a new scanner. Later registrations are checked last."""
        self._scanners.append(scanner)

    def get_scanner(self, path: Path):
        """Get the scanner for a file.

        Args:
            path: Path to the content file.

        Returns:
            The first scanner that can handle the file, or None.
        """
        for scanner in self._scanners:
            if scanner.can_scan(path):
                return scanner
        return None


default_scanner_registry = ScannerRegistry()
