"""Folio content store.

This package loads the blog posts and project write-ups of a portfolio site.
Each content file is a YAML frontmatter header followed by a Markdown or HTML
body. Folio validates the header and exposes every file as a Page record that
an external site generator can consume.

The main entry point is the store module, which lists published pages,
looks pages up by path, builds tag and category indexes, and checks
internal links.

Architecture:
- frontmatter: Header splitting, validation, and serialization.
- markdown: Body scanning for headings and links.
- content: Page records, file discovery, and page construction.
- collections: Sequence and mapping views over pages.
- store: The read-only ContentStore facade.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
