"""Frontmatter handling for Folio.

This module splits a content file into its YAML header and body, validates
the known header fields, and serializes a header back to text.

Known fields:
- title: Required, non-empty text.
- date: Optional ISO-8601 date or date-time.
- draft: Optional boolean, defaults to False.
- tags / categories: Optional lists of free-form labels.
- summary, url, layout: Optional text.

Any other key is kept untouched in the raw frontmatter mapping.
"""

from __future__ import annotations

import datetime as dt
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)

KNOWN_FIELDS = ("title", "date", "draft", "tags", "categories", "summary", "url", "layout")


class ContentError(Exception):
    """Error while loading content, with file context.

    Attributes:
        source_path: Path to the content file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught, if any.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


class MalformedContent(ContentError):
    """The header failed to parse or a field is missing or invalid."""


def describe_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error["loc"]) or "frontmatter"
        parts.append(f"'{loc}': {error['msg']}")
    return "; ".join(parts)


class Metadata(BaseModel):
    """Validated header fields of one content file.

    Attributes:
        frontmatter: The raw header mapping, in source order.
    """

    title: str
    date: dt.date | dt.datetime | None = Field(default=None, union_mode="left_to_right")
    draft: bool = Field(default=False, strict=True)
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    summary: str | None = Field(default=None, strict=True)
    url: str | None = Field(default=None, strict=True)
    layout: str | None = Field(default=None, strict=True)
    frontmatter: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", mode="before")
    @classmethod
    def _check_title(cls, value: Any) -> str:
        if value is None:
            raise ValueError("missing required field")
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(f"must be text, got {value!r}")
        title = str(value).strip()
        if not title:
            raise ValueError("must not be empty")
        return title

    @field_validator("date", mode="wrap")
    @classmethod
    def _check_date(cls, value: Any, handler):
        # YAML already yields date and datetime objects; only strings are parsed.
        if value is None or isinstance(value, dt.date):
            return value
        if not isinstance(value, str):
            raise ValueError(f"invalid date: {value!r}")
        return handler(value.strip())

    @field_validator("draft", mode="before")
    @classmethod
    def _default_draft(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("tags", "categories", mode="before")
    @classmethod
    def _check_labels(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            raise ValueError("must be a list of strings")
        labels: list[str] = []
        for item in value:
            if isinstance(item, (dict, list, tuple)) or item is None:
                raise ValueError(f"entries must be strings, got {item!r}")
            label = str(item).strip()
            if label and label not in labels:
                labels.append(label)
        return labels


def split_frontmatter(text: str, source: Path) -> tuple[dict[str, Any], str]:
    """Split raw file text into the header mapping and the body.

    Args:
        text: Raw file content.
        source: Path of the file, for error messages.

    Returns:
        Tuple of (frontmatter dict, remaining body). A file without a
        header yields an empty dict and the whole text as body.

    Raises:
        MalformedContent: If the header is unterminated, is not valid YAML,
            or does not hold a mapping.
    """
    text = text.lstrip("\ufeff")
    match = FRONTMATTER_RE.match(text)
    if not match:
        first_line = text.split("\n", 1)[0].strip()
        if first_line == "---":
            raise MalformedContent(source, "frontmatter is not closed with '---'")
        return {}, text
    try:
        data = yaml.safe_load(match.group(1))
    except (yaml.YAMLError, ValueError) as exc:
        raise MalformedContent(source, f"invalid YAML frontmatter: {exc}", exc) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedContent(
            source, f"frontmatter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end() :]


def parse_metadata(data: dict[str, Any], source: Path) -> Metadata:
    """Validate a raw header mapping.

    Args:
        data: Mapping returned by split_frontmatter.
        source: Path of the file, for error messages.

    Returns:
        Metadata with every known field coerced.

    Raises:
        MalformedContent: If a required field is absent or a field is invalid.
    """
    known = {key: data[key] for key in KNOWN_FIELDS if key in data}
    try:
        metadata = Metadata.model_validate(known)
    except ValidationError as exc:
        raise MalformedContent(source, describe_validation_error(exc), exc) from exc
    metadata.frontmatter = dict(data)
    return metadata


def load_metadata(text: str, source: Path) -> tuple[Metadata, str]:
    """Split and validate a content file in one step."""
    data, body = split_frontmatter(text, source)
    return parse_metadata(data, source), body


def header_fields(record: Any) -> dict[str, Any]:
    """Return the declared header fields of a Metadata or Page, normalized.

    Keys keep their source order. Known fields carry their validated value;
    unknown keys are passed through as parsed.
    """
    fields: dict[str, Any] = {}
    for key, raw in record.frontmatter.items():
        fields[key] = getattr(record, key) if key in KNOWN_FIELDS else raw
    return fields


def dump_frontmatter(record: Any) -> str:
    """Serialize the declared header of a Metadata or Page to text.

    Returns:
        The header including both '---' delimiters.
    """
    fields = header_fields(record)
    if not fields:
        return "---\n---\n"
    dumped = yaml.safe_dump(
        fields, sort_keys=False, allow_unicode=True, default_flow_style=False
    )
    return f"---\n{dumped}---\n"


def serialize(page: Any) -> str:
    """Serialize a page back to file text (header plus verbatim body)."""
    return dump_frontmatter(page) + page.body
