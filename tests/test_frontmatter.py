from datetime import date, datetime
from pathlib import Path

import pytest
from pydantic import ValidationError

from folio.frontmatter import (
    ContentError,
    MalformedContent,
    dump_frontmatter,
    header_fields,
    load_metadata,
    parse_metadata,
    serialize,
    split_frontmatter,
)

SOURCE = Path("posts/example.md")


def test_split_frontmatter_returns_mapping_and_body():
    text = "---\ntitle: Raft Notes\ntags: [Go, Raft]\n---\n# Heading\n\nBody.\n"
    data, body = split_frontmatter(text, SOURCE)
    assert data == {"title": "Raft Notes", "tags": ["Go", "Raft"]}
    assert body == "# Heading\n\nBody.\n"


def test_split_frontmatter_without_header():
    data, body = split_frontmatter("Just a body", SOURCE)
    assert data == {}
    assert body == "Just a body"


def test_split_frontmatter_empty_header():
    data, body = split_frontmatter("---\n---\nBody", SOURCE)
    assert data == {}
    assert body == "Body"


def test_split_frontmatter_body_keeps_horizontal_rules():
    text = "---\ntitle: A\n---\nintro\n\n---\n\nafter rule\n"
    _, body = split_frontmatter(text, SOURCE)
    assert body == "intro\n\n---\n\nafter rule\n"


def test_split_frontmatter_rejects_bad_headers():
    with pytest.raises(MalformedContent, match="not closed"):
        split_frontmatter("---\ntitle: Open\nbody", SOURCE)
    with pytest.raises(MalformedContent, match="invalid YAML"):
        split_frontmatter("---\ntitle: [unclosed\n---\n", SOURCE)
    with pytest.raises(MalformedContent, match="mapping"):
        split_frontmatter("---\n- a\n- b\n---\n", SOURCE)


def test_title_without_date_loads():
    metadata, body = load_metadata('---\ntitle: "Home"\n---\nWelcome', SOURCE)
    assert metadata.title == "Home"
    assert metadata.date is None
    assert metadata.draft is False
    assert metadata.tags == []
    assert body == "Welcome"


def test_dates_are_parsed():
    metadata, _ = load_metadata("---\ntitle: A\ndate: 2024-01-15\n---\n", SOURCE)
    assert metadata.date == date(2024, 1, 15)

    metadata, _ = load_metadata('---\ntitle: A\ndate: "2024-03-02"\n---\n', SOURCE)
    assert metadata.date == date(2024, 3, 2)

    metadata, _ = load_metadata('---\ntitle: A\ndate: "2024-03-02T08:30:00"\n---\n', SOURCE)
    assert metadata.date == datetime(2024, 3, 2, 8, 30)

    metadata, _ = load_metadata(
        '---\ntitle: A\ndate: "2024-01-15T10:30:00.123"\n---\n', SOURCE
    )
    assert metadata.date == datetime(2024, 1, 15, 10, 30, 0, 123000)


@pytest.mark.parametrize(
    "value",
    ["not-a-date", "2024-02-30", "'2024-13-01'", "[2024]", "12"],
)
def test_invalid_date_is_malformed(value):
    with pytest.raises(MalformedContent) as excinfo:
        load_metadata(f"---\ntitle: A\ndate: {value}\n---\n", SOURCE)
    assert excinfo.value.source_path == SOURCE
    assert str(excinfo.value).startswith(str(SOURCE))


def test_missing_or_empty_title_is_malformed():
    with pytest.raises(MalformedContent, match="title"):
        load_metadata("---\ndate: 2024-01-01\n---\n", SOURCE)
    with pytest.raises(MalformedContent, match="title"):
        load_metadata("---\ntitle: '   '\n---\n", SOURCE)
    with pytest.raises(MalformedContent, match="title"):
        load_metadata("No header at all", SOURCE)


def test_numeric_title_is_text():
    metadata, _ = load_metadata("---\ntitle: 2048\n---\n", SOURCE)
    assert metadata.title == "2048"


def test_draft_must_be_boolean():
    metadata, _ = load_metadata("---\ntitle: A\ndraft: true\n---\n", SOURCE)
    assert metadata.draft is True
    with pytest.raises(MalformedContent, match="draft"):
        load_metadata("---\ntitle: A\ndraft: maybe\n---\n", SOURCE)


def test_text_fields_must_be_strings():
    metadata, _ = load_metadata(
        "---\ntitle: A\nsummary: Short\nurl: /about/\nlayout: wide\n---\n", SOURCE
    )
    assert (metadata.summary, metadata.url, metadata.layout) == ("Short", "/about/", "wide")
    with pytest.raises(MalformedContent, match="layout"):
        load_metadata("---\ntitle: A\nlayout: [a, b]\n---\n", SOURCE)


def test_labels_are_normalized():
    metadata = parse_metadata({"title": "A", "tags": "Go"}, SOURCE)
    assert metadata.tags == ["Go"]
    metadata = parse_metadata({"title": "A", "tags": ["Go", " Raft ", "Go", "", 3]}, SOURCE)
    assert metadata.tags == ["Go", "Raft", "3"]
    assert parse_metadata({"title": "A", "tags": None}, SOURCE).tags == []
    with pytest.raises(MalformedContent, match="categories"):
        parse_metadata({"title": "A", "categories": {"a": 1}}, SOURCE)
    with pytest.raises(MalformedContent, match="tags"):
        parse_metadata({"title": "A", "tags": [["nested"]]}, SOURCE)


def test_validation_errors_keep_the_pydantic_error():
    with pytest.raises(MalformedContent) as excinfo:
        parse_metadata({"title": "A", "draft": "false"}, SOURCE)
    assert isinstance(excinfo.value.original_error, ValidationError)
    assert excinfo.value.source_path == SOURCE
    assert "'draft'" in excinfo.value.message


def test_malformed_content_is_a_content_error():
    assert issubclass(MalformedContent, ContentError)


def test_header_round_trip_is_idempotent():
    text = (
        "---\n"
        "title: Context Cancellation in Go\n"
        "date: 2023-11-04\n"
        "draft: false\n"
        "tags: Go\n"
        "categories: [Concurrency, Notes]\n"
        "summary: How ctx.Done() propagates.\n"
        "author: Jane\n"
        "cover:\n"
        "  src: cover.png\n"
        "---\n"
        "Body text.\n"
    )
    first, body = load_metadata(text, SOURCE)
    dumped = dump_frontmatter(first)
    second, second_body = load_metadata(dumped + body, SOURCE)

    assert header_fields(second) == header_fields(first)
    assert list(header_fields(second)) == [
        "title", "date", "draft", "tags", "categories", "summary", "author", "cover",
    ]
    assert second.tags == ["Go"]
    assert second.date == date(2023, 11, 4)
    assert second.frontmatter["cover"] == {"src": "cover.png"}
    assert second_body == body
    assert dump_frontmatter(second) == dumped


def test_dump_only_emits_declared_fields():
    metadata, _ = load_metadata("---\ntitle: Only Title\n---\n", SOURCE)
    assert dump_frontmatter(metadata) == "---\ntitle: Only Title\n---\n"


def test_serialize_keeps_body_verbatim():
    class Record:
        title = "Paxos"
        frontmatter = {"title": "Paxos"}
        body = "\n## Phase 1\n\nPrepare.\n"

    assert serialize(Record()) == "---\ntitle: Paxos\n---\n\n## Phase 1\n\nPrepare.\n"
