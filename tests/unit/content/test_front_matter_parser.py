"""Tests for content/parser.py."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from frontindex.content.errors import (
    ContentError,
    MalformedFrontMatter,
    MissingFrontMatter,
    ValidationError,
)
from frontindex.content.parser import (
    decode_block,
    iter_content_files,
    load_directory,
    parse_file,
    parse_text,
    split_front_matter,
)
from samples import PODMAN_POST, STARTING_ANEW, post_text

_PLUS_TWO = timezone(timedelta(hours=2))


def _fm(*lines: str, body: str = "Body.\n") -> str:
    return "---\n" + "".join(f"{line}\n" for line in lines) + "---\n" + body


# ------------------------------------------------------------------
# split_front_matter
# ------------------------------------------------------------------


def test_split_returns_block_and_body() -> None:
    block, body = split_front_matter("---\ntitle: A\n---\nHello\n")
    assert block == "title: A\n"
    assert body == "Hello\n"


def test_split_no_opening_fence() -> None:
    with pytest.raises(MissingFrontMatter):
        split_front_matter("# Just a heading\n\ntext\n")


def test_split_leading_blank_line_is_not_a_fence() -> None:
    with pytest.raises(MissingFrontMatter):
        split_front_matter("\n---\ntitle: A\n---\n")


def test_split_empty_text() -> None:
    with pytest.raises(MissingFrontMatter):
        split_front_matter("")


def test_split_unterminated_block() -> None:
    with pytest.raises(MalformedFrontMatter):
        split_front_matter("---\ntitle: A\n\nno closing fence\n")


def test_split_longer_dash_run_is_not_a_fence() -> None:
    with pytest.raises(MissingFrontMatter):
        split_front_matter("----\ntitle: A\n----\n")


def test_split_fence_trailing_whitespace_ok() -> None:
    block, body = split_front_matter("---  \ntitle: A\n--- \nBody")
    assert block == "title: A\n"
    assert body == "Body"


def test_split_strips_bom() -> None:
    block, _ = split_front_matter("\ufeff---\ntitle: A\n---\n")
    assert block == "title: A\n"


def test_split_only_first_pair_is_metadata() -> None:
    text = "---\ntitle: A\n---\nfirst\n---\ntitle: B\n---\nsecond\n"
    block, body = split_front_matter(text)
    assert block == "title: A\n"
    assert body == "first\n---\ntitle: B\n---\nsecond\n"


def test_split_custom_fence() -> None:
    block, body = split_front_matter('+++\ntitle = "A"\n+++\nx', fence="+++")
    assert block == 'title = "A"\n'
    assert body == "x"


# ------------------------------------------------------------------
# decode_block
# ------------------------------------------------------------------


def test_decode_empty_block_is_empty_mapping() -> None:
    assert decode_block("") == {}


def test_decode_invalid_yaml() -> None:
    with pytest.raises(MalformedFrontMatter):
        decode_block("title: [unclosed\n")


def test_decode_yaml_list_is_malformed() -> None:
    with pytest.raises(MalformedFrontMatter, match="mapping"):
        decode_block("- a\n- b\n")


def test_decode_yaml_scalar_is_malformed() -> None:
    with pytest.raises(MalformedFrontMatter):
        decode_block("just a sentence\n")


def test_decode_invalid_toml() -> None:
    with pytest.raises(MalformedFrontMatter):
        decode_block("title = \n", fmt="toml")


def test_decode_unknown_format() -> None:
    with pytest.raises(ValueError):
        decode_block("title: A\n", fmt="json")


# ------------------------------------------------------------------
# parse_text — happy path
# ------------------------------------------------------------------


def test_parse_starting_anew_example() -> None:
    record = parse_text(STARTING_ANEW, "posts/starting-anew.md")
    assert record.title == "Starting Anew"
    assert record.published_at == datetime(2023, 5, 22, 1, 0, tzinfo=_PLUS_TWO)
    assert record.draft is True
    assert record.tags == frozenset()
    assert record.categories == frozenset()
    assert record.description is None
    assert record.path == Path("posts/starting-anew.md")
    assert record.body == "\nNew blog, new start.\n"


def test_parse_full_record() -> None:
    record = parse_text(PODMAN_POST, "podman.md")
    assert record.title == "Running a web API and Postgres with Podman"
    assert record.description == "Pods, volumes and a sample API."
    assert record.tags == frozenset({"podman", "containers", "postgres"})
    assert record.categories == frozenset({"devops"})
    assert record.draft is False
    assert "podman pod create" in record.body


def test_parse_is_idempotent() -> None:
    assert parse_text(PODMAN_POST, "p.md") == parse_text(PODMAN_POST, "p.md")
    assert parse_text(STARTING_ANEW, "s.md") == parse_text(STARTING_ANEW, "s.md")


def test_parse_body_preserved_verbatim() -> None:
    body = "\n## Heading\n\n```yaml\n---\nkey: value\n---\n```\n  trailing  \n"
    record = parse_text(_fm("title: A", "date: 2023-05-22T01:00:00+02:00", body=body), "a.md")
    assert record.body == body


def test_parse_empty_body_is_valid() -> None:
    record = parse_text(_fm("title: A", "date: 2023-05-22T01:00:00+02:00", body=""), "a.md")
    assert record.body == ""


def test_parse_no_newline_after_closing_fence() -> None:
    record = parse_text("---\ntitle: A\ndate: 2023-05-22T01:00:00Z\n---", "a.md")
    assert record.body == ""
    assert record.published_at.utcoffset() == timedelta(0)


def test_parse_concatenated_front_matter_honours_first_block() -> None:
    text = STARTING_ANEW + PODMAN_POST
    record = parse_text(text, "a.md")
    assert record.title == "Starting Anew"
    assert record.draft is True
    assert record.tags == frozenset()
    assert "Running a web API and Postgres with Podman" in record.body


def test_parse_crlf_line_endings() -> None:
    text = "---\r\ntitle: A\r\ndate: 2023-05-22T01:00:00+02:00\r\n---\r\nLine one\r\n"
    record = parse_text(text, "a.md")
    assert record.title == "A"
    assert record.body == "Line one\r\n"


def test_parse_unknown_keys_kept_as_extra() -> None:
    record = parse_text(
        _fm("title: A", "date: 2023-05-22T01:00:00+02:00", "series: containers", "weight: 3"),
        "a.md",
    )
    assert record.extra == {"series": "containers", "weight": 3}
    assert "title" not in record.extra
    assert "date" not in record.extra


def test_parse_quoted_iso_date_string() -> None:
    record = parse_text(_fm("title: A", 'date: "2023-05-22T01:00:00+02:00"'), "a.md")
    assert record.published_at == datetime(2023, 5, 22, 1, 0, tzinfo=_PLUS_TWO)


def test_parse_publish_date_fallback_key() -> None:
    record = parse_text(_fm("title: A", "publishDate: 2023-05-22T01:00:00+02:00"), "a.md")
    assert record.published_at.year == 2023


def test_parse_custom_date_keys() -> None:
    record = parse_text(
        _fm("title: A", "published: 2023-05-22T01:00:00+02:00"),
        "a.md",
        date_keys=("published",),
    )
    assert record.published_at.day == 22


def test_parse_numeric_title_is_text() -> None:
    record = parse_text(_fm("title: 1984", "date: 2023-05-22T01:00:00+02:00"), "a.md")
    assert record.title == "1984"


def test_parse_tags_duplicates_collapse_case_sensitive() -> None:
    record = parse_text(
        _fm("title: A", "date: 2023-05-22T01:00:00+02:00", "tags: [podman, podman, Podman]"),
        "a.md",
    )
    assert record.tags == frozenset({"podman", "Podman"})


def test_parse_single_tag_scalar() -> None:
    record = parse_text(
        _fm("title: A", "date: 2023-05-22T01:00:00+02:00", "tags: podman"), "a.md"
    )
    assert record.tags == frozenset({"podman"})


def test_parse_empty_draft_value_defaults_false() -> None:
    record = parse_text(_fm("title: A", "date: 2023-05-22T01:00:00+02:00", "draft:"), "a.md")
    assert record.draft is False


def test_parse_toml_front_matter() -> None:
    text = '+++\ntitle = "A"\ndate = 2023-05-22T01:00:00+02:00\ntags = ["x"]\n+++\nBody\n'
    record = parse_text(text, "a.md", fence="+++", fmt="toml")
    assert record.title == "A"
    assert record.published_at == datetime(2023, 5, 22, 1, 0, tzinfo=_PLUS_TWO)
    assert record.tags == frozenset({"x"})
    assert record.body == "Body\n"


def test_record_is_immutable() -> None:
    record = parse_text(STARTING_ANEW, "a.md")
    with pytest.raises(AttributeError):
        record.title = "Other"  # type: ignore[misc]


# ------------------------------------------------------------------
# parse_text — failures
# ------------------------------------------------------------------


def test_parse_missing_front_matter_sets_path() -> None:
    with pytest.raises(MissingFrontMatter) as info:
        parse_text("No front matter here.\n", "notes/plain.md")
    assert info.value.path == Path("notes/plain.md")
    assert "notes/plain.md" in str(info.value)


def test_parse_missing_title() -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(_fm("date: 2023-05-22T01:00:00+02:00"), "a.md")
    assert info.value.field == "title"


def test_parse_empty_front_matter_fails_on_title() -> None:
    with pytest.raises(ValidationError) as info:
        parse_text("---\n---\nbody\n", "a.md")
    assert info.value.field == "title"


@pytest.mark.parametrize("title_line", ['title: ""', "title: '   '", "title: [a, b]", "title: true"])
def test_parse_invalid_title(title_line: str) -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(_fm(title_line, "date: 2023-05-22T01:00:00+02:00"), "a.md")
    assert info.value.field == "title"


def test_parse_missing_date() -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(_fm("title: A"), "a.md")
    assert info.value.field == "date"


@pytest.mark.parametrize(
    "date_line",
    [
        "date: 2023-05-22",                 # date only
        "date: 2023-05-22T01:00:00",        # no offset
        'date: "2023-05-22T01:00:00"',      # naive string
        'date: "last tuesday"',             # not a date
        "date: 20230522",                   # integer
    ],
)
def test_parse_invalid_date(date_line: str) -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(_fm("title: A", date_line), "a.md")
    assert info.value.field == "date"


@pytest.mark.parametrize(
    "date_line",
    [
        "date: 2023-02-30T01:00:00+02:00",  # no such day
        "date: 2023-13-01",                  # no such month
        "date: 2023-05-22T01:00:00+25:00",   # offset out of range
    ],
)
def test_parse_impossible_yaml_timestamp_is_malformed(date_line: str) -> None:
    with pytest.raises(MalformedFrontMatter) as info:
        parse_text(_fm("title: A", date_line), "a.md")
    assert info.value.path == Path("a.md")


def test_parse_invalid_draft() -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(_fm("title: A", "date: 2023-05-22T01:00:00+02:00", 'draft: "maybe"'), "a.md")
    assert info.value.field == "draft"


@pytest.mark.parametrize("tags_line", ["tags: {a: 1}", "tags: [a, [b]]", "tags: [a, '']"])
def test_parse_invalid_tags(tags_line: str) -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(_fm("title: A", "date: 2023-05-22T01:00:00+02:00", tags_line), "a.md")
    assert info.value.field == "tags"


def test_parse_invalid_categories() -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(
            _fm("title: A", "date: 2023-05-22T01:00:00+02:00", "categories: {x: y}"), "a.md"
        )
    assert info.value.field == "categories"


def test_parse_invalid_description() -> None:
    with pytest.raises(ValidationError) as info:
        parse_text(
            _fm("title: A", "date: 2023-05-22T01:00:00+02:00", "description: [a]"), "a.md"
        )
    assert info.value.field == "description"


def test_all_parse_errors_are_content_errors() -> None:
    for text in ("plain", "---\nunterminated\n", _fm("date: 2023-05-22T01:00:00Z")):
        with pytest.raises(ContentError):
            parse_text(text, "a.md")


# ------------------------------------------------------------------
# parse_file
# ------------------------------------------------------------------


def test_parse_file_relative_to_root(tmp_path: Path) -> None:
    p = tmp_path / "posts" / "a.md"
    p.parent.mkdir()
    p.write_text(STARTING_ANEW, encoding="utf-8")
    record = parse_file(p, root=tmp_path)
    assert record.path == Path("posts/a.md")


def test_parse_file_keeps_crlf_bytes(tmp_path: Path) -> None:
    p = tmp_path / "a.md"
    p.write_bytes(b"---\r\ntitle: A\r\ndate: 2023-05-22T01:00:00Z\r\n---\r\nx\r\ny\r\n")
    record = parse_file(p)
    assert record.body == "x\r\ny\r\n"


def test_parse_file_same_bytes_equal_records(tmp_path: Path) -> None:
    p = tmp_path / "a.md"
    p.write_text(PODMAN_POST, encoding="utf-8")
    assert parse_file(p, root=tmp_path) == parse_file(p, root=tmp_path)


# ------------------------------------------------------------------
# load_directory — partial success
# ------------------------------------------------------------------


def test_load_directory_collects_failures_and_continues(write_post, tmp_path: Path) -> None:
    write_post("good.md", post_text("Good", "2023-05-22T01:00:00+02:00"))
    write_post("no-front.md", "Just text.\n")
    write_post("no-title.md", _fm("date: 2023-05-22T01:00:00+02:00"))
    write_post("nested/also-good.md", post_text("Nested", "2023-05-28T01:00:00+02:00"))

    result = load_directory(tmp_path / "content")

    assert sorted(r.sort_path for r in result.records) == ["good.md", "nested/also-good.md"]
    failures = {p.as_posix(): type(e) for p, e in result.failures}
    assert failures == {"no-front.md": MissingFrontMatter, "no-title.md": ValidationError}
    assert result.ok is False


def test_load_directory_impossible_date_stays_local(write_post, tmp_path: Path) -> None:
    write_post("good.md", post_text("Good", "2023-05-22T01:00:00+02:00"))
    write_post("typo.md", _fm("title: Typo", "date: 2023-02-30T01:00:00+02:00"))

    result = load_directory(tmp_path / "content")

    assert [r.sort_path for r in result.records] == ["good.md"]
    assert [(p.as_posix(), type(e)) for p, e in result.failures] == [
        ("typo.md", MalformedFrontMatter)
    ]


def test_load_directory_non_utf8_is_a_failure(write_post, tmp_path: Path) -> None:
    write_post("good.md", post_text("Good", "2023-05-22T01:00:00+02:00"))
    (tmp_path / "content" / "latin1.md").write_bytes(b"---\ntitle: caf\xe9\n---\n")

    result = load_directory(tmp_path / "content")
    assert len(result.records) == 1
    assert len(result.failures) == 1
    assert isinstance(result.failures[0][1], UnicodeDecodeError)


def test_load_directory_skips_hidden_and_other_extensions(write_post, tmp_path: Path) -> None:
    write_post("a.md", post_text("A", "2023-05-22T01:00:00+02:00"))
    write_post(".draft-notes.md", "not front matter")
    write_post(".obsidian/cache.md", "not front matter")
    write_post("image-notes.txt", "not front matter")

    result = load_directory(tmp_path / "content")
    assert [r.sort_path for r in result.records] == ["a.md"]
    assert result.ok is True


def test_load_directory_custom_extensions(write_post, tmp_path: Path) -> None:
    write_post("a.md", post_text("A", "2023-05-22T01:00:00+02:00"))
    write_post("b.markdown", post_text("B", "2023-05-22T01:00:00+02:00"))

    result = load_directory(tmp_path / "content", extensions=(".md", ".markdown"))
    assert sorted(r.sort_path for r in result.records) == ["a.md", "b.markdown"]


def test_load_directory_missing_dir(tmp_path: Path) -> None:
    result = load_directory(tmp_path / "nope")
    assert result.records == []
    assert result.failures == []


def test_iter_content_files_sorted(write_post, tmp_path: Path) -> None:
    write_post("b.md", "x")
    write_post("a.md", "x")
    files = iter_content_files(tmp_path / "content")
    assert [p.name for p in files] == ["a.md", "b.md"]
