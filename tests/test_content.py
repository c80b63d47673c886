import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

from blogkit.content import (
    FrontMatterError,
    dump_front_matter,
    parse_front_matter,
    parse_list,
    read_markdown,
)


def test_parse_front_matter_splits_header_and_body():
    lines = [
        "---\n",
        "title: a-title\n",
        "published: 2020-01-02\n",
        "---\n",
        "# Hello\n",
        "\n",
        "world\n",
    ]
    meta, body = parse_front_matter(lines)
    assert meta == {"title": "a-title", "published": "2020-01-02"}
    assert body == b"# Hello\n\nworld\n"


def test_delimiters_and_values_are_trimmed():
    meta, body = parse_front_matter(["  ---  ", "excerpt:   spaced out  ", "---"])
    assert meta == {"excerpt": "spaced out"}
    assert body == b""


def test_value_keeps_everything_after_first_colon():
    meta, _ = parse_front_matter(["---", "excerpt: time: 10:30", "---"])
    assert meta["excerpt"] == "time: 10:30"


def test_lines_before_opening_delimiter_are_ignored():
    meta, body = parse_front_matter(["preamble", "---", "title: x", "---", "body"])
    assert meta == {"title": "x"}
    assert body == b"body\n"


def test_duplicate_key_last_write_wins():
    meta, _ = parse_front_matter(["---", "title: one", "title: two", "---"])
    assert meta == {"title": "two"}


def test_line_without_colon_is_rejected():
    with pytest.raises(FrontMatterError, match="invalid front matter key-value pair"):
        parse_front_matter(["---", "title: x", "not a pair", "---"])


def test_missing_closing_delimiter():
    with pytest.raises(FrontMatterError, match="no content found"):
        parse_front_matter(["---", "title: x"])


def test_empty_document():
    with pytest.raises(FrontMatterError, match="no content found"):
        parse_front_matter([])


def test_body_lines_after_a_third_delimiter_are_kept():
    _, body = parse_front_matter(["---", "a: b", "---", "text", "---", "more"])
    assert body == b"text\n---\nmore\n"


def test_read_markdown_handles_bom_and_crlf(tmp_path):
    path = tmp_path / "entry.md"
    path.write_bytes("\ufeff---\r\ntitle: bom\r\n---\r\nbody\r\n".encode("utf-8"))
    meta, body = read_markdown(path)
    assert meta == {"title": "bom"}
    assert body == b"body\n"


def test_read_markdown_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_markdown(tmp_path / "nope.md")


def test_front_matter_round_trip():
    original = {
        "title": "a-title",
        "published": "1987-08-06",
        "revision": "1987-08-07",
        "excerpt": "blah blah",
        "tags": "go, python",
    }
    meta, body = parse_front_matter(dump_front_matter(original).splitlines())
    assert meta == original
    assert body == b""


@pytest.mark.parametrize(
    "value,expected",
    [
        ("", []),
        ("a", ["a"]),
        ("a, b ,c", ["a", "b", "c"]),
        ("a,,b", ["a", "b"]),
        ("[a, b]", ["[a", "b]"]),
    ],
)
def test_parse_list(value, expected):
    assert parse_list(value) == expected


KEYS = st.text(alphabet=string.ascii_lowercase + "_", min_size=1, max_size=12)
VALUES = st.text(alphabet=string.ascii_letters + string.digits + " :,.-_'", max_size=40).map(
    lambda value: value.strip(" ")
)


@given(st.dictionaries(KEYS, VALUES, max_size=8))
def test_front_matter_round_trip_property(meta):
    parsed, body = parse_front_matter(dump_front_matter(meta).splitlines())
    assert parsed == meta
    assert body == b""
