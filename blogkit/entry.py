from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from .content import parse_list

INPUT_DATE_FORMAT = "%Y-%m-%d"
REQUIRED_KEYS = ("published", "revision", "title", "excerpt")
RESERVED_FILENAMES = ("index",)


class EntryError(ValueError):
    pass


@dataclass(frozen=True)
class HtmlEntry:
    filename: str
    title: str
    published_date: dt.date
    revision_date: dt.date
    excerpt: str
    tags: tuple[str, ...] = ()
    body: str = ""

    @property
    def published(self) -> str:
        return display_date(self.published_date)

    @property
    def revision(self) -> str:
        return display_date(self.revision_date)

    def with_body(self, body: str) -> HtmlEntry:
        return replace(self, body=body)


@dataclass
class MdEntry:
    title: str
    published: str
    revision: str
    excerpt: str = ""
    tags: list[str] = field(default_factory=list)

    def front_matter(self) -> dict[str, str]:
        return {
            "title": self.title,
            "published": self.published,
            "revision": self.revision,
            "excerpt": self.excerpt,
            "tags": ", ".join(self.tags),
        }


def parse_date(value: str) -> dt.date:
    # strptime accepts unpadded fields, the round trip rejects them
    parsed = dt.datetime.strptime(value, INPUT_DATE_FORMAT).date()
    if parsed.strftime(INPUT_DATE_FORMAT) != value:
        raise ValueError(f"time data {value!r} does not match format {INPUT_DATE_FORMAT!r}")
    return parsed


def display_date(value: dt.date) -> str:
    return f"{value:%B} {value.day}, {value.year}"


def format_date(value: str) -> str:
    return display_date(parse_date(value))


def parse_title(value: str) -> str:
    words = [word[0].upper() + word[1:] for word in value.split("-") if word]
    return " ".join(words)


def parse_tags(value: str) -> tuple[str, ...]:
    return tuple(dict.fromkeys(parse_list(value)))


def new_html_entry(front_matter: Mapping[str, str]) -> HtmlEntry:
    """Validate a front matter mapping and project it into an HtmlEntry.

    Keys are checked in the order published, revision, title, excerpt and
    the first problem found is raised. Date errors come straight from the
    date parser. The returned entry has no body yet.
    """
    if "published" not in front_matter:
        raise EntryError("missing publish date in front matter")
    published = parse_date(front_matter["published"])

    if "revision" not in front_matter:
        raise EntryError("missing revision date in front matter")
    revision = parse_date(front_matter["revision"])

    if "title" not in front_matter:
        raise EntryError("missing title in front matter")
    filename = front_matter["title"]
    title = parse_title(filename)
    if not title or "/" in filename or "\\" in filename or filename.lower() in RESERVED_FILENAMES:
        raise EntryError("invalid title in front matter")

    if "excerpt" not in front_matter:
        raise EntryError("missing excerpt in front matter")

    return HtmlEntry(
        filename=filename,
        title=title,
        published_date=published,
        revision_date=revision,
        excerpt=front_matter["excerpt"],
        tags=parse_tags(front_matter.get("tags", "")),
    )


def new_md_entry(title: str, today: dt.date | None = None) -> MdEntry:
    date = (today or dt.date.today()).strftime(INPUT_DATE_FORMAT)
    return MdEntry(title=title, published=date, revision=date)
