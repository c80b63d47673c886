from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

DELIMITER = "---"


class FrontMatterError(ValueError):
    pass


def parse_list(value: str) -> list[str]:
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]


def parse_front_matter(lines: Iterable[str]) -> tuple[dict[str, str], bytes]:
    """Split a document into its front matter and raw body.

    Lines before the opening ``---`` are skipped. Inside the block every
    line must be a ``key: value`` pair. Everything after the closing
    delimiter is returned untouched as the body, one ``\\n`` per line.
    """
    meta: dict[str, str] = {}
    opened = False
    it = iter(lines)
    for raw in it:
        line = raw.rstrip("\r\n").lstrip("\ufeff").strip(" ")
        if line == DELIMITER:
            if opened:
                body = "".join(rest.rstrip("\r\n") + "\n" for rest in it)
                return meta, body.encode("utf-8")
            opened = True
            continue
        if not opened:
            continue
        if ":" not in line:
            raise FrontMatterError("invalid front matter key-value pair")
        key, value = line.split(":", 1)
        meta[key.strip(" ")] = value.strip(" ")
    raise FrontMatterError("no content found")


def read_markdown(path: Path) -> tuple[dict[str, str], bytes]:
    with open(path, encoding="utf-8") as handle:
        return parse_front_matter(handle)


def dump_front_matter(meta: Mapping[str, str]) -> str:
    lines = [DELIMITER]
    for key, value in meta.items():
        lines.append(f"{key}: {value}")
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n"
