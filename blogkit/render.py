from __future__ import annotations

import re
from pathlib import Path

import markdown
from markdown.extensions.codehilite import CodeHiliteExtension
from pygments.formatters import HtmlFormatter

LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
HIGHLIGHT_CLASS = "highlight"
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def separate_lists(text: str) -> str:
    """Insert a blank line before top level lists that follow a paragraph.

    Python-Markdown only starts a list after a blank line, CommonMark
    doesn't need one. Fenced code is left alone.
    """
    out: list[str] = []
    fence_marker = ""
    for line in text.splitlines():
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not fence_marker:
                fence_marker = marker
            elif marker == fence_marker:
                fence_marker = ""
        elif not fence_marker:
            list_match = LIST_MARKER_RE.match(line)
            if list_match and not list_match.group("indent"):
                if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                    out.append("")
        out.append(line)
    return "\n".join(out)


def render_markdown(body: bytes) -> str:
    md = markdown.Markdown(
        extensions=[
            "fenced_code",
            "tables",
            CodeHiliteExtension(css_class=HIGHLIGHT_CLASS, guess_lang=False),
        ]
    )
    return md.convert(separate_lists(body.decode("utf-8")))


def highlight_css(style: str = "default") -> str:
    return HtmlFormatter(style=style).get_style_defs(f".{HIGHLIGHT_CLASS}")


def render_template(template: str, /, **context: str) -> str:
    # single pass, substituted values are never scanned again
    return PLACEHOLDER_RE.sub(lambda match: context.get(match.group(1), match.group(0)), template)


class Templates:
    """Loads named template files from one directory, once each."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self._cache: dict[str, str] = {}

    def read(self, name: str) -> str:
        if name not in self._cache:
            self._cache[name] = (self.root / name).read_text(encoding="utf-8")
        return self._cache[name]

    def render(self, name: str, /, **context: str) -> str:
        return render_template(self.read(name), **context)
