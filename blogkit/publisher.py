from __future__ import annotations

import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from .config import SiteConfig
from .content import read_markdown
from .entry import RESERVED_FILENAMES, HtmlEntry, new_html_entry, new_md_entry, parse_title
from .pages import (
    build_feed,
    page_link,
    render_draft,
    render_entry_page,
    render_feed,
    render_index,
    sort_page_links,
)
from .render import Templates, highlight_css, render_markdown
from .utils import list_files, remove_quietly, write_text

logger = logging.getLogger(__name__)

INDEX_PAGE = "index.html"
FEED_FILE = "feed.rss"
HIGHLIGHT_CSS = Path("css") / "highlight.css"


class PublishError(Exception):
    pass


PIPELINE_ERRORS = (OSError, ValueError, PublishError)


@dataclass(frozen=True)
class PublishResult:
    name: str
    path: Path | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PublishReport:
    results: list[PublishResult] = field(default_factory=list)

    @property
    def published(self) -> list[PublishResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> list[PublishResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def markdown_name(name: str) -> str:
    if not name.endswith(".md"):
        name = f"{name}.md"
    if not name or Path(name).name != name or name.startswith("."):
        raise PublishError(f"invalid entry name: {name!r}")
    return name


class Publisher:
    """Moves entries through draft -> published and keeps the site in sync.

    Sources live in ``<source_dir>/draft`` and ``<source_dir>/published``,
    generated pages, the index and the feed in ``<output_dir>``.
    """

    def __init__(self, config: SiteConfig | None = None) -> None:
        self.config = config or SiteConfig()
        self.templates = Templates(self.config.templates_dir)

    def list_drafts(self) -> list[Path]:
        return list_files(self.config.drafts_dir, ".md")

    def list_published(self) -> list[Path]:
        return list_files(self.config.published_dir, ".md")

    def list_pages(self) -> list[str]:
        return [path.name for path in list_files(self.config.output_dir, ".html") if path.name != INDEX_PAGE]

    def read_entry(self, path: Path) -> HtmlEntry:
        front_matter, _ = read_markdown(path)
        return new_html_entry(front_matter)

    def load(self, path: Path) -> HtmlEntry:
        front_matter, body = read_markdown(path)
        entry = new_html_entry(front_matter)
        return entry.with_body(render_markdown(body))

    def draft_path(self, name: str) -> Path:
        path = self.config.drafts_dir / markdown_name(name)
        if not path.is_file():
            raise PublishError(f"draft not found: {path}")
        return path

    def page_owner(self, filename: str) -> str | None:
        """Name of the published source that already renders to ``filename``."""
        for path in self.list_published():
            try:
                front_matter, _ = read_markdown(path)
            except FileNotFoundError:
                # moved back to draft/ by a failed publish
                continue
            if front_matter.get("title") == filename:
                return path.name
        return None

    def preview(self, name: str) -> tuple[str, HtmlEntry]:
        entry = self.load(self.draft_path(name))
        return render_entry_page(self.templates, entry, self.config), entry

    def publish(self, name: str) -> Path:
        """Render a draft into the output directory and mark it published.

        The page goes to a temporary file first. The source is moved to
        ``published/`` and only then the page replaces ``<filename>.html``;
        if that last step fails the source is moved back to ``draft/``.
        """
        source = self.draft_path(name)
        entry = self.load(source)
        page = render_entry_page(self.templates, entry, self.config)
        owner = self.page_owner(entry.filename)
        if owner is not None and owner != source.name:
            raise PublishError(f"{entry.filename}.html is already published from {owner}")

        output_dir = self.config.output_dir
        output_dir.mkdir(parents=True, exist_ok=True)
        target = output_dir / f"{entry.filename}.html"
        fd, tmp_name = tempfile.mkstemp(prefix=f".{entry.filename}.", suffix=".tmp", dir=output_dir)
        tmp = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(page)
        except OSError:
            remove_quietly(tmp)
            raise

        published = self.config.published_dir / source.name
        try:
            published.parent.mkdir(parents=True, exist_ok=True)
            os.replace(source, published)
        except OSError:
            remove_quietly(tmp)
            raise

        try:
            os.replace(tmp, target)
        except OSError:
            logger.warning("Could not write %s, moving %s back to drafts", target, source.name)
            os.replace(published, source)
            remove_quietly(tmp)
            raise

        logger.info("Published %s as %s", source.name, target)
        return target

    def publish_all(self, workers: int | None = None) -> PublishReport:
        drafts = self.list_drafts()
        report = PublishReport()
        if not drafts:
            return report

        pending = []
        claimed: dict[str, str] = {}
        for path in drafts:
            try:
                filename = read_markdown(path)[0].get("title")
            except PIPELINE_ERRORS:
                # publish reports the parse error itself
                filename = None
            if filename is not None and filename in claimed:
                error = PublishError(f"{filename}.html is also the page of {claimed[filename]}")
                logger.error("Failed to publish %s: %s", path.name, error)
                report.results.append(PublishResult(path.name, error=error))
                continue
            if filename is not None:
                claimed[filename] = path.name
            pending.append(path)

        if pending:
            workers = workers or self.config.workers or len(pending)
            with ThreadPoolExecutor(max_workers=max(1, min(workers, len(pending)))) as executor:
                futures = [(path.name, executor.submit(self.publish, path.name)) for path in pending]
                for name, future in futures:
                    try:
                        report.results.append(PublishResult(name, path=future.result()))
                    except Exception as exc:
                        logger.error("Failed to publish %s: %s", name, exc)
                        report.results.append(PublishResult(name, error=exc))

        if report.published:
            self.generate_index()
            self.generate_feed()
            self.write_assets()
        return report

    def published_entries(self) -> list[HtmlEntry]:
        return [self.read_entry(path) for path in self.list_published()]

    def generate_index(self) -> Path:
        links = sort_page_links(page_link(entry, self.config.blog_path) for entry in self.published_entries())
        path = self.config.output_dir / INDEX_PAGE
        write_text(path, render_index(self.templates, links, self.config))
        logger.info("Index written with %d entries", len(links))
        return path

    def generate_feed(self) -> Path:
        feed = build_feed(self.published_entries(), self.config)
        path = self.config.output_dir / FEED_FILE
        write_text(path, render_feed(self.templates, feed))
        logger.info("Feed written with %d items", len(feed.items))
        return path

    def write_assets(self) -> Path:
        path = self.config.output_dir / HIGHLIGHT_CSS
        write_text(path, highlight_css(self.config.highlight_style))
        return path

    def draft(self, title: str) -> Path:
        name = markdown_name(title)
        stem = title.removesuffix(".md")
        if not parse_title(stem) or stem.lower() in RESERVED_FILENAMES:
            raise PublishError(f"invalid entry name: {title!r}")
        path = self.config.drafts_dir / name
        if path.exists() or (self.config.published_dir / name).exists():
            raise PublishError(f"entry already exists: {name}")
        entry = new_md_entry(name.removesuffix(".md"))
        write_text(path, render_draft(self.templates, entry))
        return path
