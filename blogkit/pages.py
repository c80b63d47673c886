from __future__ import annotations

import datetime as dt
import html
from collections.abc import Iterable
from dataclasses import dataclass, field
from urllib.parse import quote

from .config import SiteConfig
from .content import dump_front_matter
from .entry import HtmlEntry, MdEntry, parse_title
from .render import Templates
from .utils import join_url, rfc822_date


@dataclass(frozen=True)
class PageLink:
    link: str
    title: str
    sort_date: dt.date
    date: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeedItem:
    title: str
    link: str
    description: str
    created: dt.date


@dataclass
class Feed:
    title: str
    link: str
    description: str
    last_build: dt.datetime
    language: str
    items: list[FeedItem] = field(default_factory=list)


def page_url(entry: HtmlEntry, blog_path: str) -> str:
    return join_url(blog_path, quote(f"{entry.filename}.html"))


def page_link(entry: HtmlEntry, blog_path: str) -> PageLink:
    return PageLink(
        link=page_url(entry, blog_path),
        title=entry.title,
        sort_date=entry.revision_date,
        date=entry.revision,
        tags=entry.tags,
    )


def sort_page_links(links: Iterable[PageLink]) -> list[PageLink]:
    return sorted(links, key=lambda link: link.sort_date, reverse=True)


def build_tag_list(tags: Iterable[str]) -> str:
    return "".join(f'<li class="tag">{html.escape(tag)}</li>' for tag in tags)


def build_link_items(links: list[PageLink]) -> str:
    items = []
    for link in links:
        tags = build_tag_list(link.tags)
        items.append(
            f'<li class="entry"><a href="{html.escape(link.link)}">{html.escape(link.title)}</a>'
            f'<time>{link.date}</time>'
            + (f'<ul class="tags">{tags}</ul>' if tags else "")
            + "</li>"
        )
    return "\n".join(items)


def render_footer(templates: Templates, config: SiteConfig) -> str:
    return templates.render("footer.html", site_title=html.escape(config.site_title))


def render_entry_page(templates: Templates, entry: HtmlEntry, config: SiteConfig) -> str:
    return templates.render(
        "layout.html",
        title=html.escape(entry.title),
        excerpt=html.escape(entry.excerpt),
        published=entry.published,
        revision=entry.revision,
        tags=build_tag_list(entry.tags),
        site_title=html.escape(config.site_title),
        language=html.escape(config.language),
        blog_path=config.blog_path,
        footer=render_footer(templates, config),
        content=entry.body,
    )


def render_index(templates: Templates, links: list[PageLink], config: SiteConfig) -> str:
    return templates.render(
        "index.html",
        site_title=html.escape(config.site_title),
        site_description=html.escape(config.site_description),
        language=html.escape(config.language),
        footer=render_footer(templates, config),
        links=build_link_items(links),
    )


def feed_item(entry: HtmlEntry, config: SiteConfig) -> FeedItem:
    return FeedItem(
        title=entry.title,
        link=join_url(config.site_url, page_url(entry, config.blog_path)),
        description=entry.excerpt,
        created=entry.published_date,
    )


def build_feed(entries: Iterable[HtmlEntry], config: SiteConfig) -> Feed:
    entries = list(entries)
    if entries:
        last_build = max(entry.revision_date for entry in entries)
        last_build = dt.datetime.combine(last_build, dt.time.min, tzinfo=dt.timezone.utc)
    else:
        last_build = dt.datetime.now(dt.timezone.utc).replace(microsecond=0)
    ordered = sorted(entries, key=lambda entry: entry.published_date, reverse=True)
    return Feed(
        title=config.site_title,
        link=config.site_url.rstrip("/") + "/",
        description=config.site_description,
        last_build=last_build,
        language=config.language,
        items=[feed_item(entry, config) for entry in ordered],
    )


def render_feed(templates: Templates, feed: Feed) -> str:
    items = []
    for item in feed.items:
        link = html.escape(item.link)
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(item.title)}</title>",
                    f"<link>{link}</link>",
                    f'<guid isPermaLink="true">{link}</guid>',
                    f"<description>{html.escape(item.description)}</description>",
                    f"<pubDate>{rfc822_date(item.created)}</pubDate>",
                    "</item>",
                ]
            )
        )
    return templates.render(
        "feed.rss",
        title=html.escape(feed.title),
        link=html.escape(feed.link),
        description=html.escape(feed.description),
        last_build=rfc822_date(feed.last_build),
        language=html.escape(feed.language),
        items="\n".join(items),
    )


def render_draft(templates: Templates, entry: MdEntry) -> str:
    return templates.render(
        "entry.md",
        front_matter=dump_front_matter(entry.front_matter()).rstrip("\n"),
        heading=parse_title(entry.title),
    )


def render_draft_list(names: Iterable[str], preview_path: str) -> str:
    rows = []
    for name in names:
        url = join_url(preview_path, name)
        rows.append(f'<li><a href="{html.escape(url)}">{html.escape(name)}</a></li>')
    return "<ul>" + "".join(rows) + "</ul>"
