from pathlib import Path

import pytest

from blogkit.config import SiteConfig
from blogkit.publisher import Publisher

ENTRY = """---
title: {title}
published: {published}
revision: {revision}
excerpt: {excerpt}
tags: {tags}
---

# Heading

Some *text* here.
"""


def write_entry(
    directory: Path,
    name: str,
    title: str | None = None,
    published: str = "2023-01-10",
    revision: str = "2023-01-10",
    excerpt: str = "An excerpt",
    tags: str = "",
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{name}.md"
    path.write_text(
        ENTRY.format(
            title=title or name,
            published=published,
            revision=revision,
            excerpt=excerpt,
            tags=tags,
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def config(tmp_path):
    return SiteConfig(
        source_dir=tmp_path / "entries",
        output_dir=tmp_path / "pages",
        site_title="test blog",
        site_url="https://blog.example.com",
        basic_auth_user="admin",
        basic_auth_pass="s3cret",
    )


@pytest.fixture
def publisher(config):
    config.drafts_dir.mkdir(parents=True)
    config.published_dir.mkdir(parents=True)
    return Publisher(config)
