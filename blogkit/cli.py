from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import TEMPLATES_DIR, ConfigError, SiteConfig, load_config
from .publisher import PIPELINE_ERRORS, Publisher
from .server import serve


def run_publish(publisher: Publisher, name: str) -> int:
    if name == "all":
        try:
            report = publisher.publish_all()
        except PIPELINE_ERRORS as exc:
            print("Error regenerating the site", file=sys.stderr)
            print(exc, file=sys.stderr)
            return 1
        for result in report.published:
            print(f"{result.name!r} published!")
        for result in report.failed:
            print(f"Error publishing entry {result.name!r}", file=sys.stderr)
            print(result.error, file=sys.stderr)
        if not report.results:
            print("No drafts to publish.")
        return 0 if report.ok else 1

    try:
        publisher.publish(name)
        publisher.generate_index()
        publisher.generate_feed()
        publisher.write_assets()
    except PIPELINE_ERRORS as exc:
        print(f"Error publishing entry {name!r}", file=sys.stderr)
        print(exc, file=sys.stderr)
        return 1
    print(f"{name!r} published!")
    return 0


def run_draft(publisher: Publisher, title: str) -> int:
    try:
        path = publisher.draft(title)
    except PIPELINE_ERRORS as exc:
        print(f"Error creating draft {title!r}", file=sys.stderr)
        print(exc, file=sys.stderr)
        return 1
    print(f"{path.name!r} created!")
    return 0


def run_generate(publisher: Publisher, feed: bool, index: bool) -> int:
    try:
        if index:
            print(f"Index written to {publisher.generate_index()}")
        if feed:
            print(f"Feed written to {publisher.generate_feed()}")
    except PIPELINE_ERRORS as exc:
        print("Error regenerating the site", file=sys.stderr)
        print(exc, file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="blog.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = SiteConfig.from_mapping(load_config(Path(pre_args.config)))
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(description="Markdown blog publisher.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--serve", "-serve", action="store_true", help="Start the web server.")
    parser.add_argument("--publish", "-publish", metavar="NAME", help="Draft to publish, or 'all'.")
    parser.add_argument("--draft", "-draft", metavar="TITLE", help="Create a new draft.")
    parser.add_argument("--feed", "-feed", action="store_true", help="Regenerate the RSS feed.")
    parser.add_argument("--index", "-index", action="store_true", help="Regenerate index.html.")
    parser.add_argument(
        "--source",
        default=str(config.source_dir),
        help="Directory holding the draft/ and published/ entries.",
    )
    parser.add_argument("--output", default=str(config.output_dir), help="Output directory for the site.")
    parser.add_argument(
        "--templates",
        default=str(config.templates_dir),
        help=f"Templates directory (default: {TEMPLATES_DIR}).",
    )
    parser.add_argument("--site-url", default=config.site_url, help="Public site URL used for the feed.")
    parser.add_argument("--port", default=config.port, type=int, help="Port for --serve.")
    parser.add_argument(
        "--workers",
        default=config.workers,
        type=int,
        help="Number of worker threads for --publish all (0 = one per draft).",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    config = config.replace(
        source_dir=args.source,
        output_dir=args.output,
        templates_dir=args.templates,
        site_url=args.site_url,
        port=args.port,
        workers=args.workers,
    )
    publisher = Publisher(config)

    if args.serve:
        serve(config)
        return 0
    if args.publish:
        return run_publish(publisher, args.publish)
    if args.draft:
        return run_draft(publisher, args.draft)
    if args.feed or args.index:
        return run_generate(publisher, feed=args.feed, index=args.index)

    print("Unknown operation.", file=sys.stderr)
    parser.print_usage(sys.stderr)
    return 1
