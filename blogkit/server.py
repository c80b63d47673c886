from __future__ import annotations

import gzip
import logging

from flask import Flask, Response, current_app, request, send_from_directory
from waitress import serve as waitress_serve
from werkzeug.exceptions import HTTPException

from .auth import requires_auth
from .config import SiteConfig
from .pages import render_draft_list
from .publisher import FEED_FILE, INDEX_PAGE, PublishError, Publisher

logger = logging.getLogger(__name__)

PREVIEW_PATH = "/preview/"


def get_publisher() -> Publisher:
    return current_app.extensions["blogkit"]


def log_request() -> None:
    logger.info("%s %s %s", request.method, request.full_path.rstrip("?"), request.environ.get("SERVER_PROTOCOL", ""))


def handle_exception(exc: Exception):
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Unhandled error in %s %s", request.method, request.path)
    response = Response("Internal Server Error\n", status=500, mimetype="text/plain")
    response.headers["Connection"] = "close"
    return response


def gzip_response(response: Response) -> Response:
    if not request.path.startswith("/blog/"):
        return response
    if "gzip" not in request.headers.get("Accept-Encoding", ""):
        return response
    if response.status_code != 200 or "Content-Encoding" in response.headers:
        return response
    response.direct_passthrough = False
    response.set_data(gzip.compress(response.get_data()))
    response.headers["Content-Encoding"] = "gzip"
    response.headers["Content-Length"] = str(len(response.get_data()))
    response.vary.add("Accept-Encoding")
    return response


def index():
    return send_from_directory(current_app.config["SITE"].output_dir.resolve(), INDEX_PAGE)


def blog(filename: str):
    return send_from_directory(current_app.config["SITE"].output_dir.resolve(), filename)


def health_check():
    return Response(status=200)


def feed():
    path = current_app.config["SITE"].output_dir / FEED_FILE
    try:
        data = path.read_bytes()
    except OSError as exc:
        return Response(f"{exc}\n", status=500, mimetype="text/plain")
    return Response(data, mimetype="application/rss+xml")


@requires_auth
def analytics():
    publisher = get_publisher()
    lines = [
        f"drafts: {len(publisher.list_drafts())}",
        f"published: {len(publisher.list_published())}",
        f"pages: {len(publisher.list_pages())}",
    ]
    return Response("\n".join(lines) + "\n", mimetype="text/plain")


@requires_auth
def preview(name: str = ""):
    publisher = get_publisher()
    if not name:
        names = [path.name for path in publisher.list_drafts()]
        return Response(render_draft_list(names, PREVIEW_PATH), mimetype="text/html")
    try:
        page, _ = publisher.preview(name)
    except PublishError as exc:
        return Response(f"{exc}\n", status=404, mimetype="text/plain")
    except (OSError, ValueError) as exc:
        return Response(f"{exc}\n", status=500, mimetype="text/plain")
    return Response(page, mimetype="text/html")


def create_app(config: SiteConfig | None = None) -> Flask:
    config = config or SiteConfig.from_mapping({})
    app = Flask(__name__)
    app.config["SITE"] = config
    app.extensions["blogkit"] = Publisher(config)

    app.before_request(log_request)
    app.after_request(gzip_response)
    app.register_error_handler(Exception, handle_exception)

    app.add_url_rule("/", "index", index)
    app.add_url_rule("/blog/<path:filename>", "blog", blog)
    app.add_url_rule("/health_check", "health_check", health_check)
    app.add_url_rule("/feed", "feed", feed)
    app.add_url_rule("/analytics", "analytics", analytics)
    if config.is_development:
        app.add_url_rule(PREVIEW_PATH, "preview_list", preview)
        app.add_url_rule(f"{PREVIEW_PATH}<name>", "preview", preview)
    return app


def serve(config: SiteConfig) -> None:
    app = create_app(config)
    logger.info("Server up on %s:%d", config.host, config.port)
    waitress_serve(app, host=config.host, port=config.port, channel_timeout=config.timeout)
