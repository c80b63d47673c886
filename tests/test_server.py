import base64
import gzip

import pytest

from blogkit.server import create_app

from conftest import write_entry


def basic(user, password):
    token = base64.b64encode(f"{user}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def app(publisher, config):
    app = create_app(config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def dev_app(publisher, config):
    app = create_app(config.replace(env="development"))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def site(publisher, config):
    write_entry(config.drafts_dir, "hello-there", excerpt="Greetings")
    publisher.publish_all()
    return config


def test_health_check(client):
    response = client.get("/health_check")
    assert response.status_code == 200
    assert response.data == b""


def test_index(client, site):
    response = client.get("/")
    assert response.status_code == 200
    assert b"/blog/hello-there.html" in response.data


def test_index_missing(client):
    assert client.get("/").status_code == 404


def test_blog_page(client, site):
    response = client.get("/blog/hello-there.html")
    assert response.status_code == 200
    assert b"<h1>Hello There</h1>" in response.data
    assert "Content-Encoding" not in response.headers


def test_blog_page_gzip(client, site):
    response = client.get("/blog/hello-there.html", headers={"Accept-Encoding": "gzip, deflate"})
    assert response.status_code == 200
    assert response.headers["Content-Encoding"] == "gzip"
    assert b"<h1>Hello There</h1>" in gzip.decompress(response.data)


def test_blog_missing_page(client, site):
    assert client.get("/blog/nothing.html").status_code == 404


def test_feed(client, site):
    response = client.get("/feed")
    assert response.status_code == 200
    assert response.mimetype == "application/rss+xml"
    assert b"<description>Greetings</description>" in response.data


def test_feed_missing(client):
    response = client.get("/feed")
    assert response.status_code == 500
    assert b"feed.rss" in response.data


def test_analytics_requires_credentials(client):
    response = client.get("/analytics")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Basic"
    assert response.data == b"This endpoint requires authentication.\n"


def test_analytics_bad_credentials(client):
    response = client.get("/analytics", headers=basic("admin", "wrong"))
    assert response.status_code == 401
    assert response.data == b"Bad credentials.\n"


def test_analytics(client, site):
    response = client.get("/analytics", headers=basic("admin", "s3cret"))
    assert response.status_code == 200
    assert response.data == b"drafts: 0\npublished: 1\npages: 1\n"


def test_preview_disabled_outside_development(client, config):
    write_entry(config.drafts_dir, "secret")
    assert client.get("/preview/secret", headers=basic("admin", "s3cret")).status_code == 404


def test_preview_requires_credentials(dev_app):
    assert dev_app.test_client().get("/preview/").status_code == 401


def test_preview_lists_drafts(dev_app, config):
    write_entry(config.drafts_dir, "wip-one")
    response = dev_app.test_client().get("/preview/", headers=basic("admin", "s3cret"))
    assert response.status_code == 200
    assert b'<a href="/preview/wip-one.md">wip-one.md</a>' in response.data


def test_preview_renders_without_writing(dev_app, config):
    path = write_entry(config.drafts_dir, "wip-two")
    response = dev_app.test_client().get("/preview/wip-two.md", headers=basic("admin", "s3cret"))
    assert response.status_code == 200
    assert b"<h1>Wip Two</h1>" in response.data
    assert path.is_file()
    assert not (config.output_dir / "wip-two.html").exists()


def test_preview_pipeline_error(dev_app, config):
    write_entry(config.drafts_dir, "broken", published="someday")
    response = dev_app.test_client().get("/preview/broken", headers=basic("admin", "s3cret"))
    assert response.status_code == 500
    assert b"someday" in response.data


def test_preview_unknown_draft(dev_app):
    response = dev_app.test_client().get("/preview/ghost", headers=basic("admin", "s3cret"))
    assert response.status_code == 404


def test_unexpected_errors_become_500(app):
    def boom():
        raise RuntimeError("kaboom")

    app.add_url_rule("/boom", "boom", boom)
    response = app.test_client().get("/boom")
    assert response.status_code == 500
    assert response.headers["Connection"] == "close"
    assert b"kaboom" not in response.data


def test_requests_are_logged(client, caplog):
    with caplog.at_level("INFO", logger="blogkit.server"):
        client.get("/health_check")
    assert "GET /health_check" in caplog.text
