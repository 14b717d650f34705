from unittest.mock import MagicMock, patch

import pytest
import requests
from fastapi.testclient import TestClient

from sitemeta.exceptions import NormalizationError
from sitemeta.main import app
from sitemeta.models import MetadataRecord
from sitemeta.routes.metadata import get_resolver

client = TestClient(app)


@pytest.fixture
def resolver():
    mock_resolver = MagicMock()
    app.dependency_overrides[get_resolver] = lambda: mock_resolver
    yield mock_resolver
    app.dependency_overrides.clear()


def test_read_root():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to the Site Metadata API!"}


@patch("sitemeta.routes.metadata.cloudscraper.create_scraper")
def test_parse_website(mock_create_scraper):
    mock_create_scraper.return_value.get.return_value.text = """
        <html><head><title>Example</title>
        <meta name="description" content="An example">
        <meta property="og:site_name" content="Example Inc">
        <meta property="og:image" content="/og.png">
        <link rel="icon" href="/favicon.ico"></head></html>
    """

    response = client.post("/api/parse-website", json={"url": "https://example.org/page", "timeout": 4000})

    assert response.status_code == 200
    assert response.json() == {
        "title": "Example",
        "description": "An example",
        "icon": "https://example.org/favicon.ico",
        "favicon": "https://example.org/favicon.ico",
        "siteName": "Example Inc",
        "ogImage": "https://example.org/og.png",
    }
    mock_create_scraper.return_value.get.assert_called_once_with(
        "https://example.org/page", timeout=4.0, allow_redirects=True
    )


@pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": "not a url"}, {"url": "ftp://example.org"}])
def test_parse_website_rejects_bad_urls(body):
    response = client.post("/api/parse-website", json=body)
    assert response.status_code == 400


@patch("sitemeta.routes.metadata.cloudscraper.create_scraper")
def test_parse_website_upstream_failure(mock_create_scraper):
    mock_create_scraper.return_value.get.side_effect = requests.exceptions.ConnectionError("refused")

    response = client.post("/api/parse-website", json={"url": "https://unreachable.example"})

    assert response.status_code == 502
    assert "refused" in response.json()["detail"]


def test_fetch_metadata(resolver):
    resolver.resolve.return_value = MetadataRecord(
        url="https://example.org", title="Example", site_name="Example", icon="🌐"
    )

    response = client.post("/fetch-metadata", json={"url": "example.org", "policy": "client"})

    assert response.status_code == 200
    assert response.json() == {
        "url": "https://example.org",
        "title": "Example",
        "siteName": "Example",
        "icon": "🌐",
    }
    args, kwargs = resolver.resolve.call_args
    assert args == ("example.org",)
    assert kwargs["policy"] == "client"
    assert kwargs["force_refresh"] is False


def test_fetch_metadata_invalid_url(resolver):
    resolver.resolve.side_effect = NormalizationError("Unsupported URL scheme: 'ftp'")

    response = client.post("/fetch-metadata", json={"url": "ftp://example.org"})

    assert response.status_code == 400


@pytest.mark.parametrize("timeout_ms", [0, -500])
def test_fetch_metadata_rejects_non_positive_timeout(resolver, timeout_ms):
    response = client.post("/fetch-metadata", json={"url": "example.org", "timeout_ms": timeout_ms})

    assert response.status_code == 422
    resolver.resolve.assert_not_called()


def test_fetch_metadata_rejects_unknown_policy(resolver):
    response = client.post("/fetch-metadata", json={"url": "https://example.org", "policy": "fastest"})
    assert response.status_code == 422
    resolver.resolve.assert_not_called()


def test_fetch_metadata_batch(resolver):
    resolver.resolve_many.return_value = [
        MetadataRecord(url="https://a.example", title="A"),
        MetadataRecord(url="ftp://b", title="ftp://b", icon="🌐", error="Unsupported URL scheme"),
    ]

    response = client.post("/fetch-metadata/batch", json={"urls": ["a.example", "ftp://b"]})

    assert response.status_code == 200
    data = response.json()
    assert [item["url"] for item in data] == ["https://a.example", "ftp://b"]
    assert "error" not in data[0]
    assert data[1]["error"] == "Unsupported URL scheme"


def test_clear_metadata_cache(resolver):
    response = client.delete("/metadata-cache")

    assert response.status_code == 204
    resolver.clear_cache.assert_called_once_with()
