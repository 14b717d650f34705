import logging
from typing import Dict, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from sitemeta.models import SiteMetadata
from sitemeta.services.url_normalizer import origin_of

logger = logging.getLogger(__name__)

# Ranked meta keys per field, highest first. <title> outranks all title keys.
META_SOURCES = {
    "title": ("og:title", "twitter:title"),
    "description": ("description", "og:description", "twitter:description"),
    "site_name": ("og:site_name", "application-name"),
    "og_image": ("og:image", "twitter:image"),
}
META_KEYS = {key for keys in META_SOURCES.values() for key in keys}


def fetch_html(url: str, scraper, timeout: float = 15) -> str:
    resp = scraper.get(url, timeout=timeout, allow_redirects=True)
    resp.raise_for_status()
    return resp.text


def _meta_key(tag) -> Optional[str]:
    for attr in ("name", "property"):
        value = tag.get(attr)
        if isinstance(value, str) and value.strip().lower() in META_KEYS:
            return value.strip().lower()
    return None


def _first_icon_href(soup: BeautifulSoup) -> Optional[str]:
    for link in soup.find_all("link"):
        rel = link.get("rel")
        if isinstance(rel, list):
            rel = " ".join(rel)
        href = link.get("href")
        if isinstance(rel, str) and "icon" in rel.lower() and isinstance(href, str) and href.strip():
            return href.strip()
    return None


def extract_metadata(html: str, base_url: str) -> SiteMetadata:
    """
    Best-effort scan of a document for title, description-like meta tags and
    the first icon link.

    Covers ``icon``, ``shortcut icon`` and ``apple-touch-icon`` links; relative
    hrefs and ``og:image`` are resolved against the page origin. Entities are
    decoded by the parser. Broken markup yields partial or empty metadata,
    never an exception.
    """
    try:
        soup = BeautifulSoup(html or "", "html.parser")
        data: Dict[str, Optional[str]] = {}

        if title_tag := soup.find("title"):
            data["title"] = title_tag.get_text(strip=True) or None

        found: Dict[str, str] = {}
        for tag in soup.find_all("meta"):
            key = _meta_key(tag)
            content = tag.get("content")
            if key and key not in found and isinstance(content, str) and content.strip():
                found[key] = content.strip()

        for field, keys in META_SOURCES.items():
            if data.get(field):
                continue
            data[field] = next((found[key] for key in keys if key in found), None)

        origin = origin_of(base_url)
        if data.get("og_image"):
            data["og_image"] = urljoin(origin + "/", data["og_image"])

        if href := _first_icon_href(soup):
            icon_url = urljoin(origin + "/", href)
            data["icon"] = icon_url
            data["favicon"] = icon_url

        return SiteMetadata(**data)
    except Exception as e:
        logger.warning(f"Failed to extract metadata for {base_url}: {e}")
        return SiteMetadata()
