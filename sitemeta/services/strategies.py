import logging
import time
from typing import Optional

import cloudscraper
import requests

from sitemeta.exceptions import StrategyFailure
from sitemeta.models import SiteMetadata
from sitemeta.services.favicon_prober import FaviconProber
from sitemeta.services.scrape_meta import extract_metadata, fetch_html
from sitemeta.services.url_normalizer import origin_of

logger = logging.getLogger(__name__)

# Share of the strategy timeout never handed to the favicon probe
PROBE_MARGIN_S = 0.1


def backend_timeout_ms(timeout_ms: int) -> int:
    """Timeout forwarded to the backend, always strictly below the caller's."""
    return max(timeout_ms - 1000, timeout_ms // 2)


class BackendStrategy:
    """Delegates fetching to the server-side parse endpoint."""

    name = "api"

    def __init__(self, endpoint: str):
        self.endpoint = endpoint

    def fetch(self, url: str, timeout_ms: int) -> SiteMetadata:
        payload = {"url": url, "timeout": backend_timeout_ms(timeout_ms)}
        try:
            resp = requests.post(self.endpoint, json=payload, timeout=timeout_ms / 1000)
        except requests.exceptions.Timeout:
            raise StrategyFailure(self.name, f"API request timed out after {timeout_ms}ms")
        except requests.exceptions.RequestException as e:
            raise StrategyFailure(self.name, f"API request error: {e}")

        if not resp.ok:
            raise StrategyFailure(self.name, f"API request failed: {resp.status_code}")
        try:
            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return SiteMetadata.model_validate(data)
        except ValueError as e:
            raise StrategyFailure(self.name, f"Invalid API response: {e}")


class DirectStrategy:
    """Fetches the page itself, scans its markup and probes for a favicon."""

    name = "client"

    def __init__(self, prober: Optional[FaviconProber] = None):
        self.prober = prober or FaviconProber()

    def fetch(self, url: str, timeout_ms: int, known: Optional[SiteMetadata] = None) -> SiteMetadata:
        if known is not None and not known.is_empty():
            logger.info(f"Using known site info for {url}")
            return known.model_copy()

        timeout_s = timeout_ms / 1000
        deadline = time.monotonic() + timeout_s
        try:
            scraper = cloudscraper.create_scraper()
            html = fetch_html(url, scraper, timeout=timeout_s)
        except Exception as e:
            logger.warning(f"Direct fetch failed for {url}: {e}")
            raise StrategyFailure(self.name, f"Failed to fetch URL: {e}")

        metadata = extract_metadata(html, url)
        if not metadata.icon and not metadata.favicon:
            remaining = deadline - time.monotonic() - PROBE_MARGIN_S
            if remaining > 0:
                favicon = self.prober.probe(origin_of(url), timeout_s=min(self.prober.timeout_s, remaining))
                if favicon:
                    metadata = metadata.model_copy(update={"favicon": favicon})
            else:
                logger.info(f"No time left to probe favicon for {url}")
        logger.info(f"Direct strategy succeeded for {url}")
        return metadata
