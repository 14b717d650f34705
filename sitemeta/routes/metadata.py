import logging
from typing import List

import cloudscraper
from fastapi import APIRouter, Depends, HTTPException, Request

from sitemeta.exceptions import NormalizationError
from sitemeta.models import BatchFetchRequest, FetchMetadataRequest, ParseWebsiteRequest
from sitemeta.services.metadata_fetcher import WebsiteParser
from sitemeta.services.scrape_meta import extract_metadata, fetch_html
from sitemeta.services.url_normalizer import normalize_url

router = APIRouter()

logger = logging.getLogger(__name__)

DEFAULT_PARSE_TIMEOUT_MS = 10000


def get_resolver(request: Request) -> WebsiteParser:
    return request.app.state.resolver


@router.post("/api/parse-website")
def parse_website(payload: ParseWebsiteRequest):
    """Server-side fetch used by the engine's backend strategy."""
    if not payload.url:
        raise HTTPException(status_code=400, detail="URL is required")
    try:
        url = normalize_url(payload.url)
    except NormalizationError as e:
        logger.warning(f"Rejected parse request for {payload.url!r}: {e}")
        raise HTTPException(status_code=400, detail="Invalid URL format")

    timeout_ms = payload.timeout if payload.timeout and payload.timeout > 0 else DEFAULT_PARSE_TIMEOUT_MS
    try:
        scraper = cloudscraper.create_scraper()
        html = fetch_html(url, scraper, timeout=timeout_ms / 1000)
    except Exception as e:
        logger.error(f"Failed to fetch {url}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch URL: {e}")

    metadata = extract_metadata(html, url)
    logger.info(f"Parsed {url}: {metadata.title!r}")
    return metadata.to_payload()


@router.post("/fetch-metadata")
def fetch_metadata(payload: FetchMetadataRequest, resolver: WebsiteParser = Depends(get_resolver)):
    try:
        record = resolver.resolve(
            payload.url,
            policy=payload.policy,
            force_refresh=payload.force_refresh,
            timeout_ms=payload.timeout_ms,
        )
    except NormalizationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return record.to_payload()


@router.post("/fetch-metadata/batch")
def fetch_metadata_batch(payload: BatchFetchRequest, resolver: WebsiteParser = Depends(get_resolver)) -> List[dict]:
    records = resolver.resolve_many(
        payload.urls, policy=payload.policy, force_refresh=payload.force_refresh
    )
    return [record.to_payload() for record in records]


@router.delete("/metadata-cache", status_code=204)
def clear_metadata_cache(resolver: WebsiteParser = Depends(get_resolver)):
    resolver.clear_cache()
