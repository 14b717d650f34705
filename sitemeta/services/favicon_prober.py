import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError, as_completed
from typing import List, Optional, Sequence

import requests

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/129.0.0.0 Safari/537.36 SiteMetaBot/1.0"
)

FAVICON_PATHS = (
    "/favicon.ico",
    "/favicon.png",
    "/apple-touch-icon.png",
    "/android-chrome-192x192.png",
    "/static/favicon.ico",
    "/assets/favicon.ico",
    "/img/favicon.ico",
    "/images/favicon.ico",
)


class FaviconProber:
    """
    Looks for a favicon at conventional paths when the markup declares none.

    All candidates are probed at once with HEAD requests; whichever answers
    successfully first wins, regardless of its position in the list.
    """

    def __init__(
        self,
        candidate_paths: Sequence[str] = FAVICON_PATHS,
        timeout_s: float = 5.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.candidate_paths = tuple(candidate_paths)
        self.timeout_s = timeout_s
        self.headers = {"User-Agent": user_agent, "Accept": "image/*,*/*;q=0.8"}

    def candidates(self, origin: str) -> List[str]:
        origin = origin.rstrip("/")
        return [f"{origin}{path}" for path in self.candidate_paths]

    def probe_one(self, icon_url: str, timeout_s: Optional[float] = None) -> bool:
        try:
            resp = requests.head(
                icon_url,
                timeout=timeout_s or self.timeout_s,
                allow_redirects=True,
                headers=self.headers,
            )
            return resp.ok
        except requests.exceptions.RequestException as e:
            logger.debug(f"Favicon probe failed for {icon_url}: {e}")
            return False

    def probe(self, origin: str, timeout_s: Optional[float] = None) -> Optional[str]:
        candidates = self.candidates(origin)
        if not candidates:
            return None
        timeout_s = timeout_s or self.timeout_s

        executor = ThreadPoolExecutor(
            max_workers=len(candidates), thread_name_prefix="favicon-probe"
        )
        futures = {
            executor.submit(self.probe_one, icon_url, timeout_s): icon_url
            for icon_url in candidates
        }
        try:
            for future in as_completed(futures, timeout=timeout_s):
                if future.exception() is None and future.result():
                    icon_url = futures[future]
                    logger.info(f"Found favicon for {origin}: {icon_url}")
                    return icon_url
        except FuturesTimeoutError:
            logger.warning(f"Favicon probing timed out for {origin} after {timeout_s}s")
        finally:
            # Losing probes are abandoned, not awaited
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(f"No favicon found for {origin}")
        return None
