import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from typing import Callable, List, Optional, Sequence, Tuple

from sitemeta.config import Settings, get_settings
from sitemeta.exceptions import StrategyFailure
from sitemeta.models import MetadataRecord, ResolutionOptions, ResolutionPolicy, SiteMetadata
from sitemeta.services.enrichment import enrich, merge_metadata, terminal_record
from sitemeta.services.favicon_prober import FaviconProber
from sitemeta.services.known_sites import KnownSiteRegistry
from sitemeta.services.meta_cache import MetaCache
from sitemeta.services.strategies import BackendStrategy, DirectStrategy
from sitemeta.services.url_normalizer import extract_domain, normalize_url

logger = logging.getLogger(__name__)

Outcome = Tuple[Optional[SiteMetadata], Optional[StrategyFailure]]


class WebsiteParser:
    """
    Resolves link-card metadata for URLs.

    Two strategies feed each resolution: the backend parse endpoint and a
    direct fetch of the page. The policy of the call decides how they are
    combined; the merged result is completed with known-site data and
    domain-derived defaults, then cached. Only malformed input raises;
    every network or parsing problem ends in an ordinary record, with
    ``error`` set when nothing could be fetched.
    """

    def __init__(
        self,
        cache: Optional[MetaCache] = None,
        known_sites: Optional[KnownSiteRegistry] = None,
        backend: Optional[BackendStrategy] = None,
        direct: Optional[DirectStrategy] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.cache = cache if cache is not None else MetaCache()
        self.known_sites = known_sites if known_sites is not None else KnownSiteRegistry()
        self.backend = backend or BackendStrategy(settings.backend_url)
        self.direct = direct or DirectStrategy(FaviconProber(user_agent=settings.user_agent))
        self.default_options = ResolutionOptions.from_settings(settings)
        self.batch_size = max(settings.batch_size, 1)
        self.description_template = settings.description_template

    def clear_cache(self):
        self.cache.clear()

    def _options(self, options: Optional[ResolutionOptions], overrides: dict) -> ResolutionOptions:
        base = options or self.default_options
        return base.with_overrides(**overrides) if overrides else base

    def resolve(self, url: str, options: Optional[ResolutionOptions] = None, **overrides) -> MetadataRecord:
        opts = self._options(options, overrides)
        normalized = normalize_url(url)

        if not opts.force_refresh:
            cached = self.cache.get(normalized)
            if cached is not None:
                logger.info(f"Cache hit for {normalized}")
                return cached.model_copy()

        known = self.known_sites.lookup(extract_domain(normalized))
        if known is not None and opts.known_site_shortcut and opts.policy != ResolutionPolicy.API_FIRST:
            logger.info(f"Known site shortcut for {normalized}")
            record = enrich(known, normalized, opts.fallback_icon, known, self.description_template)
            self.cache.set(normalized, record, opts.cache_ttl_ms)
            return record

        last_failure: Optional[StrategyFailure] = None
        for attempt in range(opts.retry_budget + 1):
            try:
                metadata = self._run_pipeline(normalized, opts, known)
            except StrategyFailure as e:
                last_failure = e
                remaining = opts.retry_budget - attempt
                if remaining > 0:
                    logger.warning(f"All strategies failed for {normalized}, retrying ({remaining} left): {e}")
                continue
            record = enrich(metadata, normalized, opts.fallback_icon, known, self.description_template)
            self.cache.set(normalized, record, opts.cache_ttl_ms)
            logger.info(f"Resolved metadata for {normalized}: {record.title!r}")
            return record

        logger.error(f"Failed to resolve {normalized} after {opts.retry_budget + 1} attempts: {last_failure}")
        record = terminal_record(normalized, opts.fallback_icon, str(last_failure), known)
        self.cache.set(normalized, record, opts.failure_cache_ttl_ms)
        return record

    def resolve_many(
        self, urls: Sequence[str], options: Optional[ResolutionOptions] = None, **overrides
    ) -> List[MetadataRecord]:
        """
        Resolve many URLs, at most ``batch_size`` in flight at a time.

        Each group is fully settled before the next starts and the output is
        aligned with the input. A failing item (an unparseable URL, for
        instance) becomes a terminal record in its slot instead of failing
        the whole batch.
        """
        opts = self._options(options, overrides)
        results: List[MetadataRecord] = []
        for start in range(0, len(urls), self.batch_size):
            group = list(urls[start:start + self.batch_size])
            with ThreadPoolExecutor(max_workers=len(group), thread_name_prefix="sitemeta-batch") as pool:
                futures = [pool.submit(self.resolve, url, opts) for url in group]
            for url, future in zip(group, futures):
                try:
                    results.append(future.result())
                except Exception as e:
                    logger.warning(f"Batch item {url!r} failed: {e}")
                    results.append(terminal_record(str(url), opts.fallback_icon, str(e) or "Parse failed"))
        return results

    def _run_pipeline(self, url: str, opts: ResolutionOptions, known: Optional[SiteMetadata]) -> SiteMetadata:
        shortcut = known if opts.known_site_shortcut else None
        policy = ResolutionPolicy(opts.policy)

        if policy == ResolutionPolicy.API_FIRST:
            api, api_failure = self._run(self.backend.name, self.backend.fetch, url, opts.timeout_ms)
            if api is not None:
                return api
            client, client_failure = self._run(self.direct.name, self.direct.fetch, url, opts.timeout_ms, shortcut)
            if client is not None:
                return client
            raise self._all_failed(api_failure, client_failure)

        if policy == ResolutionPolicy.CLIENT_FIRST:
            client, client_failure = self._run(self.direct.name, self.direct.fetch, url, opts.timeout_ms, shortcut)
            if client is not None and client.title and client.description:
                return client
            api, api_failure = self._run(self.backend.name, self.backend.fetch, url, opts.timeout_ms)
            if client is None and api is None:
                raise self._all_failed(client_failure, api_failure)
            return merge_metadata(client, api)

        # AUTO: start both, wait for both to settle, merge over the successes
        deadline = time.monotonic() + opts.timeout_ms / 1000
        api_future = self._submit(self.backend.fetch, url, opts.timeout_ms)
        client_future = self._submit(self.direct.fetch, url, opts.timeout_ms, shortcut)
        api, api_failure = self._settle(self.backend.name, api_future, deadline, opts.timeout_ms)
        client, client_failure = self._settle(self.direct.name, client_future, deadline, opts.timeout_ms)
        if api is not None:
            return merge_metadata(api, client)
        if client is not None:
            return client
        raise self._all_failed(api_failure, client_failure)

    def _run(self, name: str, fetch: Callable[..., SiteMetadata], url: str, timeout_ms: int, *args) -> Outcome:
        deadline = time.monotonic() + timeout_ms / 1000
        future = self._submit(fetch, url, timeout_ms, *args)
        return self._settle(name, future, deadline, timeout_ms)

    @staticmethod
    def _submit(fetch: Callable[..., SiteMetadata], *args) -> Future:
        # One worker per strategy call: it starts at once and an abandoned
        # call never holds up another resolution
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sitemeta-strategy")
        try:
            return executor.submit(fetch, *args)
        finally:
            executor.shutdown(wait=False)

    def _settle(self, name: str, future: Future, deadline: float, timeout_ms: int) -> Outcome:
        try:
            return future.result(timeout=max(deadline - time.monotonic(), 0)), None
        except FuturesTimeoutError:
            failure = StrategyFailure(name, f"timed out after {timeout_ms}ms")
        except StrategyFailure as e:
            failure = e
        except Exception as e:
            logger.exception(f"Unexpected error in {name} strategy")
            failure = StrategyFailure(name, f"unexpected error: {e}")
        logger.warning(f"Strategy failed: {failure}")
        return None, failure

    @staticmethod
    def _all_failed(*failures: Optional[StrategyFailure]) -> StrategyFailure:
        reasons = "; ".join(str(failure) for failure in failures if failure is not None)
        return StrategyFailure("all", f"All parsing methods failed ({reasons})")
