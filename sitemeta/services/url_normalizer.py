import re
from urllib.parse import urlsplit, urlunsplit

from sitemeta.exceptions import NormalizationError

SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
SUPPORTED_SCHEMES = ("http", "https")


def normalize_url(raw: str) -> str:
    """
    Canonicalize a user supplied URL into the string used as cache key.

    Adds ``https://`` when no scheme is present, lowercases scheme and host and
    drops the trailing slash of a bare-origin URL, so ``example.com``,
    ``https://example.com/`` and ``HTTPS://Example.com`` share one key.
    Raises NormalizationError for anything that cannot be fetched over HTTP(S).
    """
    if not isinstance(raw, str) or not raw.strip():
        raise NormalizationError("URL is empty")
    url = raw.strip()
    if not SCHEME_RE.match(url):
        url = "https://" + url

    try:
        parsed = urlsplit(url)
        port = parsed.port
    except ValueError as e:
        raise NormalizationError(f"Invalid URL format: {raw!r} ({e})") from e

    scheme = parsed.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise NormalizationError(f"Unsupported URL scheme '{scheme}': {raw!r}")
    host = parsed.hostname
    if not host or any(ch.isspace() for ch in parsed.netloc):
        raise NormalizationError(f"Invalid URL format: {raw!r}")

    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None else f"{host}:{port}"
    if parsed.username is not None:
        userinfo = parsed.username
        if parsed.password is not None:
            userinfo += f":{parsed.password}"
        netloc = f"{userinfo}@{netloc}"

    path = parsed.path or "/"
    if path == "/" and not parsed.query and not parsed.fragment:
        path = ""
    return urlunsplit((scheme, netloc, path, parsed.query, parsed.fragment))


def extract_domain(url: str) -> str:
    try:
        return urlsplit(url).hostname or url
    except ValueError:
        return url


def extract_domain_name(url: str) -> str:
    """Hostname for display: ``www.example.com`` -> ``example.com``."""
    hostname = extract_domain(url)
    if hostname.startswith("www."):
        return hostname[len("www."):]
    return hostname


def origin_of(url: str) -> str:
    parsed = urlsplit(url)
    return urlunsplit((parsed.scheme, parsed.netloc, "", "", ""))
