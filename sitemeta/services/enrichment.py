from typing import Optional

from sitemeta.models import METADATA_FIELDS, MetadataRecord, SiteMetadata
from sitemeta.services.url_normalizer import extract_domain_name

DEFAULT_DESCRIPTION_TEMPLATE = "{domain} 网站"


def merge_metadata(*sources: Optional[SiteMetadata]) -> SiteMetadata:
    """Coalesce field by field; the first source with a value wins."""
    merged = {}
    for field in METADATA_FIELDS:
        merged[field] = next(
            (getattr(source, field) for source in sources if source is not None and getattr(source, field)),
            None,
        )
    return SiteMetadata(**merged)


def enrich(
    metadata: SiteMetadata,
    url: str,
    fallback_icon: str,
    known: Optional[SiteMetadata] = None,
    description_template: str = DEFAULT_DESCRIPTION_TEMPLATE,
) -> MetadataRecord:
    """
    Fill the gaps live extraction left, first from the known-site entry, then
    from values derived from the domain, so that title, description, site
    name and icon are never empty.

    Icon precedence: explicit icon > favicon > og:image > fallback glyph.
    """
    merged = merge_metadata(metadata, known)
    domain = extract_domain_name(url)
    return MetadataRecord(
        url=url,
        title=merged.title or merged.site_name or domain,
        description=merged.description or description_template.format(domain=domain),
        site_name=merged.site_name or domain,
        icon=merged.icon or merged.favicon or merged.og_image or fallback_icon,
        favicon=merged.favicon,
        og_image=merged.og_image,
    )


def terminal_record(
    url: str,
    fallback_icon: str,
    error: str,
    known: Optional[SiteMetadata] = None,
) -> MetadataRecord:
    """Record returned once every strategy and retry has failed."""
    base = known.fields() if known is not None else {}
    base["title"] = base.get("title") or extract_domain_name(url)
    base["icon"] = base.get("icon") or base.get("favicon") or fallback_icon
    return MetadataRecord(url=url, error=error or "Unknown error", **base)
