import pytest
from pydantic import ValidationError

from sitemeta.config import Settings
from sitemeta.models import MetadataRecord, ResolutionOptions, ResolutionPolicy, SiteMetadata


def test_blank_strings_become_unknown():
    metadata = SiteMetadata(title="", description="   ", icon=" https://e.org/i.png ")
    assert metadata.title is None
    assert metadata.description is None
    assert metadata.icon == "https://e.org/i.png"


def test_wire_aliases():
    metadata = SiteMetadata.model_validate({"siteName": "Example", "ogImage": "https://e.org/og.png"})
    assert metadata.site_name == "Example"
    assert metadata.og_image == "https://e.org/og.png"

    record = MetadataRecord(url="https://e.org", site_name="Example")
    assert record.to_payload() == {"url": "https://e.org", "siteName": "Example"}


def test_options_defaults():
    options = ResolutionOptions()
    assert options.timeout_ms == 8000
    assert options.cache_ttl_ms == 1_800_000
    assert options.policy == ResolutionPolicy.AUTO
    assert options.retry_budget == 1
    assert options.force_refresh is False


def test_options_overrides_skip_none_and_validate():
    options = ResolutionOptions().with_overrides(policy="client", timeout_ms=None, retry_budget=3)
    assert options.policy == ResolutionPolicy.CLIENT_FIRST
    assert options.timeout_ms == 8000
    assert options.retry_budget == 3

    with pytest.raises(ValidationError):
        ResolutionOptions().with_overrides(retry_budget=-1)
    with pytest.raises(ValidationError):
        ResolutionOptions().with_overrides(fallback_icon="")


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("SITEMETA_TIMEOUT_MS", "5000")
    monkeypatch.setenv("SITEMETA_DEFAULT_POLICY", "api")
    monkeypatch.setenv("SITEMETA_BATCH_SIZE", "3")

    settings = Settings(_env_file=None)
    options = ResolutionOptions.from_settings(settings)

    assert settings.batch_size == 3
    assert options.timeout_ms == 5000
    assert options.policy == ResolutionPolicy.API_FIRST
