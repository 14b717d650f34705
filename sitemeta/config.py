from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Site Metadata API"

    # Resolution defaults, overridable per call
    timeout_ms: int = 8000
    cache_ttl_ms: int = 30 * 60 * 1000
    failure_cache_ttl_ms: int = 5 * 60 * 1000
    fallback_icon: str = "🌐"
    retry_budget: int = 1
    default_policy: str = "auto"  # api | client | auto
    known_site_shortcut: bool = True

    # Concurrency
    batch_size: int = 5

    # Backend strategy collaborator
    backend_url: str = "http://127.0.0.1:8000/api/parse-website"

    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/129.0.0.0 Safari/537.36 SiteMetaBot/1.0"
    )
    description_template: str = "{domain} 网站"

    log_level: str = "INFO"
    log_file: str = ""

    model_config = SettingsConfigDict(
        env_prefix="SITEMETA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
