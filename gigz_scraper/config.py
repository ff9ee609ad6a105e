from pathlib import Path
from typing import Dict, List, Optional

from pydantic import Field, AliasChoices, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

# Positional selectors copied from the live detail-page layout. They break
# whenever the venue reorders its page blocks.
BACKUP_TIME_SELECTOR = (
    "body > div:nth-child(1) > main:nth-child(3) > article:nth-child(1) > section:nth-child(1) > "
    "div:nth-child(2) > div:nth-child(1) > div:nth-child(1) > div:nth-child(1) > article:nth-child(2) > "
    "div:nth-child(1) > ul:nth-child(2) > li:nth-child(1) > span:nth-child(2) > time:nth-child(1)"
)
PRICE_SELECTOR = (
    "body > div:nth-child(1) > main:nth-child(3) > article:nth-child(1) > section:nth-child(1) > "
    "div:nth-child(2) > div:nth-child(1) > div:nth-child(1) > div:nth-child(1) > article:nth-child(2) > "
    "div:nth-child(2) > div:nth-child(1) > div:nth-child(1) > div:nth-child(1) > div:nth-child(3) > "
    "div:nth-child(1) > div:nth-child(1) > p:nth-child(3)"
)


class GlobalScraperSettings(BaseSettings):
    """Global settings applicable to the browser-driven scrapers."""
    default_user_agent: Optional[str] = Field(None, validation_alias=AliasChoices('SCRAPER_GLOBAL_DEFAULT_USER_AGENT', 'DEFAULT_USER_AGENT'))
    default_headless_browser: bool = Field(False, validation_alias=AliasChoices('SCRAPER_GLOBAL_DEFAULT_HEADLESS_BROWSER', 'DEFAULT_HEADLESS_BROWSER'))
    navigation_timeout_ms: Optional[int] = Field(None, validation_alias=AliasChoices('SCRAPER_GLOBAL_NAVIGATION_TIMEOUT_MS', 'NAVIGATION_TIMEOUT_MS'))
    page_retry_attempts: int = Field(3, ge=1, validation_alias=AliasChoices('SCRAPER_GLOBAL_PAGE_RETRY_ATTEMPTS', 'PAGE_RETRY_ATTEMPTS'))
    page_retry_delay_ms: int = Field(1000, ge=0, validation_alias=AliasChoices('SCRAPER_GLOBAL_PAGE_RETRY_DELAY_MS', 'PAGE_RETRY_DELAY_MS'))
    scroll_settle_delay_ms: int = Field(2000, ge=0, validation_alias=AliasChoices('SCRAPER_GLOBAL_SCROLL_SETTLE_DELAY_MS', 'SCROLL_SETTLE_DELAY_MS'))

    model_config = SettingsConfigDict(
        env_prefix='SCRAPER_GLOBAL_',
        extra='ignore',
        populate_by_name=True
    )


class FileOutputSettings(BaseSettings):
    """Settings for controlling file-based outputs."""
    events_output_file: Path = Field(Path("events.json"), validation_alias=AliasChoices('FILE_OUTPUT_EVENTS_OUTPUT_FILE', 'EVENTS_OUTPUT_FILE'))
    log_output_directory: Path = Field(Path("scraper_logs"), validation_alias=AliasChoices('FILE_OUTPUT_LOG_OUTPUT_DIRECTORY', 'LOG_OUTPUT_DIRECTORY'))
    enable_file_logging: bool = Field(True, validation_alias=AliasChoices('FILE_OUTPUT_ENABLE_FILE_LOGGING', 'ENABLE_FILE_LOGGING'))

    model_config = SettingsConfigDict(
        env_prefix='FILE_OUTPUT_',
        extra='ignore',
        populate_by_name=True
    )


class SentrySettings(BaseSettings):
    """Configuration for Sentry error tracking."""
    dsn: Optional[HttpUrl] = Field(None, validation_alias=AliasChoices('SENTRY_DSN'))
    environment: Optional[str] = Field(None, description="Overrides main app environment for Sentry if needed.")
    traces_sample_rate: float = Field(0.0, ge=0.0, le=1.0, description="Sentry performance monitoring traces sample rate.")

    model_config = SettingsConfigDict(
        env_prefix='SENTRY_',
        extra='ignore',
        populate_by_name=True
    )

# --- Scraper-Specific Settings Models ---

class BroadwaySettings(BaseSettings):
    """Configuration specific to The Broadway show calendar scraper."""
    target_url: HttpUrl = Field("https://www.thebroadway.nyc/showcalendar")
    venue_name: str = "THE BROADWAY"
    event_link_selector: str = "a.eventlist-button.sqs-editable-button.sqs-button-element--primary"
    # Each field is tried selector by selector, primary first.
    event_selectors: Dict[str, List[str]] = Field(default_factory=lambda: {
        "title": ["h1"],
        "date": ["time"],
        "time": ["time.event-time-localized-start", BACKUP_TIME_SELECTOR],
        "price": [PRICE_SELECTOR],
        "excerpt": ["p.preFlex.flexIn strong"],
        "ticket_link": [".sqs-block-button-element--medium.sqs-button-element--primary.sqs-block-button-element"],
    })

    model_config = SettingsConfigDict(
        env_prefix='BROADWAY_',
        extra='ignore'
    )


class AllScraperSpecificSettings(BaseSettings):
    """Container for all scraper-specific configurations."""
    broadway: BroadwaySettings = BroadwaySettings()

    model_config = SettingsConfigDict(extra='ignore')


class Settings(BaseSettings):
    """Main application settings."""
    environment: str = Field("development", validation_alias=AliasChoices('APP_ENV', 'ENVIRONMENT'))
    log_level: str = Field("INFO", validation_alias=AliasChoices('APP_LOG_LEVEL', 'LOG_LEVEL'))

    scraper_globals: GlobalScraperSettings = GlobalScraperSettings()
    file_outputs: FileOutputSettings = FileOutputSettings()
    sentry: SentrySettings = SentrySettings()

    scrapers_specific: AllScraperSpecificSettings = AllScraperSpecificSettings()

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        env_nested_delimiter='__',
        extra='ignore',
        populate_by_name=True
    )

settings = Settings()
