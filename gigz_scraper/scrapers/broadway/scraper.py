"""
The Broadway (thebroadway.nyc) show calendar scraper.

Discovery scrolls the infinite show calendar until no new event links turn
up; each event page is then visited one at a time and reduced to an
``EventRecord``.
"""
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from gigz_scraper.config import Settings, settings as default_settings
from gigz_scraper.datamodels import EventRecord, FieldResult, LinkRecord
from gigz_scraper.data_quality.cleaning import clean_text, format_excerpt
from gigz_scraper.data_quality.dates import format_date_string_for_mongodb
from gigz_scraper.data_quality.genres import find_genre
from gigz_scraper.page_interface import (
    BrowsingContext,
    PlaywrightContext,
    PlaywrightPage,
    ScrapePage,
    query_one,
)
from gigz_scraper.sentry_setup import init_sentry
from gigz_scraper.utils import retry_async, save_events_to_json_file, setup_logger

logger = logging.getLogger(__name__)

HREF = "href"
TEXT = "text"


# --- Link discovery ---

async def dynamic_scroll_and_collect_links(
    page: ScrapePage,
    selector: str,
    settle_delay_ms: int = 2000,
) -> List[LinkRecord]:
    """Collect unique (link, imageUrl) pairs from an infinite-scroll listing.

    Keeps scrolling to the bottom and waiting ``settle_delay_ms`` for as long
    as the last query found pairs not seen before. A lazy load slower than the
    settle delay ends the loop early. Errors end the loop too; whatever was
    collected up to that point is returned.
    """
    seen: Dict[str, None] = {}
    try:
        while True:
            previous_size = len(seen)
            for element in await page.query(selector):
                record = LinkRecord(
                    link=element.href or "",
                    image_url=element.article_image_src or "",
                )
                seen.setdefault(record.serialize(), None)

            new_size = len(seen)
            logger.debug(f"Link discovery pass: {previous_size} -> {new_size} unique links")
            if new_size <= previous_size:
                break
            await page.scroll_and_settle(settle_delay_ms)
    except Exception as e:
        logger.error(f"Error during dynamic scroll and link collection ({len(seen)} links so far): {e}", exc_info=True)

    return [LinkRecord.deserialize(raw) for raw in seen]


# --- Detail extraction ---

async def extract_field(
    page: ScrapePage,
    field_name: str,
    selectors: Sequence[str],
    link: str,
    attribute: str = TEXT,
) -> FieldResult:
    """Try ``selectors`` in order and return the first hit; never raises."""
    if not selectors:
        return FieldResult.failure(field_name, LookupError(f"No selectors configured for '{field_name}'"))

    result = FieldResult.failure(field_name, LookupError(field_name))
    for position, selector in enumerate(selectors):
        label = "selector" if position == 0 else "backup selector"
        try:
            element = await query_one(page, selector)
            raw_value = element.href if attribute == HREF else element.text
            if raw_value is None:
                raise LookupError(f"Element for '{selector}' has no {attribute}")
            return FieldResult.success(field_name, clean_text(raw_value), selector)
        except Exception as e:
            logger.warning(f"Error finding {field_name} with {label} on {link}: {e}")
            result = FieldResult.failure(field_name, e, selector)
    return result


def build_event_record(
    fields: Dict[str, FieldResult],
    image_url: str,
    venue_name: str,
    current_year: Optional[int] = None,
) -> EventRecord:
    """Compose field results into the normalized record."""
    def value_of(name: str) -> Optional[str]:
        result = fields.get(name)
        return result.value if result is not None and result.ok else None

    excerpt_text = value_of("excerpt")
    genre = find_genre(excerpt_text or "")
    date = format_date_string_for_mongodb(value_of("date") or "", current_year=current_year)
    excerpt = format_excerpt(excerpt_text, value_of("ticket_link"))

    return EventRecord(
        title=value_of("title"),
        date=date,
        genre=genre,
        time=value_of("time"),
        location=venue_name,
        price=value_of("price"),
        image=image_url,
        excerpt=excerpt,
        is_featured=False,
    )


async def scrape_event_details(
    context: BrowsingContext,
    link: str,
    image_url: str,
    settings: Optional[Settings] = None,
    current_year: Optional[int] = None,
) -> Optional[EventRecord]:
    """Visit one event page and build its record, or return None if the page
    could not be opened or loaded. The page is always closed."""
    app_settings = settings or default_settings
    globals_cfg = app_settings.scraper_globals
    broadway_cfg = app_settings.scrapers_specific.broadway

    event_page: Optional[ScrapePage] = None
    try:
        event_page = await retry_async(
            context.new_page,
            retries=globals_cfg.page_retry_attempts,
            delay_seconds=globals_cfg.page_retry_delay_ms / 1000.0,
            description=f"open page for {link}",
            logger_obj=logger,
        )
        await event_page.navigate(link)

        fields: Dict[str, FieldResult] = {}
        for field_name in ("title", "date", "time", "price", "excerpt"):
            fields[field_name] = await extract_field(
                event_page, field_name, broadway_cfg.event_selectors.get(field_name, []), link
            )
        fields["ticket_link"] = await extract_field(
            event_page, "ticket_link", broadway_cfg.event_selectors.get("ticket_link", []), link, attribute=HREF
        )

        record = build_event_record(fields, image_url, broadway_cfg.venue_name, current_year=current_year)
        logger.info(f"Scraped event '{record.title}' from {link}")
        return record
    except Exception as e:
        logger.error(f"Error scraping details from {link}: {e}", exc_info=True)
        return None
    finally:
        if event_page is not None:
            try:
                await event_page.close()
            except Exception as e_close:
                logger.error(f"Error closing page for {link}: {e_close}", exc_info=True)


# --- Orchestration ---

async def collect_events(
    listing_page: ScrapePage,
    context: BrowsingContext,
    settings: Optional[Settings] = None,
    events: Optional[List[EventRecord]] = None,
) -> List[EventRecord]:
    """Discover every event link on the calendar and scrape them one by one.

    ``events`` is appended to in place. A failure outside the per-event
    recovery is logged and ends the run with the events gathered so far.
    """
    app_settings = settings or default_settings
    broadway_cfg = app_settings.scrapers_specific.broadway
    collected: List[EventRecord] = events if events is not None else []

    try:
        await listing_page.navigate(str(broadway_cfg.target_url))
        await listing_page.wait_for_selector(broadway_cfg.event_link_selector)

        link_records = await dynamic_scroll_and_collect_links(
            listing_page,
            broadway_cfg.event_link_selector,
            settle_delay_ms=app_settings.scraper_globals.scroll_settle_delay_ms,
        )
        logger.info(f"Collected {len(link_records)} event links with images")

        for record in link_records:
            event = await scrape_event_details(context, record.link, record.image_url, settings=app_settings)
            if event is not None:
                collected.append(event)

        logger.info(f"Scraped {len(collected)} event details")
    except Exception as e:
        logger.critical(f"Error during the main process: {e}", exc_info=True)

    return collected


class BroadwayCalendarScraper:
    """Owns the Playwright runtime, one browser context and the listing page."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.headless = self.settings.scraper_globals.default_headless_browser
        self.user_agent = self.settings.scraper_globals.default_user_agent
        self.navigation_timeout_ms = self.settings.scraper_globals.navigation_timeout_ms

        self.playwright_instance: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    async def __aenter__(self) -> "BroadwayCalendarScraper":
        logger.info("Starting Playwright...")
        self.playwright_instance = await async_playwright().start()
        try:
            self.browser = await self.playwright_instance.chromium.launch(headless=self.headless)
            context_kwargs = {"user_agent": self.user_agent} if self.user_agent else {}
            self.context = await self.browser.new_context(**context_kwargs)
            self.page = await self.context.new_page()
            logger.info(f"Playwright browser launched (headless: {self.headless}).")
        except Exception as e:
            logger.critical(f"Browser launch failed: {e}", exc_info=True)
            await self._close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._close()

    async def _close(self) -> None:
        logger.info("Closing Playwright resources...")
        if self.browser is not None:
            try:
                await self.browser.close()
            except Exception as e:
                logger.error(f"Browser close error: {e}", exc_info=True)
        if self.playwright_instance is not None:
            try:
                await self.playwright_instance.stop()
            except Exception as e:
                logger.error(f"Playwright stop error: {e}", exc_info=True)
        self.browser = None
        self.context = None
        self.page = None
        self.playwright_instance = None
        logger.info("Playwright resources cleaned.")

    async def run(self, events: Optional[List[EventRecord]] = None) -> List[EventRecord]:
        if self.context is None or self.page is None:
            raise RuntimeError("BroadwayCalendarScraper.run() called outside 'async with'")
        return await collect_events(
            PlaywrightPage(self.page, navigation_timeout_ms=self.navigation_timeout_ms),
            PlaywrightContext(self.context, navigation_timeout_ms=self.navigation_timeout_ms),
            settings=self.settings,
            events=events,
        )


async def run_broadway_scraper(
    settings: Optional[Settings] = None,
    output_file: Optional[Union[str, Path]] = None,
) -> List[EventRecord]:
    app_settings = settings or default_settings
    init_sentry(app_settings)

    run_logger = setup_logger("gigz_scraper", "broadway_run", app_settings=app_settings)
    run_logger.info(f"Starting Broadway scraper for {app_settings.scrapers_specific.broadway.target_url}")

    events: List[EventRecord] = []
    try:
        async with BroadwayCalendarScraper(settings=app_settings) as scraper:
            await scraper.run(events)
    except Exception as e:
        run_logger.critical(f"Scraper run aborted: {e}", exc_info=True)

    save_events_to_json_file(
        events,
        output_file or app_settings.file_outputs.events_output_file,
        logger_obj=run_logger,
    )
    run_logger.info(f"Broadway scraper finished. Collected {len(events)} events.")
    return events
