import unittest

from gigz_scraper.config import BACKUP_TIME_SELECTOR, PRICE_SELECTOR
from gigz_scraper.data_quality.genres import UNKNOWN_GENRE
from gigz_scraper.datamodels import EventRecord
from gigz_scraper.scrapers.broadway.scraper import extract_field, scrape_event_details

from tests.dummies import DummyContext, DummyPage, link_element, make_settings, text

EVENT_URL = "https://www.thebroadway.nyc/showcalendar/live-metal-show"
TICKET_SELECTOR = ".sqs-block-button-element--medium.sqs-button-element--primary.sqs-block-button-element"


def full_event_page(**overrides):
    page = {
        "h1": [text("  Live Metal Show  ")],
        "time": [text("Friday, October 24"), text("8:00 PM")],
        "time.event-time-localized-start": [text("8:00 PM")],
        PRICE_SELECTOR: [text("$15 ADV / $20 DOS")],
        "p.preFlex.flexIn strong": [text("Live Metal Show")],
        TICKET_SELECTOR: [link_element("https://tickets.example/x")],
    }
    page.update(overrides)
    return {key: value for key, value in page.items() if value is not None}


class TestScrapeEventDetails(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.settings = make_settings()

    async def scrape(self, context, link=EVENT_URL, image_url="/img/a.jpg"):
        return await scrape_event_details(context, link, image_url, settings=self.settings, current_year=2025)

    async def test_full_page_produces_normalized_record(self):
        context = DummyContext(site={EVENT_URL: full_event_page()})

        event = await self.scrape(context)

        self.assertIsInstance(event, EventRecord)
        self.assertEqual(event.title, "Live Metal Show")
        self.assertEqual(event.date, "2025-10-24T00:00:00.000+00:00")
        self.assertEqual(event.time, "8:00 PM")
        self.assertEqual(event.price, "$15 ADV / $20 DOS")
        self.assertEqual(event.location, "THE BROADWAY")
        self.assertEqual(event.image, "/img/a.jpg")
        self.assertFalse(event.is_featured)
        self.assertEqual(event.genre, "metal")
        self.assertIn("<p>Live Metal Show</p>", event.excerpt)
        self.assertIn("<a href='https://tickets.example/x'>BUY TICKETS</a>", event.excerpt)
        self.assertTrue(context.pages[0].closed)
        self.assertEqual(context.pages[0].navigated, [EVENT_URL])

    async def test_time_falls_back_to_backup_selector(self):
        page = full_event_page(**{
            "time.event-time-localized-start": None,
            BACKUP_TIME_SELECTOR: [text(" 8:00 PM ")],
        })
        context = DummyContext(site={EVENT_URL: page})

        event = await self.scrape(context)

        self.assertEqual(event.time, "8:00 PM")
        self.assertEqual(
            context.pages[0].queried.count(BACKUP_TIME_SELECTOR), 1
        )

    async def test_missing_fields_are_absent_and_others_still_extracted(self):
        page = full_event_page(**{
            "h1": None,
            "time.event-time-localized-start": None,
            PRICE_SELECTOR: None,
        })
        context = DummyContext(site={EVENT_URL: page})

        event = await self.scrape(context)

        self.assertIsNone(event.title)
        self.assertIsNone(event.time)
        self.assertIsNone(event.price)
        self.assertEqual(event.date, "2025-10-24T00:00:00.000+00:00")
        self.assertEqual(event.genre, "metal")

    async def test_failing_field_query_does_not_abort_the_record(self):
        context = DummyContext(
            site={EVENT_URL: full_event_page()},
            query_errors={"p.preFlex.flexIn strong": RuntimeError("Element is detached")},
        )

        event = await self.scrape(context)

        self.assertEqual(event.title, "Live Metal Show")
        self.assertEqual(event.genre, UNKNOWN_GENRE)
        self.assertEqual(
            event.excerpt,
            "<br><br><ul><li><a href='https://tickets.example/x'>BUY TICKETS</a></li></ul>",
        )

    async def test_excerpt_without_ticket_link_keeps_null_href(self):
        context = DummyContext(site={EVENT_URL: full_event_page(**{TICKET_SELECTOR: None})})

        event = await self.scrape(context)

        self.assertEqual(
            event.excerpt,
            "<p>Live Metal Show</p><br><br><ul><li><a href='null'>BUY TICKETS</a></li></ul>",
        )

    async def test_bare_page_still_yields_record(self):
        context = DummyContext(site={EVENT_URL: {}})

        event = await self.scrape(context)

        self.assertIsNone(event.title)
        self.assertEqual(event.date, "Invalid DateT00:00:00.000+00:00")
        self.assertEqual(event.genre, UNKNOWN_GENRE)
        self.assertEqual(event.excerpt, "")

    async def test_time_only_date_element_renders_invalid_date(self):
        context = DummyContext(site={EVENT_URL: full_event_page(time=[text("8:00 PM")])})

        event = await self.scrape(context)

        self.assertEqual(event.date, "Invalid DateT00:00:00.000+00:00")
        self.assertEqual(event.time, "8:00 PM")

    async def test_page_creation_is_retried(self):
        context = DummyContext(site={EVENT_URL: full_event_page()}, new_page_failures=2)

        event = await self.scrape(context)

        self.assertIsNotNone(event)
        self.assertEqual(context.new_page_calls, 3)

    async def test_page_creation_exhausting_retries_returns_none(self):
        context = DummyContext(site={EVENT_URL: full_event_page()}, new_page_failures=3)

        with self.assertLogs("gigz_scraper.scrapers.broadway.scraper", level="ERROR") as captured:
            event = await self.scrape(context)

        self.assertIsNone(event)
        self.assertEqual(context.new_page_calls, 3)
        self.assertEqual(context.pages, [])
        self.assertTrue(any(EVENT_URL in line for line in captured.output))

    async def test_navigation_failure_returns_none_and_closes_page(self):
        context = DummyContext(
            site={EVENT_URL: full_event_page()},
            navigate_errors={EVENT_URL: TimeoutError("Timeout 30000ms exceeded")},
        )

        event = await self.scrape(context)

        self.assertIsNone(event)
        self.assertEqual(len(context.pages), 1)
        self.assertTrue(context.pages[0].closed)

    async def test_close_error_is_logged_not_raised(self):
        context = DummyContext(site={EVENT_URL: full_event_page()}, close_error=RuntimeError("already closed"))

        event = await self.scrape(context)

        self.assertIsNotNone(event)
        self.assertTrue(context.pages[0].closed)


class TestExtractField(unittest.IsolatedAsyncioTestCase):

    async def test_returns_first_matching_selector(self):
        page = DummyPage(stages=[{"b": [text(" second ")], "c": [text("third")]}])

        result = await extract_field(page, "time", ["a", "b", "c"], EVENT_URL)

        self.assertTrue(result.ok)
        self.assertEqual(result.value, "second")
        self.assertEqual(result.selector, "b")
        self.assertEqual(page.queried, ["a", "b"])

    async def test_failure_carries_last_error(self):
        page = DummyPage()

        result = await extract_field(page, "price", ["a", "b"], EVENT_URL)

        self.assertFalse(result.ok)
        self.assertIsNone(result.value)
        self.assertEqual(result.selector, "b")
        self.assertIsInstance(result.error, LookupError)

    async def test_blank_element_is_found_but_empty(self):
        page = DummyPage(stages=[{"h1": [text("   ")]}])

        result = await extract_field(page, "title", ["h1"], EVENT_URL)

        self.assertTrue(result.ok)
        self.assertEqual(result.value, "")

    async def test_href_attribute(self):
        page = DummyPage(stages=[{"a.tickets": [link_element("https://tickets.example/y")]}])

        result = await extract_field(page, "ticket_link", ["a.tickets"], EVENT_URL, attribute="href")

        self.assertEqual(result.value, "https://tickets.example/y")

    async def test_element_without_href_is_a_failure(self):
        page = DummyPage(stages=[{"div.tickets": [text("Tickets")]}])

        result = await extract_field(page, "ticket_link", ["div.tickets"], EVENT_URL, attribute="href")

        self.assertFalse(result.ok)

    async def test_no_selectors_configured(self):
        result = await extract_field(DummyPage(), "title", [], EVENT_URL)

        self.assertFalse(result.ok)


if __name__ == '__main__':
    unittest.main()
