"""
Page-interaction surface used by the discovery and extraction code.

The algorithms only need three capabilities from a browser page: query the
DOM, navigate, and scroll-and-settle. ``ScrapePage`` and ``BrowsingContext``
describe that surface; ``PlaywrightPage`` and ``PlaywrightContext`` implement
it on top of ``playwright.async_api``. Tests substitute in-memory fakes.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from playwright.async_api import BrowserContext, Page

logger = logging.getLogger(__name__)

# Evaluated in the browser against every element a selector matches.
SNAPSHOT_ELEMENTS_JS = """
elements => elements.map(el => {
    const article = el.closest('article');
    const img = article ? article.querySelector('img') : null;
    return {
        text: el.textContent,
        href: el.href ? String(el.href) : null,
        articleImageSrc: img ? (img.dataset.src || '') : null
    };
})
"""

SCROLL_TO_BOTTOM_JS = "window.scrollTo(0, document.body.scrollHeight)"


class ElementNotFoundError(LookupError):
    """Raised when a selector matches no element on the page."""

    def __init__(self, selector: str, url: Optional[str] = None):
        self.selector = selector
        self.url = url
        where = f" on {url}" if url else ""
        super().__init__(f"No element matches selector '{selector}'{where}")


@dataclass(frozen=True)
class ElementSnapshot:
    """Plain-data view of one matched element."""
    text: Optional[str] = None
    href: Optional[str] = None
    article_image_src: Optional[str] = None

    @classmethod
    def from_browser(cls, raw: Dict[str, Any]) -> "ElementSnapshot":
        return cls(
            text=raw.get("text"),
            href=raw.get("href"),
            article_image_src=raw.get("articleImageSrc"),
        )


class ScrapePage(Protocol):
    url: str

    async def navigate(self, url: str) -> None: ...

    async def wait_for_selector(self, selector: str) -> None: ...

    async def query(self, selector: str) -> List[ElementSnapshot]: ...

    async def scroll_and_settle(self, delay_ms: int) -> None: ...

    async def close(self) -> None: ...


class BrowsingContext(Protocol):
    async def new_page(self) -> ScrapePage: ...


async def query_one(page: ScrapePage, selector: str) -> ElementSnapshot:
    """First element matching ``selector``; raises ElementNotFoundError when there is none."""
    matches = await page.query(selector)
    if not matches:
        raise ElementNotFoundError(selector, getattr(page, "url", None))
    return matches[0]


class PlaywrightPage:
    """ScrapePage backed by a Playwright ``Page``."""

    def __init__(self, page: Page, navigation_timeout_ms: Optional[int] = None):
        self._page = page
        self._navigation_timeout_ms = navigation_timeout_ms

    @property
    def url(self) -> str:
        return self._page.url

    async def navigate(self, url: str) -> None:
        kwargs: Dict[str, Any] = {"wait_until": "domcontentloaded"}
        if self._navigation_timeout_ms is not None:
            kwargs["timeout"] = self._navigation_timeout_ms
        await self._page.goto(url, **kwargs)
        logger.debug(f"Navigated to {url}")

    async def wait_for_selector(self, selector: str) -> None:
        await self._page.wait_for_selector(selector, state="attached")

    async def query(self, selector: str) -> List[ElementSnapshot]:
        raw_elements = await self._page.eval_on_selector_all(selector, SNAPSHOT_ELEMENTS_JS)
        return [ElementSnapshot.from_browser(raw) for raw in raw_elements]

    async def scroll_and_settle(self, delay_ms: int) -> None:
        await self._page.evaluate(SCROLL_TO_BOTTOM_JS)
        await self._page.wait_for_timeout(delay_ms)

    async def close(self) -> None:
        if not self._page.is_closed():
            await self._page.close()


class PlaywrightContext:
    """BrowsingContext backed by a Playwright ``BrowserContext``."""

    def __init__(self, context: BrowserContext, navigation_timeout_ms: Optional[int] = None):
        self._context = context
        self._navigation_timeout_ms = navigation_timeout_ms

    async def new_page(self) -> PlaywrightPage:
        page = await self._context.new_page()
        return PlaywrightPage(page, navigation_timeout_ms=self._navigation_timeout_ms)
