import logging
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright
from playwright.async_api import async_playwright

from .config import COOKIES_FILE, HEADLESS, SLOW_MO_MS, random_user_agent
from .cookies_auth import apply_cookies, load_cookies


logger = logging.getLogger(__name__)


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch a Chromium browser with the usual scraping flags.

    GPU and extension features are off and automation signals are disabled
    where Chromium allows it.
    """
    return await playwright.chromium.launch(
        headless=headless,
        slow_mo=SLOW_MO_MS if SLOW_MO_MS > 0 else None,
        args=[
            "--disable-blink-features=AutomationControlled",
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-infobars",
            "--window-size=1920,1080",
            "--disable-dev-shm-usage",
            "--disable-gpu",
            "--hide-scrollbars",
            "--mute-audio",
            "--no-first-run",
            "--disable-extensions",
        ],
    )


async def new_context(
    browser: Browser,
    locale: str = "en-US",
    user_agent: str | None = None,
) -> BrowserContext:
    """Create a browser context with realistic headers and locale settings."""
    return await browser.new_context(
        user_agent=user_agent or random_user_agent(),
        viewport={"width": 1920, "height": 1080},
        locale=locale,
        has_touch=False,
        is_mobile=False,
        device_scale_factor=1,
        extra_http_headers={
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
            "DNT": "1",
            "Upgrade-Insecure-Requests": "1",
        },
    )


async def apply_stealth(context: BrowserContext) -> None:
    """Inject lightweight patches for the most common automation fingerprints."""
    await context.add_init_script(
        """
        Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
        Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
        Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en'] });
        window.chrome = { runtime: {} };
        """
    )


async def create_page(browser: Browser, cookies_file: str = COOKIES_FILE) -> Page:
    """Open a page in a fresh context carrying the persisted cookies."""
    context = await new_context(browser)
    await apply_stealth(context)
    cookies = await load_cookies(cookies_file)
    cookies_loaded, has_li_at = await apply_cookies(context, cookies)
    if cookies_loaded and not has_li_at:
        logger.warning("li_at cookie not found in %s, a login will likely be needed", cookies_file)
    return await context.new_page()


class BrowserSession:
    """A page handle that is either borrowed from the caller or owned by us.

    A borrowed page is handed back as-is and never closed. Otherwise the
    first `acquire()` starts Playwright and opens a page, and `release()`
    (or leaving the `async with` block) tears the browser down again.
    """

    def __init__(
        self,
        page: Optional[Page] = None,
        headless: bool = HEADLESS,
        cookies_file: str = COOKIES_FILE,
    ):
        self.page = page
        self.headless = headless
        self.cookies_file = cookies_file
        self.opened = False
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def acquire(self) -> Page:
        if self.page is None:
            logger.info("Launching browser (headless=%s)", self.headless)
            self._playwright = await async_playwright().start()
            self._browser = await launch_browser(self._playwright, headless=self.headless)
            self.page = await create_page(self._browser, self.cookies_file)
            self.opened = True
        return self.page

    async def release(self) -> None:
        if not self.opened:
            return
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self._browser = None
            self._playwright = None
            self.page = None
            self.opened = False

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()
