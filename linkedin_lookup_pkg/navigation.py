import asyncio
import random

from playwright.async_api import Page


class NavigationError(RuntimeError):
    """The page did not end up where it was sent."""


async def random_delay(min_sec: float = 0.5, max_sec: float = 1.5) -> None:
    """Sleep for a random duration to emulate human pacing."""
    await asyncio.sleep(random.uniform(min_sec, max_sec))


async def goto(page: Page, url: str, timeout_ms: int = 30000, ignore_destination: bool = True) -> None:
    """Navigate to `url` and wait for the DOM to be ready.

    LinkedIn often redirects (authwall, vanity URLs), so by default the final
    URL is not checked. With `ignore_destination=False` a redirect elsewhere
    raises NavigationError.
    """
    await page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
    await random_delay(0.5, 1.0)
    if not ignore_destination and page.url.rstrip("/") != url.rstrip("/"):
        raise NavigationError(f"Expected {url}, landed on {page.url}")


async def scroll_page(page: Page, selector: str, ratio: float = 0.5, max_rounds: int = 20) -> bool:
    """Scroll down by `ratio` of the viewport until `selector` is visible.

    Lazy-loaded sections only render once they get close to the viewport.
    Returns True when the element showed up, False when the bottom of the
    page (or `max_rounds`) was reached first.
    """
    for _ in range(max_rounds):
        target = page.locator(selector)
        if await target.count() > 0 and await target.first.is_visible():
            await target.first.scroll_into_view_if_needed()
            return True
        at_bottom = await page.evaluate(
            "(ratio) => {"
            " window.scrollBy(0, window.innerHeight * ratio);"
            " return window.innerHeight + window.scrollY >= document.body.scrollHeight;"
            "}",
            ratio,
        )
        await random_delay(0.3, 0.7)
        if at_bottom:
            break
    target = page.locator(selector)
    return await target.count() > 0
