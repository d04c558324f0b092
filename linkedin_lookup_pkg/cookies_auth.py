import json
import logging
import os
import re
from typing import List, Optional, Tuple

from playwright.async_api import BrowserContext, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from . import selectors
from .config import COOKIES_FILE, NAV_TIMEOUT_MS
from .navigation import goto


logger = logging.getLogger(__name__)


async def load_cookies(path: str = COOKIES_FILE) -> List[dict]:
    """Load and sanitize cookies JSON for LinkedIn domains only.

    - Removes whitespace from values
    - Normalizes domain to start with `.linkedin.com`
    - Normalizes `sameSite` values
    - Filters out entries missing name/value
    """
    if not os.path.exists(path):
        return []
    try:
        with open(path, "r", encoding="utf-8") as f:
            cookies = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable cookie file %s: %s", path, e)
        return []
    if not isinstance(cookies, list):
        return []

    clean: List[dict] = []
    for c in cookies:
        if not isinstance(c, dict):
            continue
        if "value" in c and isinstance(c["value"], str):
            c["value"] = re.sub(r"\s+", "", c["value"])
        domain = c.get("domain", "")
        if domain and not domain.startswith("."):
            domain = "." + domain
        if "linkedin.com" not in domain:
            continue
        c["domain"] = domain

        if "sameSite" in c:
            ss = str(c["sameSite"]).lower()
            if ss in ["no_restriction", "none"]:
                c["sameSite"] = "None"
            elif ss in ["lax", "strict"]:
                c["sameSite"] = ss.capitalize()
            else:
                c["sameSite"] = "Lax"

        for k in ["hostOnly", "session", "storeId", "id"]:
            c.pop(k, None)

        if not c.get("name") or not c.get("value"):
            continue

        clean.append(c)
    return clean


async def apply_cookies(context: BrowserContext, cookies: List[dict]) -> Tuple[bool, bool]:
    """Apply cookies to the context and return (cookies_loaded, has_li_at).

    The presence of `li_at` is a strong indicator of authenticated sessions.
    """
    has_li_at = any(c.get("name") == "li_at" for c in cookies)
    if not cookies:
        return False, has_li_at
    await context.add_cookies(cookies)
    return True, has_li_at


async def save_cookies(page: Page, path: str = COOKIES_FILE) -> int:
    """Persist the page's LinkedIn cookies so the next run can skip the login."""
    cookies = await page.context.cookies()
    linkedin_cookies = [c for c in cookies if "linkedin.com" in c.get("domain", "")]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(linkedin_cookies, f, indent=2)
    logger.info("Saved %d cookies to %s", len(linkedin_cookies), path)
    return len(linkedin_cookies)


async def check_login_status(page: Page) -> Tuple[bool, List[str]]:
    """Detect guest/authwall state using a few non-brittle signals."""
    debug: List[str] = []
    is_guest = False
    for sel in selectors.AUTHWALL:
        if await page.locator(sel).count() > 0:
            is_guest = True
            debug.append(f"Authwall:{sel}")
            break

    url = page.url
    if any(k in url for k in ["signup", "login", "authwall"]):
        is_guest = True
        debug.append(f"URL:{url}")

    return is_guest, debug


async def log_in(
    page: Page,
    email: str,
    password: str,
    cookies_file: str = COOKIES_FILE,
    redirection_url: Optional[str] = None,
    timeout_ms: int = NAV_TIMEOUT_MS,
) -> bool:
    """Log in when the page shows a sign-in affordance, then go where we meant to.

    Returns True when a login was performed. Cookies are saved after a
    successful login so later runs start authenticated.
    """
    logged_in = False
    login_button = await page.query_selector(selectors.LOGIN["button"])
    if login_button:
        logger.info("Logging in...")
        await login_button.click()
        try:
            await page.wait_for_selector(selectors.LOGIN["email"], timeout=2000)
        except PlaywrightTimeoutError:
            await page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)
        await page.wait_for_timeout(2000)
        await page.fill(selectors.LOGIN["email"], email)
        await page.fill(selectors.LOGIN["password"], password)
        async with page.expect_navigation(timeout=timeout_ms):
            await page.click(selectors.LOGIN["submit"])
        await save_cookies(page, cookies_file)
        logger.info("Logged in.")
        logged_in = True

        is_guest, debug = await check_login_status(page)
        if is_guest:
            logger.warning("Still looks like a guest session after login (%s)", ", ".join(debug))

    if redirection_url and page.url != redirection_url:
        await goto(page, redirection_url, timeout_ms=timeout_ms, ignore_destination=True)
    return logged_in
