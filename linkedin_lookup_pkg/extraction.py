import logging
import re
from typing import List, Optional, Protocol

from playwright.async_api import Locator, Page

from . import selectors
from .config import LookupSettings
from .cookies_auth import log_in
from .models import CompanyResult, Position, ProfileResult, RelatedPerson
from .navigation import goto, scroll_page
from .urls import absolute_url


logger = logging.getLogger(__name__)

_COUNT_RE = re.compile(r"(\d[\d,]*(?:\.\d+)?)\s?([KkMm])?(?![\dA-Za-z])")
_MULTIPLIERS = {"k": 1_000, "m": 1_000_000}


def parse_count(text: Optional[str]) -> Optional[int]:
    """Pull the first number out of a decorated label.

    "1,234 followers" -> 1234, "See all 5,000 employees on LinkedIn" -> 5000,
    "1,001-5,000 employees" -> 1001, "500+ connections" -> 500,
    "12K followers" -> 12000. Returns None when there is no number.
    """
    if not text:
        return None
    m = _COUNT_RE.search(text)
    if not m:
        return None
    number = float(m.group(1).replace(",", ""))
    suffix = (m.group(2) or "").lower()
    return int(round(number * _MULTIPLIERS.get(suffix, 1)))


async def _text(scope: Page | Locator, selector: str) -> str:
    loc = scope.locator(selector)
    if await loc.count() == 0:
        return ""
    return (await loc.first.inner_text()).strip()


async def _href(scope: Page | Locator, selector: str) -> Optional[str]:
    loc = scope.locator(selector)
    if await loc.count() == 0:
        return None
    return absolute_url(await loc.first.get_attribute("href"))


class PageExtractor(Protocol):
    """Reads one page shape into a model. Selectors stay behind this seam."""

    async def extract(self, page: Page, url: Optional[str] = None):
        ...


async def open_with_login(page: Page, url: str, settings: LookupSettings) -> None:
    """Navigate to `url`, logging in on the way if LinkedIn asks for it."""
    await goto(page, url, timeout_ms=settings.nav_timeout_ms, ignore_destination=True)
    await log_in(
        page,
        settings.email,
        settings.password,
        cookies_file=settings.cookies_file,
        redirection_url=url,
        timeout_ms=settings.nav_timeout_ms,
    )


class ProfileExtractor:
    def __init__(self, settings: LookupSettings):
        self.settings = settings

    async def _positions(self, page: Page) -> List[Position]:
        items = page.locator(selectors.PROFILE["experience_items"])
        positions: List[Position] = []
        for i in range(await items.count()):
            item = items.nth(i)
            positions.append(
                Position(
                    company_name=await _text(item, selectors.PROFILE["experience_company"]) or None,
                    title=await _text(item, selectors.PROFILE["experience_title"]) or None,
                    linkedin_url=await _href(item, selectors.PROFILE["experience_link"]),
                )
            )
        return positions

    async def _related_people(self, page: Page) -> List[RelatedPerson]:
        items = page.locator(selectors.PROFILE["related_items"])
        people: List[RelatedPerson] = []
        for i in range(await items.count()):
            item = items.nth(i)
            people.append(
                RelatedPerson(
                    name=await _text(item, selectors.PROFILE["related_name"]) or None,
                    position=await _text(item, selectors.PROFILE["related_headline"]) or None,
                    linkedin_url=await _href(item, selectors.PROFILE["related_link"]),
                )
            )
        return people

    async def extract(self, page: Page, url: Optional[str] = None) -> ProfileResult:
        if url:
            await open_with_login(page, url, self.settings)
        await page.wait_for_selector(selectors.PROFILE["landmark"], timeout=self.settings.nav_timeout_ms)

        toggle = await page.query_selector(selectors.PROFILE["summary_toggle"])
        if toggle:
            await toggle.click()
        if await page.query_selector(selectors.PROFILE["company_marker"]):
            await scroll_page(page, selectors.PROFILE["experience_section"], 0.5)

        name = (await _text(page, selectors.PROFILE["name"])).split()
        positions = await self._positions(page)
        profile = ProfileResult(
            first_name=name[0] if name else None,
            last_name=" ".join(name[1:]) or None,
            headline=await _text(page, selectors.PROFILE["headline"]) or None,
            location=await _text(page, selectors.PROFILE["location"]) or None,
            summary=await _text(page, selectors.PROFILE["summary"]) or None,
            current_company=positions[0] if positions else None,
            school=await _text(page, selectors.PROFILE["school"]) or None,
            connections_number=parse_count(await _text(page, selectors.PROFILE["connections"])),
            positions=positions,
            related_people=await self._related_people(page),
            linkedin_url=page.url,
        )
        logger.info("Scraped profile %s %s", profile.first_name or "", profile.last_name or "")
        return profile


class CompanyExtractor:
    def __init__(self, settings: LookupSettings):
        self.settings = settings

    async def extract(self, page: Page, url: Optional[str] = None) -> CompanyResult:
        if url:
            await open_with_login(page, url, self.settings)
        await page.wait_for_selector(selectors.COMPANY["show_details"], timeout=self.settings.nav_timeout_ms)
        await page.click(selectors.COMPANY["show_details"])
        await page.wait_for_selector(selectors.COMPANY["details_panel"], timeout=self.settings.nav_timeout_ms)

        async def text(key: str) -> Optional[str]:
            return await _text(page, selectors.COMPANY[key]) or None

        company = CompanyResult(
            name=await text("name"),
            industry=await text("industry"),
            description=await text("description"),
            website=await text("website"),
            headquarters=await text("headquarters"),
            founded_year=parse_count(await text("founded")),
            company_type=await text("company_type"),
            company_size=parse_count(await text("company_size")),
            specialties=await text("specialties"),
            followers=parse_count(await text("followers")),
            members_on_linkedin=parse_count(await text("members")),
            linkedin_url=page.url,
        )
        logger.info("Scraped company %s", company.name)
        return company
