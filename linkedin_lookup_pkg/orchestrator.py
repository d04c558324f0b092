import asyncio
import logging
from functools import partial
from typing import Any, Callable, Dict, Optional

from playwright.async_api import Page

from .api_client import LinkedInApiClient, profile_from_api
from .browser import BrowserSession
from .config import LookupSettings
from .extraction import CompanyExtractor, PageExtractor, ProfileExtractor
from .models import AccessToken, ProfileResult
from .response import build_error, build_response
from .scraper_logging import save_error_screenshot
from .token_provider import TokenProvider
from .urls import company_url_from_id, is_company_or_school_page


logger = logging.getLogger(__name__)


class InitializationError(RuntimeError):
    """The API client could not be set up (token exchange failed)."""


def resolve_company_url(profile: ProfileResult) -> Optional[str]:
    """Company page for the most recent position, if there is one.

    The API gives a company id on positions; scraped profiles only carry
    the link found next to the current company.
    """
    if profile.positions and profile.positions[0].company_id:
        return company_url_from_id(profile.positions[0].company_id)
    if profile.current_company:
        return profile.current_company.linkedin_url
    return None


class LinkedInLookup:
    """Profile and company lookup: API first, browser when the API can't help.

    One instance holds the access token and API client; the caller creates
    it, calls `get_company_or_people_details` as often as needed and closes
    it with `aclose()`.
    """

    def __init__(
        self,
        settings: LookupSettings,
        token_provider: Optional[TokenProvider] = None,
        api_client_factory: Optional[Callable[[str], LinkedInApiClient]] = None,
        session_factory: Optional[Callable[[Optional[Page]], BrowserSession]] = None,
        profile_extractor: Optional[PageExtractor] = None,
        company_extractor: Optional[PageExtractor] = None,
    ):
        self.settings = settings
        self.token_provider = token_provider or TokenProvider(settings)
        self._api_client_factory = api_client_factory or (lambda token: LinkedInApiClient(token, settings))
        self._session_factory = session_factory or partial(
            BrowserSession, headless=settings.headless, cookies_file=settings.cookies_file
        )
        self.profile_extractor = profile_extractor or ProfileExtractor(settings)
        self.company_extractor = company_extractor or CompanyExtractor(settings)
        self.token: Optional[AccessToken] = None
        self.api_client: Optional[LinkedInApiClient] = None
        self._init_lock = asyncio.Lock()

    async def init(self) -> None:
        logger.info("Initializing the LinkedIn client...")
        try:
            token = await self.token_provider.initialize()
        except Exception as e:
            logger.error("Token exchange failed: %s", e)
            raise InitializationError("Initialization has failed.") from e
        if self.api_client is not None:
            await self.api_client.aclose()
        self.token = token
        self.api_client = self._api_client_factory(token.access_token)

    def token_expired(self) -> bool:
        return self.token is None or self.api_client is None or self.token.is_expired()

    async def ensure_token(self) -> None:
        """Re-initialize when the token is missing or expired, once per expiry.

        Concurrent callers wait on the lock and re-check, so a single token
        exchange serves all of them.
        """
        if not self.token_expired():
            return
        async with self._init_lock:
            if self.token_expired():
                await self.init()

    async def aclose(self) -> None:
        if self.api_client is not None:
            await self.api_client.aclose()
            self.api_client = None

    async def _scrape_people(self, session: BrowserSession, linkedin_url: str) -> ProfileResult:
        page = await session.acquire()
        return await self.profile_extractor.extract(page, linkedin_url)

    async def get_company_or_people_details(
        self,
        linkedin_url: str,
        page: Optional[Page] = None,
        force_people_scraping: bool = False,
        skip_company_scraping: bool = False,
    ) -> Dict[str, Any]:
        await self.ensure_token()

        logger.info('Getting data from "%s"...', linkedin_url, extra={"url": linkedin_url})
        people_details: Optional[ProfileResult] = None

        async with self._session_factory(page) as session:
            if not is_company_or_school_page(linkedin_url):
                if force_people_scraping:
                    people_details = await self._scrape_people(session, linkedin_url)
                else:
                    payload = await self.api_client.get_people_by_url(linkedin_url)
                    api_internal_error = False
                    message = payload.get("message")
                    if message:
                        api_internal_error = message == self.settings.api_internal_error
                        if not api_internal_error:
                            # the LinkedIn URL is invalid
                            return build_error(message)

                    is_private = payload.get("id") == self.settings.private_profile_id
                    if is_private or api_internal_error:
                        logger.info(
                            "Falling back to the browser (%s)",
                            "private profile" if is_private else "API internal error",
                        )
                        people_details = await self._scrape_people(session, linkedin_url)
                        people_details.is_private_profile = is_private
                    else:
                        people_details = profile_from_api(payload, linkedin_url)

                if skip_company_scraping:
                    return build_response(people_details)

                company_url = resolve_company_url(people_details)
                if not company_url or not is_company_or_school_page(company_url):
                    return build_response(people_details)
                linkedin_url = company_url

            company_page = await session.acquire()
            try:
                company_details = await self.company_extractor.extract(company_page, linkedin_url)
            except Exception:
                await save_error_screenshot(company_page, self.settings.error_screenshot_path)
                raise

        if people_details is not None:
            people_details.company = company_details
            return build_response(people_details)
        return build_response(company_details)
