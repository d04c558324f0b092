from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from linkedin_lookup_pkg.browser import BrowserSession
from linkedin_lookup_pkg.config import LookupSettings
from linkedin_lookup_pkg.models import AccessToken, CompanyResult, Position, ProfileResult
from linkedin_lookup_pkg.orchestrator import InitializationError, LinkedInLookup, resolve_company_url
from linkedin_lookup_pkg.token_provider import TokenExchangeError


PROFILE_URL = "https://www.linkedin.com/in/jdoe"
COMPANY_URL = "https://www.linkedin.com/company/1337"

API_PROFILE = {
    "id": "abc",
    "firstName": "Jane",
    "lastName": "Doe",
    "positions": {"values": [{"title": "CTO", "company": {"id": 1337, "name": "Acme"}}]},
}


class FakeTokenProvider:
    def __init__(self, error=None):
        self.calls = 0
        self.error = error

    async def initialize(self):
        self.calls += 1
        if self.error:
            raise self.error
        return AccessToken(access_token=f"tok{self.calls}", expires_at=datetime.now(timezone.utc) + timedelta(hours=1))


class FakeApiClient:
    def __init__(self, payload):
        self.payload = payload
        self.calls = []
        self.closed = False

    async def get_people_by_url(self, url):
        self.calls.append(url)
        return dict(self.payload)

    async def aclose(self):
        self.closed = True


class FakeSession:
    """Stands in for BrowserSession without launching anything."""

    def __init__(self, page=None):
        self.page = page
        self.opened = False
        self.released = False

    async def acquire(self):
        if self.page is None:
            self.page = _page("https://www.linkedin.com/feed/")
            self.opened = True
        return self.page

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.released = True


class FakeExtractor:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def extract(self, page, url=None):
        self.calls.append((page, url))
        if self.error:
            raise self.error
        return self.result.model_copy(deep=True)


def _page(url=COMPANY_URL):
    page = MagicMock()
    page.url = url
    page.close = AsyncMock()
    page.screenshot = AsyncMock()
    return page


def _build(payload=API_PROFILE, profile=None, company=None, company_error=None, session_cls=FakeSession, tmp_path=None):
    settings = LookupSettings(error_screenshot_path=str(tmp_path / "error.png") if tmp_path else "error.png")
    api = FakeApiClient(payload)
    sessions = []

    def session_factory(page):
        session = session_cls(page)
        sessions.append(session)
        return session

    lookup = LinkedInLookup(
        settings,
        token_provider=FakeTokenProvider(),
        api_client_factory=lambda token: api,
        session_factory=session_factory,
        profile_extractor=FakeExtractor(profile or ProfileResult(first_name="Scraped")),
        company_extractor=FakeExtractor(company or CompanyResult(name="Acme"), error=company_error),
    )
    return lookup, api, sessions


def _run(lookup, url, **kw):
    return asyncio.run(lookup.get_company_or_people_details(url, **kw))


def test_company_url_never_touches_people_api():
    lookup, api, sessions = _build()
    result = _run(lookup, COMPANY_URL)

    assert api.calls == []
    assert lookup.profile_extractor.calls == []
    assert lookup.company_extractor.calls[0][1] == COMPANY_URL
    assert result["name"] == "Acme"
    assert "first_name" not in result
    assert sessions[0].opened and sessions[0].released


def test_school_url_goes_straight_to_company_extraction():
    lookup, api, _ = _build()
    _run(lookup, "https://www.linkedin.com/school/mit/")
    assert api.calls == []
    assert lookup.company_extractor.calls[0][1] == "https://www.linkedin.com/school/mit/"


def test_skip_company_with_public_profile_opens_no_browser():
    lookup, api, sessions = _build()
    result = _run(lookup, PROFILE_URL, skip_company_scraping=True)

    assert api.calls == [PROFILE_URL]
    assert result["first_name"] == "Jane"
    assert "company" not in result
    assert not sessions[0].opened
    assert lookup.company_extractor.calls == []


def test_api_error_message_is_returned_without_browser():
    lookup, _, sessions = _build(payload={"message": "Couldn't parse member url"})
    result = _run(lookup, PROFILE_URL)

    assert result == {"error": "Couldn't parse member url"}
    assert not sessions[0].opened
    assert lookup.profile_extractor.calls == []


def test_private_profile_falls_back_to_browser():
    lookup, _, sessions = _build(payload={"id": "private"})
    result = _run(lookup, PROFILE_URL, skip_company_scraping=True)

    assert lookup.profile_extractor.calls[0][1] == PROFILE_URL
    assert result["first_name"] == "Scraped"
    assert result["is_private_profile"] is True
    assert sessions[0].opened and sessions[0].released


def test_api_internal_error_falls_back_to_browser():
    lookup, _, _ = _build(payload={"message": "Internal API server error"})
    result = _run(lookup, PROFILE_URL, skip_company_scraping=True)

    assert len(lookup.profile_extractor.calls) == 1
    assert result["is_private_profile"] is False


def test_forced_scraping_skips_api():
    lookup, api, _ = _build()
    _run(lookup, PROFILE_URL, force_people_scraping=True, skip_company_scraping=True)
    assert api.calls == []
    assert len(lookup.profile_extractor.calls) == 1


def test_profile_and_company_are_merged():
    lookup, _, sessions = _build()
    result = _run(lookup, PROFILE_URL)

    assert result["first_name"] == "Jane"
    assert result["company"]["name"] == "Acme"
    assert lookup.company_extractor.calls[0][1] == COMPANY_URL
    assert sessions[0].released


def test_scraped_profile_uses_current_company_link():
    scraped = ProfileResult(
        first_name="Scraped",
        current_company=Position(company_name="Acme", linkedin_url="https://www.linkedin.com/company/acme/"),
        positions=[Position(company_name="Acme", linkedin_url="https://www.linkedin.com/company/acme/")],
    )
    lookup, _, sessions = _build(payload={"id": "private"}, profile=scraped)
    result = _run(lookup, PROFILE_URL)

    assert lookup.company_extractor.calls[0][1] == "https://www.linkedin.com/company/acme/"
    # profile and company share the one page
    assert lookup.company_extractor.calls[0][0] is lookup.profile_extractor.calls[0][0]
    assert result["company"]["name"] == "Acme"
    assert result["is_private_profile"] is True


def test_profile_without_company_page_is_returned_alone():
    lookup, _, sessions = _build(payload={"id": "abc", "firstName": "Jane"})
    result = _run(lookup, PROFILE_URL)

    assert result["first_name"] == "Jane"
    assert "company" not in result
    assert lookup.company_extractor.calls == []
    assert not sessions[0].opened


def test_non_company_link_is_not_followed():
    scraped = ProfileResult(
        current_company=Position(linkedin_url="https://www.linkedin.com/search/results/?keywords=Acme"),
    )
    lookup, _, _ = _build(payload={"id": "private"}, profile=scraped)
    result = _run(lookup, PROFILE_URL)
    assert "company" not in result
    assert lookup.company_extractor.calls == []


def test_caller_page_is_never_closed():
    page = _page()
    lookup, _, sessions = _build(session_cls=BrowserSession)
    result = _run(lookup, COMPANY_URL, page=page)

    assert lookup.company_extractor.calls[0][0] is page
    assert result["name"] == "Acme"
    assert not sessions[0].opened
    page.close.assert_not_called()


def test_caller_page_is_not_closed_on_failure(tmp_path):
    page = _page()
    lookup, _, _ = _build(session_cls=BrowserSession, company_error=RuntimeError("selector gone"), tmp_path=tmp_path)

    with pytest.raises(RuntimeError, match="selector gone"):
        _run(lookup, COMPANY_URL, page=page)
    page.close.assert_not_called()
    page.screenshot.assert_awaited_once_with(path=str(tmp_path / "error.png"))


def test_company_extraction_failure_is_screenshotted_and_raised(tmp_path):
    lookup, _, sessions = _build(company_error=TimeoutError("no details button"), tmp_path=tmp_path)

    with pytest.raises(TimeoutError):
        _run(lookup, PROFILE_URL)
    sessions[0].page.screenshot.assert_awaited_once_with(path=str(tmp_path / "error.png"))
    assert sessions[0].released


def test_screenshot_failure_keeps_original_error(tmp_path):
    lookup, _, sessions = _build(company_error=ValueError("boom"), tmp_path=tmp_path)
    page = _page()
    page.screenshot.side_effect = OSError("disk full")

    with pytest.raises(ValueError, match="boom"):
        _run(lookup, COMPANY_URL, page=page)


def test_token_is_refreshed_when_expired():
    lookup, _, _ = _build()
    _run(lookup, PROFILE_URL, skip_company_scraping=True)
    assert lookup.token_provider.calls == 1

    _run(lookup, PROFILE_URL, skip_company_scraping=True)
    assert lookup.token_provider.calls == 1

    lookup.token = AccessToken(access_token="old", expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
    _run(lookup, PROFILE_URL, skip_company_scraping=True)
    assert lookup.token_provider.calls == 2
    assert lookup.token.access_token == "tok2"


def test_failed_token_exchange_is_fatal():
    lookup, _, _ = _build()
    lookup.token_provider = FakeTokenProvider(error=TokenExchangeError("401"))

    with pytest.raises(InitializationError, match="Initialization has failed."):
        _run(lookup, PROFILE_URL)


def test_resolve_company_url_prefers_position_id():
    profile = ProfileResult(
        positions=[Position(company_id="42")],
        current_company=Position(linkedin_url="https://www.linkedin.com/company/other/"),
    )
    assert resolve_company_url(profile) == "https://www.linkedin.com/company/42"
    assert resolve_company_url(ProfileResult()) is None


class SlowTokenProvider(FakeTokenProvider):
    async def initialize(self):
        await asyncio.sleep(0.05)
        return await super().initialize()


def test_concurrent_lookups_share_one_token_exchange():
    settings = LookupSettings()
    built = []

    def api_factory(token):
        client = FakeApiClient(API_PROFILE)
        built.append(client)
        return client

    lookup = LinkedInLookup(
        settings,
        token_provider=SlowTokenProvider(),
        api_client_factory=api_factory,
        session_factory=FakeSession,
        profile_extractor=FakeExtractor(ProfileResult()),
        company_extractor=FakeExtractor(CompanyResult()),
    )

    async def scenario():
        return await asyncio.gather(*[
            lookup.get_company_or_people_details(PROFILE_URL, skip_company_scraping=True)
            for _ in range(3)
        ])

    results = asyncio.run(scenario())

    assert [r["first_name"] for r in results] == ["Jane"] * 3
    assert lookup.token_provider.calls == 1
    assert len(built) == 1
    assert built[0].closed is False
    assert len(built[0].calls) == 3
