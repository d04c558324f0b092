import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from .config import LookupSettings
from .models import Position, ProfileResult


logger = logging.getLogger(__name__)


PEOPLE_API_FIELDS = [
    "id",
    "first-name",
    "last-name",
    "headline",
    "location",
    "industry",
    "summary",
    "specialties",
    "positions",
    "num-connections",
    "picture-url",
    "public-profile-url",
]


class LinkedInApiClient:
    """Thin async binding over the formal people-lookup API.

    Error payloads are handed back as data (a dict with `message`) rather
    than raised, because the caller decides which messages mean "fall back
    to the browser" and which mean "bad URL".
    """

    def __init__(
        self,
        access_token: str,
        settings: LookupSettings,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.access_token = access_token
        self.settings = settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=30.0)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "x-li-format": "json",
            "Accept": "application/json",
        }

    def people_url(self, profile_url: str) -> str:
        fields = ",".join(PEOPLE_API_FIELDS)
        return f"{self.settings.api_url}/people/url={quote(profile_url, safe='')}:({fields})"

    async def get_people_by_url(self, profile_url: str) -> Dict[str, Any]:
        response = await self._client.get(
            self.people_url(profile_url),
            params={"format": "json"},
            headers=self._headers(),
        )
        try:
            payload = response.json()
        except ValueError:
            if response.status_code >= 500:
                return {"message": self.settings.api_internal_error}
            return {"message": f"HTTP {response.status_code}"}
        if not isinstance(payload, dict):
            return {"message": f"Unexpected API payload: {type(payload).__name__}"}
        if payload.get("message"):
            logger.info("API answered with message: %s", payload["message"])
        return payload

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def profile_from_api(payload: Dict[str, Any], requested_url: Optional[str] = None) -> ProfileResult:
    """Map the camelCase API payload onto a ProfileResult."""
    positions = []
    for value in (payload.get("positions") or {}).get("values") or []:
        company = value.get("company") or {}
        company_id = company.get("id")
        positions.append(
            Position(
                company_id=str(company_id) if company_id is not None else None,
                company_name=company.get("name"),
                title=value.get("title"),
            )
        )
    return ProfileResult(
        id=payload.get("id"),
        first_name=payload.get("firstName"),
        last_name=payload.get("lastName"),
        headline=payload.get("headline"),
        location=(payload.get("location") or {}).get("name"),
        summary=payload.get("summary"),
        current_company=positions[0] if positions else None,
        connections_number=payload.get("numConnections"),
        positions=positions,
        linkedin_url=payload.get("publicProfileUrl") or requested_url,
    )
