from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class LookupRequest(BaseModel):
    """Incoming request payload for a profile or company lookup.

    Mirrors the CLI flags so both entry points build the same call.
    """
    url: str
    force_people_scraping: bool = False
    skip_company_scraping: bool = False
    headless: Optional[bool] = None


class AccessToken(BaseModel):
    """OAuth access token plus the moment it stops being valid."""
    access_token: str
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now > self.expires_at


class Position(BaseModel):
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    title: Optional[str] = None
    linkedin_url: Optional[str] = None


class RelatedPerson(BaseModel):
    name: Optional[str] = None
    position: Optional[str] = None
    linkedin_url: Optional[str] = None


class CompanyResult(BaseModel):
    """Company or school page details.

    Text fields are None when the page shows nothing; numeric fields are
    parsed out of their decorated labels ("1,234 followers").
    """
    name: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    headquarters: Optional[str] = None
    founded_year: Optional[int] = None
    company_type: Optional[str] = None
    company_size: Optional[int] = None
    specialties: Optional[str] = None
    followers: Optional[int] = None
    members_on_linkedin: Optional[int] = None
    linkedin_url: Optional[str] = None


class ProfileResult(BaseModel):
    """People profile, from the API or from the rendered page.

    `company` is only filled in when the current position resolved to a
    company or school page.
    """
    id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    current_company: Optional[Position] = None
    school: Optional[str] = None
    connections_number: Optional[int] = None
    positions: List[Position] = Field(default_factory=list)
    related_people: List[RelatedPerson] = Field(default_factory=list)
    linkedin_url: Optional[str] = None
    is_private_profile: bool = False
    company: Optional[CompanyResult] = None
