from typing import Optional


LINKEDIN_BASE_URL = "https://www.linkedin.com"
COMPANY_URL_PREFIX = "https://www.linkedin.com/company/"
SCHOOL_URL_PREFIX = "https://www.linkedin.com/school/"


def is_company_or_school_page(linkedin_url: str) -> bool:
    return COMPANY_URL_PREFIX in linkedin_url or SCHOOL_URL_PREFIX in linkedin_url


def company_url_from_id(company_id) -> str:
    return f"{COMPANY_URL_PREFIX}{company_id}"


def absolute_url(href: Optional[str]) -> Optional[str]:
    """Turn a site-relative href into a full LinkedIn URL."""
    if not href:
        return None
    if href.startswith("http"):
        return href
    return f"{LINKEDIN_BASE_URL}{href}"
