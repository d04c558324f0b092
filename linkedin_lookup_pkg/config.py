import os
import random

from pydantic import BaseModel


COOKIES_FILE = os.environ.get("LINKEDIN_COOKIES_PATH", "cookies.json")
SLOW_MO_MS = int(os.environ.get("SCRAPER_SLOW_MO_MS", "0"))
HEADLESS = os.environ.get("SCRAPER_HEADLESS", "true").lower() not in ["0", "false", "no"]
NAV_TIMEOUT_MS = int(os.environ.get("SCRAPER_NAV_TIMEOUT_MS", "30000"))
TOKEN_URL = os.environ.get("LINKEDIN_TOKEN_URL", "https://www.linkedin.com/oauth/v2/accessToken")
API_URL = os.environ.get("LINKEDIN_API_URL", "https://api.linkedin.com/v1")
ERROR_SCREENSHOT_PATH = os.environ.get("ERROR_SCREENSHOT_PATH", "error.png")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Undocumented values observed on the live API; verify against current behavior.
PRIVATE_PROFILE_ID = os.environ.get("LINKEDIN_PRIVATE_PROFILE_ID", "private")
API_INTERNAL_ERROR = os.environ.get("LINKEDIN_API_INTERNAL_ERROR", "Internal API server error")


class LookupSettings(BaseModel):
    """Everything the lookup needs from the outside world.

    Built once by the caller (CLI, HTTP app, tests) and handed to
    `LinkedInLookup` so nothing reads the environment behind its back.
    """
    api_key: str = ""
    api_secret: str = ""
    refresh_token: str | None = None
    email: str = ""
    password: str = ""
    cookies_file: str = COOKIES_FILE
    headless: bool = HEADLESS
    nav_timeout_ms: int = NAV_TIMEOUT_MS
    token_url: str = TOKEN_URL
    api_url: str = API_URL
    private_profile_id: str = PRIVATE_PROFILE_ID
    api_internal_error: str = API_INTERNAL_ERROR
    error_screenshot_path: str = ERROR_SCREENSHOT_PATH

    @classmethod
    def from_env(cls, **overrides) -> "LookupSettings":
        values = {
            "api_key": os.environ.get("LINKEDIN_API_KEY", ""),
            "api_secret": os.environ.get("LINKEDIN_API_SECRET", ""),
            "refresh_token": os.environ.get("LINKEDIN_REFRESH_TOKEN") or None,
            "email": os.environ.get("LINKEDIN_EMAIL", ""),
            "password": os.environ.get("LINKEDIN_PASSWORD", ""),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def user_agents():
    """Return a curated pool of desktop Chrome user agents."""
    return [
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    ]


def random_user_agent():
    return random.choice(user_agents())
