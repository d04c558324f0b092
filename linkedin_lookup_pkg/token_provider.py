import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from .config import LookupSettings
from .models import AccessToken


logger = logging.getLogger(__name__)


class TokenExchangeError(RuntimeError):
    """The OAuth endpoint did not hand back a usable access token."""


class TokenProvider:
    """Exchanges API credentials for an OAuth access token.

    Uses the `client_credentials` grant unless a refresh token is configured,
    in which case the `refresh_token` grant is used. The expiration is
    computed locally as now + the `expires_in` declared by the server.
    """

    def __init__(self, settings: LookupSettings, http_client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._http_client = http_client

    def _form(self) -> dict:
        form = {
            "client_id": self.settings.api_key,
            "client_secret": self.settings.api_secret,
        }
        if self.settings.refresh_token:
            form["grant_type"] = "refresh_token"
            form["refresh_token"] = self.settings.refresh_token
        else:
            form["grant_type"] = "client_credentials"
        return form

    async def _post(self, client: httpx.AsyncClient) -> httpx.Response:
        return await client.post(
            self.settings.token_url,
            data=self._form(),
            headers={"Accept": "application/json"},
        )

    async def initialize(self) -> AccessToken:
        try:
            if self._http_client is not None:
                response = await self._post(self._http_client)
            else:
                async with httpx.AsyncClient(timeout=30.0) as client:
                    response = await self._post(client)
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Token request failed: {e}") from e

        if response.status_code != 200:
            raise TokenExchangeError(
                f"Token endpoint returned {response.status_code}: {response.text[:200]}"
            )
        try:
            payload = response.json()
        except ValueError as e:
            raise TokenExchangeError("Token endpoint returned a non-JSON body") from e

        token = payload.get("access_token")
        if not token:
            raise TokenExchangeError(f"No access_token in response: {payload.get('error_description') or payload}")

        try:
            expires_in = int(payload["expires_in"])
        except (KeyError, TypeError, ValueError) as e:
            raise TokenExchangeError(f"Missing or invalid expires_in in response: {payload.get('expires_in')!r}") from e
        if expires_in <= 0:
            raise TokenExchangeError(f"Token already expired on arrival (expires_in={expires_in})")
        expires_at = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        logger.info("Access token obtained, expires at %s", expires_at.isoformat())
        return AccessToken(access_token=token, expires_at=expires_at)
