"""Access-token exchange for the completion service."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import httpx

from .config import DEFAULT_BASE_URL
from .errors import AuthError
from .models import AccessToken

log = logging.getLogger(__name__)

TOKEN_PATH = "/auth/ak"


class AccessTokenProvider:
    """Exchanges the app id/secret for a short-lived bearer token.

    By default every call performs a fresh exchange.  With ``cache=True`` a
    token is reused until ``refresh_margin`` seconds before it expires.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        app_id: str,
        app_secret: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        cache: bool = False,
        refresh_margin: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._app_id = app_id
        self._app_secret = app_secret
        self._url = base_url.rstrip("/") + TOKEN_PATH
        self._cache = cache
        self._refresh_margin = refresh_margin
        self._clock = clock
        self._cached: AccessToken | None = None
        self._cached_until = 0.0

    async def get_access_token(self) -> str:
        if self._cache and self._cached and self._clock() < self._cached_until:
            return self._cached.value

        token = await self._fetch()
        if self._cache:
            self._cached = token
            self._cached_until = self._clock() + token.expire_in - self._refresh_margin
        return token.value

    async def _fetch(self) -> AccessToken:
        params = {"app_id": self._app_id, "app_secret": self._app_secret}
        try:
            resp = await self._client.get(self._url, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AuthError(
                f"Token exchange failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AuthError(f"Token exchange failed: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise AuthError("Token exchange returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise AuthError("Token exchange returned an unexpected body")
        value = data.get("access_token")
        expire_in = data.get("expire_in", 0)
        if not isinstance(value, str) or not value:
            raise AuthError("Token exchange response has no access_token")
        if not isinstance(expire_in, int):
            raise AuthError("Token exchange response has an invalid expire_in")

        log.debug("Obtained access token (expires in %ds)", expire_in)
        return AccessToken(value=value, expire_in=expire_in)
