from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx

from .auth import AccessTokenProvider
from .config import DEFAULT_BASE_URL, DEFAULT_MODEL
from .errors import ProtocolError, TransportError
from .models import Turn

log = logging.getLogger(__name__)

COMPLETION_PATH = "/v1/chat/completions"


class Completer(ABC):
    """Anything that can turn an ordered conversation into a reply."""

    @abstractmethod
    async def completion(self, history: Sequence[Turn]) -> str:
        ...


class CompletionClient(Completer):
    """Chat-completion client for the relay's backend service.

    Every request carries a fresh access token as the ``access_token``
    query parameter.  The client never touches session state.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        tokens: AccessTokenProvider,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._url = base_url.rstrip("/") + COMPLETION_PATH
        self.model = model

    async def completion(self, history: Sequence[Turn]) -> str:
        # AuthError propagates unchanged
        token = await self._tokens.get_access_token()
        log.debug("Requesting completion for %d turn(s)", len(history))

        payload = {
            "model": self.model,
            "messages": [turn.to_dict() for turn in history],
        }
        try:
            resp = await self._client.post(
                self._url, params={"access_token": token}, json=payload
            )
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise TransportError("Completion service timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"Completion service error {exc.response.status_code}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Cannot reach completion service: {exc}") from exc

        try:
            data = resp.json()
        except ValueError as exc:
            raise ProtocolError("Completion service returned a non-JSON body") from exc

        return _message_content(data)


def _message_content(data: object) -> str:
    """Pull ``choices[0].message.content`` out of a completion response."""
    try:
        content = data["choices"][0]["message"]["content"]  # type: ignore[index]
    except (KeyError, IndexError, TypeError) as exc:
        raise ProtocolError("Completion response has no message content") from exc
    if not isinstance(content, str):
        raise ProtocolError("Completion response content is not text")
    return content
