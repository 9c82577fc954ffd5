"""Error taxonomy for the reply pipeline.

Errors raised during a completion round (``AuthError``, ``TransportError``,
``ProtocolError``) are turned into the reply text the user sees.  A
``RelayError`` means the reply itself could not be delivered; it is logged
and dropped.
"""

from __future__ import annotations


class RelayBotError(Exception):
    """Base class for every error the pipeline knows how to handle."""


class AuthError(RelayBotError):
    """Raised when exchanging the app credentials for an access token fails."""


class TransportError(RelayBotError):
    """Raised when the completion service cannot be reached or rejects the request."""


class ProtocolError(RelayBotError):
    """Raised when a response body is not what the service contract promises."""


class RelayError(RelayBotError):
    """Raised when a reply cannot be delivered back to the conversation."""
