"""
adcreds/tokens/base.py

The TokenSource capability and the generic wrappers around it:
  - StaticTokenSource: always returns the same token.
  - ReuseTokenSource: caches the last token, refreshing only when it expires.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

from adcreds.models.token import Token

logger = logging.getLogger(__name__)


class TokenSource(Protocol):
    """Anything that can produce a currently valid access token."""

    async def token(self) -> Token:
        """Return a valid token, refreshing it if needed."""
        ...


class StaticTokenSource:
    """A token source that always returns one fixed token."""

    def __init__(self, token: Token) -> None:
        self._token = token

    async def token(self) -> Token:
        return self._token


class ReuseTokenSource:
    """
    Wraps a refreshing token source and hands out its last token until it
    expires. Concurrent callers share a single refresh.
    """

    def __init__(self, base: TokenSource, initial: Optional[Token] = None) -> None:
        self._base = base
        self._token = initial
        self._lock = asyncio.Lock()

    async def token(self) -> Token:
        async with self._lock:
            if self._token is not None and self._token.valid:
                return self._token
            logger.debug("Refreshing token via %s", type(self._base).__name__)
            self._token = await self._base.token()
            return self._token
