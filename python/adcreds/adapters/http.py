"""
adcreds/adapters/http.py

Attaches tokens to plain HTTP requests. Every call asks the wrapped token
source for its token, so refresh and caching stay with the source.
"""

from __future__ import annotations

from typing import Any, Dict

import aiohttp

from adcreds.tokens.base import TokenSource


async def auth_header(token_source: TokenSource) -> Dict[str, str]:
    """Return {'Authorization': '<type> <token>'} for the current token."""
    tok = await token_source.token()
    return {"Authorization": tok.header_value()}


class BearerAuth:
    """
    Per-request Authorization header injection for aiohttp.

    Example:
        auth = BearerAuth(await default_token_source(scope))
        async with aiohttp.ClientSession() as session:
            async with await auth.request(session, "GET", url) as resp:
                ...
    """

    def __init__(self, token_source: TokenSource) -> None:
        self._token_source = token_source

    async def headers(self) -> Dict[str, str]:
        return await auth_header(self._token_source)

    async def request(
        self, session: aiohttp.ClientSession, method: str, url: str, **kwargs: Any
    ) -> aiohttp.ClientResponse:
        """Issue a request with the current Authorization header merged in."""
        headers = dict(kwargs.pop("headers", None) or {})
        headers.update(await self.headers())
        return await session.request(method, url, headers=headers, **kwargs)
