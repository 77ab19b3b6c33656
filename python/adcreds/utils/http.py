"""
adcreds/utils/http.py

Thin aiohttp helpers shared by the token collaborators. Each helper accepts an
optional session; when none is given a short-lived session is opened and
closed around the single request.
"""

from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Mapping, Optional, Tuple

import aiohttp
from pydantic import TypeAdapter, ValidationError

from adcreds.errors import TokenFetchError

_JSON_OBJECT: TypeAdapter[Dict[str, Any]] = TypeAdapter(Dict[str, Any])


def json_object(raw: Any, source: str) -> Dict[str, Any]:
    """Check that a decoded response body is a JSON object.

    Raises:
        TokenFetchError: If it is anything else, naming `source`.
    """
    try:
        return _JSON_OBJECT.validate_python(raw)
    except ValidationError as exc:
        raise TokenFetchError(f"unexpected response from {source}: {exc}") from exc


def loads_json_object(body: str, source: str) -> Dict[str, Any]:
    """Decode a response body that must hold a JSON object."""
    try:
        raw = json.loads(body)
    except ValueError as exc:
        raise TokenFetchError(f"invalid JSON from {source}: {exc}") from exc
    return json_object(raw, source)


@asynccontextmanager
async def _session_scope(
    session: Optional[aiohttp.ClientSession],
) -> AsyncGenerator[aiohttp.ClientSession, None]:
    if session is not None:
        yield session
        return
    async with aiohttp.ClientSession() as owned:
        yield owned


async def post_form(
    url: str,
    data: Mapping[str, str],
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> Dict[str, Any]:
    """POST an urlencoded form and return the JSON object in the response.

    Raises:
        TokenFetchError: If the status is not 200 or the body is not a JSON object.
    """
    async with _session_scope(session) as sess:
        async with sess.post(url, data=dict(data)) as resp:
            try:
                raw_js = await resp.json(content_type=None)
            except ValueError:
                raw_js = None
            if resp.status != 200:
                raise TokenFetchError(
                    f"token request to {url} failed: {resp.status}, {raw_js}",
                    status=resp.status,
                )
    return json_object(raw_js, url)


async def get_text(
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> Tuple[int, Dict[str, str], str]:
    """GET a URL and return (status, headers, body text) without raising on status."""
    kwargs: Dict[str, Any] = {"headers": dict(headers or {})}
    if timeout:
        kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)
    async with _session_scope(session) as sess:
        async with sess.get(url, **kwargs) as resp:
            body = await resp.text()
            return resp.status, dict(resp.headers), body
