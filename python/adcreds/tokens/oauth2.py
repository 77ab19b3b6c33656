"""
adcreds/tokens/oauth2.py

OAuth2 user-credential collaborators:
  - authorization_url(): build the consent URL for the installed-app flow.
  - exchange_code(): trade an authorization code for a token.
  - RefreshTokenSource: mint access tokens from a long-lived refresh token.
  - run_consent_flow(): drive the handler once and exchange its code.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp

from adcreds.errors import ConsentError, TokenFetchError
from adcreds.models.credentials_file import AuthorizedUserFile
from adcreds.models.settings import OAuthFlowHandler
from adcreds.models.token import Token
from adcreds.utils import http

logger = logging.getLogger(__name__)


def token_from_response(js: Dict[str, Any], refresh_token: str = "") -> Token:
    """Build a Token from a token endpoint's JSON response.

    Raises:
        TokenFetchError: If the response carries no access_token.
    """
    access_token = js.get("access_token")
    if not isinstance(access_token, str) or not access_token:
        raise TokenFetchError("token endpoint response is missing access_token")
    expires_in = js.get("expires_in")
    return Token.from_expires_in(
        access_token,
        int(expires_in) if expires_in else None,
        token_type=str(js.get("token_type") or "Bearer"),
        refresh_token=str(js.get("refresh_token") or refresh_token),
    )


def authorization_url(
    client: AuthorizedUserFile, scopes: List[str], state: str
) -> str:
    """Return the URL the user visits to grant consent for `scopes`."""
    params = {
        "client_id": client.client_id,
        "redirect_uri": client.redirect_uri,
        "response_type": "code",
        "scope": " ".join(scopes),
        "state": state,
        "access_type": "offline",
    }
    sep = "&" if "?" in client.auth_uri else "?"
    return f"{client.auth_uri}{sep}{urlencode(params)}"


async def exchange_code(
    client: AuthorizedUserFile,
    code: str,
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> Token:
    """Exchange an authorization code at the client's token endpoint."""
    js = await http.post_form(
        client.token_uri,
        {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": client.client_id,
            "client_secret": client.client_secret,
            "redirect_uri": client.redirect_uri,
        },
        session=session,
    )
    return token_from_response(js)


async def run_consent_flow(
    client: AuthorizedUserFile,
    scopes: List[str],
    handler: OAuthFlowHandler,
    state: str,
    *,
    session: Optional[aiohttp.ClientSession] = None,
) -> Token:
    """
    Present the consent URL to `handler` exactly once and exchange the code it
    returns for a token carrying a refresh token.

    Raises:
        ConsentError: If the handler raises or returns an empty code.
        TokenFetchError: If the code exchange fails.
    """
    url = authorization_url(client, scopes, state)
    logger.debug("Starting consent flow for client %s", client.client_id)
    try:
        result = handler(url)
        code = await result if inspect.isawaitable(result) else result
    except Exception as exc:
        raise ConsentError(f"consent handler failed: {exc}") from exc
    if not code:
        raise ConsentError("consent handler returned no authorization code")
    return await exchange_code(client, str(code).strip(), session=session)


class RefreshTokenSource:
    """Mints access tokens with the refresh_token grant."""

    def __init__(
        self,
        client: AuthorizedUserFile,
        refresh_token: str,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._client = client
        self._refresh_token = refresh_token
        self._session = session

    async def token(self) -> Token:
        if not self._refresh_token:
            raise ConsentError(
                "google: no refresh token available; consent must be granted again"
            )
        js = await http.post_form(
            self._client.token_uri,
            {
                "grant_type": "refresh_token",
                "refresh_token": self._refresh_token,
                "client_id": self._client.client_id,
                "client_secret": self._client.client_secret,
            },
            session=self._session,
        )
        tok = token_from_response(js, refresh_token=self._refresh_token)
        # The server may rotate the refresh token.
        self._refresh_token = tok.refresh_token
        return tok
