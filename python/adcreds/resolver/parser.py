"""
adcreds/resolver/parser.py

Turns a raw credentials document into Credentials, dispatching on the
document's kind to build the matching token source.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

import aiohttp

from adcreds.errors import CredentialsParseError
from adcreds.models.credentials import Credentials
from adcreds.models.credentials_file import (
    AuthorizedUserFile,
    ServiceAccountFile,
    parse_credentials_file,
)
from adcreds.models.settings import OAuthFlowHandler
from adcreds.tokens.base import ReuseTokenSource, TokenSource
from adcreds.tokens.jwt import JWTAccessTokenSource, ServiceAccountTokenSource
from adcreds.tokens.oauth2 import RefreshTokenSource, run_consent_flow

logger = logging.getLogger(__name__)


def _service_account_source(
    account: ServiceAccountFile,
    scopes: List[str],
    audience: str,
    session: Optional[aiohttp.ClientSession],
) -> TokenSource:
    if audience:
        return ReuseTokenSource(JWTAccessTokenSource(account, audience))
    return ReuseTokenSource(ServiceAccountTokenSource(account, scopes, session=session))


async def _authorized_user_source(
    user: AuthorizedUserFile,
    scopes: List[str],
    handler: Optional[OAuthFlowHandler],
    state: str,
    session: Optional[aiohttp.ClientSession],
) -> TokenSource:
    if user.refresh_token:
        return ReuseTokenSource(
            RefreshTokenSource(user, user.refresh_token, session=session)
        )
    if handler is None:
        raise CredentialsParseError(
            "authorized_user credentials have no refresh_token and no consent handler was given"
        )

    initial = await run_consent_flow(user, scopes, handler, state, session=session)
    if not initial.refresh_token:
        # Still usable until it expires; nothing to refresh with afterwards.
        logger.warning("Consent exchange returned no refresh token")
    return ReuseTokenSource(
        RefreshTokenSource(user, initial.refresh_token, session=session),
        initial=initial,
    )


async def credentials_from_json(
    data: Union[bytes, str],
    scopes: List[str],
    handler: Optional[OAuthFlowHandler] = None,
    state: str = "",
    *,
    audience: str = "",
    session: Optional[aiohttp.ClientSession] = None,
) -> Credentials:
    """
    Parse a credentials document and build the token source for its kind.

    Service accounts get a JWT-bearer token source scoped to `scopes`, or a
    self-signed JWT source when `audience` is set. Authorized users get a
    refresh-token source, running the consent flow through `handler` when the
    document has no refresh token.

    Args:
        data: The raw JSON document.
        scopes: Requested scopes.
        handler: Optional consent callback (authorization URL -> code).
        state: Anti-forgery value embedded in the consent URL.
        audience: If set, service accounts mint self-signed JWTs for it.
        session: Optional aiohttp session reused by network token sources.

    Returns:
        Credentials carrying the original bytes and the document's project id.

    Raises:
        CredentialsParseError: If the document is malformed or unusable.
        ConsentError: If the consent handler fails.
        TokenFetchError: If the consent code exchange fails.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    doc = parse_credentials_file(raw)

    source: TokenSource
    if isinstance(doc, ServiceAccountFile):
        source = _service_account_source(doc, scopes, audience, session)
        project_id = doc.project_id
    else:
        source = await _authorized_user_source(doc, scopes, handler, state, session)
        project_id = doc.effective_project_id

    logger.debug("Parsed %s credentials (project %r)", doc.type, project_id)
    return Credentials(project_id=project_id, token_source=source, json_data=raw)
