"""
adcreds/resolver/chain.py

The Application Default Credentials resolution chain and the public entry
points built on it.

Order of precedence:
  1) explicit credentials_json in Settings (find_credentials only),
  2) the file named by GOOGLE_APPLICATION_CREDENTIALS,
  3) the gcloud well-known file,
  4) the managed runtime's identity,
  5) the metadata server's default service account.
The first probe that finds credentials wins. A probe that raises aborts the
chain; there are no retries here.
"""

from __future__ import annotations

import logging
from typing import Optional

from adcreds.errors import CredentialsParseError, DefaultCredentialsNotFoundError
from adcreds.models.credentials import Credentials
from adcreds.models.credentials_file import ServiceAccountFile, parse_credentials_file
from adcreds.models.settings import Settings
from adcreds.resolver.parser import credentials_from_json
from adcreds.resolver.probes import ADC_PROBES, ProbeEnvironment
from adcreds.tokens.base import ReuseTokenSource, TokenSource
from adcreds.tokens.jwt import JWTAccessTokenSource

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_URL = (
    "https://developers.google.com/accounts/docs/application-default-credentials"
)


async def find_default_credentials(
    settings: Settings, env: Optional[ProbeEnvironment] = None
) -> Credentials:
    """
    Walk the probes in order and return the first credentials found.

    Args:
        settings: Scope, audience and consent options for the lookup.
        env: Platform hooks; defaults to the real process environment.

    Raises:
        CredentialsSourceError: If the environment variable or the well-known
            file points at something unreadable or malformed.
        DefaultCredentialsNotFoundError: If every probe declined.
    """
    env = env or ProbeEnvironment.from_process()
    for name, probe in ADC_PROBES:
        logger.debug("Trying credentials from %s", name)
        creds = await probe(env, settings)
        if creds is not None:
            logger.debug("Using credentials from %s", name)
            return creds

    raise DefaultCredentialsNotFoundError(
        f"google: could not find default credentials. See {DEFAULT_CREDENTIALS_URL} "
        "for more information."
    )


async def find_credentials(
    settings: Settings, env: Optional[ProbeEnvironment] = None
) -> Credentials:
    """
    Explicit credentials_json if given, otherwise the default chain. With
    explicit JSON nothing else is consulted, not even the environment.
    """
    if settings.credentials_json:
        return await credentials_from_json(
            settings.credentials_json,
            settings.scopes,
            settings.oauth_flow_handler,
            settings.state,
            audience=settings.audience,
        )
    return await find_default_credentials(settings, env)


async def default_token_source(
    scope: str, env: Optional[ProbeEnvironment] = None
) -> TokenSource:
    """Token source of the Application Default Credentials for `scope`."""
    creds = await find_default_credentials(Settings(scope=scope), env)
    return creds.token_source


async def oauth_json_token_source(
    settings: Settings, env: Optional[ProbeEnvironment] = None
) -> TokenSource:
    creds = await find_credentials(settings, env)
    return creds.token_source


def jwt_source_from_json(json_data: bytes, audience: str) -> TokenSource:
    """
    Self-signed JWT token source for the service account in `json_data`.

    Raises:
        CredentialsParseError: If there is no document or it is not a service account.
    """
    if not json_data:
        raise CredentialsParseError(
            "JWT access tokens need a service account JSON document; "
            "the resolved credentials have none"
        )
    doc = parse_credentials_file(json_data)
    if not isinstance(doc, ServiceAccountFile):
        raise CredentialsParseError(
            f"JWT access tokens need service_account credentials, got {doc.type!r}"
        )
    return ReuseTokenSource(JWTAccessTokenSource(doc, audience))


async def jwt_token_source(
    settings: Settings, env: Optional[ProbeEnvironment] = None
) -> TokenSource:
    """JWT access token source for settings.audience from the resolved document."""
    creds = await find_credentials(settings, env)
    return jwt_source_from_json(creds.json_data, settings.audience)
