"""
adcreds/tokens/jwt.py

Service account token sources, signing RS256 JWTs with the account's private
key via `cryptography`:
  - ServiceAccountTokenSource: exchanges a signed assertion for an OAuth2
    access token (JWT bearer grant).
  - JWTAccessTokenSource: uses a self-signed JWT bound to one audience as the
    access token itself, with no network round trip.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from datetime import datetime, timezone
from functools import cached_property
from typing import Any, Dict, List, Optional

import aiohttp
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from adcreds.errors import CredentialsParseError
from adcreds.models.credentials_file import ServiceAccountFile
from adcreds.models.token import Token
from adcreds.tokens.oauth2 import token_from_response
from adcreds.utils import http

logger = logging.getLogger(__name__)

JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
TOKEN_LIFETIME_SECONDS = 3600


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def load_private_key(pem: str) -> rsa.RSAPrivateKey:
    """Load the PEM private key from a service account document.

    Raises:
        CredentialsParseError: If the key is not a PEM-encoded RSA private key.
    """
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError) as exc:
        raise CredentialsParseError(f"invalid service account private key: {exc}") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise CredentialsParseError("service account private key must be RSA")
    return key


def encode_jwt(
    claims: Dict[str, Any], key: rsa.RSAPrivateKey, key_id: str = ""
) -> str:
    """Encode and RS256-sign a compact JWT."""
    header: Dict[str, str] = {"alg": "RS256", "typ": "JWT"}
    if key_id:
        header["kid"] = key_id
    signing_input = ".".join(
        _b64url(json.dumps(part, separators=(",", ":")).encode("utf-8"))
        for part in (header, claims)
    )
    signature = key.sign(
        signing_input.encode("ascii"), padding.PKCS1v15(), hashes.SHA256()
    )
    return f"{signing_input}.{_b64url(signature)}"


class ServiceAccountTokenSource:
    """OAuth2 access tokens for a service account via the JWT bearer grant."""

    def __init__(
        self,
        account: ServiceAccountFile,
        scopes: List[str],
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._account = account
        self._scopes = [s for s in scopes if s]
        self._session = session

    @cached_property
    def _key(self) -> rsa.RSAPrivateKey:
        # Parsed on first use; building the source never touches the key.
        return load_private_key(self._account.private_key)

    def assertion(self, now: Optional[int] = None) -> str:
        iat = int(time.time()) if now is None else now
        claims = {
            "iss": self._account.client_email,
            "scope": " ".join(self._scopes),
            "aud": self._account.token_uri,
            "iat": iat,
            "exp": iat + TOKEN_LIFETIME_SECONDS,
        }
        return encode_jwt(claims, self._key, self._account.private_key_id)

    async def token(self) -> Token:
        logger.debug("Requesting token for %s", self._account.client_email)
        js = await http.post_form(
            self._account.token_uri,
            {"grant_type": JWT_BEARER_GRANT, "assertion": self.assertion()},
            session=self._session,
        )
        return token_from_response(js)


class JWTAccessTokenSource:
    """Self-signed JWTs bound to a single audience, used directly as bearer tokens."""

    def __init__(self, account: ServiceAccountFile, audience: str) -> None:
        if not audience:
            raise ValueError("JWT access tokens require an audience")
        self._account = account
        self._audience = audience

    @cached_property
    def _key(self) -> rsa.RSAPrivateKey:
        return load_private_key(self._account.private_key)

    async def token(self) -> Token:
        iat = int(time.time())
        exp = iat + TOKEN_LIFETIME_SECONDS
        claims = {
            "iss": self._account.client_email,
            "sub": self._account.client_email,
            "aud": self._audience,
            "iat": iat,
            "exp": exp,
        }
        signed = encode_jwt(claims, self._key, self._account.private_key_id)
        return Token(
            access_token=signed,
            expiry=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
