"""
adcreds/tokens/metadata.py

Client for the local metadata server and the token source backed by it.

Platform detection (`on_platform`) is true when any of these hold:
  1) GCE_METADATA_HOST is configured,
  2) the link-local metadata address answers with 'Metadata-Flavor: Google',
  3) the DMI product name mentions Google.
The answer is cached per client instance.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol
from urllib.parse import quote

import aiofiles
import aiohttp

from adcreds.errors import TokenFetchError
from adcreds.models.settings import MetadataSettings
from adcreds.models.token import Token
from adcreds.tokens.oauth2 import token_from_response
from adcreds.utils import http
from adcreds.utils.async_retry import async_retry

logger = logging.getLogger(__name__)

METADATA_FLAVOR = {"Metadata-Flavor": "Google"}


class MetadataService(Protocol):
    """What the resolution chain and ComputeTokenSource need from a metadata client."""

    async def on_platform(self) -> bool: ...

    async def project_id(self) -> str: ...

    async def get(self, suffix: str) -> str: ...


class MetadataClient:
    """Reads values from the metadata server."""

    def __init__(
        self,
        settings: Optional[MetadataSettings] = None,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._settings = settings or MetadataSettings()
        self._session = session
        self._on_platform: Optional[bool] = None

    async def on_platform(self) -> bool:
        """Report whether this process runs where a metadata server is reachable."""
        if self._on_platform is None:
            self._on_platform = await self._detect()
            logger.debug("Metadata server platform detected: %s", self._on_platform)
        return self._on_platform

    async def _detect(self) -> bool:
        if self._settings.metadata_host:
            return True

        try:
            _, headers, _ = await http.get_text(
                f"http://{self._settings.metadata_ip}",
                headers=METADATA_FLAVOR,
                timeout=self._settings.metadata_timeout_seconds,
                session=self._session,
            )
            if headers.get("Metadata-Flavor") == "Google":
                return True
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            logger.debug("Metadata server probe failed: %s", exc)

        try:
            async with aiofiles.open(self._settings.product_name_path, "r") as f:
                product = await f.read()
        except OSError:
            return False
        return "Google" in product

    async def _get_once(self, suffix: str) -> str:
        status, _, body = await http.get_text(
            self._settings.base_url + suffix.lstrip("/"),
            headers=METADATA_FLAVOR,
            timeout=self._settings.metadata_timeout_seconds,
            session=self._session,
        )
        if status != 200:
            raise TokenFetchError(
                f"metadata request for {suffix!r} failed: {status}", status=status
            )
        return body

    async def get(self, suffix: str) -> str:
        """GET a metadata value relative to computeMetadata/v1/, with retries.

        Raises:
            TokenFetchError: On a non-200 status after all retries.
            aiohttp.ClientError: If the server cannot be reached after all retries.
        """
        fetch = async_retry(
            retries=self._settings.metadata_retries,
            delay=self._settings.metadata_retry_delay_seconds,
            retry_on=(aiohttp.ClientError, asyncio.TimeoutError, TokenFetchError),
        )(self._get_once)
        return await fetch(suffix)

    async def project_id(self) -> str:
        return (await self.get("project/project-id")).strip()


class ComputeTokenSource:
    """Access tokens for an instance service account, fetched from the metadata server."""

    def __init__(
        self,
        client: MetadataService,
        account: str = "",
        scopes: Optional[List[str]] = None,
    ) -> None:
        self._client = client
        self._account = account or "default"
        self._scopes = [s for s in (scopes or []) if s]

    async def token(self) -> Token:
        suffix = f"instance/service-accounts/{quote(self._account)}/token"
        if self._scopes:
            suffix += "?scopes=" + quote(",".join(self._scopes), safe=",")
        body = await self._client.get(suffix)
        js = http.loads_json_object(body, "metadata token endpoint")
        return token_from_response(js)
