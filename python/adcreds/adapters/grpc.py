"""
adcreds/adapters/grpc.py

gRPC per-call credentials backed by a token source, plus the entry points
that resolve Application Default Credentials straight into them.

gRPC invokes metadata plugins on its own threads. When the plugin is given
the event loop that owns the token source, token retrieval is scheduled on
that loop; otherwise it runs in a private loop on the calling thread.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import Future
from typing import Optional, Tuple

import grpc

from adcreds.models.settings import Settings
from adcreds.resolver.chain import (
    default_token_source,
    find_default_credentials,
    jwt_source_from_json,
)
from adcreds.resolver.probes import ProbeEnvironment
from adcreds.tokens.base import TokenSource

logger = logging.getLogger(__name__)

Metadata = Tuple[Tuple[str, str], ...]


class GrpcTokenAuth(grpc.AuthMetadataPlugin):
    """Adds an 'authorization' metadata entry to every RPC."""

    def __init__(
        self,
        token_source: TokenSource,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.token_source = token_source
        self._loop = loop

    async def request_metadata(self) -> Metadata:
        tok = await self.token_source.token()
        return (("authorization", tok.header_value()),)

    def __call__(
        self,
        context: grpc.AuthMetadataContext,
        callback: grpc.AuthMetadataPluginCallback,
    ) -> None:
        if self._loop is not None and self._loop.is_running():
            future = asyncio.run_coroutine_threadsafe(
                self.request_metadata(), self._loop
            )
            future.add_done_callback(lambda f: self._finish(f, callback))
            return

        try:
            metadata = asyncio.run(self.request_metadata())
        except Exception as exc:
            logger.warning("Token retrieval for %s failed: %s", context.method_name, exc)
            callback((), exc)
            return
        callback(metadata, None)

    @staticmethod
    def _finish(future: Future, callback: grpc.AuthMetadataPluginCallback) -> None:
        exc = future.exception()
        if exc is not None:
            callback((), exc)
            return
        callback(future.result(), None)

    def call_credentials(self) -> grpc.CallCredentials:
        return grpc.metadata_call_credentials(self, name=type(self).__name__)


async def grpc_application_default(
    settings: Settings,
    env: Optional[ProbeEnvironment] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> GrpcTokenAuth:
    """Per-call credentials from the Application Default Credentials for settings.scope."""
    source = await default_token_source(settings.scope, env)
    return GrpcTokenAuth(source, loop=loop)


async def grpc_jwt(
    audience: str,
    env: Optional[ProbeEnvironment] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> GrpcTokenAuth:
    """Per-call self-signed JWT credentials for `audience` from the default service account file."""
    creds = await find_default_credentials(Settings(), env)
    return GrpcTokenAuth(jwt_source_from_json(creds.json_data, audience), loop=loop)
