"""
adcreds/resolver/probes.py

The ordered set of probes walked by the resolution chain. Each probe either
returns Credentials, returns None to decline, or raises to abort the chain.

All process and platform access goes through a ProbeEnvironment so tests can
substitute every hook: environment variables, the platform name, file reads,
the home-directory lookup, the managed runtime and the metadata client.
"""

from __future__ import annotations

import asyncio
import logging
import os
import platform
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Mapping, Optional, Tuple

import aiofiles
import aiohttp

from adcreds.errors import AdcError, CredentialsSourceError
from adcreds.models.credentials import Credentials
from adcreds.models.settings import Settings
from adcreds.resolver.parser import credentials_from_json
from adcreds.resolver.well_known import HomeLookup, well_known_file
from adcreds.tokens.base import ReuseTokenSource
from adcreds.tokens.managed_runtime import AppEngineTokenSource, ManagedRuntime
from adcreds.tokens.metadata import ComputeTokenSource, MetadataClient, MetadataService

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"

ReadFile = Callable[[str], Awaitable[bytes]]


async def read_file_bytes(path: str) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


def lookup_home_dir() -> Optional[str]:
    """Home directory from the user database (POSIX only)."""
    try:
        import pwd
    except ImportError:
        return None
    return pwd.getpwuid(os.getuid()).pw_dir


@dataclass(frozen=True)
class ProbeEnvironment:
    """Platform hooks the probes are allowed to touch."""

    environ: Mapping[str, str]
    system: str
    read_file: ReadFile = read_file_bytes
    home_lookup: HomeLookup = lookup_home_dir
    managed_runtime: Optional[ManagedRuntime] = None
    metadata: MetadataService = field(default_factory=MetadataClient)

    @classmethod
    def from_process(
        cls, managed_runtime: Optional[ManagedRuntime] = None
    ) -> ProbeEnvironment:
        """The real environment of this process."""
        return cls(
            environ=os.environ,
            system=platform.system(),
            managed_runtime=managed_runtime,
        )


Probe = Callable[[ProbeEnvironment, Settings], Awaitable[Optional[Credentials]]]


async def _read_credentials_file(
    env: ProbeEnvironment, filename: str, settings: Settings
) -> Credentials:
    data = await env.read_file(filename)
    return await credentials_from_json(
        data,
        settings.scopes,
        settings.oauth_flow_handler,
        settings.state,
        audience=settings.audience,
    )


async def probe_env_var(
    env: ProbeEnvironment, settings: Settings
) -> Optional[Credentials]:
    """Credentials file named by GOOGLE_APPLICATION_CREDENTIALS; failures are fatal."""
    filename = env.environ.get(CREDENTIALS_ENV_VAR, "")
    if not filename:
        return None
    try:
        return await _read_credentials_file(env, filename, settings)
    except (OSError, AdcError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise CredentialsSourceError(
            f"google: error getting credentials using {CREDENTIALS_ENV_VAR} "
            f"environment variable: {exc}",
            source=CREDENTIALS_ENV_VAR,
        ) from exc


async def probe_well_known_file(
    env: ProbeEnvironment, settings: Settings
) -> Optional[Credentials]:
    """The gcloud well-known file; declines only when the file does not exist."""
    filename = well_known_file(env.system, env.environ, env.home_lookup)
    try:
        return await _read_credentials_file(env, filename, settings)
    except FileNotFoundError:
        logger.debug("No well-known credentials file at %s", filename)
        return None
    except (OSError, AdcError, aiohttp.ClientError, asyncio.TimeoutError) as exc:
        raise CredentialsSourceError(
            f"google: error getting credentials using well-known file ({filename}): {exc}",
            source=filename,
        ) from exc


async def probe_managed_runtime(
    env: ProbeEnvironment, settings: Settings
) -> Optional[Credentials]:
    """Identity of the managed runtime, when the process is hosted in one."""
    runtime = env.managed_runtime
    if runtime is None or runtime.flexible:
        return None
    return Credentials(
        project_id=runtime.app_id(),
        token_source=ReuseTokenSource(AppEngineTokenSource(runtime, settings.scope)),
    )


async def probe_metadata(
    env: ProbeEnvironment, settings: Settings
) -> Optional[Credentials]:
    """
    Default service account of the instance. A failed project id lookup only
    leaves the project id empty; the token source does not need it.
    """
    if not await env.metadata.on_platform():
        return None
    try:
        project_id = await env.metadata.project_id()
    except Exception as exc:
        logger.warning("Could not look up project id from metadata server: %s", exc)
        project_id = ""
    return Credentials(
        project_id=project_id,
        token_source=ReuseTokenSource(ComputeTokenSource(env.metadata)),
    )


ADC_PROBES: Tuple[Tuple[str, Probe], ...] = (
    ("environment variable", probe_env_var),
    ("well-known file", probe_well_known_file),
    ("managed runtime", probe_managed_runtime),
    ("metadata server", probe_metadata),
)
