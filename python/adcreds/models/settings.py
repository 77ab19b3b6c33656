"""
adcreds/models/settings.py

Settings passed into every resolution call, plus the process-level
metadata server configuration read from the environment.
"""

from __future__ import annotations

from typing import Awaitable, Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings

# Consent callback: authorization URL -> authorization code (sync or async).
OAuthFlowHandler = Callable[[str], Union[str, Awaitable[str]]]


class Settings(BaseModel):
    """
    Per-call resolution request.

    If credentials_json is non-empty it is parsed directly and nothing on the
    filesystem, in the environment, or on the network is probed.
    """

    model_config = ConfigDict(frozen=True)

    scope: str = ""
    audience: str = ""
    credentials_json: str = ""
    oauth_flow_handler: Optional[OAuthFlowHandler] = None
    state: str = ""

    @property
    def scopes(self) -> List[str]:
        """The scope string split on single spaces, in order."""
        if not self.scope:
            return []
        return self.scope.split(" ")


class MetadataSettings(BaseSettings):
    """
    Pydantic settings for reaching the local metadata server.
    Fields map to environment variables prefixed with `GCE_`, so
    `GCE_METADATA_HOST=127.0.0.1:8080` redirects every metadata request.
    """

    metadata_host: str = ""  # empty => the link-local address below
    metadata_ip: str = "169.254.169.254"
    metadata_timeout_seconds: float = 5.0
    metadata_retries: int = 3
    metadata_retry_delay_seconds: float = 0.5
    product_name_path: str = "/sys/class/dmi/id/product_name"

    class Config:
        env_prefix = "GCE_"

    @property
    def base_url(self) -> str:
        host = self.metadata_host or self.metadata_ip
        return f"http://{host}/computeMetadata/v1/"
