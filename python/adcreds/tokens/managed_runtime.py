"""
adcreds/tokens/managed_runtime.py

Identity supplied by a managed application-hosting runtime (App Engine
standard). The runtime's hooks are injected as a ManagedRuntime value; when
the process is not hosted there, no value exists and the probe declines.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, List, Tuple

from adcreds.models.token import Token

AppIDFunc = Callable[[], str]
AccessTokenFunc = Callable[[List[str]], Awaitable[Tuple[str, datetime]]]


@dataclass(frozen=True)
class ManagedRuntime:
    """
    Hooks exposed by the hosting runtime.

    Attributes:
        app_id: Returns the application id, used as the project id.
        access_token: Given scopes, returns (token, expiry).
        flexible: True on the flexible environment, where the runtime hooks
            are not usable and the metadata server is used instead.
    """

    app_id: AppIDFunc
    access_token: AccessTokenFunc
    flexible: bool = False


class AppEngineTokenSource:
    """Access tokens minted by the managed runtime for a scope string."""

    def __init__(self, runtime: ManagedRuntime, scope: str) -> None:
        self._runtime = runtime
        self._scopes = [s for s in scope.split(" ") if s]

    async def token(self) -> Token:
        access_token, expiry = await self._runtime.access_token(self._scopes)
        return Token(access_token=access_token, expiry=expiry)
