"""
adcreds.tokens

Token source implementations.
"""

from adcreds.tokens.base import ReuseTokenSource, StaticTokenSource, TokenSource
from adcreds.tokens.jwt import JWTAccessTokenSource, ServiceAccountTokenSource
from adcreds.tokens.managed_runtime import AppEngineTokenSource, ManagedRuntime
from adcreds.tokens.metadata import ComputeTokenSource, MetadataClient
from adcreds.tokens.oauth2 import RefreshTokenSource

__all__ = [
    "ReuseTokenSource",
    "StaticTokenSource",
    "TokenSource",
    "JWTAccessTokenSource",
    "ServiceAccountTokenSource",
    "AppEngineTokenSource",
    "ManagedRuntime",
    "ComputeTokenSource",
    "MetadataClient",
    "RefreshTokenSource",
]
