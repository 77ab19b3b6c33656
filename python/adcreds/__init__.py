"""
adcreds

Application Default Credentials: find ambient credentials and turn them into
a token source.
"""

from adcreds.adapters import BearerAuth, GrpcTokenAuth, auth_header
from adcreds.adapters.grpc import grpc_application_default, grpc_jwt
from adcreds.errors import (
    AdcError,
    ConsentError,
    CredentialsParseError,
    CredentialsSourceError,
    DefaultCredentialsNotFoundError,
    TokenFetchError,
)
from adcreds.models import Credentials, MetadataSettings, Settings, Token
from adcreds.resolver import (
    ProbeEnvironment,
    credentials_from_json,
    default_token_source,
    find_credentials,
    find_default_credentials,
    jwt_token_source,
    oauth_json_token_source,
)
from adcreds.tokens import ManagedRuntime, MetadataClient, TokenSource

__all__ = [
    "BearerAuth",
    "GrpcTokenAuth",
    "auth_header",
    "grpc_application_default",
    "grpc_jwt",
    "AdcError",
    "ConsentError",
    "CredentialsParseError",
    "CredentialsSourceError",
    "DefaultCredentialsNotFoundError",
    "TokenFetchError",
    "Credentials",
    "MetadataSettings",
    "Settings",
    "Token",
    "ProbeEnvironment",
    "credentials_from_json",
    "default_token_source",
    "find_credentials",
    "find_default_credentials",
    "jwt_token_source",
    "oauth_json_token_source",
    "ManagedRuntime",
    "MetadataClient",
    "TokenSource",
]
