"""
adcreds.models

Aggregated imports for the data model.
"""

from adcreds.models.credentials import Credentials
from adcreds.models.credentials_file import (
    AuthorizedUserFile,
    CredentialsFile,
    ServiceAccountFile,
    parse_credentials_file,
)
from adcreds.models.settings import MetadataSettings, OAuthFlowHandler, Settings
from adcreds.models.token import Token

__all__ = [
    "Credentials",
    "AuthorizedUserFile",
    "CredentialsFile",
    "ServiceAccountFile",
    "parse_credentials_file",
    "MetadataSettings",
    "OAuthFlowHandler",
    "Settings",
    "Token",
]
