"""
adcreds.resolver

Credential discovery: the well-known location, the document parser, the probe
set and the chain that walks it.
"""

from adcreds.resolver.chain import (
    DEFAULT_CREDENTIALS_URL,
    default_token_source,
    find_credentials,
    find_default_credentials,
    jwt_source_from_json,
    jwt_token_source,
    oauth_json_token_source,
)
from adcreds.resolver.parser import credentials_from_json
from adcreds.resolver.probes import ADC_PROBES, CREDENTIALS_ENV_VAR, ProbeEnvironment
from adcreds.resolver.well_known import guess_unix_home_dir, well_known_file

__all__ = [
    "DEFAULT_CREDENTIALS_URL",
    "default_token_source",
    "find_credentials",
    "find_default_credentials",
    "jwt_source_from_json",
    "jwt_token_source",
    "oauth_json_token_source",
    "credentials_from_json",
    "ADC_PROBES",
    "CREDENTIALS_ENV_VAR",
    "ProbeEnvironment",
    "guess_unix_home_dir",
    "well_known_file",
]
