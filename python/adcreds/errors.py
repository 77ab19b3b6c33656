"""
adcreds/errors.py

Exception hierarchy for credential resolution and token fetching.

Parse errors are configuration problems the user must fix; source errors wrap
any fatal failure of a probe with the identity of the source being tried;
the not-found error is raised only once every probe has declined.
"""

from __future__ import annotations

from typing import Optional


class AdcError(Exception):
    """Base class for all adcreds errors."""


class CredentialsParseError(AdcError, ValueError):
    """A credentials document is malformed, or its 'type' is missing or unknown."""


class CredentialsSourceError(AdcError):
    """A probe failed fatally while reading from a specific source.

    Attributes:
        source (str): What was being tried, e.g. an environment variable name
            or a file path.
    """

    def __init__(self, message: str, source: str) -> None:
        super().__init__(message)
        self.source = source


class DefaultCredentialsNotFoundError(AdcError):
    """Every probe in the resolution chain declined."""


class TokenFetchError(AdcError):
    """A token endpoint or the metadata server returned an unusable response.

    Attributes:
        status (Optional[int]): The HTTP status, if a response was received.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ConsentError(AdcError):
    """The interactive consent handler failed or returned no authorization code."""


__all__ = [
    "AdcError",
    "CredentialsParseError",
    "CredentialsSourceError",
    "DefaultCredentialsNotFoundError",
    "TokenFetchError",
    "ConsentError",
]
