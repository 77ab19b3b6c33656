"""
adcreds/models/credentials_file.py

Pydantic models for the JSON credential documents found in
GOOGLE_APPLICATION_CREDENTIALS, the gcloud well-known file, or passed in
explicitly. The 'type' field is the discriminator; an unknown or missing type
fails validation instead of falling back to a default kind.
"""

from __future__ import annotations

import json
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from adcreds.errors import CredentialsParseError

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
GOOGLE_AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
OUT_OF_BAND_REDIRECT = "urn:ietf:wg:oauth:2.0:oob"


class ServiceAccountFile(BaseModel):
    """A service account JSON key as downloaded from the console."""

    model_config = ConfigDict(frozen=True)

    type: Literal["service_account"]
    project_id: str = ""
    private_key_id: str = ""
    private_key: str
    client_email: str
    client_id: str = ""
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI
    auth_provider_x509_cert_url: Optional[str] = None
    client_x509_cert_url: Optional[str] = None
    universe_domain: str = Field(
        default="googleapis.com", description="Typically 'googleapis.com'"
    )


class AuthorizedUserFile(BaseModel):
    """User credentials, as written by 'gcloud auth application-default login'.

    The refresh token may be absent, in which case an interactive consent flow
    is needed to obtain one.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["authorized_user"]
    client_id: str
    client_secret: str
    refresh_token: str = ""
    project_id: str = ""
    quota_project_id: str = ""
    auth_uri: str = GOOGLE_AUTH_URI
    token_uri: str = GOOGLE_TOKEN_URI
    redirect_uri: str = OUT_OF_BAND_REDIRECT

    @property
    def effective_project_id(self) -> str:
        return self.project_id or self.quota_project_id


CredentialsFile = Annotated[
    Union[ServiceAccountFile, AuthorizedUserFile], Field(discriminator="type")
]

_credentials_file_adapter: TypeAdapter[
    Union[ServiceAccountFile, AuthorizedUserFile]
] = TypeAdapter(CredentialsFile)


def parse_credentials_file(
    data: Union[bytes, str]
) -> Union[ServiceAccountFile, AuthorizedUserFile]:
    """Decode a raw credentials document into its typed model.

    Args:
        data: The raw JSON document.

    Returns:
        The ServiceAccountFile or AuthorizedUserFile the 'type' field names.

    Raises:
        CredentialsParseError: On malformed JSON, a non-object document, a
            missing or unknown 'type', or missing kind-specific fields.
    """
    try:
        raw = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise CredentialsParseError(f"invalid credentials JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise CredentialsParseError("credentials JSON must be an object")
    if "type" not in raw:
        raise CredentialsParseError("credentials JSON is missing the 'type' field")

    try:
        return _credentials_file_adapter.validate_python(raw)
    except ValidationError as exc:
        raise CredentialsParseError(
            f"invalid credentials of type {raw.get('type')!r}: {exc}"
        ) from exc


__all__ = [
    "ServiceAccountFile",
    "AuthorizedUserFile",
    "CredentialsFile",
    "parse_credentials_file",
    "GOOGLE_TOKEN_URI",
    "GOOGLE_AUTH_URI",
    "OUT_OF_BAND_REDIRECT",
]
