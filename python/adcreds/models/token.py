"""
adcreds/models/token.py

Provides the Token pydantic model returned by every token source.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

# Tokens this close to expiry are treated as already expired.
EXPIRY_DELTA = timedelta(seconds=10)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Token(BaseModel):
    """An OAuth2-style access token.

    Attributes:
        access_token: The bearer credential itself.
        token_type: Authorization scheme, "Bearer" unless the issuer says otherwise.
        expiry: When the token stops being accepted, or None if it never expires.
        refresh_token: Present only for user tokens obtained via consent.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "Bearer"
    expiry: Optional[datetime] = None
    refresh_token: str = ""

    @field_validator("expiry")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Naive expiry times are taken to be UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_expires_in(
        cls,
        access_token: str,
        expires_in: Optional[int],
        token_type: str = "Bearer",
        refresh_token: str = "",
    ) -> Token:
        """Build a Token from the relative 'expires_in' seconds a token endpoint returns."""
        expiry = None
        if expires_in:
            expiry = utcnow() + timedelta(seconds=expires_in)
        return cls(
            access_token=access_token,
            token_type=token_type or "Bearer",
            expiry=expiry,
            refresh_token=refresh_token,
        )

    def expired(self, now: Optional[datetime] = None) -> bool:
        if self.expiry is None:
            return False
        return self.expiry - EXPIRY_DELTA <= (now or utcnow())

    @property
    def valid(self) -> bool:
        return bool(self.access_token) and not self.expired()

    def header_value(self) -> str:
        """Value for an HTTP Authorization header, e.g. 'Bearer ya29...'."""
        return f"{self.token_type} {self.access_token}"
