"""
adcreds/models/credentials.py

The resolved result of a credential lookup.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Credentials(BaseModel):
    """
    Credentials found by the resolution chain.

    Attributes:
        project_id: Project the credentials belong to; empty if unknown.
        token_source: Yields a current access token, refreshing as needed.
        json_data: The raw document that produced these credentials, or b""
            when they came from the metadata server or a managed runtime.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    project_id: str = ""
    token_source: Any
    json_data: bytes = b""
