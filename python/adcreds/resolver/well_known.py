"""
adcreds/resolver/well_known.py

Computes where gcloud stores the user's application default credentials.
Both functions are pure: the platform name, environment and home-directory
lookup are passed in, so every platform's layout can be tested anywhere.
"""

from __future__ import annotations

import ntpath
import posixpath
from typing import Callable, Mapping, Optional

WELL_KNOWN_FILE_NAME = "application_default_credentials.json"

HomeLookup = Callable[[], Optional[str]]


def guess_unix_home_dir(environ: Mapping[str, str], home_lookup: HomeLookup) -> str:
    """
    Prefer $HOME, then the user database, then "".

    An empty result yields a relative path that will simply not exist, so the
    well-known probe declines instead of crashing.
    """
    home = environ.get("HOME")
    if home:
        return home
    try:
        looked_up = home_lookup()
    except (KeyError, OSError):
        looked_up = None
    return looked_up or ""


def well_known_file(
    system: str, environ: Mapping[str, str], home_lookup: HomeLookup
) -> str:
    """
    Return the platform-specific path of the well-known credentials file.

    Args:
        system: Platform name as reported by platform.system(), e.g. "Windows".
        environ: Environment variables to consult.
        home_lookup: Returns the current user's home directory, or None.
    """
    if system == "Windows":
        return ntpath.join(environ.get("APPDATA", ""), "gcloud", WELL_KNOWN_FILE_NAME)
    return posixpath.join(
        guess_unix_home_dir(environ, home_lookup),
        ".config",
        "gcloud",
        WELL_KNOWN_FILE_NAME,
    )
