"""Shared fixtures: RSA keys, credential documents and fake platform hooks."""

import json
from typing import Dict, List, Mapping, Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from adcreds.resolver.probes import ProbeEnvironment


class SpyEnviron(Mapping[str, str]):
    """Environment mapping that records every key looked up."""

    def __init__(self, values: Optional[Dict[str, str]] = None) -> None:
        self._values = dict(values or {})
        self.accessed: List[str] = []

    def __getitem__(self, key: str) -> str:
        self.accessed.append(key)
        return self._values[key]

    def __iter__(self):
        self.accessed.append("<iter>")
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)


class FakeFiles:
    """In-memory file reads; missing paths raise FileNotFoundError."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None) -> None:
        self.files = dict(files or {})
        self.reads: List[str] = []

    async def __call__(self, path: str) -> bytes:
        self.reads.append(path)
        if path not in self.files:
            raise FileNotFoundError(path)
        content = self.files[path]
        if isinstance(content, Exception):
            raise content
        return content


class FakeMetadata:
    """Stand-in for the metadata client."""

    def __init__(self, on_platform: bool = False, project: Optional[str] = "", fail_project: bool = False) -> None:
        self._on_platform = on_platform
        self._project = project
        self._fail_project = fail_project
        self.calls: List[str] = []

    async def on_platform(self) -> bool:
        self.calls.append("on_platform")
        return self._on_platform

    async def project_id(self) -> str:
        self.calls.append("project_id")
        if self._fail_project:
            raise RuntimeError("metadata unavailable")
        return self._project or ""

    async def get(self, suffix: str) -> str:
        self.calls.append(suffix)
        return json.dumps({"access_token": "meta-token", "expires_in": 3600})


@pytest.fixture(scope="session")
def rsa_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key) -> str:
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture
def service_account_json(private_key_pem) -> str:
    return json.dumps(
        {
            "type": "service_account",
            "project_id": "p1",
            "private_key_id": "kid-1",
            "private_key": private_key_pem,
            "client_email": "a@b",
            "client_id": "123",
            "token_uri": "https://oauth2.example.com/token",
        }
    )


@pytest.fixture
def authorized_user_json() -> str:
    return json.dumps(
        {
            "type": "authorized_user",
            "client_id": "cid",
            "client_secret": "secret",
            "refresh_token": "rt-1",
            "quota_project_id": "quota-p",
        }
    )


@pytest.fixture
def make_env():
    """Build a ProbeEnvironment from fakes; nothing touches the real process."""

    def _make(
        environ: Optional[Dict[str, str]] = None,
        files: Optional[Dict[str, bytes]] = None,
        system: str = "Linux",
        home: Optional[str] = "/home/nobody",
        managed_runtime=None,
        metadata: Optional[FakeMetadata] = None,
    ) -> ProbeEnvironment:
        return ProbeEnvironment(
            environ=SpyEnviron(environ),
            system=system,
            read_file=FakeFiles(files),
            home_lookup=lambda: home,
            managed_runtime=managed_runtime,
            metadata=metadata or FakeMetadata(),
        )

    return _make
