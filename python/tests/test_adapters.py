"""Tests for the HTTP and gRPC token adapters."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import grpc
import pytest

from adcreds.adapters.grpc import GrpcTokenAuth, grpc_application_default, grpc_jwt
from adcreds.adapters.http import BearerAuth, auth_header
from adcreds.errors import DefaultCredentialsNotFoundError, TokenFetchError
from adcreds.models.settings import Settings
from adcreds.models.token import Token
from adcreds.tokens.base import StaticTokenSource

from conftest import FakeMetadata

WELL_KNOWN = "/home/nobody/.config/gcloud/application_default_credentials.json"


class CountingSource:
    def __init__(self) -> None:
        self.calls = 0

    async def token(self) -> Token:
        self.calls += 1
        return Token(access_token=f"tok{self.calls}")


class FailingSource:
    async def token(self) -> Token:
        raise TokenFetchError("endpoint down", status=500)


class TestHTTPAdapter:
    @pytest.mark.asyncio
    async def test_auth_header(self):
        header = await auth_header(StaticTokenSource(Token(access_token="abc")))

        assert header == {"Authorization": "Bearer abc"}

    @pytest.mark.asyncio
    async def test_every_request_asks_the_source(self):
        """Test that the adapter forwards each call instead of caching."""
        source = CountingSource()
        auth = BearerAuth(source)
        session = MagicMock()
        session.request = AsyncMock(return_value="response")

        await auth.request(session, "GET", "https://api/", headers={"X-Trace": "1"})
        result = await auth.request(session, "POST", "https://api/", json={})

        assert result == "response"
        assert source.calls == 2
        first = session.request.await_args_list[0]
        second = session.request.await_args_list[1]
        assert first.kwargs["headers"] == {"X-Trace": "1", "Authorization": "Bearer tok1"}
        assert second.args == ("POST", "https://api/")
        assert second.kwargs["headers"] == {"Authorization": "Bearer tok2"}
        assert second.kwargs["json"] == {}


class TestGrpcTokenAuth:
    def test_is_metadata_plugin(self):
        plugin = GrpcTokenAuth(StaticTokenSource(Token(access_token="t")))

        assert isinstance(plugin, grpc.AuthMetadataPlugin)
        assert isinstance(plugin.call_credentials(), grpc.CallCredentials)

    def test_metadata_without_loop(self):
        plugin = GrpcTokenAuth(StaticTokenSource(Token(access_token="t")))
        callback = MagicMock()

        plugin(MagicMock(method_name="Get"), callback)

        callback.assert_called_once_with((("authorization", "Bearer t"),), None)

    def test_error_is_reported_to_callback(self):
        plugin = GrpcTokenAuth(FailingSource())
        callback = MagicMock()

        plugin(MagicMock(method_name="Get"), callback)

        metadata, error = callback.call_args.args
        assert metadata == ()
        assert isinstance(error, TokenFetchError)

    @pytest.mark.asyncio
    async def test_metadata_on_owning_loop(self):
        """Test that a plugin bound to a loop fetches the token on that loop."""
        loop = asyncio.get_running_loop()
        plugin = GrpcTokenAuth(StaticTokenSource(Token(access_token="t")), loop=loop)
        done = asyncio.Event()
        results = []

        def callback(metadata, error):
            results.append((metadata, error))
            loop.call_soon_threadsafe(done.set)

        await asyncio.to_thread(plugin, MagicMock(method_name="Get"), callback)
        await asyncio.wait_for(done.wait(), timeout=5)

        assert results == [((("authorization", "Bearer t"),), None)]


class TestGrpcEntryPoints:
    @pytest.mark.asyncio
    async def test_application_default(self, authorized_user_json, make_env):
        env = make_env(files={WELL_KNOWN: authorized_user_json.encode("utf-8")})

        plugin = await grpc_application_default(Settings(scope="s"), env)

        assert isinstance(plugin, GrpcTokenAuth)

    @pytest.mark.asyncio
    async def test_application_default_not_found(self, make_env):
        with pytest.raises(DefaultCredentialsNotFoundError):
            await grpc_application_default(Settings(scope="s"), make_env())

    @pytest.mark.asyncio
    async def test_jwt(self, service_account_json, make_env):
        env = make_env(files={WELL_KNOWN: service_account_json.encode("utf-8")})

        plugin = await grpc_jwt("https://svc/", env)
        metadata = await plugin.request_metadata()

        assert metadata[0][0] == "authorization"
        assert metadata[0][1].startswith("Bearer ")

    @pytest.mark.asyncio
    async def test_jwt_not_found(self, make_env):
        with pytest.raises(DefaultCredentialsNotFoundError):
            await grpc_jwt("aud", make_env(metadata=FakeMetadata(on_platform=False)))
