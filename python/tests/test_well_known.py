"""Tests for the well-known credentials file location."""

import pytest

from adcreds.resolver.well_known import guess_unix_home_dir, well_known_file


class TestWellKnownFile:
    def test_windows_uses_appdata(self):
        path = well_known_file("Windows", {"APPDATA": r"C:\Users\me\AppData\Roaming"}, lambda: None)

        assert path == r"C:\Users\me\AppData\Roaming\gcloud\application_default_credentials.json"

    def test_linux_uses_home(self):
        path = well_known_file("Linux", {"HOME": "/home/me"}, lambda: "/ignored")

        assert path == "/home/me/.config/gcloud/application_default_credentials.json"

    def test_darwin_uses_home(self):
        path = well_known_file("Darwin", {"HOME": "/Users/me"}, lambda: None)

        assert path == "/Users/me/.config/gcloud/application_default_credentials.json"


class TestGuessUnixHomeDir:
    """$HOME first, then the user database, then empty."""

    def test_prefers_home_env(self):
        assert guess_unix_home_dir({"HOME": "/env/home"}, lambda: "/db/home") == "/env/home"

    def test_falls_back_to_lookup(self):
        assert guess_unix_home_dir({}, lambda: "/db/home") == "/db/home"

    def test_empty_home_env_falls_back(self):
        assert guess_unix_home_dir({"HOME": ""}, lambda: "/db/home") == "/db/home"

    @pytest.mark.parametrize("lookup_result", [None, ""])
    def test_empty_when_both_fail(self, lookup_result):
        assert guess_unix_home_dir({}, lambda: lookup_result) == ""

    def test_lookup_error_yields_empty(self):
        def broken():
            raise KeyError("uid not found")

        assert guess_unix_home_dir({}, broken) == ""

    def test_empty_home_gives_relative_path(self):
        path = well_known_file("Linux", {}, lambda: None)

        assert path == ".config/gcloud/application_default_credentials.json"
