"""Tests for the adcreds command-line tool."""

import json

import pytest

from adcreds.cli import fetch as cli
from adcreds.utils import http


@pytest.fixture
def sa_file(tmp_path, service_account_json):
    path = tmp_path / "sa.json"
    path.write_text(service_account_json)
    return str(path)


class TestCLI:
    def test_fetch_with_credentials_file(self, sa_file, monkeypatch, capsys):
        async def fake_post_form(url, data, *, session=None):
            return {"access_token": "cli-token", "expires_in": 3600}

        monkeypatch.setattr(http, "post_form", fake_post_form)

        cli.main(["fetch", "--credentials", sa_file, "--scope", "s1", "--scope", "s2"])

        assert capsys.readouterr().out.strip() == "cli-token"

    def test_header(self, sa_file, monkeypatch, capsys):
        async def fake_post_form(url, data, *, session=None):
            return {"access_token": "cli-token"}

        monkeypatch.setattr(http, "post_form", fake_post_form)

        cli.main(["header", "--credentials", sa_file, "--scope", "s"])

        assert capsys.readouterr().out.strip() == "Authorization: Bearer cli-token"

    def test_jwt_fetch(self, sa_file, capsys):
        cli.main(["fetch", "--credentials", sa_file, "--jwt", "--audience", "https://svc/"])

        assert capsys.readouterr().out.strip().count(".") == 2

    def test_jwt_requires_audience(self, sa_file, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["fetch", "--credentials", sa_file, "--jwt"])

        assert excinfo.value.code == 1
        assert "--audience" in capsys.readouterr().err

    def test_info(self, sa_file, capsys):
        cli.main(["info", "--credentials", sa_file])

        info = json.loads(capsys.readouterr().out)
        assert info == {"project_id": "p1", "source": "document"}

    def test_missing_credentials_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            cli.main(["fetch", "--credentials", str(tmp_path / "nope.json")])

        assert "Error reading credentials file" in capsys.readouterr().err

    def test_parse_error_exits(self, tmp_path, capsys):
        bad = tmp_path / "bad.json"
        bad.write_text('{"project_id": "p"}')

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["info", "--credentials", str(bad)])

        assert excinfo.value.code == 1
        assert "type" in capsys.readouterr().err
