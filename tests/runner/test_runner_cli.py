import json

import httpx
from typer.testing import CliRunner

from neuro_runner import cli as cli_module
from neuro_runner import probe as probe_module

runner = CliRunner()


def test_show_config_json_reflects_environment(monkeypatch, tmp_path):
    (tmp_path / "runner.toml").write_text("[server]\nport = 3100\n", encoding="utf-8")
    monkeypatch.setenv("PORT", "3999")

    res = runner.invoke(cli_module.app, ["show-config", "--json-output"])

    assert res.exit_code == 0, res.stdout
    data = json.loads(res.stdout)
    assert data["runtime"]["port"] == 3999
    assert data["file"]["port"] == 3100
    assert data["env_overrides"]["PORT"] == "3999"


def test_init_config_writes_and_refuses_overwrite(tmp_path):
    target = tmp_path / "configs" / "runner.toml"

    res = runner.invoke(cli_module.app, ["init-config", "--path", str(target)])
    assert res.exit_code == 0, res.stdout
    assert "[server]" in target.read_text(encoding="utf-8")

    res = runner.invoke(cli_module.app, ["init-config", "--path", str(target)])
    assert res.exit_code == 1

    res = runner.invoke(
        cli_module.app, ["init-config", "--path", str(target), "--force"]
    )
    assert res.exit_code == 0


def test_ping_reports_version(monkeypatch):
    async def fake_get(self, url):
        return httpx.Response(
            200, json={"version": "0.5.1"}, request=httpx.Request("GET", url)
        )

    monkeypatch.setattr(probe_module.httpx.AsyncClient, "get", fake_get)

    res = runner.invoke(cli_module.app, ["ping"])

    assert res.exit_code == 0, res.stdout
    assert "0.5.1" in res.stdout


def test_ping_fails_when_unreachable(monkeypatch):
    async def fake_get(self, url):
        raise httpx.ConnectError("refused")

    monkeypatch.setattr(probe_module.httpx.AsyncClient, "get", fake_get)

    res = runner.invoke(cli_module.app, ["ping"])

    assert res.exit_code == 1
    assert "unreachable" in res.stdout
