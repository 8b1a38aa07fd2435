"""Tests for the mvx-agent command line."""

import yaml
from typer.testing import CliRunner

from conftest import ALICE_ADDRESS, ALICE_SECRET
from mvx_agent.cli.app import app

runner = CliRunner()


def _init(tmp_path, *args):
    return runner.invoke(app, ["--dir", str(tmp_path), "init", *args])


class TestInit:
    def test_writes_config(self, tmp_path):
        result = _init(tmp_path, "--network", "testnet", "--user", "u1", "--user", "u2")
        assert result.exit_code == 0, result.output

        data = yaml.safe_load((tmp_path / ".mvx-agent" / "config.yaml").read_text())
        assert data["wallet"]["network"] == "testnet"
        assert data["wallet"]["private_key"] == "${MVX_PRIVATE_KEY}"
        assert data["access"]["allowed_users"] == ["u1", "u2"]
        assert data["llm"]["default_provider"] == "anthropic"

    def test_refuses_to_overwrite(self, tmp_path):
        assert _init(tmp_path).exit_code == 0
        result = _init(tmp_path)
        assert result.exit_code == 1
        assert "--force" in result.output
        assert _init(tmp_path, "--force").exit_code == 0

    def test_openai_provider(self, tmp_path):
        assert _init(tmp_path, "--provider", "openai").exit_code == 0
        data = yaml.safe_load((tmp_path / ".mvx-agent" / "config.yaml").read_text())
        assert data["llm"]["default_provider"] == "openai"
        assert data["llm"]["openai"]["api_key"] == "${OPENAI_API_KEY}"

    def test_unknown_network(self, tmp_path):
        result = _init(tmp_path, "--network", "moonnet")
        assert result.exit_code == 1
        assert not (tmp_path / ".mvx-agent" / "config.yaml").exists()


class TestCommands:
    def test_networks(self):
        result = runner.invoke(app, ["networks"])
        assert result.exit_code == 0
        for name in ("devnet", "testnet", "mainnet"):
            assert name in result.output

    def test_address(self, tmp_path):
        assert _init(tmp_path).exit_code == 0
        result = runner.invoke(
            app,
            ["--dir", str(tmp_path), "address"],
            env={"MVX_PRIVATE_KEY": ALICE_SECRET, "MVX_NETWORK": "devnet"},
        )
        assert result.exit_code == 0, result.output
        assert ALICE_ADDRESS in result.output
        assert ALICE_SECRET not in result.output

    def test_address_without_config(self, tmp_path):
        result = runner.invoke(app, ["--dir", str(tmp_path), "address"])
        assert result.exit_code == 1
        assert "Could not load the wallet" in result.output

    def test_history_empty(self, tmp_path):
        assert _init(tmp_path).exit_code == 0
        result = runner.invoke(
            app,
            ["--dir", str(tmp_path), "history"],
            env={"MVX_PRIVATE_KEY": ALICE_SECRET, "MVX_NETWORK": "devnet"},
        )
        assert result.exit_code == 0, result.output
        assert "No transactions yet" in result.output

    def test_act_rejects_bad_payload(self, tmp_path):
        result = runner.invoke(
            app,
            ["--dir", str(tmp_path), "act", "SEND_TOKEN", "send 1 EGLD", "--user", "u1", "--payload", "[1, 2"],
        )
        assert result.exit_code == 1
        assert "not valid JSON" in result.output
