"""
CLI Test Suite

Coverage:
  - setup / governance / members scenarios
  - show-config resolution
  - configuration errors surfaced as click errors
"""

import json
import os
import sys

import pytest
from click.testing import CliRunner

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from gatedao import __version__
from gatedao.automation import DEFAULT_MEMBERS
from gatedao.cli import cli

CONFIG_TOML = """
[node]
log_level = "WARNING"

[governance]
voting_period = 3600
quorum_percentage = 30
"""

NEW_MEMBER = "0x" + "ab" * 20


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for key in ("GATEDAO_CONFIG", "GATEDAO_LOG_LEVEL", "GATEDAO_VOTING_PERIOD",
                "GATEDAO_QUORUM_PERCENTAGE", "GATEDAO_MAX_SUPPLY"):
        monkeypatch.delenv(key, raising=False)
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return str(path)


def invoke(config_file, *args):
    return CliRunner().invoke(cli, ["--config", config_file, *args])


class TestCLI:

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_show_config(self, config_file):
        result = invoke(config_file, "show-config")
        assert result.exit_code == 0, result.output
        config = json.loads(result.output)
        assert config["governance"]["voting_period"] == 3600
        assert config["node"]["log_level"] == "WARNING"

    def test_setup(self, config_file, tmp_path):
        output = tmp_path / "deployment.json"
        result = invoke(config_file, "setup")
        assert result.exit_code == 0, result.output
        members = json.loads(result.output)
        assert [m["address"] for m in members] == [m.address for m in DEFAULT_MEMBERS]
        assert all(m["votingWeight"] == 1 for m in members)

        result = invoke(config_file, "setup", "--output", str(output))
        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text())["membership"]["totalSupply"] == 3

    def test_governance_cycle(self, config_file):
        result = invoke(config_file, "governance", "--title", "Fund docs")
        assert result.exit_code == 0, result.output
        proposal = json.loads(result.output)
        assert proposal["title"] == "Fund docs"
        assert proposal["state"] == "Executed"
        assert proposal["endTime"] - proposal["startTime"] == 3600

    def test_governance_against(self, config_file):
        result = invoke(config_file, "governance", "--against")
        assert result.exit_code == 0, result.output
        proposal = json.loads(result.output)
        assert proposal["state"] == "Defeated"
        assert proposal["executed"] is False

    def test_members(self, config_file):
        result = invoke(config_file, "members", "--address", NEW_MEMBER,
                        "--role", "VOTER_ROLE", "--role", "PROPOSER_ROLE")
        assert result.exit_code == 0, result.output
        members = json.loads(result.output)
        assert members[-1] == {
            "address": NEW_MEMBER,
            "nftBalance": 1,
            "votingWeight": 1,
            "roles": ["VOTER_ROLE", "PROPOSER_ROLE"],
        }

    def test_members_unknown_role(self, config_file):
        result = invoke(config_file, "members", "--role", "TREASURER")
        assert result.exit_code != 0
        assert "Unknown role" in result.output

    def test_non_integer_configuration(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[governance]\nvoting_period = \"week\"\n")
        result = CliRunner().invoke(cli, ["--config", str(path), "show-config"])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output
        assert "voting_period" in result.output
        assert not isinstance(result.exception, ValueError)

    def test_invalid_configuration(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[governance]\nquorum_percentage = 101\n")
        result = CliRunner().invoke(cli, ["--config", str(path), "show-config"])
        assert result.exit_code != 0
        assert "Invalid configuration" in result.output
