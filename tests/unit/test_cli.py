"""
Tests for the ai-matching command line interface.
"""

import pytest
from typer.testing import CliRunner

import ai_matching.data.repositories as repositories
from ai_matching.cli import app
from ai_matching.data.models import ScoringConfig

runner = CliRunner()


@pytest.fixture
def config_repository(monkeypatch, fake_config_repository):
    monkeypatch.setattr(repositories, "ScoringConfigRepository", lambda db_manager: fake_config_repository)
    return fake_config_repository


class TestInfoCommands:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "Chat Model" in result.output


class TestConfigCommands:
    def test_show_defaults(self, config_repository):
        result = runner.invoke(app, ["config-show", "org-1"])
        assert result.exit_code == 0
        assert "no (defaults)" in result.output
        assert config_repository.save_calls == 0

    def test_set_weights_and_disable(self, config_repository):
        result = runner.invoke(app, ["config-set", "org-1", "--skill", "50", "--disabled"])

        assert result.exit_code == 0
        stored = config_repository.configs["org-1"]
        assert stored.enabled is False
        assert stored.weights.skill == 50
        assert stored.weights.experience == 30

    def test_invalid_weights_exit_with_error(self, config_repository):
        config_repository.configs["org-1"] = ScoringConfig(organization_id="org-1")

        result = runner.invoke(
            app,
            ["config-set", "org-1", "--skill", "0", "--experience", "0", "--semantic", "0"],
        )

        assert result.exit_code == 1
        assert "Error" in result.output
