"""Unit tests for the planner CLI."""

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from src.cli.main import app
from src.exceptions import DALError
from src.planner.models import HouseSnapshot


@pytest.fixture
def runner():
    """CLI test runner."""
    return CliRunner()


@pytest.fixture
def house(furnished_house):
    with patch("src.cli.main._load_snapshot", AsyncMock(return_value=furnished_house)):
        yield furnished_house


class TestMainApp:
    def test_app_name(self):
        assert app.info.name == "planner"

    def test_all_commands_registered(self, runner):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("serve", "devices", "score", "shopping-list", "gateways", "topology"):
            assert command in result.stdout


class TestDevices:
    def test_list_by_collection_name(self, runner, house):
        result = runner.invoke(app, ["devices", "--category", "gateways"])

        assert result.exit_code == 0
        assert "Zigbee Hub" in result.stdout
        assert "Eve Door" not in result.stdout

    def test_search_by_name(self, runner, house):
        result = runner.invoke(app, ["devices", "--search", "hub"])

        assert result.exit_code == 0
        assert "Zigbee Hub" in result.stdout
        assert "Tuya Switch" not in result.stdout

    def test_unknown_category(self, runner, house):
        result = runner.invoke(app, ["devices", "--category", "toasters"])
        assert result.exit_code != 0

    def test_no_match(self, runner, house):
        result = runner.invoke(app, ["devices", "--tag", "nothing-has-this"])

        assert result.exit_code == 0
        assert "No devices found" in result.stdout

    def test_load_failure(self, runner):
        with patch("src.cli.main._load_snapshot", AsyncMock(side_effect=DALError("db down"))):
            result = runner.invoke(app, ["devices"])

        assert result.exit_code == 1
        assert "db down" in result.stdout


class TestScore:
    def test_score_file(self, runner, tmp_path):
        path = tmp_path / "switch.json"
        path.write_text(
            json.dumps(
                {
                    "category": "switches",
                    "name": "Wall switch",
                    "price_evaluation": "good",
                    "connectivity": "zigbee",
                    "home_assistant_compatibility": 5,
                }
            )
        )

        result = runner.invoke(app, ["score", str(path)])

        assert result.exit_code == 0
        assert "10.0" in result.stdout

    def test_invalid_device(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"category": "sensor", "name": "S", "home_assistant_compatibility": 0}))

        result = runner.invoke(app, ["score", str(path)])

        assert result.exit_code == 1

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(app, ["score", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


class TestPlannerViews:
    def test_shopping_list(self, runner, house):
        result = runner.invoke(app, ["shopping-list"])

        assert result.exit_code == 0
        assert "Lamp switch" in result.stdout
        assert "150.00" in result.stdout

    def test_empty_shopping_list(self, runner):
        with patch("src.cli.main._load_snapshot", AsyncMock(return_value=HouseSnapshot())):
            result = runner.invoke(app, ["shopping-list"])

        assert "Nothing left to buy" in result.stdout

    def test_gateways(self, runner, house):
        result = runner.invoke(app, ["gateways"])

        assert result.exit_code == 0
        assert "Zigbee Hub" in result.stdout
        assert "Eve Door" in result.stdout

    def test_topology(self, runner, house):
        result = runner.invoke(app, ["topology"])

        assert result.exit_code == 0
        assert "Home Assistant" in result.stdout
        assert "Tuya Cloud" in result.stdout
        assert "Not connected: Bedroom" in result.stdout

    def test_topology_offline(self, runner, house):
        result = runner.invoke(app, ["topology", "--offline"])

        assert result.exit_code == 0
        assert "Tuya Cloud" not in result.stdout
