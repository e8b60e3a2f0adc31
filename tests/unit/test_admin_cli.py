"""
Unit tests for the light-admin CLI.

Commands run through click's CliRunner against a temporary configuration;
the HTTP fetch is patched out.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import requests
from click.testing import CliRunner

from light_admin.cli import cli
from light_controller.fetcher import StatusFetcher

CONFIG = """
<groups>
  <group>
    <groupname>backend</groupname>
    <server>http://jenkins.local:8080</server>
    <username>monitor</username>
    <password>secret</password>
    <red_led>17</red_led>
    <green_led>27</green_led>
    <blue_led>22</blue_led>
    <display_timeout>300</display_timeout>
    <last_build_threshold>4000000000</last_build_threshold>
    <jobs>
      <job><jobpath>/job/</jobpath><jobname>api-tests</jobname></job>
    </jobs>
  </group>
</groups>
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def base_args(tmp_path):
    """Configuration and info dir options for every command."""
    config = tmp_path / "jobs.xml"
    config.write_text(CONFIG)
    return ["-f", str(config), "--info-dir", str(tmp_path / "info")]


def fake_fetch(color: str):
    """Build a StatusFetcher.fetch replacement writing fixed documents."""

    def fetch(self, should_stop=None):
        for job in self.group.jobs:
            Path(job.status_file).write_text(f'{{"color" : "{color}"}}')
            Path(job.last_build_file).write_text('{"timestamp" : 1000000}')
        return True

    return fetch


class TestConfigShow:
    """Test suite for config show."""

    def test_table_output(self, runner, base_args):
        """Test the human readable configuration listing."""
        result = runner.invoke(cli, base_args + ["config", "show"])

        assert result.exit_code == 0
        assert "Group: backend" in result.output
        assert "http://jenkins.local:8080" in result.output
        assert "17/27/22" in result.output
        assert "/job/api-tests" in result.output
        assert "secret" not in result.output

    def test_json_output(self, runner, base_args):
        """Test the JSON configuration listing masks the password."""
        result = runner.invoke(cli, base_args + ["config", "show", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data[0]["name"] == "backend"
        assert data[0]["password"] == "****"
        assert data[0]["pins"] == {"red": 17, "green": 27, "blue": 22}

    def test_invalid_config(self, runner, tmp_path):
        """Test that a broken configuration exits with code 1."""
        config = tmp_path / "jobs.xml"
        config.write_text("<groups/>")

        result = runner.invoke(cli, ["-f", str(config), "config", "show"])

        assert result.exit_code == 1
        assert "No group in configuration" in result.output


class TestStatus:
    """Test suite for status."""

    def test_success(self, runner, base_args):
        """Test one evaluation cycle of a successful group."""
        with patch.object(StatusFetcher, "fetch", fake_fetch("blue")):
            result = runner.invoke(cli, base_args + ["status", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == [
            {
                "group": "backend",
                "reachable": True,
                "condition": "success",
                "status": {
                    "all_disabled": False,
                    "building": False,
                    "success": True,
                    "stale": False,
                },
                "indicator": {"color": "blue", "animated": False},
            }
        ]

    def test_building(self, runner, base_args):
        """Test the text output for a building group."""
        with patch.object(StatusFetcher, "fetch", fake_fetch("red_anime")):
            result = runner.invoke(cli, base_args + ["status", "--group", "backend"])

        assert result.exit_code == 0
        assert "Condition: building" in result.output
        assert "yellow (blinking)" in result.output

    def test_unreachable(self, runner, base_args):
        """Test that an unreachable server is reported."""
        with patch.object(StatusFetcher, "fetch", return_value=False):
            result = runner.invoke(cli, base_args + ["status"])

        assert result.exit_code == 0
        assert "Build server unreachable" in result.output

    def test_request_error_reported_as_unreachable(self, runner, base_args):
        """Test that a failing HTTP request is reported, not raised."""
        error = requests.exceptions.InvalidSchema("No connection adapters")
        with patch.object(requests.Session, "get", side_effect=error):
            result = runner.invoke(cli, base_args + ["status"])

        assert result.exception is None
        assert result.exit_code == 0
        assert "Build server unreachable" in result.output

    def test_unknown_group(self, runner, base_args):
        """Test that an unknown group name is an error."""
        result = runner.invoke(cli, base_args + ["status", "--group", "frontend"])

        assert result.exit_code == 1
        assert "No group named frontend" in result.output


class TestLedSet:
    """Test suite for led set."""

    def test_dry_run(self, runner, base_args):
        """Test setting a color on the logging backend."""
        result = runner.invoke(cli, base_args + ["led", "set", "backend", "magenta"])

        assert result.exit_code == 0
        assert "backend: magenta (r-g-b: 1-0-1)" in result.output

    def test_real_led(self, runner, base_args, tmp_path):
        """Test setting a color through sysfs."""
        gpio_root = tmp_path / "gpio"
        for pin in (17, 27, 22):
            (gpio_root / f"gpio{pin}").mkdir(parents=True)
            (gpio_root / f"gpio{pin}" / "value").write_text("1")

        result = runner.invoke(
            cli,
            base_args
            + ["led", "set", "backend", "green", "--real-led", "--gpio-root", str(gpio_root)],
        )

        assert result.exit_code == 0
        assert (gpio_root / "gpio27" / "value").read_text() == "0"
        assert (gpio_root / "gpio17" / "value").read_text() == "1"

    def test_invalid_color(self, runner, base_args):
        """Test that unknown colors are rejected by click."""
        result = runner.invoke(cli, base_args + ["led", "set", "backend", "purple"])
        assert result.exit_code == 2
