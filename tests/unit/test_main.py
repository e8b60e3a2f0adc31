"""
Unit tests for the light_controller entrypoint.

Tests option precedence (CLI > environment > default) and startup
failure handling.
"""

import pytest

from light_controller.__main__ import (
    get_blink_interval,
    get_config_path,
    get_gpio_root,
    get_info_dir,
    main,
    parse_args,
)


class TestOptions:
    """Test suite for option resolution."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        for name in ("LIGHT_CONFIG", "LIGHT_INFO_DIR", "LIGHT_GPIO_ROOT", "LIGHT_BLINK_INTERVAL"):
            monkeypatch.delenv(name, raising=False)
        args = parse_args([])

        assert get_config_path(args) == "jobsJenkinsConfig.xml"
        assert get_info_dir(args) == "infoFiles"
        assert get_gpio_root(args) == "/sys/class/gpio"
        assert get_blink_interval(args) == 1.0
        assert not args.real_led
        assert not args.no_animation

    def test_environment(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("LIGHT_CONFIG", "/etc/light.xml")
        monkeypatch.setenv("LIGHT_INFO_DIR", "/var/lib/light")
        monkeypatch.setenv("LIGHT_GPIO_ROOT", "/tmp/gpio")
        monkeypatch.setenv("LIGHT_BLINK_INTERVAL", "0.5")
        args = parse_args([])

        assert get_config_path(args) == "/etc/light.xml"
        assert get_info_dir(args) == "/var/lib/light"
        assert get_gpio_root(args) == "/tmp/gpio"
        assert get_blink_interval(args) == 0.5

    def test_cli_overrides_environment(self, monkeypatch):
        """Test that command-line arguments win."""
        monkeypatch.setenv("LIGHT_CONFIG", "/etc/light.xml")
        monkeypatch.setenv("LIGHT_BLINK_INTERVAL", "0.5")
        args = parse_args(["-f", "jobs.xml", "--blink-interval", "2", "-r", "-v"])

        assert get_config_path(args) == "jobs.xml"
        assert get_blink_interval(args) == 2.0
        assert args.real_led
        assert args.verbose

    @pytest.mark.parametrize("value", ["0", "-1", "fast"])
    def test_invalid_blink_interval_env(self, monkeypatch, value):
        """Test that invalid environment values fall back to the default."""
        monkeypatch.setenv("LIGHT_BLINK_INTERVAL", value)
        assert get_blink_interval(parse_args([])) == 1.0

    def test_invalid_blink_interval_arg(self):
        """Test that a non-positive CLI interval falls back to the default."""
        assert get_blink_interval(parse_args(["--blink-interval", "0"])) == 1.0


class TestMain:
    """Test suite for main."""

    def test_missing_config_exits_with_error(self, tmp_path):
        """Test that configuration failures are fatal at startup."""
        code = main(["-f", str(tmp_path / "missing.xml"), "--info-dir", str(tmp_path)])
        assert code == 1

    def test_invalid_config_exits_with_error(self, tmp_path):
        """Test that an invalid file stops the process before any loop runs."""
        path = tmp_path / "jobs.xml"
        path.write_text("<groups></groups>")
        assert main(["-f", str(path), "--info-dir", str(tmp_path)]) == 1
