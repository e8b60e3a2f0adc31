"""
Unit tests for the light_gpio lamp outputs.

The sysfs backend is pointed at a temporary directory laid out like
/sys/class/gpio.
"""

import logging

import pytest

from light_common.models import Color, Group, ServerInfo
from light_gpio import LoggingOutput, SysfsGpioOutput, create_output


@pytest.fixture
def gpio_root(tmp_path):
    """Create gpio17/gpio27/gpio22 value files."""
    for pin in (17, 27, 22):
        (tmp_path / f"gpio{pin}").mkdir()
        (tmp_path / f"gpio{pin}" / "value").write_text("1")
    return tmp_path


def read_levels(root) -> tuple[str, str, str]:
    return tuple((root / f"gpio{pin}" / "value").read_text() for pin in (17, 27, 22))


class TestSysfsGpioOutput:
    """Test suite for SysfsGpioOutput."""

    @pytest.mark.asyncio
    async def test_active_low_levels(self, gpio_root):
        """Test that lit lines are driven low by default."""
        output = SysfsGpioOutput(17, 27, 22, root=gpio_root)

        await output.write_color(Color.YELLOW)

        assert read_levels(gpio_root) == ("0", "0", "1")

    @pytest.mark.asyncio
    async def test_active_high_levels(self, gpio_root):
        """Test active high wiring."""
        output = SysfsGpioOutput(17, 27, 22, root=gpio_root, active_low=False)

        await output.write(False, False, True)

        assert read_levels(gpio_root) == ("0", "0", "1")

    @pytest.mark.asyncio
    async def test_off_switches_all_lines(self, gpio_root):
        """Test that Color.NONE switches every line off."""
        output = SysfsGpioOutput(17, 27, 22, root=gpio_root)
        await output.write_color(Color.WHITE)
        await output.write_color(Color.NONE)

        assert read_levels(gpio_root) == ("1", "1", "1")

    @pytest.mark.asyncio
    async def test_missing_pin_is_logged(self, gpio_root, caplog):
        """Test that a missing line is logged and the others are still set."""
        output = SysfsGpioOutput(17, 99, 22, root=gpio_root)

        with caplog.at_level(logging.ERROR):
            await output.write(True, True, True)

        assert "gpio99" in caplog.text
        assert (gpio_root / "gpio17" / "value").read_text() == "0"
        assert (gpio_root / "gpio22" / "value").read_text() == "0"


class TestLoggingOutput:
    """Test suite for LoggingOutput."""

    @pytest.mark.asyncio
    async def test_logs_write(self, caplog):
        """Test that writes are logged with pins and levels."""
        output = LoggingOutput("team", (17, 27, 22))

        with caplog.at_level(logging.INFO):
            await output.write_color(Color.CYAN)

        assert output.last == (False, True, True)
        assert "[team] red-green-blue: 17-27-22 r-g-b: 0-1-1" in caplog.text


class TestCreateOutput:
    """Test suite for create_output."""

    @pytest.fixture
    def group(self):
        return Group("team", ServerInfo("http://jenkins"), 17, 27, 22, 60, 5)

    def test_logging_by_default(self, group):
        """Test that the dry-run backend is the default."""
        output = create_output(group)
        assert isinstance(output, LoggingOutput)
        assert output.pins == (17, 27, 22)

    def test_real_led(self, group, tmp_path):
        """Test that real_led selects sysfs with the group's pins."""
        output = create_output(group, real_led=True, gpio_root=str(tmp_path))
        assert isinstance(output, SysfsGpioOutput)
        assert output.pins == (17, 27, 22)
        assert output.value_path(27) == tmp_path / "gpio27" / "value"
