"""
Sysfs implementation of the lamp output.

Writes the three lines of a lamp through /sys/class/gpio/gpio<N>/value.
The pins are expected to be exported and configured as outputs already
(by the board's boot scripts or the service unit).
"""

import asyncio
import logging
from pathlib import Path

from light_common.indicator import IndicatorOutput

logger = logging.getLogger(__name__)

DEFAULT_GPIO_ROOT = "/sys/class/gpio"


class SysfsGpioOutput(IndicatorOutput):
    """
    Lamp wired to three sysfs GPIO lines.

    With active_low (the default wiring), a lit line is driven to 0.
    """

    def __init__(
        self,
        red_pin: int,
        green_pin: int,
        blue_pin: int,
        root: str | Path = DEFAULT_GPIO_ROOT,
        active_low: bool = True,
    ):
        """
        Initialize the output.

        Args:
            red_pin: GPIO number of the red line
            green_pin: GPIO number of the green line
            blue_pin: GPIO number of the blue line
            root: sysfs GPIO directory
            active_low: True if a line lights up when driven low
        """
        self.pins = (red_pin, green_pin, blue_pin)
        self.root = Path(root)
        self.active_low = active_low

    def value_path(self, pin: int) -> Path:
        """Path of the value file of a pin."""
        return self.root / f"gpio{pin}" / "value"

    def _level(self, lit: bool) -> str:
        return "0" if lit == self.active_low else "1"

    def _write_lines(self, levels: tuple[bool, bool, bool]) -> None:
        for pin, lit in zip(self.pins, levels):
            try:
                self.value_path(pin).write_text(self._level(lit))
            except OSError as e:
                logger.error(f"Cannot set gpio{pin}: {e}")

    async def write(self, red: bool, green: bool, blue: bool) -> None:
        await asyncio.to_thread(self._write_lines, (red, green, blue))
