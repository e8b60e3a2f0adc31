"""Logging lamp output, for running without hardware."""

import logging

from light_common.indicator import IndicatorOutput

logger = logging.getLogger(__name__)


class LoggingOutput(IndicatorOutput):
    """Logs every write instead of switching real lines."""

    def __init__(self, name: str, pins: tuple[int, int, int] = (0, 0, 0)):
        self.name = name
        self.pins = pins
        self.last: tuple[bool, bool, bool] | None = None

    async def write(self, red: bool, green: bool, blue: bool) -> None:
        self.last = (red, green, blue)
        r, g, b = self.pins
        logger.info(
            f"[{self.name}] red-green-blue: {r}-{g}-{b} "
            f"r-g-b: {int(red)}-{int(green)}-{int(blue)}"
        )
