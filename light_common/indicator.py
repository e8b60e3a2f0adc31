"""
Abstract interface for lamp outputs.

This module defines the contract that any lamp backend must follow,
allowing easy swapping between sysfs GPIO, a dry-run logger, or test
doubles.
"""

from abc import ABC, abstractmethod

from .models import Color


class IndicatorOutput(ABC):
    """
    Abstract base class for a three-line (red, green, blue) lamp.

    Implementations write all three lines for every call; callers never
    issue partial updates.
    """

    @abstractmethod
    async def write(self, red: bool, green: bool, blue: bool) -> None:
        """
        Switch the three lines of the lamp.

        Args:
            red: True to light the red line
            green: True to light the green line
            blue: True to light the blue line
        """
        pass

    async def write_color(self, color: Color) -> None:
        """Light the lamp in the given color (Color.NONE switches it off)."""
        await self.write(*color.rgb)

    async def close(self) -> None:
        """Release any resources held by the output."""
        pass
