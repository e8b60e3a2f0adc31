"""
Lamp driver for one group.

The evaluator assigns the group's target IndicatorState into an
IndicatorCell at any time; the driver copies it out on every tick and
decides whether to blink, hold or switch the lamp. The last displayed
state and the blink phase live only inside the driver.
"""

import asyncio
import logging

from light_common.indicator import IndicatorOutput
from light_common.models import INDICATOR_OFF, Color, IndicatorState

logger = logging.getLogger(__name__)


class IndicatorCell:
    """
    Lock-guarded target state shared by a group's evaluator and driver.

    Critical sections are a single assignment or copy; nothing awaits
    while holding the lock.
    """

    def __init__(self, state: IndicatorState = INDICATOR_OFF):
        self._state = state
        self._lock = asyncio.Lock()

    async def get(self) -> IndicatorState:
        """Return the current target state."""
        async with self._lock:
            return self._state

    async def set(self, state: IndicatorState) -> None:
        """Replace the target state."""
        async with self._lock:
            self._state = state


class IndicatorDriver:
    """
    Drives a lamp from an IndicatorCell.

    On each tick:
    - a changed target is shown immediately, in its lit phase;
    - an unchanged animated target toggles between lit and dark;
    - an unchanged steady target issues no write at all.
    """

    def __init__(
        self,
        cell: IndicatorCell,
        output: IndicatorOutput,
        allow_animation: bool = True,
    ):
        """
        Initialize the driver.

        Args:
            cell: Shared target state of the group
            output: Lamp to write to
            allow_animation: When False, animated states are shown steady
        """
        self.cell = cell
        self.output = output
        self.allow_animation = allow_animation

        self._displayed: IndicatorState | None = None
        self._lit = False

    @property
    def displayed(self) -> IndicatorState | None:
        """State currently shown on the lamp, None before the first tick."""
        return self._displayed

    @property
    def lit(self) -> bool:
        """Whether the lamp is in its lit phase."""
        return self._lit

    async def lamp_test(self) -> None:
        """Flash all lines once and switch the lamp off."""
        await self.output.write_color(Color.WHITE)
        await self.output.write_color(Color.NONE)

    async def tick(self) -> None:
        """Run one driver step."""
        target = await self.cell.get()

        if target == self._displayed:
            if target.animated and self.allow_animation:
                self._lit = not self._lit
                await self._show(target.color, self._lit)
            return

        logger.debug(f"Lamp changes from {self._displayed} to {target}")
        self._displayed = target
        self._lit = True
        await self._show(target.color, True)

    async def _show(self, color: Color, lit: bool) -> None:
        if lit:
            await self.output.write_color(color)
        else:
            await self.output.write_color(Color.NONE)
