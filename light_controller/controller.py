"""
Per-group monitor loops and the process-wide coordinator.

Each group runs two independent loops:
1. Evaluator: fetch job documents, fold them into a GroupStatus, step the
   lamp state machine and publish the target IndicatorState.
2. Driver: copy out the target state and blink, hold or switch the lamp.

The only value the two loops share is the group's IndicatorCell. Groups
share nothing with each other.
"""

import asyncio
import logging
import time
from collections.abc import Callable

from light_common.indicator import IndicatorOutput
from light_common.models import Group, GroupStatus, IndicatorState, JobSnapshot

from .driver import IndicatorCell, IndicatorDriver
from .evaluator import LedStateMachine, SuccessTimer, evaluate_group_status
from .extractor import extract_snapshot
from .fetcher import StatusFetcher

logger = logging.getLogger(__name__)

DEFAULT_BLINK_INTERVAL = 1.0


def current_timestamp() -> int:
    """Current wall clock time in whole seconds."""
    return int(time.time())


async def wait_or_shutdown(shutdown: asyncio.Event, seconds: float) -> bool:
    """
    Sleep for the given time, waking early on shutdown.

    Returns:
        True if shutdown was requested
    """
    try:
        await asyncio.wait_for(shutdown.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


class GroupMonitor:
    """
    Monitors one group and drives its lamp.

    current, previous and timer are only touched by the evaluator loop;
    the driver loop only reads the indicator cell.
    """

    def __init__(
        self,
        group: Group,
        output: IndicatorOutput,
        fetcher: StatusFetcher | None = None,
        clock: Callable[[], int] = current_timestamp,
        blink_interval: float = DEFAULT_BLINK_INTERVAL,
        allow_animation: bool = True,
    ):
        """
        Initialize the monitor.

        Args:
            group: Configured group
            output: Lamp of the group
            fetcher: Status fetcher (default: one for the group's server)
            clock: Returns the current time in seconds
            blink_interval: Seconds between driver ticks
            allow_animation: When False, animated states are shown steady
        """
        self.group = group
        self.output = output
        self.fetcher = fetcher or StatusFetcher(group)
        self.clock = clock
        self.blink_interval = blink_interval

        self.current = GroupStatus()
        self.previous = GroupStatus()
        self.timer = SuccessTimer()
        self.cell = IndicatorCell()
        self.state_machine = LedStateMachine(group.display_timeout)
        self.driver = IndicatorDriver(self.cell, output, allow_animation)

    @property
    def name(self) -> str:
        return self.group.name

    async def evaluate_once(self) -> IndicatorState:
        """
        Evaluate the group from its current artifacts and publish the result.

        Returns:
            The new target indicator state
        """
        snapshots = await asyncio.to_thread(self._extract_snapshots)
        now = self.clock()

        self.previous = self.current
        self.current = evaluate_group_status(
            snapshots, now, self.group.stale_threshold
        )
        state, self.timer = self.state_machine.step(
            self.current, self.previous, self.timer, now
        )
        await self.cell.set(state)

        logger.debug(f"Group {self.name}: status={self.current} lamp={state}")
        return state

    def _extract_snapshots(self) -> list[JobSnapshot]:
        # Runs in a worker thread; reads the artifact files.
        return [extract_snapshot(job) for job in self.group.jobs]

    async def run_evaluator(self, shutdown: asyncio.Event) -> None:
        """Fetch and evaluate every poll interval until shutdown."""
        logger.info(f"Evaluator for group {self.name} started")
        while not shutdown.is_set():
            try:
                if await self.fetcher.fetch_async(shutdown):
                    if shutdown.is_set():
                        break
                    await self.evaluate_once()
                else:
                    logger.debug(f"Skipping evaluation of group {self.name} this cycle")
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    f"Error evaluating group {self.name}: {e}", exc_info=True
                )

            if await wait_or_shutdown(shutdown, self.group.poll_interval):
                break
        logger.info(f"Evaluator for group {self.name} stopped")

    async def run_driver(self, shutdown: asyncio.Event) -> None:
        """Tick the lamp driver every blink interval until shutdown."""
        logger.info(f"Driver for group {self.name} started")
        try:
            await self.driver.lamp_test()
        except Exception as e:
            logger.error(f"Lamp test failed for group {self.name}: {e}", exc_info=True)

        while not shutdown.is_set():
            try:
                await self.driver.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Error driving lamp of group {self.name}: {e}", exc_info=True)

            if await wait_or_shutdown(shutdown, self.blink_interval):
                break
        logger.info(f"Driver for group {self.name} stopped")

    async def close(self) -> None:
        """Release the lamp output and the HTTP session."""
        self.fetcher.close()
        await self.output.close()


class MonitorController:
    """
    Runs the evaluator and driver loops of all groups.

    stop() sets the shared shutdown event, waits for every loop to return
    and only then releases the groups' resources.
    """

    def __init__(self, monitors: list[GroupMonitor], stop_timeout: float = 5.0):
        """
        Initialize the controller.

        Args:
            monitors: One monitor per configured group
            stop_timeout: Seconds to wait for loops before cancelling them
        """
        self.monitors = monitors
        self.stop_timeout = stop_timeout
        self.shutdown = asyncio.Event()
        self._tasks: list[asyncio.Task] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start two loops per group."""
        if self._running:
            logger.warning("Controller already running")
            return

        self._running = True
        self.shutdown.clear()
        for monitor in self.monitors:
            self._tasks.append(
                asyncio.create_task(
                    monitor.run_evaluator(self.shutdown),
                    name=f"evaluator-{monitor.name}",
                )
            )
            self._tasks.append(
                asyncio.create_task(
                    monitor.run_driver(self.shutdown),
                    name=f"driver-{monitor.name}",
                )
            )
        logger.info(f"Monitor controller started for {len(self.monitors)} groups")

    async def wait(self) -> None:
        """Wait until every loop has returned."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def stop(self) -> None:
        """Signal shutdown, join all loops and release group resources."""
        if not self._running:
            return

        logger.info("Stopping monitor controller...")
        self.shutdown.set()

        if self._tasks:
            _, pending = await asyncio.wait(self._tasks, timeout=self.stop_timeout)
            for task in pending:
                logger.warning(
                    f"Task {task.get_name()} did not stop in time, cancelling"
                )
                task.cancel()
            await self.wait()
        self._tasks.clear()

        for monitor in self.monitors:
            try:
                await monitor.close()
            except Exception as e:
                logger.error(f"Error closing group {monitor.name}: {e}", exc_info=True)

        self._running = False
        logger.info("Monitor controller stopped")
