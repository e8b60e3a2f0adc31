"""
Group status evaluation and the lamp state machine.

Two pure, synchronous steps run once per poll cycle:

1. evaluate_group_status() folds the job snapshots of a group into a
   GroupStatus.
2. LedStateMachine.step() maps the current and previous GroupStatus plus
   the success timer to the lamp's target IndicatorState.

Neither step does I/O or reads the clock; the caller passes "now" in.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum

from light_common.models import (
    INDICATOR_OFF,
    Color,
    GroupStatus,
    IndicatorState,
    JobSnapshot,
)

logger = logging.getLogger(__name__)


def evaluate_group_status(
    snapshots: Iterable[JobSnapshot], now: int, stale_threshold: int
) -> GroupStatus:
    """
    Fold the snapshots of all jobs of a group into one status.

    Disabled and never-built jobs only count towards all_disabled. Every
    other job must be blue for success; any animated job makes the group
    building; any job whose last build is older than the threshold makes
    the group stale. An empty group is all disabled.

    Args:
        snapshots: Snapshots of the group's jobs, in any order
        now: Current time in seconds since the epoch
        stale_threshold: Maximum age of a last build, in seconds

    Returns:
        The group status for this cycle
    """
    all_disabled = True
    success = True
    building = False
    stale = False

    for snapshot in snapshots:
        if snapshot.color.is_disabled:
            continue
        all_disabled = False
        success = success and snapshot.color == Color.BLUE
        building = building or snapshot.animated
        stale = stale or (now - snapshot.last_build_at) > stale_threshold

    return GroupStatus(
        all_disabled=all_disabled,
        building=building,
        success=success,
        stale=stale,
    )


class Condition(str, Enum):
    """Condition of a group, in the order the lamp rules check them."""

    ALL_DISABLED = "all_disabled"
    BUILDING = "building"
    STALE_SUCCESS = "stale_success"
    SUCCESS = "success"
    FAILURE = "failure"


# First match wins. Building outranks failure, staleness only degrades a
# success.
RULES: tuple[tuple[Condition, Callable[[GroupStatus], bool]], ...] = (
    (Condition.ALL_DISABLED, lambda status: status.all_disabled),
    (Condition.BUILDING, lambda status: status.building),
    (Condition.STALE_SUCCESS, lambda status: status.success and status.stale),
    (Condition.SUCCESS, lambda status: status.success),
    (Condition.FAILURE, lambda status: True),
)

FIXED_STATES: dict[Condition, IndicatorState] = {
    Condition.ALL_DISABLED: INDICATOR_OFF,
    Condition.BUILDING: IndicatorState(Color.YELLOW, animated=True),
    Condition.STALE_SUCCESS: IndicatorState(Color.YELLOW, animated=False),
    Condition.FAILURE: IndicatorState(Color.RED, animated=True),
}

SUCCESS_STATE = IndicatorState(Color.BLUE, animated=False)


def classify(status: GroupStatus) -> Condition:
    """Return the first condition in RULES that matches the status."""
    for condition, matches in RULES:
        if matches(status):
            return condition
    raise AssertionError("RULES must end with a catch-all")


@dataclass(frozen=True)
class SuccessTimer:
    """
    Tracks how long a success has been shown.

    armed is True from a transition into a fully successful status until
    the display timeout expires.
    """

    armed: bool = False
    last_success_at: int = 0


class LedStateMachine:
    """
    Maps group status to the lamp's target state.

    A success is shown once for display_timeout seconds and then switched
    off. It is shown again only after the status went through something
    other than a full success.
    """

    def __init__(self, display_timeout: int):
        """
        Initialize the state machine.

        Args:
            display_timeout: Seconds a success stays shown
        """
        self.display_timeout = display_timeout

    def step(
        self,
        current: GroupStatus,
        previous: GroupStatus,
        timer: SuccessTimer,
        now: int,
    ) -> tuple[IndicatorState, SuccessTimer]:
        """
        Compute the target lamp state for one cycle.

        Args:
            current: Status computed in this cycle
            previous: Status computed in the previous cycle
            timer: Success timer state after the previous cycle
            now: Current time in seconds since the epoch

        Returns:
            Tuple of (target indicator state, updated success timer)
        """
        condition = classify(current)
        if condition != Condition.SUCCESS:
            return FIXED_STATES[condition], timer

        # Only a genuine transition into success (re)arms the timer.
        if not previous.fully_successful:
            logger.debug(f"Success arrived at {now}, showing it")
            return SUCCESS_STATE, SuccessTimer(armed=True, last_success_at=now)

        if not timer.armed:
            return INDICATOR_OFF, timer

        if now - timer.last_success_at > self.display_timeout:
            logger.debug("Success display timeout expired, switching lamp off")
            return INDICATOR_OFF, SuccessTimer(
                armed=False, last_success_at=timer.last_success_at
            )

        return SUCCESS_STATE, timer
