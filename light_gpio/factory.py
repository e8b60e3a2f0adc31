"""Selects the lamp backend for a group."""

from light_common.indicator import IndicatorOutput
from light_common.models import Group

from .logging_output import LoggingOutput
from .sysfs_output import DEFAULT_GPIO_ROOT, SysfsGpioOutput


def create_output(
    group: Group, real_led: bool = False, gpio_root: str = DEFAULT_GPIO_ROOT
) -> IndicatorOutput:
    """
    Create the lamp output of a group.

    Args:
        group: Configured group (provides the pin numbers)
        real_led: Drive sysfs GPIO lines instead of logging
        gpio_root: sysfs GPIO directory

    Returns:
        Output for the group's lamp
    """
    if real_led:
        return SysfsGpioOutput(*group.pins, root=gpio_root)
    return LoggingOutput(group.name, group.pins)
