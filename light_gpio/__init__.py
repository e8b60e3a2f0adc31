"""
Light GPIO module.

This module contains lamp output implementations. Currently supports
Linux sysfs GPIO lines and a logging backend for running without hardware.

The gpio layer depends on light_common for the IndicatorOutput interface
and can be used by both light_controller and light_admin.
"""

from .factory import create_output
from .logging_output import LoggingOutput
from .sysfs_output import SysfsGpioOutput

__all__ = ["LoggingOutput", "SysfsGpioOutput", "create_output"]
