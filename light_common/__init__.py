"""
Light Common module.

This module contains shared domain models and interfaces used across
the build light components (controller, gpio backends, admin CLI).

The common module has no dependencies on other light_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .indicator import IndicatorOutput
from .models import (
    INDICATOR_OFF,
    ZERO_SNAPSHOT,
    Color,
    Group,
    GroupStatus,
    IndicatorState,
    Job,
    JobSnapshot,
    ServerInfo,
)

__all__ = [
    "INDICATOR_OFF",
    "ZERO_SNAPSHOT",
    "Color",
    "Group",
    "GroupStatus",
    "IndicatorOutput",
    "IndicatorState",
    "Job",
    "JobSnapshot",
    "ServerInfo",
]
