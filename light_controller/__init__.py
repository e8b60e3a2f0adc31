"""
Light Controller module.

This module contains the status extractor, group evaluator, lamp state
machine and lamp driver, plus the per-group monitor loops that tie them
together. The controller runs as a long-lived process, one evaluator loop
and one driver loop per configured group.
"""

from .config import ConfigError, load_config, parse_config
from .controller import GroupMonitor, MonitorController
from .driver import IndicatorCell, IndicatorDriver
from .evaluator import LedStateMachine, SuccessTimer, classify, evaluate_group_status
from .extractor import extract_snapshot
from .fetcher import StatusFetcher

__all__ = [
    "ConfigError",
    "GroupMonitor",
    "IndicatorCell",
    "IndicatorDriver",
    "LedStateMachine",
    "MonitorController",
    "StatusFetcher",
    "SuccessTimer",
    "classify",
    "evaluate_group_status",
    "extract_snapshot",
    "load_config",
    "parse_config",
]
