"""
Standalone entrypoint for running the build light controller.

Loads the group configuration, then runs one evaluator loop and one lamp
driver loop per group until SIGINT or SIGTERM.

Usage:
    python -m light_controller [OPTIONS]
    light-controller [OPTIONS]  (after pip install)

Environment Variables:
    LIGHT_CONFIG: XML configuration file (default: jobsJenkinsConfig.xml)
    LIGHT_INFO_DIR: Directory for fetched job documents (default: infoFiles)
    LIGHT_GPIO_ROOT: sysfs GPIO directory (default: /sys/class/gpio)
    LIGHT_BLINK_INTERVAL: Seconds between lamp driver ticks (default: 1.0)
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from typing import Any

from light_controller.config import ConfigError, load_config
from light_controller.controller import (
    DEFAULT_BLINK_INTERVAL,
    GroupMonitor,
    MonitorController,
)
from light_gpio.factory import create_output
from light_gpio.sysfs_output import DEFAULT_GPIO_ROOT

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Build light - show build server job health on RGB lamps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  LIGHT_CONFIG            XML configuration file (default: jobsJenkinsConfig.xml)
  LIGHT_INFO_DIR          Directory for fetched job documents (default: infoFiles)
  LIGHT_GPIO_ROOT         sysfs GPIO directory (default: /sys/class/gpio)
  LIGHT_BLINK_INTERVAL    Seconds between lamp driver ticks (default: 1.0)

Note: Command-line arguments override environment variables.

Examples:
  # Dry run, lamp writes are logged
  light-controller -f jobs.xml

  # Drive the real lamps, no blinking
  light-controller -f jobs.xml --real-led --no-animation

  # Enable debug logging
  light-controller -f jobs.xml -v
        """,
    )

    parser.add_argument(
        "-f",
        "--config",
        type=str,
        default=None,
        help="XML configuration file (default: LIGHT_CONFIG env or jobsJenkinsConfig.xml)",
    )

    parser.add_argument(
        "--info-dir",
        type=str,
        default=None,
        help="Directory for fetched job documents (default: LIGHT_INFO_DIR env or infoFiles)",
    )

    parser.add_argument(
        "-r",
        "--real-led",
        action="store_true",
        help="Drive sysfs GPIO lines instead of logging lamp writes",
    )

    parser.add_argument(
        "--gpio-root",
        type=str,
        default=None,
        help="sysfs GPIO directory (default: LIGHT_GPIO_ROOT env or /sys/class/gpio)",
    )

    parser.add_argument(
        "--no-animation",
        action="store_true",
        help="Show building and failing states steady instead of blinking",
    )

    parser.add_argument(
        "--blink-interval",
        type=float,
        default=None,
        help="Seconds between lamp driver ticks (default: LIGHT_BLINK_INTERVAL env or 1.0)",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Shortcut for --log-level DEBUG",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def get_config_path(args: argparse.Namespace) -> str:
    """Get the configuration file from CLI args or environment or use default."""
    if args.config:
        return args.config
    return os.environ.get("LIGHT_CONFIG", "jobsJenkinsConfig.xml")


def get_info_dir(args: argparse.Namespace) -> str:
    """Get the job document directory from CLI args or environment or use default."""
    if args.info_dir:
        return args.info_dir
    return os.environ.get("LIGHT_INFO_DIR", "infoFiles")


def get_gpio_root(args: argparse.Namespace) -> str:
    """Get the sysfs GPIO directory from CLI args or environment or use default."""
    if args.gpio_root:
        return args.gpio_root
    return os.environ.get("LIGHT_GPIO_ROOT", DEFAULT_GPIO_ROOT)


def get_blink_interval(args: argparse.Namespace) -> float:
    """
    Get the lamp driver interval from CLI args or environment.

    Args:
        args: Parsed command-line arguments

    Returns:
        Seconds between driver ticks
    """
    if args.blink_interval is not None:
        if args.blink_interval <= 0:
            logger.warning(
                f"Invalid blink interval={args.blink_interval}, "
                f"using default {DEFAULT_BLINK_INTERVAL}"
            )
            return DEFAULT_BLINK_INTERVAL
        return args.blink_interval

    try:
        interval = float(
            os.environ.get("LIGHT_BLINK_INTERVAL", str(DEFAULT_BLINK_INTERVAL))
        )
        if interval <= 0:
            logger.warning(
                f"Invalid LIGHT_BLINK_INTERVAL={interval}, "
                f"using default {DEFAULT_BLINK_INTERVAL}"
            )
            return DEFAULT_BLINK_INTERVAL
        return interval
    except ValueError:
        logger.warning(
            f"Invalid LIGHT_BLINK_INTERVAL={os.environ.get('LIGHT_BLINK_INTERVAL')}, "
            f"using default {DEFAULT_BLINK_INTERVAL}"
        )
        return DEFAULT_BLINK_INTERVAL


def build_monitors(args: argparse.Namespace) -> list[GroupMonitor]:
    """
    Load the configuration and create one monitor per group.

    Raises:
        ConfigError: If the configuration is invalid
    """
    config_path = get_config_path(args)
    info_dir = get_info_dir(args)
    gpio_root = get_gpio_root(args)
    blink_interval = get_blink_interval(args)

    logger.info("Starting build light controller")
    logger.info(f"  Config file: {config_path}")
    logger.info(f"  Info directory: {info_dir}")
    logger.info(f"  Lamp output: {'sysfs ' + gpio_root if args.real_led else 'log'}")
    logger.info(f"  Blink interval: {blink_interval}s")
    logger.info(f"  Animation: {'off' if args.no_animation else 'on'}")

    groups = load_config(config_path, info_dir)
    return [
        GroupMonitor(
            group,
            create_output(group, real_led=args.real_led, gpio_root=gpio_root),
            blink_interval=blink_interval,
            allow_animation=not args.no_animation,
        )
        for group in groups
    ]


async def run_controller(args: argparse.Namespace) -> None:
    """
    Initialize and run the monitor controller.

    Args:
        args: Parsed command-line arguments

    Runs until interrupted by SIGINT or SIGTERM.
    """
    monitors = build_monitors(args)
    for monitor in monitors:
        logger.info(
            f"  Group {monitor.name}: {len(monitor.group.jobs)} jobs on "
            f"{monitor.group.server.url}, pins {monitor.group.pins}"
        )

    controller = MonitorController(monitors)

    loop = asyncio.get_running_loop()

    def signal_handler(sig: Any, _frame: Any) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {sig}, initiating graceful shutdown...")
        loop.call_soon_threadsafe(controller.shutdown.set)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        await controller.start()
        logger.info("Controller started successfully")

        await controller.shutdown.wait()

    except Exception as e:
        logger.error(f"Controller error: {e}", exc_info=True)
        raise
    finally:
        await controller.stop()
        logger.info("Controller stopped cleanly")


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for the controller.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run_controller(args))
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
