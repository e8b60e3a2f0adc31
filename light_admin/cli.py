"""
Admin CLI for the build light.

Provides commands to inspect the configuration, run one evaluation cycle
on demand and check lamp wiring.
"""

import asyncio
import json
import os
import sys

import click

from light_common.models import Color, Group
from light_controller.config import ConfigError, load_config
from light_controller.controller import GroupMonitor
from light_controller.evaluator import classify
from light_gpio.factory import create_output
from light_gpio.sysfs_output import DEFAULT_GPIO_ROOT


def run_async(coro):
    """Helper to run async functions in CLI commands."""
    return asyncio.run(coro)


def load_groups(ctx: click.Context) -> list[Group]:
    """Load the configured groups or exit with an error."""
    try:
        return load_config(ctx.obj["config"], ctx.obj["info_dir"])
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def find_group(groups: list[Group], name: str) -> Group:
    """Return the group with the given name or exit with an error."""
    for group in groups:
        if group.name == name:
            return group
    click.echo(f"Error: No group named {name}", err=True)
    sys.exit(1)


@click.group()
@click.option(
    "-f",
    "--config",
    default=lambda: os.environ.get("LIGHT_CONFIG", "jobsJenkinsConfig.xml"),
    show_default="LIGHT_CONFIG or jobsJenkinsConfig.xml",
    help="XML configuration file",
)
@click.option(
    "--info-dir",
    default=lambda: os.environ.get("LIGHT_INFO_DIR", "infoFiles"),
    show_default="LIGHT_INFO_DIR or infoFiles",
    help="Directory for fetched job documents",
)
@click.pass_context
def cli(ctx: click.Context, config: str, info_dir: str):
    """Light Admin - Inspect and check the build light."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["info_dir"] = info_dir


@cli.group()
def config():
    """Inspect the configuration."""
    pass


@cli.group()
def led():
    """Control lamps directly."""
    pass


# ============================================================================
# Config Commands
# ============================================================================


@config.command("show")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, json_output: bool):
    """Show the configured groups and jobs."""
    groups = load_groups(ctx)

    if json_output:
        click.echo(json.dumps([group.to_dict() for group in groups], indent=2))
        return

    for group in groups:
        info = group.to_dict()
        click.echo(f"Group: {group.name}")
        click.echo(f"  Server:          {info['server']}")
        click.echo(f"  User:            {info['username'] or '(none)'}")
        click.echo(
            f"  Pins (r/g/b):    {group.red_pin}/{group.green_pin}/{group.blue_pin}"
        )
        click.echo(f"  Stale after:     {group.stale_threshold}s")
        click.echo(f"  Success shown:   {group.display_timeout}s")
        click.echo(f"  Poll interval:   {group.poll_interval}s")
        click.echo(f"  Fetch timeout:   {group.fetch_timeout}s")
        click.echo(f"  Jobs ({len(group.jobs)}):")
        for job in group.jobs:
            click.echo(f"    - {job.path}{job.name}")


# ============================================================================
# Status Commands
# ============================================================================


@cli.command("status")
@click.option("--group", "group_name", default=None, help="Only check this group")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def status(ctx: click.Context, group_name: str | None, json_output: bool):
    """Fetch and evaluate every group once and show the result."""
    groups = load_groups(ctx)
    if group_name is not None:
        groups = [find_group(groups, group_name)]

    async def evaluate():
        results = []
        for group in groups:
            monitor = GroupMonitor(group, create_output(group))
            try:
                reachable = await monitor.fetcher.fetch_async()
                state = await monitor.evaluate_once() if reachable else None
            finally:
                monitor.fetcher.close()
            results.append(
                {
                    "group": group.name,
                    "reachable": reachable,
                    "condition": classify(monitor.current).value if reachable else None,
                    "status": monitor.current.to_dict() if reachable else None,
                    "indicator": state.to_dict() if state else None,
                }
            )
        return results

    results = run_async(evaluate())

    if json_output:
        click.echo(json.dumps(results, indent=2))
        return

    for result in results:
        click.echo(f"Group: {result['group']}")
        if not result["reachable"]:
            click.echo("  Build server unreachable")
            continue
        flags = [name for name, value in result["status"].items() if value]
        indicator = result["indicator"]
        click.echo(f"  Condition: {result['condition']}")
        click.echo(f"  Flags:     {', '.join(flags) or '(none)'}")
        click.echo(
            f"  Lamp:      {indicator['color']}"
            f"{' (blinking)' if indicator['animated'] else ''}"
        )


# ============================================================================
# LED Commands
# ============================================================================


@led.command("set")
@click.argument("group_name")
@click.argument("color", type=click.Choice([color.value for color in Color]))
@click.option("-r", "--real-led", is_flag=True, help="Drive sysfs GPIO lines")
@click.option(
    "--gpio-root",
    default=lambda: os.environ.get("LIGHT_GPIO_ROOT", DEFAULT_GPIO_ROOT),
    help="sysfs GPIO directory",
)
@click.pass_context
def led_set(
    ctx: click.Context, group_name: str, color: str, real_led: bool, gpio_root: str
):
    """Show COLOR on the lamp of GROUP_NAME."""
    group = find_group(load_groups(ctx), group_name)
    output = create_output(group, real_led=real_led, gpio_root=gpio_root)

    async def write():
        try:
            await output.write_color(Color(color))
        finally:
            await output.close()

    run_async(write())
    red, green, blue = Color(color).rgb
    click.echo(
        f"✓ Group {group.name}: {color} "
        f"(r-g-b: {int(red)}-{int(green)}-{int(blue)})"
    )


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
