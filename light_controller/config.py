"""
Configuration loading for the build light.

Groups and jobs are described in an XML file:

    <groups>
      <group>
        <groupname>backend</groupname>
        <server>http://jenkins.local:8080</server>
        <username>monitor</username>
        <password>secret</password>
        <red_led>17</red_led>
        <green_led>27</green_led>
        <blue_led>22</blue_led>
        <display_timeout>300</display_timeout>
        <last_build_threshold>86400</last_build_threshold>
        <poll_interval>3</poll_interval>        <!-- optional -->
        <fetch_timeout>60</fetch_timeout>       <!-- optional -->
        <jobs>
          <job><jobpath>/job/</jobpath><jobname>api-tests</jobname></job>
        </jobs>
      </group>
    </groups>

Any problem in the file raises ConfigError before monitoring starts.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from urllib.parse import urlparse

from light_common.models import Group, Job, ServerInfo

from .fetcher import build_artifact_paths

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 3.0
DEFAULT_FETCH_TIMEOUT = 60.0

GROUP_TEXT_FIELDS = {"groupname", "server", "username", "password"}
GROUP_INT_FIELDS = {
    "red_led",
    "green_led",
    "blue_led",
    "display_timeout",
    "last_build_threshold",
}
GROUP_FLOAT_FIELDS = {"poll_interval", "fetch_timeout"}
REQUIRED_GROUP_FIELDS = {"groupname", "server", "jobs"} | GROUP_INT_FIELDS
JOB_FIELDS = {"jobpath", "jobname"}


class ConfigError(ValueError):
    """Raised when the configuration file is missing or invalid."""


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _parse_int(name: str, value: str, group: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ConfigError(f"Group '{group}': {name} must be an integer, got '{value}'")
    if number < 0:
        raise ConfigError(f"Group '{group}': {name} must not be negative")
    return number


def _parse_float(name: str, value: str, group: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise ConfigError(f"Group '{group}': {name} must be a number, got '{value}'")
    if number <= 0:
        raise ConfigError(f"Group '{group}': {name} must be positive")
    return number


def _parse_job(element: ET.Element, group: str) -> Job:
    fields: dict[str, str] = {}
    for child in element:
        if child.tag not in JOB_FIELDS:
            raise ConfigError(f"Group '{group}': wrong job attribute <{child.tag}>")
        fields[child.tag] = _text(child)

    if not fields.get("jobname"):
        raise ConfigError(f"Group '{group}': job without <jobname>")
    return Job(path=fields.get("jobpath", ""), name=fields["jobname"])


def _parse_jobs(element: ET.Element, group: str) -> list[Job]:
    jobs = []
    for child in element:
        if child.tag != "job":
            raise ConfigError(f"Group '{group}': wrong jobs element <{child.tag}>")
        jobs.append(_parse_job(child, group))
    if not jobs:
        raise ConfigError(f"Group '{group}': no jobs configured")
    return jobs


def _parse_group(element: ET.Element, index: int) -> Group:
    name_element = element.find("groupname")
    name = _text(name_element) if name_element is not None else f"#{index}"

    text: dict[str, str] = {}
    numbers: dict[str, int] = {}
    floats: dict[str, float] = {}
    jobs: list[Job] = []
    seen: set[str] = set()

    for child in element:
        tag = child.tag
        if tag in seen:
            raise ConfigError(f"Group '{name}': duplicate <{tag}>")
        seen.add(tag)

        if tag in GROUP_TEXT_FIELDS:
            text[tag] = _text(child)
        elif tag in GROUP_INT_FIELDS:
            numbers[tag] = _parse_int(tag, _text(child), name)
        elif tag in GROUP_FLOAT_FIELDS:
            floats[tag] = _parse_float(tag, _text(child), name)
        elif tag == "jobs":
            jobs = _parse_jobs(child, name)
        else:
            raise ConfigError(f"Group '{name}': wrong group attribute <{tag}>")

    missing = sorted(REQUIRED_GROUP_FIELDS - seen)
    if missing:
        raise ConfigError(f"Group '{name}': missing {', '.join(missing)}")
    if not text["groupname"] or not text["server"]:
        raise ConfigError(f"Group '{name}': groupname and server must not be empty")
    server = urlparse(text["server"])
    if server.scheme not in ("http", "https") or not server.netloc:
        raise ConfigError(
            f"Group '{name}': server must be an http(s) URL, got '{text['server']}'"
        )

    return Group(
        name=text["groupname"],
        server=ServerInfo(
            url=text["server"],
            username=text.get("username", ""),
            password=text.get("password", ""),
        ),
        red_pin=numbers["red_led"],
        green_pin=numbers["green_led"],
        blue_pin=numbers["blue_led"],
        stale_threshold=numbers["last_build_threshold"],
        display_timeout=numbers["display_timeout"],
        jobs=jobs,
        poll_interval=floats.get("poll_interval", DEFAULT_POLL_INTERVAL),
        fetch_timeout=floats.get("fetch_timeout", DEFAULT_FETCH_TIMEOUT),
    )


def parse_config(text: str, info_dir: str | Path | None = None) -> list[Group]:
    """
    Parse an XML configuration document.

    Args:
        text: XML document
        info_dir: If given, artifact files are assigned under this directory

    Returns:
        List of configured groups, in file order

    Raises:
        ConfigError: If the document is malformed or incomplete
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ConfigError(f"Invalid XML: {e}") from e

    groups = []
    for index, element in enumerate(root):
        if element.tag != "group":
            raise ConfigError(f"Wrong group XML element <{element.tag}>")
        groups.append(_parse_group(element, index))

    if not groups:
        raise ConfigError("No group in configuration")

    names = [group.name for group in groups]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate group names: {', '.join(duplicates)}")

    if info_dir is not None:
        build_artifact_paths(info_dir, groups)

    for group in groups:
        logger.debug(f"Configured group {group.name} with {len(group.jobs)} jobs")
    return groups


def load_config(path: str | Path, info_dir: str | Path | None = None) -> list[Group]:
    """
    Load the configuration file.

    Args:
        path: XML configuration file
        info_dir: If given, artifact files are assigned under this directory

    Returns:
        List of configured groups

    Raises:
        ConfigError: If the file cannot be read or is invalid
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file {path}: {e}") from e
    logger.info(f"Loading configuration from {path}")
    return parse_config(text, info_dir)
