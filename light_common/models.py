"""
Data models for build light monitoring.

These models represent the domain objects used throughout the application:
the monitored jobs and groups, the per-cycle snapshots derived from the
build server, and the indicator state shared with the lamp driver.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

ANIMATION_SUFFIXES = ("_animated", "_anime")


class Color(str, Enum):
    """
    Job and lamp colors.

    Values are the color tokens reported by the build server.
    """

    NOT_BUILT = "notbuilt"
    DISABLED = "disabled"
    RED = "red"
    GREEN = "green"
    BLUE = "blue"
    YELLOW = "yellow"
    CYAN = "cyan"
    MAGENTA = "magenta"
    WHITE = "white"
    NONE = "noColor"

    @property
    def rgb(self) -> tuple[bool, bool, bool]:
        """On/off state of the (red, green, blue) lines for this color."""
        return _COLOR_LINES[self]

    @property
    def is_disabled(self) -> bool:
        """True for jobs that never built or are switched off."""
        return self in (Color.NOT_BUILT, Color.DISABLED)

    @classmethod
    def from_token(cls, token: str) -> tuple["Color", bool]:
        """
        Resolve a color token into a color and an animated flag.

        Building jobs carry an animation suffix. The build server reports
        "blue_anime"; "blue_animated" is accepted as well. Unknown tokens
        resolve to Color.NONE.

        Args:
            token: Raw color token

        Returns:
            Tuple of (color, animated)
        """
        animated = False
        for suffix in ANIMATION_SUFFIXES:
            if token.endswith(suffix):
                animated = True
                token = token[: -len(suffix)]
                break
        try:
            return cls(token), animated
        except ValueError:
            return cls.NONE, animated


_COLOR_LINES: dict[Color, tuple[bool, bool, bool]] = {
    Color.NOT_BUILT: (False, False, False),
    Color.DISABLED: (False, False, False),
    Color.RED: (True, False, False),
    Color.GREEN: (False, True, False),
    Color.BLUE: (False, False, True),
    Color.YELLOW: (True, True, False),
    Color.CYAN: (False, True, True),
    Color.MAGENTA: (True, False, True),
    Color.WHITE: (True, True, True),
    Color.NONE: (False, False, False),
}


@dataclass(frozen=True)
class Job:
    """
    A monitored build job.

    The two artifact files are written by the status fetcher and read by
    the status extractor; the core treats them as opaque handles.
    """

    path: str  # Folder part of the job URL, e.g. "/job/team/"
    name: str
    status_file: str = ""  # "current status" artifact (color)
    last_build_file: str = ""  # "last build" artifact (timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Convert job to dictionary format."""
        return {
            "path": self.path,
            "name": self.name,
            "status_file": self.status_file,
            "last_build_file": self.last_build_file,
        }


@dataclass(frozen=True)
class JobSnapshot:
    """
    Normalized status of one job for one evaluation cycle.

    Never persisted; rebuilt from the artifacts every cycle.
    """

    color: Color = Color.NONE
    animated: bool = False
    last_build_at: int = 0  # Seconds since the epoch


ZERO_SNAPSHOT = JobSnapshot()


@dataclass(frozen=True)
class GroupStatus:
    """
    Aggregated status of a group for one cycle.

    The zero value (all False) stands for "no cycle evaluated yet".
    """

    all_disabled: bool = False
    building: bool = False
    success: bool = False
    stale: bool = False

    @property
    def fully_successful(self) -> bool:
        """Every active job succeeded, nothing builds and nothing is stale."""
        return (
            self.success
            and not self.all_disabled
            and not self.building
            and not self.stale
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert status to dictionary format (for JSON output)."""
        return {
            "all_disabled": self.all_disabled,
            "building": self.building,
            "success": self.success,
            "stale": self.stale,
        }


@dataclass(frozen=True)
class IndicatorState:
    """
    Target state of a group's lamp.

    This is the only value shared between a group's evaluator and driver.
    """

    color: Color = Color.NONE
    animated: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert indicator state to dictionary format (for JSON output)."""
        return {"color": self.color.value, "animated": self.animated}


INDICATOR_OFF = IndicatorState()


@dataclass(frozen=True)
class ServerInfo:
    """Connection details of a build server."""

    url: str
    username: str = ""
    password: str = ""


@dataclass
class Group:
    """
    A group of jobs sharing one lamp.

    Built once from configuration at startup. Runtime state (previous and
    current status, success timer, indicator cell) is owned by the group's
    monitor, not by this record.
    """

    name: str
    server: ServerInfo
    red_pin: int
    green_pin: int
    blue_pin: int
    stale_threshold: int  # Seconds since the last build before data counts as old
    display_timeout: int  # Seconds a success stays shown
    jobs: list[Job] = field(default_factory=list)
    poll_interval: float = 3.0
    fetch_timeout: float = 60.0

    @property
    def pins(self) -> tuple[int, int, int]:
        """Output lines as (red, green, blue)."""
        return (self.red_pin, self.green_pin, self.blue_pin)

    def to_dict(self, mask_password: bool = True) -> dict[str, Any]:
        """Convert group to dictionary format (for CLI output)."""
        password = self.server.password
        if mask_password and password:
            password = "****"
        return {
            "name": self.name,
            "server": self.server.url,
            "username": self.server.username,
            "password": password,
            "pins": {
                "red": self.red_pin,
                "green": self.green_pin,
                "blue": self.blue_pin,
            },
            "stale_threshold": self.stale_threshold,
            "display_timeout": self.display_timeout,
            "poll_interval": self.poll_interval,
            "fetch_timeout": self.fetch_timeout,
            "jobs": [job.to_dict() for job in self.jobs],
        }
