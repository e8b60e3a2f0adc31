"""Shared fixtures for build light unit tests."""

import pytest

from light_common.indicator import IndicatorOutput
from light_common.models import Group, Job, ServerInfo


class RecordingOutput(IndicatorOutput):
    """Lamp double that records every triple written to it."""

    def __init__(self):
        self.writes: list[tuple[bool, bool, bool]] = []
        self.closed = False

    async def write(self, red: bool, green: bool, blue: bool) -> None:
        self.writes.append((red, green, blue))

    async def close(self) -> None:
        self.closed = True


def write_artifacts(job: Job, color: str, timestamp_ms: int | None) -> None:
    """Write status and last build documents the way the build server formats them."""
    with open(job.status_file, "w") as f:
        f.write('{\n  "_class" : "hudson.model.FreeStyleProject",\n')
        f.write(f'  "name" : "{job.name}",\n  "color" : "{color}"\n}}\n')
    if timestamp_ms is not None:
        with open(job.last_build_file, "w") as f:
            f.write('{\n  "_class" : "hudson.model.FreeStyleBuild",\n')
            f.write('  "id" : "42",\n  "result" : "SUCCESS",\n')
            f.write(f'  "timestamp" : {timestamp_ms}\n}}\n')


@pytest.fixture
def recording_output():
    """Create a recording lamp output."""
    return RecordingOutput()


@pytest.fixture
def make_group(tmp_path):
    """Factory for groups whose jobs have artifact files in tmp_path."""

    def _make_group(
        job_count: int = 1,
        name: str = "team",
        stale_threshold: int = 3600,
        display_timeout: int = 5,
        poll_interval: float = 0.01,
        fetch_timeout: float = 1.0,
    ) -> Group:
        jobs = [
            Job(
                path="/job/",
                name=f"job{index}",
                status_file=str(tmp_path / f"s0_{index}"),
                last_build_file=str(tmp_path / f"l0_{index}"),
            )
            for index in range(job_count)
        ]
        return Group(
            name=name,
            server=ServerInfo(url="http://jenkins.test", username="u", password="p"),
            red_pin=17,
            green_pin=27,
            blue_pin=22,
            stale_threshold=stale_threshold,
            display_timeout=display_timeout,
            jobs=jobs,
            poll_interval=poll_interval,
            fetch_timeout=fetch_timeout,
        )

    return _make_group
