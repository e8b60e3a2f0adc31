"""
Status fetcher for a group of jobs.

Downloads the "current status" and "last build" documents of every job of a
group from the build server's JSON API and stores them in the jobs'
artifact files, where the status extractor picks them up.
"""

import asyncio
import logging
import os
import threading
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import requests

from light_common.models import Group, Job

logger = logging.getLogger(__name__)

STATUS_QUERY = "api/json?pretty=true&tree=name,color"
LAST_BUILD_QUERY = (
    "lastBuild/api/json?pretty=true&tree=fullDisplayName,id,timestamp,result"
)


def build_artifact_paths(info_dir: str | Path, groups: list[Group]) -> None:
    """
    Assign artifact files to every job of every group.

    Files are named "s{group}_{job}" (status) and "l{group}_{job}" (last
    build) inside info_dir, which is created if needed.

    Args:
        info_dir: Directory holding the artifacts
        groups: Groups to update in place
    """
    info_path = Path(info_dir)
    info_path.mkdir(parents=True, exist_ok=True)
    for group_index, group in enumerate(groups):
        group.jobs = [
            replace(
                job,
                status_file=str(info_path / f"s{group_index}_{job_index}"),
                last_build_file=str(info_path / f"l{group_index}_{job_index}"),
            )
            for job_index, job in enumerate(group.jobs)
        ]


def job_url(server_url: str, job: Job, query: str) -> str:
    """Build the API URL of a job document."""
    return f"{server_url}{job.path}{job.name}/{query}"


def atomic_write_text(path: Path, text: str) -> None:
    """Write text atomically so the extractor never reads a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, path)


class StatusFetcher:
    """
    Fetches job documents of one group from its build server.

    A fetch fails as a whole when a request cannot be completed (connection
    error, timeout, redirect loop, broken transfer). An HTTP error status
    for a single document removes that job's artifact, which the extractor
    then reads as a missing field.
    """

    def __init__(
        self,
        group: Group,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            group: Group whose jobs are fetched
            timeout: Upper bound for one fetch in seconds
                     (default: the group's fetch_timeout)
            session: Optional pre-configured requests session
        """
        self.group = group
        self.timeout = timeout if timeout is not None else group.fetch_timeout
        self.session = session or requests.Session()
        if group.server.username:
            self.session.auth = (group.server.username, group.server.password)
        self._pending: asyncio.Future | None = None

    def fetch(self, should_stop: Callable[[], bool] | None = None) -> bool:
        """
        Download the documents of all jobs of the group.

        Args:
            should_stop: Checked between jobs; when it returns True the
                         fetch is abandoned

        Returns:
            True if the server answered for every job, False otherwise
        """
        for job in self.group.jobs:
            if should_stop is not None and should_stop():
                logger.info(f"Fetch for group {self.group.name} abandoned")
                return False
            try:
                self._fetch_document(job, STATUS_QUERY, job.status_file)
                self._fetch_document(job, LAST_BUILD_QUERY, job.last_build_file)
            except requests.exceptions.RequestException as e:
                logger.warning(
                    f"Build server {self.group.server.url} unreachable "
                    f"for group {self.group.name}: {e}"
                )
                return False

        logger.debug(f"Fetched {len(self.group.jobs)} jobs for group {self.group.name}")
        return True

    def _fetch_document(self, job: Job, query: str, artifact: str) -> None:
        url = job_url(self.group.server.url, job, query)
        path = Path(artifact)
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.HTTPError as e:
            logger.info(f"No document for job {job.name} at {url}: {e}")
            path.unlink(missing_ok=True)
            return
        atomic_write_text(path, response.text)

    async def fetch_async(self, shutdown: asyncio.Event | None = None) -> bool:
        """
        Run fetch() in a worker thread, bounded by the fetch timeout.

        Returns False without waiting further when the timeout expires or
        shutdown is set; the worker stops at its next job boundary.

        Args:
            shutdown: Process-wide shutdown event

        Returns:
            True if the fetch completed successfully
        """
        if self._pending is not None and not self._pending.done():
            logger.warning(
                f"Previous fetch for group {self.group.name} still running, skipping"
            )
            return False

        abandon = threading.Event()

        def should_stop() -> bool:
            return abandon.is_set() or (shutdown is not None and shutdown.is_set())

        fetch_task = asyncio.ensure_future(asyncio.to_thread(self.fetch, should_stop))
        self._pending = fetch_task
        waiters: set[asyncio.Future] = {fetch_task}
        stop_task = None
        if shutdown is not None:
            stop_task = asyncio.ensure_future(shutdown.wait())
            waiters.add(stop_task)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self.timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            if stop_task is not None:
                stop_task.cancel()

        if fetch_task in done:
            return fetch_task.result()

        abandon.set()
        fetch_task.add_done_callback(self._log_abandoned)
        if shutdown is not None and shutdown.is_set():
            logger.info(f"Shutdown requested during fetch for group {self.group.name}")
        else:
            logger.warning(
                f"Fetch for group {self.group.name} exceeded {self.timeout}s, abandoned"
            )
        return False

    def _log_abandoned(self, task: asyncio.Future) -> None:
        if not task.cancelled() and task.exception() is not None:
            logger.debug(
                f"Abandoned fetch for group {self.group.name} failed: {task.exception()}"
            )

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
