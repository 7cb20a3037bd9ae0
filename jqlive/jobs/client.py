from __future__ import annotations

import itertools
import queue
import threading
import time
from typing import Callable, Optional, Sequence

from ..core.session_log import get_active_logger
from .runner import JobFailure, JobResult, build_command, run_tool

Worker = Callable[[Sequence[str], str], JobResult]

_JOB_IDS = itertools.count(1)


class Job:
    """One invocation of the external tool, running on its own thread.

    The worker puts exactly one result on a one-slot queue. Nobody stops the
    thread; a superseded job simply finishes unobserved.
    """

    def __init__(
        self,
        document: str,
        query: str,
        command: Sequence[str],
        *,
        worker: Worker = run_tool,
    ) -> None:
        self.job_id = next(_JOB_IDS)
        self.document = document
        self.query = query
        self.command = list(command)
        self.started_at: float | None = None
        self._worker = worker
        self._channel: "queue.Queue[JobResult]" = queue.Queue(maxsize=1)
        self._thread = threading.Thread(
            target=self._run,
            name=f"jqlive-job-{self.job_id}",
            daemon=True,
        )

    def start(self) -> "Job":
        self.started_at = time.monotonic()
        self._thread.start()
        return self

    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return time.monotonic() - self.started_at

    def result_nowait(self) -> Optional[JobResult]:
        try:
            return self._channel.get_nowait()
        except queue.Empty:
            pass
        if self._thread.is_alive() or self.started_at is None:
            return None
        # the thread may have put its result between the two checks
        try:
            return self._channel.get_nowait()
        except queue.Empty:
            return JobFailure(
                "job worker disconnected",
                "The worker exited without reporting a result.",
            )

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        try:
            result = self._worker(self.command, self.document)
        except Exception as exc:  # noqa: BLE001
            result = JobFailure("job worker failed", f"{type(exc).__name__}: {exc}")
        self._channel.put(result)


class JobClient:
    """Tracks at most one job and hands out its result once."""

    def __init__(
        self,
        tool: str = "jq",
        tool_args: Sequence[str] = (),
        *,
        worker: Worker = run_tool,
    ) -> None:
        self.tool = tool
        self.tool_args = list(tool_args)
        self._worker = worker
        self._current: Job | None = None

    @property
    def current(self) -> Job | None:
        return self._current

    @property
    def pending(self) -> bool:
        return self._current is not None

    def submit(self, document: str, query: str) -> Job:
        command = build_command(self.tool, self.tool_args, query)
        job = Job(document, query, command, worker=self._worker)
        previous = self._current
        self._current = job
        logger = get_active_logger()
        if logger is not None:
            if previous is not None:
                logger.log_job_abandoned("jobs", job_id=previous.job_id, superseded_by=job.job_id)
            logger.log_job_submitted("jobs", job_id=job.job_id, command=command, query=job.query)
        return job.start()

    def poll(self) -> Optional[JobResult]:
        job = self._current
        if job is None:
            return None
        result = job.result_nowait()
        if result is None:
            return None
        self._current = None
        logger = get_active_logger()
        if logger is not None:
            logger.log_job_result(
                "jobs",
                job_id=job.job_id,
                ok=not isinstance(result, JobFailure),
                title=getattr(result, "title", None),
                elapsed_s=job.elapsed(),
            )
        return result
