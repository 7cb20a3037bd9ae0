"""Background execution of the external filter tool."""

from .client import Job, JobClient
from .runner import JobFailure, JobResult, JobSuccess, build_command, run_tool

__all__ = [
    "Job",
    "JobClient",
    "JobFailure",
    "JobResult",
    "JobSuccess",
    "build_command",
    "run_tool",
]
