from __future__ import annotations

import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from ..core.session_log import log_debug, log_exception


@dataclass(frozen=True)
class JobSuccess:
    output: str


@dataclass(frozen=True)
class JobFailure:
    title: str
    message: str


JobResult = Union[JobSuccess, JobFailure]


def build_command(tool: str, tool_args: Sequence[str], query: str) -> list[str]:
    return [tool, *tool_args, query]


def _tool_name(command: Sequence[str]) -> str:
    if not command:
        return "tool"
    return Path(command[0]).name or command[0]


def _signal_name(number: int) -> str:
    try:
        return signal.Signals(number).name
    except ValueError:
        return str(number)


def run_tool(command: Sequence[str], document: str) -> JobResult:
    """Run the external tool over ``document`` and translate its exit into a result.

    Never raises: any failure to start or talk to the process comes back as a
    ``JobFailure`` so the caller always has exactly one result to deliver.
    """
    name = _tool_name(command)
    try:
        process = subprocess.Popen(
            list(command),
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        stdout, stderr = process.communicate(document)
        returncode = process.returncode
    except OSError as exc:
        log_exception("jobs", exc)
        return JobFailure(f"could not run {name}", exc.strerror or str(exc))
    except Exception as exc:  # noqa: BLE001
        log_exception("jobs", exc)
        return JobFailure(f"error while running {name}", f"{type(exc).__name__}: {exc}")

    log_debug("jobs", "job.exit", {"command": list(command), "returncode": returncode})
    if returncode == 0:
        return JobSuccess(stdout or "")
    stderr = (stderr or "").strip("\n")
    if returncode is None:
        return JobFailure(
            f"undetermined exit status of the {name} subprocess",
            stderr or f"{name} finished without reporting an exit status.",
        )
    if returncode < 0:
        sig = _signal_name(-returncode)
        return JobFailure(
            f"the {name} subprocess was terminated by signal {sig}",
            stderr or f"{name} was killed by signal {sig} before it finished.",
        )
    return JobFailure(
        f"{name} exited with exit code {returncode}",
        stderr or f"{name} reported no error output.",
    )
