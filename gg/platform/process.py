"""Run external commands (git, in practice) and capture their output.

``run`` never raises for a failing command: a non-zero exit, a timeout or a
missing executable all come back as ``Err(ProcessError)``.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from gg.core.result import Err, Ok, Result

__all__ = ["TIMEOUT_RETURNCODE", "ProcessError", "run"]

# Return code reported when no real exit status exists.
TIMEOUT_RETURNCODE = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not exit cleanly.

    Attributes:
        command: Full argv of the command.
        returncode: Exit status, or TIMEOUT_RETURNCODE if it never finished.
        stdout: Captured standard output.
        stderr: Captured standard error, or why the command did not run.
        timed_out: True if the command was killed at the deadline.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown = f"{shown} ..."
        return f"{shown} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run cmd in cwd and return its stdout if it exits with 0.

    Output is decoded as UTF-8; undecodable bytes become U+FFFD.

    Args:
        cmd: argv to execute.
        cwd: Working directory.
        timeout: Seconds before the command is killed; None waits forever.
    """
    argv = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                argv, TIMEOUT_RETURNCODE, "", f"Command timed out after {timeout}s", timed_out=True
            )
        )
    except OSError as e:
        return Err(ProcessError(argv, TIMEOUT_RETURNCODE, "", str(e)))

    if proc.returncode == 0:
        return Ok(proc.stdout)
    return Err(ProcessError(argv, proc.returncode, proc.stdout, proc.stderr))
