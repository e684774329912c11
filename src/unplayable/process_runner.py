"""Async subprocess runner for ffmpeg invocations.

Key design decisions:
- Non-zero exit status is data, not an error (ffmpeg exits 1 after listing devices)
- Launch failures and timeouts raise ProcessError subclasses
- A timed-out process is killed and reaped before raising
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .errors import ProcessLaunchError, ProcessTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """Outcome of a finished process.

    Attributes:
        code: Exit status
        stdout: Captured standard output (decoded)
        stderr: Captured standard error (decoded)
    """
    code: int
    stdout: str = ""
    stderr: str = ""


async def run(
    executable: str,
    args: Sequence[str],
    timeout_ms: Optional[int] = None,
) -> ProcessResult:
    """Run an executable and capture its output.

    Args:
        executable: Path to the program
        args: Argument list (without the program itself)
        timeout_ms: Kill the process after this many milliseconds (None = no limit)

    Returns:
        ProcessResult with exit code and decoded output

    Raises:
        ProcessLaunchError: If the executable could not be started
        ProcessTimeoutError: If the timeout elapsed
    """
    logger.debug(f"Running: {executable} {' '.join(args)}")

    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProcessLaunchError(f"Failed to launch {executable}: {e}") from e

    timeout = timeout_ms / 1000 if timeout_ms is not None else None
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            pass  # already exited
        await process.wait()
        raise ProcessTimeoutError(
            f"{executable} timed out after {timeout_ms}ms"
        ) from None

    return ProcessResult(
        code=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
