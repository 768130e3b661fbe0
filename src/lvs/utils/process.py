"""
Bounded subprocess execution for external audit tools.
"""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from lvs.utils.errors import CommandTimeout, OutputLimitExceeded, ToolInvocationError
from lvs.utils.schema import MIN_OUTPUT_BYTES

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


@dataclass
class CommandResult:
    """Captured result of an external command"""

    returncode: int
    stdout: str
    stderr: str


async def _read_bounded(stream: asyncio.StreamReader, limit: int) -> bytes:
    buffer = bytearray()
    while True:
        chunk = await stream.read(_CHUNK_SIZE)
        if not chunk:
            return bytes(buffer)
        buffer.extend(chunk)
        if len(buffer) > limit:
            raise OutputLimitExceeded(limit)


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def run_command(
    args: Sequence[str],
    cwd: Union[str, Path],
    max_output: int = MIN_OUTPUT_BYTES,
    timeout: Optional[float] = None,
) -> CommandResult:
    """
    Runs a command without a shell and captures stdout/stderr.

    A nonzero exit status is not an error here; callers decide what the
    captured output means.

    Args:
        args: Program and arguments. The program is resolved on PATH.
        cwd: Working directory for the command.
        max_output: Ceiling in bytes for each captured stream.
        timeout: Seconds to wait before the process is killed; None waits forever.

    Returns:
        A CommandResult with the decoded output.

    Raises:
        ToolInvocationError: If the program is not installed or cannot start.
        OutputLimitExceeded: If a stream grew past ``max_output``.
        CommandTimeout: If the process did not finish within ``timeout``.
    """
    program = shutil.which(args[0])
    if program is None:
        raise ToolInvocationError(f"{args[0]} not installed")

    try:
        proc = await asyncio.create_subprocess_exec(
            program,
            *args[1:],
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolInvocationError(f"failed to start {args[0]}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(
            asyncio.gather(
                _read_bounded(proc.stdout, max_output),
                _read_bounded(proc.stderr, max_output),
            ),
            timeout=timeout,
        )
        returncode = await proc.wait()
    except asyncio.TimeoutError:
        await _terminate(proc)
        raise CommandTimeout(timeout)
    except OutputLimitExceeded:
        await _terminate(proc)
        raise

    logger.debug(f"{' '.join(args)} in {cwd} exited with {returncode}")

    return CommandResult(
        returncode=returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )
