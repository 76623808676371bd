"""External build tool process management.

Spawns the package manager, scaffolder, CSS framework CLI, component library
CLI, bundler and deploy client as child processes, streams their output to
the console as it arrives, and turns non-zero exits, missing executables and
timeouts into ``ToolError`` exceptions. Nothing is retried.
"""

from __future__ import annotations

import asyncio
import os
import shlex
import time
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from ..errors import ToolError, ToolTimeoutError

console = Console()


@dataclass
class ToolResult:
    """Outcome of one successful external command."""

    command: str
    exit_code: int
    duration_seconds: float = 0.0
    output_tail: list[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a one-line human-readable summary of the result."""
        return f"{self.command} (exit {self.exit_code}, {self.duration_seconds:.1f}s)"


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill a still-running child and reap it."""
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    await process.wait()


class ToolRunner:
    """Runs external commands one at a time, failing fast on errors.

    Standard error is merged into standard output so the console shows the
    tool's messages in the order it wrote them. The last ``tail_lines`` lines
    are kept and attached to any raised ``ToolError``.
    """

    def __init__(
        self,
        timeout: float | None = 600.0,
        env: dict[str, str] | None = None,
        tail_lines: int = 40,
        echo: bool = True,
    ):
        self.timeout = timeout
        self.env = env or {}
        self.tail_lines = tail_lines
        self.echo = echo

    async def run(
        self,
        *argv: str,
        cwd: str | Path | None = None,
        timeout: float | None = None,
    ) -> ToolResult:
        """Run ``argv`` to completion.

        Args:
            argv: Executable followed by its arguments. No shell is involved.
            cwd: Working directory for the child process.
            timeout: Overrides the runner's default timeout for this call.

        Returns:
            ToolResult for a zero exit.

        Raises:
            ToolError: Executable missing or non-zero exit.
            ToolTimeoutError: The command exceeded its time limit.
            asyncio.CancelledError: The awaiting task was cancelled; the child
                has been killed before this propagates.
        """
        if not argv:
            raise ToolError("No command given")

        cmd_str = shlex.join(argv)
        limit = self.timeout if timeout is None else timeout
        merged_env = {**os.environ, **self.env} if self.env else None

        console.print(f"[cyan]$[/cyan] {escape(cmd_str)}")
        start = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=str(cwd) if cwd else None,
                env=merged_env,
            )
        except FileNotFoundError as exc:
            raise ToolError(
                f"Executable not found: {argv[0]}", command=cmd_str
            ) from exc

        tail: deque[str] = deque(maxlen=self.tail_lines)

        try:
            await asyncio.wait_for(self._pump(process, tail), timeout=limit)
        except asyncio.TimeoutError:
            await _terminate(process)
            raise ToolTimeoutError(
                f"Command timed out after {limit}s: {cmd_str}",
                command=cmd_str,
                output="\n".join(tail),
            )
        except asyncio.CancelledError:
            await _terminate(process)
            console.print(f"[yellow]Cancelled:[/yellow] {escape(cmd_str)}")
            raise

        duration = time.monotonic() - start
        exit_code = process.returncode

        if exit_code != 0:
            output = "\n".join(tail)
            message = f"Command failed (exit {exit_code}): {cmd_str}"
            if output:
                message = f"{message}\n{output}"
            raise ToolError(
                message,
                command=cmd_str,
                exit_code=exit_code,
                output=output,
            )

        result = ToolResult(
            command=cmd_str,
            exit_code=exit_code,
            duration_seconds=duration,
            output_tail=list(tail),
        )
        console.print(f"[green]Done:[/green] {escape(result.summary())}")
        return result

    async def _pump(
        self, process: asyncio.subprocess.Process, tail: deque[str]
    ) -> None:
        """Forward child output line by line until EOF, then reap the child."""
        assert process.stdout is not None  # guaranteed by PIPE
        while True:
            line_bytes = await process.stdout.readline()
            if not line_bytes:
                break
            line = line_bytes.decode("utf-8", errors="replace").rstrip("\r\n")
            tail.append(line)
            if self.echo:
                console.print(line, style="dim", markup=False, highlight=False)
        await process.wait()
