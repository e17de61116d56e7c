"""Run interpreters and package managers as supervised child processes.

Each child is started in its own session, so it leads a fresh process group.
Whatever happens (natural exit, timeout, cancellation of the calling task)
the whole group receives SIGKILL and the child is reaped before ``run``
returns. This is a time limit and a working-directory pin, not an OS-level
sandbox: the child runs with the service's own privileges.
"""

import asyncio
import codecs
import hashlib
import logging
import os
import signal
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from workspace_api.errors import PathEscapeError, WorkspaceIOError
from workspace_api.sandbox.languages import get_interpreter, unsupported_language_message
from workspace_api.workspace.paths import PathResolver

_logger = logging.getLogger("workspace_api.sandbox")

DEFAULT_EXECUTE_TIMEOUT = 30.0
DEFAULT_MAX_OUTPUT = 50000
DEFAULT_DRAIN_GRACE = 1.0
_READ_CHUNK = 4096


@dataclass
class ExecutionResult:
    output: str
    exit_code: int | None = None
    timed_out: bool = False
    duration_ms: int = 0


@dataclass
class RunOutcome:
    output: str
    exit_code: int | None
    timed_out: bool
    duration_ms: int
    spawn_error: str | None = None


class _OutputBuffer:
    """Combined stdout/stderr text, capped at ``limit`` characters."""

    def __init__(self, limit: int) -> None:
        self._parts: list[str] = []
        self._size = 0
        self._limit = limit
        self._dropped = 0

    def append(self, text: str) -> None:
        room = self._limit - self._size
        if room <= 0:
            self._dropped += len(text)
            return
        kept = text[:room]
        self._parts.append(kept)
        self._size += len(kept)
        self._dropped += len(text) - len(kept)

    def getvalue(self) -> str:
        value = "".join(self._parts)
        if self._dropped:
            value += f"\n... [output truncated, {self._dropped} characters omitted]"
        return value


async def _pump(stream: asyncio.StreamReader, buffer: _OutputBuffer) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await stream.read(_READ_CHUNK)
        if not data:
            break
        buffer.append(decoder.decode(data))
    tail = decoder.decode(b"", final=True)
    if tail:
        buffer.append(tail)


def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            pass
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass


def _format_seconds(seconds: float) -> str:
    return f"{seconds:g}"


def _code_hash(code: str) -> str:
    return hashlib.sha256(code.encode()).hexdigest()[:16]


class ProcessRunner:
    """Execute source code and commands inside the workspace root."""

    def __init__(
        self,
        resolver: PathResolver,
        timeout: float = DEFAULT_EXECUTE_TIMEOUT,
        max_output_chars: int = DEFAULT_MAX_OUTPUT,
        drain_grace: float = DEFAULT_DRAIN_GRACE,
    ) -> None:
        self._resolver = resolver
        self._timeout = timeout
        self._max_output_chars = max_output_chars
        self._drain_grace = drain_grace

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @property
    def timeout(self) -> float:
        return self._timeout

    async def run(
        self,
        argv: Sequence[str],
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> RunOutcome:
        """Spawn ``argv`` without a shell and wait for it under a time limit.

        Args:
            argv: Program and arguments, passed to the OS as a vector.
            cwd: Working directory; must lie inside the workspace root.
                Defaults to the root.
            timeout: Seconds before the process group is killed. Defaults to
                the runner's configured timeout.

        Returns:
            RunOutcome with the combined output. ``exit_code`` is None when the
            program could not be started or was killed on timeout.
        """
        work_dir = Path(cwd) if cwd is not None else self._resolver.root
        if not self._resolver.contains(work_dir):
            raise PathEscapeError(path=str(work_dir))
        limit = timeout if timeout is not None else self._timeout

        start = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=work_dir,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            _logger.warning("Failed to start %s: %s", argv[0], e)
            return RunOutcome(
                output="",
                exit_code=None,
                timed_out=False,
                duration_ms=int((time.monotonic() - start) * 1000),
                spawn_error=str(e),
            )

        buffer = _OutputBuffer(self._max_output_chars)
        readers = [
            asyncio.create_task(_pump(process.stdout, buffer)),
            asyncio.create_task(_pump(process.stderr, buffer)),
        ]
        timed_out = False
        try:
            await asyncio.wait_for(process.wait(), timeout=limit)
        except asyncio.TimeoutError:
            timed_out = True
            _logger.warning(
                "Process %d (%s) exceeded %ss, killing process group",
                process.pid,
                argv[0],
                _format_seconds(limit),
            )
        finally:
            # Also clears anything the child left running in its group.
            _kill_process_group(process)
            await self._reap(process)
            await self._drain(readers)

        return RunOutcome(
            output=buffer.getvalue(),
            exit_code=None if timed_out else process.returncode,
            timed_out=timed_out,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    async def _reap(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            await asyncio.wait_for(process.wait(), timeout=max(self._drain_grace, 0.1))
        except asyncio.TimeoutError:
            # The event loop's child watcher still collects the exit status.
            _logger.warning("Process %d did not report exit after SIGKILL", process.pid)

    async def _drain(self, readers: list[asyncio.Task]) -> None:
        _, pending = await asyncio.wait(readers, timeout=self._drain_grace)
        for task in pending:
            task.cancel()
        results = await asyncio.gather(*readers, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                _logger.warning("Output reader failed: %r", result)

    async def execute(
        self,
        code: str,
        language: str,
        target_path: str | None = None,
        work_dir: str | None = None,
        timeout: float | None = None,
    ) -> ExecutionResult:
        """Write ``code`` to a file and run it with the language's interpreter.

        Unsupported languages produce an informational result without
        touching the filesystem or spawning anything.
        """
        interpreter = get_interpreter(language)
        if interpreter is None:
            _logger.info("Rejected execution for unsupported language %r", language)
            return ExecutionResult(output=unsupported_language_message(language))

        cwd = self._resolver.resolve(work_dir or "")
        generated = not target_path
        if target_path:
            source_file = self._resolver.resolve(target_path)
        else:
            name = f"temp_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.{interpreter.extension}"
            source_file = cwd / name
            if not self._resolver.contains(source_file):
                raise PathEscapeError(path=name)

        try:
            cwd.mkdir(parents=True, exist_ok=True)
            source_file.parent.mkdir(parents=True, exist_ok=True)
            source_file.write_text(code, encoding="utf-8")
        except OSError as e:
            raise WorkspaceIOError(
                detail=f"Failed to write source file: {e}", path=target_path
            ) from e

        limit = timeout if timeout is not None else self._timeout
        try:
            outcome = await self.run([interpreter.command, str(source_file)], cwd=cwd, timeout=limit)
        finally:
            if generated:
                try:
                    source_file.unlink(missing_ok=True)
                except OSError as e:
                    _logger.warning("Failed to remove %s: %s", source_file, e)

        if outcome.spawn_error is not None:
            output = f"Execution error: {outcome.spawn_error}"
        elif outcome.timed_out:
            output = outcome.output + f"\nExecution timeout after {_format_seconds(limit)}s"
        else:
            output = outcome.output
            if outcome.exit_code != 0:
                output += f"\nProcess exited with code {outcome.exit_code}"

        _logger.info(
            "Sandbox execution: language=%s exit_code=%s timed_out=%s duration=%dms code_hash=%s",
            language,
            outcome.exit_code,
            outcome.timed_out,
            outcome.duration_ms,
            _code_hash(code),
        )
        return ExecutionResult(
            output=output,
            exit_code=outcome.exit_code,
            timed_out=outcome.timed_out,
            duration_ms=outcome.duration_ms,
        )
