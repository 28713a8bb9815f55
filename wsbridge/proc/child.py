"""
Handle for the bridged child process.

The child is spawned once with piped stdin/stdout (stderr is inherited) and
exposed through a small capability interface:

- ``write(data) -> bool``: non-blocking write to stdin, False if not writable
- ``subscribe(listener)``: receive each stdout chunk as it is read
- ``on_exit(listener)`` / ``on_error(listener)``: termination notifications
- ``terminate()``: SIGTERM, escalating to SIGKILL after a grace period
- ``kill()``: immediate SIGKILL

Stdout chunks are delivered exactly as read from the pipe. They do not
necessarily line up with the child's own message boundaries.
"""

from __future__ import annotations

import asyncio
import enum
import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from ..exceptions import ProcessError

ChunkListener = Callable[[bytes], Awaitable[None] | None]
ExitListener = Callable[[int], None]
ErrorListener = Callable[[ProcessError], None]


class ProcessState(enum.Enum):
    """Termination state of the child process."""

    NEW = "new"
    RUNNING = "running"
    EXITED = "exited"
    ERRORED = "errored"


class ChildProcess:
    """
    Spawns and owns the child process.

    Example:
        child = ChildProcess(lg, ["node", "agent.js"])
        child.subscribe(forwarder.on_child_output)
        child.on_exit(lifecycle.on_child_exit)
        child.on_error(lifecycle.on_child_error)
        await child.start()
    """

    def __init__(
        self,
        lg: Any,
        command: Sequence[str],
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        read_chunk_size: int = 65536,
        terminate_timeout: float = 5.0,
    ) -> None:
        """
        Initialize the handle; nothing is spawned until start().

        Args:
            lg: Logger instance
            command: Program and arguments
            cwd: Working directory for the child
            env: Complete child environment (inherits ours if None)
            read_chunk_size: Max bytes per stdout read
            terminate_timeout: Seconds after terminate() before kill
        """
        if not command:
            raise ValueError("Child command must not be empty")

        self._lg = lg
        self._command = list(command)
        self._cwd = cwd
        self._env = dict(env) if env is not None else None
        self._read_chunk_size = read_chunk_size
        self._terminate_timeout = terminate_timeout

        self._proc: asyncio.subprocess.Process | None = None
        self._state = ProcessState.NEW
        self._exit_code: int | None = None
        self._terminated = False
        self._supervisor: asyncio.Task | None = None
        self._kill_handle: asyncio.TimerHandle | None = None

        self._chunk_listeners: list[ChunkListener] = []
        self._exit_listeners: list[ExitListener] = []
        self._error_listeners: list[ErrorListener] = []

    @property
    def command(self) -> list[str]:
        return list(self._command)

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc is not None else None

    @property
    def state(self) -> ProcessState:
        return self._state

    @property
    def exit_code(self) -> int | None:
        """Exit code once EXITED, None otherwise."""
        return self._exit_code

    @property
    def running(self) -> bool:
        return self._state is ProcessState.RUNNING

    @property
    def writable(self) -> bool:
        """Whether stdin currently accepts writes."""
        if self._state is not ProcessState.RUNNING or self._proc is None:
            return False
        stdin = self._proc.stdin
        return stdin is not None and not stdin.is_closing()

    def subscribe(self, listener: ChunkListener) -> None:
        """Register a stdout chunk listener (sync or async)."""
        self._chunk_listeners.append(listener)

    def on_exit(self, listener: ExitListener) -> None:
        """Register a listener called with the exit code when the child exits."""
        self._exit_listeners.append(listener)

    def on_error(self, listener: ErrorListener) -> None:
        """Register a listener called on spawn or stream failure."""
        self._error_listeners.append(listener)

    async def start(self) -> bool:
        """
        Spawn the child and start pumping its stdout.

        Spawn failures are reported to the error listeners, not raised.

        Returns:
            True if the child is running

        Raises:
            RuntimeError: If start() was already called
        """
        if self._state is not ProcessState.NEW:
            raise RuntimeError("Child process already started")

        try:
            self._proc = await asyncio.create_subprocess_exec(
                *self._command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
                cwd=self._cwd,
                env=self._env,
            )
        except OSError as e:
            self._fail(
                ProcessError(
                    "failed to spawn child process",
                    command=" ".join(self._command),
                    error=str(e),
                )
            )
            return False

        self._state = ProcessState.RUNNING
        self._lg.info(
            "child process started",
            extra={"pid": self._proc.pid, "command": " ".join(self._command)},
        )
        self._supervisor = asyncio.get_running_loop().create_task(self._supervise())
        return True

    def write(self, data: bytes) -> bool:
        """
        Write ``data`` to the child's stdin without waiting for it to drain.

        Returns:
            False if stdin is not writable; nothing is queued in that case
        """
        if not self.writable:
            return False
        assert self._proc is not None and self._proc.stdin is not None
        try:
            self._proc.stdin.write(data)
        except (BrokenPipeError, ConnectionResetError, RuntimeError) as e:
            self._lg.debug("child stdin write failed", extra={"error": str(e)})
            return False
        return True

    def terminate(self) -> bool:
        """
        Ask the child to terminate, killing it after the grace period.

        Returns:
            True if a termination signal was sent
        """
        if self._proc is None or self._terminated:
            return False
        if self._state is not ProcessState.RUNNING or self._proc.returncode is not None:
            return False

        try:
            self._proc.terminate()
        except ProcessLookupError:
            return False

        self._terminated = True
        self._lg.debug("sent SIGTERM to child", extra={"pid": self._proc.pid})
        self._kill_handle = asyncio.get_running_loop().call_later(
            self._terminate_timeout, self._on_terminate_timeout
        )
        return True

    async def wait(self) -> ProcessState:
        """Wait until the child has exited and its output is drained."""
        if self._supervisor is not None:
            await asyncio.shield(self._supervisor)
        return self._state

    def kill(self) -> bool:
        """
        Kill the child with SIGKILL right away.

        Returns:
            True if the signal was sent
        """
        if self._kill_handle is not None:
            self._kill_handle.cancel()
            self._kill_handle = None
        if self._proc is None or self._proc.returncode is not None:
            return False

        try:
            self._proc.kill()
        except ProcessLookupError:
            return False
        self._lg.debug("sent SIGKILL to child", extra={"pid": self._proc.pid})
        return True

    def _on_terminate_timeout(self) -> None:
        self._kill_handle = None
        if self._proc is None or self._proc.returncode is not None:
            return
        self._lg.warning(
            "child did not exit after SIGTERM, sending SIGKILL",
            extra={"pid": self._proc.pid},
        )
        self.kill()

    async def _supervise(self) -> None:
        assert self._proc is not None
        try:
            await self._pump_stdout()
        except OSError as e:
            self._fail(ProcessError("child stdout failed", error=str(e)))
            return

        returncode = await self._proc.wait()
        self._exited(returncode)

    async def _pump_stdout(self) -> None:
        assert self._proc is not None and self._proc.stdout is not None
        stdout = self._proc.stdout
        while True:
            chunk = await stdout.read(self._read_chunk_size)
            if not chunk:
                break
            await self._dispatch(chunk)

    async def _dispatch(self, chunk: bytes) -> None:
        for listener in list(self._chunk_listeners):
            try:
                result = listener(chunk)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                self._lg.exception("stdout listener failed")

    def _exited(self, returncode: int) -> None:
        if self._kill_handle is not None:
            self._kill_handle.cancel()
            self._kill_handle = None

        # A child killed by a signal has no exit code of its own; report 0.
        code = returncode if returncode >= 0 else 0
        self._state = ProcessState.EXITED
        self._exit_code = code
        self._lg.info(
            "child process exited", extra={"code": code, "returncode": returncode}
        )
        for listener in list(self._exit_listeners):
            listener(code)

    def _fail(self, error: ProcessError) -> None:
        if self._state in (ProcessState.EXITED, ProcessState.ERRORED):
            return
        self._state = ProcessState.ERRORED
        self._lg.error("child process error", extra={"exception": error})
        for listener in list(self._error_listeners):
            listener(error)
