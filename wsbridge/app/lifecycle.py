"""
Bridge lifecycle management.

Ties child termination and signals to teardown and the host exit code:

    child exited with N   -> shutdown(N)
    child failed          -> shutdown(1)
    SIGINT / SIGTERM      -> shutdown(0)

State machine: RUNNING -> SHUTTING_DOWN -> TERMINATED.
"""

from __future__ import annotations

import asyncio
import enum
from typing import Any, Protocol


class Endpoint(Protocol):
    def close_all_peers(self) -> int: ...

    def close(self) -> None: ...

    async def wait_closed(self, timeout: float) -> bool: ...


class Terminable(Protocol):
    def terminate(self) -> bool: ...

    def kill(self) -> bool: ...
    async def wait(self) -> Any: ...


class LifecycleState(enum.Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class Lifecycle:
    """
    Coordinates shutdown of the bridge.

    shutdown() does all teardown synchronously, without waiting for any
    close to complete, and resolves the exit code. wait() then gives
    connections and the child up to ``shutdown_timeout`` seconds to finish
    before returning the code.
    """

    def __init__(
        self,
        lg: Any,
        server: Endpoint,
        child: Terminable,
        shutdown_timeout: float = 2.0,
    ) -> None:
        self._lg = lg
        self._server = server
        self._child = child
        self._shutdown_timeout = shutdown_timeout
        self._state = LifecycleState.RUNNING
        self._exit: asyncio.Future[int] = asyncio.get_running_loop().create_future()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def exit_code(self) -> int | None:
        """Exit code once shutdown started, None before."""
        return self._exit.result() if self._exit.done() else None

    def on_child_exit(self, code: int) -> None:
        self.shutdown(code)

    def on_child_error(self, error: BaseException) -> None:
        self.shutdown(1)

    def shutdown(self, exit_code: int = 0) -> None:
        """
        Tear down the bridge and resolve the exit code.

        Closes every connected peer (not only the active one), stops the
        listener, and terminates the child if it is still running. Only the
        first call has an effect.
        """
        if self._state is not LifecycleState.RUNNING:
            self._lg.debug(
                "shutdown already in progress", extra={"exit_code": exit_code}
            )
            return

        self._state = LifecycleState.SHUTTING_DOWN
        self._lg.info("shutting down", extra={"exit_code": exit_code})

        closed = self._server.close_all_peers()
        if closed:
            self._lg.debug("closing peer connections", extra={"count": closed})
        self._server.close()
        self._child.terminate()

        self._exit.set_result(exit_code)

    async def wait(self) -> int:
        """
        Wait for shutdown and return the host exit code.

        Connection closes and child exit are awaited for at most
        ``shutdown_timeout`` seconds each. A child still running by then is
        killed and given one more ``shutdown_timeout`` to exit. The code is
        returned either way.
        """
        code = await asyncio.shield(self._exit)
        if self._state is LifecycleState.TERMINATED:
            return code

        await self._server.wait_closed(self._shutdown_timeout)
        if not await self._wait_child():
            self._lg.warning(
                "child did not exit after SIGTERM, killing it",
                extra={"timeout": self._shutdown_timeout},
            )
            self._child.kill()
            if not await self._wait_child():
                self._lg.warning(
                    "child still running at exit",
                    extra={"timeout": self._shutdown_timeout},
                )

        self._state = LifecycleState.TERMINATED
        self._lg.debug("terminated", extra={"exit_code": code})
        return code

    async def _wait_child(self) -> bool:
        try:
            await asyncio.wait_for(self._child.wait(), self._shutdown_timeout)
        except TimeoutError:
            return False
        return True
