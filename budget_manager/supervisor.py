"""
Supervisor - starts a list of children and restarts them when they exit

Strategies:
- one_for_one: only the exited child is restarted
- one_for_all: every child is restarted
- rest_for_one: the exited child and the children started after it are restarted

Restart types (per child):
- permanent: always restarted
- transient: restarted only when run() raised
- temporary: never restarted
"""
import asyncio
import time
from collections import deque
from enum import Enum
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from .utils.logger import get_logger

logger = get_logger(__name__)


class Strategy(str, Enum):
    ONE_FOR_ONE = "one_for_one"
    ONE_FOR_ALL = "one_for_all"
    REST_FOR_ONE = "rest_for_one"


class Restart(str, Enum):
    PERMANENT = "permanent"
    TRANSIENT = "transient"
    TEMPORARY = "temporary"


class SupervisorError(RuntimeError):
    """The supervisor gave up (restart intensity exceeded)"""


class Child:
    """
    Base class for supervised children

    Subclasses override start()/stop(); long-running children also
    override run(). A child without run() is considered alive until stopped.
    """

    name: str = "child"
    restart: Restart = Restart.PERMANENT

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    async def run(self) -> None:
        await asyncio.Event().wait()

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name})>"


class _ChildState:
    def __init__(self, child: Child):
        self.child = child
        self.task: Optional[asyncio.Task] = None
        self.status = "stopped"
        self.restarts = 0


class Supervisor:
    """Supervises children in start order"""

    def __init__(
        self,
        children: Sequence[Child],
        strategy: Strategy = Strategy.ONE_FOR_ONE,
        name: str = "Supervisor",
        max_restarts: int = 3,
        max_seconds: float = 5.0,
    ):
        names = [c.name for c in children]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate child names: {names}")

        self.name = name
        self.strategy = Strategy(strategy)
        self.max_restarts = max_restarts
        self.max_seconds = max_seconds

        self._states: List[_ChildState] = [_ChildState(c) for c in children]
        self._exits: "asyncio.Queue[Tuple[_ChildState, asyncio.Task]]" = asyncio.Queue()
        self._restart_times: Deque[float] = deque()
        self._monitor: Optional[asyncio.Task] = None
        self._stopping = False
        self.error: Optional[SupervisorError] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def start(self) -> "Supervisor":
        """Start every child in order; on failure stop the started ones and re-raise"""
        logger.info(f"{self.name} starting {len(self._states)} children ({self.strategy.value})")
        started: List[_ChildState] = []
        try:
            for state in self._states:
                await self._start_child(state)
                started.append(state)
        except Exception:
            logger.exception(f"{self.name} failed to start children")
            for state in reversed(started):
                await self._stop_child(state)
            raise

        self._monitor = asyncio.create_task(self._watch(), name=f"{self.name}.monitor")
        return self

    async def stop(self) -> None:
        """Stop children in reverse start order"""
        self._stopping = True
        if self._monitor and not self._monitor.done():
            self._monitor.cancel()
            try:
                await self._monitor
            except asyncio.CancelledError:
                pass

        for state in reversed(self._states):
            await self._stop_child(state)
        logger.info(f"{self.name} stopped")

    async def join(self) -> None:
        """Wait for the monitor to finish; raises SupervisorError if it gave up"""
        if self._monitor is not None:
            try:
                await self._monitor
            except asyncio.CancelledError:
                pass
        if self.error is not None:
            raise self.error

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def which_children(self) -> List[Tuple[str, str, int]]:
        return [(s.child.name, s.status, s.restarts) for s in self._states]

    def get_child(self, name: str) -> Child:
        return self._state(name).child

    async def restart_child(self, name: str) -> None:
        state = self._state(name)
        await self._stop_child(state)
        await self._start_child(state)
        state.restarts += 1

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _state(self, name: str) -> _ChildState:
        for state in self._states:
            if state.child.name == name:
                return state
        raise KeyError(name)

    async def _start_child(self, state: _ChildState) -> None:
        await state.child.start()
        task = asyncio.create_task(state.child.run(), name=f"{self.name}.{state.child.name}")
        task.add_done_callback(lambda t, s=state: self._on_exit(s, t))
        state.task = task
        state.status = "running"
        logger.debug(f"{self.name}: started {state.child.name}")

    async def _stop_child(self, state: _ChildState) -> None:
        task, state.task = state.task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"{self.name}: {state.child.name} raised while stopping: {e}")
        if state.status != "stopped":
            try:
                await state.child.stop()
            except Exception:
                logger.exception(f"{self.name}: error stopping {state.child.name}")
        state.status = "stopped"

    def _on_exit(self, state: _ChildState, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        # Retrieve the exception so finished tasks are never reported as unhandled
        task.exception()
        # Stale callbacks from replaced tasks are ignored
        if self._stopping or state.task is not task:
            return
        self._exits.put_nowait((state, task))

    async def _watch(self) -> None:
        while True:
            state, task = await self._exits.get()
            if state.task is not task:
                continue

            exc = task.exception()
            if exc is not None:
                logger.error(f"{self.name}: {state.child.name} crashed: {exc!r}")
            else:
                logger.warning(f"{self.name}: {state.child.name} exited")
            state.status = "exited"

            if not self._should_restart(state.child, exc):
                logger.info(f"{self.name}: not restarting {state.child.name} ({state.child.restart.value})")
                await self._stop_child(state)
                continue

            # A restart whose start() raises counts toward the intensity and is retried
            while True:
                if not self._record_restart():
                    await self._give_up()
                    return
                try:
                    await self._restart(state)
                    break
                except Exception as e:
                    logger.error(f"{self.name}: restarting {state.child.name} failed: {e!r}")

    async def _give_up(self) -> None:
        self.error = SupervisorError(
            f"{self.name} reached max restart intensity "
            f"({self.max_restarts} restarts in {self.max_seconds}s)"
        )
        logger.error(str(self.error))
        self._stopping = True
        for s in reversed(self._states):
            await self._stop_child(s)

    def _should_restart(self, child: Child, exc: Optional[BaseException]) -> bool:
        restart = Restart(child.restart)
        if restart is Restart.TEMPORARY:
            return False
        if restart is Restart.TRANSIENT:
            return exc is not None
        return True

    def _record_restart(self) -> bool:
        now = time.monotonic()
        self._restart_times.append(now)
        while self._restart_times and now - self._restart_times[0] > self.max_seconds:
            self._restart_times.popleft()
        return len(self._restart_times) <= self.max_restarts

    def _affected(self, state: _ChildState) -> List[_ChildState]:
        if self.strategy is Strategy.ONE_FOR_ALL:
            return list(self._states)
        if self.strategy is Strategy.REST_FOR_ONE:
            return self._states[self._states.index(state):]
        return [state]

    async def _restart(self, failed: _ChildState) -> None:
        affected = self._affected(failed)
        for state in reversed(affected):
            await self._stop_child(state)
        for state in affected:
            await self._start_child(state)
            state.restarts += 1
        logger.info(
            f"{self.name}: restarted {', '.join(s.child.name for s in affected)}"
        )

    def status(self) -> Dict[str, str]:
        return {s.child.name: s.status for s in self._states}
