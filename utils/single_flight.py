"""
Single-flight coordination

Collapses concurrent calls for the same key into one underlying coroutine.
Every caller waiting on a key receives the same result or the same exception.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Flight:
    """One in-progress computation and the number of callers awaiting it"""

    __slots__ = ("task", "waiters", "cancelled")

    def __init__(self, task: "asyncio.Task[Any]"):
        self.task = task
        self.waiters = 0
        self.cancelled = False

    @property
    def joinable(self) -> bool:
        return not self.cancelled and not self.task.done()


class SingleFlight(Generic[T]):
    """
    Per-key de-duplication of in-flight async work.

    Usage:
        flights = SingleFlight()
        result = await flights.do(address, lambda: compute(address))

    The shared task is cancelled only after every waiter has been cancelled,
    so one disconnecting client never fails the others.
    """

    def __init__(self, name: str = "single_flight"):
        self.name = name
        self._flights: Dict[Hashable, _Flight] = {}
        self.shared_calls = 0

    def in_flight(self, key: Hashable) -> bool:
        """Whether a computation for key is currently running"""
        return key in self._flights

    async def do(self, key: Hashable, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run fn for key, or join the run already in progress.

        Args:
            key: De-duplication key
            fn: Zero-argument coroutine factory, only invoked by the first caller

        Returns:
            The shared result
        """
        flight = self._flights.get(key)
        # A flight that is finishing or being cancelled is replaced, not joined
        if flight is None or not flight.joinable:
            task = asyncio.ensure_future(fn())
            flight = _Flight(task)
            self._flights[key] = flight
            task.add_done_callback(lambda _t, k=key, f=flight: self._forget(k, f))
        else:
            self.shared_calls += 1
            logger.debug(f"SingleFlight JOIN [{self.name}]: {key}")

        flight.waiters += 1
        try:
            return await asyncio.shield(flight.task)
        except asyncio.CancelledError:
            flight.waiters -= 1
            if flight.waiters == 0 and not flight.task.done():
                logger.debug(f"SingleFlight CANCEL [{self.name}]: {key} (no waiters left)")
                flight.cancelled = True
                flight.task.cancel()
            raise

    def _forget(self, key: Hashable, flight: _Flight) -> None:
        if self._flights.get(key) is flight:
            del self._flights[key]
        # Mark the outcome as retrieved even when every waiter went away
        if not flight.task.cancelled():
            flight.task.exception()
