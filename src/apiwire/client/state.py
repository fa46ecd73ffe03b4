"""Serialized shared state of a client: default headers and the authenticator.

Many calls may be in flight against one :class:`~apiwire.client.Client`
while the caller keeps changing default headers or swapping the
authenticator. :class:`ClientState` confines that state to a single
worker task with an inbox:

* Mutations (:meth:`~ClientState.set_header`,
  :meth:`~ClientState.remove_header`,
  :meth:`~ClientState.set_authenticator`) are enqueued and return
  immediately.
* Reads (:meth:`~ClientState.snapshot`) are enqueued too and awaited, so a
  read sees every mutation submitted before it. A mutation racing with a
  read that was already queued may or may not be visible to it.
* Calls made from another thread while the worker's loop is running are
  handed to that loop, so the worker never moves between threads.

The authenticator is held through :func:`weakref.ref`. Once its owner
drops it, snapshots report ``None`` and the client carries on without
authorization.
"""

from __future__ import annotations

import asyncio
import weakref
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Mapping, Optional

from apiwire.auth.base import Authenticator

_Message = Callable[[], None]


@dataclass(frozen=True)
class StateSnapshot:
    """A point-in-time copy of the client's shared state."""

    headers: dict[str, str] = field(default_factory=dict)
    authenticator: Optional[Authenticator] = None


class ClientState:
    """Single-worker store for default headers and the authenticator reference.

    Outside a running event loop, mutations are applied directly after
    any queued ones. Mutations from a thread other than the one running
    the worker's loop are handed over with
    :meth:`~asyncio.AbstractEventLoop.call_soon_threadsafe`.

    Args:
        headers: Initial default headers.
        authenticator: Initial authenticator. Only weakly referenced.
    """

    def __init__(
        self,
        headers: Optional[Mapping[str, str]] = None,
        authenticator: Optional[Authenticator] = None,
    ) -> None:
        self._headers: dict[str, str] = dict(headers or {})
        self._authenticator_ref: Optional[weakref.ref[Authenticator]] = (
            weakref.ref(authenticator) if authenticator is not None else None
        )
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._inbox: Optional[asyncio.Queue[_Message]] = None
        self._worker: Optional[asyncio.Task[None]] = None

    # ------------------------------------------------------------------ #
    # Mutations (fire-and-forget)
    # ------------------------------------------------------------------ #

    def set_header(self, name: str, value: str) -> None:
        """Set default header *name* to *value*, replacing any previous value."""
        self._submit(partial(self._apply_set_header, name, value))

    def remove_header(self, name: str) -> None:
        """Remove default header *name* if present."""
        self._submit(partial(self._apply_remove_header, name))

    def set_authenticator(self, authenticator: Optional[Authenticator]) -> None:
        """Replace the authenticator. ``None`` detaches it."""
        self._submit(partial(self._apply_set_authenticator, authenticator))

    # ------------------------------------------------------------------ #
    # Reads
    # ------------------------------------------------------------------ #

    async def snapshot(self) -> StateSnapshot:
        """Return the state as of every mutation submitted before this call.

        When the worker lives on a loop running in another thread, the read
        is handed to that loop rather than moving the worker.
        """
        loop = self._worker_loop_elsewhere()
        if loop is not None:
            return await asyncio.wrap_future(asyncio.run_coroutine_threadsafe(self._snapshot_here(), loop))
        return await self._snapshot_here()

    async def aclose(self) -> None:
        """Stop the worker task. Queued mutations are applied first."""
        loop = self._worker_loop_elsewhere()
        if loop is not None:
            await asyncio.wrap_future(asyncio.run_coroutine_threadsafe(self._aclose_here(), loop))
            return
        await self._aclose_here()

    async def _snapshot_here(self) -> StateSnapshot:
        inbox = self._bind_to_running_loop()
        future: asyncio.Future[StateSnapshot] = asyncio.get_running_loop().create_future()
        inbox.put_nowait(partial(self._apply_snapshot, future))
        return await future

    async def _aclose_here(self) -> None:
        worker, self._worker = self._worker, None
        if worker is not None and not worker.done():
            worker.cancel()
            try:
                await worker
            except asyncio.CancelledError:
                pass
        self._drain()
        self._loop = None
        self._inbox = None

    # ------------------------------------------------------------------ #
    # Worker plumbing
    # ------------------------------------------------------------------ #

    def _submit(self, message: _Message) -> None:
        try:
            running: Optional[asyncio.AbstractEventLoop] = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        loop = self._loop
        if loop is not None and running is loop and self._worker_alive():
            assert self._inbox is not None
            self._inbox.put_nowait(message)
        elif loop is not None and loop.is_running() and self._worker_alive():
            # The worker's loop is running in another thread.
            assert self._inbox is not None
            loop.call_soon_threadsafe(self._inbox.put_nowait, message)
        elif running is not None:
            self._bind_to_running_loop().put_nowait(message)
        else:
            self._drain()
            message()

    def _worker_alive(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def _worker_loop_elsewhere(self) -> Optional[asyncio.AbstractEventLoop]:
        """The worker's loop if it is alive and running in another thread."""
        loop = self._loop
        if loop is None or not loop.is_running() or not self._worker_alive():
            return None
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        return None if running is loop else loop

    def _bind_to_running_loop(self) -> asyncio.Queue[_Message]:
        running = asyncio.get_running_loop()
        if self._loop is running and self._inbox is not None and self._worker_alive():
            return self._inbox

        # The previous loop is gone or the worker stopped; keep program order.
        self._drain()
        self._loop = running
        self._inbox = asyncio.Queue()
        self._worker = running.create_task(self._run(self._inbox))
        return self._inbox

    async def _run(self, inbox: asyncio.Queue[_Message]) -> None:
        while True:
            message = await inbox.get()
            message()

    def _drain(self) -> None:
        inbox = self._inbox
        if inbox is None:
            return
        while not inbox.empty():
            inbox.get_nowait()()

    # ------------------------------------------------------------------ #
    # Message handlers -- only ever run on the worker or under _drain
    # ------------------------------------------------------------------ #

    def _apply_set_header(self, name: str, value: str) -> None:
        self._apply_remove_header(name)
        self._headers[name] = value

    def _apply_remove_header(self, name: str) -> None:
        lowered = name.lower()
        for existing in [key for key in self._headers if key.lower() == lowered]:
            del self._headers[existing]

    def _apply_set_authenticator(self, authenticator: Optional[Authenticator]) -> None:
        self._authenticator_ref = weakref.ref(authenticator) if authenticator is not None else None

    def _apply_snapshot(self, future: asyncio.Future[StateSnapshot]) -> None:
        if future.done() or future.get_loop().is_closed():
            return
        authenticator = self._authenticator_ref() if self._authenticator_ref is not None else None
        future.set_result(StateSnapshot(headers=dict(self._headers), authenticator=authenticator))
