"""Synchronous entry points for async operations.

``_run_sync()`` lets scripts and the CLI call operations without managing
an event loop:

  - No event loop running: ``asyncio.run()``
  - Event loop already running (Jupyter, etc.): the coroutine is handed
    to a daemon thread that owns a private event loop
"""

from __future__ import annotations

import asyncio
import threading
from typing import Coroutine, TypeVar

T = TypeVar("T")

_loop: asyncio.AbstractEventLoop | None = None
_thread: threading.Thread | None = None
_lock = threading.Lock()


def _background_loop() -> asyncio.AbstractEventLoop:
    """Return the shared background loop, starting its thread on first use."""
    global _loop, _thread
    with _lock:
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
            _thread = threading.Thread(
                target=_loop.run_forever, name="ensres-sync", daemon=True
            )
            _thread.start()
    return _loop


def _run_sync(coro: Coroutine[..., ..., T]) -> T:
    """Run *coro* to completion from synchronous code and return its result."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    future = asyncio.run_coroutine_threadsafe(coro, _background_loop())
    return future.result()
