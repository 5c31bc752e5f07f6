from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Mapping, Sequence, TypeVar

from ..core.exceptions import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def fetch_all(tasks: Mapping[str, Callable[[], Any]], *, timeout: float) -> dict[str, Any]:
    """Run independent read callables concurrently and join their results.

    Order between reads is irrelevant: each caller only consumes the joined
    snapshot. All reads share one deadline of `timeout` seconds. Any failure
    or a read still running at the deadline becomes a StorageError naming
    the read. No retries.
    """

    if not tasks:
        return {}

    results: dict[str, Any] = {}
    pool = ThreadPoolExecutor(max_workers=len(tasks))
    try:
        futures = {name: pool.submit(fn) for name, fn in tasks.items()}
        _, not_done = wait(futures.values(), timeout=timeout)
        for name, fut in futures.items():
            if fut in not_done:
                logger.warning("read %s timed out after %.1fs", name, timeout)
                raise StorageError(f"{name} read timed out", operation=name)

        for name, fut in futures.items():
            try:
                results[name] = fut.result()
            except StorageError:
                raise
            except Exception as e:
                logger.warning("read %s failed: %s", name, e)
                raise StorageError(f"{name} read failed", operation=name) from e
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
    return results


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    return [list(items[i : i + size]) for i in range(0, len(items), size)]
