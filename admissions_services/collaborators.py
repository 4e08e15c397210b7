"""
admissions_services.collaborators -- bounded-time collaborator calls.

Responsibility:
    Runs synchronous collaborators (document generator, student id issuer)
    on a worker pool so the workflow engine never blocks on them longer
    than the configured time budget.  Every failure mode is translated to
    a ``CollaboratorError`` before it reaches the engine.

Architecture position:
    Services layer.  Used by ``AdmissionService``; knows nothing about
    admissions beyond the collaborator name used in errors and logs.

Invariants enforced:
    - A collaborator result is returned only if the call finished inside
      the budget.
    - Timeouts raise ``CollaboratorTimeoutError``; any other exception
      raised by the collaborator is wrapped in ``CollaboratorError`` with
      the original chained as ``__cause__``.

Failure modes:
    - A timed-out call keeps running on its worker thread until it
      returns; its result is discarded.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, TypeVar

from admissions_kernel.exceptions import CollaboratorError, CollaboratorTimeoutError
from admissions_kernel.logging_config import get_logger

logger = get_logger("services.collaborators")

T = TypeVar("T")


class CollaboratorInvoker:
    """
    Invoke collaborator callables with a bounded timeout.

    Contract:
        ``call(name, fn, *args, **kwargs)`` returns ``fn``'s result or raises
        ``CollaboratorError`` / ``CollaboratorTimeoutError``.

    Non-goals:
        - Retries.  The engine never retries; callers decide.
    """

    def __init__(self, timeout_seconds: float = 10.0, max_workers: int = 4):
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._timeout_seconds = timeout_seconds
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="admissions-collaborator",
        )

    @property
    def timeout_seconds(self) -> float:
        return self._timeout_seconds

    def call(self, name: str, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        start = time.monotonic()
        future = self._executor.submit(fn, *args, **kwargs)
        done, _ = wait([future], timeout=self._timeout_seconds)
        duration_ms = (time.monotonic() - start) * 1000

        if not done:
            future.cancel()
            logger.warning(
                "collaborator_timeout",
                extra={
                    "collaborator": name,
                    "timeout_seconds": self._timeout_seconds,
                },
            )
            raise CollaboratorTimeoutError(name, self._timeout_seconds)

        exc = future.exception()
        if exc is not None:
            logger.warning(
                "collaborator_failed",
                extra={
                    "collaborator": name,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                    "duration_ms": round(duration_ms, 3),
                },
            )
            if isinstance(exc, CollaboratorError):
                raise exc
            raise CollaboratorError(name, str(exc) or type(exc).__name__) from exc

        logger.debug(
            "collaborator_completed",
            extra={"collaborator": name, "duration_ms": round(duration_ms, 3)},
        )
        return future.result()

    def shutdown(self) -> None:
        """Stop accepting calls; running calls are left to finish."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> CollaboratorInvoker:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()
