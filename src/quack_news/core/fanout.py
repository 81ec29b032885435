"""Paced fan-out of coroutines with join-all and per-task error capture."""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class TaskResult(Generic[T]):
    """Outcome of one dispatched task: a value or the error it raised."""

    label: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def dispatch_paced(
    jobs: Sequence[tuple[str, Callable[[], Awaitable[T]]]],
    delay: float = 0.0,
    cancel: Optional[asyncio.Event] = None,
    on_dispatched: Optional[Callable[[], None]] = None,
) -> list[TaskResult[T]]:
    """Start each job as a task, sleeping ``delay`` between dispatches.

    Jobs are ``(label, factory)`` pairs. Once ``cancel`` is set no further
    jobs are started; tasks already running are awaited to completion.
    ``on_dispatched`` is called once every job has been started, before
    joining. Errors never propagate: every started task yields one
    ``TaskResult``, in dispatch order.
    """
    labels: list[str] = []
    tasks: list[asyncio.Task] = []

    for i, (label, factory) in enumerate(jobs):
        if cancel is not None and cancel.is_set():
            break
        if i > 0 and delay > 0:
            await asyncio.sleep(delay)
            if cancel is not None and cancel.is_set():
                break
        labels.append(label)
        tasks.append(asyncio.create_task(factory()))

    if on_dispatched is not None:
        on_dispatched()

    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    results: list[TaskResult[T]] = []
    for label, outcome in zip(labels, outcomes):
        if isinstance(outcome, BaseException):
            results.append(TaskResult(label=label, error=outcome))
        else:
            results.append(TaskResult(label=label, value=outcome))
    return results
