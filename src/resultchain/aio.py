"""Asynchronous helpers for results.

Steps in a chain may return a result directly or an awaitable of one. The
helpers here treat both uniformly: a plain result is handled as if it had
already resolved, so synchronous and asynchronous steps mix freely in one
chain without changing ordering or short-circuit behavior.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from resultchain.result import Ok, Resolved, resolved

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from resultchain.result import Err

    type MaybeAwaitable[X] = X | Awaitable[X]


async def settle[X](obj: MaybeAwaitable[X]) -> X:
    """Await ``obj`` if it is awaitable, otherwise return it as-is."""
    if inspect.isawaitable(obj):
        return await obj
    return obj


def to_async[V](value: V) -> Resolved[Ok[V]]:
    """Wrap a bare success value as an already-resolved ``Ok``."""
    return resolved(Ok(value))


async def map_async[T, U, E](
    first: MaybeAwaitable[Ok[T] | Err[E]], f: Callable[[T], U]
) -> Ok[U] | Err[E]:
    """Wait for ``first`` and map its success value through ``f``."""
    return (await settle(first)).map(f)


async def bind_async[T, U, E](
    first: MaybeAwaitable[Ok[T] | Err[E]],
    f: Callable[[T], MaybeAwaitable[Ok[U] | Err[E]]],
) -> Ok[U] | Err[E]:
    """Wait for ``first`` and chain ``f`` onto its success value.

    ``f`` may return a result or an awaitable of one. An error from ``first``
    is returned unchanged and ``f`` is never invoked.
    """

    async def _step(value: Any) -> Ok[U] | Err[E]:
        return await settle(f(value))

    return await (await settle(first)).bind_async(_step)


__all__ = ["bind_async", "map_async", "resolved", "settle", "to_async"]
