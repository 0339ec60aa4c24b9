"""Two-step composition with a projection over both values.

``compose(first, second, project)`` runs ``second`` on the value of
``first`` and combines both values with ``project``. Repeating it lets a
sequence of dependent fallible steps read as a flat chain rather than nested
case checks. Evaluation is strictly left to right and stops at the first
error:

- ``second`` runs at most once, and only if ``first`` succeeded
- ``project`` runs at most once, and only if both succeeded

``compose_async`` is the single asynchronous form. Either side may be a plain
result or an awaitable one; plain results count as already resolved.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from resultchain.aio import settle

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from resultchain.result import Err, Ok


def compose[A, B, C, E](
    first: Ok[A] | Err[E],
    second: Callable[[A], Ok[B] | Err[E]],
    project: Callable[[A, B], C],
) -> Ok[C] | Err[E]:
    """Bind ``second`` onto ``first`` and project both values."""
    return first.bind(lambda a: second(a).map(lambda b: project(a, b)))


async def compose_async[A, B, C, E](
    first: Ok[A] | Err[E] | Awaitable[Ok[A] | Err[E]],
    second: Callable[[A], Ok[B] | Err[E] | Awaitable[Ok[B] | Err[E]]],
    project: Callable[[A, B], C],
) -> Ok[C] | Err[E]:
    """Asynchronous ``compose`` accepting plain or awaitable results."""

    async def _then(a: A) -> Ok[C] | Err[E]:
        return (await settle(second(a))).map(lambda b: project(a, b))

    return await (await settle(first)).bind_async(_then)


__all__ = ["compose", "compose_async"]
