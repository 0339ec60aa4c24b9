"""Result values for explicit, composable error handling.

A result is exactly one of two cases, fixed at construction:

- ``Ok(value)`` for a successful outcome
- ``Err(error)`` for a failed outcome

Both cases are frozen dataclasses. Combinators never mutate a result; they
return a new one, or pass an ``Err`` through untouched. Once an error is
present no further callback runs, so a chain of ``bind`` calls stops at the
first failure.

Example:
    >>> def parse(raw: str) -> Result[int, str]:
    ...     return Ok(int(raw)) if raw.isdigit() else Err(f"not a number: {raw!r}")
    >>> parse("20").map(lambda n: n * 2)
    Ok(value=40)
    >>> parse("x").bind(lambda n: Ok(n + 1)).fold(lambda e: e, str)
    "not a number: 'x'"
"""

from __future__ import annotations

from dataclasses import dataclass
import typing
from typing import TYPE_CHECKING, Any, Never, TypeGuard

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Generator

T = typing.TypeVar("T")
E = typing.TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result holding ``value``."""

    value: T

    def map[U](self, f: Callable[[T], U]) -> Ok[U]:
        """Return ``Ok(f(value))``."""
        return Ok(f(self.value))

    def bind[U, F](self, f: Callable[[T], Ok[U] | Err[F]]) -> Ok[U] | Err[F]:
        """Return whatever ``f(value)`` returns, including its own ``Err``."""
        return f(self.value)

    def bind_async[U, F](
        self, f: Callable[[T], Awaitable[Ok[U] | Err[F]]]
    ) -> Awaitable[Ok[U] | Err[F]]:
        """Return an awaitable resolving to the result of ``f(value)``.

        ``f`` is invoked when the returned awaitable is awaited.
        """
        return _bind_ok(f, self.value)

    def fold[R](self, on_err: Callable[[Never], R], on_ok: Callable[[T], R]) -> R:
        """Reconcile both cases to one type; only ``on_ok`` runs here."""
        return on_ok(self.value)


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result holding ``error``."""

    error: E

    def map(self, f: Callable[[Any], Any]) -> Err[E]:
        """Return this error unchanged; ``f`` is never invoked."""
        return self

    def bind(self, f: Callable[[Any], Any]) -> Err[E]:
        """Return this error unchanged; ``f`` is never invoked."""
        return self

    def bind_async(self, f: Callable[[Any], Any]) -> Resolved[Err[E]]:
        """Return this error as an already-resolved awaitable.

        Awaiting it never yields to the event loop and ``f`` is never invoked.
        """
        return Resolved(self)

    def fold[R](self, on_err: Callable[[E], R], on_ok: Callable[[Never], R]) -> R:
        """Reconcile both cases to one type; only ``on_err`` runs here."""
        return on_err(self.error)


Result = Ok[T] | Err[E]


class Resolved[T]:
    """An awaitable that is complete from the start.

    Awaiting it returns the wrapped value on the calling turn, without a
    suspension point. Unlike a coroutine it can be awaited any number of times.
    """

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    def __await__(self) -> Generator[Any, None, T]:
        return self._value
        yield  # pragma: no cover - marks this as a generator

    def __repr__(self) -> str:
        return f"Resolved({self._value!r})"


async def _bind_ok[V, U, F](
    f: Callable[[V], Awaitable[Ok[U] | Err[F]]], value: V
) -> Ok[U] | Err[F]:
    return await f(value)


def from_value[V](value: V) -> Ok[V]:
    """Wrap a bare success value; the explicit form of ``Ok(value)``."""
    return Ok(value)


def is_result(obj: object) -> TypeGuard[Ok[Any] | Err[Any]]:
    """Return True when ``obj`` is an ``Ok`` or an ``Err``."""
    return isinstance(obj, Ok | Err)


def resolved[V](value: V) -> Resolved[V]:
    """Wrap any value as an immediately-completing awaitable."""
    return Resolved(value)


__all__ = [
    "Err",
    "Ok",
    "Resolved",
    "Result",
    "from_value",
    "is_result",
    "resolved",
]
