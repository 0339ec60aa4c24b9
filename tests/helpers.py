"""Test helpers (small, reusable doubles).

Call-recording callables let tests assert exactly which callbacks a chain
invoked, and in what order, without bespoke closures in every test.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Recorder:
    """Shared log of callback names in invocation order."""

    calls: list[str] = field(default_factory=list)

    def stub(self, name: str, returns: Any) -> Stub:
        return Stub(name=name, returns=returns, recorder=self)

    def async_stub(self, name: str, returns: Any, *, yields: bool = True) -> AsyncStub:
        return AsyncStub(name=name, returns=returns, recorder=self, yields=yields)


@dataclass
class Stub:
    """Synchronous callable returning a fixed value and counting its calls."""

    name: str = "stub"
    returns: Any = None
    recorder: Recorder | None = None
    args: list[tuple[Any, ...]] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        return len(self.args)

    def __call__(self, *args: Any) -> Any:
        self.args.append(args)
        if self.recorder is not None:
            self.recorder.calls.append(self.name)
        return self.returns


@dataclass
class AsyncStub(Stub):
    """Async variant of ``Stub``; yields to the event loop once when awaited."""

    yields: bool = True

    async def _respond(self) -> Any:
        if self.yields:
            await asyncio.sleep(0)
        return self.returns

    def __call__(self, *args: Any) -> Any:
        self.args.append(args)
        if self.recorder is not None:
            self.recorder.calls.append(self.name)
        return self._respond()
