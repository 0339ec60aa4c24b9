"""Linear pipelines of dependent, fallible steps.

A pipeline names each intermediate value and reads top to bottom, replacing a
stack of nested ``bind`` calls::

    handled = await (
        Pipeline.begin("command", lambda _: validate(raw))
        .then("user", lambda b: authorize(b.command))
        .then("history", lambda b: load(b.command))            # may be async
        .let("booking", lambda b: decide(b.history, b.command, b.user))
        .then("emitted", lambda b: persist(b.booking))         # may be async
        .select(lambda b: Receipt(emitted=b.emitted))
        .run()
    )

Every step receives a read-only ``Bindings`` view of the values bound before
it. Steps run strictly in declaration order. The first ``Err`` ends the run
and is returned unchanged: no later step, ``let`` or projection is invoked.

Execution is asynchronous-first: a ``then`` step may return a result or an
awaitable of one, and plain results are treated as already resolved. Fully
synchronous pipelines can also be driven without an event loop through
``run_sync``.

Exceptions raised by a step callback are not caught; they propagate to the
caller of ``run``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
import inspect
import keyword
import logging
from time import perf_counter
from typing import TYPE_CHECKING, Any, Literal

from resultchain.config import FrozenConfig, resolve_config
from resultchain.errors import InvariantViolationError, PipelineDefinitionError
from resultchain.result import Err, Ok, Resolved, is_result

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

StepKind = Literal["then", "let", "select"]
StepOutcome = Literal["ok", "err", "value"]


class Bindings(Mapping[str, Any]):
    """Read-only view of the values bound so far, by step name.

    Values are reachable as attributes (``b.command``) or items
    (``b["command"]``).
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        object.__setattr__(self, "_values", dict(values or {}))

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._values[name]
        except KeyError:
            bound = ", ".join(self._values) or "nothing"
            raise AttributeError(
                f"No value bound as {name!r} (bound so far: {bound})"
            ) from None

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Bindings are read-only")

    def __repr__(self) -> str:
        return f"Bindings({self._values!r})"


@dataclass(frozen=True, slots=True)
class StepRecord:
    """One executed step: its name, kind, outcome and wall-clock duration."""

    name: str
    kind: StepKind
    outcome: StepOutcome
    duration_s: float


@dataclass(frozen=True, slots=True)
class PipelineTrace:
    """The steps a run executed, in order.

    ``short_circuited_at`` names the step whose ``Err`` ended the run, or is
    None when every step succeeded.
    """

    steps: tuple[StepRecord, ...] = ()
    short_circuited_at: str | None = None

    @property
    def step_names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.steps)

    @property
    def total_duration_s(self) -> float:
        return sum(s.duration_s for s in self.steps)

    @property
    def durations(self) -> dict[str, float]:
        """Return step durations keyed by step name."""
        return {s.name: s.duration_s for s in self.steps}


@dataclass(frozen=True, slots=True)
class _Step:
    name: str
    kind: StepKind
    fn: Callable[[Bindings], Any]


# Shadowed by Bindings' own attributes, or used for the projection's trace record
_RESERVED_NAMES = frozenset(
    {"select", *(n for n in dir(Bindings) if not n.startswith("__"))}
)


def _check_name(name: object, taken: tuple[str, ...]) -> str:
    if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
        raise PipelineDefinitionError(
            f"Step name must be a Python identifier, got {name!r}",
            hint="Names become attributes on Bindings, e.g. b.command",
        )
    if name.startswith("_") or name in _RESERVED_NAMES:
        raise PipelineDefinitionError(
            f"Step name {name!r} is reserved",
            hint="Pick a name that does not start with '_' and is not a Mapping method",
        )
    if name in taken:
        raise PipelineDefinitionError(f"Step name {name!r} is already bound")
    return name


@dataclass(frozen=True, slots=True)
class Pipeline:
    """An immutable, ordered chain of named steps.

    Builder methods return a new pipeline, so a shared prefix can be extended
    in several directions without interference.
    """

    steps: tuple[_Step, ...] = ()
    projection: Callable[[Bindings], Any] | None = field(default=None, repr=False)

    @classmethod
    def begin(cls, name: str, step: Callable[[Bindings], Any]) -> Pipeline:
        """Start a pipeline with a fallible step bound as ``name``."""
        return cls().then(name, step)

    @property
    def step_names(self) -> tuple[str, ...]:
        """Return the step names in execution order."""
        return tuple(s.name for s in self.steps)

    def then(self, name: str, step: Callable[[Bindings], Any]) -> Pipeline:
        """Bind the success value of a fallible step as ``name``.

        ``step`` returns ``Ok``/``Err`` or an awaitable resolving to one.
        """
        return self._append(_Step(_check_name(name, self.step_names), "then", step))

    def let(self, name: str, fn: Callable[[Bindings], Any]) -> Pipeline:
        """Bind the plain value computed by ``fn`` as ``name``."""
        return self._append(_Step(_check_name(name, self.step_names), "let", fn))

    def select(self, project: Callable[[Bindings], Any]) -> Pipeline:
        """Set the projection producing the final success value."""
        if self.projection is not None:
            raise PipelineDefinitionError("Pipeline already has a projection")
        if not self.steps:
            raise PipelineDefinitionError(
                "Cannot select from an empty pipeline",
                hint="Start with Pipeline.begin(name, step)",
            )
        return Pipeline(self.steps, project)

    def _append(self, step: _Step) -> Pipeline:
        if self.projection is not None:
            raise PipelineDefinitionError(
                f"Cannot add step {step.name!r} after select()",
                hint="select() must be the last call when building a pipeline",
            )
        return Pipeline((*self.steps, step))

    async def run(self, *, config: FrozenConfig | None = None) -> Ok[Any] | Err[Any]:
        """Run the steps in order and return the final result."""
        result, _trace = await self.run_traced(config=config)
        return result

    async def run_traced(
        self, *, config: FrozenConfig | None = None
    ) -> tuple[Ok[Any] | Err[Any], PipelineTrace]:
        """Run the steps in order, returning the result and what executed."""
        cfg = config if config is not None else resolve_config()
        return await self._execute(cfg, allow_async=True)

    def run_sync(self, *, config: FrozenConfig | None = None) -> Ok[Any] | Err[Any]:
        """Run a pipeline whose steps are all synchronous, without an event loop.

        Raises:
            PipelineDefinitionError: If a step returns an awaitable that is not
                already resolved.
        """
        cfg = config if config is not None else resolve_config()
        coro = self._execute(cfg, allow_async=False)
        try:
            coro.send(None)
        except StopIteration as done:
            result, _trace = done.value
            return result
        # Only reachable if something in the run actually suspended
        coro.close()
        raise InvariantViolationError(
            "Synchronous run suspended unexpectedly",
            hint="Use 'await pipeline.run()' for pipelines with async steps",
        )

    async def _execute(
        self, cfg: FrozenConfig, *, allow_async: bool
    ) -> tuple[Ok[Any] | Err[Any], PipelineTrace]:
        if not self.steps:
            raise PipelineDefinitionError(
                "Pipeline may not be empty; provide at least one step.",
                hint="Start with Pipeline.begin(name, step)",
            )

        bound: dict[str, Any] = {}
        records: list[StepRecord] = []
        last_value: Any = None

        for step in self.steps:
            log.debug("Pipeline step %r (%s) started", step.name, step.kind)
            start = perf_counter()
            out = step.fn(Bindings(bound))
            if step.kind == "then":
                out = await self._settle(step.name, out, allow_async=allow_async)
                if not is_result(out):
                    raise InvariantViolationError(
                        f"Step {step.name!r} returned {type(out).__name__}; "
                        "expected Ok or Err.",
                        step_name=step.name,
                        hint="Wrap plain values with Ok(...) or use let() instead",
                    )
            else:
                self._check_plain(step.name, out, strict=cfg.validate_steps)
            duration = perf_counter() - start
            self._check_slow(cfg, step.name, duration)

            if step.kind == "let":
                last_value = out
                outcome: StepOutcome = "value"
            elif isinstance(out, Err):
                records.append(StepRecord(step.name, step.kind, "err", duration))
                log.debug("Pipeline short-circuited at step %r", step.name)
                trace = PipelineTrace(tuple(records), short_circuited_at=step.name)
                self._report(cfg, trace)
                return out, trace
            else:
                last_value = out.value
                outcome = "ok"

            bound[step.name] = last_value
            records.append(StepRecord(step.name, step.kind, outcome, duration))
            log.debug("Pipeline step %r completed", step.name)

        if self.projection is not None:
            start = perf_counter()
            last_value = self.projection(Bindings(bound))
            self._check_plain("select", last_value, strict=cfg.validate_steps)
            duration = perf_counter() - start
            records.append(StepRecord("select", "select", "value", duration))

        trace = PipelineTrace(tuple(records))
        self._report(cfg, trace)
        return Ok(last_value), trace

    @staticmethod
    async def _settle(name: str, out: Any, *, allow_async: bool) -> Any:
        if not inspect.isawaitable(out):
            return out
        # Resolved never suspends
        if not allow_async and not isinstance(out, Resolved):
            if inspect.iscoroutine(out):
                out.close()
            raise PipelineDefinitionError(
                f"Step {name!r} returned an awaitable during a synchronous run",
                hint="Use 'await pipeline.run()' for pipelines with async steps",
            )
        return await out

    @staticmethod
    def _check_plain(name: str, value: Any, *, strict: bool) -> None:
        # Coroutines are never bound as plain values
        rejected = inspect.iscoroutine(value) or (
            strict and (is_result(value) or inspect.isawaitable(value))
        )
        if rejected:
            if inspect.iscoroutine(value):
                value.close()
            raise InvariantViolationError(
                f"{name!r} returned {type(value).__name__} where a plain value "
                "was expected",
                step_name=name,
                hint="Use then() for steps that can fail or need awaiting",
            )

    @staticmethod
    def _check_slow(cfg: FrozenConfig, name: str, duration: float) -> None:
        threshold = cfg.slow_step_threshold_s
        if threshold is not None and duration > threshold:
            log.warning(
                "Pipeline step %r took %.3fs (threshold %.3fs)",
                name,
                duration,
                threshold,
            )

    @staticmethod
    def _report(cfg: FrozenConfig, trace: PipelineTrace) -> None:
        if not cfg.trace:
            return
        log.debug(
            "Pipeline trace: steps=%s short_circuited_at=%s total=%.6fs",
            ", ".join(f"{s.name}:{s.outcome}" for s in trace.steps),
            trace.short_circuited_at,
            trace.total_duration_s,
        )


__all__ = ["Bindings", "Pipeline", "PipelineTrace", "StepRecord"]
