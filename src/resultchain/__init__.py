"""resultchain: two-case results and the combinators that chain them.

Public API:
    - Ok / Err: the two result cases, with map, bind, bind_async and fold
    - compose / compose_async: two-step composition with a projection
    - Pipeline: named, linear chains of sync and async fallible steps
    - resolve_config: environment-backed runtime configuration
"""

from __future__ import annotations

import logging

from resultchain.aio import bind_async, map_async, settle, to_async
from resultchain.compose import compose, compose_async
from resultchain.config import FrozenConfig, resolve_config
from resultchain.errors import (
    ConfigurationError,
    InvariantViolationError,
    PipelineDefinitionError,
    ResultchainError,
)
from resultchain.pipeline import Bindings, Pipeline, PipelineTrace, StepRecord
from resultchain.result import (
    Err,
    Ok,
    Resolved,
    Result,
    from_value,
    is_result,
    resolved,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("resultchain")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("resultchain").addHandler(logging.NullHandler())

__all__ = [
    "Bindings",
    "ConfigurationError",
    "Err",
    "FrozenConfig",
    "InvariantViolationError",
    "Ok",
    "Pipeline",
    "PipelineDefinitionError",
    "PipelineTrace",
    "Resolved",
    "Result",
    "ResultchainError",
    "StepRecord",
    "bind_async",
    "compose",
    "compose_async",
    "from_value",
    "is_result",
    "map_async",
    "resolve_config",
    "resolved",
    "settle",
    "to_async",
]
