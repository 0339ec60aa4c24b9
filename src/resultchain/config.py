"""Configuration: a pydantic schema resolved into a frozen runtime config.

Values come from ``RESULTCHAIN_*`` environment variables (a project ``.env``
file is loaded first) and explicit overrides, in increasing precedence.
All resolution flows through ``Settings`` so invalid values fail early with
a ``ConfigurationError``.

Example:
    config = resolve_config(overrides={"trace": True})
    result = await pipeline.run(config=config)
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import TYPE_CHECKING, Any

import dotenv
from pydantic import BaseModel, Field, ValidationError

from resultchain.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

# Environment variable -> Settings field
_ENV_VARS: dict[str, str] = {
    "RESULTCHAIN_VALIDATE": "validate_steps",
    "RESULTCHAIN_TRACE": "trace",
    "RESULTCHAIN_SLOW_STEP_THRESHOLD_S": "slow_step_threshold_s",
}

_DOTENV_LOADED = False


class Settings(BaseModel):
    """Schema for configuration fields, defaults and validation rules."""

    #: Reject ``let``/``select`` callbacks that return a result or awaitable.
    validate_steps: bool = Field(default=False)
    #: Log the per-step trace of every pipeline run at DEBUG.
    trace: bool = Field(default=False)
    #: Log a warning for pipeline steps slower than this many seconds.
    slow_step_threshold_s: float | None = Field(default=None, ge=0)

    model_config = {"extra": "forbid"}


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable runtime configuration handed to pipeline runs."""

    validate_steps: bool = False
    trace: bool = False
    slow_step_threshold_s: float | None = None


def _try_load_dotenv() -> None:
    """Load the nearest `.env` from the working directory, once per process."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    _DOTENV_LOADED = True
    env_file = dotenv.find_dotenv(usecwd=True)
    if env_file:
        dotenv.load_dotenv(env_file, override=False)


def _env_values() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for env_var, field_name in _ENV_VARS.items():
        raw = os.environ.get(env_var)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()
    return values


def resolve_config(overrides: Mapping[str, Any] | None = None) -> FrozenConfig:
    """Resolve configuration from the environment and explicit overrides.

    Args:
        overrides: Field values taking precedence over the environment.

    Returns:
        The validated, immutable configuration.

    Raises:
        ConfigurationError: If a value is invalid or a field is unknown.
    """
    _try_load_dotenv()
    raw = _env_values()
    if overrides:
        raw.update(overrides)
    try:
        settings = Settings.model_validate(raw)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
        raise ConfigurationError(
            f"Invalid configuration for '{field}': {first.get('msg')}",
            hint=(
                "Known fields: validate_steps, trace, slow_step_threshold_s "
                "(environment: " + ", ".join(_ENV_VARS) + ")"
            ),
        ) from e
    return FrozenConfig(**settings.model_dump())


__all__ = ["FrozenConfig", "Settings", "resolve_config"]
