"""Configuration boundary tests: defaults, environment, overrides, validation."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import dotenv
import pytest

from resultchain import Ok, Pipeline
from resultchain.config import FrozenConfig, resolve_config
from resultchain.errors import ConfigurationError

pytestmark = pytest.mark.unit


def test_defaults_without_environment() -> None:
    assert resolve_config() == FrozenConfig(
        validate_steps=False, trace=False, slow_step_threshold_s=None
    )


def test_environment_values_are_parsed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESULTCHAIN_VALIDATE", "1")
    monkeypatch.setenv("RESULTCHAIN_TRACE", "true")
    monkeypatch.setenv("RESULTCHAIN_SLOW_STEP_THRESHOLD_S", " 0.25 ")

    cfg = resolve_config()

    assert cfg.validate_steps is True
    assert cfg.trace is True
    assert cfg.slow_step_threshold_s == 0.25


def test_blank_environment_values_are_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESULTCHAIN_TRACE", "   ")
    assert resolve_config().trace is False


def test_overrides_take_precedence_over_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("RESULTCHAIN_TRACE", "1")
    assert resolve_config(overrides={"trace": False}).trace is False


def test_invalid_environment_value_raises_with_hint(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("RESULTCHAIN_SLOW_STEP_THRESHOLD_S", "soon")

    with pytest.raises(ConfigurationError) as exc:
        resolve_config()

    assert "slow_step_threshold_s" in str(exc.value)
    assert exc.value.hint is not None
    assert "RESULTCHAIN_SLOW_STEP_THRESHOLD_S" in exc.value.hint


def test_negative_threshold_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="slow_step_threshold_s"):
        resolve_config(overrides={"slow_step_threshold_s": -1})


def test_unknown_override_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="tracing"):
        resolve_config(overrides={"tracing": True})


def test_frozen_config_is_immutable() -> None:
    cfg = resolve_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        cfg.trace = True  # type: ignore[misc]


@pytest.mark.allow_dotenv
def test_dotenv_file_is_loaded(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".env").write_text("RESULTCHAIN_TRACE=1\n")
    monkeypatch.chdir(tmp_path)

    assert resolve_config().trace is True


@pytest.mark.asyncio
async def test_dotenv_is_searched_once_across_pipeline_runs(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[bool] = []

    def counting_find_dotenv(*_args: object, **_kwargs: object) -> str:
        calls.append(True)
        return ""

    monkeypatch.setattr(dotenv, "find_dotenv", counting_find_dotenv)
    pipeline = Pipeline.begin("a", lambda _: Ok(1))

    for _ in range(5):
        assert await pipeline.run() == Ok(1)
    pipeline.run_sync()

    assert len(calls) == 1
