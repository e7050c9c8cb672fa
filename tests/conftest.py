from __future__ import annotations

from collections.abc import Generator

import pytest

from layered_state.config import LayeredStateSettings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    # Keep settings independent of the developer shell and any local .env file
    monkeypatch.delenv("LAYERED_STATE_INJECTION_POLICY", raising=False)
    monkeypatch.delenv("LAYERED_STATE_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)
    yield


@pytest.fixture
def settings() -> LayeredStateSettings:
    return LayeredStateSettings(injection_policy="always_append", log_level="DEBUG")
