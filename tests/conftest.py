"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

import time
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Iterable

import pytest

from live_checker.config import CheckerConfig, ConfigLocator, ConfigRepository
from live_checker.engine import CheckOutcome


class FakeProbe:
    """In-memory probe recording call order and peak concurrency."""

    def __init__(
        self,
        outcomes: dict[str, CheckOutcome] | None = None,
        delays: dict[str, float] | None = None,
        fail: Iterable[str] = (),
        default: CheckOutcome = CheckOutcome.LIVE,
    ) -> None:
        self.outcomes = outcomes or {}
        self.delays = delays or {}
        self.fail = set(fail)
        self.default = default
        self.started: list[str] = []
        self.finished: list[str] = []
        self.in_flight = 0
        self.peak = 0
        self._lock = Lock()

    def probe(self, uid: str) -> CheckOutcome:
        with self._lock:
            self.started.append(uid)
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            delay = self.delays.get(uid, 0.0)
            if delay:
                time.sleep(delay)
            if uid in self.fail:
                raise RuntimeError(f"probe exploded for {uid}")
            return self.outcomes.get(uid, self.default)
        finally:
            with self._lock:
                self.in_flight -= 1
                self.finished.append(uid)


def make_ids(count: int, start: int = 10000000000001) -> list[str]:
    return [str(start + offset) for offset in range(count)]


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("LIVE_CHECKER_HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def fake_probe() -> Callable[..., FakeProbe]:
    return FakeProbe


@pytest.fixture
def id_factory() -> Callable[..., list[str]]:
    return make_ids


@pytest.fixture
def checker_config() -> Callable[..., CheckerConfig]:
    def _builder(**overrides: Any) -> CheckerConfig:
        base: dict[str, Any] = {
            "concurrency_bound": 2,
            "remote_endpoint_base": "https://graph.example.com",
            "request_timeout": 5.0,
        }
        base.update(overrides)
        return CheckerConfig(**base)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> ConfigRepository:
    locator = ConfigLocator(project_root=tmp_path)
    return ConfigRepository(locator)
