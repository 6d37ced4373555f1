from __future__ import annotations

import httpx
import pytest
import structlog

from live_checker.config import SchedulingMode
from live_checker.engine import CheckOutcome, LivenessProbe
from live_checker.runner import (
    CheckRunner,
    EmptyInputError,
    InputValidationError,
    NoValidIdsError,
    RunInProgressError,
)


@pytest.fixture
def runner_factory(checker_config, fake_probe):
    def _build(probe=None, **overrides) -> CheckRunner:
        return CheckRunner(
            checker_config(**overrides),
            probe=probe or fake_probe(),
            logger=structlog.get_logger("live_checker.tests"),
        )

    return _build


def test_prepare_collapses_identical_ids_from_different_formats(runner_factory) -> None:
    text = "100012345678901\nuser_100012345678901\nhttps://x.com/100012345678901"
    prepared = runner_factory().prepare(text)
    assert prepared.ids == ("10001234567890",)
    assert prepared.line_count == 3


def test_prepare_rejects_input_without_valid_ids(runner_factory) -> None:
    with pytest.raises(NoValidIdsError):
        runner_factory().prepare("12345\nabc\n")


@pytest.mark.parametrize("text", ["", "   \n\n"])
def test_prepare_rejects_empty_input(runner_factory, text) -> None:
    with pytest.raises(EmptyInputError):
        runner_factory().prepare(text)
    assert issubclass(EmptyInputError, InputValidationError)


def test_prepare_caps_lines(runner_factory, id_factory) -> None:
    ids = id_factory(5, start=11111111111111)
    prepared = runner_factory(max_ids=3).prepare("\n".join(ids))
    assert prepared.ids == tuple(ids[:3])
    assert prepared.dropped_lines == 2


def test_run_three_ids_with_bound_two(runner_factory, id_factory) -> None:
    ids = id_factory(3, start=11111111111111)
    snapshots = []
    final = runner_factory().run("\n".join(ids), on_progress=snapshots.append)

    assert len(snapshots) == 2
    assert [snap.processed for snap in snapshots] == [2, 3]
    assert final.processed == final.total == 3
    assert len(final.live) + len(final.dead) == 3
    assert set(final.live).isdisjoint(final.dead)


def test_failed_probe_lands_in_dead_without_run_error(checker_config) -> None:
    broken = "22222222222222"

    def handle(request: httpx.Request) -> httpx.Response:
        if broken in request.url.path:
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(200, content=b"img")

    with httpx.Client(transport=httpx.MockTransport(handle), follow_redirects=True) as client:
        config = checker_config()
        runner = CheckRunner(
            config,
            probe=LivenessProbe(config, client=client),
            logger=structlog.get_logger("live_checker.tests"),
        )
        final = runner.run("11111111111111\n22222222222222\n33333333333333")

    assert broken in final.dead
    assert broken not in final.live
    assert final.live == ("11111111111111", "33333333333333")


def test_report_errors_routes_failures_to_errors(runner_factory, fake_probe) -> None:
    final = runner_factory(
        probe=fake_probe(fail=["22222222222222"]), report_errors=True
    ).run("11111111111111\n22222222222222")
    assert final.errors == ("22222222222222",)
    assert final.dead == ()


def test_pool_mode_run(runner_factory, fake_probe, id_factory) -> None:
    ids = id_factory(7, start=11111111111111)
    probe = fake_probe(outcomes={ids[3]: CheckOutcome.DEAD})
    final = runner_factory(probe=probe, scheduling=SchedulingMode.POOL, concurrency_bound=3).run("\n".join(ids))
    assert final.processed == 7
    assert final.dead == (ids[3],)
    assert probe.peak <= 3


def test_second_run_while_busy_is_rejected(runner_factory) -> None:
    runner = runner_factory()
    errors = []

    def reenter(_snapshot) -> None:
        assert runner.busy
        try:
            runner.run("33333333333333")
        except RunInProgressError as exc:
            errors.append(exc)

    final = runner.run("11111111111111\n22222222222222", on_progress=reenter)
    assert final.processed == 2
    assert len(errors) == 1
    assert not runner.busy


def test_cancel_active_run(runner_factory, id_factory) -> None:
    runner = runner_factory()
    assert runner.cancel() is False
    ids = id_factory(6, start=11111111111111)
    final = runner.run("\n".join(ids), on_progress=lambda _snap: runner.cancel())
    assert final.processed == 2
    assert final.total == 6
