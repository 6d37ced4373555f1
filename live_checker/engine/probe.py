"""Single-identifier liveness probe against the profile-picture endpoint."""

from __future__ import annotations

from enum import Enum
from typing import Any

import httpx
import structlog

from ..config import CheckerConfig


class CheckOutcome(str, Enum):
    """Classification of one probed identifier."""

    LIVE = "live"
    DEAD = "dead"
    # Only produced when ``report_errors`` is enabled.
    ERROR = "error"


class LivenessProbe:
    """Issue one GET per identifier and classify the redirect target.

    The remote service answers a picture request for a removed account with a
    redirect to a placeholder asset whose URL carries ``dead_marker``. Any
    failure to get an answer is folded into the failure outcome so callers
    only ever see a :class:`CheckOutcome`.
    """

    def __init__(
        self,
        config: CheckerConfig,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or structlog.get_logger("live_checker.probe")
        self._owns_client = client is None
        self._client = client or self._build_client(config)

    @staticmethod
    def _build_client(config: CheckerConfig) -> httpx.Client:
        kwargs: dict[str, Any] = {
            "follow_redirects": True,
            "timeout": config.request_timeout,
            # pool sized to the concurrency bound
            "limits": httpx.Limits(
                max_connections=config.concurrency_bound,
                max_keepalive_connections=config.concurrency_bound,
            ),
        }
        if config.user_agent:
            kwargs["headers"] = {"User-Agent": config.user_agent}
        if config.proxy:
            kwargs["proxy"] = config.proxy
        return httpx.Client(**kwargs)

    @property
    def failure_outcome(self) -> CheckOutcome:
        return CheckOutcome.ERROR if self.config.report_errors else CheckOutcome.DEAD

    def picture_url(self, uid: str) -> str:
        return f"{self.config.remote_endpoint_base}/{uid}/picture"

    def probe(self, uid: str) -> CheckOutcome:
        url = self.picture_url(uid)
        try:
            # Only the resolved location matters, the image body is never read.
            with self._client.stream(
                "GET",
                url,
                params={"type": self.config.picture_type},
                timeout=self.config.request_timeout,
            ) as response:
                final_url = str(response.url)
                status_code = response.status_code
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("probe_failed", uid=uid, error=str(exc), error_type=type(exc).__name__)
            return self.failure_outcome

        if status_code >= 400:
            self.logger.warning("probe_failed", uid=uid, status=status_code, final_url=final_url)
            return self.failure_outcome
        outcome = self.classify(final_url)
        self.logger.debug("probe_finished", uid=uid, outcome=outcome.value, final_url=final_url)
        return outcome

    def classify(self, final_url: str) -> CheckOutcome:
        if self.config.dead_marker in final_url:
            return CheckOutcome.DEAD
        return CheckOutcome.LIVE

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "LivenessProbe":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["CheckOutcome", "LivenessProbe"]
