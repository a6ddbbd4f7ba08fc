"""Tests for Outcome — the terminal, non-raising per-unit result."""

from __future__ import annotations

from scatter.execution.outcome import Outcome, OutcomeStatus
from scatter.execution.units import Unit

UNIT = Unit("http://www.google.com", 1)


class TestFactories:
    def test_success(self):
        outcome = Outcome.success(UNIT, "OK", elapsed=0.2)
        assert outcome.ok
        assert outcome.status is OutcomeStatus.SUCCESS
        assert outcome.unit == "http://www.google.com"
        assert outcome.index == 1
        assert outcome.error_type is None

    def test_failure(self):
        outcome = Outcome.failure(UNIT, "Name or service not known", error_type="gaierror")
        assert not outcome.ok
        assert outcome.status is OutcomeStatus.FAILURE
        assert outcome.error_type == "gaierror"

    def test_timeout(self):
        outcome = Outcome.timeout(UNIT, 5.0, elapsed=5.0)
        assert outcome.status is OutcomeStatus.TIMEOUT
        assert outcome.detail == "timed out after 5s"
        assert outcome.error_type == "UnitTimeoutError"

    def test_timeout_fractional_deadline(self):
        assert Outcome.timeout(UNIT, 0.25).detail == "timed out after 0.25s"


class TestRendering:
    def test_message_format(self):
        assert Outcome.success(UNIT, "OK").message == "http://www.google.com -> OK"

    def test_failure_message_carries_reason(self):
        outcome = Outcome.failure(UNIT, "connection refused")
        assert str(outcome) == "http://www.google.com -> connection refused"

    def test_to_dict(self):
        data = Outcome.success(UNIT, "Not Found", elapsed=0.1).to_dict()
        assert data == {
            "unit": "http://www.google.com",
            "index": 1,
            "status": "success",
            "detail": "Not Found",
            "error_type": None,
            "elapsed_seconds": 0.1,
        }
