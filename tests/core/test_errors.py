"""Tests for scatter.core.errors — structured error hierarchy."""

from __future__ import annotations

import pytest

from scatter.core.errors import (
    ConfigError,
    DuplicateOutcomeError,
    DuplicateUnitError,
    ErrorCategory,
    ErrorContext,
    IncompleteDrainError,
    InvalidTransitionError,
    ScatterError,
    SinkError,
    SinkRequiredError,
    TransportError,
    UnitTimeoutError,
    UnknownStrategyError,
    describe_error,
    root_cause,
)


class TestErrorContext:
    def test_empty_to_dict(self):
        assert ErrorContext().to_dict() == {}

    def test_to_dict_skips_none_and_merges_metadata(self):
        ctx = ErrorContext(unit="http://a", run_id="r1", metadata={"attempt": 1})
        assert ctx.to_dict() == {"unit": "http://a", "run_id": "r1", "attempt": 1}


class TestScatterError:
    def test_defaults(self):
        err = ScatterError("boom")
        assert err.message == "boom"
        assert err.category is ErrorCategory.INTERNAL
        assert err.retryable is False
        assert err.cause is None

    def test_cause_is_chained(self):
        cause = OSError("refused")
        err = ScatterError("wrapped", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "refused"

    def test_with_context_sets_known_fields_and_metadata(self):
        err = ScatterError("x").with_context(unit="http://a", strategy="serial_stream", extra=5)
        assert err.context.unit == "http://a"
        assert err.context.strategy == "serial_stream"
        assert err.context.metadata == {"extra": 5}

    def test_to_dict(self):
        err = TransportError("GET http://a failed").with_context(url="http://a")
        data = err.to_dict()
        assert data["error_type"] == "TransportError"
        assert data["category"] == "NETWORK"
        assert data["retryable"] is True
        assert data["context"] == {"url": "http://a"}

    def test_repr(self):
        assert repr(ConfigError("bad")) == "ConfigError('bad', category=CONFIG)"

    def test_explicit_category_overrides_default(self):
        err = TransportError("x", category=ErrorCategory.INTERNAL, retryable=False)
        assert err.category is ErrorCategory.INTERNAL
        assert err.retryable is False


class TestSubclasses:
    def test_timeout_message(self):
        err = UnitTimeoutError(5.0, elapsed=5.01)
        assert str(err) == "timed out after 5s"
        assert err.timeout == 5.0
        assert err.elapsed == 5.01
        assert err.category is ErrorCategory.TIMEOUT

    def test_unknown_strategy_lists_known(self):
        err = UnknownStrategyError("fastest", ["serial_collect", "concurrent"])
        assert isinstance(err, ConfigError)
        assert "'fastest'" in str(err)
        assert "serial_collect, concurrent" in str(err)

    def test_sink_required(self):
        err = SinkRequiredError("as_completed")
        assert isinstance(err, ConfigError)
        assert err.strategy == "as_completed"

    def test_duplicate_unit(self):
        assert DuplicateUnitError("http://a").unit == "http://a"

    def test_sink_errors(self):
        drain = IncompleteDrainError([1, 2])
        dup = DuplicateOutcomeError(0, "A")
        assert isinstance(drain, SinkError) and isinstance(dup, SinkError)
        assert drain.missing == [1, 2]
        assert drain.category is ErrorCategory.SINK

    def test_invalid_transition_is_value_error(self):
        err = InvalidTransitionError("completed", "running")
        assert isinstance(err, ValueError)
        assert str(err) == "Invalid RunStatus transition: completed → running"


class TestRootCause:
    def test_walks_explicit_chain(self):
        inner = ConnectionRefusedError("connection refused")
        try:
            try:
                raise inner
            except ConnectionRefusedError as e:
                raise TransportError("fetch failed", cause=e) from e
        except TransportError as outer:
            assert root_cause(outer) is inner
            assert describe_error(outer) == "connection refused"

    def test_no_chain_returns_self(self):
        err = ValueError("plain")
        assert root_cause(err) is err

    def test_describe_falls_back_to_class_name(self):
        assert describe_error(TimeoutError()) == "TimeoutError"

    def test_cycle_terminates(self):
        a = ValueError("a")
        b = ValueError("b")
        a.__cause__ = b
        b.__cause__ = a
        assert root_cause(a) in (a, b)


@pytest.mark.parametrize(
    "cls,category",
    [
        (TransportError, ErrorCategory.NETWORK),
        (ConfigError, ErrorCategory.CONFIG),
        (SinkError, ErrorCategory.SINK),
    ],
)
def test_default_categories(cls, category):
    assert cls("x").category is category
