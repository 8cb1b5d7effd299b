"""Tests for wayfinder.errors — exception hierarchy and failure reporting."""

import logging

import pytest

from wayfinder.errors import (
    ConfigurationError,
    EmptyRepeatError,
    MissingParameterError,
    NavigationAborted,
    NavigationFailureType,
    ParameterPatternMismatchError,
    PatternError,
    WayfinderError,
    report_configuration_issue,
)
from wayfinder.routing.matcher import Matcher


class TestHierarchy:
    def test_configuration_error_is_wayfinder_error(self) -> None:
        assert issubclass(ConfigurationError, WayfinderError)

    def test_pattern_errors_are_value_errors(self) -> None:
        assert issubclass(PatternError, ValueError)
        assert issubclass(MissingParameterError, PatternError)
        assert issubclass(EmptyRepeatError, PatternError)

    def test_navigation_aborted_is_wayfinder_error(self) -> None:
        assert issubclass(NavigationAborted, WayfinderError)


class TestPatternErrors:
    def test_missing_parameter(self) -> None:
        error = MissingParameterError("id")
        assert error.param == "id"
        assert str(error) == 'Expected "id" to be defined'

    def test_pattern_mismatch(self) -> None:
        error = ParameterPatternMismatchError("id", r"\d+", "abc")
        assert error.pattern == r"\d+"
        assert error.segment == "abc"
        assert 'to match "\\d+"' in str(error)


class TestNavigationAborted:
    def test_message(self) -> None:
        matcher = Matcher([{"path": "/a"}, {"path": "/b"}])
        failure = NavigationAborted(
            NavigationFailureType.ABORTED,
            to=matcher.match("/b"),
            from_route=matcher.match("/a"),
        )
        assert str(failure) == "navigation aborted: /a -> /b"

    def test_message_with_error(self) -> None:
        failure = NavigationAborted(NavigationFailureType.ERROR, error=RuntimeError("boom"))
        assert str(failure) == "navigation error: ? -> ? (boom)"

    def test_raisable(self) -> None:
        with pytest.raises(NavigationAborted) as excinfo:
            raise NavigationAborted(NavigationFailureType.CANCELLED)
        assert excinfo.value.kind is NavigationFailureType.CANCELLED

    def test_identity_equality(self) -> None:
        first = NavigationAborted(NavigationFailureType.ABORTED)
        second = NavigationAborted(NavigationFailureType.ABORTED)
        assert first != second


class TestReportConfigurationIssue:
    def test_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wayfinder.routing"):
            report_configuration_issue("something odd")
        assert "ConfigurationWarning: something odd" in caplog.text

    def test_strict_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="something odd"):
            report_configuration_issue("something odd", strict=True)
