import logging

import pytest

from aocdriver.exceptions import AocdError
from aocdriver.runner import coerce
from aocdriver.runner import format_time
from aocdriver.runner import run
from aocdriver.runner import run_tests
from aocdriver.types import TestCase
from aocdriver.types import TestResult
from aocdriver.utils import colored


def double(data):
    return int(data) * 2


def test_run_returns_answer_string():
    assert run(double, "12") == "24"


def test_run_does_not_catch_user_errors():
    with pytest.raises(ValueError):
        run(double, "not a number")


@pytest.mark.parametrize("value", [None, "", b""])
def test_run_will_not_submit_null(value):
    with pytest.raises(AocdError(f"cowardly refusing to submit non-answer: {value!r}")):
        run(lambda data: value, "x")


def test_run_zero_is_an_answer():
    assert run(lambda data: 0, "x") == "0"


def test_run_with_timeout_uses_subprocess(mocker):
    wrapper = mocker.patch("aocdriver.runner._timeout_wrapper", return_value=24)
    assert run(double, "12", timeout=5) == "24"
    wrapper.assert_called_once_with(double, 5, "12")


def test_run_timeout_error_propagates(mocker):
    mocker.patch("aocdriver.runner._timeout_wrapper", side_effect=TimeoutError("5s"))
    with pytest.raises(TimeoutError):
        run(double, "12", timeout=5)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("abc", "abc"),
        (b"abc", "abc"),
        (1234, "1234"),
        (-3, "-3"),
        (1234.0, "1234"),
        (1234.5, "1234.5"),
        (complex(12, 0), "12"),
    ],
)
def test_coerce(value, expected):
    assert coerce(value) == expected


def test_coerce_float_warns(caplog):
    coerce(1234.0)
    record = ("aocdriver.runner", logging.WARNING, "coerced float value 1234.0")
    assert record in caplog.record_tuples


def test_run_tests_all_pass():
    tests = [TestCase("one", "1", "2"), TestCase("two", "2", "4")]
    assert run_tests(double, tests) == [
        TestResult("one", "2", "2", True),
        TestResult("two", "4", "4", True),
    ]


def test_run_tests_stops_at_first_failure():
    tests = [TestCase("bad", "1", "3"), TestCase("good", "2", "4")]
    results = run_tests(double, tests)
    assert results == [TestResult("bad", "3", "2", False)]


def test_run_tests_keep_going():
    tests = [TestCase("bad", "1", "3"), TestCase("good", "2", "4")]
    results = run_tests(double, tests, fail_fast=False)
    assert [r.passed for r in results] == [False, True]


def test_run_tests_as_bytes():
    tests = [TestCase("snowman", "\u2603", "b'\\xe2\\x98\\x83'")]
    assert run_tests(repr, tests, as_bytes=True)[0].passed


def test_run_tests_user_errors_propagate():
    with pytest.raises(ValueError):
        run_tests(double, [TestCase("boom", "x", "1")])


def test_format_time():
    assert format_time(1.5) == colored("   1.50s", "green")
    assert format_time(20) == colored("  20.00s", "yellow")
    assert format_time(45) == colored("  45.00s", "red")
