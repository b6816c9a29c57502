import logging
import time

import pebble.concurrent

from .exceptions import AocdError
from .types import TestResult
from .utils import colored


# from https://adventofcode.com/about
# every problem has a solution that completes in at most 15 seconds on ten-year-old hardware


DEFAULT_TIMEOUT = 60
log = logging.getLogger(__name__)


def _as_int(val):
    # integral floats, complex numbers with no imaginary part, and numpy scalars
    # of those kinds. None for anything else.
    kind = type(val)
    if kind.__module__ == "numpy" and getattr(val, "ndim", None) == 0:
        if kind.__name__.startswith(("int", "uint", "long", "ulong")):
            return int(val)
        if not kind.__name__.startswith(("float", "complex")):
            return None
    elif not isinstance(val, (float, complex)):
        return None
    if val.imag == 0.0 and float(val.real).is_integer():
        return int(val.real)
    return None


def coerce(val):
    """
    The judge takes strings, but solutions usually return numbers. 1234.0 or
    numpy.int64(1234) are sent as "1234", with a warning.
    """
    if isinstance(val, str):
        return val
    if isinstance(val, bytes):
        return val.decode()
    as_int = _as_int(val)
    if as_int is None:
        return str(val)
    if type(val) is not int:
        log.warning("coerced %s value %r", type(val).__name__, val)
    return str(as_int)


def _timeout_wrapper(f, timeout, data):
    # the solve runs in a subprocess, so that it can be reliably killed if it
    # exceeds a time limit. you can't do that with threads.
    func = pebble.concurrent.process(daemon=False, timeout=timeout)(_call)
    return func(f, data).result()


def _call(f, data):
    return f(data)


def run(solution, data, timeout=None):
    """
    Compute the answer for `data` with the user's solution function, as a string.
    Nothing raised by the solution is caught here. With a `timeout` (seconds) the
    solve happens in a child process which is killed when it runs over, in which case
    TimeoutError is raised.
    """
    t0 = time.time()
    if timeout is None:
        result = solution(data)
    else:
        result = _timeout_wrapper(solution, timeout, data)
    log.debug("solution %r returned in %.02fs", solution, time.time() - t0)
    if result is None or isinstance(result, (str, bytes)) and not result:
        raise AocdError(f"cowardly refusing to submit non-answer: {result!r}")
    return coerce(result)


def run_tests(solution, tests, fail_fast=True, timeout=None, as_bytes=False):
    """
    Run the solution against each test case in order. Stops after the first failing
    case unless `fail_fast` is False. With `as_bytes` the inputs are passed UTF-8 encoded.
    """
    results = []
    for test in tests:
        log.debug("running test %r", test.name)
        data = test.input.encode() if as_bytes else test.input
        result = solution(data) if timeout is None else _timeout_wrapper(solution, timeout, data)
        actual = "" if result is None else coerce(result)
        passed = actual == test.expected
        results.append(TestResult(test.name, test.expected, actual, passed))
        if not passed:
            log.info("test %r returned %r, expected %r", test.name, actual, test.expected)
            if fail_fast:
                break
    return results


def format_time(t, timeout=DEFAULT_TIMEOUT):
    """Solve time, colored by how much of the timeout it used up (<25%, <50%, more)."""
    fraction = t / timeout
    color = "green" if fraction < 0.25 else "yellow" if fraction < 0.5 else "red"
    return colored(f"{t: 7.2f}s", color)
