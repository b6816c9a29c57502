"""
Loading of the challenge list: which solution function solves which puzzle part,
and which example inputs it must get right before the real input is used.

    input_dir = "inputs"
    record_dir = "cache"

    [challenges.2015-1-1]
    function = "mypkg.day01:part1"
    as_bytes = false            # optional, pass the input as bytes

    [challenges.2015-1-1.tests.simple]
    input = "(())"
    output = "0"
"""
import logging
import pkgutil
import sys
import typing as t
from pathlib import Path

from ._compat import tomllib
from .exceptions import AocdError
from .exceptions import ConfigError
from .session import AOC_DRIVER_DATA_DIR
from .types import Challenge
from .types import PuzzleKey
from .types import TestCase


log = logging.getLogger(__name__)

DEFAULT_CONFIG = "aoc.toml"


class Config(t.NamedTuple):
    input_dir: Path
    record_dir: Path
    challenges: list


def default_dirs():
    return AOC_DRIVER_DATA_DIR / "inputs", AOC_DRIVER_DATA_DIR / "records"


def parse_key(name):
    """Challenge names are "year-day-part", e.g. "2022-7-2"."""
    try:
        year, day, part = (int(x) for x in name.split("-"))
    except ValueError:
        raise ConfigError(f"challenge names must look like year-day-part, got {name!r}")
    try:
        return PuzzleKey(year, day, part)
    except AocdError as err:
        raise ConfigError(f"invalid challenge {name!r}: {err}") from err


def _importable(directory):
    # solutions live next to the config file, but a console script starts with
    # its own bin directory on sys.path
    directory = str(directory.resolve())
    if directory not in sys.path:
        log.debug("adding %s to sys.path", directory)
        sys.path.insert(0, directory)


def resolve_function(path):
    try:
        func = pkgutil.resolve_name(path)
    except (ImportError, AttributeError, ValueError) as err:
        raise ConfigError(f"could not resolve solution function {path!r}: {err}") from err
    if not callable(func):
        raise ConfigError(f"solution {path!r} is not callable")
    return func


def _tests(name, tests):
    if not isinstance(tests, dict):
        raise ConfigError(f"tests of {name} must be a table")
    result = []
    for test_name, test in tests.items():
        try:
            result.append(TestCase(test_name, str(test["input"]), str(test["output"])))
        except (KeyError, TypeError):
            raise ConfigError(f"test {test_name!r} of {name} needs an input and an output")
    return tuple(result)


def load_config(path=DEFAULT_CONFIG, resolve=True):
    """
    Read the challenge configuration file. Challenges come back sorted by
    (year, day, part). Relative directories are relative to the config file.
    Pass `resolve=False` to skip importing the solution functions.
    """
    path = Path(path)
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        raise ConfigError(f"config file {path} does not exist")
    except tomllib.TOMLDecodeError as err:
        raise ConfigError(f"invalid TOML in {path}: {err}") from err
    log.debug("loaded config from %s", path)
    input_dir, record_dir = default_dirs()
    if "input_dir" in data:
        input_dir = path.parent / Path(data["input_dir"]).expanduser()
    if "record_dir" in data:
        record_dir = path.parent / Path(data["record_dir"]).expanduser()
    challenges = []
    if resolve:
        _importable(path.parent)
    for name, desc in data.get("challenges", {}).items():
        key = parse_key(name)
        if not isinstance(desc, dict) or "function" not in desc:
            raise ConfigError(f"challenge {name} needs a function")
        function = desc["function"]
        solution = resolve_function(function) if resolve else None
        tests = _tests(name, desc.get("tests", {}))
        as_bytes = desc.get("as_bytes", False)
        if not isinstance(as_bytes, bool):
            raise ConfigError(f"as_bytes of {name} must be true or false")
        challenges.append(
            Challenge(key=key, solution=solution, tests=tests, function=function, as_bytes=as_bytes)
        )
    challenges.sort(key=lambda c: c.key)
    log.info("%d challenge(s) configured in %s", len(challenges), path)
    return Config(input_dir=input_dir, record_dir=record_dir, challenges=challenges)
