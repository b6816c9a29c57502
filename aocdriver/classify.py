"""
Classification of the judge's answer page into a Verdict.

The judge only ever responds with a human readable sentence inside an <article>, and
its wording has changed over the years. So this module does loose, case-insensitive
substring matching against a table of known phrasings, and the table itself can be
swapped out with a JSON file (see PatternTable.load) without touching the code.
Anything not recognised comes back as a parse error verdict - never an exception.
"""
from __future__ import annotations

import json
import logging
import os
import re
import typing as t
from dataclasses import dataclass
from dataclasses import fields
from datetime import timedelta
from pathlib import Path

from .exceptions import ConfigError
from .types import Verdict
from .utils import _get_soup


log = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = timedelta(seconds=60)

_NUMBER_WORDS = {
    "a": 1,
    "an": 1,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
}
_UNITS = {
    "h": "hours",
    "hr": "hours",
    "hrs": "hours",
    "hour": "hours",
    "hours": "hours",
    "m": "minutes",
    "min": "minutes",
    "mins": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "s": "seconds",
    "sec": "seconds",
    "secs": "seconds",
    "second": "seconds",
    "seconds": "seconds",
}
_amount_words = "|".join(sorted(_NUMBER_WORDS, key=len, reverse=True))
_unit = "|".join(sorted(_UNITS, key=len, reverse=True))
# "a"/"an" need whitespace before the unit, otherwise "am" would read as a minute
_duration_re = re.compile(
    rf"\b(?:(\d+)\s*|({_amount_words})\s+)({_unit})\b",
    flags=re.IGNORECASE,
)
_wait_windows = (
    re.compile(r"you have (.+?) left to wait", flags=re.IGNORECASE),
    re.compile(r"please wait (.+?)(?: before|[.;!]|$)", flags=re.IGNORECASE),
)


@dataclass(frozen=True)
class PatternTable:
    """
    Known phrasings of the judge's responses, lowercase. `version` identifies the
    table, so that a log line or bug report can say which wording was in use.
    """

    version: str = "2024.1"
    already_solved: tuple[str, ...] = (
        "you don't seem to be solving the right level",
        "did you already complete it",
    )
    correct: tuple[str, ...] = ("that's the right answer",)
    incorrect: tuple[str, ...] = ("that's not the right answer",)
    rate_limited: tuple[str, ...] = (
        "you gave an answer too recently",
        "left to wait",
        "please wait",
    )
    too_high: tuple[str, ...] = ("your answer is too high",)
    too_low: tuple[str, ...] = ("your answer is too low",)

    @classmethod
    def load(cls, path: str | os.PathLike) -> PatternTable:
        """
        Read a pattern table from a JSON object. Keys which are missing fall back to
        the built-in phrasings.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            raise ConfigError(f"could not read pattern table {path}: {err}") from err
        if not isinstance(data, dict):
            raise ConfigError(f"pattern table {path} must be a JSON object")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown keys in pattern table {path}: {sorted(unknown)}")
        kwargs: dict[str, t.Any] = {}
        for name, value in data.items():
            if name == "version":
                kwargs[name] = str(value)
                continue
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{name!r} in {path} must be a list of strings")
            kwargs[name] = tuple(_normalize(v) for v in value)
        table = cls(**kwargs)
        log.debug("loaded pattern table version=%s from %s", table.version, path)
        return table


DEFAULT_PATTERNS = PatternTable()


def default_patterns() -> PatternTable:
    """The built-in table, unless AOC_DRIVER_PATTERNS names an override file."""
    path = os.environ.get("AOC_DRIVER_PATTERNS")
    if path:
        return PatternTable.load(path)
    return DEFAULT_PATTERNS


def _normalize(txt: str) -> str:
    txt = txt.replace("’", "'")
    return " ".join(txt.split()).lower()


def extract_message(body: str) -> str:
    """The human readable part of a response: the <article> text if there is one."""
    soup = _get_soup(body)
    node = soup.article if soup.article is not None else soup
    return " ".join(node.get_text().split())


def parse_duration(text: str) -> timedelta | None:
    """
    Sum all the "<amount> <unit>" pieces found in the wait phrase of `text`, e.g.
    "5m 30s", "1 minute", "3 minutes 10 seconds" or "one minute". Returns None if
    there is no duration in there at all.
    """
    region = text
    for pattern in _wait_windows:
        match = pattern.search(text)
        if match is not None:
            region = match.group(1)
            break
    amounts = {"hours": 0, "minutes": 0, "seconds": 0}
    found = False
    for digits, word, unit in _duration_re.findall(region):
        if digits:
            amount = int(digits)
        else:
            amount = _NUMBER_WORDS[word.lower()]
        amounts[_UNITS[unit.lower()]] += amount
        found = True
    if not found:
        return None
    return timedelta(**amounts)


def _hint(message: str, patterns: PatternTable) -> str | None:
    if any(p in message for p in patterns.too_high):
        return "too high"
    if any(p in message for p in patterns.too_low):
        return "too low"
    return None


def classify(body: str, patterns: PatternTable | None = None) -> Verdict:
    """
    Turn the judge's response to a submission into a Verdict. The checks are made in
    priority order: already solved, correct, incorrect, rate limited. Anything else
    is a parse error verdict which carries the raw body, for diagnosis.
    """
    if patterns is None:
        patterns = DEFAULT_PATTERNS
    message = _normalize(extract_message(body or ""))
    if any(p in message for p in patterns.already_solved):
        return Verdict.already_solved()
    if any(p in message for p in patterns.correct):
        return Verdict.correct()
    if any(p in message for p in patterns.incorrect):
        return Verdict.incorrect(_hint(message, patterns))
    if any(p in message for p in patterns.rate_limited):
        retry_after = parse_duration(message)
        if retry_after is None:
            log.warning("no wait time in %r, backing off %s", message, DEFAULT_RETRY_AFTER)
            retry_after = DEFAULT_RETRY_AFTER
        return Verdict.rate_limited(retry_after)
    log.warning("Unrecognised submit message %r (patterns v%s)", message, patterns.version)
    return Verdict.parse_error(body)
