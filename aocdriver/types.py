from __future__ import annotations

import enum
import typing as t
from dataclasses import dataclass
from dataclasses import field
from datetime import timedelta

from .exceptions import AocdError

__all__ = [
    "Answer",
    "Challenge",
    "Outcome",
    "Part",
    "PuzzleKey",
    "State",
    "TestCase",
    "TestResult",
    "Verdict",
    "VerdictKind",
]

URL = "https://adventofcode.com/{year}/day/{day}"
FIRST_YEAR = 2015

Answer = t.Any
"""The value returned by a solution, either a string or a number. Numbers are coerced to a string"""
Solution = t.Callable[[t.Union[str, bytes]], Answer]
"""A user solution: takes the puzzle input (text, or bytes when asked for), returns the answer"""


class Part(enum.IntEnum):
    """The part of a given puzzle, posted to the judge as the form field "level"."""

    PART1 = 1
    PART2 = 2

    @classmethod
    def coerce(cls, value: t.Any) -> Part:
        if isinstance(value, cls):
            return value
        aliases = {"1": cls.PART1, "a": cls.PART1, "2": cls.PART2, "b": cls.PART2}
        key = str(value).strip().lower()
        if key not in aliases:
            raise AocdError(f"part must be 1 or 2, got {value!r}")
        return aliases[key]


@dataclass(frozen=True, order=True)
class PuzzleKey:
    """Identifies one challenge instance: (year, day, part)."""

    year: int
    day: int
    part: Part = Part.PART1

    def __post_init__(self) -> None:
        if not isinstance(self.year, int) or self.year < FIRST_YEAR:
            raise AocdError(f"year must be {FIRST_YEAR} or later, got {self.year!r}")
        if not isinstance(self.day, int) or not 1 <= self.day <= 25:
            raise AocdError(f"day must be in range 1-25, got {self.day!r}")
        # frozen, so sidestep __setattr__ to normalize the part
        object.__setattr__(self, "part", Part.coerce(self.part))

    @property
    def url(self) -> str:
        """A link to the puzzle's description page on adventofcode.com."""
        return URL.format(year=self.year, day=self.day)

    @property
    def input_url(self) -> str:
        return self.url + "/input"

    @property
    def answer_url(self) -> str:
        return self.url + "/answer"

    def __str__(self) -> str:
        return f"{self.year}/{self.day:02d} part {self.part.value}"


class VerdictKind(enum.Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    ALREADY_SOLVED = "already_solved"
    RATE_LIMITED = "rate_limited"
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"


@dataclass(frozen=True)
class Verdict:
    """
    The classified outcome of one submission attempt.

    `detail` carries the "too high"/"too low" hint of an incorrect answer, the
    failure description of a transport error, or the raw response body of a parse
    error. `retry_after` is only set for a rate-limited verdict, and is the time the
    judge asked us to wait before the next submission.
    """

    kind: VerdictKind
    detail: str | None = None
    retry_after: timedelta | None = None

    @classmethod
    def correct(cls) -> Verdict:
        return cls(VerdictKind.CORRECT)

    @classmethod
    def incorrect(cls, detail: str | None = None) -> Verdict:
        return cls(VerdictKind.INCORRECT, detail=detail)

    @classmethod
    def already_solved(cls) -> Verdict:
        return cls(VerdictKind.ALREADY_SOLVED)

    @classmethod
    def rate_limited(cls, retry_after: timedelta) -> Verdict:
        return cls(VerdictKind.RATE_LIMITED, retry_after=retry_after)

    @classmethod
    def transport_error(cls, detail: str) -> Verdict:
        return cls(VerdictKind.TRANSPORT_ERROR, detail=detail)

    @classmethod
    def parse_error(cls, body: str) -> Verdict:
        return cls(VerdictKind.PARSE_ERROR, detail=body)

    @property
    def ok(self) -> bool:
        """True for verdicts meaning the puzzle part is (now) solved."""
        return self.kind in {VerdictKind.CORRECT, VerdictKind.ALREADY_SOLVED}

    def __str__(self) -> str:
        txt = self.kind.value.replace("_", " ")
        if self.retry_after is not None:
            txt += f" (wait {int(self.retry_after.total_seconds())}s)"
        elif self.detail and self.kind is not VerdictKind.PARSE_ERROR:
            txt += f" ({self.detail})"
        return txt


class TestCase(t.NamedTuple):
    """One entry of a challenge's test table: feed `input`, expect `expected`."""

    __test__ = False  # not a pytest class

    name: str
    input: str
    expected: str


class TestResult(t.NamedTuple):
    __test__ = False

    name: str
    expected: str
    actual: str
    passed: bool


@dataclass(frozen=True)
class Challenge:
    """
    Explicit configuration record for one puzzle part: which solution solves it,
    and which test cases should pass before the real input is touched. `solution`
    is None for a config loaded without resolving the functions.
    """

    key: PuzzleKey
    solution: Solution | None
    tests: tuple[TestCase, ...] = ()
    function: str = ""
    as_bytes: bool = False


class State(enum.Enum):
    IDLE = "idle"
    INPUT_RESOLVED = "input_resolved"
    ANSWER_COMPUTED = "answer_computed"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class Outcome:
    """What the orchestrator hands back to its caller for one challenge."""

    key: PuzzleKey
    state: State
    verdict: Verdict | None = None
    answer: str | None = None
    error: Exception | None = None
    tests: list[TestResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is State.DONE and self.verdict is not None and self.verdict.ok
