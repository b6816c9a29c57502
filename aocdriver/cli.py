import argparse
import datetime
import logging
import sys
import time
from importlib.metadata import version

from .cache import InputCache
from .client import JudgeClient
from .config import DEFAULT_CONFIG
from .config import default_dirs
from .config import load_config
from .exceptions import AocdError
from .exceptions import ConfigError
from .exceptions import MissingSessionError
from .exceptions import SolutionError
from .orchestrator import Orchestrator
from .runner import format_time
from .runner import DEFAULT_TIMEOUT
from .session import default_token
from .types import FIRST_YEAR
from .types import PuzzleKey
from .types import State
from .types import VerdictKind
from .utils import AOC_TZ
from .utils import colored


log = logging.getLogger(__name__)

VERDICT_COLORS = {
    VerdictKind.CORRECT: "green",
    VerdictKind.ALREADY_SOLVED: "yellow",
    VerdictKind.INCORRECT: "red",
    VerdictKind.RATE_LIMITED: "red",
    VerdictKind.TRANSPORT_ERROR: "magenta",
    VerdictKind.PARSE_ERROR: "magenta",
}


def _aoc_now():
    return datetime.datetime.now(tz=AOC_TZ)


def most_recent_year():
    """The latest year with unlocked puzzles, judged by the clock in New York."""
    now = _aoc_now()
    year = now.year if now.month == 12 else now.year - 1
    if year < FIRST_YEAR:
        raise AocdError("Time travel not supported yet")
    return year


def current_day():
    """Today's puzzle during December, capped at 25. Outside December, day 1."""
    now = _aoc_now()
    if now.month == 12:
        return min(now.day, 25)
    log.warning("current_day is only available in December (EST)")
    return 1


def _log_level(verbose):
    if verbose is None:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def main():
    """Get your puzzle input data, caching it if necessary, and print it on stdout."""
    latest = most_recent_year()
    days = range(1, 26)
    years = range(FIRST_YEAR, latest + 1)
    parser = argparse.ArgumentParser(
        description=f"Advent of Code Driver v{version('advent-of-code-driver')}",
        usage=f"aoc-input [day 1-25] [year {FIRST_YEAR}-{latest}]",
    )
    parser.add_argument(
        "day",
        nargs="?",
        type=int,
        default=current_day(),
        help="1-25 (default: %(default)s)",
    )
    parser.add_argument(
        "year",
        nargs="?",
        type=int,
        default=latest,
        help=f"{FIRST_YEAR}-{latest} (default: %(default)s)",
    )
    parser.add_argument(
        "-i",
        "--input-dir",
        help="where puzzle inputs are cached (default: %(default)s)",
        default=default_dirs()[0],
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="enable debug logging",
    )
    args = parser.parse_args()
    if args.debug:
        logging.basicConfig(level=logging.DEBUG)
    if args.day in years and args.year in days:
        # "aoc-input 2018 3" means the same as "aoc-input 3 2018"
        args.day, args.year = args.year, args.day
    if args.day not in days or args.year not in years:
        parser.print_usage()
        parser.exit(1)
    try:
        token = default_token()
    except MissingSessionError as err:
        print(colored(f"ERROR: {err}", "red"), file=sys.stderr)
        sys.exit(1)
    cache = InputCache(args.input_dir, JudgeClient())
    try:
        data = cache.get_input(PuzzleKey(year=args.year, day=args.day), token)
    except AocdError as err:
        sys.exit(f"{type(err).__name__}: {err}")
    print(data)


def drive():
    """
    Run the solutions from a challenge config file: first against their test cases,
    then against your puzzle inputs, submitting the answers if necessary.
    """
    parser = argparse.ArgumentParser(description="AoC driver")
    parser.add_argument(
        "config",
        nargs="?",
        default=DEFAULT_CONFIG,
        help="challenge config file (default: %(default)s)",
    )
    parser.add_argument(
        "-n",
        "--no-submit",
        action="store_false",
        dest="autosubmit",
        help="Just compute the answers. By default, answers are submitted if necessary.",
    )
    parser.add_argument(
        "-w",
        "--wait",
        action="store_true",
        help="When rate-limited, wait the time asked for and resubmit once.",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        metavar="T",
        type=int,
        default=0,
        help=(
            "Kill a solver if it exceeded this timeout, in seconds. "
            "Default value '0' runs the solver in-process without a timeout."
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        help=(
            "Increased logging (-v INFO, -vv DEBUG). "
            "Default level is logging.WARNING."
        ),
    )
    args = parser.parse_args()
    logging.basicConfig(level=_log_level(args.verbose))
    log.debug("called with %r", args)
    try:
        config = load_config(args.config)
    except ConfigError as err:
        sys.exit(f"ERROR: {err}")
    if not config.challenges:
        sys.exit(f"There are no challenges configured in {args.config}")
    try:
        token = default_token()
    except MissingSessionError as err:
        print(colored(f"ERROR: {err}", "red"), file=sys.stderr)
        sys.exit(1)
    orchestrator = Orchestrator.create(
        token,
        input_dir=config.input_dir,
        record_dir=config.record_dir,
        wait_on_rate_limit=args.wait,
        submit=args.autosubmit,
        timeout=args.timeout or None,
    )
    rc = run_for(config.challenges, orchestrator)
    sys.exit(rc)


def _print_tests(outcome):
    for result in outcome.tests:
        print(f"  test {result.name!r}: ", end="")
        if result.passed:
            print(colored("✔", "green"), result.actual)
        else:
            print(colored("✖", "red"), f"{result.actual} (expected: {result.expected})")


def run_for(challenges, orchestrator):
    """
    Drive each challenge and render the results. Returns the number of challenges
    which did not end up solved. Stops at the first solution which raises.
    """
    n_failed = 0
    timeout = orchestrator.timeout or DEFAULT_TIMEOUT
    for i, challenge in enumerate(challenges):
        name = challenge.function or getattr(challenge.solution, "__name__", repr(challenge.solution))
        label = f"{challenge.key} ({name})"
        print(f"==> {label}")
        t0 = time.time()
        try:
            outcome = orchestrator.run(
                challenge.key, challenge.solution, challenge.tests, as_bytes=challenge.as_bytes
            )
        except SolutionError as err:
            print(colored(f"  ✖ {err}", "red"))
            return n_failed + len(challenges) - i
        runtime = format_time(time.time() - t0, timeout)
        _print_tests(outcome)
        if outcome.state is State.FAILED:
            n_failed += 1
            print(f"{runtime}   {colored('✖', 'red')} {type(outcome.error).__name__}: {outcome.error}")
            continue
        line = f"{runtime}   answer: {outcome.answer}"
        verdict = outcome.verdict
        if verdict is not None:
            line += "   " + colored(str(verdict), VERDICT_COLORS[verdict.kind])
            if not verdict.ok:
                n_failed += 1
            if verdict.kind is VerdictKind.PARSE_ERROR:
                log.warning("unrecognised response from the judge:\n%s", verdict.detail)
        print(line)
    return n_failed
