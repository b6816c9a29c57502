import logging
import threading
import time

from .cache import InputCache
from .cache import SubmissionRecord
from .classify import classify
from .classify import default_patterns
from .client import JudgeClient
from .config import default_dirs
from .exceptions import DeadTokenError
from .exceptions import ExampleFailedError
from .exceptions import FetchError
from .exceptions import SolutionError
from .exceptions import TransportError
from .runner import run
from .runner import run_tests
from .types import Outcome
from .types import State
from .types import Verdict
from .types import VerdictKind


log = logging.getLogger(__name__)

_locks = {}
_locks_guard = threading.Lock()


def submission_lock(token):
    """
    The judge's cooldown is per account, not per puzzle, so all submissions made
    with the same session token are serialized through one lock.
    """
    value = getattr(token, "value", token)
    with _locks_guard:
        return _locks.setdefault(value, threading.Lock())


class Orchestrator:
    """
    Drives one challenge through the pipeline:

        IDLE -> INPUT_RESOLVED -> ANSWER_COMPUTED -> SUBMITTING -> DONE

    with FAILED reachable from every state. `run` hands back an Outcome in both
    terminal states. The only exception that escapes is SolutionError, raised when
    the user's code blows up, because that's a bug to be fixed rather than a result.

    When the judge says to slow down, the default is to hand the RateLimited verdict
    back to the caller. With `wait_on_rate_limit=True` it sleeps for exactly the
    time asked for and then resubmits once.
    """

    def __init__(
        self,
        token,
        cache,
        record,
        client=None,
        patterns=None,
        wait_on_rate_limit=False,
        submit=True,
        timeout=None,
    ):
        self.token = token
        self.client = cache.client if client is None else client
        self.cache = cache
        self.record = record
        self.patterns = default_patterns() if patterns is None else patterns
        self.wait_on_rate_limit = wait_on_rate_limit
        self.submit = submit
        self.timeout = timeout
        self._state = State.IDLE

    @classmethod
    def create(cls, token, input_dir=None, record_dir=None, client=None, **kwargs):
        default_input_dir, default_record_dir = default_dirs()
        if client is None:
            client = JudgeClient()
        cache = InputCache(input_dir or default_input_dir, client)
        record = SubmissionRecord(record_dir or default_record_dir)
        return cls(token, cache, record, client=client, **kwargs)

    @property
    def state(self):
        return self._state

    def _transition(self, outcome, state):
        log.debug("%s: %s -> %s", outcome.key, self._state.value, state.value)
        self._state = outcome.state = state

    def _fail(self, outcome, error):
        log.info("%s failed - %s: %s", outcome.key, type(error).__name__, error)
        outcome.error = error
        self._transition(outcome, State.FAILED)
        return outcome

    def _done(self, outcome, verdict):
        outcome.verdict = verdict
        self._transition(outcome, State.DONE)
        return outcome

    def run(self, key, solution, tests=(), as_bytes=False):
        """
        Drive `key` to a terminal state. With `as_bytes=True` the solution (and its
        tests) get the raw input bytes instead of text.
        """
        self._state = State.IDLE
        outcome = Outcome(key=key, state=State.IDLE)
        if tests:
            outcome.tests = self._guard(
                outcome, run_tests, solution, tests, timeout=self.timeout, as_bytes=as_bytes
            )
            failed = [r.name for r in outcome.tests if not r.passed]
            if failed:
                return self._fail(outcome, ExampleFailedError(f"{key} failed test {failed[0]!r}"))
        try:
            if as_bytes:
                data = self.cache.get_input_bytes(key, self.token)
            else:
                data = self.cache.get_input(key, self.token)
        except FetchError as err:
            return self._fail(outcome, err)
        self._transition(outcome, State.INPUT_RESOLVED)
        outcome.answer = self._guard(outcome, run, solution, data, timeout=self.timeout)
        self._transition(outcome, State.ANSWER_COMPUTED)
        if not self.submit:
            log.info("%s computed %r, not submitting", key, outcome.answer)
            return self._done(outcome, None)
        try:
            verdict = self._submit(outcome, key, outcome.answer)
        except DeadTokenError as err:
            return self._fail(outcome, err)
        return self._done(outcome, verdict)

    def _guard(self, outcome, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as err:
            error = SolutionError(f"solution for {outcome.key} raised {err!r}")
            self._fail(outcome, error)
            raise error from err

    def _submit(self, outcome, key, answer):
        if self.record.is_solved(key):
            log.info("%s is already solved, not submitting", key)
            return Verdict.already_solved()
        previous = self.record.previous(key, answer)
        if previous is not None and previous.kind is VerdictKind.INCORRECT:
            log.info("%s: %r was already judged incorrect, not submitting again", key, answer)
            return previous
        self._transition(outcome, State.SUBMITTING)
        with submission_lock(self.token):
            verdict = self._post(key, answer)
            if verdict.kind is VerdictKind.RATE_LIMITED and self.wait_on_rate_limit:
                wait = verdict.retry_after.total_seconds()
                log.info("Waiting %d seconds to autoretry", wait)
                time.sleep(wait)
                verdict = self._post(key, answer, check_cooldown=False)
        return verdict

    def _post(self, key, answer, check_cooldown=True):
        if check_cooldown:
            remaining = self.record.cooldown(key)
            if remaining is not None:
                log.info("%s still cooling down for %s, not submitting", key, remaining)
                return Verdict.rate_limited(remaining)
        try:
            body = self.client.submit_answer(key, self.token, answer)
        except DeadTokenError:
            raise
        except TransportError as err:
            return Verdict.transport_error(str(err))
        verdict = classify(body, self.patterns)
        log.info("%s answer %r: %s", key, answer, verdict)
        self.record.record(key, answer, verdict)
        return verdict
