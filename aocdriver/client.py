import logging

import urllib3

from .exceptions import DeadTokenError
from .exceptions import PuzzleLockedError
from .exceptions import TransportError
from .utils import http as default_http
from .utils import sanitize


log = logging.getLogger(__name__)

# the site answers 400 "Puzzle inputs differ by user. Please log in to get your
# puzzle input." for a missing/expired cookie, and redirects on some other pages
AUTH_STATUSES = frozenset({400, 401, 403})


def _raw_token(token):
    value = getattr(token, "value", token)
    if not value or not str(value).strip():
        raise DeadTokenError("no session token was given")
    return str(value).strip()


class JudgeClient:
    """
    The two authenticated operations against adventofcode.com. Returns raw response
    text, or raises TransportError (or the DeadTokenError / PuzzleLockedError
    subclasses). There are no retries in here; the orchestrator decides on those.
    """

    def __init__(self, http=None):
        self.http = default_http if http is None else http

    def fetch_input(self, key, token):
        token = _raw_token(token)
        url = key.input_url
        log.info("getting data year=%s day=%s token=%s", key.year, key.day, sanitize(token))
        response = self._request("GET", url, token)
        if response.status == 404:
            raise PuzzleLockedError(f"{key.year}/{key.day:02d} not available yet")
        self._check(response, url, token)
        try:
            return response.data.decode()
        except UnicodeDecodeError as err:
            log.error("input from %s is not valid UTF-8: %s", url, err)
            raise TransportError(f"undecodable input at {url}: {err}") from err

    def submit_answer(self, key, token, answer):
        token = _raw_token(token)
        url = key.answer_url
        log.info(
            "posting %r to %s (part %s) token=%s", answer, url, key.part.value, sanitize(token)
        )
        fields = {"level": str(key.part.value), "answer": str(answer)}
        response = self._request("POST", url, token, fields=fields)
        self._check(response, url, token)
        return response.data.decode(errors="replace")

    def _request(self, method, url, token, fields=None):
        try:
            if method == "GET":
                return self.http.get(url, token=token)
            return self.http.post(url, token=token, fields=fields)
        except urllib3.exceptions.HTTPError as err:
            log.error("%s %s failed - %s: %s", method, url, type(err).__name__, err)
            raise TransportError(f"{type(err).__name__} at {url}: {err}") from err

    def _check(self, response, url, token):
        status = response.status
        if 200 <= status < 300:
            return
        if status in AUTH_STATUSES or 300 <= status < 400:
            log.info("session %s is dead - status_code=%s", sanitize(token), status)
            raise DeadTokenError(f"the auth token {sanitize(token)} is dead (HTTP {status} at {url})")
        log.error("got %s status code token=%s", status, sanitize(token))
        log.error(response.data.decode(errors="replace"))
        raise TransportError(f"HTTP {status} at {url}")
