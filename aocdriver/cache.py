import json
import logging
import threading
from datetime import datetime
from datetime import timedelta
from pathlib import Path

from .types import Verdict
from .types import VerdictKind
from .utils import AOC_TZ
from .utils import atomic_write_file


log = logging.getLogger(__name__)


class InputCache:
    """
    Puzzle inputs on the filesystem, laid out as <root>/<year>/<day>.txt. Inputs are
    associated with your user id and never change, so they're safe to cache
    indefinitely: an existing entry is always returned as-is and never re-fetched.
    """

    def __init__(self, root, client):
        self.root = Path(root).expanduser()
        self.client = client

    def path(self, key):
        return self.root / str(key.year) / f"{key.day}.txt"

    def has_input(self, key):
        return self.path(key).is_file()

    def get_input(self, key, token):
        path = self.path(key)
        try:
            # use previously received data, if any existing
            with path.open(encoding="utf-8", newline="") as f:
                data = f.read()
        except FileNotFoundError:
            log.debug("input_data cache miss %s", path)
        else:
            log.debug("input_data cache hit %s", path)
            return data
        # a failed fetch raises before anything is written
        data = self.client.fetch_input(key, token).rstrip("\r\n")
        log.info("saving the puzzle input for %d/%02d to %s", key.year, key.day, path)
        atomic_write_file(path, data)
        return data

    def get_input_bytes(self, key, token):
        """The raw bytes of the cached input, fetching it first on a cache miss."""
        if not self.has_input(key):
            self.get_input(key, token)
        return self.path(key).read_bytes()


class SubmissionRecord:
    """
    What we know about previous submissions for each (year, day), stored as
    <root>/<year>/<day>.json. Per part there is a "solved" flag, which is set after
    the judge accepts an answer and never cleared, and the latest verdict for each
    answer value that was sent. Timestamps are only kept for rate-limited attempts,
    that's all that is needed to honour the judge's cooldown.
    """

    def __init__(self, root):
        self.root = Path(root).expanduser()
        self._lock = threading.Lock()

    def path(self, key):
        return self.root / str(key.year) / f"{key.day}.json"

    def _load(self, key):
        path = self.path(key)
        if not path.is_file():
            return {"parts": {}}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            log.warning("ignoring corrupt submission record %s", path)
            return {"parts": {}}
        data.setdefault("parts", {})
        return data

    def _part(self, data, key):
        part = data["parts"].setdefault(str(key.part.value), {})
        part.setdefault("solved", False)
        part.setdefault("answers", {})
        return part

    def is_solved(self, key):
        return bool(self._load(key)["parts"].get(str(key.part.value), {}).get("solved"))

    def previous(self, key, answer):
        """The Verdict the judge gave last time for this exact answer, if any."""
        entry = self._part(self._load(key), key)["answers"].get(answer)
        if entry is None:
            return None
        kind = VerdictKind(entry["verdict"])
        retry_after = entry.get("retry_after")
        if retry_after is not None:
            retry_after = timedelta(seconds=retry_after)
        return Verdict(kind, detail=entry.get("detail"), retry_after=retry_after)

    def cooldown(self, key, now=None):
        """Time left on the most recent rate-limit for this part, or None if expired."""
        if now is None:
            now = datetime.now(tz=AOC_TZ)
        remaining = None
        for entry in self._part(self._load(key), key)["answers"].values():
            if entry["verdict"] != VerdictKind.RATE_LIMITED.value or not entry.get("when"):
                continue
            until = datetime.fromisoformat(entry["when"]) + timedelta(seconds=entry["retry_after"])
            left = until - now
            if left > timedelta(0) and (remaining is None or left > remaining):
                remaining = left
        return remaining

    def record(self, key, answer, verdict, when=None):
        if verdict.kind in {VerdictKind.PARSE_ERROR, VerdictKind.TRANSPORT_ERROR}:
            log.debug("not recording %s verdict for %s", verdict.kind.value, key)
            return
        entry = {"verdict": verdict.kind.value, "detail": verdict.detail}
        if verdict.kind is VerdictKind.RATE_LIMITED:
            if when is None:
                when = datetime.now(tz=AOC_TZ)
            entry["retry_after"] = int(verdict.retry_after.total_seconds())
            entry["when"] = when.isoformat(sep=" ")
        with self._lock:
            data = self._load(key)
            part = self._part(data, key)
            part["answers"][answer] = entry
            # the judge says "did you already complete it" for part 2 when part 1 is
            # still open, so only a correct verdict counts
            if verdict.kind is VerdictKind.CORRECT and not part["solved"]:
                log.info("marking %s as solved", key)
                part["solved"] = True
            log.info("saving submit result for %s: %s", key, verdict.kind.value)
            atomic_write_file(self.path(key), json.dumps(data, indent=2, sort_keys=True))

    def mark_solved(self, key):
        with self._lock:
            data = self._load(key)
            part = self._part(data, key)
            if part["solved"]:
                return
            part["solved"] = True
            log.info("marking %s as solved", key)
            atomic_write_file(self.path(key), json.dumps(data, indent=2, sort_keys=True))
