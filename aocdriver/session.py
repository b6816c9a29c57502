import logging
import os
from pathlib import Path
from textwrap import dedent

from .exceptions import MissingSessionError
from .utils import sanitize


log = logging.getLogger(__name__)


AOC_DRIVER_DATA_DIR = Path(
    os.environ.get("AOC_DRIVER_DIR", Path("~", ".config", "aocdriver"))
).expanduser()
AOC_DRIVER_CONFIG_DIR = Path(
    os.environ.get("AOC_DRIVER_CONFIG_DIR", AOC_DRIVER_DATA_DIR)
).expanduser()


class SessionToken:
    """
    The session cookie value which authenticates every request to the judge.
    It is opaque to us - the only thing checked is that it's not blank.
    """

    __slots__ = ("_value",)

    def __init__(self, value):
        value = (value or "").strip()
        if not value:
            raise MissingSessionError("session token must not be empty")
        self._value = value

    @property
    def value(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, SessionToken):
            return self._value == other._value
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __str__(self):
        return sanitize(self._value)

    def __repr__(self):
        return f"<{type(self).__name__} {sanitize(self._value)}>"


def token_path():
    return AOC_DRIVER_CONFIG_DIR / "token"


def default_token():
    """
    Discover user's token from the environment or file, and raise
    MissingSessionError with a diagnostic message if none can be found.
    """
    # export your session id as AOC_SESSION env var
    cookie = os.getenv("AOC_SESSION", "").strip()
    if cookie:
        log.debug("using session token from AOC_SESSION env var")
        return SessionToken(cookie)

    # or chuck it in a plaintext file at ~/.config/aocdriver/token
    path = token_path()
    try:
        words = path.read_text(encoding="utf-8").split()
    except FileNotFoundError:
        words = []
    if words:
        log.debug("using session token from %s", path)
        return SessionToken(words[0])

    msg = dedent(
        f"""\
        AoC session ID is needed to get your puzzle data!
        You can find it in your browser cookies after login.
            1) Save the cookie into a text file {path}, or
            2) Export the cookie in environment variable AOC_SESSION
        """
    )
    raise MissingSessionError(msg)
