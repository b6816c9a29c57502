from __future__ import annotations

import logging
import os
import platform
import shutil
import time
import typing as t
from collections import deque
from functools import cache
from importlib.metadata import version
from pathlib import Path
from tempfile import NamedTemporaryFile
from zoneinfo import ZoneInfo

import bs4
import urllib3


log: logging.Logger = logging.getLogger(__name__)
AOC_TZ = ZoneInfo("America/New_York")
_v = version("advent-of-code-driver")
USER_AGENT = f"advent-of-code-driver v{_v} (python/{platform.python_version()})"
DEFAULT_HTTP_TIMEOUT = 30.0


class HttpClient:
    # every request to adventofcode.com goes through this wrapper
    # so that we can put in user agent header, rate-limit, etc.
    # users should not need to use this class directly, JudgeClient wraps it.

    pool_manager: urllib3.PoolManager
    req_count: dict[t.Literal["GET", "POST"], int]

    def __init__(self, timeout: float = DEFAULT_HTTP_TIMEOUT) -> None:
        proxy_url = os.environ.get("http_proxy") or os.environ.get("https_proxy")
        headers = {"User-Agent": USER_AGENT}
        if proxy_url:
            self.pool_manager = urllib3.ProxyManager(proxy_url, headers=headers)
        else:
            self.pool_manager = urllib3.PoolManager(headers=headers)
        self.timeout = urllib3.Timeout(total=timeout)
        self.req_count = {"GET": 0, "POST": 0}
        self._max_t = 3.0
        self._cooloff = 0.16
        self._history = deque([time.time() - self._max_t] * 4, maxlen=4)

    def _limiter(self) -> None:
        now = time.time()
        t0 = self._history[0]
        if now - t0 < self._max_t:
            # made 4 requests within 3 seconds - past the speed limit of
            # 1 req/second. delay 160ms initially, then double on each
            # subsequent occasion up to a ceiling of 10s.
            log.warning(
                "you're being rate-limited - slow down on the requests! (delay=%.02fs)",
                self._cooloff,
            )
            time.sleep(self._cooloff)
            self._cooloff = min(self._cooloff * 2, 10)
        self._history.append(now)

    def _send(
        self, method: t.Literal["GET", "POST"], url: str, token: str, **kwargs: t.Any
    ) -> urllib3.BaseHTTPResponse:
        # redirects are never followed: the site answers a rejected session
        # cookie with a redirect, and the caller has to see that
        self._limiter()
        resp = self.pool_manager.request(
            method,
            url,
            headers=self.pool_manager.headers | {"Cookie": f"session={token}"},
            redirect=False,
            timeout=self.timeout,
            retries=False,
            **kwargs,
        )
        self.req_count[method] += 1
        return resp

    def get(self, url: str, token: str) -> urllib3.BaseHTTPResponse:
        return self._send("GET", url, token)

    def post(
        self, url: str, token: str, fields: t.Mapping[str, str]
    ) -> urllib3.BaseHTTPResponse:
        # answers go up as an urlencoded form
        return self._send("POST", url, token, fields=fields, encode_multipart=False)


http: HttpClient = HttpClient()


def _ensure_intermediate_dirs(path: Path) -> None:
    path.expanduser().parent.mkdir(parents=True, exist_ok=True)


def sanitize(token: str) -> str:
    """Only ever log the tail of a session token."""
    return "..." + token[-4:]


def atomic_write_file(path: Path, contents_str: str) -> None:
    """
    Write the file next to its destination first and then move it into place, so
    that a reader never sees a half-written cache file.
    """
    _ensure_intermediate_dirs(path)
    with NamedTemporaryFile("w", dir=path.parent, encoding="utf-8", delete=False) as tmp:
        tmp.write(contents_str)
    log.debug("%s -> %s", tmp.name, path)
    shutil.move(tmp.name, path)


_ANSIColor = t.Literal[
    "black", "red", "green", "yellow", "blue", "magenta", "cyan", "white"
]
_ansi_colors = t.get_args(_ANSIColor)
def _fix_windows_console() -> None:
    # ANSI escapes are not understood by a legacy windows console
    if platform.system() == "Windows":
        import colorama

        colorama.just_fix_windows_console()


_fix_windows_console()


def colored(txt: str, color: _ANSIColor | None) -> str:
    if color is None:
        return txt
    fg = 30 + _ansi_colors.index(color.casefold())
    return f"\x1b[{fg}m{txt}\x1b[0m"


@cache
def _get_soup(html):
    return bs4.BeautifulSoup(html, "html.parser")
