from . import cache
from . import classify
from . import cli
from . import client
from . import config
from . import exceptions
from . import orchestrator
from . import runner
from . import session
from . import types
from . import utils
from .classify import classify as classify_response
from .exceptions import AocdError
from .orchestrator import Orchestrator
from .session import default_token
from .session import SessionToken
from .types import Part
from .types import PuzzleKey
from .types import Verdict
from .version import __version__

__all__ = [
    "AocdError",
    "Orchestrator",
    "Part",
    "PuzzleKey",
    "SessionToken",
    "Verdict",
    "__version__",
    "cache",
    "classify",
    "classify_response",
    "cli",
    "client",
    "config",
    "default_token",
    "exceptions",
    "orchestrator",
    "runner",
    "session",
    "types",
    "utils",
]
