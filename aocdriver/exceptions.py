class AocdError(Exception):
    """base exception for this package"""


class FetchError(AocdError):
    """could not resolve the puzzle input"""


class TransportError(FetchError):
    """network failure or unexpected HTTP status talking to the judge"""


class DeadTokenError(TransportError):
    """the auth is expired/incorrect"""


class PuzzleLockedError(TransportError):
    """trying to access input before the unlock"""


class MissingSessionError(AocdError):
    """no session token could be found"""


class SolutionError(AocdError):
    """the user's solution function raised"""


class ExampleFailedError(AocdError):
    """a configured test case did not produce the expected output"""


class ConfigError(AocdError):
    """invalid challenge configuration or pattern table"""
