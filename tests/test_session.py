import pytest

from aocdriver.exceptions import MissingSessionError
from aocdriver.session import default_token
from aocdriver.session import SessionToken


def test_token_must_not_be_empty():
    with pytest.raises(MissingSessionError("session token must not be empty")):
        SessionToken("")
    with pytest.raises(MissingSessionError):
        SessionToken("  \n")
    with pytest.raises(MissingSessionError):
        SessionToken(None)


def test_token_does_not_leak_in_repr():
    token = SessionToken("supersecret1234")
    assert token.value == "supersecret1234"
    assert str(token) == "...1234"
    assert repr(token) == "<SessionToken ...1234>"


def test_token_equality():
    assert SessionToken("abc") == SessionToken(" abc\n")
    assert len({SessionToken("abc"), SessionToken("abc")}) == 1


def test_default_token_from_env(monkeypatch, config_dir):
    (config_dir / "token").write_text("fromfile")
    monkeypatch.setenv("AOC_SESSION", "fromenv")
    assert default_token() == SessionToken("fromenv")


def test_default_token_from_file(config_dir):
    (config_dir / "token").write_text("fromfile  # my github login\n")
    assert default_token().value == "fromfile"


def test_default_token_missing(config_dir):
    with pytest.raises(MissingSessionError) as cm:
        default_token()
    assert str(config_dir / "token") in str(cm.value)
    assert "AOC_SESSION" in str(cm.value)


def test_default_token_empty_file(config_dir):
    (config_dir / "token").write_text("\n")
    with pytest.raises(MissingSessionError):
        default_token()
