import logging

import pytest
import urllib3

from aocdriver.client import JudgeClient
from aocdriver.exceptions import DeadTokenError
from aocdriver.exceptions import PuzzleLockedError
from aocdriver.exceptions import TransportError
from aocdriver.types import PuzzleKey
from aocdriver.utils import http


INPUT_URL = "https://adventofcode.com/2018/day/1/input"
ANSWER_URL = "https://adventofcode.com/2018/day/1/answer"


def test_fetch_input(pook, token):
    mock = pook.get(
        url=INPUT_URL,
        headers={"Cookie": "session=thetesttoken"},
        response_body="fake data for year 2018 day 1\n",
    )
    data = JudgeClient().fetch_input(PuzzleKey(2018, 1), token)
    assert data == "fake data for year 2018 day 1\n"
    assert mock.calls == 1


def test_fetch_input_accepts_plain_string_token(pook):
    mock = pook.get(url=INPUT_URL, response_body="data")
    assert JudgeClient().fetch_input(PuzzleKey(2018, 1), "rawtoken") == "data"
    assert mock.calls == 1


def test_fetch_input_bad_token(pook, token):
    pook.get(
        url=INPUT_URL,
        reply=400,
        response_body="Puzzle inputs differ by user.  Please log in to get your puzzle input.",
    )
    with pytest.raises(DeadTokenError) as cm:
        JudgeClient().fetch_input(PuzzleKey(2018, 1), token)
    assert "...oken" in str(cm.value)
    assert "HTTP 400" in str(cm.value)


def test_fetch_input_redirect_means_dead_token(pook, token):
    pook.get(url=INPUT_URL, reply=302)
    with pytest.raises(DeadTokenError):
        JudgeClient().fetch_input(PuzzleKey(2018, 1), token)


def test_fetch_input_puzzle_locked(pook, token):
    pook.get(url="https://adventofcode.com/2101/day/1/input", reply=404)
    with pytest.raises(PuzzleLockedError("2101/01 not available yet")):
        JudgeClient().fetch_input(PuzzleKey(2101, 1), token)


def test_fetch_input_server_error(pook, token, caplog):
    mock = pook.get(url=INPUT_URL, reply=500, response_body="AWS meltdown")
    with pytest.raises(TransportError(f"HTTP 500 at {INPUT_URL}")):
        JudgeClient().fetch_input(PuzzleKey(2018, 1), token)
    assert mock.calls == 1
    assert ("aocdriver.client", logging.ERROR, "got 500 status code token=...oken") in caplog.record_tuples
    assert ("aocdriver.client", logging.ERROR, "AWS meltdown") in caplog.record_tuples


def test_transport_errors_are_fetch_errors():
    # the input cache relies on this to let all failures propagate as one family
    from aocdriver.exceptions import FetchError

    assert issubclass(TransportError, FetchError)
    assert issubclass(DeadTokenError, TransportError)
    assert issubclass(PuzzleLockedError, TransportError)


def test_network_failure(mocker, token):
    fake_http = mocker.Mock()
    fake_http.get.side_effect = urllib3.exceptions.ProtocolError("connection reset")
    client = JudgeClient(http=fake_http)
    with pytest.raises(TransportError) as cm:
        client.fetch_input(PuzzleKey(2018, 1), token)
    assert str(cm.value) == f"ProtocolError at {INPUT_URL}: connection reset"
    assert isinstance(cm.value.__cause__, urllib3.exceptions.ProtocolError)


def test_undecodable_input_is_a_transport_error(mocker, token):
    fake_http = mocker.Mock()
    fake_http.get.return_value = mocker.Mock(status=200, data=b"\xff\xfe\xfa")
    client = JudgeClient(http=fake_http)
    with pytest.raises(TransportError) as cm:
        client.fetch_input(PuzzleKey(2018, 1), token)
    assert str(cm.value).startswith(f"undecodable input at {INPUT_URL}: ")
    assert isinstance(cm.value.__cause__, UnicodeDecodeError)


def test_timeout_is_a_transport_error(mocker, token):
    fake_http = mocker.Mock()
    fake_http.post.side_effect = urllib3.exceptions.ReadTimeoutError(None, ANSWER_URL, "timed out")
    client = JudgeClient(http=fake_http)
    with pytest.raises(TransportError):
        client.submit_answer(PuzzleKey(2018, 1), token, "1234")


def test_blank_token_is_never_sent(mocker):
    fake_http = mocker.Mock()
    client = JudgeClient(http=fake_http)
    with pytest.raises(DeadTokenError("no session token was given")):
        client.fetch_input(PuzzleKey(2018, 1), "  ")
    fake_http.get.assert_not_called()


def test_submit_answer(pook, token):
    post = pook.post(
        url=ANSWER_URL,
        content="application/x-www-form-urlencoded",
        body="level=2&answer=1234",
        headers={"Cookie": "session=thetesttoken"},
        response_body="<article>That's the right answer. Yeah!!</article>",
    )
    body = JudgeClient().submit_answer(PuzzleKey(2018, 1, 2), token, "1234")
    assert body == "<article>That's the right answer. Yeah!!</article>"
    assert post.calls == 1


def test_submit_answer_server_error(pook, token):
    pook.post(url=ANSWER_URL, reply=502)
    with pytest.raises(TransportError(f"HTTP 502 at {ANSWER_URL}")):
        JudgeClient().submit_answer(PuzzleKey(2018, 1), token, "1234")


def test_requests_are_counted(pook, token):
    pook.get(url=INPUT_URL, response_body="x")
    before = http.req_count["GET"]
    JudgeClient().fetch_input(PuzzleKey(2018, 1), token)
    assert http.req_count["GET"] == before + 1
