import sys

import pook as pook_mod
import pytest

from aocdriver.session import SessionToken
from aocdriver.utils import http


@pytest.fixture(autouse=True)
def mocked_sleep(mocker):
    sleep = mocker.patch("time.sleep")
    # pook answers every request, the shared client never needs to slow down
    http._max_t = -1.0
    return sleep


@pytest.fixture
def data_dir(tmp_path):
    data_dir = tmp_path / ".config" / "aocdriver-data"
    data_dir.mkdir(parents=True)
    return data_dir


@pytest.fixture
def config_dir(tmp_path):
    token_dir = tmp_path / ".config" / "aocdriver-config"
    token_dir.mkdir(parents=True)
    return token_dir


@pytest.fixture(autouse=True)
def remove_user_env(data_dir, config_dir, monkeypatch):
    # loading a config puts its directory on the import path
    monkeypatch.setattr(sys, "path", sys.path[:])
    monkeypatch.setattr("aocdriver.session.AOC_DRIVER_DATA_DIR", data_dir)
    monkeypatch.setattr("aocdriver.session.AOC_DRIVER_CONFIG_DIR", config_dir)
    monkeypatch.setattr("aocdriver.config.AOC_DRIVER_DATA_DIR", data_dir)
    monkeypatch.delenv("AOC_SESSION", raising=False)
    monkeypatch.delenv("AOC_DRIVER_PATTERNS", raising=False)


@pytest.fixture
def token():
    return SessionToken("thetesttoken")


@pytest.fixture
def pook():
    pook_mod.on()
    yield pook_mod
    pook_mod.off()
    pook_mod.reset()
