from __future__ import annotations

import contextlib
import logging
import sys
import types
from pathlib import Path
from typing import Iterator

import pytest

from rakish.core.application import Application
from rakish.core.loader.python_script import inject_rakish_api_module

logger = logging.getLogger("rakish")


def rakish_app() -> Application:
    return Application()


@pytest.fixture(name="rakish_app")
def _rakish_app_fixture(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Application]:
    """An application that runs in a temporary directory. Changes to the working directory, `sys.path` and the
    level of the `rakish` logger made during the test are undone afterwards."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(sys, "path", sys.path[:])
    level = logger.level
    yield rakish_app()
    logger.setLevel(level)


@contextlib.contextmanager
def rakish_api(app: Application, path: Path) -> Iterator[types.ModuleType]:
    """Make :mod:`rakish.api` importable for code that is not loaded as a build script."""

    with inject_rakish_api_module(app, path) as (api_module, _script_module):
        yield api_module


@pytest.fixture(name="rakish_api")
def _rakish_api_fixture(rakish_app: Application, request: pytest.FixtureRequest) -> Iterator[types.ModuleType]:
    with rakish_api(rakish_app, request.path) as api_module:
        yield api_module


def write_rakefile(directory: Path, content: str, name: str = "Rakefile.py") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(content)
    return path
