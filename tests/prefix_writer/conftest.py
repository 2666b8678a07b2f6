import io
import pathlib
from collections.abc import Iterator
from typing import List

import pytest
from rich.console import Console

from prefix_writer.writer import PrefixWriter

PREFIX = 'prefix: '


class RecordingSink(io.BytesIO):
    """In-memory sink that also records every call it receives."""

    def __init__(self):
        super().__init__()
        self.calls: List[str] = []

    def write(self, data) -> int:
        self.calls.append('write')
        return super().write(data)

    def flush(self) -> None:
        self.calls.append('flush')
        super().flush()

    @property
    def text(self) -> str:
        return self.getvalue().decode('utf-8', 'replace')


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def writer(sink: RecordingSink) -> PrefixWriter:
    return PrefixWriter(PREFIX, sink)


@pytest.fixture
def cleandir(tmp_path_factory, monkeypatch) -> Iterator[pathlib.Path]:
    new_dir = tmp_path_factory.mktemp('cleandir')
    abspath = new_dir.absolute()
    monkeypatch.chdir(abspath)
    yield abspath


@pytest.fixture(scope='session')
def monkeysession():
    from _pytest.monkeypatch import MonkeyPatch

    mpatch = MonkeyPatch()
    yield mpatch
    mpatch.undo()


@pytest.fixture(autouse=True, scope='session')
def rich_no_markup(monkeysession):
    monkeysession.setattr(
        'prefix_writer.console.console', Console(soft_wrap=True, no_color=True)
    )
