import dataclasses
import pathlib
import sys

import pytest

from judge.constant import Language
from judge.dispatcher import Dispatcher
from judge.engine import JudgeEngine
from judge.language import DEFAULT_PROFILES

PROBLEM_ROOT = pathlib.Path(__file__).resolve().parents[1] / 'problem'


@pytest.fixture
def profiles():
    # judge python submissions with the interpreter running the tests
    profiles = dict(DEFAULT_PROFILES)
    profiles[Language.PY] = dataclasses.replace(
        profiles[Language.PY],
        run_command=(sys.executable, '{artifact}'),
    )
    return profiles


@pytest.fixture
def exec_root(tmp_path):
    return tmp_path / 'exec'


@pytest.fixture
def engine(profiles, exec_root):
    return JudgeEngine(profiles=profiles, exec_root=exec_root)


@pytest.fixture
def load_problem():

    def load(name: str, source: str):
        problem_dir = PROBLEM_ROOT / name
        cases = []
        for in_path in sorted((problem_dir / 'testcase').glob('*.in')):
            cases.append({
                'input': in_path.read_text(),
                'expectedOutput': in_path.with_suffix('.out').read_text(),
            })
        return (problem_dir / 'src' / source).read_text(), cases

    return load


TEST_CONFIG_PATH = pathlib.Path(
    __file__).resolve().parents[1] / '.config' / 'dispatcher.test.json'


@pytest.fixture
def make_dispatcher(monkeypatch):
    monkeypatch.delenv('QUEUE_SIZE', raising=False)
    monkeypatch.delenv('MAX_CONCURRENT_EXECUTIONS', raising=False)
    created = []

    def make(engine):
        # create a dispatcher in test config
        d = Dispatcher(TEST_CONFIG_PATH, engine=engine)
        d.testing = True
        created.append(d)
        return d

    yield make
    # ensure we stop the dispatcher after every function call
    for d in created:
        d.stop()
        if d.is_alive():
            d.join(timeout=5)
