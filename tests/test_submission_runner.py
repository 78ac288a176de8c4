import asyncio
import sys

import pytest

from judge.constant import CaseStatus, CompareStrategy, Language
from judge.language import LanguageProfile, get_profile
from judge.meta import TestCase
from runner import sandbox as sb
from runner.submission import SubmissionRunner


def _result(status="Exited Normally", stdout="", stderr="", exit_code=0):
    return sb.Result(Status=status,
                     Duration=12,
                     MemUsage=0,
                     Stdout=stdout,
                     Stderr=stderr,
                     ExitMsg="" if status == "Exited Normally" else "msg",
                     ExitCode=exit_code)


def _patch_sandbox(monkeypatch, result, captured=None):

    class DummySandbox:

        def __init__(self, *args, **kwargs):
            if captured is not None:
                captured.append(kwargs)

        async def run(self):
            return result

    monkeypatch.setattr("runner.submission.Sandbox", DummySandbox)


@pytest.fixture
def cpp_runner(tmp_path):
    return SubmissionRunner(
        profile=get_profile("cpp20"),
        working_dir=tmp_path,
        time_limit=1000,
        mem_limit=256,
    )


def test_effective_limits(tmp_path):
    runner = SubmissionRunner(
        profile=get_profile("python3"),
        working_dir=tmp_path,
        time_limit=1000,
        mem_limit=256,
    )
    assert runner.effective_time_limit() == 3000
    assert runner.effective_mem_limit() == 384
    # per-case override replaces the base limit before scaling
    case = TestCase(input="", expectedOutput="", timeLimit=500,
                    memoryLimit=64)
    assert runner.effective_time_limit(case) == 1500
    assert runner.effective_mem_limit(case) == 96
    # zero inherits the problem default
    assert runner.effective_time_limit(TestCase()) == 3000


def test_compile_success(monkeypatch, cpp_runner, tmp_path):
    captured = []
    _patch_sandbox(monkeypatch, _result(), captured)
    res = asyncio.run(cpp_runner.compile())
    assert res.success
    assert res.artifact == tmp_path / "main.out"
    assert captured[0]["command"][0] == "g++"
    assert captured[0]["time_limit"] == 30000


def test_compile_failure_keeps_diagnostics(monkeypatch, cpp_runner):
    _patch_sandbox(
        monkeypatch,
        _result(status="RE",
                stderr="main.cpp:1:1: error: 'x' does not name a type",
                exit_code=1))
    res = asyncio.run(cpp_runner.compile())
    assert not res.success
    assert "does not name a type" in res.diagnostics


def test_compile_timeout(monkeypatch, cpp_runner):
    _patch_sandbox(monkeypatch, _result(status="TLE", exit_code=-9))
    res = asyncio.run(cpp_runner.compile())
    assert not res.success
    assert res.diagnostics == "Compilation timed out"


def test_compile_diagnostics_are_capped(monkeypatch, cpp_runner):
    monkeypatch.setattr("judge.config.COMPILE_ERROR_LIMIT", 100)
    _patch_sandbox(monkeypatch,
                   _result(status="RE", stderr="e" * 1000, exit_code=1))
    res = asyncio.run(cpp_runner.compile())
    assert len(res.diagnostics) == 100


def test_interpreted_language_skips_compile(monkeypatch, tmp_path):

    class ExplodingSandbox:

        def __init__(self, *args, **kwargs):
            raise AssertionError("sandbox should not be used")

    monkeypatch.setattr("runner.submission.Sandbox", ExplodingSandbox)
    runner = SubmissionRunner(
        profile=get_profile("python3"),
        working_dir=tmp_path,
        time_limit=1000,
        mem_limit=256,
    )
    res = asyncio.run(runner.compile())
    assert res.success
    assert res.artifact == tmp_path / "main.py"


@pytest.mark.parametrize(
    "result, status",
    [
        (_result(stdout="7\n"), CaseStatus.PASSED),
        (_result(stdout="8\n"), CaseStatus.WRONG_ANSWER),
        (_result(status="TLE", stdout="7\n", exit_code=-9),
         CaseStatus.TIME_LIMIT),
        (_result(status="RE", stdout="7\n", exit_code=1),
         CaseStatus.RUNTIME_ERROR),
        (_result(status="OLE", exit_code=-9), CaseStatus.RUNTIME_ERROR),
    ],
)
def test_run_classify(monkeypatch, cpp_runner, result, status):
    _patch_sandbox(monkeypatch, result)
    case = TestCase(input="3 4", expectedOutput="7")
    res = asyncio.run(cpp_runner.run(case, 5))
    assert res.status == status
    assert res.passed is (status == CaseStatus.PASSED)
    assert res.testCaseIndex == 5
    assert res.executionTime == 12
    assert res.memoryUsed == 0


def test_run_passes_scaled_limit_and_input(monkeypatch, tmp_path):
    captured = []
    _patch_sandbox(monkeypatch, _result(stdout="ok"), captured)
    runner = SubmissionRunner(
        profile=get_profile("java"),
        working_dir=tmp_path,
        time_limit=1000,
        mem_limit=256,
    )
    asyncio.run(
        runner.run(TestCase(input="1 2\n", expectedOutput="ok"), 0))
    assert captured[0]["time_limit"] == 2000
    assert captured[0]["stdin"] == "1 2\n"
    assert captured[0]["command"] == ["java", "-cp", str(tmp_path), "Main"]


def test_run_output_is_capped(monkeypatch, cpp_runner):
    monkeypatch.setattr("judge.config.OUTPUT_PREVIEW_LIMIT", 10)
    monkeypatch.setattr("judge.config.ERROR_PREVIEW_LIMIT", 5)
    _patch_sandbox(monkeypatch,
                   _result(stdout="1" * 100, stderr="warning" * 10))
    res = asyncio.run(cpp_runner.run(TestCase(expectedOutput="1" * 100), 0))
    assert res.passed
    assert res.output == "1" * 10
    assert res.error == "warni"


def test_run_error_message(monkeypatch, cpp_runner):
    _patch_sandbox(monkeypatch, _result(status="OLE", stderr="", exit_code=-9))
    res = asyncio.run(cpp_runner.run(TestCase(), 0))
    assert res.error == "msg"


def test_run_with_float_strategy(monkeypatch, tmp_path):
    _patch_sandbox(monkeypatch, _result(stdout="0.3333\n"))
    runner = SubmissionRunner(
        profile=get_profile("c"),
        working_dir=tmp_path,
        time_limit=1000,
        mem_limit=256,
        compare_strategy=CompareStrategy.FLOAT,
        precision=3,
    )
    res = asyncio.run(runner.run(TestCase(expectedOutput="0.333333"), 0))
    assert res.status == CaseStatus.PASSED


def test_run_real_process(tmp_path):
    profile = LanguageProfile(
        language=Language.PY,
        source_name="main.py",
        run_command=(sys.executable, "{source}"),
    )
    (tmp_path / "main.py").write_text("print(sum(map(int, input().split())))")
    runner = SubmissionRunner(profile=profile,
                              working_dir=tmp_path,
                              time_limit=2000,
                              mem_limit=256)
    res = asyncio.run(runner.run(TestCase(input="3 4\n", expectedOutput="7"),
                                 0))
    assert res.status == CaseStatus.PASSED
    assert res.output == "7\n"


def test_run_uses_compiled_artifact(monkeypatch, cpp_runner, tmp_path):
    captured = []
    _patch_sandbox(monkeypatch, _result(stdout="7"), captured)
    artifact = tmp_path / "build" / "solution"
    asyncio.run(
        cpp_runner.run(TestCase(input="3 4", expectedOutput="7"), 0,
                       artifact))
    assert captured[0]["command"] == [str(artifact)]
    asyncio.run(cpp_runner.execute("", 1000, artifact))
    assert captured[1]["command"] == [str(artifact)]
