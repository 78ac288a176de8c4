import pytest

from judge.constant import CaseStatus, SubmissionStatus
from judge.meta import TestCase, TestCaseResult
from judge.result_factory import (
    aggregate,
    calculate_score,
    compilation_failed,
    internal_failure,
)


def _results(*statuses, time=10):
    return [
        TestCaseResult(
            testCaseIndex=i,
            passed=s == CaseStatus.PASSED,
            status=s,
            executionTime=time * (i + 1),
        ) for i, s in enumerate(statuses)
    ]


P = CaseStatus.PASSED
WA = CaseStatus.WRONG_ANSWER
TLE = CaseStatus.TIME_LIMIT
MLE = CaseStatus.MEMORY_LIMIT
RE = CaseStatus.RUNTIME_ERROR


@pytest.mark.parametrize(
    "statuses, excepted",
    [
        ((P, P, P), SubmissionStatus.ACCEPTED),
        ((P, WA, TLE), SubmissionStatus.TIME_LIMIT),
        ((RE, MLE, TLE), SubmissionStatus.TIME_LIMIT),
        ((RE, MLE, WA), SubmissionStatus.MEMORY_LIMIT),
        ((P, RE, WA), SubmissionStatus.RUNTIME_ERROR),
        ((WA, P, P), SubmissionStatus.PARTIAL),
        ((WA, WA), SubmissionStatus.WRONG_ANSWER),
    ],
)
def test_status_priority(statuses, excepted):
    assert aggregate(_results(*statuses)).status == excepted
    # independent of test order
    assert aggregate(_results(*reversed(statuses))).status == excepted


def test_accepted_scores_100():
    res = aggregate(_results(P, P))
    assert res.success
    assert res.score == 100
    assert res.testCasesPassed == 2
    assert res.totalTestCases == 2


def test_all_wrong_scores_0():
    res = aggregate(_results(WA, WA, WA))
    assert res.status == SubmissionStatus.WRONG_ANSWER
    assert res.score == 0


def test_score_is_independent_of_status():
    res = aggregate(_results(P, P, P, TLE, WA, WA, WA, WA, WA, WA))
    assert res.status == SubmissionStatus.TIME_LIMIT
    assert res.score == 30


@pytest.mark.parametrize(
    "passed, total, score",
    [(0, 10, 0), (3, 10, 30), (7, 10, 70), (1, 3, 33), (2, 3, 67),
     (1, 8, 13), (1, 200, 1), (10, 10, 100), (0, 0, 0)],
)
def test_calculate_score(passed, total, score):
    assert calculate_score(passed, total) == score


def test_score_monotonic():
    scores = [calculate_score(p, 10) for p in range(11)]
    assert scores == sorted(scores)
    assert len(set(scores)) == 11


def test_times_and_order():
    results = _results(P, WA, P)
    res = aggregate(list(reversed(results)))
    assert [r.testCaseIndex for r in res.testCaseResults] == [0, 1, 2]
    assert res.totalExecutionTime == 60
    assert res.maxExecutionTime == 30
    assert res.maxMemoryUsed == 0


def test_points():
    cases = [TestCase(points=10), TestCase(points=30), TestCase()]
    res = aggregate(_results(P, WA, P), cases)
    assert res.pointsEarned == 10
    assert res.pointsTotal == 40


def test_compilation_failed():
    res = compilation_failed("error: expected ';'", [TestCase()] * 5)
    assert not res.success
    assert res.status == SubmissionStatus.COMPILATION_ERROR
    assert res.testCaseResults == []
    assert res.testCasesPassed == 0
    assert res.score == 0
    assert res.compilationError == "error: expected ';'"


def test_internal_failure():
    res = internal_failure("disk full")
    assert res.status == SubmissionStatus.INTERNAL_ERROR
    assert res.error == "disk full"
    assert res.score == 0
