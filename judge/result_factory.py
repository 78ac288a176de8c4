"""
Factory functions for creating standardized submission results.

This module provides consistent result structures for:
- Judged submissions (aggregated from per-case results)
- Compilation failures
- Internal engine failures
"""

import math
from typing import Optional, Sequence

from .constant import CaseStatus, SubmissionStatus
from .meta import SubmissionResult, TestCase, TestCaseResult


def calculate_score(passed: int, total: int) -> int:
    """
    Percentage of passed cases, rounded half up.

    Args:
        passed: Number of passed cases
        total: Number of cases judged

    Returns:
        Score between 0 and 100
    """
    if total <= 0:
        return 0
    return int(math.floor(100 * passed / total + 0.5))


def decide_status(results: Sequence[TestCaseResult]) -> SubmissionStatus:
    """
    Pick the submission status, first matching rule wins.

    Args:
        results: Per-case results of one submission

    Returns:
        accepted, time_limit, memory_limit, runtime_error, partial or
        wrong_answer
    """
    passed = sum(1 for r in results if r.passed)
    statuses = {r.status for r in results}
    if results and passed == len(results):
        return SubmissionStatus.ACCEPTED
    for case_status, status in (
        (CaseStatus.TIME_LIMIT, SubmissionStatus.TIME_LIMIT),
        (CaseStatus.MEMORY_LIMIT, SubmissionStatus.MEMORY_LIMIT),
        (CaseStatus.RUNTIME_ERROR, SubmissionStatus.RUNTIME_ERROR),
    ):
        if case_status in statuses:
            return status
    if passed > 0:
        return SubmissionStatus.PARTIAL
    return SubmissionStatus.WRONG_ANSWER


def aggregate(
    results: Sequence[TestCaseResult],
    test_cases: Optional[Sequence[TestCase]] = None,
) -> SubmissionResult:
    """
    Combine per-case results into one submission result.

    Args:
        results: Per-case results, in test case order
        test_cases: The judged test cases, used for point weights

    Returns:
        Submission result
    """
    results = sorted(results, key=lambda r: r.testCaseIndex)
    passed = sum(1 for r in results if r.passed)
    times = [r.executionTime for r in results]
    points_earned = points_total = 0
    if test_cases is not None:
        for r in results:
            points = test_cases[r.testCaseIndex].points or 0
            points_total += points
            if r.passed:
                points_earned += points
    return SubmissionResult(
        success=True,
        status=decide_status(results),
        testCaseResults=results,
        testCasesPassed=passed,
        totalTestCases=len(results),
        totalExecutionTime=sum(times),
        maxExecutionTime=max(times, default=0),
        maxMemoryUsed=max((r.memoryUsed for r in results), default=0),
        score=calculate_score(passed, len(results)),
        pointsEarned=points_earned,
        pointsTotal=points_total,
    )


def compilation_failed(
    diagnostics: str,
    test_cases: Optional[Sequence[TestCase]] = None,
) -> SubmissionResult:
    """
    Build the result of a submission that did not compile.

    Args:
        diagnostics: Compiler output shown to the submitter
        test_cases: The test cases that will not be run

    Returns:
        Submission result without any case result
    """
    return SubmissionResult(
        success=False,
        status=SubmissionStatus.COMPILATION_ERROR,
        totalTestCases=len(test_cases) if test_cases is not None else 0,
        pointsTotal=sum(tc.points or 0 for tc in test_cases or ()),
        compilationError=diagnostics,
    )


def internal_failure(message: str) -> SubmissionResult:
    return SubmissionResult(
        success=False,
        status=SubmissionStatus.INTERNAL_ERROR,
        error=message,
    )
