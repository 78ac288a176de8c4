import pathlib
from dataclasses import dataclass
from typing import Optional

from judge import config
from judge.comparator import compare
from judge.constant import CaseStatus, CompareStrategy
from judge.language import LanguageProfile
from judge.meta import TestCase, TestCaseResult
from judge.utils import logger
from runner.sandbox import Sandbox


@dataclass
class CompileResult:
    success: bool
    artifact: Optional[pathlib.Path] = None
    diagnostics: str = ''


class SubmissionRunner:

    def __init__(
        self,
        profile: LanguageProfile,
        working_dir: str | pathlib.Path,
        time_limit: int,  # ms, before the language multiplier
        mem_limit: int,  # MB, before the language multiplier
        compare_strategy: CompareStrategy | str = CompareStrategy.TOKEN,
        precision: int = 6,
    ):
        self.profile = profile
        self.working_dir = pathlib.Path(working_dir)
        self.time_limit = time_limit
        self.mem_limit = mem_limit
        self.compare_strategy = CompareStrategy(compare_strategy)
        self.precision = precision

    def effective_time_limit(self, test_case: TestCase | None = None) -> int:
        base = self.time_limit
        if test_case is not None and test_case.timeLimit > 0:
            base = test_case.timeLimit
        return int(base * self.profile.time_multiplier)

    def effective_mem_limit(self, test_case: TestCase | None = None) -> float:
        base = self.mem_limit
        if test_case is not None and test_case.memoryLimit > 0:
            base = test_case.memoryLimit
        return base * self.profile.memory_multiplier

    async def compile(self) -> CompileResult:
        if not self.profile.compile_need:
            return CompileResult(
                success=True,
                artifact=self.profile.artifact_path(self.working_dir),
            )
        command = self.profile.compile_args(self.working_dir)
        logger().info(f'start compiling [cmd={command}]')
        result = await Sandbox(
            command=command,
            cwd=str(self.working_dir),
            time_limit=config.COMPILE_TIMEOUT,
            output_limit=config.OUTPUT_LIMIT,
        ).run()
        logger().debug(f'finish compiling, get status {result.Status}')
        if result.Status != 'Exited Normally':
            return CompileResult(
                success=False,
                diagnostics=self._diagnostics(result),
            )
        return CompileResult(
            success=True,
            artifact=self.profile.artifact_path(self.working_dir),
        )

    async def run(
        self,
        test_case: TestCase,
        index: int,
        artifact: Optional[pathlib.Path] = None,
    ) -> TestCaseResult:
        time_limit = self.effective_time_limit(test_case)
        mem_limit = self.effective_mem_limit(test_case)
        result = await self.execute(test_case.input, time_limit, artifact)
        status = self.classify(result, test_case)
        logger().debug(
            f'case {index} finished [status={status.value}, '
            f'time={result.Duration}ms, limit={time_limit}ms, '
            f'memory limit={mem_limit}MB (not enforced)]')
        return TestCaseResult(
            testCaseIndex=index,
            passed=status == CaseStatus.PASSED,
            status=status,
            executionTime=result.Duration,
            memoryUsed=result.MemUsage,
            output=result.Stdout[:config.OUTPUT_PREVIEW_LIMIT],
            error=self.error_of(result)[:config.ERROR_PREVIEW_LIMIT],
            isSample=test_case.isSample,
            isHidden=test_case.isHidden,
        )

    async def execute(
        self,
        stdin: str,
        time_limit: int,
        artifact: Optional[pathlib.Path] = None,
    ):
        return await Sandbox(
            command=self.profile.run_args(self.working_dir, artifact),
            cwd=str(self.working_dir),
            time_limit=time_limit,
            stdin=stdin,
            output_limit=config.OUTPUT_LIMIT,
        ).run()

    @staticmethod
    def status_of(result) -> Optional[CaseStatus]:
        '''
        verdict decided by the process alone, None when the output has to
        be compared
        '''
        if result.Status == 'TLE':
            return CaseStatus.TIME_LIMIT
        if result.Status in {'RE', 'OLE'}:
            return CaseStatus.RUNTIME_ERROR
        return None

    @staticmethod
    def error_of(result) -> str:
        if result.Status == 'OLE' or (result.Status == 'RE'
                                      and not result.Stderr):
            return result.ExitMsg
        return result.Stderr

    def classify(self, result, test_case: TestCase) -> CaseStatus:
        status = self.status_of(result)
        if status is not None:
            return status
        passed = compare(
            result.Stdout,
            test_case.expectedOutput,
            self.compare_strategy,
            self.precision,
        )
        return CaseStatus.PASSED if passed else CaseStatus.WRONG_ANSWER

    @staticmethod
    def _diagnostics(result) -> str:
        parts = [part for part in (result.Stdout, result.Stderr) if part]
        if result.Status == 'TLE':
            parts.append('Compilation timed out')
        elif not parts:
            parts.append(result.ExitMsg)
        return '\n'.join(parts)[:config.COMPILE_ERROR_LIMIT]
