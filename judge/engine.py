from pathlib import Path
from typing import Iterable, Mapping, Optional

from pydantic import ValidationError

from runner.submission import SubmissionRunner
from . import config, workspace
from .constant import CaseStatus, CompareStrategy, Language, SubmissionStatus
from .exception import InvalidRequest
from .language import DEFAULT_PROFILES, LanguageProfile, get_profile
from .meta import (
    ExecutionRequest,
    SnippetRequest,
    SnippetResult,
    SubmissionResult,
)
from .result_factory import aggregate, compilation_failed, internal_failure
from .utils import logger


class JudgeEngine:
    """
    Compile a submission, run it against every test case in order and
    judge the outputs.

    The engine holds no state besides its language profiles and the
    workspace root, so one instance can serve any number of concurrent
    executions. It does not limit how many run at once; see
    `judge.dispatcher.Dispatcher` for that.
    """

    def __init__(
        self,
        profiles: Optional[Mapping[Language, LanguageProfile]] = None,
        exec_root: Optional[Path] = None,
    ):
        self.profiles = profiles if profiles is not None else DEFAULT_PROFILES
        self.exec_root = exec_root

    @property
    def root(self) -> Path:
        return Path(self.exec_root or config.EXEC_ROOT)

    async def execute_code(
        self,
        code: str,
        language: str,
        test_cases: Iterable,
        time_limit: int = 2000,
        memory_limit: int = 256,
        compare_strategy: CompareStrategy | str = CompareStrategy.TOKEN,
        precision: int = 6,
    ) -> SubmissionResult:
        profile = get_profile(language, self.profiles)
        request = self._validate(
            ExecutionRequest,
            code=code,
            language=profile.language,
            testCases=test_cases,
            timeLimit=time_limit,
            memoryLimit=memory_limit,
            compareStrategy=compare_strategy,
            precision=precision,
        )
        try:
            with workspace.workspace(self.root) as workdir:
                return await self._judge(request, profile, workdir)
        except Exception as e:
            logger().error(f'code execution error: {e}', exc_info=True)
            return internal_failure(str(e))

    async def _judge(
        self,
        request: ExecutionRequest,
        profile: LanguageProfile,
        workdir: Path,
    ) -> SubmissionResult:
        workspace.write_source(workdir, profile, request.code)
        runner = SubmissionRunner(
            profile=profile,
            working_dir=workdir,
            time_limit=request.timeLimit,
            mem_limit=request.memoryLimit,
            compare_strategy=request.compareStrategy,
            precision=request.precision,
        )
        compiled = await runner.compile()
        if not compiled.success:
            logger().info(f'compilation error [lang={profile.language.value}]')
            return compilation_failed(compiled.diagnostics, request.testCases)
        results = []
        for i, test_case in enumerate(request.testCases):
            results.append(await runner.run(test_case, i, compiled.artifact))
        result = aggregate(results, request.testCases)
        logger().info(f'judged [lang={profile.language.value}, '
                      f'status={result.status.value}, score={result.score}]')
        return result

    async def run_snippet(
        self,
        code: str,
        language: str,
        stdin: str = '',
        time_limit: int = 5000,
    ) -> SnippetResult:
        profile = get_profile(language, self.profiles)
        request = self._validate(
            SnippetRequest,
            code=code,
            language=profile.language,
            stdin=stdin,
            timeLimit=time_limit,
        )
        try:
            with workspace.workspace(self.root) as workdir:
                return await self._snippet(request, profile, workdir)
        except Exception as e:
            logger().error(f'snippet execution error: {e}', exc_info=True)
            return SnippetResult(
                success=False,
                status=SubmissionStatus.INTERNAL_ERROR.value,
                error=str(e),
            )

    async def _snippet(
        self,
        request: SnippetRequest,
        profile: LanguageProfile,
        workdir: Path,
    ) -> SnippetResult:
        workspace.write_source(workdir, profile, request.code)
        runner = SubmissionRunner(
            profile=profile,
            working_dir=workdir,
            time_limit=request.timeLimit,
            mem_limit=256,
        )
        compiled = await runner.compile()
        if not compiled.success:
            return SnippetResult(
                success=False,
                status=CaseStatus.COMPILATION_ERROR.value,
                error=compiled.diagnostics,
                isCompilationError=True,
            )
        # the snippet limit is taken as is, no language multiplier
        result = await runner.execute(
            request.stdin,
            request.timeLimit,
            compiled.artifact,
        )
        status = runner.status_of(result) or CaseStatus.PASSED
        return SnippetResult(
            success=status == CaseStatus.PASSED,
            status=status.value,
            output=result.Stdout[:config.OUTPUT_PREVIEW_LIMIT],
            error=runner.error_of(result)[:config.ERROR_PREVIEW_LIMIT],
            executionTime=result.Duration,
        )

    @staticmethod
    def _validate(model, **fields):
        try:
            return model(**fields)
        except ValidationError as e:
            raise InvalidRequest(str(e)) from e
