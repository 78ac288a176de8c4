from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from . import config
from .constant import CaseStatus, CompareStrategy, Language, SubmissionStatus


def _check_code(code: str) -> str:
    if not code.strip():
        raise ValueError('source code is empty')
    if len(code.encode('utf-8')) > config.MAX_CODE_BYTES:
        raise ValueError(
            f'source code exceeds {config.MAX_CODE_BYTES} bytes')
    return code


class TestCase(BaseModel):
    __test__ = False
    model_config = ConfigDict(frozen=True)

    input: str = ''
    expectedOutput: str = ''
    isSample: bool = False
    isHidden: bool = False
    points: Optional[int] = Field(default=None, ge=0)
    # 0 means inherit the problem default
    timeLimit: int = Field(default=0, ge=0)
    memoryLimit: int = Field(default=0, ge=0)


class ExecutionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    language: Language
    testCases: List[TestCase] = Field(min_length=1)
    timeLimit: int = Field(default=2000, gt=0)
    memoryLimit: int = Field(default=256, gt=0)
    compareStrategy: CompareStrategy = CompareStrategy.TOKEN
    precision: int = Field(default=6, ge=0)

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        return _check_code(v)


class SnippetRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    language: Language
    stdin: str = ''
    timeLimit: int = Field(default=5000, gt=0)

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        return _check_code(v)


class TestCaseResult(BaseModel):
    """
    Outcome of one test case.

    `memoryUsed` is not measured: programs run without a memory cgroup, so
    the field is always 0 and must not be read as a real peak.
    """
    __test__ = False

    testCaseIndex: int
    passed: bool = False
    status: CaseStatus = CaseStatus.PENDING
    executionTime: int = 0
    memoryUsed: float = 0
    output: str = ''
    error: str = ''
    isSample: bool = False
    isHidden: bool = False


class SubmissionResult(BaseModel):
    success: bool
    status: SubmissionStatus
    testCaseResults: List[TestCaseResult] = Field(default_factory=list)
    testCasesPassed: int = 0
    totalTestCases: int = 0
    totalExecutionTime: int = 0
    maxExecutionTime: int = 0
    maxMemoryUsed: float = 0
    score: int = 0
    pointsEarned: int = 0
    pointsTotal: int = 0
    compilationError: Optional[str] = None
    error: Optional[str] = None


class SnippetResult(BaseModel):
    success: bool
    status: str
    output: str = ''
    error: str = ''
    executionTime: int = 0
    isCompilationError: bool = False
