from enum import Enum


class Language(str, Enum):
    C = 'c'
    CPP = 'cpp20'
    JAVA = 'java'
    PY = 'python3'
    PYPY = 'pypy3'


class CaseStatus(str, Enum):
    PASSED = 'passed'
    WRONG_ANSWER = 'wrong_answer'
    TIME_LIMIT = 'time_limit'
    MEMORY_LIMIT = 'memory_limit'
    RUNTIME_ERROR = 'runtime_error'
    COMPILATION_ERROR = 'compilation_error'
    PENDING = 'pending'


class SubmissionStatus(str, Enum):
    ACCEPTED = 'accepted'
    WRONG_ANSWER = 'wrong_answer'
    PARTIAL = 'partial'
    TIME_LIMIT = 'time_limit'
    MEMORY_LIMIT = 'memory_limit'
    RUNTIME_ERROR = 'runtime_error'
    COMPILATION_ERROR = 'compilation_error'
    INTERNAL_ERROR = 'internal_error'
    PENDING = 'pending'


class CompareStrategy(str, Enum):
    EXACT = 'exact'
    TOKEN = 'token'
    FLOAT = 'float'
