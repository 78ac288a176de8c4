import math
import re

from .constant import CompareStrategy

# plain ASCII decimal or exponent notation only
NUMBER_PATTERN = re.compile(
    r'[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?',
    re.ASCII,
)


def normalize(output: str) -> str:
    '''
    trim the whole output and every line of it, so trailing spaces and
    trailing newlines never decide a verdict
    '''
    if not output:
        return ''
    return '\n'.join(line.strip() for line in output.strip().split('\n'))


def tokenize(output: str) -> list:
    return output.split()


def _to_number(token: str):
    if NUMBER_PATTERN.fullmatch(token) is None:
        return None
    value = float(token)
    if not math.isfinite(value):
        return None
    return value


def compare_exact(actual: str, expected: str) -> bool:
    return actual == expected


def compare_tokens(actual: str, expected: str) -> bool:
    return tokenize(actual) == tokenize(expected)


def compare_floats(actual: str, expected: str, precision: int = 6) -> bool:
    actual_tokens = tokenize(actual)
    expected_tokens = tokenize(expected)
    if len(actual_tokens) != len(expected_tokens):
        return False
    tolerance = 10**-precision
    for a, e in zip(actual_tokens, expected_tokens):
        a_num, e_num = _to_number(a), _to_number(e)
        if a_num is None or e_num is None:
            if a != e:
                return False
        elif abs(a_num - e_num) > tolerance:
            return False
    return True


def compare(
    actual: str,
    expected: str,
    strategy: CompareStrategy | str = CompareStrategy.TOKEN,
    precision: int = 6,
) -> bool:
    try:
        strategy = CompareStrategy(strategy)
    except ValueError:
        raise ValueError(f'unknown compare strategy: {strategy}') from None
    actual = normalize(actual)
    expected = normalize(expected)
    if strategy == CompareStrategy.EXACT:
        return compare_exact(actual, expected)
    if strategy == CompareStrategy.FLOAT:
        return compare_floats(actual, expected, precision)
    return compare_tokens(actual, expected)
