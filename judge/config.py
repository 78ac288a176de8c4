import json
import os
import tempfile
from pathlib import Path

# backend config
BACKEND_API = os.getenv(
    'BACKEND_API',
    'http://web:8080',
)
# sandbox token
SANDBOX_TOKEN = os.getenv(
    'SANDBOX_TOKEN',
    'KoNoSandboxDa',
)
# every execution gets its own directory under this root
EXEC_ROOT = Path(
    os.getenv(
        'EXEC_ROOT',
        str(Path(tempfile.gettempdir()) / 'judge-exec'),
    ))

# ============================================================
# Execution Limits
# ============================================================
# wall-clock budget of a single compiler invocation (ms)
COMPILE_TIMEOUT = int(os.getenv('COMPILE_TIMEOUT', '30000'))
# stdout beyond this many bytes kills the program
OUTPUT_LIMIT = int(os.getenv('OUTPUT_LIMIT', str(1024 * 1024)))
# size of the output/error previews kept in a test case result
OUTPUT_PREVIEW_LIMIT = int(os.getenv('OUTPUT_PREVIEW_LIMIT', '1000'))
ERROR_PREVIEW_LIMIT = int(os.getenv('ERROR_PREVIEW_LIMIT', '500'))
COMPILE_ERROR_LIMIT = int(os.getenv('COMPILE_ERROR_LIMIT', '10000'))
MAX_CODE_BYTES = int(os.getenv('MAX_CODE_BYTES', str(64 * 1024)))

_DEFAULT_DISPATCHER_CONFIG_PATH = Path(
    os.getenv('DISPATCHER_CONFIG', '.config/dispatcher.json'))


def _load_dispatcher_config(path: Path) -> dict:
    try:
        with path.open() as f:
            return json.load(f)
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        return {}


def get_dispatcher_limits(
        config_path: str | Path | None = None) -> tuple[int, int]:
    path = Path(
        config_path) if config_path else _DEFAULT_DISPATCHER_CONFIG_PATH
    cfg = _load_dispatcher_config(path)
    queue_default = cfg.get('QUEUE_SIZE', 16)
    concurrency_default = cfg.get('MAX_CONCURRENT_EXECUTIONS', 4)
    queue_size = int(os.getenv('QUEUE_SIZE', queue_default))
    concurrency = int(
        os.getenv('MAX_CONCURRENT_EXECUTIONS', concurrency_default))
    if queue_size <= 0 or concurrency <= 0:
        raise ValueError(
            f'dispatcher limits must be positive [QUEUE_SIZE={queue_size}, '
            f'MAX_CONCURRENT_EXECUTIONS={concurrency}]')
    return queue_size, concurrency
