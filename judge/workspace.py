import shutil
import uuid
from contextlib import contextmanager
from pathlib import Path

from . import config
from .language import LanguageProfile
from .utils import logger


def acquire(root: Path | None = None) -> Path:
    '''
    create a fresh directory owned by exactly one execution
    '''
    root = Path(root) if root is not None else config.EXEC_ROOT
    root.mkdir(parents=True, exist_ok=True)
    workdir = root / uuid.uuid4().hex
    workdir.mkdir()
    logger().debug(f'create workspace [path={workdir}]')
    return workdir


def release(workdir: Path):
    '''
    remove the workspace and every artifact in it, safe to call twice
    '''
    workdir = Path(workdir)
    try:
        shutil.rmtree(workdir)
    except FileNotFoundError:
        return
    except OSError as e:
        logger().error(f'failed to remove workspace [path={workdir}]: {e}')
        return
    logger().debug(f'remove workspace [path={workdir}]')


@contextmanager
def workspace(root: Path | None = None):
    workdir = acquire(root)
    try:
        yield workdir
    finally:
        release(workdir)


def write_source(workdir: Path, profile: LanguageProfile, code: str) -> Path:
    source = Path(workdir) / profile.source_name
    source.write_text(code, encoding='utf-8')
    return source
