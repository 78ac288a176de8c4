"""
Static description of how each supported language is compiled and run.

Commands are argument vectors, never shell strings. Each argument may hold
one of the placeholders below, substituted per execution:

- ``{source}``: absolute path of the materialized source file
- ``{binary}``: absolute path of the compiled executable
- ``{workdir}``: the execution's workspace directory
- ``{artifact}``: what the compile step produced (run commands only)
- ``{entry}``: entry point class (Java only)
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .constant import Language
from .exception import UnsupportedLanguage

BINARY_NAME = 'main.out'


@dataclass(frozen=True)
class LanguageProfile:
    language: Language
    source_name: str
    run_command: Tuple[str, ...]
    compile_command: Optional[Tuple[str, ...]] = None
    time_multiplier: float = 1.0
    memory_multiplier: float = 1.0
    entry_class: Optional[str] = None

    def __post_init__(self):
        if self.time_multiplier < 1 or self.memory_multiplier < 1:
            raise ValueError('limit multipliers must be at least 1')

    @property
    def compile_need(self) -> bool:
        return self.compile_command is not None

    @property
    def extension(self) -> str:
        return Path(self.source_name).suffix.lstrip('.')

    def _placeholders(self, workdir: Path) -> dict:
        workdir = Path(workdir)
        return {
            'source': str(workdir / self.source_name),
            'binary': str(workdir / BINARY_NAME),
            'workdir': str(workdir),
            'entry': self.entry_class or '',
        }

    def compile_args(self, workdir: Path) -> list[str]:
        if self.compile_command is None:
            raise ValueError(f'{self.language.value} has no compile step')
        values = self._placeholders(workdir)
        return [arg.format(**values) for arg in self.compile_command]

    def run_args(
        self,
        workdir: Path,
        artifact: Optional[Path] = None,
    ) -> list[str]:
        values = self._placeholders(workdir)
        if artifact is None:
            artifact = self.artifact_path(workdir)
        values['artifact'] = str(artifact)
        return [arg.format(**values) for arg in self.run_command]

    def artifact_path(self, workdir: Path) -> Path:
        # java runs from the class path, interpreters run the source itself
        workdir = Path(workdir)
        if not self.compile_need:
            return workdir / self.source_name
        if self.entry_class is not None:
            return workdir
        return workdir / BINARY_NAME


DEFAULT_PROFILES: Mapping[Language, LanguageProfile] = MappingProxyType({
    Language.CPP:
    LanguageProfile(
        language=Language.CPP,
        source_name='main.cpp',
        compile_command=('g++', '-std=c++20', '-O2', '-o', '{binary}',
                         '{source}'),
        run_command=('{artifact}', ),
    ),
    Language.C:
    LanguageProfile(
        language=Language.C,
        source_name='main.c',
        compile_command=('gcc', '-std=c17', '-O2', '-o', '{binary}',
                         '{source}'),
        run_command=('{artifact}', ),
    ),
    Language.JAVA:
    LanguageProfile(
        language=Language.JAVA,
        source_name='Main.java',
        compile_command=('javac', '{source}'),
        run_command=('java', '-cp', '{artifact}', '{entry}'),
        time_multiplier=2,
        memory_multiplier=2,
        entry_class='Main',
    ),
    Language.PY:
    LanguageProfile(
        language=Language.PY,
        source_name='main.py',
        run_command=('python3', '{artifact}'),
        time_multiplier=3,
        memory_multiplier=1.5,
    ),
    Language.PYPY:
    LanguageProfile(
        language=Language.PYPY,
        source_name='main.py',
        run_command=('pypy3', '{artifact}'),
        time_multiplier=2,
        memory_multiplier=2,
    ),
})


def get_profile(
    language,
    profiles: Mapping[Language, LanguageProfile] = DEFAULT_PROFILES,
) -> LanguageProfile:
    try:
        key = Language(language)
    except ValueError:
        raise UnsupportedLanguage(language) from None
    profile = profiles.get(key)
    if profile is None:
        raise UnsupportedLanguage(language)
    return profile


def supported_languages(
    profiles: Mapping[Language, LanguageProfile] = DEFAULT_PROFILES,
) -> list[str]:
    return [lang.value for lang in profiles]
