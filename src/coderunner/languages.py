"""
Language registry.

Maps every supported :class:`Language` to the container image providing its
toolchain and to the command that runs a snippet inside that image.

Interpreted languages hand the code straight to the interpreter's inline
flag (``python -c``, ``node -e``).  Compiled and file-based languages expect
the code at a fixed path under ``/tmp``; the executor copies the
:class:`SourceFile` into the container before starting it, so the code never
passes through a shell string and needs no quoting.  Their commands chain the
compile and run steps with ``&&`` so the first failing step ends the chain
with its own exit status.

Nothing in this module talks to Docker.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from .errors import UnsupportedLanguage


class Language(str, Enum):
    GO = "go"
    PYTHON = "python"
    JAVA = "java"
    C = "c"
    CPP = "cpp"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"


@dataclass(frozen=True)
class SourceFile:
    """A file that must exist inside the container before it starts."""

    path: str
    content: str


@dataclass(frozen=True)
class LanguageSpec:
    image: str
    build_command: Callable[[str], List[str]]
    source_path: Optional[str] = None


def _shell(script: str) -> Callable[[str], List[str]]:
    return lambda code: ["sh", "-c", script]


REGISTRY: Dict[Language, LanguageSpec] = {
    Language.GO: LanguageSpec(
        image="golang:1.22",
        build_command=_shell("go run /tmp/code.go"),
        source_path="/tmp/code.go",
    ),
    Language.PYTHON: LanguageSpec(
        image="python:3.12-slim",
        build_command=lambda code: ["python", "-c", code],
    ),
    Language.JAVA: LanguageSpec(
        image="eclipse-temurin:17-jdk",
        build_command=_shell("javac /tmp/Main.java && java -cp /tmp Main"),
        source_path="/tmp/Main.java",
    ),
    Language.C: LanguageSpec(
        image="gcc:12",
        build_command=_shell("gcc /tmp/code.c -o /tmp/a.out && /tmp/a.out"),
        source_path="/tmp/code.c",
    ),
    Language.CPP: LanguageSpec(
        image="gcc:12",
        build_command=_shell("g++ /tmp/code.cpp -o /tmp/a.out && /tmp/a.out"),
        source_path="/tmp/code.cpp",
    ),
    Language.JAVASCRIPT: LanguageSpec(
        image="node:20-alpine",
        build_command=lambda code: ["node", "-e", code],
    ),
    # node runs TypeScript snippets as plain JavaScript; there is no tsc in the image.
    Language.TYPESCRIPT: LanguageSpec(
        image="node:20-alpine",
        build_command=lambda code: ["node", "-e", code],
    ),
}


def resolve(language: Union[Language, str]) -> Language:
    """Normalise ``language`` to a :class:`Language` member."""
    if isinstance(language, Language):
        return language
    try:
        return Language(str(language).strip().lower())
    except ValueError:
        raise UnsupportedLanguage(language) from None


def _spec(language: Union[Language, str]) -> LanguageSpec:
    return REGISTRY[resolve(language)]


def image_for(language: Union[Language, str]) -> str:
    return _spec(language).image


def command_for(language: Union[Language, str], code: str) -> List[str]:
    return list(_spec(language).build_command(code))


def source_for(language: Union[Language, str], code: str) -> Optional[SourceFile]:
    """Return the file the command expects, or ``None`` for inline languages."""
    spec = _spec(language)
    if spec.source_path is None:
        return None
    return SourceFile(path=spec.source_path, content=code)
