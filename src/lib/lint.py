"""
Lint collaborator

Static analysis of sample code is delegated to an external linter behind
the small Linter protocol: given a code string and a LintConfig, return
LintFindings. Line numbers in the code string are expanded line index + 1
(the same layout the executor compiles), so findings map back through the
document's origin map like any other diagnostic.

RuffLinter is the bundled implementation. It runs ``ruff check`` on stdin
from the document's directory, so ruff picks up the configuration that
applies there, and declares the injected assertion object as a builtin so
it is never reported as undefined.
"""

import json
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Protocol

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from ..config import appsettings, AppSettings
from ..models.results import LintFinding
from .log import LOG
from .sandbox import PRELUDE_NAMES


class LintError(RuntimeError):
    """The lint tool could not be run or its output could not be read"""


@dataclass(frozen=True)
class LintConfig:
    """
    Configuration handed to a Linter

    Attributes:
        directory: Directory of the document being linted
        predefined: Names defined by the sandbox prelude (read-only globals)
    """
    directory: Path
    predefined: FrozenSet[str] = field(default_factory=frozenset)


class Linter(Protocol):
    def lint(self, code: str, config: LintConfig) -> List[LintFinding]:
        ...


def lintConfig_make(directory: Path, settings: AppSettings = appsettings) -> LintConfig:
    """LintConfig for a document directory with the prelude names predefined"""
    return LintConfig(
        directory=directory,
        predefined=frozenset({settings.assertion_name, *PRELUDE_NAMES}),
    )


class RuffLocation(BaseModel):
    row: int
    column: int


class RuffDiagnostic(BaseModel):
    """One entry of ``ruff check --output-format json``"""
    code: str | None = None
    message: str
    location: RuffLocation
    filename: str = Field(default="")


_RUFF_OUTPUT = TypeAdapter(List[RuffDiagnostic])


class RuffLinter:
    """
    Linter backed by the ruff command-line tool

    Attributes:
        command: ruff executable
        filename: Name ruff is told the stdin code comes from
    """

    def __init__(self, settings: AppSettings = appsettings, filename: str = "sample.py") -> None:
        self.command = settings.lint_command
        self.filename = filename

    def command_build(self, config: LintConfig) -> List[str]:
        builtins = ", ".join(json.dumps(name) for name in sorted(config.predefined))
        return [
            self.command, "check",
            "--output-format", "json",
            "--no-cache",
            "--exit-zero",
            "--config", f"builtins = [{builtins}]",
            "--stdin-filename", self.filename,
            "-",
        ]

    def lint(self, code: str, config: LintConfig) -> List[LintFinding]:
        """
        Lint a code string

        Returns:
            Findings with ``line`` as an expanded line index

        Raises:
            LintError: ruff is missing, failed, or printed unreadable output
        """
        command = self.command_build(config)
        LOG(f"Running {' '.join(command)} in {config.directory}", level=3)
        try:
            completed = subprocess.run(  # noqa: S603
                command,
                input=code,
                capture_output=True,
                text=True,
                cwd=config.directory,
                check=False,
            )
        except FileNotFoundError as error:
            raise LintError(f"lint command not found: {self.command}") from error

        if completed.returncode != 0:
            raise LintError(f"{self.command} exited with {completed.returncode}: {completed.stderr.strip()}")

        try:
            diagnostics = _RUFF_OUTPUT.validate_json(completed.stdout or "[]")
        except ValidationError as error:
            raise LintError(f"unreadable {self.command} output: {error}") from error

        return [
            LintFinding(
                line=diagnostic.location.row - 1,
                column=diagnostic.location.column,
                message=diagnostic.message,
                rule=diagnostic.code or "syntax",
            )
            for diagnostic in diagnostics
        ]
