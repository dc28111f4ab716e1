"""
Result models for document validation

Failure, warning and lint records collected while a document is processed,
the resolved Diagnostic form used for reporting, and the per-document
report.
"""

from enum import Enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .document import Origin


class FailureKind(Enum):
    """Stage at which a block failed"""
    COMPILE = "compile"
    RUN = "run"


class ExecutionStatus(Enum):
    """Outcome of handing one block to the executor"""
    SKIPPED = "skipped"            # // test:off
    LINT_ONLY = "lint-only"        # // test:lint
    PASSED = "passed"
    COMPILE_FAILED = "compile-failed"
    RUN_FAILED = "run-failed"


@dataclass
class Failure:
    """
    A compile or run failure of one block

    Attributes:
        kind: FailureKind.COMPILE or FailureKind.RUN
        error: The underlying exception
        line: Expanded line index implicated (None when unknown)
        block: Expanded start line of the failing block
        source_line: Original (unrewritten) document text at ``line``
    """
    kind: FailureKind
    error: BaseException
    line: Optional[int]
    block: int
    source_line: Optional[str] = None


@dataclass
class ExecutionResult:
    status: ExecutionStatus
    failure: Optional[Failure] = None


@dataclass(frozen=True)
class RewriteWarning:
    """
    Advisory: an assertion comment that will never be checked

    Attributes:
        line: Expanded line index
        text: Line text, left unrewritten
        message: Human-readable explanation
    """
    line: int
    text: str
    message: str = "assertion present in a block that will not run"


@dataclass(frozen=True)
class LintFinding:
    """
    One finding from the external lint collaborator

    Attributes:
        line: Expanded line index
        column: One-based column reported by the linter
        message: Linter message text
        rule: Linter rule identifier (e.g. "F841")
    """
    line: int
    column: int
    message: str
    rule: str


@dataclass
class Diagnostic:
    """
    A failure, warning or finding resolved to original coordinates

    Attributes:
        kind: Error class name, "warning", or "lint <rule>"
        message: One-line description
        origin: Original file and line
        details: Extra indented lines (values, label, context frames)
    """
    kind: str
    message: str
    origin: Origin
    details: List[str] = field(default_factory=list)

    def format(self) -> str:
        """
        Render as ``<kind>: <message> at <file>:<line>`` plus detail lines

        Example:
            >>> Diagnostic("NameError", "name 'x' is not defined",
            ...            Origin(Path("a.adoc"), 9)).format()
            "NameError: name 'x' is not defined at a.adoc:10"
        """
        header = f"{self.kind}: {self.message} at {self.origin}"
        return "\n".join([header, *(f"    {detail}" for detail in self.details)])


@dataclass
class DocumentReport:
    """
    Everything learned about one document

    Attributes:
        path: Root document path
        blocks_found: Number of blocks segmented
        blocks_run: Blocks compiled and run without error
        assertions_passed: Successful checks across all blocks
        failures: Compile and run failures, document order
        warnings: Advisory rewrite warnings
        lint_findings: Lint collaborator findings
        diagnostics: Failures and findings resolved for display
        advisories: Warnings resolved for display
    """
    path: Path
    blocks_found: int = 0
    blocks_run: int = 0
    assertions_passed: int = 0
    failures: List[Failure] = field(default_factory=list)
    warnings: List[RewriteWarning] = field(default_factory=list)
    lint_findings: List[LintFinding] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    advisories: List[Diagnostic] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.failures) + len(self.lint_findings)

    @property
    def ok(self) -> bool:
        return self.error_count == 0

    def summary_line(self) -> str:
        return (
            f"{self.path}: {self.blocks_run} code blocks and "
            f"{self.assertions_passed} assertions passed."
        )

    def render(self) -> str:
        """Summary line, then the error count and each formatted error"""
        parts = [self.summary_line()]
        if self.diagnostics:
            noun = "error" if len(self.diagnostics) == 1 else "errors"
            parts.append(f"{len(self.diagnostics)} {noun}:")
            parts.extend(diagnostic.format() for diagnostic in self.diagnostics)
        return "\n".join(parts)
