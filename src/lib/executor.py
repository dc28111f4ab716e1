"""
Block executor

Compiles and runs each block (prolog first, then code) in the sandbox its
mode calls for. Source handed to the compiler is padded with blank lines
so that every statement keeps its expanded line number: line ``n`` of the
compiled text is expanded line ``n - 1``. Tracebacks and syntax errors can
then be mapped straight back through the document's origin map.

A failure in one block is recorded and the next block runs as usual.
"""

import traceback
from types import CodeType
from typing import Iterable, List, Optional, Tuple

from ..config import appsettings, AppSettings
from ..models.blocks import Block
from ..models.document import Document
from ..models.results import ExecutionResult, ExecutionStatus, Failure, FailureKind
from .log import LOG
from .sandbox import ExecutionTimeout, SandboxManager


def source_layout(entries: Iterable[Tuple[int, str]]) -> str:
    """
    Place each (expanded_index, text) entry on its own line number

    Gaps are filled with blank lines, so the text of entry ``i`` sits on
    line ``i + 1`` of the result.

    Example:
        >>> source_layout([(2, "x = 1"), (3, "y = 2")])
        '\\n\\nx = 1\\ny = 2'
    """
    lines: List[str] = []
    for index, text in entries:
        if index < len(lines):
            raise ValueError(f"line {index} placed out of order")
        lines.extend([""] * (index - len(lines)))
        lines.append(text)
    return "\n".join(lines)


def block_source(block: Block) -> str:
    """Rewritten block code laid out at its expanded lines"""
    return source_layout(block.lines_numbered())


def prolog_source(block: Block) -> str:
    """Block prolog laid out at the lines of its directives"""
    return source_layout((entry.line, entry.text) for entry in block.prolog)


class Executor:
    """
    Runs blocks in their sandboxes and records failures

    Attributes:
        document: Document the blocks came from (for failure source lines)
        sandboxes: SandboxManager handing out environments
        settings: Application settings (timeout, sample filename)
        timeout: Wall-clock budget per block in seconds
        blocks_run: Blocks that compiled and ran without error
        failures: Failures recorded so far, in document order
    """

    def __init__(
        self,
        document: Document,
        sandboxes: SandboxManager,
        settings: AppSettings = appsettings,
        timeout: Optional[float] = None,
    ) -> None:
        self.document = document
        self.sandboxes = sandboxes
        self.settings = settings
        self.timeout = timeout if timeout is not None else settings.timeout_seconds
        self.blocks_run = 0
        self.failures: List[Failure] = []

    def run(self, block: Block) -> ExecutionResult:
        """
        Compile and run one block

        Returns:
            ExecutionResult; ``failure`` is set for COMPILE_FAILED and
            RUN_FAILED and also appended to ``self.failures``
        """
        if block.is_skipped:
            LOG(f"Skipping block at line {block.start_line} (off)", level=3)
            return ExecutionResult(ExecutionStatus.SKIPPED)
        if block.is_lintOnly:
            LOG(f"Not running block at line {block.start_line} (lint)", level=3)
            return ExecutionResult(ExecutionStatus.LINT_ONLY)

        sandbox = self.sandboxes.obtain(block.mode)
        filename = self.settings.sample_filename

        try:
            prolog: Optional[CodeType] = None
            if block.prolog:
                prolog = sandbox.compile(prolog_source(block), filename)
            code = sandbox.compile(block_source(block), filename)
        except SyntaxError as error:
            failure = self.failure_record(FailureKind.COMPILE, error, block)
            return ExecutionResult(ExecutionStatus.COMPILE_FAILED, failure)

        try:
            sandbox.run_all([part for part in (prolog, code) if part is not None], self.timeout)
        except (Exception, SystemExit, ExecutionTimeout) as error:
            failure = self.failure_record(FailureKind.RUN, error, block)
            return ExecutionResult(ExecutionStatus.RUN_FAILED, failure)

        self.blocks_run += 1
        LOG(f"Block at line {block.start_line} passed in {sandbox!r}", level=2)
        return ExecutionResult(ExecutionStatus.PASSED)

    def runAll(self, blocks: Iterable[Block]) -> List[ExecutionResult]:
        return [self.run(block) for block in blocks]

    def failure_record(self, kind: FailureKind, error: BaseException, block: Block) -> Failure:
        line = self.line_implicated(error)
        failure = Failure(
            kind=kind,
            error=error,
            line=line,
            block=block.start_line,
            source_line=self.document.line_get(line) if line is not None else None,
        )
        self.failures.append(failure)
        LOG(
            f"{kind.value} failure in block at line {block.start_line}: "
            f"{type(error).__name__}: {error}",
            level=2,
        )
        return failure

    def line_implicated(self, error: BaseException) -> Optional[int]:
        """
        Expanded line index an error points at, if it points into a sample

        Syntax errors in the sample itself carry their own line; for
        everything else, including syntax errors raised by code the sample
        runs, the innermost traceback frame running sample code is used.
        """
        filename = self.settings.sample_filename
        if isinstance(error, SyntaxError) and error.filename == filename and error.lineno:
            return error.lineno - 1

        line = None
        for frame in traceback.extract_tb(error.__traceback__):
            if frame.filename == filename and frame.lineno:
                line = frame.lineno - 1
        return line
