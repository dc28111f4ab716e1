"""
Document validator

Runs the whole pipeline for one document:

    SourceLoader -> Segmenter -> Rewriter -> (Linter) -> Executor -> DiagnosticLocator

Each DocumentValidator owns its own SandboxManager and AssertionCounter, so
several documents can be validated in one process without sharing named
sandboxes or counts.
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config import appsettings, AppSettings
from ..models.blocks import Block
from ..models.document import Document
from ..models.results import DocumentReport, LintFinding
from .executor import Executor, source_layout
from .lint import Linter, lintConfig_make
from .loader import SourceLoader, text_read
from .locator import DiagnosticLocator
from .log import LOG
from .rewriter import Rewriter
from .sandbox import AssertionCounter, SandboxManager
from .segmenter import Segmenter


def lint_source(*blocks: Block) -> str:
    """Prolog and rewritten code of blocks, laid out at expanded lines"""
    entries: List[Tuple[int, str]] = []
    for block in blocks:
        entries.extend((entry.line, entry.text) for entry in block.prolog)
        entries.extend(block.lines_numbered())
    return source_layout(entries)


def lint_groups(blocks: Iterable[Block]) -> List[List[Block]]:
    """
    Blocks the linter sees together

    All blocks of a shared context form one group, so names bound in an
    earlier block are defined for later ones. Isolated and ``lint`` blocks
    are linted alone; ``off`` blocks are left out.
    """
    groups: List[List[Block]] = []
    contexts: Dict[str, List[Block]] = {}
    for block in blocks:
        if block.is_skipped:
            continue
        if block.mode is None or block.is_lintOnly:
            groups.append([block])
            continue
        group = contexts.get(block.mode)
        if group is None:
            group = contexts[block.mode] = []
            groups.append(group)
        group.append(block)
    return groups


class DocumentValidator:
    """
    Validates the samples of one document

    Attributes:
        path: Root document path
        settings: Application settings
        linter: Optional lint collaborator; when set, every block not in
                ``off`` mode is linted
        timeout: Per-block time budget override
        counter: Successful checks in this run
        sandboxes: Sandboxes for this run
    """

    def __init__(
        self,
        path: Path,
        settings: AppSettings = appsettings,
        linter: Optional[Linter] = None,
        timeout: Optional[float] = None,
        reader: Callable[[Path], str] = text_read,
    ) -> None:
        self.path = Path(path)
        self.settings = settings
        self.linter = linter
        self.timeout = timeout
        self.reader = reader
        self.counter = AssertionCounter()
        self.sandboxes = SandboxManager(self.counter, settings)

    def validate(self) -> DocumentReport:
        """
        Load, segment, rewrite, lint and run the document

        Returns:
            DocumentReport with every failure, warning and finding resolved
            to original file:line

        Raises:
            FileNotFoundError: The document or one of its includes is missing
            LintError: The lint collaborator could not run
        """
        LOG(f"Validating {self.path}", level=1)
        document = SourceLoader(self.path, reader=self.reader).load()
        blocks = Segmenter(document).segment()

        rewriter = Rewriter(self.settings)
        warnings = rewriter.rewrite(blocks)
        LOG(f"Rewrote {rewriter.rewritten} assertion lines", level=2)

        findings = self.blocks_lint(document, blocks)

        executor = Executor(document, self.sandboxes, self.settings, timeout=self.timeout)
        executor.runAll(blocks)

        locator = DiagnosticLocator(document, self.settings)
        report = DocumentReport(
            path=self.path,
            blocks_found=len(blocks),
            blocks_run=executor.blocks_run,
            assertions_passed=self.counter.passed,
            failures=list(executor.failures),
            warnings=warnings,
            lint_findings=findings,
        )
        # Failures and findings interleaved in expanded (document) order
        ordered = [
            (failure.block if failure.line is None else failure.line, locator.describe(failure))
            for failure in report.failures
        ]
        ordered.extend((finding.line, locator.finding_describe(finding)) for finding in findings)
        ordered.sort(key=lambda pair: pair[0])
        report.diagnostics.extend(diagnostic for _, diagnostic in ordered)
        report.advisories.extend(locator.warning_describe(warning) for warning in warnings)

        LOG(report.summary_line(), level=1)
        return report

    def blocks_lint(self, document: Document, blocks: List[Block]) -> List[LintFinding]:
        if self.linter is None:
            return []
        config = lintConfig_make(document.path.parent, self.settings)
        findings: List[LintFinding] = []
        for group in lint_groups(blocks):
            findings.extend(self.linter.lint(lint_source(*group), config))
        LOG(f"Lint reported {len(findings)} findings", level=2)
        return findings


def document_validate(
    path: Path,
    settings: AppSettings = appsettings,
    linter: Optional[Linter] = None,
    timeout: Optional[float] = None,
) -> DocumentReport:
    """Validate one document with a fresh DocumentValidator"""
    return DocumentValidator(path, settings=settings, linter=linter, timeout=timeout).validate()
