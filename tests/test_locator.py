"""
Diagnostic locator tests

Tests mapping expanded lines back to original files and the formatting
of assertion, syntax and runtime failures.
"""

from pathlib import Path

from adoctest.lib.executor import Executor
from adoctest.lib.locator import DiagnosticLocator
from adoctest.lib.rewriter import Rewriter
from adoctest.lib.sandbox import SandboxManager
from adoctest.lib.segmenter import blocks_segment
from adoctest.models.document import Document, Origin
from adoctest.models.results import Diagnostic, LintFinding, RewriteWarning


ROOT = Path("guide.adoc")
PART = Path("part.adoc")


def spliced_document() -> Document:
    """guide.adoc with part.adoc spliced in at its second line"""
    lines = (
        "= Guide",        # guide:1
        "----",           # part:1
        "value = 1",      # part:2
        "value + 1  # => 3",  # part:3
        "----",           # part:4
        "----",           # guide:3
        "missing_name",   # guide:4
        "----",           # guide:5
    )
    origins = (
        Origin(ROOT, 0),
        Origin(PART, 0), Origin(PART, 1), Origin(PART, 2), Origin(PART, 3),
        Origin(ROOT, 2), Origin(ROOT, 3), Origin(ROOT, 4),
    )
    return Document(path=ROOT, lines=lines, origins=origins)


def failures_collect(document: Document):
    blocks = blocks_segment(document)
    Rewriter().rewrite(blocks)
    executor = Executor(document, SandboxManager())
    executor.runAll(blocks)
    return executor.failures


class TestLocate:
    """Expanded line -> original file:line"""

    def test_line_in_included_file(self):
        locator = DiagnosticLocator(spliced_document())
        assert locator.locate(3) == Origin(PART, 2)

    def test_line_in_root_after_include(self):
        locator = DiagnosticLocator(spliced_document())
        assert locator.locate(6) == Origin(ROOT, 3)

    def test_unknown_line_uses_fallback(self):
        locator = DiagnosticLocator(spliced_document())
        assert locator.locate(None, fallback=2) == Origin(PART, 1)

    def test_out_of_range_resolves_against_root(self):
        locator = DiagnosticLocator(spliced_document())
        assert locator.locate(40) == Origin(ROOT, 40)


class TestDescribe:
    """Failure -> Diagnostic"""

    def test_assertion_failure_in_included_file(self):
        document = spliced_document()
        failure = failures_collect(document)[0]

        diagnostic = DiagnosticLocator(document).describe(failure)

        assert diagnostic.kind == "AssertionFailure"
        assert diagnostic.origin == Origin(PART, 2)
        assert "actual:   2" in diagnostic.details
        assert "expected: 3" in diagnostic.details
        assert "label:    value + 1  # => 3" in diagnostic.details
        assert diagnostic.format().startswith("AssertionFailure: 2 != 3 at part.adoc:3")

    def test_runtime_error_frames(self):
        document = spliced_document()
        failure = failures_collect(document)[1]

        diagnostic = DiagnosticLocator(document).describe(failure)

        assert diagnostic.kind == "NameError"
        assert diagnostic.message == "name 'missing_name' is not defined"
        assert diagnostic.origin == Origin(ROOT, 3)
        assert diagnostic.details == ["at guide.adoc:4: missing_name"]

    def test_internal_frames_excluded(self):
        document = spliced_document()
        failure = failures_collect(document)[1]

        details = DiagnosticLocator(document).describe(failure).details

        assert not any("executor.py" in detail or "sandbox.py" in detail for detail in details)

    def test_library_frames_kept(self):
        lines = ("----", "import json", "json.loads('{')", "----")
        document = Document(ROOT, lines, tuple(Origin(ROOT, i) for i in range(len(lines))))
        failure = failures_collect(document)[0]

        details = DiagnosticLocator(document).describe(failure).details

        assert len(details) == 3
        assert any("json" in detail and "guide.adoc" not in detail for detail in details)

    def test_syntax_error_message(self):
        lines = ("----", "x = 1", "if x", "----")
        document = Document(ROOT, lines, tuple(Origin(ROOT, i) for i in range(len(lines))))
        failure = failures_collect(document)[0]

        diagnostic = DiagnosticLocator(document).describe(failure)

        assert diagnostic.kind == "SyntaxError"
        assert diagnostic.origin == Origin(ROOT, 2)
        assert "line" not in diagnostic.message
        assert diagnostic.details == ["if x"]


class TestFormat:
    """Rendered forms"""

    def test_diagnostic_format(self):
        diagnostic = Diagnostic("NameError", "name 'x' is not defined", Origin(ROOT, 9), ["at guide.adoc:10: x"])
        assert diagnostic.format() == (
            "NameError: name 'x' is not defined at guide.adoc:10\n"
            "    at guide.adoc:10: x"
        )

    def test_warning(self):
        locator = DiagnosticLocator(spliced_document())
        diagnostic = locator.warning_describe(RewriteWarning(line=3, text="value + 1  # => 3"))

        assert diagnostic.format().startswith(
            "warning: assertion present in a block that will not run at part.adoc:3"
        )

    def test_lint_finding(self):
        locator = DiagnosticLocator(spliced_document())
        diagnostic = locator.finding_describe(
            LintFinding(line=6, column=1, message="Undefined name `missing_name`", rule="F821")
        )

        assert diagnostic.kind == "lint F821"
        assert diagnostic.origin == Origin(ROOT, 3)
        assert diagnostic.details == ["missing_name"]
