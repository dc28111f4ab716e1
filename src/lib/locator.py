"""
Diagnostic locator

Resolves failures, advisory warnings and lint findings from expanded line
numbers to the file and line the author wrote, and formats them for the
report.

Rewriting never changes line counts, so an expanded line number only has
to go through the document's origin map to undo include splicing.
"""

import traceback
from pathlib import Path
from typing import List, Optional

from ..config import appsettings, AppSettings
from ..models.document import Document, Origin
from ..models.results import Diagnostic, Failure, LintFinding, RewriteWarning
from .sandbox import AssertionFailure


PACKAGE_ROOT = Path(__file__).resolve().parent.parent


class DiagnosticLocator:
    """
    Maps expanded coordinates back to original files

    Attributes:
        document: Document whose origin map is used
        settings: Application settings (sample filename, frame count)
    """

    def __init__(self, document: Document, settings: AppSettings = appsettings) -> None:
        self.document = document
        self.settings = settings

    def locate(self, line: Optional[int], fallback: int = 0) -> Origin:
        """
        Original location of an expanded line

        Args:
            line: Expanded line index (None when unknown)
            fallback: Expanded index used when ``line`` is None

        Returns:
            Origin from the document's origin map; indexes outside the
            document resolve against the root file itself
        """
        index = fallback if line is None else line
        origin = self.document.origin_get(index)
        if origin is None:
            return Origin(self.document.path, index)
        return origin

    def describe(self, failure: Failure) -> Diagnostic:
        """
        Resolve a Failure into a Diagnostic

        Assertion failures report the actual and expected values and the
        label recorded at rewrite time. Other errors report up to
        ``settings.context_frames`` traceback frames, leaving out frames from
        this package.
        """
        error = failure.error
        origin = self.locate(failure.line, fallback=failure.block)
        diagnostic = Diagnostic(
            kind=type(error).__name__,
            message=self.message_get(error),
            origin=origin,
        )

        if isinstance(error, AssertionFailure):
            if error.has_values:
                diagnostic.details.append(f"actual:   {error.actual!r}")
                diagnostic.details.append(f"expected: {error.expected!r}")
            if error.label:
                diagnostic.details.append(f"label:    {error.label}")
        elif isinstance(error, SyntaxError):
            if failure.source_line is not None:
                diagnostic.details.append(failure.source_line.strip())
        else:
            diagnostic.details.extend(self.frames_describe(error))
        return diagnostic

    def message_get(self, error: BaseException) -> str:
        if isinstance(error, SyntaxError):
            return error.msg or "invalid syntax"
        message = str(error)
        if isinstance(error, AssertionFailure) and not message:
            return error.label or "assertion failed"
        return message.splitlines()[0] if message else type(error).__name__

    def frames_describe(self, error: BaseException) -> List[str]:
        """
        First few user-visible frames of an error, innermost last

        Sample frames are shown in original coordinates with the original
        line text; frames from library code are shown as Python reports
        them; frames inside adoctest itself are dropped.
        """
        limit = self.settings.context_frames
        if limit <= 0:
            return []

        described: List[str] = []
        for frame in traceback.extract_tb(error.__traceback__):
            if frame.filename == self.settings.sample_filename:
                index = (frame.lineno or 1) - 1
                text = (self.document.line_get(index) or "").strip()
                described.append(f"at {self.locate(index)}: {text}")
                continue
            if self.frame_isInternal(frame.filename):
                continue
            described.append(f"at {frame.filename}:{frame.lineno} in {frame.name}")
        return described[-limit:]

    @staticmethod
    def frame_isInternal(filename: str) -> bool:
        try:
            return Path(filename).resolve().is_relative_to(PACKAGE_ROOT)
        except (OSError, ValueError):
            return False

    def warning_describe(self, warning: RewriteWarning) -> Diagnostic:
        return Diagnostic(
            kind="warning",
            message=warning.message,
            origin=self.locate(warning.line),
            details=[warning.text.strip()],
        )

    def finding_describe(self, finding: LintFinding) -> Diagnostic:
        return Diagnostic(
            kind=f"lint {finding.rule}",
            message=finding.message,
            origin=self.locate(finding.line),
            details=[(self.document.line_get(finding.line) or "").strip()],
        )

    def format(self, failure: Failure) -> str:
        return self.describe(failure).format()
