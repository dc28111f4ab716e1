"""
adoctest - Executable samples for AsciiDoc documents

Runs the Python samples embedded in a document and checks their assertion
comments.
"""

__version__ = "1.0.0"

from .loader import SourceLoader
from .segmenter import Segmenter
from .rewriter import Rewriter
from .sandbox import SandboxManager, Sandbox, CountingAssert, AssertionFailure
from .executor import Executor
from .locator import DiagnosticLocator
from .lint import Linter, LintConfig, RuffLinter, LintError
from .validator import DocumentValidator, document_validate
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "SourceLoader",
    "Segmenter",
    "Rewriter",
    "SandboxManager",
    "Sandbox",
    "CountingAssert",
    "AssertionFailure",
    "Executor",
    "DiagnosticLocator",
    "Linter",
    "LintConfig",
    "RuffLinter",
    "LintError",
    "DocumentValidator",
    "document_validate",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
