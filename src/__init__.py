"""
adoctest - Executable samples for AsciiDoc documents

Extracts the Python samples embedded in a document, turns their assertion
comments into checks, runs them and reports failures at the file and line
the author wrote.
"""

__version__ = "1.0.0"

from .lib import DocumentValidator, document_validate, RuffLinter, LOG, state_connectToLogger

__all__ = ["DocumentValidator", "document_validate", "RuffLinter", "LOG", "state_connectToLogger", "__version__"]
