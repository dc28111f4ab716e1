"""
Models package for adoctest

Contains data structures and type definitions for the validation pipeline.
"""

from .state import ProgramState, pipeline
from .document import Document, Origin
from .blocks import Block, PendingBlockConfig, PrologLine, MODE_OFF, MODE_LINT, RESERVED_MODES
from .results import (
    Diagnostic,
    DocumentReport,
    ExecutionResult,
    ExecutionStatus,
    Failure,
    FailureKind,
    LintFinding,
    RewriteWarning,
)

__all__ = [
    "ProgramState",
    "pipeline",
    "Document",
    "Origin",
    "Block",
    "PendingBlockConfig",
    "PrologLine",
    "MODE_OFF",
    "MODE_LINT",
    "RESERVED_MODES",
    "Diagnostic",
    "DocumentReport",
    "ExecutionResult",
    "ExecutionStatus",
    "Failure",
    "FailureKind",
    "LintFinding",
    "RewriteWarning",
]
