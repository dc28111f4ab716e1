"""
Assertion rewriter

Turns assertion comments in sample code into executable checks, one line
at a time and without ever adding or removing a line, so expanded line
numbers stay valid for diagnostics.

Three comment dialects are recognized, first match wins:

    1. Arrow            total(3, 4)  # => 7
                        -> check.equal((total(3, 4)), (7), 'total(3, 4)  # => 7')
    2. Named equality   result = total(3, 4)  # result == 7
                        -> result = total(3, 4); check.equal(result, (7), '# result == 7')
    3. Throws           json.loads("{")  # !bad json
                        -> check.throws(lambda: (json.loads("{")), 'json.loads("{")  # !bad json')

Comments are located by lexing each whole block with the Pygments Python
lexer, so a ``#`` inside a string literal, multi-line ones included, is
never taken for an assertion.
"""

import ast
import re
from enum import Enum
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from pygments.lexers import PythonLexer
from pygments.token import Comment

from ..config import appsettings, AppSettings
from ..models.blocks import Block
from ..models.results import RewriteWarning
from .log import LOG, WARN


ARROW_PATTERN = re.compile(r'^#\s*=>\s*(?P<value>.+?)\s*$')
NAMED_EQUALITY_PATTERN = re.compile(
    r'^#\s*(?P<name>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)\s*==\s*(?P<value>.+?)\s*$'
)
THROWS_PATTERN = re.compile(r'^#\s*!(?P<commentary>.*)$')


class AssertionDialect(Enum):
    ARROW = "arrow"
    NAMED_EQUALITY = "named-equality"
    THROWS = "throws"


@dataclass
class CommentSplit:
    """
    A code line split at its trailing comment

    Attributes:
        code: Text before the comment (includes indentation)
        comment: Comment text starting with '#', without surrounding whitespace
    """
    code: str
    comment: str

    @property
    def indent(self) -> str:
        return self.code[:len(self.code) - len(self.code.lstrip())]

    @property
    def expression(self) -> str:
        return self.code.strip()


@dataclass
class AssertionMatch:
    dialect: AssertionDialect
    split: CommentSplit
    match: re.Match


def expression_truncate(fragment: str) -> Optional[str]:
    """
    Longest parseable prefix of an expected-value fragment

    Tries to parse the fragment as a Python expression. On a syntax error
    the fragment is cut at the last ':' or ';' at or before the failure
    point and parsing is retried, until something parses or nothing is
    left. This keeps dict literals whole while dropping trailing
    commentary.

    Args:
        fragment: Text after ``=>`` (or ``==``) in an assertion comment

    Returns:
        The parseable expression text, or None

    Example:
        >>> expression_truncate("7; the sum")
        '7'
        >>> expression_truncate("{'a': 1}")
        "{'a': 1}"
        >>> expression_truncate("[1, 2]: a list")
        '[1, 2]'
    """
    candidate = fragment.strip()
    while candidate:
        try:
            ast.parse(candidate, mode="eval")
            return candidate
        except SyntaxError as error:
            limit = len(candidate)
            if error.offset is not None and error.lineno in (None, 1):
                limit = min(max(error.offset, 1), len(candidate))
            cut = max(candidate.rfind(":", 0, limit), candidate.rfind(";", 0, limit))
            if cut < 0:
                # Failure reported before any separator ("forgot a comma?")
                cut = max(candidate.rfind(":"), candidate.rfind(";"))
            if cut < 0:
                return None
            candidate = candidate[:cut].rstrip()
    return None


class Rewriter:
    """
    Rewrites assertion comments in blocks, in place

    Attributes:
        settings: Application settings (assertion object name, label quoting)
        lexer: Pygments Python lexer used to find comments
        warnings: Advisory warnings for assertions in ``off`` blocks
        rewritten: Number of lines rewritten so far
    """

    def __init__(self, settings: AppSettings = appsettings) -> None:
        self.settings = settings
        self.lexer = PythonLexer(stripnl=False)
        self.warnings: List[RewriteWarning] = []
        self.rewritten = 0

    def rewrite(self, blocks: Iterable[Block]) -> List[RewriteWarning]:
        """
        Rewrite every block; returns the warnings produced by this call

        Blocks in ``off`` mode are left untouched; each assertion comment in
        them yields one RewriteWarning.
        """
        produced: List[RewriteWarning] = []
        for block in blocks:
            produced.extend(self.block_rewrite(block))
        self.warnings.extend(produced)
        return produced

    def block_rewrite(self, block: Block) -> List[RewriteWarning]:
        warnings: List[RewriteWarning] = []
        columns = self.comments_locate(block.code)
        for offset, line in enumerate(block.code):
            if offset not in columns:
                continue
            found = self.line_classify(line, columns[offset])
            if found is None:
                continue
            if block.is_skipped:
                warning = RewriteWarning(line=block.start_line + offset, text=line)
                WARN(f"{warning.message}: line {warning.line + 1}: {line.strip()}")
                warnings.append(warning)
                continue
            block.code[offset] = self.line_build(line, found)
            self.rewritten += 1
            LOG(f"Rewrote {found.dialect.value} assertion: {block.code[offset].strip()}", level=3)
        return warnings

    def comments_locate(self, lines: List[str]) -> Dict[int, int]:
        """
        Column of the first comment token on each line

        The lines are lexed as one source, so a '#' inside a multi-line
        string is not mistaken for a comment.

        Returns:
            {line offset: column} for the lines that carry a comment
        """
        columns: Dict[int, int] = {}
        if not any("#" in line for line in lines):
            return columns
        row, column = 0, 0
        for token_type, value in self.lexer.get_tokens("\n".join(lines)):
            if token_type in Comment and row not in columns:
                columns[row] = column
            newlines = value.count("\n")
            if newlines:
                row += newlines
                column = len(value) - value.rfind("\n") - 1
            else:
                column += len(value)
        return columns

    def comment_split(self, line: str, column: Optional[int] = None) -> Optional[CommentSplit]:
        """
        Split a line at its first Python comment token

        Args:
            line: Code line
            column: Where the comment starts, when already known from
                    lexing the surrounding block; otherwise the line is
                    lexed on its own

        Returns:
            CommentSplit, or None when the line has no comment
        """
        if column is None:
            column = self.comments_locate([line]).get(0)
        if column is None:
            return None
        return CommentSplit(code=line[:column], comment=line[column:].strip())

    def line_classify(self, line: str, column: Optional[int] = None) -> Optional[AssertionMatch]:
        """
        Detect which assertion dialect (if any) a line uses

        Priority: arrow, then named equality, then throws. Arrow and throws
        need a non-empty expression before the comment.
        """
        split = self.comment_split(line, column)
        if split is None:
            return None

        match = ARROW_PATTERN.match(split.comment)
        if match and split.expression:
            return AssertionMatch(AssertionDialect.ARROW, split, match)

        match = NAMED_EQUALITY_PATTERN.match(split.comment)
        if match:
            return AssertionMatch(AssertionDialect.NAMED_EQUALITY, split, match)

        match = THROWS_PATTERN.match(split.comment)
        if match and split.expression:
            return AssertionMatch(AssertionDialect.THROWS, split, match)

        return None

    def line_build(self, line: str, found: AssertionMatch) -> str:
        """Executable replacement for an assertion line (always a single line)"""
        check = self.settings.assertion_name
        split = found.split

        if found.dialect is AssertionDialect.ARROW:
            fragment = found.match.group("value")
            value = expression_truncate(fragment) or fragment.strip()
            label = self.settings.label_quote(line)
            return f"{split.indent}{check}.equal(({split.expression}), ({value}), {label})"

        if found.dialect is AssertionDialect.NAMED_EQUALITY:
            fragment = found.match.group("value")
            value = expression_truncate(fragment) or fragment.strip()
            label = self.settings.label_quote(split.comment)
            code = split.code.rstrip()
            if not code.strip():
                prefix = split.indent
            elif code.endswith(";"):
                prefix = code + " "
            else:
                prefix = code + "; "
            return f"{prefix}{check}.equal({found.match.group('name')}, ({value}), {label})"

        label = self.settings.label_quote(line)
        return f"{split.indent}{check}.throws(lambda: ({split.expression}), {label})"
