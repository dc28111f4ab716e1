"""
Block and directive models

Defines the records produced by the segmenter: the pending configuration
accumulated from directive comments between blocks, and the blocks
themselves.
"""

from dataclasses import dataclass, field
from typing import List, Optional


MODE_OFF = "off"
MODE_LINT = "lint"

# Modes that never get an execution environment
RESERVED_MODES = frozenset({MODE_OFF, MODE_LINT})


@dataclass(frozen=True)
class PrologLine:
    """
    One ``// test>`` directive

    Attributes:
        line: Expanded line index where the directive was written
        text: Code to run before the next block
    """
    line: int
    text: str


@dataclass
class PendingBlockConfig:
    """
    Configuration accumulated from directive comments for the next block

    Attributes:
        mode: Value of the last ``// test:`` (or ``// testcode:``) directive
        name: Value of the last ``// test=`` directive
        prolog: Prolog lines in document order

    Example:
        >>> config = PendingBlockConfig(mode="lint", name="ctx")
        >>> config.block_mode()
        'lint'
        >>> PendingBlockConfig(mode="ctx").block_mode()
        'ctx'
    """
    mode: Optional[str] = None
    name: Optional[str] = None
    prolog: List[PrologLine] = field(default_factory=list)

    def block_mode(self) -> Optional[str]:
        """
        Resolve the mode a block opened with this config will have

        ``off`` and ``lint`` always win. Otherwise an explicit ``test=`` name
        is used, then the mode token itself (the legacy dialect writes the
        shared-context name as the mode). None means a fresh environment.
        """
        if self.mode in RESERVED_MODES:
            return self.mode
        if self.name:
            return self.name
        return self.mode or None


@dataclass
class Block:
    """
    A fenced code region extracted from the document

    Attributes:
        start_line: Expanded line index of the first code line
                    (the line right after the opening fence)
        mode: "off", "lint", a shared-context name, or None (isolated)
        prolog: Prolog directives captured before the opening fence
        code: Code lines; rewritten in place, never resized

    Example:
        For the expanded lines::

            // test=ctx
            ----
            x = 1
            ----

        Block(start_line=2, mode="ctx", prolog=[], code=["x = 1"])
    """
    start_line: int
    mode: Optional[str] = None
    prolog: List[PrologLine] = field(default_factory=list)
    code: List[str] = field(default_factory=list)

    @property
    def end_line(self) -> int:
        """Expanded index one past the last code line"""
        return self.start_line + len(self.code)

    @property
    def is_skipped(self) -> bool:
        return self.mode == MODE_OFF

    @property
    def is_lintOnly(self) -> bool:
        return self.mode == MODE_LINT

    @property
    def is_runnable(self) -> bool:
        return self.mode not in RESERVED_MODES

    def lines_numbered(self):
        """Yield (expanded_index, text) for each code line"""
        for offset, text in enumerate(self.code):
            yield self.start_line + offset, text
