"""
Block segmenter

Splits an expanded Document into fenced code Blocks. Lines between blocks
are prose, except for directive comments that configure the next block:

    // test:off          never compile or run the next block
    // test:lint         lint the next block but do not run it
    // test:<name>       run in the shared sandbox <name> (legacy dialect)
    // testcode:<value>  legacy alias of // test:<value>
    // test=<name>       run in the shared sandbox <name>
    // test><code>       run <code> before the next block, same sandbox

Directive-looking lines inside a block are ordinary code.
"""

import re
from enum import Enum
from typing import List, Optional

from ..models.blocks import Block, PendingBlockConfig, PrologLine
from ..models.document import Document
from .log import LOG


FENCE_PATTERN = re.compile(r'^-{4,}')
MODE_PATTERN = re.compile(r'^// (?:test|testcode):(?P<value>.*)$')
NAME_PATTERN = re.compile(r'^// test=(?P<value>.*)$')
PROLOG_PATTERN = re.compile(r'^// test>(?P<value>.*)$')


class SegmenterState(Enum):
    OUTSIDE = "outside-block"
    INSIDE = "inside-block"


class Segmenter:
    """
    Two-state scanner turning a Document into an ordered list of Blocks

    Attributes:
        document: Document being scanned
        state: Current SegmenterState
        pending: Configuration collected for the next block
        current: Block being filled while INSIDE
        blocks: Finished blocks in document order
    """

    def __init__(self, document: Document) -> None:
        self.document = document
        self.state = SegmenterState.OUTSIDE
        self.pending = PendingBlockConfig()
        self.current: Optional[Block] = None
        self.blocks: List[Block] = []

    def segment(self) -> List[Block]:
        """
        Scan every expanded line and return the blocks found

        Returns:
            Blocks in document order, each with the mode and prolog that
            were pending when its opening fence was seen
        """
        for index, line in enumerate(self.document.lines):
            if self.state is SegmenterState.OUTSIDE:
                self.line_outside(index, line)
            else:
                self.line_inside(index, line)

        if self.current is not None:
            LOG(
                f"Unterminated block at {self.document.origin_get(self.current.start_line - 1)}"
                " closed at end of document",
                level=1,
            )
            self.block_close()

        LOG(f"Segmented {len(self.blocks)} blocks from {self.document.path}", level=2)
        return self.blocks

    def line_outside(self, index: int, line: str) -> None:
        if FENCE_PATTERN.match(line):
            self.block_open(index)
            return
        self.directive_apply(index, line)

    def line_inside(self, index: int, line: str) -> None:
        if FENCE_PATTERN.match(line):
            self.block_close()
            return
        assert self.current is not None
        self.current.code.append(line)

    def directive_apply(self, index: int, line: str) -> None:
        """
        Fold a directive comment into the pending configuration

        Mode and name are overwritten; prolog lines accumulate. Lines that
        are not directives are ignored.
        """
        match = MODE_PATTERN.match(line)
        if match:
            self.pending.mode = match.group("value").strip() or None
            return

        match = NAME_PATTERN.match(line)
        if match:
            self.pending.name = match.group("value").strip() or None
            return

        match = PROLOG_PATTERN.match(line)
        if match:
            self.pending.prolog.append(PrologLine(line=index, text=match.group("value").rstrip()))

    def block_open(self, index: int) -> None:
        """Start a block on the line after the fence, consuming the pending config"""
        self.current = Block(
            start_line=index + 1,
            mode=self.pending.block_mode(),
            prolog=list(self.pending.prolog),
        )
        self.pending = PendingBlockConfig()
        self.state = SegmenterState.INSIDE

    def block_close(self) -> None:
        assert self.current is not None
        LOG(
            f"Block at line {self.current.start_line}: {len(self.current.code)} lines,"
            f" mode={self.current.mode!r}, prolog={len(self.current.prolog)}",
            level=3,
        )
        self.blocks.append(self.current)
        self.current = None
        self.state = SegmenterState.OUTSIDE


def blocks_segment(document: Document) -> List[Block]:
    """Convenience wrapper: segment a document with a fresh Segmenter"""
    return Segmenter(document).segment()
