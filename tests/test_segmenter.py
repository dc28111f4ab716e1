"""
Segmenter tests

Tests fence detection, directive accumulation between blocks and the
snapshot/reset of the pending configuration at each opening fence.
"""

from pathlib import Path

from adoctest.lib.segmenter import Segmenter, blocks_segment
from adoctest.models.blocks import PrologLine, PendingBlockConfig
from adoctest.models.document import Document, Origin


def document_make(text: str, path: Path = Path("doc.adoc")) -> Document:
    lines = tuple(text.splitlines())
    return Document(path=path, lines=lines, origins=tuple(Origin(path, i) for i in range(len(lines))))


class TestFences:
    """Fence detection and block contents"""

    def test_no_blocks(self):
        """Prose only produces no blocks"""
        assert blocks_segment(document_make("= Title\n\nJust prose.\n")) == []

    def test_single_block(self):
        """Lines between fences become the block's code"""
        blocks = blocks_segment(document_make("intro\n----\nx = 1\ny = 2\n----\noutro"))

        assert len(blocks) == 1
        assert blocks[0].start_line == 2
        assert blocks[0].code == ["x = 1", "y = 2"]
        assert blocks[0].mode is None
        assert blocks[0].end_line == 4

    def test_long_fences(self):
        """Four or more hyphens open and close a block"""
        blocks = blocks_segment(document_make("--------\na\n-----"))

        assert len(blocks) == 1
        assert blocks[0].code == ["a"]

    def test_three_hyphens_is_not_a_fence(self):
        assert blocks_segment(document_make("---\na\n---")) == []

    def test_multiple_blocks_in_order(self):
        blocks = blocks_segment(document_make("----\na\n----\ntext\n----\nb\n----"))

        assert [block.code for block in blocks] == [["a"], ["b"]]
        assert [block.start_line for block in blocks] == [1, 5]

    def test_empty_block(self):
        blocks = blocks_segment(document_make("----\n----"))

        assert len(blocks) == 1
        assert blocks[0].code == []

    def test_unterminated_block_closed_at_end(self):
        """A block still open at end of document is kept"""
        blocks = blocks_segment(document_make("----\na = 1\nb = 2"))

        assert len(blocks) == 1
        assert blocks[0].code == ["a = 1", "b = 2"]


class TestDirectives:
    """Directive comments configure the next block"""

    def test_mode_off(self):
        blocks = blocks_segment(document_make("// test:off\n----\nx\n----"))
        assert blocks[0].mode == "off"
        assert blocks[0].is_skipped

    def test_mode_lint_legacy_alias(self):
        """// testcode: is an alias of // test:"""
        blocks = blocks_segment(document_make("// testcode:lint\n----\nx\n----"))
        assert blocks[0].mode == "lint"
        assert blocks[0].is_lintOnly

    def test_mode_token_names_context(self):
        """Any other mode token is a shared-context name"""
        blocks = blocks_segment(document_make("// test:ctx\n----\nx\n----"))
        assert blocks[0].mode == "ctx"
        assert blocks[0].is_runnable

    def test_named_context(self):
        blocks = blocks_segment(document_make("// test=shared\n----\nx\n----"))
        assert blocks[0].mode == "shared"

    def test_empty_mode_resets_to_isolated(self):
        blocks = blocks_segment(document_make("// test:off\n// test:\n----\nx\n----"))
        assert blocks[0].mode is None

    def test_last_mode_wins(self):
        blocks = blocks_segment(document_make("// test:off\n// test:lint\n----\nx\n----"))
        assert blocks[0].mode == "lint"

    def test_off_wins_over_name(self):
        blocks = blocks_segment(document_make("// test=ctx\n// test:off\n----\nx\n----"))
        assert blocks[0].mode == "off"

    def test_prolog_lines_accumulate(self):
        """Prolog lines keep their order and the line they were written on"""
        blocks = blocks_segment(document_make(
            "// test>import math\nprose\n// test>radius = 2\n----\nmath.pi * radius\n----"
        ))

        assert blocks[0].prolog == [
            PrologLine(line=0, text="import math"),
            PrologLine(line=2, text="radius = 2"),
        ]

    def test_config_resets_after_block(self):
        """The next block starts from an empty configuration"""
        blocks = blocks_segment(document_make(
            "// test=ctx\n// test>a = 1\n----\nx\n----\n----\ny\n----"
        ))

        assert blocks[1].mode is None
        assert blocks[1].prolog == []

    def test_directives_inside_block_are_code(self):
        blocks = blocks_segment(document_make("----\n// test:off\nx\n----\n----\ny\n----"))

        assert blocks[0].code == ["// test:off", "x"]
        assert blocks[1].mode is None

    def test_trailing_directives_dropped(self):
        """Directives with no following block are ignored"""
        blocks = blocks_segment(document_make("----\nx\n----\n// test:off\n// test>y = 1"))

        assert len(blocks) == 1
        assert blocks[0].mode is None

    def test_directive_must_be_flush_left(self):
        blocks = blocks_segment(document_make("  // test:off\n----\nx\n----"))
        assert blocks[0].mode is None

    def test_segmenter_state_returns_outside(self):
        segmenter = Segmenter(document_make("----\nx\n----"))
        segmenter.segment()
        assert segmenter.current is None
        assert segmenter.pending == PendingBlockConfig()


class TestPendingBlockConfig:
    """Mode resolution"""

    def test_empty(self):
        assert PendingBlockConfig().block_mode() is None

    def test_lint_wins_over_name(self):
        assert PendingBlockConfig(mode="lint", name="ctx").block_mode() == "lint"

    def test_name_wins_over_mode_token(self):
        assert PendingBlockConfig(mode="legacy", name="ctx").block_mode() == "ctx"
