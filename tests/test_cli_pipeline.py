"""
CLI pipeline tests

Drives the program stages directly with a ProgramState, as main() does
after argument parsing.
"""

import tempfile
from argparse import Namespace
from pathlib import Path

import pytest

from adoctest.__main__ import env_check, documents_validate, report_write, results_report
from adoctest.models import ProgramState, pipeline


def state_make(inputdir: Path, outputdir: Path, *names: str) -> ProgramState:
    options = Namespace(inputFile=list(names), lint=False, timeout=None, verbosity=0, unknown="ignored")
    return ProgramState.state_createFromNamespace(options, inputdir=inputdir, outputdir=outputdir)


class TestProgramState:
    def test_unknown_options_dropped(self):
        state = state_make(Path("in"), Path("out"), "a.adoc")

        assert state.inputFile == ["a.adoc"]
        assert not hasattr(state, "unknown")

    def test_copy_is_independent_object(self):
        state = state_make(Path("in"), Path("out"), "a.adoc")
        assert state.copy() is not state


class TestStages:
    """env_check -> documents_validate -> report_write -> results_report"""

    def test_passing_documents(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir) / "in"
            inputdir.mkdir()
            (inputdir / "a.adoc").write_text("----\n1 + 2  # => 3\n----\n", encoding="utf-8")
            outputdir = Path(tmpdir) / "out"

            state = pipeline(
                state_make(inputdir, outputdir, "a.adoc"),
                env_check, documents_validate, report_write, results_report,
            )

            assert state.envOK
            assert len(state.reports) == 1
            assert state.reports[0].assertions_passed == 1
            report_text = state.reportFile.read_text(encoding="utf-8")
            assert "1 code blocks and 1 assertions passed." in report_text

    def test_missing_document_does_not_block_others(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir)
            (inputdir / "ok.adoc").write_text("----\nx = 1\n----\n", encoding="utf-8")

            state = pipeline(
                state_make(inputdir, inputdir / "out", "missing.adoc", "ok.adoc"),
                env_check, documents_validate,
            )

            assert list(state.fatalErrors) == [str(inputdir / "missing.adoc")]
            assert state.reports[0].blocks_run == 1

    def test_failures_exit_nonzero(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            inputdir = Path(tmpdir)
            (inputdir / "bad.adoc").write_text("----\nundefined_name\n----\n", encoding="utf-8")

            with pytest.raises(SystemExit) as info:
                pipeline(
                    state_make(inputdir, inputdir / "out", "bad.adoc"),
                    env_check, documents_validate, report_write, results_report,
                )

            assert info.value.code == 1
