#!/usr/bin/env python3
"""
adoctest - Executable samples for AsciiDoc documents

Checks that the Python samples in a document still run and still produce
what the text claims they produce.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Samples are the documentation: no separate test files to keep in sync
    - Comment-driven: assertions live in ordinary Python comments
    - Author coordinates: every error is reported at the file:line the
      author edits, even across include::[] directives

Sample conventions:
    total(3, 4)  # => 7              value of the expression must equal 7
    # result == 7                    name must equal 7 at this point
    json.loads("{")  # !bad json     expression must raise

Directives (AsciiDoc comment lines before a ---- fenced block):
    // test:off        do not run the next block
    // test:lint       lint the next block, do not run it
    // test=<name>     run in the shared sandbox <name>
    // test><code>     run <code> first, in the same sandbox

Usage:
    adoctest inputdir/ outputdir/ --inputFile guide.adoc

    A summary per document is printed and the full report is written to
    outputdir/adoctest-report.txt.

Examples:
    # Validate two documents
    adoctest docs/ out/ --inputFile intro.adoc api.adoc

    # Also lint the samples with ruff, with a 2 second budget per block
    adoctest docs/ out/ --inputFile intro.adoc --lint --timeout 2

    # Verbose output
    adoctest docs/ out/ --inputFile intro.adoc -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import DocumentValidator, LintError, RuffLinter, __version__, LOG, state_connectToLogger
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
             _            _            _
   __ _   __| | ___   ___| |_ ___  ___| |_
  / _` | / _` |/ _ \ / __| __/ _ \/ __| __|
 | (_| || (_| | (_) | (__| ||  __/\__ \ |_
  \__,_| \__,_|\___/ \___|\__\___||___/\__|

  Executable samples for AsciiDoc documents
"""

# Define CLI arguments
parser = ArgumentParser(
    description="adoctest - run and check the Python samples embedded in AsciiDoc documents",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    required=True,
    nargs="+",
    type=str,
    help="Document(s) to validate (relative to inputdir)",
)

parser.add_argument(
    "--lint",
    action="store_true",
    default=False,
    help="Also lint every block not marked // test:off (uses ruff)",
)

parser.add_argument(
    "--timeout",
    default=None,
    type=float,
    help="Wall-clock budget per block in seconds (default: ADOCTEST_TIMEOUT_SECONDS or 5)",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Resolve document paths and prepare the output directory.

    Missing documents are not an error here: each document is validated
    independently, and a missing one is reported as fatal for that
    document alone.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - sourceFiles: Resolved document paths
            - envOK: True if the output directory is usable
    """
    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    state.sourceFiles = [state.inputdir / name for name in state.inputFile]
    for path in state.sourceFiles:
        LOG(f"Document: {path}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def documents_validate(inputstate: ProgramState) -> ProgramState:
    """
    Validate every document in turn.

    A fatal error in one document (missing file or include, lint tool not
    runnable) is recorded and the remaining documents are still validated.

    Args:
        inputstate: Program state with sourceFiles resolved

    Returns:
        ProgramState with added fields:
            - reports: DocumentReport per document that could be loaded
            - fatalErrors: Document path -> error message for the rest
    """
    state = inputstate.copy()
    state.reports = []
    state.fatalErrors = {}

    linter = RuffLinter(appsettings) if state.lint else None

    for path in state.sourceFiles:
        validator = DocumentValidator(path, settings=appsettings, linter=linter, timeout=state.timeout)
        try:
            state.reports.append(validator.validate())
        except (FileNotFoundError, LintError) as e:
            LOG(f"Fatal: {path}: {e}", level=1)
            state.fatalErrors[str(path)] = str(e)

    return state


def report_write(inputstate: ProgramState) -> ProgramState:
    """
    Write every document report to the output directory.

    Returns:
        ProgramState with added field:
            - reportFile: Path of the written report
    """
    state = inputstate.copy()

    sections = [report.render() for report in state.reports]
    sections.extend(f"{path}: fatal: {message}" for path, message in state.fatalErrors.items())

    state.reportFile = state.outputdir / appsettings.report_filename
    state.reportFile.write_text("\n\n".join(sections) + "\n", encoding="utf-8")
    LOG(f"Wrote {state.reportFile}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Print each document's summary and errors, then exit non-zero on errors.

    Returns:
        ProgramState unchanged when every document passed

    Exits:
        1 if any document had failures, lint findings or a fatal error
    """
    state: ProgramState = inputstate.copy()

    for report in state.reports:
        print(report.render())
        if state.verbosity >= 2:
            for advisory in report.advisories:
                print(advisory.format())

    for path, message in state.fatalErrors.items():
        print(f"Error: {path}: {message}", file=sys.stderr)

    failed = state.fatalErrors or any(not report.ok for report in state.reports)
    if failed:
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="adoctest - Executable samples for AsciiDoc documents",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - validate the samples of one or more documents.

    Orchestrates the full pipeline:
        1. env_check: Resolve document paths, create the output directory
        2. documents_validate: Load, rewrite, run and diagnose each document
        3. report_write: Write the text report
        4. results_report: Print summaries and set the exit status

    Args:
        options: CLI arguments from argparse
            - inputFile: List[str] - Documents to validate
            - lint: bool - Also lint samples
            - timeout: Optional[float] - Per-block time budget
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing the documents
        outputdir: Directory where the report is written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, documents_validate, report_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
