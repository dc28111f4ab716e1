"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the validation pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as validation progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, lint, timeout
        - env_check: sourceFiles, envOK
        - documents_validate: reports, fatalErrors
        - report_write: reportFile
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the documents
        outputdir: Directory where the text report is written
        verbosity: Logging verbosity level (1-3)
        inputFile: Document filenames (relative to inputdir)
        lint: Run the external lint collaborator on every non-off block
        timeout: Per-block wall-clock budget override in seconds
        envOK: Environment validation passed
        sourceFiles: Resolved document paths
        reports: DocumentReport per successfully loaded document
        fatalErrors: Document path -> fatal error message
        reportFile: Path of the written text report
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: List[str] = field(default_factory=list)
    lint: bool = field(default=False)
    timeout: Optional[float] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    sourceFiles: List[Path] = field(default_factory=list)
    reports: List[Any] = field(default_factory=list)  # List[DocumentReport] at runtime
    fatalErrors: Dict[str, str] = field(default_factory=dict)
    reportFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the validation pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, lint, etc.)
            inputdir: Directory containing documents
            outputdir: Directory for the report

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Only keep options that are ProgramState fields
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            documents_validate,
            report_write,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
