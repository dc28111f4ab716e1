"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use ADOCTEST_ prefix (e.g., ADOCTEST_TIMEOUT_SECONDS=2.5).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use ADOCTEST_ prefix.

    Examples:
        ADOCTEST_TIMEOUT_SECONDS=10
        ADOCTEST_CONTEXT_FRAMES=5
        ADOCTEST_LINT_COMMAND=/opt/bin/ruff
    """

    model_config = SettingsConfigDict(
        env_prefix="ADOCTEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Execution configuration
    timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Wall-clock budget for running one block (prolog plus code)",
    )

    assertion_name: str = Field(
        default="check",
        description="Name the counting assertion object is bound to in every sandbox",
    )

    sample_filename: str = Field(
        default="<sample>",
        description="Pseudo filename given to compiled samples; identifies sample frames in tracebacks",
    )

    # Reporting configuration
    context_frames: int = Field(
        default=3,
        ge=0,
        description="Traceback frames shown for non-assertion failures",
    )

    report_filename: str = Field(
        default="adoctest-report.txt",
        description="Name of the text report written to the output directory",
    )

    # Lint configuration
    lint_command: str = Field(
        default="ruff",
        description="Executable used by the ruff lint collaborator",
    )

    def label_quote(self, text: str) -> str:
        """
        Quote text for use as a diagnostic label in rewritten code.

        Example:
            >>> AppSettings().label_quote("1 + 1  # => 2")
            "'1 + 1  # => 2'"
        """
        return repr(text.strip())


# Singleton instance - import this in your code
appsettings = AppSettings()
