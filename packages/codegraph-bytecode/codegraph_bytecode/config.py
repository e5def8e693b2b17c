"""
Bytecode Verifier Settings

Environment variables use the SEMANTICA_BYTECODE_ prefix.
Example: SEMANTICA_BYTECODE_NAMESPACE_PREFIX, SEMANTICA_BYTECODE_LOG_LEVEL

The core (extractor, builder, accumulator, sanity checker) takes plain
parameters; only the orchestrator and the CLI read these settings.
"""

import re
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from codegraph_bytecode.logging import LOG_FORMATS

DEFAULT_NAMESPACE_PREFIX = "net/minecraft/"
DEFAULT_CLASS_PACKAGE = "dev/jorel/commandapi/nms"
DEFAULT_VERSION_PATTERN = r"(\d+)\.(\d+)\.(\d+)"
DEFAULT_ARCHIVE_PATTERN = (
    r"CommandAPI-(\d+)\.(\d+)\.(\d+)(-SNAPSHOT)?_(\d{1,2})_(\w{3})_(\d{4})_"
    r"\((\d{2}-\d{2}-\d{2}(am|pm|AM|PM))\)\.jar"
)


class BytecodeSettings(BaseSettings):
    """
    Bytecode verifier settings.

    Grouped by concern:
        workspace_root / version_pattern / archive_pattern / class_package
            where the per-version builds live and how they are recognized
        namespace_prefix
            symbols that mark a version-specific reference
        javap_executable
            external disassembler
        log_level / log_format
            structlog output
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SEMANTICA_BYTECODE_",
        extra="ignore",
    )

    workspace_root: Path = Field(default=Path("."), description="Folder holding one sub-folder per version")
    version_pattern: str = Field(default=DEFAULT_VERSION_PATTERN, description="Version folder name regex")
    archive_pattern: str = Field(default=DEFAULT_ARCHIVE_PATTERN, description="Build archive file name regex")
    class_package: str = Field(default=DEFAULT_CLASS_PACKAGE, description="Package path of the verified classes")
    namespace_prefix: str = Field(default=DEFAULT_NAMESPACE_PREFIX, description="Version-specific symbol prefix")
    javap_executable: str = Field(default="javap", description="Disassembler executable")
    clean_before_run: bool = Field(default=True, description="Remove previously extracted trees first")

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("version_pattern", "archive_pattern")
    @classmethod
    def _validate_regex(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {value!r}: {e}") from e
        return value

    @field_validator("namespace_prefix")
    @classmethod
    def _validate_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("namespace_prefix must not be empty")
        return value

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        if value not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}, got {value!r}")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.upper()
