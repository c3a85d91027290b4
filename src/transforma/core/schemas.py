"""Pydantic schemas for workflows and custom configuration."""

from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

ParseFn = Callable[[str], Any]
FormatFn = Callable[[Any], str]


class StepType(str, Enum):
    """Supported step types."""

    TRANSFORM = "transform"
    BUILT_IN = "built-in"
    FILTER = "filter"


class OutputNaming(str, Enum):
    """How an output file name is derived from its input file name."""

    PRESERVE = "preserve"  # data.csv -> data.csv
    JSON = "json"  # data.csv -> data.json


class WorkflowStep(BaseModel):
    """One configured unit of work.

    ``type`` is kept as a plain string so an unsupported type fails only the
    files that reach the step, not the loading of the whole workflow.
    """

    name: str
    type: str
    function: str = ""
    options: dict[str, Any] = Field(default_factory=dict)
    skip_existing: bool = False

    @field_validator("options", mode="before")
    @classmethod
    def _none_options(cls, value: Any) -> Any:
        return {} if value is None else value


class WorkflowConfig(BaseModel):
    """Complete workflow configuration (workflow.json)."""

    model_config = ConfigDict(use_enum_values=True, extra="ignore")

    name: str
    description: str | None = None
    version: str | None = None
    input_dir: str
    output_dir: str
    output_naming: OutputNaming = OutputNaming.PRESERVE
    steps: list[WorkflowStep] = Field(default_factory=list)


def _normalize_extension_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key).lstrip(".").lower(): fn for key, fn in value.items()}
    return value


class InputConfig(BaseModel):
    """Custom input parsing, keyed by extension without the dot."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    parsers: dict[str, ParseFn] = Field(default_factory=dict)
    csv_delimiter: str = Field(default=",", alias="csvDelimiter", min_length=1)

    @field_validator("parsers", mode="before")
    @classmethod
    def _normalize_parsers(cls, value: Any) -> Any:
        return _normalize_extension_keys(value)


class OutputConfig(BaseModel):
    """Custom output formatting.

    ``formatters`` is keyed by extension without the dot, or ``"default"``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    formatters: dict[str, FormatFn] = Field(default_factory=dict)
    default_format: str | None = Field(default=None, alias="defaultFormat")
    json_indent: int = Field(default=2, alias="jsonIndent", ge=0)

    @field_validator("formatters", mode="before")
    @classmethod
    def _normalize_formatters(cls, value: Any) -> Any:
        return _normalize_extension_keys(value)


class OptionsConfig(BaseModel):
    """Default options merged under each transform step's own options."""

    model_config = ConfigDict(extra="ignore")

    transform: dict[str, Any] = Field(default_factory=dict)


class CustomConfig(BaseModel):
    """Optional per-workflow customization loaded from wfconfig.py.

    Absent entries fall back to the built-in defaults.
    """

    model_config = ConfigDict(extra="ignore")

    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    options: OptionsConfig = Field(default_factory=OptionsConfig)
