"""transforma - Transform files with simple Python scripts.

Declarative, resumable file workflows: every input file is folded through
an ordered list of steps (user scripts run in a sandbox, or built-ins).
"""

import logging

from transforma.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    ConfigurationError,
    ContentError,
    ContentFormatError,
    ContentParseError,
    CustomFormatterError,
    CustomParserError,
    ExecutionError,
    NoTransformFunctionFoundError,
    ResultParseError,
    ScriptExecutionError,
    ScriptNotFoundError,
    ScriptTimeoutError,
    StepError,
    TransformaError,
    UnknownBuiltinFunctionError,
    UnknownStepTypeError,
    WorkflowAbortedError,
    WriteError,
)

__version__ = "1.2.0"

# Library convention: stay silent unless the application configures logging
logging.getLogger("transforma").addHandler(logging.NullHandler())

__all__ = [
    # Base exception
    "TransformaError",
    # Configuration
    "ConfigurationError",
    "ConfigNotFoundError",
    "ConfigParseError",
    # Content
    "ContentError",
    "ContentFormatError",
    "ContentParseError",
    "CustomParserError",
    "CustomFormatterError",
    "WriteError",
    # Steps
    "StepError",
    "UnknownStepTypeError",
    "UnknownBuiltinFunctionError",
    # Execution
    "ExecutionError",
    "ScriptNotFoundError",
    "NoTransformFunctionFoundError",
    "ScriptExecutionError",
    "ResultParseError",
    "ScriptTimeoutError",
    # Run
    "WorkflowAbortedError",
]
