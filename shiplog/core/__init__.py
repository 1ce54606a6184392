"""Core types: results, configuration, exit codes."""

from .config import ChangelogOptions, ConfigError, ResolvedConfig, load_project_options
from .errors import ErrorCode, exit_code_for
from .result import Err, Ok, Result

__all__ = [
    # config
    "ChangelogOptions",
    "ConfigError",
    "ResolvedConfig",
    "load_project_options",
    # errors
    "ErrorCode",
    "exit_code_for",
    # result
    "Err",
    "Ok",
    "Result",
]
