"""Go program generator for typed declarative infrastructure programs."""

from .context import Options
from .diagnostics import ConfigurationError, Diagnostic, Diagnostics, InternalError
from .generate import generate_program, lower_program
from .serialize import ProgramFormatError, program_from_dict, program_to_dict

__all__ = [
    "ConfigurationError",
    "Diagnostic",
    "Diagnostics",
    "InternalError",
    "Options",
    "ProgramFormatError",
    "generate_program",
    "lower_program",
    "program_from_dict",
    "program_to_dict",
]
