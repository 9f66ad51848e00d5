"""Core utilities for certprep."""

from .config import Config
from .file_io import FileIO
from .validator import QuestionValidator, validate_banks
from .errors import (
    SamplingError,
    InvalidRequest,
    UnknownGroup,
    NoQuestionsAvailable,
    BankLoadError,
)

__all__ = [
    "Config",
    "FileIO",
    "QuestionValidator",
    "validate_banks",
    "SamplingError",
    "InvalidRequest",
    "UnknownGroup",
    "NoQuestionsAvailable",
    "BankLoadError",
]
