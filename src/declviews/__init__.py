"""C++ declaration analysis: test double generation and call graphs."""

from .errors import (
    DeclViewsError,
    Diagnostic,
    DiagnosticKind,
    Diagnostics,
    InvalidOwnershipCycle,
    MalformedDeclaration,
    NotAnInterface,
    UnitFormatError,
)
from .pipeline import RunResult, run_files, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "DeclViewsError",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "InvalidOwnershipCycle",
    "MalformedDeclaration",
    "NotAnInterface",
    "RunResult",
    "UnitFormatError",
    "run_files",
    "run_pipeline",
]
