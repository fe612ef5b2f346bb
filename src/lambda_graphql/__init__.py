"""
lambda-graphql - compile annotated Python declarations into an AppSync schema.

Produces two build artifacts from one declaration snapshot: a GraphQL SDL
document and a resolver manifest for infrastructure tooling.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.errors import (
    DuplicateDeclarationError,
    InvalidDirectiveUsageError,
    InvalidTypeShapeError,
    MappingError,
    MissingReferenceError,
    SchemaCompilationError,
)
from .core.pipeline import CompilationResult, CompileOptions, compile_schema, write_artifacts

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "SchemaCompilationError",
    "MappingError",
    "DuplicateDeclarationError",
    "MissingReferenceError",
    "InvalidDirectiveUsageError",
    "InvalidTypeShapeError",
    "CompilationResult",
    "CompileOptions",
    "compile_schema",
    "write_artifacts",
]
