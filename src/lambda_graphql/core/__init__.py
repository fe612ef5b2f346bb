"""Core lambda-graphql functionality: IR, type mapping, model building, validation, pipeline."""

from . import ir
from .builder import NamingPolicy, TypeModelBuilder, build_model, camel_case
from .config import ProjectConfig, find_config, load_config
from .errors import (
    ConfigError,
    DeclarationContext,
    DuplicateDeclarationError,
    InvalidDirectiveUsageError,
    InvalidResolverBindingError,
    InvalidTypeShapeError,
    MappingError,
    MissingReferenceError,
    SchemaCompilationError,
    SnapshotFormatError,
)
from .pipeline import (
    CompilationResult,
    CompileOptions,
    compile_schema,
    is_up_to_date,
    write_artifacts,
)
from .scalars import DEFAULT_SCALAR_TABLES, ScalarTables
from .type_mapper import MappedType, TypeMapper
from .validator import validate_model

__all__ = [
    "ir",
    "SchemaCompilationError",
    "MappingError",
    "DuplicateDeclarationError",
    "MissingReferenceError",
    "InvalidDirectiveUsageError",
    "InvalidTypeShapeError",
    "InvalidResolverBindingError",
    "SnapshotFormatError",
    "ConfigError",
    "DeclarationContext",
    "TypeMapper",
    "MappedType",
    "ScalarTables",
    "DEFAULT_SCALAR_TABLES",
    "TypeModelBuilder",
    "NamingPolicy",
    "build_model",
    "camel_case",
    "validate_model",
    "ProjectConfig",
    "load_config",
    "find_config",
    "CompileOptions",
    "CompilationResult",
    "compile_schema",
    "write_artifacts",
    "is_up_to_date",
]
