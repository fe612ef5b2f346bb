"""
lambda-graphql Intermediate Representation (IR) types.

Declarations (the compiler's input) and the canonical schema model (its
output) are both defined here. All types are re-exported from this package.
"""

# Declarations
from .declarations import (
    Declaration,
    DeclarationSnapshot,
    DirectiveDeclaration,
    EnumMemberDeclaration,
    FieldDeclaration,
    OperationDeclaration,
    ResolverConfig,
    ScalarDeclaration,
    TypeDeclaration,
)

# Directives
from .directives import (
    APPSYNC_DIRECTIVES,
    AppliedDirective,
    DirectiveArgument,
    DirectiveDefinition,
    DirectiveLocation,
    argument_value,
    sorted_locations,
)

# Native type descriptors
from .native import NativeType, Nullability

# Operations
from .operations import (
    OperationEntry,
    ResolverBinding,
    ResolverKind,
    RootKind,
)

# Schema model
from .schema import DEFAULT_SCHEMA_NAME, SchemaMetadata, SchemaModel

# Types
from .types import (
    EnumValue,
    FieldEntry,
    ScalarEntry,
    TypeEntry,
    TypeKind,
)

__all__ = [
    # Declarations
    "Declaration",
    "DeclarationSnapshot",
    "DirectiveDeclaration",
    "EnumMemberDeclaration",
    "FieldDeclaration",
    "OperationDeclaration",
    "ResolverConfig",
    "ScalarDeclaration",
    "TypeDeclaration",
    # Directives
    "APPSYNC_DIRECTIVES",
    "AppliedDirective",
    "DirectiveArgument",
    "DirectiveDefinition",
    "DirectiveLocation",
    "argument_value",
    "sorted_locations",
    # Native types
    "NativeType",
    "Nullability",
    # Operations
    "OperationEntry",
    "ResolverBinding",
    "ResolverKind",
    "RootKind",
    # Schema
    "DEFAULT_SCHEMA_NAME",
    "SchemaMetadata",
    "SchemaModel",
    # Types
    "EnumValue",
    "FieldEntry",
    "ScalarEntry",
    "TypeEntry",
    "TypeKind",
]
