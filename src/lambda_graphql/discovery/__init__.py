"""
Declaration sources.

- base: the DeclarationSource protocol and a static source
- annotations: decorators and Annotated markers for Python code
- reflection: collect declarations from imported Python modules
- snapshot_file: read and write JSON/YAML declaration snapshots
"""

from .annotations import (
    AuthMode,
    GraphQLArgument,
    GraphQLField,
    GraphQLIgnore,
    GraphQLNonNull,
    GraphQLTimestamp,
    apply_directive,
    auth_directive,
    declare_directive,
    graphql_enum_value,
    graphql_input,
    graphql_interface,
    graphql_mutation,
    graphql_query,
    graphql_resolver,
    graphql_scalar,
    graphql_schema,
    graphql_subscription,
    graphql_type,
    graphql_union,
)
from .base import DeclarationSource, StaticDeclarationSource
from .reflection import ReflectionDeclarationSource, native_type_of
from .snapshot_file import SnapshotFileSource, dump_snapshot, load_snapshot

__all__ = [
    # Sources
    "DeclarationSource",
    "StaticDeclarationSource",
    "ReflectionDeclarationSource",
    "SnapshotFileSource",
    "native_type_of",
    "load_snapshot",
    "dump_snapshot",
    # Annotations
    "AuthMode",
    "GraphQLArgument",
    "GraphQLField",
    "GraphQLIgnore",
    "GraphQLNonNull",
    "GraphQLTimestamp",
    "apply_directive",
    "auth_directive",
    "declare_directive",
    "graphql_enum_value",
    "graphql_input",
    "graphql_interface",
    "graphql_mutation",
    "graphql_query",
    "graphql_resolver",
    "graphql_scalar",
    "graphql_schema",
    "graphql_subscription",
    "graphql_type",
    "graphql_union",
]
