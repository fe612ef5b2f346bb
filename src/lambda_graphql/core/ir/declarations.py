"""
Declaration records: the input contract of the compiler.

A Declaration Source produces a ``DeclarationSnapshot``: an ordered,
fully materialized list of type, scalar, operation and directive
declarations. Names are not resolved yet; the builder applies overrides and
naming policy.
"""

from __future__ import annotations

import hashlib
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .directives import AppliedDirective, DirectiveArgument, DirectiveLocation
from .native import NativeType
from .operations import ResolverKind, RootKind
from .schema import SchemaMetadata
from .types import TypeKind


class FieldDeclaration(BaseModel):
    """
    A field of a type, or an argument of an operation.

    Attributes:
        identifier: Name in the host code (``Price``, ``created_at``)
        name: Explicit GraphQL name, used verbatim
        native_type: Host type descriptor, mapped by the TypeMapper
        type_name: Explicit GraphQL type, bypasses the TypeMapper
        non_null: Force non-null regardless of the mapped nullability
        ignored: Leave the field out of the schema
        timestamp: Map to ``AWSTimestamp``
        default_value: SDL literal for arguments and input fields
        location: Source location for error messages
    """

    identifier: str
    name: str | None = None
    description: str | None = None
    native_type: NativeType | None = None
    type_name: str | None = None
    non_null: bool = False
    ignored: bool = False
    deprecated: bool = False
    deprecation_reason: str | None = None
    timestamp: bool = False
    default_value: str | None = None
    directives: tuple[AppliedDirective, ...] = ()
    location: str | None = None

    model_config = ConfigDict(frozen=True)


class EnumMemberDeclaration(BaseModel):
    """A member of an enum declaration."""

    identifier: str
    name: str | None = None
    description: str | None = None
    deprecated: bool = False
    deprecation_reason: str | None = None
    directives: tuple[AppliedDirective, ...] = ()

    model_config = ConfigDict(frozen=True)


class TypeDeclaration(BaseModel):
    """An object, input, interface, enum or union declaration."""

    declaration: Literal["type"] = "type"
    identifier: str
    name: str | None = None
    description: str | None = None
    kind: TypeKind = TypeKind.OBJECT
    fields: tuple[FieldDeclaration, ...] = ()
    enum_members: tuple[EnumMemberDeclaration, ...] = ()
    union_members: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()
    directives: tuple[AppliedDirective, ...] = ()
    location: str | None = None

    model_config = ConfigDict(frozen=True)


class ScalarDeclaration(BaseModel):
    """A custom scalar declaration."""

    declaration: Literal["scalar"] = "scalar"
    identifier: str
    name: str | None = None
    description: str | None = None
    directives: tuple[AppliedDirective, ...] = ()
    location: str | None = None

    model_config = ConfigDict(frozen=True)


class ResolverConfig(BaseModel):
    """
    Resolver settings attached to an operation.

    ``kind`` may be left out: a non-empty ``functions`` list means a
    pipeline resolver, otherwise a unit resolver.
    """

    kind: ResolverKind | None = None
    data_source: str | None = None
    functions: tuple[str, ...] = ()
    request_mapping: str | None = None
    response_mapping: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def effective_kind(self) -> ResolverKind:
        if self.kind is not None:
            return self.kind
        return ResolverKind.PIPELINE if self.functions else ResolverKind.UNIT


class OperationDeclaration(BaseModel):
    """
    A query, mutation or subscription.

    ``return_type_name`` wins over ``return_type``; it is needed when the host
    return type is a generic container standing in for a union.
    """

    declaration: Literal["operation"] = "operation"
    identifier: str
    name: str | None = None
    root_kind: RootKind = RootKind.QUERY
    description: str | None = None
    arguments: tuple[FieldDeclaration, ...] = ()
    return_type: NativeType | None = None
    return_type_name: str | None = None
    resolver: ResolverConfig | None = None
    directives: tuple[AppliedDirective, ...] = ()
    location: str | None = None

    model_config = ConfigDict(frozen=True)


class DirectiveDeclaration(BaseModel):
    """A custom directive definition."""

    declaration: Literal["directive"] = "directive"
    name: str
    description: str | None = None
    locations: tuple[DirectiveLocation, ...] = (DirectiveLocation.FIELD_DEFINITION,)
    arguments: tuple[DirectiveArgument, ...] = ()
    repeatable: bool = False
    location: str | None = None

    model_config = ConfigDict(frozen=True)


Declaration = Annotated[
    Union[TypeDeclaration, ScalarDeclaration, OperationDeclaration, DirectiveDeclaration],
    Field(discriminator="declaration"),
]


class DeclarationSnapshot(BaseModel):
    """
    Ordered snapshot of every declaration in one build unit.

    Attributes:
        declarations: Declarations in discovery order
        metadata: Optional schema metadata supplied by the source
    """

    declarations: tuple[Declaration, ...] = ()
    metadata: SchemaMetadata | None = None

    model_config = ConfigDict(frozen=True)

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON form; equal snapshots give equal fingerprints."""
        return hashlib.sha256(self.model_dump_json().encode("utf-8")).hexdigest()

    @property
    def types(self) -> list[TypeDeclaration]:
        return [d for d in self.declarations if isinstance(d, TypeDeclaration)]

    @property
    def operations(self) -> list[OperationDeclaration]:
        return [d for d in self.declarations if isinstance(d, OperationDeclaration)]

    @property
    def directives(self) -> list[DirectiveDeclaration]:
        return [d for d in self.declarations if isinstance(d, DirectiveDeclaration)]

    @property
    def scalars(self) -> list[ScalarDeclaration]:
        return [d for d in self.declarations if isinstance(d, ScalarDeclaration)]
