"""
Type entries of the canonical schema model.

A ``TypeEntry`` is a tagged variant: ``kind`` decides which of ``fields``,
``enum_values`` or ``union_members`` carries the content. The builder checks
that the shape matches the kind before an entry reaches the model.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .directives import AppliedDirective


class TypeKind(str, Enum):
    """Kinds of named GraphQL types a declaration can produce."""

    OBJECT = "object"
    INPUT = "input"
    INTERFACE = "interface"
    ENUM = "enum"
    UNION = "union"

    @property
    def has_fields(self) -> bool:
        return self in (TypeKind.OBJECT, TypeKind.INPUT, TypeKind.INTERFACE)


class FieldEntry(BaseModel):
    """
    A field of an object, input or interface type, or an operation argument.

    Attributes:
        name: GraphQL field name
        graphql_type: Type without the outermost ``!`` (``String``, ``[Int!]``)
        nullable: False renders the outermost ``!``
        default_value: SDL literal, for arguments and input fields
    """

    name: str
    description: str | None = None
    graphql_type: str
    nullable: bool = True
    deprecated: bool = False
    deprecation_reason: str | None = None
    default_value: str | None = None
    directives: tuple[AppliedDirective, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def type_ref(self) -> str:
        """Full type reference, e.g. ``[String!]!``."""
        return self.graphql_type if self.nullable else f"{self.graphql_type}!"


class EnumValue(BaseModel):
    """A value of an enum type."""

    name: str
    description: str | None = None
    deprecated: bool = False
    deprecation_reason: str | None = None
    directives: tuple[AppliedDirective, ...] = ()

    model_config = ConfigDict(frozen=True)


class TypeEntry(BaseModel):
    """A named type in the schema."""

    name: str
    description: str | None = None
    kind: TypeKind
    fields: tuple[FieldEntry, ...] = ()
    enum_values: tuple[EnumValue, ...] = ()
    union_members: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()
    directives: tuple[AppliedDirective, ...] = ()

    model_config = ConfigDict(frozen=True)

    def get_field(self, name: str) -> FieldEntry | None:
        for field in self.fields:
            if field.name == name:
                return field
        return None


class ScalarEntry(BaseModel):
    """A custom scalar, emitted as ``scalar Name`` when referenced."""

    name: str
    description: str | None = None
    directives: tuple[AppliedDirective, ...] = ()

    model_config = ConfigDict(frozen=True)
