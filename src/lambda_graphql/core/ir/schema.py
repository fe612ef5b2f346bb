"""
The canonical schema model.

``SchemaModel`` is what one compilation pass produces and what both emitters
consume. Every collection keeps declaration order; emitters never re-sort.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..scalars import APPSYNC_SCALARS, GRAPHQL_SCALARS
from .directives import DirectiveDefinition
from .operations import OperationEntry, RootKind
from .types import ScalarEntry, TypeEntry, TypeKind

DEFAULT_SCHEMA_NAME = "GeneratedSchema"


class SchemaMetadata(BaseModel):
    """Schema-level information (name, version, description)."""

    name: str = DEFAULT_SCHEMA_NAME
    version: str | None = None
    description: str | None = None

    model_config = ConfigDict(frozen=True)


class SchemaModel(BaseModel):
    """
    Complete, validated schema model.

    Attributes:
        metadata: Schema name, version and description
        types: Named types in declaration order
        scalars: Custom scalars in declaration order
        directives: Custom directive definitions in declaration order
        operations: Queries, mutations and subscriptions in declaration order
        builtin_scalars: Scalar names the target platform predefines
    """

    metadata: SchemaMetadata = Field(default_factory=SchemaMetadata)
    types: tuple[TypeEntry, ...] = ()
    scalars: tuple[ScalarEntry, ...] = ()
    directives: tuple[DirectiveDefinition, ...] = ()
    operations: tuple[OperationEntry, ...] = ()
    builtin_scalars: frozenset[str] = GRAPHQL_SCALARS | APPSYNC_SCALARS

    model_config = ConfigDict(frozen=True)

    def get_type(self, name: str) -> TypeEntry | None:
        for entry in self.types:
            if entry.name == name:
                return entry
        return None

    def get_scalar(self, name: str) -> ScalarEntry | None:
        for scalar in self.scalars:
            if scalar.name == name:
                return scalar
        return None

    def get_directive(self, name: str) -> DirectiveDefinition | None:
        for directive in self.directives:
            if directive.name == name:
                return directive
        return None

    def types_of_kind(self, kind: TypeKind) -> list[TypeEntry]:
        return [entry for entry in self.types if entry.kind == kind]

    def operations_for(self, root_kind: RootKind) -> list[OperationEntry]:
        return [op for op in self.operations if op.root_kind == root_kind]

    @property
    def root_kinds(self) -> list[RootKind]:
        """Root kinds that have at least one operation, in Query/Mutation/Subscription order."""
        present = {op.root_kind for op in self.operations}
        return [kind for kind in RootKind if kind in present]

    def resolves(self, name: str) -> bool:
        """True when ``name`` is a built-in scalar, a custom scalar or a named type."""
        return (
            name in self.builtin_scalars
            or self.get_scalar(name) is not None
            or self.get_type(name) is not None
        )
