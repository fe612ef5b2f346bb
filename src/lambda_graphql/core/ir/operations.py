"""
Operation entries and resolver bindings.

Operations become fields of the root ``Query``, ``Mutation`` and
``Subscription`` types. An operation may carry a resolver binding, which is
what the resolver manifest is built from.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from .directives import AppliedDirective
from .types import FieldEntry


class RootKind(str, Enum):
    """Root operation types; the value is the SDL type name."""

    QUERY = "Query"
    MUTATION = "Mutation"
    SUBSCRIPTION = "Subscription"

    @property
    def schema_key(self) -> str:
        """Key inside the ``schema { ... }`` block."""
        return self.value.lower()


class ResolverKind(str, Enum):
    """AppSync resolver kinds."""

    UNIT = "unit"
    PIPELINE = "pipeline"


class ResolverBinding(BaseModel):
    """
    How the serving layer resolves an operation.

    Unit bindings name a single data source; pipeline bindings name an
    ordered, non-empty chain of functions. Exactly one of the two is set.
    """

    kind: ResolverKind
    data_source: str | None = None
    function_chain: tuple[str, ...] = ()
    request_mapping_ref: str | None = None
    response_mapping_ref: str | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def unit(cls, data_source: str, **mapping_refs: str | None) -> ResolverBinding:
        return cls(kind=ResolverKind.UNIT, data_source=data_source, **mapping_refs)

    @classmethod
    def pipeline(cls, *functions: str, **mapping_refs: str | None) -> ResolverBinding:
        return cls(kind=ResolverKind.PIPELINE, function_chain=functions, **mapping_refs)


class OperationEntry(BaseModel):
    """A query, mutation or subscription."""

    name: str
    root_kind: RootKind
    description: str | None = None
    arguments: tuple[FieldEntry, ...] = ()
    return_type: str
    return_nullable: bool = True
    directives: tuple[AppliedDirective, ...] = ()
    resolver: ResolverBinding | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def return_type_ref(self) -> str:
        return self.return_type if self.return_nullable else f"{self.return_type}!"
