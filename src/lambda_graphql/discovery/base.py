"""
Declaration source interface.

A declaration source hands the compiler one fully materialized, ordered
DeclarationSnapshot per build. The compiler never discovers declarations
itself.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from lambda_graphql.core import ir


@runtime_checkable
class DeclarationSource(Protocol):
    """Anything that can produce a DeclarationSnapshot."""

    def collect(self) -> ir.DeclarationSnapshot: ...


class StaticDeclarationSource:
    """
    Declarations given directly, mostly for tests and programmatic use.

    Example:
        source = StaticDeclarationSource([TypeDeclaration(identifier="Product", ...)])
    """

    def __init__(
        self,
        declarations: Iterable[Any],
        metadata: ir.SchemaMetadata | None = None,
    ) -> None:
        self.declarations = tuple(declarations)
        self.metadata = metadata

    def collect(self) -> ir.DeclarationSnapshot:
        return ir.DeclarationSnapshot(declarations=self.declarations, metadata=self.metadata)
