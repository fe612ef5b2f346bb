"""
Native type -> GraphQL type mapping.

The TypeMapper is a pure function of its injected ScalarTables. It never
checks that a user-declared type exists; the builder validates references
once the whole model is known.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from .errors import MappingError
from .ir import NativeType, Nullability
from .scalars import DEFAULT_SCALAR_TABLES, ScalarTables
from .typeref import list_of

logger = logging.getLogger(__name__)

VOID_RETURN_TYPE = "Boolean"


class MappedType(NamedTuple):
    """GraphQL type without the outer ``!`` plus its nullability."""

    graphql_type: str
    nullable: bool

    @property
    def type_ref(self) -> str:
        return self.graphql_type if self.nullable else f"{self.graphql_type}!"


class TypeMapper:
    """
    Map host type descriptors to GraphQL type strings.

    Resolution order for ``map_type``:
    1. Nullable value-type wrappers are unwrapped
    2. Generic sequences become lists of their element type
    3. String-keyed dictionaries become the JSON scalar
    4. Native arrays become lists of their element type
    5. Override table (semantic scalars) by qualified name
    6. Built-in table by qualified name, then by simple name
    7. Anything else maps to its own simple name

    Example:
        mapper = TypeMapper()
        mapper.map_type(NativeType.generic("list", "builtins", [NativeType.named("str", "builtins")]))
        # "[String!]"
    """

    def __init__(self, tables: ScalarTables = DEFAULT_SCALAR_TABLES) -> None:
        self.tables = tables

    def map_type(self, native: NativeType) -> str:
        """Return the GraphQL type for ``native``, without its outer ``!``."""
        if native.is_void or not native.name:
            raise MappingError(f"No GraphQL type for '{native.qualified_name or '<unnamed>'}'")

        if native.is_nullable_wrapper:
            return self.map_type(native.unwrap())

        if native.generic_definition is not None:
            definition = native.generic_definition
            if self.tables.is_sequence(definition):
                if not native.type_arguments:
                    raise MappingError(f"Sequence type '{definition}' has no element type")
                return self._list_of(native.type_arguments[0])

            if self.tables.is_mapping(definition):
                if len(native.type_arguments) == 2 and self._is_string(native.type_arguments[0]):
                    return self.tables.json_scalar
                raise MappingError(
                    f"Dictionary type '{definition}' must have string keys to map to "
                    f"{self.tables.json_scalar}"
                )

        if native.element_type is not None:
            return self._list_of(native.element_type)

        qualified = native.qualified_name
        if qualified in self.tables.overrides:
            return self.tables.overrides[qualified]

        if qualified in self.tables.builtin:
            return self.tables.builtin[qualified]

        if native.name in self.tables.builtin:
            return self.tables.builtin[native.name]

        logger.debug("Mapping '%s' to declared type '%s'", qualified, native.name)
        return native.name

    def is_non_null(self, native: NativeType) -> bool:
        """
        Decide whether ``native`` is non-null in GraphQL.

        Value types are non-null unless wrapped. Reference types are non-null
        only when annotated as such; an unknown annotation counts as nullable.
        """
        if native.is_value_type:
            return not native.is_nullable_wrapper
        return native.nullability == Nullability.NOT_NULLABLE

    def resolve(self, native: NativeType) -> MappedType:
        return MappedType(self.map_type(native), not self.is_non_null(native))

    def map_return_type(self, native: NativeType | None) -> MappedType:
        """
        Map an operation return type.

        Awaitables are unwrapped to their result type. No return value maps
        to a non-null ``Boolean``.
        """
        if native is None:
            return MappedType(VOID_RETURN_TYPE, False)

        while True:
            if native.is_void:
                return MappedType(VOID_RETURN_TYPE, False)
            definition = native.generic_definition or native.qualified_name
            if not self.tables.is_awaitable(definition):
                break
            if not native.type_arguments:
                return MappedType(VOID_RETURN_TYPE, False)
            native = native.type_arguments[-1]

        return self.resolve(native)

    def produces_custom_scalar(self, graphql_type: str) -> bool:
        """True when ``graphql_type`` names a scalar from the override table."""
        return graphql_type in self.tables.override_scalars

    def _list_of(self, element: NativeType) -> str:
        return list_of(self.map_type(element), self.is_non_null(element))

    def _is_string(self, native: NativeType) -> bool:
        names = self.tables.string_type_names
        return native.qualified_name in names or native.name in names
