"""
Native type descriptors.

A ``NativeType`` describes a type from the host codebase independently of the
language it came from. The reflection source builds them from Python
annotations; a snapshot file may carry descriptors produced by any other
toolchain.

Examples:
    - str:            NativeType.named("str", "builtins")
    - int | None:     NativeType.nullable_of(NativeType.value("int", "builtins"))
    - list[Product]:  NativeType.generic("list", "builtins", [product])
    - bytes[]:        NativeType.array_of(NativeType.value("int", "builtins"))
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from ..scalars import normalize_definition

# Generic definitions that wrap a value type to make it nullable, without any <T> suffix
NULLABLE_DEFINITIONS = frozenset(
    {
        "typing.Optional",
        "System.Nullable",
        "Nullable",
    }
)


class Nullability(str, Enum):
    """Explicit nullability annotation carried by reference types."""

    UNKNOWN = "unknown"
    NOT_NULLABLE = "not_nullable"
    NULLABLE = "nullable"


class NativeType(BaseModel):
    """
    Language-neutral description of a host type.

    Attributes:
        name: Simple type name (``str``, ``Product``, ``List``)
        namespace: Module or namespace the type lives in
        is_value_type: Value types are non-null unless wrapped
        generic_definition: Qualified name of the generic origin, if generic
        type_arguments: Generic type arguments, in order
        element_type: Element type for native arrays
        nullability: Nullability annotation for reference types
        is_void: Marks "no return value"
    """

    name: str
    namespace: str | None = None
    is_value_type: bool = False
    generic_definition: str | None = None
    type_arguments: tuple[NativeType, ...] = ()
    element_type: NativeType | None = None
    nullability: Nullability = Nullability.UNKNOWN
    is_void: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def qualified_name(self) -> str:
        """Namespace-qualified name, or the simple name without a namespace."""
        if self.namespace:
            return f"{self.namespace}.{self.name}"
        return self.name

    @property
    def is_generic(self) -> bool:
        return self.generic_definition is not None

    @property
    def is_array(self) -> bool:
        return self.element_type is not None

    @property
    def is_nullable_wrapper(self) -> bool:
        """True for ``Optional``-style wrappers around a value type."""
        return (
            self.is_value_type
            and self.generic_definition is not None
            and normalize_definition(self.generic_definition) in NULLABLE_DEFINITIONS
            and len(self.type_arguments) == 1
        )

    def unwrap(self) -> NativeType:
        """Return the wrapped type of a nullable wrapper, or self."""
        if self.is_nullable_wrapper:
            return self.type_arguments[0]
        return self

    def with_nullability(self, nullability: Nullability) -> NativeType:
        return self.model_copy(update={"nullability": nullability})

    # Constructors

    @classmethod
    def named(
        cls,
        name: str,
        namespace: str | None = None,
        nullability: Nullability = Nullability.NOT_NULLABLE,
    ) -> NativeType:
        """Reference type, non-null unless told otherwise."""
        return cls(name=name, namespace=namespace, nullability=nullability)

    @classmethod
    def value(cls, name: str, namespace: str | None = None) -> NativeType:
        """Plain value type."""
        return cls(name=name, namespace=namespace, is_value_type=True)

    @classmethod
    def nullable_of(cls, inner: NativeType) -> NativeType:
        """Nullable wrapper around a value type."""
        return cls(
            name="Optional",
            namespace="typing",
            is_value_type=True,
            generic_definition="typing.Optional",
            type_arguments=(inner,),
        )

    @classmethod
    def generic(
        cls,
        name: str,
        namespace: str | None,
        arguments: Iterable[NativeType],
        nullability: Nullability = Nullability.NOT_NULLABLE,
    ) -> NativeType:
        """Constructed generic reference type such as ``list[str]``."""
        definition = f"{namespace}.{name}" if namespace else name
        return cls(
            name=name,
            namespace=namespace,
            generic_definition=definition,
            type_arguments=tuple(arguments),
            nullability=nullability,
        )

    @classmethod
    def array_of(
        cls,
        element: NativeType,
        nullability: Nullability = Nullability.NOT_NULLABLE,
    ) -> NativeType:
        """Native array of ``element``."""
        return cls(name=f"{element.name}[]", element_type=element, nullability=nullability)

    @classmethod
    def void(cls) -> NativeType:
        return cls(name="None", is_void=True)
