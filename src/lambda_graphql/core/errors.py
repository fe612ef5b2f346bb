"""
Error types for schema compilation.

Every error raised while building the type model or emitting artifacts is a
``SchemaCompilationError``. Compilation is deterministic, so none of these are
worth retrying: the same declarations always fail the same way.
"""

from dataclasses import dataclass
from typing import Optional


class SchemaCompilationError(Exception):
    """Base exception for all lambda-graphql errors."""

    def __init__(self, message: str, context: Optional["DeclarationContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class MappingError(SchemaCompilationError):
    """
    Raised when a native type has no applicable GraphQL type.

    Examples:
    - Descriptor without a name
    - Sequence type without an element type
    """

    pass


class DuplicateDeclarationError(SchemaCompilationError):
    """
    Raised when a name is declared twice.

    Examples:
    - Two types named "Widget"
    - Two fields with the same GraphQL name on one type
    - Two queries with the same name
    """

    pass


class MissingReferenceError(SchemaCompilationError):
    """
    Raised when a declaration references a name nothing declares.

    Examples:
    - Union member that is never declared
    - Interface listed by an implementer but not declared
    - Field type that is neither a scalar nor a declared type
    - Directive applied without a definition
    """

    pass


class InvalidDirectiveUsageError(SchemaCompilationError):
    """
    Raised when a directive is applied where its definition does not allow it.

    Examples:
    - Field-only directive on an object type
    - Unknown or missing required directive argument
    """

    pass


class InvalidTypeShapeError(SchemaCompilationError):
    """
    Raised when a declared kind conflicts with its structural content.

    Examples:
    - Union with zero members
    - Enum with fields
    - Implementer missing a field of its interface
    """

    pass


class InvalidResolverBindingError(SchemaCompilationError):
    """
    Raised when a resolver configuration is neither a valid unit nor a valid
    pipeline binding.
    """

    pass


class SnapshotFormatError(SchemaCompilationError):
    """Raised when a serialized declaration snapshot cannot be read."""

    pass


class ConfigError(SchemaCompilationError):
    """Raised when lambda-graphql.toml is malformed."""

    pass


@dataclass
class DeclarationContext:
    """
    Identifies the declaration an error belongs to.

    Attributes:
        declaration: Name of the type, operation or directive
        member: Optional field, argument or enum value within it
        location: Optional source location (``module:qualname`` or ``file:line``)
    """

    declaration: str
    member: str | None = None
    location: str | None = None

    def format(self) -> str:
        """
        Format the context as a short prefix.

        Returns:
            String like ``Product.price`` or ``Product.price (shop/models.py:12)``
        """
        target = self.declaration
        if self.member:
            target += f".{self.member}"
        if self.location:
            target += f" ({self.location})"
        return target


def make_error(
    error_type: type[SchemaCompilationError],
    message: str,
    declaration: str,
    member: str | None = None,
    location: str | None = None,
) -> SchemaCompilationError:
    """
    Helper to create an error of the given type with context attached.

    Args:
        error_type: SchemaCompilationError subclass to instantiate
        message: Error description
        declaration: Offending declaration name
        member: Optional member within the declaration
        location: Optional source location

    Returns:
        Error instance with context
    """
    context = DeclarationContext(declaration=declaration, member=member, location=location)
    return error_type(message, context)
