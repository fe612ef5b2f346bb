"""
Annotation API for declaring a GraphQL schema in Python code.

Decorators and ``typing.Annotated`` markers only attach metadata (stored
under ``__graphql__``); they never change runtime behavior. The reflection
source reads the metadata back.

Example:

    from typing import Annotated
    from lambda_graphql.discovery.annotations import (
        GraphQLField, GraphQLNonNull, graphql_query, graphql_resolver, graphql_type,
    )

    @graphql_type(description="A product in the catalog")
    class Product:
        id: Annotated[str, GraphQLNonNull]
        name: str
        price: Annotated[float, GraphQLField(description="Unit price")]

    @graphql_query(description="Fetch one product")
    @graphql_resolver("ProductsLambda")
    def get_product(id: str) -> Product | None: ...
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from lambda_graphql.core import ir
from lambda_graphql.core.errors import InvalidDirectiveUsageError

GRAPHQL_ATTR = "__graphql__"

T = TypeVar("T")


class AuthMode(str, Enum):
    """AppSync authorization modes; the value is the directive name."""

    API_KEY = "aws_api_key"
    USER_POOLS = "aws_cognito_user_pools"
    IAM = "aws_iam"
    OPENID_CONNECT = "aws_oidc"
    LAMBDA = "aws_lambda"


@dataclass
class GraphQLMeta:
    """Metadata attached to a decorated class or function."""

    role: str | None = None  # "type", "union", "scalar" or "operation"
    name: str | None = None
    description: str | None = None
    kind: ir.TypeKind = ir.TypeKind.OBJECT
    union_members: tuple[str, ...] = ()
    enum_values: dict[str, EnumValueInfo] = field(default_factory=dict)
    root_kind: ir.RootKind | None = None
    return_type: str | None = None
    resolver: ir.ResolverConfig | None = None
    directives: list[ir.AppliedDirective] = field(default_factory=list)


def get_meta(obj: Any) -> GraphQLMeta | None:
    """Metadata declared on ``obj`` itself (never inherited from a base class)."""
    target = getattr(obj, "__func__", obj)
    try:
        return vars(target).get(GRAPHQL_ATTR)
    except TypeError:
        return None


def _ensure_meta(obj: Any) -> GraphQLMeta:
    meta = get_meta(obj)
    if meta is None:
        meta = GraphQLMeta()
        setattr(getattr(obj, "__func__", obj), GRAPHQL_ATTR, meta)
    return meta


def _set_role(meta: GraphQLMeta, role: str, target: Any) -> None:
    if meta.role is not None and meta.role != role:
        raise TypeError(f"{target!r} is already declared as a GraphQL {meta.role}")
    meta.role = role


# =============================================================================
# Field and argument markers (used inside typing.Annotated)
# =============================================================================


@dataclass(frozen=True)
class GraphQLField:
    """
    Field options, used as ``Annotated[T, GraphQLField(...)]``.

    ``type_name`` bypasses type mapping; a trailing ``!`` makes it non-null.
    """

    name: str | None = None
    description: str | None = None
    deprecated: bool = False
    deprecation_reason: str | None = None
    non_null: bool = False
    type_name: str | None = None
    default_value: str | None = None
    directives: tuple[Any, ...] = ()


@dataclass(frozen=True)
class GraphQLArgument(GraphQLField):
    """Operation argument options, used as ``Annotated[T, GraphQLArgument(...)]``."""


@dataclass(frozen=True)
class _Flag:
    name: str

    def __repr__(self) -> str:
        return f"GraphQL{self.name}"


# Leave the field or argument out of the schema
GraphQLIgnore = _Flag("Ignore")
# Force non-null regardless of the Python annotation
GraphQLNonNull = _Flag("NonNull")
# Map to AWSTimestamp (epoch seconds)
GraphQLTimestamp = _Flag("Timestamp")


@dataclass(frozen=True)
class EnumValueInfo:
    """Options for one enum member, see ``graphql_enum_value``."""

    name: str | None = None
    description: str | None = None
    deprecated: bool = False
    deprecation_reason: str | None = None
    directives: tuple[ir.AppliedDirective, ...] = ()


def graphql_enum_value(
    name: str | None = None,
    *,
    description: str | None = None,
    deprecated: bool = False,
    deprecation_reason: str | None = None,
    directives: Iterable[Any] = (),
) -> EnumValueInfo:
    """Describe an enum member; pass a dict of these as ``graphql_type(values=...)``."""
    return EnumValueInfo(
        name=name,
        description=description,
        deprecated=deprecated or deprecation_reason is not None,
        deprecation_reason=deprecation_reason,
        directives=tuple(as_applied(d) for d in directives),
    )


# =============================================================================
# Directive applications
# =============================================================================


class DirectiveApplication:
    """
    A directive to apply.

    Works as a decorator on classes and operations, inside ``Annotated``
    metadata, or in ``GraphQLField(directives=...)``.
    """

    def __init__(self, directive: ir.AppliedDirective) -> None:
        self.directive = directive

    def __call__(self, target: T) -> T:
        # Decorators run bottom-up; inserting at the front keeps source order
        _ensure_meta(target).directives.insert(0, self.directive)
        return target

    def __repr__(self) -> str:
        return f"DirectiveApplication({self.directive.name!r})"


def as_applied(value: Any) -> ir.AppliedDirective:
    """Normalize a DirectiveApplication or AppliedDirective."""
    if isinstance(value, DirectiveApplication):
        return value.directive
    if isinstance(value, ir.AppliedDirective):
        return value
    raise TypeError(f"Expected a directive application, got {value!r}")


def apply_directive(name: str, /, **arguments: Any) -> DirectiveApplication:
    """
    Apply a directive.

    List-valued arguments may be given as a list or a comma-separated string.
    """
    return DirectiveApplication(
        ir.AppliedDirective(
            name=name,
            arguments=tuple((key, ir.argument_value(value)) for key, value in arguments.items()),
        )
    )


def auth_directive(
    mode: AuthMode | str,
    cognito_groups: str | Iterable[str] | None = None,
) -> DirectiveApplication:
    """Apply an AppSync authorization directive (``@aws_cognito_user_pools`` etc.)."""
    mode = AuthMode(mode)
    if cognito_groups is None:
        return apply_directive(mode.value)
    if mode != AuthMode.USER_POOLS:
        raise InvalidDirectiveUsageError(
            f"cognito_groups only applies to {AuthMode.USER_POOLS.value}, not {mode.value}"
        )
    return apply_directive(mode.value, cognito_groups=cognito_groups)


# =============================================================================
# Type decorators
# =============================================================================


def graphql_type(
    name: str | None = None,
    *,
    kind: ir.TypeKind | str = ir.TypeKind.OBJECT,
    description: str | None = None,
    values: Mapping[str, EnumValueInfo] | None = None,
) -> Callable[[T], T]:
    """
    Declare a class as an object, input, interface or enum type.

    Enum subclasses are always declared as enums. Implemented interfaces are
    the base classes declared with ``kind="interface"``.
    """

    def decorator(cls: T) -> T:
        meta = _ensure_meta(cls)
        _set_role(meta, "type", cls)
        meta.name = name
        meta.description = description
        meta.kind = ir.TypeKind(kind)
        if isinstance(cls, type) and issubclass(cls, Enum):
            meta.kind = ir.TypeKind.ENUM
        meta.enum_values = dict(values or {})
        return cls

    return decorator


def graphql_interface(
    name: str | None = None, *, description: str | None = None
) -> Callable[[T], T]:
    """Shorthand for ``graphql_type(kind="interface")``."""
    return graphql_type(name, kind=ir.TypeKind.INTERFACE, description=description)


def graphql_input(name: str | None = None, *, description: str | None = None) -> Callable[[T], T]:
    """Shorthand for ``graphql_type(kind="input")``."""
    return graphql_type(name, kind=ir.TypeKind.INPUT, description=description)


def graphql_union(name: str, *members: str, description: str | None = None) -> Callable[[T], T]:
    """Declare a union; the decorated class is only a marker."""

    def decorator(cls: T) -> T:
        meta = _ensure_meta(cls)
        _set_role(meta, "union", cls)
        meta.name = name
        meta.description = description
        meta.kind = ir.TypeKind.UNION
        meta.union_members = tuple(members)
        return cls

    return decorator


def graphql_scalar(name: str | None = None, *, description: str | None = None) -> Callable[[T], T]:
    """Declare a class as a custom scalar; fields of this class map to it."""

    def decorator(cls: T) -> T:
        meta = _ensure_meta(cls)
        _set_role(meta, "scalar", cls)
        meta.name = name
        meta.description = description
        return cls

    return decorator


# =============================================================================
# Operation decorators
# =============================================================================


def _operation(root_kind: ir.RootKind) -> Callable[..., Callable[[T], T]]:
    def factory(
        name: str | None = None,
        *,
        description: str | None = None,
        return_type: str | None = None,
    ) -> Callable[[T], T]:
        def decorator(func: T) -> T:
            meta = _ensure_meta(func)
            _set_role(meta, "operation", func)
            meta.root_kind = root_kind
            meta.name = name
            meta.description = description
            meta.return_type = return_type
            return func

        return decorator

    factory.__name__ = f"graphql_{root_kind.schema_key}"
    factory.__doc__ = (
        f"Declare a function as a {root_kind.value} operation. ``return_type`` "
        "overrides the mapped return type (needed for unions)."
    )
    return factory


graphql_query = _operation(ir.RootKind.QUERY)
graphql_mutation = _operation(ir.RootKind.MUTATION)
graphql_subscription = _operation(ir.RootKind.SUBSCRIPTION)


def graphql_resolver(
    data_source: str | None = None,
    *,
    kind: ir.ResolverKind | str | None = None,
    functions: Iterable[str] = (),
    request_mapping: str | None = None,
    response_mapping: str | None = None,
) -> Callable[[T], T]:
    """Bind an operation to a unit data source or a pipeline of functions."""

    def decorator(func: T) -> T:
        _ensure_meta(func).resolver = ir.ResolverConfig(
            kind=ir.ResolverKind(kind) if kind is not None else None,
            data_source=data_source,
            functions=tuple(functions),
            request_mapping=request_mapping,
            response_mapping=response_mapping,
        )
        return func

    return decorator


# =============================================================================
# Module-level declarations
# =============================================================================


def parse_directive_arguments(text: str) -> tuple[ir.DirectiveArgument, ...]:
    """
    Parse ``"ttl: Int!, scopes: [String] = \\"all\\""`` into DirectiveArguments.

    Commas inside brackets are not separators.
    """
    parts: list[str] = []
    depth = 0
    current = ""
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    parts.append(current)

    arguments = []
    for part in (p.strip() for p in parts):
        if not part:
            continue
        name, sep, rest = part.partition(":")
        if not sep:
            raise InvalidDirectiveUsageError(f"Directive argument '{part}' has no type")
        type_text, _, default = rest.partition("=")
        type_text = type_text.strip()
        required = type_text.endswith("!")
        arguments.append(
            ir.DirectiveArgument(
                name=name.strip(),
                type=type_text[:-1] if required else type_text,
                required=required,
                default_value=default.strip() or None,
            )
        )
    return tuple(arguments)


def declare_directive(
    name: str,
    *,
    locations: Iterable[ir.DirectiveLocation | str] = (ir.DirectiveLocation.FIELD_DEFINITION,),
    arguments: str | Iterable[ir.DirectiveArgument] = (),
    description: str | None = None,
    repeatable: bool = False,
) -> ir.DirectiveDeclaration:
    """
    Declare a custom directive; assign the result at module level.

    Example:
        cached = declare_directive("cached", locations=["FIELD_DEFINITION"], arguments="ttl: Int!")
    """
    if isinstance(arguments, str):
        parsed = parse_directive_arguments(arguments)
    else:
        parsed = tuple(arguments)
    return ir.DirectiveDeclaration(
        name=name,
        description=description,
        locations=tuple(ir.DirectiveLocation(location) for location in locations),
        arguments=parsed,
        repeatable=repeatable,
    )


def graphql_schema(
    name: str, *, description: str | None = None, version: str | None = None
) -> ir.SchemaMetadata:
    """Schema name, description and version; assign the result at module level."""
    return ir.SchemaMetadata(name=name, description=description, version=version)
