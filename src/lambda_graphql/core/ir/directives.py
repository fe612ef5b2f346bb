"""
Directive definitions and applications.

Directives are declared once (``DirectiveDefinition``) and applied any number
of times (``AppliedDirective``). Applications keep their order, including
repeated applications of the same directive on one declaration.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DirectiveLocation(str, Enum):
    """Places a directive may appear, in GraphQL grammar order."""

    QUERY = "QUERY"
    MUTATION = "MUTATION"
    SUBSCRIPTION = "SUBSCRIPTION"
    FIELD = "FIELD"
    FRAGMENT_DEFINITION = "FRAGMENT_DEFINITION"
    FRAGMENT_SPREAD = "FRAGMENT_SPREAD"
    INLINE_FRAGMENT = "INLINE_FRAGMENT"
    VARIABLE_DEFINITION = "VARIABLE_DEFINITION"
    SCHEMA = "SCHEMA"
    SCALAR = "SCALAR"
    OBJECT = "OBJECT"
    FIELD_DEFINITION = "FIELD_DEFINITION"
    ARGUMENT_DEFINITION = "ARGUMENT_DEFINITION"
    INTERFACE = "INTERFACE"
    UNION = "UNION"
    ENUM = "ENUM"
    ENUM_VALUE = "ENUM_VALUE"
    INPUT_OBJECT = "INPUT_OBJECT"
    INPUT_FIELD_DEFINITION = "INPUT_FIELD_DEFINITION"


_LOCATION_ORDER = {location: index for index, location in enumerate(DirectiveLocation)}


def argument_value(value: Any) -> str:
    """Render a directive argument value as the string the IR stores."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.name)
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(argument_value(item) for item in value)
    return str(value)


def sorted_locations(locations: frozenset[DirectiveLocation]) -> list[DirectiveLocation]:
    """Locations in grammar order, for stable output."""
    return sorted(locations, key=_LOCATION_ORDER.__getitem__)


class AppliedDirective(BaseModel):
    """
    A directive applied to a declaration.

    Argument values are kept as strings; the SDL emitter decides how to
    render each one from the directive's definition.
    """

    name: str
    arguments: tuple[tuple[str, str], ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator("arguments", mode="before")
    @classmethod
    def coerce_arguments(cls, v: Any) -> Any:
        """Accept a mapping as well as ordered pairs; values become strings."""
        if isinstance(v, Mapping):
            v = tuple(v.items())
        if isinstance(v, (list, tuple)) and all(
            isinstance(pair, (list, tuple)) and len(pair) == 2 for pair in v
        ):
            return tuple((str(key), argument_value(value)) for key, value in v)
        return v

    @classmethod
    def of(cls, name: str, /, **arguments: Any) -> AppliedDirective:
        return cls(
            name=name,
            arguments=tuple((key, argument_value(value)) for key, value in arguments.items()),
        )

    @property
    def argument_map(self) -> dict[str, str]:
        return dict(self.arguments)


class DirectiveArgument(BaseModel):
    """
    Argument accepted by a directive.

    Attributes:
        name: Argument name
        type: GraphQL type without the trailing ``!`` (``String``, ``[String]``)
        required: Renders as non-null and must be supplied on application
        default_value: Optional SDL literal
    """

    name: str
    type: str
    required: bool = False
    default_value: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def type_ref(self) -> str:
        return f"{self.type}!" if self.required else self.type


class DirectiveDefinition(BaseModel):
    """A custom directive definition emitted as ``directive @name ... on ...``."""

    name: str
    description: str | None = None
    locations: frozenset[DirectiveLocation] = Field(
        default_factory=lambda: frozenset({DirectiveLocation.FIELD_DEFINITION})
    )
    arguments: tuple[DirectiveArgument, ...] = ()
    repeatable: bool = False

    model_config = ConfigDict(frozen=True)

    def allows(self, location: DirectiveLocation) -> bool:
        return location in self.locations

    def get_argument(self, name: str) -> DirectiveArgument | None:
        for argument in self.arguments:
            if argument.name == name:
                return argument
        return None


def _builtin(name: str, *locations: DirectiveLocation, **arguments: str) -> DirectiveDefinition:
    return DirectiveDefinition(
        name=name,
        locations=frozenset(locations),
        arguments=tuple(
            DirectiveArgument(name=arg_name, type=arg_type)
            for arg_name, arg_type in arguments.items()
        ),
    )


_AUTH_LOCATIONS = (DirectiveLocation.OBJECT, DirectiveLocation.FIELD_DEFINITION)

# Directives AppSync predefines; they are validated but never emitted
APPSYNC_DIRECTIVES: Mapping[str, DirectiveDefinition] = MappingProxyType(
    {
        "aws_api_key": _builtin("aws_api_key", *_AUTH_LOCATIONS),
        "aws_iam": _builtin("aws_iam", *_AUTH_LOCATIONS),
        "aws_oidc": _builtin("aws_oidc", *_AUTH_LOCATIONS),
        "aws_lambda": _builtin("aws_lambda", *_AUTH_LOCATIONS),
        "aws_cognito_user_pools": _builtin(
            "aws_cognito_user_pools", *_AUTH_LOCATIONS, cognito_groups="[String]"
        ),
        "aws_auth": _builtin(
            "aws_auth", DirectiveLocation.FIELD_DEFINITION, cognito_groups="[String]"
        ),
        "aws_subscribe": _builtin(
            "aws_subscribe", DirectiveLocation.FIELD_DEFINITION, mutations="[String]"
        ),
        "deprecated": _builtin(
            "deprecated",
            DirectiveLocation.FIELD_DEFINITION,
            DirectiveLocation.ARGUMENT_DEFINITION,
            DirectiveLocation.INPUT_FIELD_DEFINITION,
            DirectiveLocation.ENUM_VALUE,
            reason="String",
        ),
    }
)
