"""
Scalar tables for the TypeMapper.

The tables are immutable configuration data. ``DEFAULT_SCALAR_TABLES`` covers
Python and .NET host types and maps semantic types to the AWS AppSync
scalars; tests and projects build their own with ``ScalarTables.extend``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType

# Scalars every GraphQL implementation predefines
GRAPHQL_SCALARS = frozenset({"String", "Int", "Float", "Boolean", "ID"})

# Scalars AppSync predefines; they must not be declared in the schema
APPSYNC_SCALARS = frozenset(
    {
        "AWSDate",
        "AWSTime",
        "AWSDateTime",
        "AWSTimestamp",
        "AWSEmail",
        "AWSJSON",
        "AWSPhone",
        "AWSURL",
        "AWSIPAddress",
    }
)

TIMESTAMP_SCALAR = "AWSTimestamp"
JSON_SCALAR = "AWSJSON"


def _frozen(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping))


BUILTIN_TYPES: Mapping[str, str] = _frozen(
    {
        # Python
        "builtins.str": "String",
        "builtins.int": "Int",
        "builtins.float": "Float",
        "builtins.bool": "Boolean",
        "decimal.Decimal": "Float",
        "uuid.UUID": "ID",
        "datetime.datetime": "AWSDateTime",
        "datetime.date": "AWSDate",
        "datetime.time": "AWSTime",
        # .NET
        "System.String": "String",
        "System.Int32": "Int",
        "System.Int64": "Int",
        "System.Single": "Float",
        "System.Double": "Float",
        "System.Decimal": "Float",
        "System.Boolean": "Boolean",
        "System.Guid": "ID",
        "System.DateTime": "AWSDateTime",
        "System.DateTimeOffset": "AWSDateTime",
        "System.DateOnly": "AWSDate",
        "System.TimeOnly": "AWSTime",
        # Simple names, checked after qualified names
        "str": "String",
        "string": "String",
        "int": "Int",
        "long": "Int",
        "float": "Float",
        "double": "Float",
        "decimal": "Float",
        "Decimal": "Float",
        "bool": "Boolean",
        "UUID": "ID",
        "Guid": "ID",
    }
)

AWS_SCALAR_OVERRIDES: Mapping[str, str] = _frozen(
    {
        # Date and time
        "datetime.datetime": "AWSDateTime",
        "datetime.date": "AWSDate",
        "datetime.time": "AWSTime",
        "System.DateTime": "AWSDateTime",
        "System.DateTimeOffset": "AWSDateTime",
        "System.DateOnly": "AWSDate",
        "System.TimeOnly": "AWSTime",
        # Identifiers
        "uuid.UUID": "ID",
        "System.Guid": "ID",
        # JSON
        "typing.Any": "AWSJSON",
        "pydantic.types.JsonValue": "AWSJSON",
        "System.Text.Json.JsonElement": "AWSJSON",
        "Newtonsoft.Json.Linq.JObject": "AWSJSON",
        "Newtonsoft.Json.Linq.JToken": "AWSJSON",
        # E-mail and URL
        "pydantic.networks.EmailStr": "AWSEmail",
        "email.headerregistry.Address": "AWSEmail",
        "System.Net.Mail.MailAddress": "AWSEmail",
        "pydantic.networks.AnyUrl": "AWSURL",
        "pydantic.networks.HttpUrl": "AWSURL",
        "System.Uri": "AWSURL",
        # Phone
        "pydantic_extra_types.phone_numbers.PhoneNumber": "AWSPhone",
        # IP addresses
        "ipaddress.IPv4Address": "AWSIPAddress",
        "ipaddress.IPv6Address": "AWSIPAddress",
        "ipaddress.IPv4Network": "AWSIPAddress",
        "ipaddress.IPv6Network": "AWSIPAddress",
        "System.Net.IPAddress": "AWSIPAddress",
    }
)

# Generic definitions, compared without any ``<T>`` suffix
SEQUENCE_DEFINITIONS = frozenset(
    {
        "builtins.list",
        "builtins.set",
        "builtins.frozenset",
        "builtins.tuple",
        "typing.List",
        "typing.Set",
        "typing.FrozenSet",
        "typing.Tuple",
        "typing.Sequence",
        "typing.Iterable",
        "collections.abc.Sequence",
        "collections.abc.MutableSequence",
        "collections.abc.Iterable",
        "collections.abc.Collection",
        "collections.abc.Set",
        "System.Collections.Generic.List",
        "System.Collections.Generic.IList",
        "System.Collections.Generic.IEnumerable",
        "System.Collections.Generic.IReadOnlyList",
        "System.Collections.Generic.ICollection",
    }
)

MAPPING_DEFINITIONS = frozenset(
    {
        "builtins.dict",
        "typing.Dict",
        "typing.Mapping",
        "collections.abc.Mapping",
        "collections.abc.MutableMapping",
        "System.Collections.Generic.Dictionary",
        "System.Collections.Generic.IDictionary",
        "System.Collections.Generic.IReadOnlyDictionary",
    }
)

AWAITABLE_DEFINITIONS = frozenset(
    {
        "typing.Awaitable",
        "typing.Coroutine",
        "collections.abc.Awaitable",
        "collections.abc.Coroutine",
        "System.Threading.Tasks.Task",
        "System.Threading.Tasks.ValueTask",
    }
)

STRING_TYPE_NAMES = frozenset({"builtins.str", "str", "System.String", "string"})


def normalize_definition(definition: str) -> str:
    """Strip a ``<T>`` suffix from a generic definition name."""
    return definition.split("<", 1)[0]


@dataclass(frozen=True)
class ScalarTables:
    """
    Immutable lookup tables injected into a TypeMapper.

    Attributes:
        builtin: Host type name (qualified or simple) to GraphQL scalar
        overrides: Semantic scalars, consulted before ``builtin``
        sequence_definitions: Generic definitions that map to GraphQL lists
        mapping_definitions: Generic definitions that map to the JSON scalar
        awaitable_definitions: Generic definitions unwrapped on return types
        string_type_names: Names that count as string dictionary keys
        json_scalar: Scalar used for string-keyed dictionaries
    """

    builtin: Mapping[str, str] = field(default_factory=lambda: BUILTIN_TYPES)
    overrides: Mapping[str, str] = field(default_factory=lambda: AWS_SCALAR_OVERRIDES)
    sequence_definitions: frozenset[str] = SEQUENCE_DEFINITIONS
    mapping_definitions: frozenset[str] = MAPPING_DEFINITIONS
    awaitable_definitions: frozenset[str] = AWAITABLE_DEFINITIONS
    string_type_names: frozenset[str] = STRING_TYPE_NAMES
    json_scalar: str = JSON_SCALAR
    # Scalars the override table can produce
    override_scalars: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "builtin", _frozen(self.builtin))
        object.__setattr__(self, "overrides", _frozen(self.overrides))
        object.__setattr__(self, "override_scalars", frozenset(self.overrides.values()))

    def extend(
        self,
        overrides: Mapping[str, str] | None = None,
        builtin: Mapping[str, str] | None = None,
    ) -> ScalarTables:
        """Return new tables with extra entries layered on top of these."""
        return replace(
            self,
            overrides={**self.overrides, **(overrides or {})},
            builtin={**self.builtin, **(builtin or {})},
        )

    def is_sequence(self, definition: str) -> bool:
        return normalize_definition(definition) in self.sequence_definitions

    def is_mapping(self, definition: str) -> bool:
        return normalize_definition(definition) in self.mapping_definitions

    def is_awaitable(self, definition: str) -> bool:
        return normalize_definition(definition) in self.awaitable_definitions


DEFAULT_SCALAR_TABLES = ScalarTables()


def predefined_scalars(extra: Iterable[str] = (), include_appsync: bool = True) -> frozenset[str]:
    """Scalar names the target platform predefines."""
    names = set(GRAPHQL_SCALARS) | set(extra)
    if include_appsync:
        names |= APPSYNC_SCALARS
    return frozenset(names)
