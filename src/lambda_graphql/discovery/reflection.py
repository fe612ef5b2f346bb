"""
Runtime-reflection declaration source.

Imports Python modules and walks their namespaces in definition order,
turning decorated classes and functions into declarations. Objects a module
merely imports are skipped; each object is collected once even when several
listed modules expose it.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import importlib
import inspect
import logging
import sys
import types
import typing
import uuid
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from lambda_graphql.core import ir
from lambda_graphql.core.errors import MappingError, make_error
from lambda_graphql.core.scalars import MAPPING_DEFINITIONS, SEQUENCE_DEFINITIONS

from .annotations import (
    DirectiveApplication,
    GraphQLField,
    GraphQLIgnore,
    GraphQLMeta,
    GraphQLNonNull,
    GraphQLTimestamp,
    as_applied,
    get_meta,
)

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_PARAMETERS = ("self", "cls", "context")

# Python types that are non-null unless wrapped in Optional
VALUE_TYPES: tuple[type, ...] = (
    int,
    float,
    bool,
    decimal.Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
    uuid.UUID,
    enum.Enum,
)

_UNION_ORIGINS = (typing.Union, types.UnionType)


def _graphql_name(cls: type) -> str | None:
    """GraphQL name a decorated class is known by, if it is decorated."""
    meta = get_meta(cls)
    if meta is None or meta.role not in ("type", "union", "scalar"):
        return None
    return meta.name or cls.__name__


def native_type_of(annotation: Any) -> ir.NativeType:
    """
    Describe a Python annotation as a NativeType.

    ``X | None`` over a value type becomes a nullable wrapper; over anything
    else it marks the reference type NULLABLE. Other reference types are
    NOT_NULLABLE.

    Raises:
        MappingError: For annotations with no GraphQL equivalent
    """
    if annotation is None or annotation is type(None):
        return ir.NativeType.void()

    origin = typing.get_origin(annotation)

    if origin is typing.Annotated:
        return native_type_of(typing.get_args(annotation)[0])

    if origin in _UNION_ORIGINS:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) != 1:
            raise MappingError(
                f"Union annotation '{annotation}' has no GraphQL type; "
                "declare a graphql_union and use return_type/type_name"
            )
        inner = native_type_of(args[0])
        if len(typing.get_args(annotation)) == len(args):
            return inner
        if inner.is_value_type:
            return ir.NativeType.nullable_of(inner)
        return inner.with_nullability(ir.Nullability.NULLABLE)

    if annotation is typing.Any:
        return ir.NativeType.named("Any", "typing")

    if origin is not None:
        arguments = [
            native_type_of(arg) for arg in typing.get_args(annotation) if arg is not Ellipsis
        ]
        return ir.NativeType.generic(origin.__name__, origin.__module__, arguments)

    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        # typing.NewType
        return native_type_of(supertype)

    if isinstance(annotation, type):
        return _class_type(annotation)

    raise MappingError(f"Unsupported annotation '{annotation!r}'")


def _class_type(cls: type) -> ir.NativeType:
    name = _graphql_name(cls)
    is_value = issubclass(cls, VALUE_TYPES)
    if name is not None:
        if is_value:
            return ir.NativeType.value(name)
        return ir.NativeType.named(name)

    qualified = f"{cls.__module__}.{cls.__name__}"
    if qualified in SEQUENCE_DEFINITIONS or qualified in MAPPING_DEFINITIONS:
        # Bare ``list``/``dict`` without type arguments
        return ir.NativeType.generic(cls.__name__, cls.__module__, [])
    if is_value:
        return ir.NativeType.value(cls.__name__, cls.__module__)
    return ir.NativeType.named(cls.__name__, cls.__module__)


def sdl_literal(value: Any) -> str:
    """Render a Python default value as a GraphQL literal."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (int, float, decimal.Decimal)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return f"[{', '.join(sdl_literal(item) for item in value)}]"
    return _quote(str(value))


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _is_literal_default(value: Any) -> bool:
    return value is None or isinstance(
        value, (bool, int, float, str, decimal.Decimal, enum.Enum, list, tuple)
    )


class ReflectionDeclarationSource:
    """
    Collect declarations from importable Python modules.

    Example:
        source = ReflectionDeclarationSource(["shop.graphql"])
        snapshot = source.collect()
    """

    def __init__(
        self,
        modules: Iterable[str],
        ignored_parameters: Iterable[str] = DEFAULT_IGNORED_PARAMETERS,
        search_paths: Iterable[Path] = (),
    ) -> None:
        """
        Initialize the source.

        Args:
            modules: Dotted module names, collected in this order
            ignored_parameters: Operation parameters never exposed as arguments
            search_paths: Directories made importable while collecting
        """
        self.modules = list(modules)
        self.ignored_parameters = frozenset(ignored_parameters)
        self.search_paths = [str(path) for path in search_paths]

    def collect(self) -> ir.DeclarationSnapshot:
        declarations: list[Any] = []
        metadata: ir.SchemaMetadata | None = None
        seen: set[int] = set()

        added = [path for path in self.search_paths if path not in sys.path]
        sys.path[:0] = added
        try:
            for module_name in self.modules:
                module = importlib.import_module(module_name)
                for obj in self._module_objects(module):
                    if id(obj) in seen:
                        continue
                    seen.add(id(obj))
                    if isinstance(obj, ir.SchemaMetadata):
                        metadata = metadata or obj
                    else:
                        declarations.extend(self._declarations_for(obj))
        finally:
            for path in added:
                if path in sys.path:
                    sys.path.remove(path)

        logger.debug(
            "Collected %d declarations from %d module(s)", len(declarations), len(self.modules)
        )
        return ir.DeclarationSnapshot(declarations=tuple(declarations), metadata=metadata)

    @staticmethod
    def _module_objects(module: types.ModuleType) -> Iterator[Any]:
        for obj in vars(module).values():
            if isinstance(obj, (ir.DirectiveDeclaration, ir.SchemaMetadata)):
                yield obj
            elif inspect.isclass(obj) or inspect.isfunction(obj):
                if obj.__module__ == module.__name__:
                    yield obj

    def _declarations_for(self, obj: Any) -> Iterator[Any]:
        if isinstance(obj, ir.DirectiveDeclaration):
            yield obj
            return

        meta = get_meta(obj)
        if inspect.isclass(obj):
            if meta is not None and meta.role in ("type", "union", "scalar"):
                yield self._class_declaration(obj, meta)
            # Operations may live on a class as static or class methods
            for member in vars(obj).values():
                member_meta = get_meta(member)
                if member_meta is not None and member_meta.role == "operation":
                    yield self._operation_declaration(
                        getattr(member, "__func__", member), member_meta
                    )
        elif meta is not None and meta.role == "operation":
            yield self._operation_declaration(obj, meta)

    # =========================================================================
    # Classes
    # =========================================================================

    def _class_declaration(self, cls: type, meta: GraphQLMeta) -> Any:
        location = f"{cls.__module__}:{cls.__qualname__}"
        directives = tuple(meta.directives)

        if meta.role == "scalar":
            return ir.ScalarDeclaration(
                identifier=cls.__name__,
                name=meta.name,
                description=meta.description,
                directives=directives,
                location=location,
            )

        if meta.role == "union":
            return ir.TypeDeclaration(
                identifier=cls.__name__,
                name=meta.name,
                description=meta.description,
                kind=ir.TypeKind.UNION,
                union_members=meta.union_members,
                directives=directives,
                location=location,
            )

        if issubclass(cls, enum.Enum):
            return ir.TypeDeclaration(
                identifier=cls.__name__,
                name=meta.name,
                description=meta.description,
                kind=ir.TypeKind.ENUM,
                enum_members=tuple(self._enum_members(cls, meta)),
                directives=directives,
                location=location,
            )

        return ir.TypeDeclaration(
            identifier=cls.__name__,
            name=meta.name,
            description=meta.description,
            kind=meta.kind,
            fields=tuple(self._fields(cls, meta.kind, location)),
            interfaces=tuple(self._interfaces(cls)),
            directives=directives,
            location=location,
        )

    @staticmethod
    def _enum_members(cls: type[enum.Enum], meta: GraphQLMeta) -> Iterator[ir.EnumMemberDeclaration]:
        for member in cls:
            info = meta.enum_values.get(member.name)
            if info is None:
                yield ir.EnumMemberDeclaration(identifier=member.name)
                continue
            yield ir.EnumMemberDeclaration(
                identifier=member.name,
                name=info.name,
                description=info.description,
                deprecated=info.deprecated,
                deprecation_reason=info.deprecation_reason,
                directives=info.directives,
            )

    @staticmethod
    def _interfaces(cls: type) -> Iterator[str]:
        for base in cls.__mro__[1:]:
            base_meta = get_meta(base)
            if base_meta is not None and base_meta.kind == ir.TypeKind.INTERFACE:
                yield base_meta.name or base.__name__

    def _fields(
        self, cls: type, kind: ir.TypeKind, location: str
    ) -> Iterator[ir.FieldDeclaration]:
        try:
            hints = typing.get_type_hints(cls, include_extras=True)
        except NameError as e:
            raise make_error(MappingError, f"Unresolvable annotation: {e}", cls.__name__) from e

        pydantic_fields = getattr(cls, "model_fields", {})
        for name, hint in hints.items():
            if name.startswith("_") or typing.get_origin(hint) is typing.ClassVar:
                continue
            description = None
            default = inspect.Parameter.empty
            if name in pydantic_fields:
                info = pydantic_fields[name]
                description = info.description
                if not info.is_required():
                    default = info.default
            elif name in vars(cls):
                default = vars(cls)[name]
            default = self._dataclass_default(cls, name, default)

            if kind != ir.TypeKind.INPUT or not _is_literal_default(default):
                default = inspect.Parameter.empty
            yield self._field_declaration(
                name, hint, f"{location}.{name}", description, default
            )

        for name, member in vars(cls).items():
            if isinstance(member, property) and not name.startswith("_") and name not in hints:
                hint = typing.get_type_hints(member.fget, include_extras=True).get("return")
                if hint is not None:
                    yield self._field_declaration(name, hint, f"{location}.{name}")

    @staticmethod
    def _dataclass_default(cls: type, name: str, default: Any) -> Any:
        if not dataclasses.is_dataclass(cls):
            return default
        for item in dataclasses.fields(cls):
            if item.name == name and item.default is not dataclasses.MISSING:
                return item.default
        return default

    def _field_declaration(
        self,
        identifier: str,
        hint: Any,
        location: str,
        description: str | None = None,
        default: Any = inspect.Parameter.empty,
    ) -> ir.FieldDeclaration:
        extras: tuple[Any, ...] = ()
        if typing.get_origin(hint) is typing.Annotated:
            extras = hint.__metadata__

        options: dict[str, Any] = {
            "identifier": identifier,
            "description": description,
            "location": location,
        }
        if default is not inspect.Parameter.empty:
            options["default_value"] = sdl_literal(default)

        directives: list[ir.AppliedDirective] = []
        for extra in extras:
            if extra is GraphQLIgnore:
                options["ignored"] = True
            elif extra is GraphQLNonNull:
                options["non_null"] = True
            elif extra is GraphQLTimestamp:
                options["timestamp"] = True
            elif isinstance(extra, DirectiveApplication):
                directives.append(extra.directive)
            elif isinstance(extra, GraphQLField):
                self._apply_field_options(options, extra, directives)

        if options.get("ignored"):
            return ir.FieldDeclaration(identifier=identifier, ignored=True, location=location)

        if not options.get("type_name"):
            try:
                options["native_type"] = native_type_of(hint)
            except MappingError as e:
                raise make_error(MappingError, e.message, location, identifier) from e

        return ir.FieldDeclaration(directives=tuple(directives), **options)

    @staticmethod
    def _apply_field_options(
        options: dict[str, Any], marker: GraphQLField, directives: list[ir.AppliedDirective]
    ) -> None:
        for key in ("name", "description", "type_name", "default_value", "deprecation_reason"):
            value = getattr(marker, key)
            if value is not None:
                options[key] = value
        if marker.non_null:
            options["non_null"] = True
        if marker.deprecated or marker.deprecation_reason is not None:
            options["deprecated"] = True
        directives.extend(as_applied(d) for d in marker.directives)

    # =========================================================================
    # Operations
    # =========================================================================

    def _operation_declaration(self, func: Any, meta: GraphQLMeta) -> ir.OperationDeclaration:
        location = f"{func.__module__}:{func.__qualname__}"
        try:
            hints = typing.get_type_hints(func, include_extras=True)
        except NameError as e:
            raise make_error(MappingError, f"Unresolvable annotation: {e}", func.__name__) from e

        arguments = []
        for parameter in inspect.signature(func).parameters.values():
            if parameter.name in self.ignored_parameters:
                continue
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                continue
            if parameter.name not in hints:
                raise make_error(
                    MappingError, "Argument has no type annotation", func.__name__, parameter.name
                )
            default = parameter.default
            if not _is_literal_default(default):
                default = inspect.Parameter.empty
            arguments.append(
                self._field_declaration(
                    parameter.name,
                    hints[parameter.name],
                    f"{location}({parameter.name})",
                    default=default,
                )
            )

        return_type = None
        if not meta.return_type:
            if "return" not in hints:
                raise make_error(
                    MappingError,
                    "Operation has no return annotation; use -> None for no value",
                    func.__name__,
                    location=location,
                )
            try:
                return_type = native_type_of(hints.get("return"))
            except MappingError as e:
                raise make_error(MappingError, e.message, func.__name__, location=location) from e

        return ir.OperationDeclaration(
            identifier=func.__name__,
            name=meta.name,
            root_kind=meta.root_kind or ir.RootKind.QUERY,
            description=meta.description,
            arguments=tuple(arguments),
            return_type=return_type,
            return_type_name=meta.return_type,
            resolver=meta.resolver,
            directives=tuple(meta.directives),
            location=location,
        )
