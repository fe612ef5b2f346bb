"""
Type model builder.

Turns a DeclarationSnapshot into a SchemaModel:

1. Resolve names (explicit overrides, otherwise the naming policy)
2. Map field, argument and return types through the TypeMapper
3. Check each declaration's shape against its kind
4. Detect duplicates in the symbol table
5. Validate references and directive usage across the whole model

Every pass starts from an empty symbol table; nothing survives between
builds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from . import ir
from .errors import (
    DuplicateDeclarationError,
    InvalidDirectiveUsageError,
    InvalidResolverBindingError,
    InvalidTypeShapeError,
    MappingError,
    make_error,
)
from .scalars import TIMESTAMP_SCALAR, predefined_scalars
from .type_mapper import TypeMapper
from .typeref import is_valid_name, is_valid_type_ref, named_type, split_non_null
from .validator import validate_model

logger = logging.getLogger(__name__)


class NamingPolicy(str, Enum):
    """How default field, argument and operation names are derived."""

    CAMEL = "camel"
    PRESERVE = "preserve"


def camel_case(identifier: str) -> str:
    """
    Convert an identifier to camelCase.

    ``Id`` -> ``id``, ``created_at`` -> ``createdAt``, ``GetProduct`` ->
    ``getProduct``, ``URLPath`` -> ``urlPath``, ``ID`` -> ``id``.
    """
    parts = [part for part in identifier.split("_") if part]
    if not parts:
        return identifier
    head, rest = parts[0], parts[1:]
    return _lower_head(head) + "".join(part[:1].upper() + part[1:] for part in rest)


def _lower_head(word: str) -> str:
    if word.isupper():
        return word.lower()
    run = 0
    while run < len(word) and word[run].isupper():
        run += 1
    if run <= 1:
        return word[:1].lower() + word[1:]
    # Leading acronym: keep the capital that starts the next word
    return word[: run - 1].lower() + word[run - 1 :]


@dataclass
class SymbolTable:
    """
    Names declared so far in one pass.

    Types, scalars and the root operation type names share one namespace;
    directives have their own.
    """

    types: dict[str, ir.TypeEntry] = field(default_factory=dict)
    scalars: dict[str, ir.ScalarEntry] = field(default_factory=dict)
    implicit_scalars: dict[str, ir.ScalarEntry] = field(default_factory=dict)
    directives: dict[str, ir.DirectiveDefinition] = field(default_factory=dict)
    operations: list[ir.OperationEntry] = field(default_factory=list)
    operation_names: dict[ir.RootKind, set[str]] = field(default_factory=dict)

    # Where each symbol came from (for error reporting)
    symbol_sources: dict[str, str] = field(default_factory=dict)

    def _check_type_name(self, name: str, location: str | None, reserved: Iterable[str]) -> None:
        if name in self.types or name in self.scalars:
            existing = self.symbol_sources.get(name, "unknown")
            raise make_error(
                DuplicateDeclarationError,
                f"Duplicate type '{name}' (first declared at {existing})",
                name,
                location=location,
            )
        if name in reserved:
            raise make_error(
                DuplicateDeclarationError,
                f"Type name '{name}' is reserved",
                name,
                location=location,
            )

    def add_type(self, entry: ir.TypeEntry, location: str | None, reserved: Iterable[str]) -> None:
        """Add a type, checking for duplicates."""
        self._check_type_name(entry.name, location, reserved)
        self.types[entry.name] = entry
        self.symbol_sources[entry.name] = location or "unknown"

    def add_scalar(
        self, entry: ir.ScalarEntry, location: str | None, reserved: Iterable[str]
    ) -> None:
        """Add a custom scalar, checking for duplicates."""
        self._check_type_name(entry.name, location, reserved)
        self.scalars[entry.name] = entry
        self.symbol_sources[entry.name] = location or "unknown"

    def add_directive(self, definition: ir.DirectiveDefinition, location: str | None) -> None:
        """Add a directive definition, checking for duplicates."""
        if definition.name in self.directives or definition.name in ir.APPSYNC_DIRECTIVES:
            raise make_error(
                DuplicateDeclarationError,
                f"Duplicate directive '@{definition.name}'",
                f"@{definition.name}",
                location=location,
            )
        self.directives[definition.name] = definition
        self.symbol_sources[f"@{definition.name}"] = location or "unknown"

    def add_operation(self, entry: ir.OperationEntry, location: str | None) -> None:
        """Add an operation, checking for duplicates within its root type."""
        names = self.operation_names.setdefault(entry.root_kind, set())
        if entry.name in names:
            raise make_error(
                DuplicateDeclarationError,
                f"Duplicate {entry.root_kind.value.lower()} '{entry.name}'",
                entry.root_kind.value,
                entry.name,
                location,
            )
        names.add(entry.name)
        self.operations.append(entry)
        self.symbol_sources[f"{entry.root_kind.value}.{entry.name}"] = location or "unknown"

    def note_implicit_scalar(self, name: str) -> None:
        if name not in self.implicit_scalars:
            self.implicit_scalars[name] = ir.ScalarEntry(name=name)

    def all_scalars(self) -> tuple[ir.ScalarEntry, ...]:
        """Declared scalars, then implicit ones nobody declared."""
        implicit = [s for name, s in self.implicit_scalars.items() if name not in self.scalars]
        return tuple(self.scalars.values()) + tuple(implicit)


class TypeModelBuilder:
    """
    Build a validated SchemaModel from declarations.

    Example:
        builder = TypeModelBuilder()
        model = builder.build(snapshot)
    """

    def __init__(
        self,
        mapper: TypeMapper | None = None,
        naming: NamingPolicy = NamingPolicy.CAMEL,
        builtin_scalars: frozenset[str] | None = None,
        validate: bool = True,
        known_directives: Mapping[str, ir.DirectiveDefinition] = ir.APPSYNC_DIRECTIVES,
    ) -> None:
        """
        Initialize the builder.

        Args:
            mapper: TypeMapper to use (default tables if omitted)
            naming: Policy for default field, argument and operation names
            builtin_scalars: Scalars the target predefines (GraphQL + AppSync by default)
            validate: Run reference and directive validation after building
            known_directives: Directives usable without a definition
        """
        self.mapper = mapper or TypeMapper()
        self.naming = naming
        self.builtin_scalars = (
            builtin_scalars if builtin_scalars is not None else predefined_scalars()
        )
        self.validate = validate
        self.known_directives = known_directives

    def build(
        self,
        snapshot: ir.DeclarationSnapshot,
        metadata: ir.SchemaMetadata | None = None,
    ) -> ir.SchemaModel:
        """
        Build the schema model for one snapshot.

        Args:
            snapshot: Declarations in discovery order
            metadata: Schema metadata; falls back to the snapshot's, then defaults

        Returns:
            Immutable SchemaModel

        Raises:
            SchemaCompilationError: On the first invalid declaration
        """
        symbols = SymbolTable()
        reserved = self.builtin_scalars | {kind.value for kind in ir.RootKind}

        for declaration in snapshot.declarations:
            if isinstance(declaration, ir.TypeDeclaration):
                entry = self._build_type(declaration, symbols)
                symbols.add_type(entry, declaration.location, reserved)
            elif isinstance(declaration, ir.ScalarDeclaration):
                scalar = self._build_scalar(declaration)
                symbols.add_scalar(scalar, declaration.location, reserved)
            elif isinstance(declaration, ir.OperationDeclaration):
                operation = self._build_operation(declaration, symbols)
                symbols.add_operation(operation, declaration.location)
            elif isinstance(declaration, ir.DirectiveDeclaration):
                definition = self._build_directive(declaration)
                symbols.add_directive(definition, declaration.location)

        model = ir.SchemaModel(
            metadata=metadata or snapshot.metadata or ir.SchemaMetadata(),
            types=tuple(symbols.types.values()),
            scalars=symbols.all_scalars(),
            directives=tuple(symbols.directives.values()),
            operations=tuple(symbols.operations),
            builtin_scalars=self.builtin_scalars,
        )
        logger.debug(
            "Built schema model: %d types, %d scalars, %d directives, %d operations",
            len(model.types),
            len(model.scalars),
            len(model.directives),
            len(model.operations),
        )

        if self.validate:
            validate_model(model, self.known_directives, symbols.symbol_sources)

        return model

    # =========================================================================
    # Names
    # =========================================================================

    def _member_name(self, identifier: str, override: str | None) -> str:
        if override:
            return override
        if self.naming == NamingPolicy.CAMEL:
            return camel_case(identifier)
        return identifier

    @staticmethod
    def _check_name(name: str, declaration: str, member: str | None, location: str | None) -> None:
        if not is_valid_name(name):
            raise make_error(
                InvalidTypeShapeError,
                f"'{name}' is not a valid GraphQL name",
                declaration,
                member,
                location,
            )

    # =========================================================================
    # Types
    # =========================================================================

    def _build_type(self, decl: ir.TypeDeclaration, symbols: SymbolTable) -> ir.TypeEntry:
        name = decl.name or decl.identifier
        self._check_name(name, name, None, decl.location)

        def shape_error(message: str) -> Exception:
            return make_error(InvalidTypeShapeError, message, name, location=decl.location)

        fields = tuple(f for f in decl.fields if not f.ignored)
        kind = decl.kind

        if kind.has_fields:
            if decl.enum_members or decl.union_members:
                raise shape_error(f"{kind.value} type cannot declare enum values or union members")
            if not fields:
                raise shape_error(f"{kind.value} type declares no fields")
            if decl.interfaces and kind == ir.TypeKind.INPUT:
                raise shape_error("input type cannot implement interfaces")
            return ir.TypeEntry(
                name=name,
                description=decl.description,
                kind=kind,
                fields=self._build_fields(fields, name, decl.location, symbols),
                interfaces=self._unique(decl.interfaces, name, "interface", decl.location),
                directives=decl.directives,
            )

        if decl.interfaces:
            raise shape_error(f"{kind.value} type cannot implement interfaces")

        if kind == ir.TypeKind.ENUM:
            if fields or decl.union_members:
                raise shape_error("enum type cannot declare fields or union members")
            if not decl.enum_members:
                raise shape_error("enum type declares no values")
            return ir.TypeEntry(
                name=name,
                description=decl.description,
                kind=kind,
                enum_values=self._build_enum_values(decl, name),
                directives=decl.directives,
            )

        # Union
        if fields or decl.enum_members:
            raise shape_error("union type cannot declare fields or enum values")
        if not decl.union_members:
            raise shape_error("union type declares no members")
        return ir.TypeEntry(
            name=name,
            description=decl.description,
            kind=kind,
            union_members=self._unique(decl.union_members, name, "union member", decl.location),
            directives=decl.directives,
        )

    @staticmethod
    def _unique(
        names: Iterable[str], owner: str, what: str, location: str | None
    ) -> tuple[str, ...]:
        seen: list[str] = []
        for name in names:
            if name in seen:
                raise make_error(
                    DuplicateDeclarationError,
                    f"Duplicate {what} '{name}'",
                    owner,
                    location=location,
                )
            seen.append(name)
        return tuple(seen)

    def _build_enum_values(self, decl: ir.TypeDeclaration, owner: str) -> tuple[ir.EnumValue, ...]:
        values: dict[str, ir.EnumValue] = {}
        for member in decl.enum_members:
            name = member.name or member.identifier
            self._check_name(name, owner, name, decl.location)
            if name in values:
                raise make_error(
                    DuplicateDeclarationError,
                    f"Duplicate enum value '{name}'",
                    owner,
                    name,
                    decl.location,
                )
            values[name] = ir.EnumValue(
                name=name,
                description=member.description,
                deprecated=member.deprecated,
                deprecation_reason=member.deprecation_reason,
                directives=member.directives,
            )
        return tuple(values.values())

    # =========================================================================
    # Fields and arguments
    # =========================================================================

    def _build_fields(
        self,
        declarations: Iterable[ir.FieldDeclaration],
        owner: str,
        owner_location: str | None,
        symbols: SymbolTable,
        what: str = "field",
    ) -> tuple[ir.FieldEntry, ...]:
        fields: dict[str, ir.FieldEntry] = {}
        for decl in declarations:
            entry = self._build_field(decl, owner, owner_location, symbols)
            if entry.name in fields:
                raise make_error(
                    DuplicateDeclarationError,
                    f"Duplicate {what} '{entry.name}'",
                    owner,
                    entry.name,
                    decl.location or owner_location,
                )
            fields[entry.name] = entry
        return tuple(fields.values())

    def _build_field(
        self,
        decl: ir.FieldDeclaration,
        owner: str,
        owner_location: str | None,
        symbols: SymbolTable,
    ) -> ir.FieldEntry:
        name = self._member_name(decl.identifier, decl.name)
        location = decl.location or owner_location
        self._check_name(name, owner, None, location)

        graphql_type, nullable = self._field_type(decl, owner, name, location)
        if decl.non_null:
            nullable = False

        self._note_scalar(graphql_type, symbols)
        return ir.FieldEntry(
            name=name,
            description=decl.description,
            graphql_type=graphql_type,
            nullable=nullable,
            deprecated=decl.deprecated,
            deprecation_reason=decl.deprecation_reason,
            default_value=decl.default_value,
            directives=decl.directives,
        )

    def _field_type(
        self,
        decl: ir.FieldDeclaration,
        owner: str,
        name: str,
        location: str | None,
    ) -> tuple[str, bool]:
        if decl.type_name:
            return self._explicit_type(decl.type_name, owner, name, location)

        if decl.timestamp:
            if decl.native_type is None:
                return TIMESTAMP_SCALAR, True
            return TIMESTAMP_SCALAR, not self.mapper.is_non_null(decl.native_type)

        if decl.native_type is None:
            raise make_error(MappingError, "Field has no type", owner, name, location)

        try:
            mapped = self.mapper.resolve(decl.native_type)
        except MappingError as e:
            raise make_error(MappingError, e.message, owner, name, location) from e
        return mapped.graphql_type, mapped.nullable

    @staticmethod
    def _explicit_type(
        type_ref: str, owner: str, member: str | None, location: str | None
    ) -> tuple[str, bool]:
        type_ref = type_ref.strip()
        if not is_valid_type_ref(type_ref):
            raise make_error(
                MappingError,
                f"'{type_ref}' is not a valid GraphQL type reference",
                owner,
                member,
                location,
            )
        return split_non_null(type_ref)

    def _note_scalar(self, graphql_type: str, symbols: SymbolTable) -> None:
        base = named_type(graphql_type)
        if base not in self.builtin_scalars and self.mapper.produces_custom_scalar(base):
            symbols.note_implicit_scalar(base)

    # =========================================================================
    # Scalars, operations, directives
    # =========================================================================

    def _build_scalar(self, decl: ir.ScalarDeclaration) -> ir.ScalarEntry:
        name = decl.name or decl.identifier
        self._check_name(name, name, None, decl.location)
        return ir.ScalarEntry(name=name, description=decl.description, directives=decl.directives)

    def _build_operation(
        self, decl: ir.OperationDeclaration, symbols: SymbolTable
    ) -> ir.OperationEntry:
        name = self._member_name(decl.identifier, decl.name)
        root = decl.root_kind.value
        self._check_name(name, root, None, decl.location)

        arguments = self._build_fields(
            (a for a in decl.arguments if not a.ignored),
            f"{root}.{name}",
            decl.location,
            symbols,
            what="argument",
        )

        if decl.return_type_name:
            return_type, return_nullable = self._explicit_type(
                decl.return_type_name, root, name, decl.location
            )
        else:
            try:
                mapped = self.mapper.map_return_type(decl.return_type)
            except MappingError as e:
                raise make_error(MappingError, e.message, root, name, decl.location) from e
            return_type, return_nullable = mapped
        self._note_scalar(return_type, symbols)

        return ir.OperationEntry(
            name=name,
            root_kind=decl.root_kind,
            description=decl.description,
            arguments=arguments,
            return_type=return_type,
            return_nullable=return_nullable,
            directives=decl.directives,
            resolver=self._build_binding(decl.resolver, root, name, decl.location),
        )

    @staticmethod
    def _build_binding(
        config: ir.ResolverConfig | None,
        root: str,
        name: str,
        location: str | None,
    ) -> ir.ResolverBinding | None:
        if config is None:
            return None

        def binding_error(message: str) -> Exception:
            return make_error(InvalidResolverBindingError, message, root, name, location)

        kind = config.effective_kind
        if kind == ir.ResolverKind.UNIT:
            if not config.data_source:
                raise binding_error("Unit resolver requires a data source")
            if config.functions:
                raise binding_error("Unit resolver cannot declare a function chain")
        else:
            if not config.functions:
                raise binding_error("Pipeline resolver requires at least one function")
            if config.data_source:
                raise binding_error("Pipeline resolver cannot name a data source")
            if any(not function for function in config.functions):
                raise binding_error("Pipeline resolver function names cannot be empty")

        return ir.ResolverBinding(
            kind=kind,
            data_source=config.data_source,
            function_chain=config.functions,
            request_mapping_ref=config.request_mapping,
            response_mapping_ref=config.response_mapping,
        )

    def _build_directive(self, decl: ir.DirectiveDeclaration) -> ir.DirectiveDefinition:
        owner = f"@{decl.name}"
        self._check_name(decl.name, owner, None, decl.location)
        if not decl.locations:
            raise make_error(
                InvalidDirectiveUsageError,
                "Directive declares no locations",
                owner,
                location=decl.location,
            )
        names: set[str] = set()
        for argument in decl.arguments:
            if argument.name in names:
                raise make_error(
                    DuplicateDeclarationError,
                    f"Duplicate argument '{argument.name}'",
                    owner,
                    argument.name,
                    decl.location,
                )
            if not is_valid_type_ref(argument.type):
                raise make_error(
                    MappingError,
                    f"'{argument.type}' is not a valid GraphQL type reference",
                    owner,
                    argument.name,
                    decl.location,
                )
            names.add(argument.name)
        return ir.DirectiveDefinition(
            name=decl.name,
            description=decl.description,
            locations=frozenset(decl.locations),
            arguments=decl.arguments,
            repeatable=decl.repeatable,
        )


def build_model(
    snapshot: ir.DeclarationSnapshot,
    mapper: TypeMapper | None = None,
    naming: NamingPolicy = NamingPolicy.CAMEL,
    metadata: ir.SchemaMetadata | None = None,
    builtin_scalars: frozenset[str] | None = None,
) -> ir.SchemaModel:
    """
    Build and validate a SchemaModel in one call.

    Args:
        snapshot: Declarations to build from
        mapper: Optional TypeMapper with custom scalar tables
        naming: Naming policy for fields, arguments and operations
        metadata: Optional schema metadata
        builtin_scalars: Scalars the target predefines

    Returns:
        Validated SchemaModel
    """
    builder = TypeModelBuilder(mapper=mapper, naming=naming, builtin_scalars=builtin_scalars)
    return builder.build(snapshot, metadata)
