"""
Cross-declaration validation of a built SchemaModel.

Runs after every declaration has been turned into an entry, so forward
references are allowed: a field may name a type declared later.

Checks, in model order:
- every referenced type exists (MissingReferenceError)
- input positions only use input types, output positions never do
- union members are objects, listed interfaces are interfaces
- implementers carry every interface field with a compatible type
- applied directives are defined, allowed at their location and given
  valid arguments
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from . import ir
from .errors import (
    InvalidDirectiveUsageError,
    InvalidTypeShapeError,
    MissingReferenceError,
    SchemaCompilationError,
    make_error,
)
from .typeref import accepts, named_type

logger = logging.getLogger(__name__)

_TYPE_LOCATIONS = {
    ir.TypeKind.OBJECT: ir.DirectiveLocation.OBJECT,
    ir.TypeKind.INPUT: ir.DirectiveLocation.INPUT_OBJECT,
    ir.TypeKind.INTERFACE: ir.DirectiveLocation.INTERFACE,
    ir.TypeKind.ENUM: ir.DirectiveLocation.ENUM,
    ir.TypeKind.UNION: ir.DirectiveLocation.UNION,
}

_INPUT_KINDS = (ir.TypeKind.INPUT, ir.TypeKind.ENUM)


class ModelValidator:
    """
    Validate references and directive usage across a SchemaModel.

    Raises the first error found; one invalid declaration fails the pass.
    """

    def __init__(
        self,
        model: ir.SchemaModel,
        known_directives: Mapping[str, ir.DirectiveDefinition] = ir.APPSYNC_DIRECTIVES,
        sources: Mapping[str, str] | None = None,
    ) -> None:
        self.model = model
        self.known_directives = known_directives
        self.sources = sources or {}

    def validate(self) -> None:
        for entry in self.model.types:
            self._validate_type(entry)
        for scalar in self.model.scalars:
            self._check_directives(
                scalar.directives, ir.DirectiveLocation.SCALAR, scalar.name, None
            )
        for definition in self.model.directives:
            self._validate_definition(definition)
        for operation in self.model.operations:
            self._validate_operation(operation)
        logger.debug("Validated schema model '%s'", self.model.metadata.name)

    # =========================================================================
    # Types
    # =========================================================================

    def _validate_type(self, entry: ir.TypeEntry) -> None:
        self._check_directives(entry.directives, _TYPE_LOCATIONS[entry.kind], entry.name, None)

        if entry.kind == ir.TypeKind.ENUM:
            for value in entry.enum_values:
                self._check_directives(
                    value.directives, ir.DirectiveLocation.ENUM_VALUE, entry.name, value.name
                )
            return

        if entry.kind == ir.TypeKind.UNION:
            for member in entry.union_members:
                target = self._require_type(member, entry.name, None, "Union member")
                if target.kind != ir.TypeKind.OBJECT:
                    raise self._error(
                        InvalidTypeShapeError,
                        f"Union member '{member}' must be an object type, not {target.kind.value}",
                        entry.name,
                    )
            return

        is_input = entry.kind == ir.TypeKind.INPUT
        location = (
            ir.DirectiveLocation.INPUT_FIELD_DEFINITION
            if is_input
            else ir.DirectiveLocation.FIELD_DEFINITION
        )
        for field in entry.fields:
            self._check_reference(field.graphql_type, entry.name, field.name, input_position=is_input)
            self._check_directives(field.directives, location, entry.name, field.name)

        for interface_name in entry.interfaces:
            interface = self._require_type(interface_name, entry.name, None, "Interface")
            if interface.kind != ir.TypeKind.INTERFACE:
                raise self._error(
                    InvalidTypeShapeError,
                    f"'{interface_name}' is a {interface.kind.value} type, not an interface",
                    entry.name,
                )
            self._check_conformance(entry, interface)

    def _check_conformance(self, entry: ir.TypeEntry, interface: ir.TypeEntry) -> None:
        for expected in interface.fields:
            actual = entry.get_field(expected.name)
            if actual is None:
                raise self._error(
                    InvalidTypeShapeError,
                    f"Missing field required by interface '{interface.name}'",
                    entry.name,
                    expected.name,
                )
            if not accepts(expected.type_ref, actual.type_ref):
                raise self._error(
                    InvalidTypeShapeError,
                    f"Type '{actual.type_ref}' does not satisfy '{expected.type_ref}' "
                    f"required by interface '{interface.name}'",
                    entry.name,
                    expected.name,
                )

    # =========================================================================
    # Directive definitions and operations
    # =========================================================================

    def _validate_definition(self, definition: ir.DirectiveDefinition) -> None:
        owner = f"@{definition.name}"
        for argument in definition.arguments:
            self._check_reference(argument.type, owner, argument.name, input_position=True)

    def _validate_operation(self, operation: ir.OperationEntry) -> None:
        owner = operation.root_kind.value
        self._check_directives(
            operation.directives, ir.DirectiveLocation.FIELD_DEFINITION, owner, operation.name
        )
        for argument in operation.arguments:
            member = f"{operation.name}({argument.name})"
            self._check_reference(argument.graphql_type, owner, member, input_position=True)
            self._check_directives(
                argument.directives, ir.DirectiveLocation.ARGUMENT_DEFINITION, owner, member
            )
        self._check_reference(operation.return_type, owner, operation.name, input_position=False)

    # =========================================================================
    # References
    # =========================================================================

    def _require_type(
        self, name: str, owner: str, member: str | None, what: str
    ) -> ir.TypeEntry:
        target = self.model.get_type(name)
        if target is None:
            raise self._error(
                MissingReferenceError, f"{what} '{name}' is not declared", owner, member
            )
        return target

    def _check_reference(
        self, type_ref: str, owner: str, member: str | None, input_position: bool
    ) -> None:
        name = named_type(type_ref)
        if not self.model.resolves(name):
            raise self._error(
                MissingReferenceError, f"Type '{name}' is not declared", owner, member
            )

        target = self.model.get_type(name)
        if target is None:
            # Scalars fit anywhere
            return
        if input_position and target.kind not in _INPUT_KINDS:
            raise self._error(
                InvalidTypeShapeError,
                f"{target.kind.value.capitalize()} type '{name}' cannot be used as an input",
                owner,
                member,
            )
        if not input_position and target.kind == ir.TypeKind.INPUT:
            raise self._error(
                InvalidTypeShapeError,
                f"Input type '{name}' cannot be used as an output",
                owner,
                member,
            )

    # =========================================================================
    # Applied directives
    # =========================================================================

    def _lookup_directive(self, name: str) -> ir.DirectiveDefinition | None:
        return self.model.get_directive(name) or self.known_directives.get(name)

    def _check_directives(
        self,
        directives: tuple[ir.AppliedDirective, ...],
        location: ir.DirectiveLocation,
        owner: str,
        member: str | None,
    ) -> None:
        seen: set[str] = set()
        for applied in directives:
            definition = self._lookup_directive(applied.name)
            if definition is None:
                raise self._error(
                    MissingReferenceError,
                    f"Directive '@{applied.name}' is not defined",
                    owner,
                    member,
                )
            if not definition.allows(location):
                raise self._error(
                    InvalidDirectiveUsageError,
                    f"Directive '@{applied.name}' is not allowed on {location.value}",
                    owner,
                    member,
                )
            if applied.name in seen and not definition.repeatable:
                raise self._error(
                    InvalidDirectiveUsageError,
                    f"Directive '@{applied.name}' is not repeatable",
                    owner,
                    member,
                )
            seen.add(applied.name)
            self._check_arguments(applied, definition, owner, member)

    def _check_arguments(
        self,
        applied: ir.AppliedDirective,
        definition: ir.DirectiveDefinition,
        owner: str,
        member: str | None,
    ) -> None:
        supplied = applied.argument_map
        for argument_name in supplied:
            if definition.get_argument(argument_name) is None:
                raise self._error(
                    InvalidDirectiveUsageError,
                    f"Directive '@{applied.name}' has no argument '{argument_name}'",
                    owner,
                    member,
                )
        for argument in definition.arguments:
            if argument.required and argument.default_value is None and argument.name not in supplied:
                raise self._error(
                    InvalidDirectiveUsageError,
                    f"Directive '@{applied.name}' requires argument '{argument.name}'",
                    owner,
                    member,
                )

    def _error(
        self,
        error_type: type[SchemaCompilationError],
        message: str,
        owner: str,
        member: str | None = None,
    ) -> SchemaCompilationError:
        return make_error(error_type, message, owner, member, self.sources.get(owner))


def validate_model(
    model: ir.SchemaModel,
    known_directives: Mapping[str, ir.DirectiveDefinition] = ir.APPSYNC_DIRECTIVES,
    sources: Mapping[str, str] | None = None,
) -> None:
    """
    Validate a schema model.

    Args:
        model: Model to validate
        known_directives: Directives usable without a definition in the model
        sources: Optional declaration name -> source location, for messages

    Raises:
        MissingReferenceError: Undeclared type or directive
        InvalidTypeShapeError: Wrong kind in a union, interface or input position
        InvalidDirectiveUsageError: Directive misuse
    """
    ModelValidator(model, known_directives, sources).validate()
