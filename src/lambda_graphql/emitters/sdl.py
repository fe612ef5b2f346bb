"""
Schema emitter - serialize a SchemaModel to GraphQL SDL.

Output is a pure function of the model. Sections come out in a fixed order
(schema block, scalars, directive definitions, enums, interfaces, objects,
inputs, unions, root types) and everything inside a section keeps model
order, so regenerating an unchanged model gives byte-identical text.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping

from lambda_graphql.core import ir
from lambda_graphql.core.errors import MissingReferenceError, make_error
from lambda_graphql.core.typeref import named_type

logger = logging.getLogger(__name__)

INDENT = "  "

# Directive argument types rendered without quotes
_RAW_SCALARS = frozenset({"Int", "Float", "Boolean"})

_TYPE_SECTIONS = (
    ir.TypeKind.ENUM,
    ir.TypeKind.INTERFACE,
    ir.TypeKind.OBJECT,
    ir.TypeKind.INPUT,
    ir.TypeKind.UNION,
)


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _description(text: str | None, indent: str = "") -> list[str]:
    """Render a description as a GraphQL block string."""
    if not text:
        return []
    escaped = text.replace('"""', '\\"""')
    lines = [line.rstrip() for line in escaped.strip().splitlines()]
    if len(lines) == 1 and not lines[0].endswith('"'):
        return [f'{indent}"""{lines[0]}"""']
    body = [f"{indent}{line}" if line else "" for line in lines]
    return [f'{indent}"""', *body, f'{indent}"""']


class SchemaEmitter:
    """
    Emit SDL for a SchemaModel.

    Example:
        emitter = SchemaEmitter(model)
        sdl = emitter.emit()
    """

    def __init__(
        self,
        model: ir.SchemaModel,
        validate_references: bool = True,
        known_directives: Mapping[str, ir.DirectiveDefinition] = ir.APPSYNC_DIRECTIVES,
    ) -> None:
        """
        Initialize the emitter.

        Args:
            model: Model to serialize
            validate_references: Raise MissingReferenceError for unknown names
            known_directives: Directives the target predefines (never emitted)
        """
        self.model = model
        self.validate_references = validate_references
        self.known_directives = known_directives

    def emit(self) -> str:
        """
        Serialize the model.

        Returns:
            SDL text ending with a single newline (empty for an empty model)

        Raises:
            MissingReferenceError: A referenced type, interface or union
                member is not declared
        """
        if self.validate_references:
            self._check_references()

        blocks: list[list[str]] = []

        schema_block = self._schema_block()
        if schema_block:
            blocks.append(schema_block)

        for scalar in self._referenced_scalars():
            blocks.append(self._scalar_block(scalar))

        for definition in self.model.directives:
            blocks.append(self._directive_block(definition))

        for kind in _TYPE_SECTIONS:
            for entry in self.model.types_of_kind(kind):
                blocks.append(self._type_block(entry))

        for root_kind in self.model.root_kinds:
            blocks.append(self._root_block(root_kind))

        if not blocks:
            return ""
        logger.debug("Emitted %d SDL blocks for '%s'", len(blocks), self.model.metadata.name)
        return "\n\n".join("\n".join(block) for block in blocks) + "\n"

    # =========================================================================
    # References
    # =========================================================================

    def _type_references(self) -> Iterator[tuple[str, str, str | None]]:
        """Yield (referenced type, owner, member) in first-reference order."""
        for entry in self.model.types:
            for field in entry.fields:
                yield named_type(field.graphql_type), entry.name, field.name
        for operation in self.model.operations:
            owner = operation.root_kind.value
            for argument in operation.arguments:
                yield named_type(argument.graphql_type), owner, operation.name
            yield named_type(operation.return_type), owner, operation.name
        for definition in self.model.directives:
            for argument in definition.arguments:
                yield named_type(argument.type), f"@{definition.name}", argument.name

    def _check_references(self) -> None:
        for name, owner, member in self._type_references():
            if not self.model.resolves(name):
                raise make_error(
                    MissingReferenceError, f"Type '{name}' is not declared", owner, member
                )
        for entry in self.model.types:
            for name in (*entry.interfaces, *entry.union_members):
                if self.model.get_type(name) is None:
                    raise make_error(
                        MissingReferenceError, f"Type '{name}' is not declared", entry.name
                    )

    def _referenced_scalars(self) -> list[ir.ScalarEntry]:
        """Custom scalars, referenced ones first in first-reference order."""
        ordered: dict[str, ir.ScalarEntry] = {}
        for name, _, _ in self._type_references():
            if name in ordered or name in self.model.builtin_scalars:
                continue
            scalar = self.model.get_scalar(name)
            if scalar is not None:
                ordered[name] = scalar
        for scalar in self.model.scalars:
            if scalar.name not in self.model.builtin_scalars:
                ordered.setdefault(scalar.name, scalar)
        return list(ordered.values())

    # =========================================================================
    # Directive applications
    # =========================================================================

    def _lookup_directive(self, name: str) -> ir.DirectiveDefinition | None:
        return self.model.get_directive(name) or self.known_directives.get(name)

    def _argument_value(self, directive: str, argument: str, value: str) -> str:
        definition = self._lookup_directive(directive)
        declared = definition.get_argument(argument) if definition else None
        if declared is None:
            return _quote(value)

        base = named_type(declared.type)
        target = self.model.get_type(base)
        raw = base in _RAW_SCALARS or (target is not None and target.kind == ir.TypeKind.ENUM)

        if declared.type.startswith("["):
            items = [item.strip() for item in value.split(",") if item.strip()]
            rendered = items if raw else [_quote(item) for item in items]
            return f"[{', '.join(rendered)}]"
        return value if raw else _quote(value)

    def _applied(self, directive: ir.AppliedDirective) -> str:
        if not directive.arguments:
            return f"@{directive.name}"
        arguments = ", ".join(
            f"{name}: {self._argument_value(directive.name, name, value)}"
            for name, value in directive.arguments
        )
        return f"@{directive.name}({arguments})"

    def _directives(
        self,
        directives: tuple[ir.AppliedDirective, ...],
        deprecated: bool = False,
        deprecation_reason: str | None = None,
    ) -> str:
        rendered = [self._applied(d) for d in directives]
        if deprecated and not any(d.name == "deprecated" for d in directives):
            if deprecation_reason:
                rendered.append(f"@deprecated(reason: {_quote(deprecation_reason)})")
            else:
                rendered.append("@deprecated")
        return "".join(f" {text}" for text in rendered)

    # =========================================================================
    # Blocks
    # =========================================================================

    def _schema_block(self) -> list[str]:
        root_kinds = self.model.root_kinds
        if not root_kinds:
            return []
        lines = _description(self.model.metadata.description)
        lines.append("schema {")
        lines.extend(f"{INDENT}{kind.schema_key}: {kind.value}" for kind in root_kinds)
        lines.append("}")
        return lines

    def _scalar_block(self, scalar: ir.ScalarEntry) -> list[str]:
        lines = _description(scalar.description)
        lines.append(f"scalar {scalar.name}{self._directives(scalar.directives)}")
        return lines

    def _directive_block(self, definition: ir.DirectiveDefinition) -> list[str]:
        lines = _description(definition.description)
        arguments = [
            (
                None,
                argument.name,
                argument.type_ref,
                argument.default_value,
                "",
            )
            for argument in definition.arguments
        ]
        head = f"directive @{definition.name}"
        tail = " repeatable" if definition.repeatable else ""
        locations = " | ".join(loc.value for loc in ir.sorted_locations(definition.locations))
        lines.extend(self._with_arguments(head, arguments, f"{tail} on {locations}", ""))
        return lines

    def _type_block(self, entry: ir.TypeEntry) -> list[str]:
        lines = _description(entry.description)
        directives = self._directives(entry.directives)

        if entry.kind == ir.TypeKind.UNION:
            members = " | ".join(entry.union_members)
            lines.append(f"union {entry.name}{directives} = {members}")
            return lines

        if entry.kind == ir.TypeKind.ENUM:
            lines.append(f"enum {entry.name}{directives} {{")
            for value in entry.enum_values:
                lines.extend(_description(value.description, INDENT))
                suffix = self._directives(
                    value.directives, value.deprecated, value.deprecation_reason
                )
                lines.append(f"{INDENT}{value.name}{suffix}")
            lines.append("}")
            return lines

        keyword = {
            ir.TypeKind.OBJECT: "type",
            ir.TypeKind.INTERFACE: "interface",
            ir.TypeKind.INPUT: "input",
        }[entry.kind]
        implements = f" implements {' & '.join(entry.interfaces)}" if entry.interfaces else ""
        lines.append(f"{keyword} {entry.name}{implements}{directives} {{")
        for field in entry.fields:
            lines.extend(_description(field.description, INDENT))
            lines.append(f"{INDENT}{field.name}: {field.type_ref}{self._field_suffix(field)}")
        lines.append("}")
        return lines

    def _root_block(self, root_kind: ir.RootKind) -> list[str]:
        lines = [f"type {root_kind.value} {{"]
        for operation in self.model.operations_for(root_kind):
            lines.extend(_description(operation.description, INDENT))
            arguments = [
                (
                    argument.description,
                    argument.name,
                    argument.type_ref,
                    argument.default_value,
                    self._directives(
                        argument.directives, argument.deprecated, argument.deprecation_reason
                    ),
                )
                for argument in operation.arguments
            ]
            tail = f": {operation.return_type_ref}{self._directives(operation.directives)}"
            lines.extend(self._with_arguments(operation.name, arguments, tail, INDENT))
        lines.append("}")
        return lines

    def _field_suffix(self, field: ir.FieldEntry) -> str:
        default = f" = {field.default_value}" if field.default_value is not None else ""
        return default + self._directives(
            field.directives, field.deprecated, field.deprecation_reason
        )

    def _with_arguments(
        self,
        head: str,
        arguments: list[tuple[str | None, str, str, str | None, str]],
        tail: str,
        indent: str,
    ) -> list[str]:
        """
        Render ``head(args)tail``.

        Arguments go on one line unless any of them has a description, in
        which case each argument gets its own line.
        """
        if not arguments:
            return [f"{indent}{head}{tail}"]

        def render(name: str, type_ref: str, default: str | None, directives: str) -> str:
            default_text = f" = {default}" if default is not None else ""
            return f"{name}: {type_ref}{default_text}{directives}"

        if not any(description for description, *_ in arguments):
            inline = ", ".join(render(*rest) for _, *rest in arguments)
            return [f"{indent}{head}({inline}){tail}"]

        inner = indent + INDENT
        lines = [f"{indent}{head}("]
        for description, *rest in arguments:
            lines.extend(_description(description, inner))
            lines.append(f"{inner}{render(*rest)}")
        lines.append(f"{indent}){tail}")
        return lines


def generate_sdl(model: ir.SchemaModel, validate_references: bool = True) -> str:
    """
    Generate SDL text for a schema model.

    Args:
        model: Schema model to serialize
        validate_references: Raise on references to undeclared names

    Returns:
        SDL document
    """
    return SchemaEmitter(model, validate_references=validate_references).emit()
