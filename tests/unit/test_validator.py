"""Tests for cross-declaration validation of directive usage and references."""

from __future__ import annotations

import pytest

from lambda_graphql.core import ir
from lambda_graphql.core.errors import InvalidDirectiveUsageError, MissingReferenceError
from lambda_graphql.core.validator import ModelValidator, validate_model

CACHED = ir.DirectiveDefinition(
    name="cached",
    locations=frozenset({ir.DirectiveLocation.FIELD_DEFINITION}),
    arguments=(
        ir.DirectiveArgument(name="ttl", type="Int", required=True),
        ir.DirectiveArgument(name="scope", type="String", required=True, default_value='"public"'),
    ),
)

TAG = ir.DirectiveDefinition(
    name="tag",
    locations=frozenset({ir.DirectiveLocation.OBJECT, ir.DirectiveLocation.FIELD_DEFINITION}),
    arguments=(ir.DirectiveArgument(name="name", type="String", required=True),),
    repeatable=True,
)


def product_model(
    type_directives: tuple[ir.AppliedDirective, ...] = (),
    field_directives: tuple[ir.AppliedDirective, ...] = (),
    definitions: tuple[ir.DirectiveDefinition, ...] = (CACHED, TAG),
) -> ir.SchemaModel:
    return ir.SchemaModel(
        types=(
            ir.TypeEntry(
                name="Product",
                kind=ir.TypeKind.OBJECT,
                fields=(
                    ir.FieldEntry(
                        name="name", graphql_type="String", directives=field_directives
                    ),
                ),
                directives=type_directives,
            ),
        ),
        directives=definitions,
    )


class TestAppliedDirectives:
    """Applied directives must be defined, allowed and given valid arguments."""

    def test_valid_usage(self):
        validate_model(
            product_model(
                type_directives=(ir.AppliedDirective.of("aws_iam"),),
                field_directives=(ir.AppliedDirective.of("cached", ttl=30),),
            )
        )

    def test_undefined_directive(self):
        model = product_model(field_directives=(ir.AppliedDirective.of("audited"),))
        with pytest.raises(MissingReferenceError, match="@audited"):
            validate_model(model)

    def test_wrong_location(self):
        model = product_model(type_directives=(ir.AppliedDirective.of("cached", ttl=30),))
        with pytest.raises(InvalidDirectiveUsageError, match="not allowed on OBJECT"):
            validate_model(model)

    def test_appsync_auth_directive_not_on_enum_values(self):
        model = ir.SchemaModel(
            types=(
                ir.TypeEntry(
                    name="Color",
                    kind=ir.TypeKind.ENUM,
                    enum_values=(
                        ir.EnumValue(name="RED", directives=(ir.AppliedDirective.of("aws_iam"),)),
                    ),
                ),
            )
        )
        with pytest.raises(InvalidDirectiveUsageError, match="ENUM_VALUE") as exc_info:
            validate_model(model)
        assert exc_info.value.context.member == "RED"

    def test_missing_required_argument(self):
        model = product_model(field_directives=(ir.AppliedDirective.of("cached"),))
        with pytest.raises(InvalidDirectiveUsageError, match="requires argument 'ttl'"):
            validate_model(model)

    def test_required_argument_with_default_may_be_omitted(self):
        # scope is required but has a default
        validate_model(product_model(field_directives=(ir.AppliedDirective.of("cached", ttl=5),)))

    def test_unknown_argument(self):
        model = product_model(
            field_directives=(ir.AppliedDirective.of("cached", ttl=5, region="eu"),)
        )
        with pytest.raises(InvalidDirectiveUsageError, match="no argument 'region'"):
            validate_model(model)

    def test_non_repeatable_directive_repeated(self):
        model = product_model(
            field_directives=(
                ir.AppliedDirective.of("cached", ttl=5),
                ir.AppliedDirective.of("cached", ttl=10),
            )
        )
        with pytest.raises(InvalidDirectiveUsageError, match="not repeatable"):
            validate_model(model)

    def test_repeatable_directive_repeated(self):
        validate_model(
            product_model(
                type_directives=(
                    ir.AppliedDirective.of("tag", name="catalog"),
                    ir.AppliedDirective.of("tag", name="public"),
                )
            )
        )

    def test_custom_known_directives(self):
        model = product_model(field_directives=(ir.AppliedDirective.of("aws_iam"),))
        with pytest.raises(MissingReferenceError):
            ModelValidator(model, known_directives={}).validate()


class TestReferences:
    def test_undeclared_field_type(self):
        model = ir.SchemaModel(
            types=(
                ir.TypeEntry(
                    name="Order",
                    kind=ir.TypeKind.OBJECT,
                    fields=(ir.FieldEntry(name="customer", graphql_type="[Customer!]"),),
                ),
            )
        )
        with pytest.raises(MissingReferenceError, match="Customer") as exc_info:
            validate_model(model)
        assert exc_info.value.context.declaration == "Order"
        assert exc_info.value.context.member == "customer"

    def test_source_location_in_message(self):
        model = ir.SchemaModel(
            types=(
                ir.TypeEntry(
                    name="Order",
                    kind=ir.TypeKind.OBJECT,
                    fields=(ir.FieldEntry(name="customer", graphql_type="Customer"),),
                ),
            )
        )
        with pytest.raises(MissingReferenceError, match="shop/orders.py:4"):
            validate_model(model, sources={"Order": "shop/orders.py:4"})

    def test_operation_argument_directive_location(self):
        operation = ir.OperationEntry(
            name="getProduct",
            root_kind=ir.RootKind.QUERY,
            arguments=(
                ir.FieldEntry(
                    name="id",
                    graphql_type="ID",
                    nullable=False,
                    directives=(ir.AppliedDirective.of("aws_iam"),),
                ),
            ),
            return_type="String",
        )
        with pytest.raises(InvalidDirectiveUsageError, match="ARGUMENT_DEFINITION") as exc_info:
            validate_model(ir.SchemaModel(operations=(operation,)))
        assert exc_info.value.context.member == "getProduct(id)"
