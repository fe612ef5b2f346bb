"""Tests for native type -> GraphQL type mapping."""

from __future__ import annotations

import pytest

from lambda_graphql.core import ir
from lambda_graphql.core.errors import MappingError
from lambda_graphql.core.scalars import DEFAULT_SCALAR_TABLES, ScalarTables
from lambda_graphql.core.type_mapper import TypeMapper

NOT_NULL = ir.Nullability.NOT_NULLABLE
NULLABLE = ir.Nullability.NULLABLE


def py_str(nullability: ir.Nullability = NOT_NULL) -> ir.NativeType:
    return ir.NativeType.named("str", "builtins", nullability=nullability)


@pytest.fixture
def mapper() -> TypeMapper:
    return TypeMapper()


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------


class TestScalarMapping:
    """Built-in and semantic scalar lookups."""

    @pytest.mark.parametrize(
        "native, expected",
        [
            (ir.NativeType.named("str", "builtins"), "String"),
            (ir.NativeType.value("int", "builtins"), "Int"),
            (ir.NativeType.value("float", "builtins"), "Float"),
            (ir.NativeType.value("bool", "builtins"), "Boolean"),
            (ir.NativeType.value("Decimal", "decimal"), "Float"),
            (ir.NativeType.value("UUID", "uuid"), "ID"),
            (ir.NativeType.value("datetime", "datetime"), "AWSDateTime"),
            (ir.NativeType.value("date", "datetime"), "AWSDate"),
            (ir.NativeType.value("time", "datetime"), "AWSTime"),
            (ir.NativeType.named("String", "System"), "String"),
            (ir.NativeType.value("Int64", "System"), "Int"),
            (ir.NativeType.value("Double", "System"), "Float"),
            (ir.NativeType.value("Guid", "System"), "ID"),
            (ir.NativeType.value("DateTimeOffset", "System"), "AWSDateTime"),
            (ir.NativeType.named("IPv4Address", "ipaddress"), "AWSIPAddress"),
            (ir.NativeType.named("Uri", "System"), "AWSURL"),
            (ir.NativeType.named("Any", "typing"), "AWSJSON"),
        ],
    )
    def test_documented_scalars(self, mapper, native, expected):
        assert mapper.map_type(native) == expected

    def test_simple_name_fallback(self, mapper):
        # Unknown namespace, known simple name
        assert mapper.map_type(ir.NativeType.named("string", "Vendor.Types")) == "String"

    def test_user_type_maps_to_own_name(self, mapper):
        native = ir.NativeType.named("Product", "shop.models")
        assert mapper.map_type(native) == "Product"

    def test_override_checked_before_builtin(self):
        tables = DEFAULT_SCALAR_TABLES.extend(overrides={"builtins.str": "AWSEmail"})
        mapper = TypeMapper(tables)
        assert mapper.map_type(py_str()) == "AWSEmail"

    def test_default_tables_are_read_only(self):
        tables = ScalarTables()
        assert tables.builtin["builtins.str"] == "String"
        with pytest.raises(TypeError):
            tables.builtin["builtins.str"] = "ID"

    def test_extended_tables_leave_defaults_untouched(self):
        DEFAULT_SCALAR_TABLES.extend(overrides={"builtins.str": "AWSEmail"})
        assert TypeMapper().map_type(py_str()) == "String"

    def test_produces_custom_scalar(self):
        tables = DEFAULT_SCALAR_TABLES.extend(overrides={"shop.money.Money": "Money"})
        mapper = TypeMapper(tables)
        assert mapper.map_type(ir.NativeType.named("Money", "shop.money")) == "Money"
        assert mapper.produces_custom_scalar("Money")
        assert not mapper.produces_custom_scalar("Product")


# ---------------------------------------------------------------------------
# Nullability
# ---------------------------------------------------------------------------


class TestNullability:
    """isNonNull is false only for wrapped value types and nullable references."""

    def test_value_type_is_non_null(self, mapper):
        assert mapper.is_non_null(ir.NativeType.value("int", "builtins"))

    def test_wrapped_value_type_is_nullable(self, mapper):
        wrapped = ir.NativeType.nullable_of(ir.NativeType.value("int", "builtins"))
        assert mapper.map_type(wrapped) == "Int"
        assert not mapper.is_non_null(wrapped)

    @pytest.mark.parametrize("definition", ["System.Nullable", "System.Nullable<T>", "Nullable"])
    def test_dotnet_nullable_wrapper(self, mapper, definition):
        wrapped = ir.NativeType(
            name="Nullable",
            namespace="System",
            is_value_type=True,
            generic_definition=definition,
            type_arguments=(ir.NativeType.value("Int32", "System"),),
        )
        assert mapper.resolve(wrapped).type_ref == "Int"

    def test_annotated_reference_types(self, mapper):
        assert mapper.is_non_null(py_str(NOT_NULL))
        assert not mapper.is_non_null(py_str(NULLABLE))

    def test_unknown_annotation_counts_as_nullable(self, mapper):
        assert not mapper.is_non_null(py_str(ir.Nullability.UNKNOWN))

    def test_resolve_returns_type_ref(self, mapper):
        assert mapper.resolve(py_str()).type_ref == "String!"
        assert mapper.resolve(py_str(NULLABLE)).type_ref == "String"


# ---------------------------------------------------------------------------
# Lists, dictionaries, arrays
# ---------------------------------------------------------------------------


class TestCollections:
    """List wrapping composes list and element nullability independently."""

    @pytest.mark.parametrize(
        "list_nullability, element_nullability, expected",
        [
            (NULLABLE, NULLABLE, "[String]"),
            (NULLABLE, NOT_NULL, "[String!]"),
            (NOT_NULL, NULLABLE, "[String]!"),
            (NOT_NULL, NOT_NULL, "[String!]!"),
        ],
    )
    def test_four_list_combinations(
        self, mapper, list_nullability, element_nullability, expected
    ):
        native = ir.NativeType.generic(
            "list", "builtins", [py_str(element_nullability)], nullability=list_nullability
        )
        assert mapper.resolve(native).type_ref == expected

    def test_nested_lists(self, mapper):
        inner = ir.NativeType.generic("list", "builtins", [ir.NativeType.value("int", "builtins")])
        outer = ir.NativeType.generic("list", "builtins", [inner])
        assert mapper.resolve(outer).type_ref == "[[Int!]!]!"

    def test_generic_definition_with_arity_suffix(self, mapper):
        native = ir.NativeType(
            name="List",
            namespace="System.Collections.Generic",
            generic_definition="System.Collections.Generic.List<T>",
            type_arguments=(ir.NativeType.named("Product", "Shop"),),
            nullability=NULLABLE,
        )
        assert mapper.resolve(native).type_ref == "[Product!]"

    def test_native_array(self, mapper):
        native = ir.NativeType.array_of(ir.NativeType.value("Int32", "System"))
        assert mapper.map_type(native) == "[Int!]"

    def test_string_keyed_dictionary_is_json(self, mapper):
        native = ir.NativeType.generic(
            "dict", "builtins", [py_str(), ir.NativeType.named("Any", "typing")]
        )
        assert mapper.map_type(native) == "AWSJSON"

    def test_non_string_keys_rejected(self, mapper):
        native = ir.NativeType.generic(
            "dict", "builtins", [ir.NativeType.value("int", "builtins"), py_str()]
        )
        with pytest.raises(MappingError, match="string keys"):
            mapper.map_type(native)

    def test_sequence_without_element_rejected(self, mapper):
        with pytest.raises(MappingError, match="no element type"):
            mapper.map_type(ir.NativeType.generic("list", "builtins", []))

    def test_void_rejected_as_field_type(self, mapper):
        with pytest.raises(MappingError):
            mapper.map_type(ir.NativeType.void())


# ---------------------------------------------------------------------------
# Return types
# ---------------------------------------------------------------------------


class TestReturnTypes:
    """Operation return types unwrap awaitables; no value maps to Boolean!."""

    def test_no_return_type(self, mapper):
        assert mapper.map_return_type(None).type_ref == "Boolean!"
        assert mapper.map_return_type(ir.NativeType.void()).type_ref == "Boolean!"

    def test_task_is_unwrapped(self, mapper):
        product = ir.NativeType.named("Product", "Shop", nullability=NULLABLE)
        task = ir.NativeType(
            name="Task",
            namespace="System.Threading.Tasks",
            generic_definition="System.Threading.Tasks.Task<T>",
            type_arguments=(product,),
        )
        assert mapper.map_return_type(task).type_ref == "Product"

    def test_bare_task_is_void(self, mapper):
        task = ir.NativeType.named("Task", "System.Threading.Tasks")
        assert mapper.map_return_type(task).type_ref == "Boolean!"

    def test_coroutine_uses_last_argument(self, mapper):
        any_type = ir.NativeType.named("Any", "typing")
        coroutine = ir.NativeType.generic(
            "Coroutine", "collections.abc", [any_type, any_type, py_str()]
        )
        assert mapper.map_return_type(coroutine).type_ref == "String!"
