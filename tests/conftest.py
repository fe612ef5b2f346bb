"""Shared pytest fixtures for lambda-graphql tests."""

from pathlib import Path

import pytest

from lambda_graphql.core import ir
from lambda_graphql.discovery import ReflectionDeclarationSource

FIXTURES_DIR = Path(__file__).parent / "fixtures"

# .NET-style descriptors, as an out-of-process extractor would write them
SYSTEM_STRING = ir.NativeType.named("String", "System")
SYSTEM_DECIMAL = ir.NativeType.value("Decimal", "System")


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def product_type() -> ir.TypeDeclaration:
    """Product with required Id and Name (aliased displayName) and a decimal Price."""
    return ir.TypeDeclaration(
        identifier="Product",
        fields=(
            ir.FieldDeclaration(identifier="Id", native_type=SYSTEM_STRING),
            ir.FieldDeclaration(identifier="Name", name="displayName", native_type=SYSTEM_STRING),
            ir.FieldDeclaration(identifier="Price", native_type=SYSTEM_DECIMAL),
        ),
    )


@pytest.fixture
def get_product() -> ir.OperationDeclaration:
    """getProduct(id: String!): Product bound to a unit resolver."""
    return ir.OperationDeclaration(
        identifier="GetProduct",
        root_kind=ir.RootKind.QUERY,
        arguments=(ir.FieldDeclaration(identifier="id", native_type=SYSTEM_STRING),),
        return_type=ir.NativeType.named("Product", "Shop", nullability=ir.Nullability.NULLABLE),
        resolver=ir.ResolverConfig(data_source="ProductsLambda"),
    )


@pytest.fixture
def product_snapshot(
    product_type: ir.TypeDeclaration, get_product: ir.OperationDeclaration
) -> ir.DeclarationSnapshot:
    """Snapshot with the Product type and the getProduct query."""
    return ir.DeclarationSnapshot(declarations=(product_type, get_product))


@pytest.fixture
def shop_source(fixtures_dir: Path) -> ReflectionDeclarationSource:
    """Reflection source over tests/fixtures/shop_app.py."""
    return ReflectionDeclarationSource(["shop_app"], search_paths=[fixtures_dir])
