"""Annotated declarations for a small shop API, collected by the reflection tests."""

from datetime import datetime
from enum import Enum
from typing import Annotated
from uuid import UUID

from lambda_graphql.discovery import (
    AuthMode,
    GraphQLField,
    GraphQLIgnore,
    GraphQLNonNull,
    apply_directive,
    auth_directive,
    declare_directive,
    graphql_enum_value,
    graphql_input,
    graphql_interface,
    graphql_mutation,
    graphql_query,
    graphql_resolver,
    graphql_scalar,
    graphql_schema,
    graphql_subscription,
    graphql_type,
    graphql_union,
)

schema = graphql_schema("ShopSchema", description="Shop catalog API", version="1.2.0")

cached = declare_directive(
    "cached",
    locations=["FIELD_DEFINITION"],
    arguments="ttl: Int!",
    description="Cache the result for ttl seconds",
)


@graphql_scalar(description="Decimal amount as a string")
class Money(str):
    pass


@graphql_type(
    description="Order lifecycle",
    values={"SHIPPED": graphql_enum_value(deprecation_reason="Use DELIVERED")},
)
class OrderStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"


@graphql_interface(description="Anything with an identifier")
class Node:
    id: Annotated[UUID, GraphQLNonNull]


@graphql_type(description="A product in the catalog")
class Product(Node):
    name: str
    price: Annotated[float, GraphQLField(description="Unit price")]
    list_price: Money | None
    tags: list[str]
    status: OrderStatus
    created_at: datetime
    legacy_code: Annotated[str | None, GraphQLField(deprecation_reason="Use sku")]
    internal_notes: Annotated[str, GraphQLIgnore]


@graphql_type()
class Category:
    slug: str
    title: str | None


@graphql_input(description="Fields for a new product")
class ProductInput:
    name: str
    price: float
    quantity: int = 1


@graphql_union("SearchResult", "Product", "Category", description="Anything search can return")
class SearchResult:
    pass


@graphql_query(description="Fetch one product")
@graphql_resolver("ProductsLambda")
@apply_directive("cached", ttl=60)
def get_product(id: UUID) -> Product | None:
    raise NotImplementedError


@graphql_query(return_type="[SearchResult!]!")
@graphql_resolver(functions=["authorize", "searchIndex"])
def search(text: str, limit: int = 10) -> list:
    raise NotImplementedError


@graphql_mutation()
@graphql_resolver(
    "ProductsLambda",
    request_mapping="createProduct.req.vtl",
    response_mapping="createProduct.res.vtl",
)
@auth_directive(AuthMode.USER_POOLS, cognito_groups=["admin", "editor"])
def create_product(input: ProductInput, context: object = None) -> Product:
    raise NotImplementedError


@graphql_subscription()
@apply_directive("aws_subscribe", mutations=["createProduct"])
def on_product_created() -> Product | None:
    raise NotImplementedError
