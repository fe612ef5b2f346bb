"""Allow ``python -m lambda_graphql``."""

from lambda_graphql.cli import main

main()
