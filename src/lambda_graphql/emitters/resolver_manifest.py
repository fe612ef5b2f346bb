"""
Resolver manifest builder.

Produces the document infrastructure tooling uses to wire AppSync resolvers:

    {
      "schemaName": "ShopSchema",
      "version": "1.0.0",
      "resolvers": [
        {"operation": "getProduct", "kind": "unit", "dataSource": "ProductsLambda"}
      ]
    }

Only operations with a resolver binding get an entry. Entries are matched to
the SDL by operation name, never by position.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from lambda_graphql.core import ir

logger = logging.getLogger(__name__)

MANIFEST_FORMATS = ("json", "yaml")


class ResolverManifestBuilder:
    """
    Build the resolver manifest for a SchemaModel.

    Example:
        manifest = ResolverManifestBuilder(model).build()
        entry = find_entry(manifest, "getProduct")
    """

    def __init__(self, model: ir.SchemaModel, include_type_name: bool = False) -> None:
        """
        Initialize the builder.

        Args:
            model: Model to read operations from
            include_type_name: Add the root type (``Query``...) to each entry
        """
        self.model = model
        self.include_type_name = include_type_name

    def build(self) -> dict[str, Any]:
        manifest: dict[str, Any] = {"schemaName": self.model.metadata.name}
        if self.model.metadata.version:
            manifest["version"] = self.model.metadata.version

        resolvers = [
            self._entry(operation)
            for operation in self.model.operations
            if operation.resolver is not None
        ]
        manifest["resolvers"] = resolvers

        skipped = len(self.model.operations) - len(resolvers)
        if skipped:
            logger.debug("%d operation(s) without a resolver left out of the manifest", skipped)
        return manifest

    def _entry(self, operation: ir.OperationEntry) -> dict[str, Any]:
        binding = operation.resolver
        assert binding is not None

        entry: dict[str, Any] = {"operation": operation.name}
        if self.include_type_name:
            entry["typeName"] = operation.root_kind.value
        entry["kind"] = binding.kind.value

        if binding.kind == ir.ResolverKind.UNIT:
            entry["dataSource"] = binding.data_source
        else:
            entry["functions"] = list(binding.function_chain)

        if binding.request_mapping_ref is not None:
            entry["requestMappingRef"] = binding.request_mapping_ref
        if binding.response_mapping_ref is not None:
            entry["responseMappingRef"] = binding.response_mapping_ref
        return entry


def generate_manifest(model: ir.SchemaModel, include_type_name: bool = False) -> dict[str, Any]:
    """
    Generate the resolver manifest for a model.

    Args:
        model: Schema model
        include_type_name: Add ``typeName`` to each entry

    Returns:
        Manifest as a plain dict, keys in output order
    """
    return ResolverManifestBuilder(model, include_type_name=include_type_name).build()


def find_entry(manifest: dict[str, Any], operation: str) -> dict[str, Any] | None:
    """Find the entry for an operation by exact, case-sensitive name."""
    for entry in manifest.get("resolvers", []):
        if entry.get("operation") == operation:
            return entry
    return None


def manifest_to_json(manifest: dict[str, Any]) -> str:
    """Convert a manifest dict to JSON text."""
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"


def manifest_to_yaml(manifest: dict[str, Any]) -> str:
    """Convert a manifest dict to YAML text."""
    return yaml.dump(manifest, default_flow_style=False, sort_keys=False, allow_unicode=True)


def serialize_manifest(manifest: dict[str, Any], fmt: str = "json") -> str:
    """Serialize a manifest in ``json`` or ``yaml`` format."""
    if fmt == "json":
        return manifest_to_json(manifest)
    if fmt == "yaml":
        return manifest_to_yaml(manifest)
    raise ValueError(f"Unknown manifest format '{fmt}', expected one of {MANIFEST_FORMATS}")
