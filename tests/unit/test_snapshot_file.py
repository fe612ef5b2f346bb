"""Tests for JSON/YAML declaration snapshot files."""

from __future__ import annotations

import json

import pytest

from lambda_graphql.core import ir
from lambda_graphql.core.errors import SnapshotFormatError
from lambda_graphql.core.pipeline import compile_schema
from lambda_graphql.discovery import SnapshotFileSource, dump_snapshot, load_snapshot


class TestLoadSnapshot:
    """Snapshots written by out-of-process extractors."""

    def test_catalog_yaml(self, fixtures_dir):
        snapshot = load_snapshot(fixtures_dir / "catalog_declarations.yaml")
        assert snapshot.metadata == ir.SchemaMetadata(name="CatalogSchema", version="2.0.0")
        assert [type(d) for d in snapshot.declarations] == [
            ir.TypeDeclaration,
            ir.OperationDeclaration,
        ]
        assert snapshot.declarations[0].location == "Catalog/Product.cs:8"

    def test_catalog_compiles(self, fixtures_dir):
        result = compile_schema(SnapshotFileSource(fixtures_dir / "catalog_declarations.yaml"))
        assert (
            "type Product {\n"
            "  id: String!\n"
            "  displayName: String!\n"
            "  price: Float!\n"
            "  tags: [String!]\n"
            "}"
        ) in result.sdl
        assert "  getProduct(id: String!): Product\n" in result.sdl
        assert result.manifest["schemaName"] == "CatalogSchema"
        assert result.manifest["version"] == "2.0.0"

    def test_json_snapshot(self, tmp_path):
        path = tmp_path / "declarations.json"
        path.write_text(
            json.dumps(
                {
                    "declarations": [
                        {"declaration": "scalar", "identifier": "Money"},
                        {
                            "declaration": "directive",
                            "name": "cached",
                            "locations": ["FIELD_DEFINITION"],
                        },
                    ]
                }
            ),
            encoding="utf-8",
        )
        snapshot = load_snapshot(path)
        assert isinstance(snapshot.declarations[0], ir.ScalarDeclaration)
        assert isinstance(snapshot.declarations[1], ir.DirectiveDeclaration)
        assert snapshot.metadata is None

    def test_boolean_directive_argument(self, tmp_path):
        path = tmp_path / "declarations.yaml"
        path.write_text(
            """
declarations:
  - declaration: directive
    name: cached
    arguments:
      - {name: enabled, type: Boolean}
  - declaration: type
    identifier: Product
    fields:
      - identifier: id
        type_name: String!
        directives:
          - name: cached
            arguments: {enabled: true}
""",
            encoding="utf-8",
        )
        sdl = compile_schema(SnapshotFileSource(path)).sdl
        assert "  id: String! @cached(enabled: true)\n" in sdl

    def test_dotnet_nullable_value_type(self, tmp_path):
        path = tmp_path / "declarations.yaml"
        path.write_text(
            """
declarations:
  - declaration: type
    identifier: Stock
    fields:
      - identifier: Count
        native_type:
          name: Nullable
          namespace: System
          is_value_type: true
          generic_definition: System.Nullable<T>
          type_arguments:
            - {name: Int32, namespace: System, is_value_type: true}
""",
            encoding="utf-8",
        )
        sdl = compile_schema(SnapshotFileSource(path)).sdl
        assert "type Stock {\n  count: Int\n}" in sdl

    def test_empty_file_is_empty_snapshot(self, tmp_path):
        path = tmp_path / "declarations.yaml"
        path.write_text("", encoding="utf-8")
        assert load_snapshot(path).declarations == ()


class TestDumpSnapshot:
    def test_dump_then_load(self, tmp_path, fixtures_dir):
        original = load_snapshot(fixtures_dir / "catalog_declarations.yaml")
        dump_snapshot(original, tmp_path / "copy.json")
        assert load_snapshot(tmp_path / "copy.json") == original

    def test_declaration_tag_kept(self, tmp_path, product_snapshot):
        path = tmp_path / "nested" / "declarations.yaml"
        dump_snapshot(product_snapshot, path)
        text = path.read_text(encoding="utf-8")
        assert "declaration: type" in text
        assert "declaration: operation" in text


class TestSnapshotErrors:
    def test_unsupported_suffix(self, tmp_path):
        with pytest.raises(SnapshotFormatError, match="expected .json, .yaml or .yml"):
            load_snapshot(tmp_path / "declarations.toml")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SnapshotFormatError, match="not found"):
            load_snapshot(tmp_path / "missing.yaml")

    def test_unparsable_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("declarations: [unclosed\n", encoding="utf-8")
        with pytest.raises(SnapshotFormatError, match="Could not parse"):
            load_snapshot(path)

    def test_unknown_declaration_tag(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "declarations:\n  - declaration: widget\n    identifier: Thing\n", encoding="utf-8"
        )
        with pytest.raises(SnapshotFormatError, match="Invalid snapshot"):
            load_snapshot(path)
