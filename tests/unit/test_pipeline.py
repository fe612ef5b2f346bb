"""Tests for the compilation pipeline and artifact writing."""

from __future__ import annotations

import json
import os

import pytest

from lambda_graphql.core import ir, pipeline
from lambda_graphql.core.builder import NamingPolicy
from lambda_graphql.core.errors import DuplicateDeclarationError
from lambda_graphql.core.pipeline import (
    FINGERPRINT_FILENAME,
    CompileOptions,
    build_fingerprint,
    compile_schema,
    is_up_to_date,
    read_fingerprint,
    write_artifacts,
)
from lambda_graphql.discovery import StaticDeclarationSource


def widget(identifier: str = "Widget") -> ir.TypeDeclaration:
    return ir.TypeDeclaration(
        identifier=identifier,
        fields=(
            ir.FieldDeclaration(
                identifier="label", native_type=ir.NativeType.named("str", "builtins")
            ),
        ),
    )


# ---------------------------------------------------------------------------
# compile_schema
# ---------------------------------------------------------------------------


class TestCompileSchema:
    """compile_schema returns both artifacts or raises."""

    def test_from_snapshot(self, product_snapshot):
        result = compile_schema(product_snapshot)
        assert "type Product {" in result.sdl
        assert "getProduct(id: String!): Product" in result.sdl
        assert result.manifest["resolvers"][0]["operation"] == "getProduct"
        assert json.loads(result.manifest_text) == result.manifest
        assert result.manifest_format == "json"

    def test_from_declaration_source(self, product_type, get_product):
        source = StaticDeclarationSource(
            [product_type, get_product], metadata=ir.SchemaMetadata(name="CatalogSchema")
        )
        result = compile_schema(source)
        assert result.model.metadata.name == "CatalogSchema"
        assert result.manifest["schemaName"] == "CatalogSchema"

    def test_options_metadata_wins(self, product_type, get_product):
        snapshot = ir.DeclarationSnapshot(
            declarations=(product_type, get_product),
            metadata=ir.SchemaMetadata(name="FromSnapshot"),
        )
        options = CompileOptions(metadata=ir.SchemaMetadata(name="FromOptions", version="3.0"))
        result = compile_schema(snapshot, options)
        assert result.manifest["schemaName"] == "FromOptions"
        assert result.manifest["version"] == "3.0"

    def test_yaml_manifest(self, product_snapshot):
        result = compile_schema(product_snapshot, CompileOptions(manifest_format="yaml"))
        assert result.manifest_text.startswith("schemaName: GeneratedSchema\n")

    def test_naming_policy_applied(self, product_snapshot):
        result = compile_schema(product_snapshot, CompileOptions(naming=NamingPolicy.PRESERVE))
        assert "  Id: String!" in result.sdl
        # explicit names are used verbatim
        assert "  displayName: String!" in result.sdl

    def test_invalid_declarations_produce_nothing(self):
        snapshot = ir.DeclarationSnapshot(declarations=(widget(), widget()))
        with pytest.raises(DuplicateDeclarationError, match="Widget"):
            compile_schema(snapshot)

    def test_compilation_is_deterministic(self, product_snapshot):
        first = compile_schema(product_snapshot)
        second = compile_schema(product_snapshot)
        assert first.sdl == second.sdl
        assert first.manifest_text == second.manifest_text
        assert first.fingerprint == second.fingerprint


# ---------------------------------------------------------------------------
# Fingerprints
# ---------------------------------------------------------------------------


class TestFingerprint:
    def test_stable_for_equal_input(self, product_snapshot):
        assert build_fingerprint(product_snapshot, CompileOptions()) == build_fingerprint(
            product_snapshot, CompileOptions()
        )

    def test_changes_with_declarations(self, product_snapshot, product_type):
        other = ir.DeclarationSnapshot(declarations=(product_type,))
        options = CompileOptions()
        assert build_fingerprint(product_snapshot, options) != build_fingerprint(other, options)

    def test_changes_with_options(self, product_snapshot):
        assert build_fingerprint(product_snapshot, CompileOptions()) != build_fingerprint(
            product_snapshot, CompileOptions(include_type_name=True)
        )
        yaml_options = CompileOptions(manifest_format="yaml")
        assert CompileOptions().fingerprint() != yaml_options.fingerprint()


# ---------------------------------------------------------------------------
# write_artifacts
# ---------------------------------------------------------------------------


class TestWriteArtifacts:
    """Artifacts land together with the fingerprint of the build."""

    def test_writes_both_files(self, tmp_path, product_snapshot):
        result = compile_schema(product_snapshot)
        schema_path, manifest_path = write_artifacts(result, tmp_path / "out")

        assert schema_path == tmp_path / "out" / "schema.graphql"
        assert manifest_path == tmp_path / "out" / "resolvers.json"
        assert schema_path.read_text(encoding="utf-8") == result.sdl
        assert manifest_path.read_text(encoding="utf-8") == result.manifest_text
        assert read_fingerprint(tmp_path / "out") == result.fingerprint

    def test_no_temporaries_left(self, tmp_path, product_snapshot):
        write_artifacts(compile_schema(product_snapshot), tmp_path)
        names = sorted(p.name for p in tmp_path.iterdir())
        assert names == sorted([FINGERPRINT_FILENAME, "resolvers.json", "schema.graphql"])

    def test_manifest_name_follows_format(self, tmp_path, product_snapshot):
        result = compile_schema(product_snapshot, CompileOptions(manifest_format="yaml"))
        _, manifest_path = write_artifacts(result, tmp_path)
        assert manifest_path.name == "resolvers.yaml"

    def test_custom_file_names(self, tmp_path, product_snapshot):
        schema_path, manifest_path = write_artifacts(
            compile_schema(product_snapshot), tmp_path, "api.graphql", "api-resolvers.json"
        )
        assert schema_path.name == "api.graphql"
        assert manifest_path.name == "api-resolvers.json"

    def test_failed_compile_leaves_files_untouched(self, tmp_path, product_snapshot):
        write_artifacts(compile_schema(product_snapshot), tmp_path)
        before = (tmp_path / "schema.graphql").read_text(encoding="utf-8")

        broken = ir.DeclarationSnapshot(declarations=(widget(), widget()))
        with pytest.raises(DuplicateDeclarationError):
            write_artifacts(compile_schema(broken), tmp_path)

        assert (tmp_path / "schema.graphql").read_text(encoding="utf-8") == before

    def test_manifest_replace_failure_restores_schema(
        self, tmp_path, product_snapshot, product_type, get_product, monkeypatch
    ):
        write_artifacts(compile_schema(product_snapshot), tmp_path)
        before = {p.name: p.read_text(encoding="utf-8") for p in tmp_path.iterdir()}

        real_replace = os.replace

        def failing_replace(src, dst):
            if str(dst).endswith("resolvers.json"):
                raise PermissionError(f"cannot write {dst}")
            real_replace(src, dst)

        monkeypatch.setattr(pipeline.os, "replace", failing_replace)
        changed = ir.DeclarationSnapshot(declarations=(product_type, get_product, widget()))
        with pytest.raises(PermissionError):
            write_artifacts(compile_schema(changed), tmp_path)

        after = {p.name: p.read_text(encoding="utf-8") for p in tmp_path.iterdir()}
        assert after == before


class TestUpToDate:
    def test_missing_output(self, tmp_path):
        assert not is_up_to_date("abc", tmp_path)
        assert read_fingerprint(tmp_path) is None

    def test_matches_after_write(self, tmp_path, product_snapshot):
        result = compile_schema(product_snapshot)
        write_artifacts(result, tmp_path)
        assert is_up_to_date(result.fingerprint, tmp_path)

    def test_stale_after_change(self, tmp_path, product_snapshot, product_type):
        write_artifacts(compile_schema(product_snapshot), tmp_path)
        changed = compile_schema(ir.DeclarationSnapshot(declarations=(product_type,)))
        assert not is_up_to_date(changed.fingerprint, tmp_path)

    def test_missing_artifact_is_stale(self, tmp_path, product_snapshot):
        result = compile_schema(product_snapshot)
        write_artifacts(result, tmp_path)
        (tmp_path / "resolvers.json").unlink()
        assert not is_up_to_date(result.fingerprint, tmp_path)
