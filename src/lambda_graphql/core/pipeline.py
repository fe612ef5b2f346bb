"""
Compilation pipeline.

``compile_schema`` runs the builder and both emitters in memory and returns
both artifacts or raises; ``write_artifacts`` puts them on disk so that an
error never leaves one artifact updated and the other stale.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from . import ir
from .builder import NamingPolicy, TypeModelBuilder
from .config import ProjectConfig
from .scalars import DEFAULT_SCALAR_TABLES, ScalarTables
from .type_mapper import TypeMapper

logger = logging.getLogger(__name__)

FINGERPRINT_FILENAME = ".lambda-graphql.fingerprint"


class SupportsCollect(Protocol):
    def collect(self) -> ir.DeclarationSnapshot: ...


@dataclass(frozen=True)
class CompileOptions:
    """
    Settings for one compilation pass.

    Attributes:
        metadata: Schema metadata; wins over metadata carried by the snapshot
        naming: Default naming policy for fields, arguments and operations
        tables: Scalar tables for the TypeMapper
        builtin_scalars: Scalars the target predefines (GraphQL + AppSync when None)
        include_type_name: Add ``typeName`` to manifest entries
        manifest_format: ``json`` or ``yaml``
    """

    metadata: ir.SchemaMetadata | None = None
    naming: NamingPolicy = NamingPolicy.CAMEL
    tables: ScalarTables = DEFAULT_SCALAR_TABLES
    builtin_scalars: frozenset[str] | None = None
    include_type_name: bool = False
    manifest_format: str = "json"

    def fingerprint(self) -> str:
        """Stable digest of the settings that influence the output."""
        settings = {
            "metadata": self.metadata.model_dump() if self.metadata else None,
            "naming": self.naming.value,
            "overrides": sorted(self.tables.overrides.items()),
            "builtin": sorted(self.tables.builtin.items()),
            "builtin_scalars": sorted(self.builtin_scalars or ()),
            "include_type_name": self.include_type_name,
            "manifest_format": self.manifest_format,
        }
        return hashlib.sha256(json.dumps(settings, sort_keys=True).encode("utf-8")).hexdigest()

    @classmethod
    def from_config(cls, config: ProjectConfig) -> CompileOptions:
        return cls(
            metadata=config.schema,
            naming=NamingPolicy(config.naming),
            tables=config.scalars.tables(),
            builtin_scalars=config.scalars.builtin_scalars(),
            include_type_name=config.include_type_name,
            manifest_format=config.output.manifest_format,
        )


@dataclass(frozen=True)
class CompilationResult:
    """Both artifacts of one pass, plus the model they came from."""

    model: ir.SchemaModel
    sdl: str
    manifest: dict[str, Any] = field(hash=False)
    manifest_text: str
    manifest_format: str
    fingerprint: str


def build_fingerprint(snapshot: ir.DeclarationSnapshot, options: CompileOptions) -> str:
    """Digest of a snapshot together with the options it is compiled with."""
    combined = f"{snapshot.fingerprint()}:{options.fingerprint()}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()


def compile_schema(
    source: ir.DeclarationSnapshot | SupportsCollect,
    options: CompileOptions | None = None,
) -> CompilationResult:
    """
    Compile declarations into SDL and a resolver manifest.

    Args:
        source: A snapshot, or a declaration source to collect one from
        options: Compilation settings

    Returns:
        CompilationResult holding both artifacts

    Raises:
        SchemaCompilationError: If any declaration is invalid; nothing is produced
    """
    from lambda_graphql.emitters import generate_manifest, generate_sdl, serialize_manifest

    options = options or CompileOptions()
    snapshot = source if isinstance(source, ir.DeclarationSnapshot) else source.collect()

    builder = TypeModelBuilder(
        mapper=TypeMapper(options.tables),
        naming=options.naming,
        builtin_scalars=options.builtin_scalars,
    )
    model = builder.build(snapshot, options.metadata)

    sdl = generate_sdl(model)
    manifest = generate_manifest(model, include_type_name=options.include_type_name)
    manifest_text = serialize_manifest(manifest, options.manifest_format)

    logger.debug(
        "Compiled '%s': %d types, %d operations, %d resolvers",
        model.metadata.name,
        len(model.types),
        len(model.operations),
        len(manifest["resolvers"]),
    )
    return CompilationResult(
        model=model,
        sdl=sdl,
        manifest=manifest,
        manifest_text=manifest_text,
        manifest_format=options.manifest_format,
        fingerprint=build_fingerprint(snapshot, options),
    )


def write_artifacts(
    result: CompilationResult,
    output_dir: Path,
    schema_file: str = "schema.graphql",
    manifest_file: str | None = None,
) -> tuple[Path, Path]:
    """
    Write both artifacts and the build fingerprint.

    Both files are written to temporaries first and only renamed into place
    once both writes succeeded. If the manifest cannot be renamed into place,
    the previous schema is restored so the pair on disk stays consistent.

    Args:
        result: Compilation result
        output_dir: Directory to write into (created if missing)
        schema_file: SDL file name
        manifest_file: Manifest file name (``resolvers.<format>`` by default)

    Returns:
        (schema path, manifest path)
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    schema_path = output_dir / schema_file
    manifest_path = output_dir / (manifest_file or f"resolvers.{result.manifest_format}")

    pending = [
        (schema_path, result.sdl),
        (manifest_path, result.manifest_text),
    ]
    temporaries: list[Path] = []
    backup = schema_path.with_suffix(schema_path.suffix + ".bak")
    try:
        for path, text in pending:
            tmp_path = path.with_suffix(path.suffix + ".tmp")
            temporaries.append(tmp_path)
            tmp_path.write_text(text, encoding="utf-8")
        schema_tmp, manifest_tmp = temporaries
        had_schema = schema_path.exists()
        if had_schema:
            os.replace(schema_path, backup)
        os.replace(schema_tmp, schema_path)
        try:
            os.replace(manifest_tmp, manifest_path)
        except OSError:
            logger.error("Could not replace %s, restoring previous schema", manifest_path)
            if had_schema:
                os.replace(backup, schema_path)
            else:
                schema_path.unlink()
            raise
    finally:
        if backup.exists():
            backup.unlink()
        for tmp_path in temporaries:
            if tmp_path.exists():
                tmp_path.unlink()

    write_fingerprint(output_dir, result.fingerprint)
    logger.info("Wrote %s and %s", schema_path, manifest_path)
    return schema_path, manifest_path


def read_fingerprint(output_dir: Path) -> str | None:
    """Fingerprint of the build that produced the artifacts in ``output_dir``."""
    path = output_dir / FINGERPRINT_FILENAME
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8").strip() or None


def write_fingerprint(output_dir: Path, fingerprint: str) -> None:
    (output_dir / FINGERPRINT_FILENAME).write_text(fingerprint + "\n", encoding="utf-8")


def is_up_to_date(
    fingerprint: str,
    output_dir: Path,
    schema_file: str = "schema.graphql",
    manifest_file: str = "resolvers.json",
) -> bool:
    """True when both artifacts exist and were built with the same fingerprint."""
    if not (output_dir / schema_file).is_file() or not (output_dir / manifest_file).is_file():
        return False
    return read_fingerprint(output_dir) == fingerprint
