"""
Project configuration (``lambda-graphql.toml``).

Example:

    [schema]
    name = "ShopSchema"
    version = "1.0.0"

    [source]
    modules = ["shop.graphql"]
    paths = ["src"]

    [output]
    directory = "generated"
    manifest_format = "yaml"

    [naming]
    fields = "camel"

    [manifest]
    include_type_name = false

    [scalars]
    "shop.money.Money" = "Money"
    predefined = ["Money"]

    [scalars.builtin]
    "shop.ids.Sku" = "ID"
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .errors import ConfigError
from .ir import SchemaMetadata
from .scalars import DEFAULT_SCALAR_TABLES, ScalarTables, predefined_scalars

CONFIG_FILENAME = "lambda-graphql.toml"

NAMING_POLICIES = ("camel", "preserve")
MANIFEST_FORMATS = ("json", "yaml")


@dataclass
class SourceConfig:
    """Where declarations come from: Python modules or a snapshot file."""

    modules: list[str] = field(default_factory=list)
    paths: list[str] = field(default_factory=list)  # Import roots, relative to the project
    snapshot: str | None = None


@dataclass
class OutputConfig:
    """Artifact locations."""

    directory: str = "generated"
    schema_file: str = "schema.graphql"
    manifest_file: str | None = None  # Defaults to resolvers.<format>
    manifest_format: str = "json"

    @property
    def manifest_filename(self) -> str:
        return self.manifest_file or f"resolvers.{self.manifest_format}"


@dataclass
class ScalarConfig:
    """Extra scalar mappings layered over the default tables."""

    overrides: dict[str, str] = field(default_factory=dict)
    builtin: dict[str, str] = field(default_factory=dict)
    predefined: list[str] = field(default_factory=list)
    include_appsync: bool = True

    def tables(self) -> ScalarTables:
        if not self.overrides and not self.builtin:
            return DEFAULT_SCALAR_TABLES
        return DEFAULT_SCALAR_TABLES.extend(overrides=self.overrides, builtin=self.builtin)

    def builtin_scalars(self) -> frozenset[str]:
        return predefined_scalars(self.predefined, include_appsync=self.include_appsync)


@dataclass
class ProjectConfig:
    """Parsed lambda-graphql.toml."""

    root: Path
    schema: SchemaMetadata | None = None  # None when there is no [schema] table
    source: SourceConfig = field(default_factory=SourceConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    naming: str = "camel"
    include_type_name: bool = False
    scalars: ScalarConfig = field(default_factory=ScalarConfig)

    @property
    def output_dir(self) -> Path:
        return self.root / self.output.directory

    @property
    def snapshot_path(self) -> Path | None:
        if self.source.snapshot is None:
            return None
        return self.root / self.source.snapshot

    @property
    def import_paths(self) -> list[Path]:
        return [self.root / path for path in self.source.paths]


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"[{key}] must be a table")
    return value


def _string_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _choice(value: Any, key: str, choices: tuple[str, ...]) -> str:
    if value not in choices:
        raise ConfigError(f"'{key}' must be one of {', '.join(choices)}; got {value!r}")
    return str(value)


def _parse_scalars(data: dict[str, Any]) -> ScalarConfig:
    scalars_data = dict(_table(data, "scalars"))
    builtin = scalars_data.pop("builtin", {})
    predefined = scalars_data.pop("predefined", [])
    include_appsync = scalars_data.pop("include_appsync", True)

    if not isinstance(builtin, dict):
        raise ConfigError("[scalars.builtin] must be a table")
    for table_name, table in (("scalars", scalars_data), ("scalars.builtin", builtin)):
        for native, scalar in table.items():
            if not isinstance(scalar, str):
                raise ConfigError(f"[{table_name}] entry '{native}' must map to a scalar name")

    return ScalarConfig(
        overrides=scalars_data,
        builtin=dict(builtin),
        predefined=_string_list(predefined, "scalars.predefined"),
        include_appsync=bool(include_appsync),
    )


def _parse_schema(schema_data: dict[str, Any]) -> SchemaMetadata:
    try:
        return SchemaMetadata(
            name=schema_data.get("name", SchemaMetadata().name),
            version=schema_data.get("version"),
            description=schema_data.get("description"),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid [schema] table: {e}") from e


def load_config(path: Path) -> ProjectConfig:
    """
    Load a project configuration file.

    Args:
        path: Path to lambda-graphql.toml

    Returns:
        ProjectConfig rooted at the file's directory

    Raises:
        ConfigError: If the file is missing, not valid TOML or has bad values
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    schema_data = _table(data, "schema")
    source_data = _table(data, "source")
    output_data = _table(data, "output")
    naming_data = _table(data, "naming")
    manifest_data = _table(data, "manifest")

    schema = None
    if schema_data:
        schema = _parse_schema(schema_data)

    source = SourceConfig(
        modules=_string_list(source_data.get("modules", []), "source.modules"),
        paths=_string_list(source_data.get("paths", []), "source.paths"),
        snapshot=source_data.get("snapshot"),
    )
    if source.modules and source.snapshot:
        raise ConfigError("[source] takes either 'modules' or 'snapshot', not both")

    output = OutputConfig(
        directory=output_data.get("directory", "generated"),
        schema_file=output_data.get("schema_file", "schema.graphql"),
        manifest_file=output_data.get("manifest_file"),
        manifest_format=_choice(
            output_data.get("manifest_format", "json"), "output.manifest_format", MANIFEST_FORMATS
        ),
    )

    return ProjectConfig(
        root=path.parent,
        schema=schema,
        source=source,
        output=output,
        naming=_choice(naming_data.get("fields", "camel"), "naming.fields", NAMING_POLICIES),
        include_type_name=bool(manifest_data.get("include_type_name", False)),
        scalars=_parse_scalars(data),
    )


def find_config(start: Path) -> Path | None:
    """Walk up from ``start`` looking for lambda-graphql.toml."""
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
