"""
lambda-graphql CLI.

Commands:
- build: compile declarations and write schema.graphql + the resolver manifest
- check: compile in memory and report problems without writing anything
- inspect: show the types, operations and resolvers that would be emitted
- snapshot: write the collected declarations to a JSON/YAML snapshot file
- version: print the installed version
"""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lambda_graphql._version import get_version
from lambda_graphql.core import ir
from lambda_graphql.core.config import CONFIG_FILENAME, ProjectConfig, find_config, load_config
from lambda_graphql.core.errors import SchemaCompilationError
from lambda_graphql.core.pipeline import (
    CompilationResult,
    CompileOptions,
    build_fingerprint,
    compile_schema,
    is_up_to_date,
    write_artifacts,
)
from lambda_graphql.discovery import (
    DeclarationSource,
    ReflectionDeclarationSource,
    SnapshotFileSource,
    dump_snapshot,
)

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Compile GraphQL declarations into an SDL schema and an AppSync resolver manifest",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show debug logging"),
) -> None:
    """lambda-graphql global options."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# =============================================================================
# Helpers
# =============================================================================


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(code=1)


def _load_project(
    config_path: Path | None,
    modules: list[str] | None,
    snapshot: Path | None,
) -> ProjectConfig:
    """Load the project config, letting command-line sources override it."""
    path = config_path or find_config(Path.cwd())
    if path is not None:
        try:
            config = load_config(path)
        except SchemaCompilationError as e:
            raise _fail(str(e)) from e
    elif config_path is None and (modules or snapshot):
        config = ProjectConfig(root=Path.cwd())
    else:
        raise _fail(f"No {CONFIG_FILENAME} found; pass --module or --snapshot")

    if modules:
        config.source.modules = list(modules)
        config.source.snapshot = None
    elif snapshot is not None:
        config.source.snapshot = str(snapshot.resolve())
        config.source.modules = []
    return config


def _source_for(config: ProjectConfig) -> DeclarationSource:
    if config.source.modules:
        return ReflectionDeclarationSource(
            config.source.modules, search_paths=config.import_paths
        )
    if config.snapshot_path is not None:
        return SnapshotFileSource(config.snapshot_path)
    raise _fail("No declaration source configured: set [source] modules or snapshot")


def _collect(config: ProjectConfig) -> ir.DeclarationSnapshot:
    source = _source_for(config)
    try:
        return source.collect()
    except ImportError as e:
        raise _fail(f"Could not import declarations: {e}") from e
    except SchemaCompilationError as e:
        raise _fail(str(e)) from e


def _compile(snapshot: ir.DeclarationSnapshot, options: CompileOptions) -> CompilationResult:
    try:
        return compile_schema(snapshot, options)
    except SchemaCompilationError as e:
        raise _fail(f"{type(e).__name__}: {e}") from e


# Shared options
ConfigOption = typer.Option(
    None, "--config", "-c", help=f"Path to {CONFIG_FILENAME} (default: search upwards)"
)
ModuleOption = typer.Option(
    None, "--module", "-m", help="Python module to collect declarations from (repeatable)"
)
SnapshotOption = typer.Option(None, "--snapshot", "-s", help="Declaration snapshot file")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def build(
    config_path: Path | None = ConfigOption,
    modules: list[str] | None = ModuleOption,
    snapshot: Path | None = SnapshotOption,
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output directory (overrides [output] directory)"
    ),
    manifest_format: str | None = typer.Option(
        None, "--format", "-f", help="Manifest format: json or yaml"
    ),
    force: bool = typer.Option(False, "--force", help="Rebuild even if nothing changed"),
) -> None:
    """
    Compile declarations and write both artifacts.

    Nothing is written when compilation fails. Builds are skipped when the
    declarations and settings match the last build, unless --force is given.

    Examples:
        lambda-graphql build
        lambda-graphql build -m shop.graphql -o generated
        lambda-graphql build --format yaml --force
    """
    config = _load_project(config_path, modules, snapshot)
    if manifest_format is not None:
        if manifest_format not in ("json", "yaml"):
            raise _fail(f"Unknown manifest format '{manifest_format}'")
        config.output.manifest_format = manifest_format
    output_dir = output or config.output_dir

    declarations = _collect(config)
    options = CompileOptions.from_config(config)
    fingerprint = build_fingerprint(declarations, options)

    if not force and is_up_to_date(
        fingerprint, output_dir, config.output.schema_file, config.output.manifest_filename
    ):
        console.print(f"[dim]Up to date:[/dim] {output_dir}")
        return

    result = _compile(declarations, options)
    try:
        schema_path, manifest_path = write_artifacts(
            result, output_dir, config.output.schema_file, config.output.manifest_filename
        )
    except OSError as e:
        raise _fail(f"Could not write artifacts: {e}") from e

    resolvers = len(result.manifest["resolvers"])
    console.print(f"[green]✓[/green] Schema written to {schema_path}")
    console.print(f"[green]✓[/green] Manifest written to {manifest_path} ({resolvers} resolvers)")


@app.command()
def check(
    config_path: Path | None = ConfigOption,
    modules: list[str] | None = ModuleOption,
    snapshot: Path | None = SnapshotOption,
    strict: bool = typer.Option(
        False, "--strict", help="Also fail when artifacts on disk are out of date"
    ),
) -> None:
    """
    Compile in memory and report errors without writing anything.

    With --strict, also fails when the artifacts on disk differ from what a
    build would write (useful in CI).
    """
    config = _load_project(config_path, modules, snapshot)
    result = _compile(_collect(config), CompileOptions.from_config(config))

    console.print(
        f"[green]✓[/green] {len(result.model.types)} types, "
        f"{len(result.model.operations)} operations, "
        f"{len(result.manifest['resolvers'])} resolvers"
    )

    if strict:
        stale = []
        for name, expected in (
            (config.output.schema_file, result.sdl),
            (config.output.manifest_filename, result.manifest_text),
        ):
            path = config.output_dir / name
            if not path.is_file() or path.read_text(encoding="utf-8") != expected:
                stale.append(str(path))
        if stale:
            raise _fail(f"Out of date: {', '.join(stale)}; run 'lambda-graphql build'")


@app.command()
def inspect(
    config_path: Path | None = ConfigOption,
    modules: list[str] | None = ModuleOption,
    snapshot: Path | None = SnapshotOption,
    sdl: bool = typer.Option(False, "--sdl", help="Print the SDL instead of tables"),
) -> None:
    """Show the types, operations and resolvers a build would emit."""
    config = _load_project(config_path, modules, snapshot)
    result = _compile(_collect(config), CompileOptions.from_config(config))

    if sdl:
        typer.echo(result.sdl, nl=False)
        return

    model = result.model
    console.print(f"Schema: [cyan]{escape(model.metadata.name)}[/cyan]")

    if model.types:
        table = Table(title="Types")
        table.add_column("Name", style="cyan")
        table.add_column("Kind")
        table.add_column("Members", justify="right")
        for entry in model.types:
            members = len(entry.fields) + len(entry.enum_values) + len(entry.union_members)
            table.add_row(entry.name, entry.kind.value, str(members))
        console.print(table)

    if model.operations:
        table = Table(title="Operations")
        table.add_column("Root", style="cyan")
        table.add_column("Name")
        table.add_column("Returns")
        table.add_column("Resolver")
        for operation in model.operations:
            binding = operation.resolver
            if binding is None:
                resolver = "[dim]-[/dim]"
            elif binding.kind == ir.ResolverKind.UNIT:
                resolver = escape(f"unit: {binding.data_source}")
            else:
                resolver = escape(f"pipeline: {' -> '.join(binding.function_chain)}")
            table.add_row(
                operation.root_kind.value,
                operation.name,
                escape(operation.return_type_ref),
                resolver,
            )
        console.print(table)


@app.command(name="snapshot")
def snapshot_command(
    output: Path = typer.Argument(..., help="Snapshot file to write (.json, .yaml or .yml)"),
    config_path: Path | None = ConfigOption,
    modules: list[str] | None = ModuleOption,
) -> None:
    """Write the collected declarations to a snapshot file."""
    config = _load_project(config_path, modules, None)
    declarations = _collect(config)
    try:
        dump_snapshot(declarations, output)
    except SchemaCompilationError as e:
        raise _fail(str(e)) from e
    console.print(
        f"[green]✓[/green] {len(declarations.declarations)} declarations written to {output}"
    )


@app.command()
def version() -> None:
    """Print the lambda-graphql version."""
    typer.echo(f"lambda-graphql {get_version()}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
