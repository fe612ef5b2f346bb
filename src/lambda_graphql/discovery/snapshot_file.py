"""
Snapshot file declaration source.

Reads a DeclarationSnapshot serialized as JSON or YAML. This is the
hand-off format for declaration extractors that run outside Python, and for
checking a snapshot into version control next to its artifacts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from lambda_graphql.core import ir
from lambda_graphql.core.errors import SnapshotFormatError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")
JSON_SUFFIXES = (".json",)


def _format_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in JSON_SUFFIXES:
        return "json"
    if suffix in YAML_SUFFIXES:
        return "yaml"
    raise SnapshotFormatError(
        f"Unsupported snapshot file '{path.name}': expected .json, .yaml or .yml"
    )


def load_snapshot(path: Path) -> ir.DeclarationSnapshot:
    """
    Load a snapshot file.

    Raises:
        SnapshotFormatError: If the file is missing, unparsable or does not
            describe a valid snapshot
    """
    fmt = _format_for(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SnapshotFormatError(f"Snapshot file not found: {path}") from e

    try:
        data: Any = json.loads(text) if fmt == "json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotFormatError(f"Could not parse {path}: {e}") from e

    if data is None:
        data = {}
    try:
        snapshot = ir.DeclarationSnapshot.model_validate(data)
    except ValidationError as e:
        raise SnapshotFormatError(
            f"Invalid snapshot in {path}: {e.error_count()} error(s)\n{e}"
        ) from e

    logger.debug("Loaded %d declarations from %s", len(snapshot.declarations), path)
    return snapshot


def dump_snapshot(snapshot: ir.DeclarationSnapshot, path: Path) -> None:
    """Write a snapshot as JSON or YAML, chosen by the file suffix."""
    fmt = _format_for(path)
    # The "declaration" tag is a default value, so only None fields are dropped
    data = snapshot.model_dump(mode="json", exclude_none=True)
    if fmt == "json":
        text = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    else:
        text = yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


class SnapshotFileSource:
    """
    Declaration source backed by a snapshot file.

    Example:
        snapshot = SnapshotFileSource(Path("build/declarations.yaml")).collect()
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def collect(self) -> ir.DeclarationSnapshot:
        return load_snapshot(self.path)
