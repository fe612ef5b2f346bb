"""
Artifact emitters.

Both emitters read the same immutable SchemaModel independently:
- sdl: GraphQL schema document
- resolver_manifest: AppSync resolver wiring
"""

from .resolver_manifest import (
    MANIFEST_FORMATS,
    ResolverManifestBuilder,
    find_entry,
    generate_manifest,
    manifest_to_json,
    manifest_to_yaml,
    serialize_manifest,
)
from .sdl import SchemaEmitter, generate_sdl

__all__ = [
    "MANIFEST_FORMATS",
    "ResolverManifestBuilder",
    "SchemaEmitter",
    "find_entry",
    "generate_manifest",
    "generate_sdl",
    "manifest_to_json",
    "manifest_to_yaml",
    "serialize_manifest",
]
