"""
Fileset loader.

Loads module filesets from disk, resolves their variables and materializes
the prospector configuration and ingest pipeline definition.
"""

from .exceptions import (
    FilesetError,
    MissingModule,
    ManifestReadError,
    ManifestUnpackError,
    ConfigError,
    MissingVariableField,
    TemplateError,
    HostResolutionError,
    FileReadError,
    ConfigParseError,
    OverrideMergeError,
)
from .types import Manifest, ModuleConfig, FilesetConfig, ValueKind
from .fileset import Fileset, list_filesets
from .pipeline import format_pipeline_id, remove_ext

__all__ = [
    "FilesetError",
    "MissingModule",
    "ManifestReadError",
    "ManifestUnpackError",
    "ConfigError",
    "MissingVariableField",
    "TemplateError",
    "HostResolutionError",
    "FileReadError",
    "ConfigParseError",
    "OverrideMergeError",
    "Manifest",
    "ModuleConfig",
    "FilesetConfig",
    "ValueKind",
    "Fileset",
    "list_filesets",
    "format_pipeline_id",
    "remove_ext",
]
