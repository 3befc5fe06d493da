"""
Type definitions for the fileset loader.

Defines the manifest, module/fileset selection config and the value kinds
understood by the variable resolver.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum


class ValueKind(str, Enum):
    """Kinds of variable values the resolver knows how to handle."""
    STRING = "string"
    SEQUENCE = "sequence"
    OPAQUE = "opaque"

    @classmethod
    def of(cls, value: Any) -> "ValueKind":
        """Classify a variable value."""
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, (list, tuple)):
            return cls.SEQUENCE
        return cls.OPAQUE


@dataclass(frozen=True)
class Manifest:
    """
    Contents of a fileset's manifest.yml.

    Attributes:
        module_version: Version string of the module
        vars: Variable declarations, in declaration order
        ingest_pipeline: Path template of the ingest pipeline definition
        prospector: Path template of the prospector config template
    """
    module_version: str = ""
    vars: Tuple[Dict[str, Any], ...] = ()
    ingest_pipeline: str = ""
    prospector: str = ""


@dataclass
class FilesetConfig:
    """
    User configuration of a single fileset.

    Attributes:
        enabled: Whether the fileset should be loaded
        var: Variable overrides, applied verbatim after resolution
        prospector: Override document merged into the prospector config
    """
    enabled: bool = True
    var: Dict[str, Any] = field(default_factory=dict)
    prospector: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ModuleConfig:
    """
    User configuration of a module.

    Attributes:
        module: Module name (directory under the modules root)
        enabled: Whether the module should be loaded
        filesets: Per-fileset configuration keyed by fileset name
    """
    module: str
    enabled: bool = True
    filesets: Dict[str, FilesetConfig] = field(default_factory=dict)

    def fileset_config(self, name: str) -> FilesetConfig:
        """Return the config for a fileset, or the defaults if none was given."""
        return self.filesets.get(name) or FilesetConfig()

    def enabled_filesets(self, available: Optional[List[str]] = None) -> List[str]:
        """
        List the fileset names that should be loaded.

        Args:
            available: Fileset names found on disk; defaults to the configured ones

        Returns:
            Sorted list of enabled fileset names
        """
        names = available if available is not None else list(self.filesets.keys())
        return sorted(name for name in names if self.fileset_config(name).enabled)
