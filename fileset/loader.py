"""Manifest loader with shape validation."""

import logging
from pathlib import Path
from typing import Any, List, Union
import yaml

from fileset.exceptions import ManifestReadError, ManifestUnpackError, ValidationError
from fileset.types import Manifest


logger = logging.getLogger(__name__)


class PreservingLoader(yaml.SafeLoader):
    """Custom YAML loader that preserves string values like 'on' instead of converting to bool."""
    pass


# Remove the implicit bool resolvers for 'on'/'off' so manifest values stay literal
PreservingLoader.yaml_implicit_resolvers = dict(PreservingLoader.yaml_implicit_resolvers)
for _first in ('o', 'O'):
    if _first in PreservingLoader.yaml_implicit_resolvers:
        PreservingLoader.yaml_implicit_resolvers[_first] = [
            (tag, regexp) for tag, regexp in PreservingLoader.yaml_implicit_resolvers[_first]
            if tag != 'tag:yaml.org,2002:bool'
        ]


def load_yaml_file(path: Union[str, Path]) -> Any:
    """Read a YAML file with the PreservingLoader."""
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.load(f, Loader=PreservingLoader)


class ManifestLoader:
    """Loads a fileset manifest.yml and unpacks it into a Manifest."""

    STRING_FIELDS = ('module_version', 'ingest_pipeline', 'prospector')

    def __init__(self):
        """Initialize loader."""
        self.errors: List[ValidationError] = []

    def load(self, manifest_path: Union[str, Path]) -> Manifest:
        """
        Load and unpack a manifest file.

        Args:
            manifest_path: Path to manifest.yml

        Returns:
            Unpacked manifest

        Raises:
            ManifestReadError: If the file cannot be read or parsed
            ManifestUnpackError: If the document has the wrong shape
        """
        self.errors = []
        path = str(manifest_path)

        try:
            document = load_yaml_file(path)
        except (OSError, yaml.YAMLError) as e:
            raise ManifestReadError(path, e) from e

        logger.debug(f"Loaded manifest: {path}")
        return self.unpack(document, path)

    def unpack(self, document: Any, path: str = "<manifest>") -> Manifest:
        """
        Unpack a parsed manifest document.

        Raises:
            ManifestUnpackError: With every shape problem found
        """
        if document is None:
            document = {}

        if not isinstance(document, dict):
            self._add_error(f"Manifest must be a YAML object/dictionary, got {type(document).__name__}")
            self._raise_unpack_errors(path)

        for field_name in self.STRING_FIELDS:
            value = document.get(field_name)
            if value is not None and not isinstance(value, str):
                self._add_error(f"'{field_name}' field must be a string, got {type(value).__name__}")

        declarations = document.get('var')
        if declarations is None:
            declarations = []
        elif not isinstance(declarations, list):
            self._add_error(f"'var' field must be a list, got {type(declarations).__name__}")
        else:
            self._validate_declarations(declarations)

        if self.errors:
            self._raise_unpack_errors(path)

        return Manifest(
            module_version=self._as_text(document.get('module_version')),
            vars=tuple(declarations),
            ingest_pipeline=self._as_text(document.get('ingest_pipeline')),
            prospector=self._as_text(document.get('prospector')),
        )

    def _validate_declarations(self, declarations: List[Any]):
        """Validate the shape of variable declarations."""
        for i, declaration in enumerate(declarations):
            if not isinstance(declaration, dict):
                self._add_error(f"Variable {i} must be a dictionary")
                continue

            os_values = declaration.get('os')
            if os_values is not None and not isinstance(os_values, dict):
                name = declaration.get('name', f"<var_{i}>")
                self._add_error(f"Variable '{name}': 'os' must be a dictionary")

    def _as_text(self, value: Any) -> str:
        return value if isinstance(value, str) else ""

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        """Add validation error."""
        self.errors.append(ValidationError(message, path, exit_code))

    def _raise_unpack_errors(self, path: str):
        """Raise ManifestUnpackError with accumulated errors."""
        raise ManifestUnpackError(path, self.errors)


def read_manifest(manifest_path: Union[str, Path]) -> Manifest:
    """Load a manifest with a fresh ManifestLoader."""
    return ManifestLoader().load(manifest_path)
