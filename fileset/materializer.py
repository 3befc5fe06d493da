"""
Materialization of fileset templates.

Expands a path template, reads the referenced file, renders the templates
inside it, parses the result and merges user overrides on top.
"""

import copy
import json
import logging
from pathlib import Path, PurePath
from typing import Any, Callable, Dict, Optional, Union
import yaml

from fileset.exceptions import (
    ConfigParseError,
    FileReadError,
    OverrideMergeError,
    TemplateError,
)
from fileset.variables import TemplateRenderer


logger = logging.getLogger(__name__)


class Materializer:
    """
    Loads template files of a single fileset against a variable environment.

    Every call reads and parses the file again; nothing is cached.
    """

    def __init__(self, fileset_path: Union[str, Path], variables: Dict[str, Any]):
        """
        Initialize materializer.

        Args:
            fileset_path: Directory of the fileset (<modules>/<module>/<fileset>)
            variables: Resolved variable environment
        """
        self.fileset_path = Path(fileset_path)
        self.variables = variables
        self.renderer = TemplateRenderer()

    def expand_path(self, path_template: str, kind: str = "file") -> str:
        """
        Render a path template.

        Raises:
            TemplateError: If the path template cannot be rendered
        """
        try:
            return self.renderer.render(path_template, self.variables)
        except TemplateError as e:
            raise TemplateError(
                f"Error expanding vars on the {kind} path: {e}",
                template=path_template,
                undefined_vars=e.undefined_vars
            ) from e

    def file_path(self, relative: str) -> Path:
        """
        Locate a file of the fileset.

        The path always stays under the fileset directory, even when the
        expanded path is absolute.
        """
        path = PurePath(relative)
        if path.anchor:
            path = path.relative_to(path.anchor)
        return self.fileset_path / path

    def load_yaml(
        self,
        path_template: str,
        overrides: Optional[Dict[str, Any]] = None,
        kind: str = "prospector",
        require_mapping: bool = False
    ) -> Any:
        """Materialize a YAML template file, merging overrides into it."""
        return self._load(path_template, overrides, kind, yaml.safe_load, yaml.YAMLError, require_mapping)

    def load_json(
        self,
        path_template: str,
        overrides: Optional[Dict[str, Any]] = None,
        kind: str = "pipeline",
        require_mapping: bool = False
    ) -> Any:
        """Materialize a JSON template file, merging overrides into it."""
        return self._load(path_template, overrides, kind, json.loads, json.JSONDecodeError, require_mapping)

    def _load(
        self,
        path_template: str,
        overrides: Optional[Dict[str, Any]],
        kind: str,
        parse: Callable[[str], Any],
        parse_error: type,
        require_mapping: bool = False
    ) -> Any:
        relative = self.expand_path(path_template, kind)
        file_path = self.file_path(relative)

        try:
            contents = file_path.read_text(encoding='utf-8')
        except OSError as e:
            raise FileReadError(kind, str(file_path), e) from e

        try:
            text = self.renderer.render(contents, self.variables)
        except TemplateError as e:
            raise TemplateError(
                f"Error interpreting the template of the {kind} {file_path}: {e}",
                template=contents,
                undefined_vars=e.undefined_vars
            ) from e

        try:
            document = parse(text)
        except parse_error as e:
            raise ConfigParseError(kind, str(file_path), e) from e

        if require_mapping:
            if document is None:
                document = {}
            elif not isinstance(document, dict):
                raise ConfigParseError(
                    kind, str(file_path),
                    TypeError(f"expected a dictionary, got {type(document).__name__}")
                )

        if overrides:
            document = self._apply_overrides(document, overrides, kind, file_path)

        logger.debug(f"Materialized {kind} config {file_path}: {document}")
        return document

    def _apply_overrides(
        self,
        document: Any,
        overrides: Dict[str, Any],
        kind: str,
        file_path: Path
    ) -> Dict[str, Any]:
        if document is None:
            document = {}

        if not isinstance(overrides, dict):
            raise OverrideMergeError(
                f"Error creating config from {kind} overrides: "
                f"expected a dictionary, got {type(overrides).__name__}"
            )
        if not isinstance(document, dict):
            raise OverrideMergeError(
                f"Error applying config overrides to {file_path}: "
                f"document is a {type(document).__name__}, not a dictionary"
            )

        return deep_merge(document, overrides)


def deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge overlay dict into base dict.

    Nested dictionaries are merged recursively; any other overlay value,
    lists included, replaces the base value.

    Args:
        base: Base dictionary
        overlay: Overlay dictionary (takes precedence)

    Returns:
        New merged dictionary; neither input is modified
    """
    result = copy.deepcopy(base)

    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)

    return result
