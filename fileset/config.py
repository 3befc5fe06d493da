"""Module selection configuration loading."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Union
import yaml

from fileset.exceptions import ConfigError, ValidationError
from fileset.loader import load_yaml_file
from fileset.types import FilesetConfig, ModuleConfig


logger = logging.getLogger(__name__)


class ModuleConfigLoader:
    """
    Loads module configuration from YAML.

    The document is a list of modules, or a mapping with a 'modules' list.
    Every key of a module entry other than 'module' and 'enabled' names a
    fileset:

        - module: nginx
          access:
            var:
              paths: ["/var/log/nginx/access.log*"]
            prospector:
              close_eof: true
    """

    MODULE_FIELDS = {'module', 'enabled'}
    FILESET_FIELDS = {'enabled', 'var', 'prospector'}

    def __init__(self):
        """Initialize loader."""
        self.errors: List[ValidationError] = []

    def load(self, config_path: Union[str, Path]) -> List[ModuleConfig]:
        """
        Load module configuration from a file.

        Raises:
            ConfigError: If the file cannot be read or has the wrong shape
        """
        path = str(config_path)
        try:
            document = load_yaml_file(path)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(path, [ValidationError(f"Failed to load config: {e}", path)]) from e

        return self.unpack(document, path)

    def unpack(self, document: Any, path: str = "<config>") -> List[ModuleConfig]:
        """Unpack a parsed module configuration document."""
        self.errors = []

        if isinstance(document, dict) and 'modules' in document:
            document = document['modules']
        if document is None:
            document = []

        if not isinstance(document, list):
            self._add_error("Module configuration must be a list of modules")
            raise ConfigError(path, self.errors)

        modules = []
        for i, entry in enumerate(document):
            module = self._unpack_module(entry, i)
            if module is not None:
                modules.append(module)

        if self.errors:
            raise ConfigError(path, self.errors)

        logger.debug(f"Loaded {len(modules)} module(s) from {path}")
        return modules

    def _unpack_module(self, entry: Any, index: int):
        if not isinstance(entry, dict):
            self._add_error(f"Module {index} must be a dictionary")
            return None

        name = entry.get('module')
        if not name or not isinstance(name, str):
            self._add_error(f"Module {index} missing required string 'module' field")
            return None

        enabled = entry.get('enabled', True)
        if not isinstance(enabled, bool):
            self._add_error(f"Module '{name}': enabled must be a boolean")

        filesets: Dict[str, FilesetConfig] = {}
        for key, value in entry.items():
            if key in self.MODULE_FIELDS:
                continue
            fileset = self._unpack_fileset(value, f"{name}.{key}")
            if fileset is not None:
                filesets[key] = fileset

        return ModuleConfig(module=name, enabled=enabled is not False, filesets=filesets)

    def _unpack_fileset(self, value: Any, context: str):
        if value is None:
            return FilesetConfig()
        if not isinstance(value, dict):
            self._add_error(f"Fileset '{context}' must be a dictionary")
            return None

        for key in value.keys():
            if key not in self.FILESET_FIELDS:
                self._add_error(f"Fileset '{context}': unknown field '{key}'")

        enabled = value.get('enabled', True)
        if not isinstance(enabled, bool):
            self._add_error(f"Fileset '{context}': enabled must be a boolean")

        var = value.get('var') or {}
        if not isinstance(var, dict):
            self._add_error(f"Fileset '{context}': var must be a dictionary")
            var = {}

        prospector = value.get('prospector') or {}
        if not isinstance(prospector, dict):
            self._add_error(f"Fileset '{context}': prospector must be a dictionary")
            prospector = {}

        return FilesetConfig(enabled=enabled is not False, var=var, prospector=prospector)

    def _add_error(self, message: str, path: str = "", exit_code: int = 2):
        """Add validation error."""
        self.errors.append(ValidationError(message, path, exit_code))


def load_module_configs(config_path: Union[str, Path]) -> List[ModuleConfig]:
    """Load module configuration with a fresh ModuleConfigLoader."""
    return ModuleConfigLoader().load(config_path)
