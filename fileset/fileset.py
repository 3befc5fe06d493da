"""
Fileset loading.

A module is a directory under the modules root; each of its subdirectories
holding a manifest.yml is a fileset.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from fileset.exceptions import FilesetError, MissingModule
from fileset.loader import ManifestLoader
from fileset.materializer import Materializer
from fileset.pipeline import format_pipeline_id
from fileset.types import FilesetConfig, Manifest, ModuleConfig
from fileset.variables import VariableResolver
from fileset.variables.builtin import HostnameProvider


logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.yml"


class Fileset:
    """A fileset of a module, with its manifest and resolved variables."""

    def __init__(
        self,
        modules_path: Union[str, Path],
        name: str,
        module_config: ModuleConfig,
        fileset_config: Optional[FilesetConfig] = None,
        hostname_provider: Optional[HostnameProvider] = None,
        os_name: Optional[str] = None
    ):
        """
        Initialize fileset.

        Args:
            modules_path: Root directory holding the modules
            name: Fileset name
            module_config: Configuration of the module the fileset belongs to
            fileset_config: Configuration of this fileset (overrides)
            hostname_provider: Source of the host name for the builtin variables
            os_name: OS identifier used to pick OS specific variable values

        Raises:
            MissingModule: If the module directory does not exist
        """
        module_path = Path(modules_path) / module_config.module
        if not module_path.exists():
            raise MissingModule(module_config.module, str(module_path))

        self.name = name
        self.module_config = module_config
        self.fileset_config = fileset_config or module_config.fileset_config(name)
        self.module_path = module_path
        self.resolver = VariableResolver(hostname_provider=hostname_provider, os_name=os_name)

        self._manifest: Optional[Manifest] = None
        self._vars: Optional[Dict[str, Any]] = None

    @property
    def module_name(self) -> str:
        return self.module_config.module

    @property
    def path(self) -> Path:
        """Directory of the fileset."""
        return self.module_path / self.name

    @property
    def manifest(self) -> Manifest:
        self._require_read()
        return self._manifest

    @property
    def vars(self) -> Dict[str, Any]:
        self._require_read()
        return self._vars

    def read(self) -> None:
        """
        Read the manifest and evaluate the variables.

        On failure the fileset is left unread.
        """
        manifest = ManifestLoader().load(self.path / MANIFEST_FILE)
        variables = self.resolver.resolve(manifest.vars, self.fileset_config.var)

        pipeline_id = self._pipeline_id(manifest, variables)
        variables['beat'] = {
            'pipeline_id': pipeline_id,
        }

        self._manifest = manifest
        self._vars = variables
        logger.debug(f"Read fileset {self.module_name}/{self.name} (pipeline {pipeline_id})")

    def get_prospector_config(self) -> Dict[str, Any]:
        """
        Materialize the prospector config with the user overrides merged in.

        Returns:
            Merged prospector configuration
        """
        self._require_read()
        config = self._materializer().load_yaml(
            self._manifest.prospector,
            overrides=self.fileset_config.prospector,
            kind="prospector",
            require_mapping=True
        )

        logger.debug(f"Merged prospector config for fileset {self.module_name}/{self.name}: {config}")
        return config

    def get_pipeline_id(self) -> str:
        """Return the ingest pipeline ID."""
        self._require_read()
        return self._pipeline_id(self._manifest, self._vars)

    def get_pipeline(self) -> Tuple[str, Dict[str, Any]]:
        """
        Materialize the ingest pipeline definition.

        Returns:
            Tuple of (pipeline ID, pipeline body)
        """
        self._require_read()
        materializer = self._materializer()
        path = materializer.expand_path(self._manifest.ingest_pipeline, "ingest pipeline")
        content = materializer.load_json(
            self._manifest.ingest_pipeline, kind="pipeline", require_mapping=True
        )
        return format_pipeline_id(self.module_name, self.name, path), content

    def _pipeline_id(self, manifest: Manifest, variables: Dict[str, Any]) -> str:
        path = Materializer(self.path, variables).expand_path(manifest.ingest_pipeline, "ingest pipeline")
        return format_pipeline_id(self.module_name, self.name, path)

    def _materializer(self) -> Materializer:
        return Materializer(self.path, self._vars)

    def _require_read(self) -> None:
        if self._vars is None:
            raise FilesetError(f"Fileset {self.module_name}/{self.name} has not been read")


def list_filesets(modules_path: Union[str, Path], module: str) -> List[str]:
    """
    List the filesets of a module on disk.

    Returns:
        Sorted names of the module subdirectories that contain a manifest

    Raises:
        MissingModule: If the module directory does not exist
    """
    module_path = Path(modules_path) / module
    if not module_path.is_dir():
        raise MissingModule(module, str(module_path))

    return sorted(
        entry.name for entry in module_path.iterdir()
        if entry.is_dir() and (entry / MANIFEST_FILE).is_file()
    )
