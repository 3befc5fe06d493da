"""Fileset loader exceptions."""

from typing import List, Optional
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class FilesetError(Exception):
    """Base class for every error raised while loading a fileset."""
    exit_code = 2


class MissingModule(FilesetError):
    """Raised when the module directory does not exist."""

    def __init__(self, module: str, module_path: str):
        self.module = module
        self.module_path = module_path
        super().__init__(f"Module {module} ({module_path}) doesn't exist.")


class ManifestReadError(FilesetError):
    """Raised when manifest.yml cannot be read or is not valid YAML."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        super().__init__(f"Error reading manifest file {path}: {cause}")


class ManifestUnpackError(FilesetError):
    """Raised when the manifest document has the wrong shape.

    Collects every problem found in the document so they can be reported
    together, the same way the CLI reports them one per line.
    """

    prefix = "Error unpacking manifest"

    def __init__(self, path: str, errors: List[ValidationError]):
        self.path = path
        self.errors = errors

        messages = [f"{self.prefix} {path}:"]
        for error in errors:
            messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))


class ConfigError(ManifestUnpackError):
    """Raised when a module configuration file has the wrong shape."""

    prefix = "Error unpacking module config"


class MissingVariableField(FilesetError):
    """Raised when a variable declaration lacks 'name' or 'default'."""

    def __init__(self, field: str, index: int, name: Optional[str] = None):
        self.field = field
        self.index = index
        self.name = name
        if name is None:
            message = f"Variable {index} doesn't have a string '{field}' key"
        else:
            message = f"Variable {name} doesn't have a '{field}' key"
        super().__init__(message)


class TemplateError(FilesetError):
    """Raised when a template cannot be parsed or evaluated.

    Attributes:
        template: The offending template text
        variable: Variable being resolved, if any
        undefined_vars: Field references that had no value
    """

    def __init__(
        self,
        message: str,
        template: str = "",
        variable: Optional[str] = None,
        undefined_vars: Optional[List[str]] = None
    ):
        self.template = template
        self.variable = variable
        self.undefined_vars = undefined_vars or []
        super().__init__(message)


class HostResolutionError(FilesetError):
    """Raised when the local host name cannot be obtained."""


class FileReadError(FilesetError):
    """Raised when a file referenced by the manifest cannot be read."""

    exit_code = 1

    def __init__(self, kind: str, path: str, cause: Exception):
        self.kind = kind
        self.path = path
        super().__init__(f"Error reading {kind} file {path}: {cause}")


class ConfigParseError(FilesetError):
    """Raised when a materialized file does not parse as YAML or JSON, or is not a mapping where one is required."""

    def __init__(self, kind: str, path: str, cause: Exception):
        self.kind = kind
        self.path = path
        super().__init__(f"Error parsing {kind} file {path}: {cause}")


class OverrideMergeError(FilesetError):
    """Raised when overrides cannot be merged into a materialized document."""
