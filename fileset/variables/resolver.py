"""
Variable resolution for fileset manifests.

Variables are resolved strictly in declaration order. Each value is treated
as a template, so it can refer to the built-in variables and to any
variable declared before it. User overrides are applied last and are never
templated.
"""

import logging
import platform
from typing import Any, Dict, Iterable, List, Optional

from fileset.exceptions import MissingVariableField, TemplateError
from fileset.types import ValueKind
from .builtin import HostnameProvider, get_builtin_vars
from .substitution import TemplateRenderer


logger = logging.getLogger(__name__)


def current_os() -> str:
    """Return the identifier used for OS specific variable values, e.g. 'linux'."""
    return platform.system().lower()


class VariableResolver:
    """
    Resolves manifest variable declarations into a variable environment.

    Precedence, lowest to highest:
    - declared default
    - OS specific value under the declaration's 'os' key
    - user override
    """

    def __init__(
        self,
        hostname_provider: Optional[HostnameProvider] = None,
        os_name: Optional[str] = None
    ):
        """
        Initialize resolver.

        Args:
            hostname_provider: Callable returning the host name (for the builtin vars)
            os_name: OS identifier to select 'os' values with; defaults to the running OS
        """
        self.hostname_provider = hostname_provider
        self.os_name = os_name or current_os()
        self.renderer = TemplateRenderer()

    def resolve(
        self,
        declarations: Iterable[Dict[str, Any]],
        overrides: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Resolve the variables of a manifest.

        Args:
            declarations: Variable declarations in manifest order
            overrides: User supplied values, applied verbatim

        Returns:
            Variable environment including the 'builtin' entry

        Raises:
            MissingVariableField: If a declaration lacks 'name' or 'default'
            TemplateError: If a value cannot be rendered
            HostResolutionError: If the built-in variables cannot be computed
        """
        variables: Dict[str, Any] = {}
        variables['builtin'] = get_builtin_vars(self.hostname_provider)

        for index, declaration in enumerate(declarations):
            name = declaration.get('name') if isinstance(declaration, dict) else None
            if not isinstance(name, str):
                raise MissingVariableField('name', index)

            if 'default' not in declaration:
                raise MissingVariableField('default', index, name)
            value = declaration['default']

            # OS specific values replace the default on an exact match only
            os_values = declaration.get('os')
            if isinstance(os_values, dict) and self.os_name in os_values:
                value = os_values[self.os_name]
                logger.debug(f"Variable {name}: using value for os '{self.os_name}'")

            try:
                variables[name] = self.resolve_value(value, variables)
            except TemplateError as e:
                raise TemplateError(
                    f"Error resolving variables on {name}: {e}",
                    template=e.template,
                    variable=name,
                    undefined_vars=e.undefined_vars
                ) from e

        for name, value in (overrides or {}).items():
            logger.debug(f"Variable {name} overridden by configuration")
            variables[name] = value

        return variables

    def resolve_value(self, value: Any, variables: Dict[str, Any]) -> Any:
        """
        Resolve a single value against the environment built so far.

        Strings are rendered, string elements of sequences are rendered and
        any other value is returned unchanged.
        """
        kind = ValueKind.of(value)

        if kind == ValueKind.STRING:
            return self.renderer.render(value, variables)

        elif kind == ValueKind.SEQUENCE:
            transformed: List[Any] = []
            for item in value:
                if isinstance(item, str):
                    try:
                        transformed.append(self.renderer.render(item, variables))
                    except TemplateError as e:
                        raise TemplateError(
                            f"array: {e}",
                            template=e.template,
                            undefined_vars=e.undefined_vars
                        ) from e
                else:
                    transformed.append(item)
            return transformed

        else:
            return value


def resolve_variables(
    declarations: Iterable[Dict[str, Any]],
    os_name: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    hostname_provider: Optional[HostnameProvider] = None
) -> Dict[str, Any]:
    """Resolve declarations with a one-off VariableResolver."""
    resolver = VariableResolver(hostname_provider=hostname_provider, os_name=os_name)
    return resolver.resolve(declarations, overrides)
