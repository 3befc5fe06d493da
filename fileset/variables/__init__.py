"""
Variable resolution module.
Built-in host variables, template rendering and layered resolution.
"""

from .builtin import get_builtin_vars
from .substitution import TemplateRenderer, render_template
from .resolver import VariableResolver, resolve_variables, current_os

__all__ = [
    'get_builtin_vars',
    'TemplateRenderer',
    'render_template',
    'VariableResolver',
    'resolve_variables',
    'current_os',
]
