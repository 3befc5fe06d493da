"""CLI command handlers."""

from .render import render_fileset, list_module_filesets

__all__ = ['render_fileset', 'list_module_filesets']
