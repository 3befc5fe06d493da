"""Ingest pipeline identifiers."""

import os


def format_pipeline_id(module: str, fileset: str, path: str) -> str:
    """Generate the ID under which the ingest pipeline is registered."""
    return f"{module}-{fileset}-{remove_ext(os.path.basename(path))}"


def remove_ext(path: str) -> str:
    """
    Return the file name without its extension.

    Everything from the last dot of the final path element is dropped.
    If that element has no dot the input is returned unchanged.
    """
    separators = {os.sep, '/'}
    if os.altsep:
        separators.add(os.altsep)

    for i in range(len(path) - 1, -1, -1):
        if path[i] in separators:
            break
        if path[i] == '.':
            return path[:i]
    return path
