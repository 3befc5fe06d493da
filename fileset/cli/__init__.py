"""Command line interface for the fileset loader."""
