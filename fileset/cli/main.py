"""Main CLI entry point for the fileset loader."""

import argparse
import sys
from typing import Optional

from .commands import list_module_filesets, render_fileset


def _add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Suppress non-error output'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warning', 'error'],
        default='warning',
        help='Set log level'
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the fileset CLI."""
    parser = argparse.ArgumentParser(
        prog='fileset',
        description='Load log module filesets and render their configuration'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Render command
    render_parser = subparsers.add_parser(
        'render',
        help='Render the prospector config and ingest pipeline of a fileset'
    )
    render_parser.add_argument(
        '--modules-path',
        type=str,
        required=True,
        help='Directory holding the modules'
    )
    render_parser.add_argument(
        '--module',
        type=str,
        required=True,
        help='Module name'
    )
    render_parser.add_argument(
        '--fileset',
        type=str,
        required=True,
        help='Fileset name'
    )
    render_parser.add_argument(
        '--config',
        type=str,
        help='Path to a YAML module configuration file'
    )
    render_parser.add_argument(
        '--var',
        action='append',
        metavar='KEY=VALUE',
        help='Variable override, VALUE is parsed as YAML (can be specified multiple times)'
    )
    render_parser.add_argument(
        '--os',
        type=str,
        dest='os_name',
        help='OS identifier used for OS specific variables (default: running OS)'
    )
    _add_logging_arguments(render_parser)

    # List command
    list_parser = subparsers.add_parser('list', help='List the filesets of a module')
    list_parser.add_argument(
        '--modules-path',
        type=str,
        required=True,
        help='Directory holding the modules'
    )
    list_parser.add_argument(
        '--module',
        type=str,
        required=True,
        help='Module name'
    )
    list_parser.add_argument(
        '--config',
        type=str,
        help='Path to a YAML module configuration file (disabled filesets are skipped)'
    )
    _add_logging_arguments(list_parser)

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'render':
        return render_fileset(parsed_args)
    elif parsed_args.command == 'list':
        return list_module_filesets(parsed_args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
