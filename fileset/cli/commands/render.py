"""Render and list command implementations."""

import json
import logging
import sys
from argparse import Namespace
from typing import Any, Dict, Optional
import yaml

from fileset.config import load_module_configs
from fileset.exceptions import FilesetError, ManifestUnpackError
from fileset.loader import PreservingLoader
from fileset.fileset import Fileset, list_filesets
from fileset.types import FilesetConfig, ModuleConfig


logger = logging.getLogger(__name__)


def setup_logging(args: Namespace) -> None:
    """Configure logging from the command line flags."""
    log_level = getattr(logging, args.log_level.upper())
    if args.debug:
        log_level = logging.DEBUG
    elif args.quiet:
        log_level = logging.ERROR

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def parse_var_overrides(items: Optional[list]) -> Dict[str, Any]:
    """
    Parse KEY=VALUE variable overrides.

    VALUE is read as a YAML scalar or flow collection, so
    'paths=["/var/log/a.log"]' yields a list.
    """
    overrides: Dict[str, Any] = {}
    for item in items or []:
        if '=' not in item:
            raise ValueError(f"Invalid var format: {item}. Expected KEY=VALUE")
        key, value = item.split('=', 1)
        if not key:
            raise ValueError(f"Invalid KEY in var: {item}")
        try:
            overrides[key] = yaml.load(value, Loader=PreservingLoader) if value else ""
        except yaml.YAMLError:
            overrides[key] = value
    return overrides


def select_module_config(args: Namespace) -> ModuleConfig:
    """Find the module in --config, or fall back to an empty configuration."""
    if getattr(args, 'config', None):
        for module_config in load_module_configs(args.config):
            if module_config.module == args.module:
                return module_config
        logger.info(f"Module {args.module} not found in {args.config}, using defaults")
    return ModuleConfig(module=args.module)


def render_fileset(args: Namespace) -> int:
    """
    Load a fileset and print its rendered configuration as JSON.

    Exit codes: 0 on success, 2 on fileset/configuration errors, 1 otherwise.
    """
    setup_logging(args)

    try:
        module_config = select_module_config(args)
        configured = module_config.fileset_config(args.fileset)
        fileset_config = FilesetConfig(
            enabled=configured.enabled,
            var={**configured.var, **parse_var_overrides(args.var)},
            prospector=configured.prospector
        )

        fileset = Fileset(
            args.modules_path,
            args.fileset,
            module_config,
            fileset_config,
            os_name=args.os_name
        )
        logger.info(f"Loading fileset {args.module}/{args.fileset}")
        fileset.read()

        pipeline_id, pipeline = fileset.get_pipeline()
        output = {
            'pipeline_id': pipeline_id,
            'pipeline': pipeline,
            'prospector': fileset.get_prospector_config(),
            'vars': fileset.vars,
        }
        json.dump(output, sys.stdout, indent=2, default=str)
        sys.stdout.write("\n")
        return 0

    except ManifestUnpackError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code
    except FilesetError as e:
        logger.error(str(e))
        return e.exit_code
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        return 2
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


def list_module_filesets(args: Namespace) -> int:
    """Print the enabled filesets of a module, one per line."""
    setup_logging(args)

    try:
        module_config = select_module_config(args)
        if not module_config.enabled:
            logger.info(f"Module {args.module} is disabled")
            return 0

        available = list_filesets(args.modules_path, args.module)
        for name in module_config.enabled_filesets(available):
            print(name)
        return 0

    except ManifestUnpackError as e:
        for error in e.errors:
            logger.error(f"Validation error: {error.message}")
        return e.exit_code
    except FilesetError as e:
        logger.error(str(e))
        return e.exit_code
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1
