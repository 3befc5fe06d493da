"""Built-in variables derived from the local host."""

import logging
import socket
from typing import Callable, Dict, Optional

from fileset.exceptions import HostResolutionError


logger = logging.getLogger(__name__)

HostnameProvider = Callable[[], str]


def get_builtin_vars(hostname_provider: Optional[HostnameProvider] = None) -> Dict[str, str]:
    """
    Compute the built-in variables.

    The host name is split on its first dot: the left part is the hostname,
    the rest (possibly empty) is the domain.

    Args:
        hostname_provider: Callable returning the host name; defaults to socket.gethostname

    Returns:
        Dictionary with 'hostname' and 'domain'

    Raises:
        HostResolutionError: If the host name cannot be obtained or is empty
    """
    provider = hostname_provider or socket.gethostname
    try:
        host = provider()
    except OSError as e:
        raise HostResolutionError(f"Error getting the hostname: {e}") from e

    if not host:
        raise HostResolutionError("Error getting the hostname: empty hostname")

    hostname, _, domain = host.partition('.')
    logger.debug(f"Built-in variables: hostname={hostname!r} domain={domain!r}")

    return {
        'hostname': hostname,
        'domain': domain,
    }
