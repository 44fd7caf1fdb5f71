"""
Server-Side Request Forgery (SSRF) guard.

Validates a user-supplied URL before the service fetches it:
- Only http and https schemes are allowed
- Localhost literals and .local names are refused
- The hostname is resolved and every address is checked against private
  and loopback ranges, so a public-looking name that points inside the
  network is refused as well (DNS rebinding)

Every failure, including parse and lookup errors, is a deny. Callers get a
plain bool; the reason is only logged.

The verdict is a point-in-time check. The address can change between the
check and the connection, so callers that need stronger guarantees should
re-check the connected address with ``is_blocked_address``.
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Any, Iterable, List, Optional
from urllib.parse import urlsplit

from .conf import get_setting

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({'http', 'https'})

BLOCKED_HOSTNAMES = frozenset({'localhost', '127.0.0.1', '0.0.0.0'})
BLOCKED_SUFFIXES = ('.local',)

BLOCKED_NETWORKS = (
    ipaddress.ip_network('10.0.0.0/8'),
    ipaddress.ip_network('172.16.0.0/12'),
    ipaddress.ip_network('192.168.0.0/16'),
    ipaddress.ip_network('127.0.0.0/8'),
    ipaddress.ip_network('0.0.0.0/8'),
    ipaddress.ip_network('::1/128'),
    ipaddress.ip_network('::/128'),
)


def is_blocked_address(address: str) -> bool:
    """
    Check whether an IP address falls inside a blocked network.

    IPv4-mapped IPv6 addresses are checked as IPv4. Anything that is not a
    valid address counts as blocked.
    """
    try:
        ip = ipaddress.ip_address(address.split('%', 1)[0])
    except ValueError:
        return True

    if ip.version == 6 and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped

    return any(ip in network for network in BLOCKED_NETWORKS)


def is_safe_url(candidate: Any) -> bool:
    """
    Check whether a URL is safe to fetch.

    Args:
        candidate: URL supplied by the caller

    Returns:
        True if the URL may be requested, False otherwise
    """
    hostname = _checked_hostname(candidate)
    if hostname is None:
        return False

    try:
        infos = socket.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    except (OSError, UnicodeError) as e:
        return _deny(candidate, f'ResolutionFailure ({e})')

    return _check_addresses(candidate, _addresses(infos))


async def ais_safe_url(candidate: Any, timeout: Optional[float] = None) -> bool:
    """
    Async version of is_safe_url.

    Resolution runs on the event loop and is bounded by ``timeout`` seconds
    (INPUT_GUARD['SSRF']['RESOLVE_TIMEOUT'] by default). A timeout is a deny.
    """
    hostname = _checked_hostname(candidate)
    if hostname is None:
        return False

    if timeout is None:
        timeout = get_setting('SSRF.RESOLVE_TIMEOUT')

    loop = asyncio.get_running_loop()
    try:
        infos = await asyncio.wait_for(
            loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM),
            timeout,
        )
    except asyncio.TimeoutError:
        return _deny(candidate, 'ResolutionFailure (timeout)')
    except (OSError, UnicodeError) as e:
        return _deny(candidate, f'ResolutionFailure ({e})')

    return _check_addresses(candidate, _addresses(infos))


def _checked_hostname(candidate: Any) -> Optional[str]:
    """Run the checks that need no DNS; return the hostname to resolve."""
    if not isinstance(candidate, str):
        _deny(candidate, 'UnparsableURL')
        return None

    try:
        parsed = urlsplit(candidate)
        parsed.port  # raises ValueError for a malformed port
    except ValueError:
        _deny(candidate, 'UnparsableURL')
        return None

    if parsed.scheme not in ALLOWED_SCHEMES:
        _deny(candidate, 'DisallowedScheme')
        return None

    hostname = (parsed.hostname or '').rstrip('.')
    if not hostname:
        _deny(candidate, 'UnparsableURL')
        return None

    if hostname in BLOCKED_HOSTNAMES or hostname.endswith(BLOCKED_SUFFIXES):
        _deny(candidate, 'DisallowedHostnameLiteral')
        return None

    return hostname


def _addresses(infos: Iterable[tuple]) -> List[str]:
    return [info[4][0] for info in infos]


def _check_addresses(candidate: str, addresses: List[str]) -> bool:
    if not addresses:
        return _deny(candidate, 'ResolutionFailure (no addresses)')

    for address in addresses:
        if is_blocked_address(address):
            return _deny(candidate, f'PrivateAddressMatch ({address})')

    return True


def _deny(candidate: Any, reason: str) -> bool:
    logger.debug('Denied URL %r: %s', candidate, reason)
    return False
