# =============================================================================
# Outbound Address Policy
# =============================================================================
"""
DNS resolution and private-address checks for outbound fetches.

Only a single resolved address is checked and the connection itself is made
by hostname, so DNS rebinding between the check and the connect is not
prevented here.
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Awaitable, Callable, Union

from jobdesk.services.fetcher.errors import FetchError, FetchErrorKind


# -----------------------------------------------------------------------------
# Logging Configuration
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------
BLOCKED_NETWORKS = tuple(
    ipaddress.ip_network(cidr)
    for cidr in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "127.0.0.0/8",
        "169.254.0.0/16",
        "172.16.0.0/12",
        "192.168.0.0/16",
        "::1/128",
        "fe80::/10",
    )
)

# Same message for every blocked range
UNSUPPORTED_ADDRESS_MESSAGE = "Unsupported or private address"

Resolver = Callable[[str], Awaitable[str]]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


async def resolve_host(hostname: str) -> str:
    """
    Resolve a hostname to its first address.

    Args:
        hostname: Hostname to resolve.

    Returns:
        The first address returned by the system resolver.

    Raises:
        OSError: If resolution fails or returns no addresses.
    """
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, None, type=socket.SOCK_STREAM)
    if not infos:
        raise socket.gaierror(f"No addresses for {hostname}")
    return infos[0][4][0]


def is_blocked_address(address: IPAddress) -> bool:
    """
    Check whether an address is loopback, private or link-local.

    IPv4-mapped IPv6 addresses are checked as their IPv4 form.

    Args:
        address: Address to check.

    Returns:
        True if outbound requests to the address are not allowed.
    """
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped
    return any(
        address.version == network.version and address in network
        for network in BLOCKED_NETWORKS
    )


async def check_host(hostname: str, resolver: Resolver = resolve_host) -> str:
    """
    Resolve a host and enforce the outbound address policy.

    IP literals are checked directly without a DNS lookup.

    Args:
        hostname: Host from the URL being fetched.
        resolver: Coroutine resolving a hostname to one address.

    Returns:
        The address the host resolved to.

    Raises:
        FetchError: ``dns_failed`` if resolution fails, or
            ``unsupported_address`` if the address is blocked.
    """
    literal = _parse_address(hostname)
    if literal is not None:
        address = literal
    else:
        try:
            resolved = await resolver(hostname)
        except (OSError, UnicodeError) as e:
            logger.warning(f"DNS resolution failed for {hostname}: {e}")
            raise FetchError(FetchErrorKind.DNS_FAILED, "Could not resolve host") from e

        address = _parse_address(resolved)
        if address is None:
            logger.warning(f"Resolver returned a non-IP answer for {hostname}: {resolved!r}")
            raise FetchError(FetchErrorKind.DNS_FAILED, "Could not resolve host")

    if is_blocked_address(address):
        logger.warning(f"Blocked fetch to {hostname} ({address})")
        raise FetchError(FetchErrorKind.UNSUPPORTED_ADDRESS, UNSUPPORTED_ADDRESS_MESSAGE)

    return str(address)


def _parse_address(value: str):
    try:
        # Scope ids ("fe80::1%eth0") are not part of the address itself
        return ipaddress.ip_address(value.strip("[]").split("%", 1)[0])
    except ValueError:
        return None
