"""SSRF guard for pages fetched directly by HttpRenderer.

A URL is allowed only if it is http(s) and every address its host resolves
to is public. IPv4-mapped IPv6 addresses are checked as their IPv4 form.
Resolution goes through the event loop so checks never block it.
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Union
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")

BLOCKED_HOSTNAMES = frozenset({"localhost", "localhost.localdomain", "ip6-localhost"})

BLOCKED_NETWORKS = tuple(
    ipaddress.ip_network(network)
    for network in (
        "0.0.0.0/8",
        "10.0.0.0/8",
        "100.64.0.0/10",  # carrier-grade NAT
        "127.0.0.0/8",
        "169.254.0.0/16",  # link-local, cloud metadata
        "172.16.0.0/12",
        "192.0.0.0/24",
        "192.168.0.0/16",
        "198.18.0.0/15",
        "224.0.0.0/4",
        "240.0.0.0/4",
        "::/128",
        "::1/128",
        "fc00::/7",
        "fe80::/10",
        "ff00::/8",
    )
)


def is_blocked_address(address: Union[str, ipaddress.IPv4Address, ipaddress.IPv6Address]) -> bool:
    """True if the address is loopback, private, link-local or otherwise internal."""
    if isinstance(address, str):
        # Drop IPv6 zone ids such as fe80::1%eth0
        address = ipaddress.ip_address(address.split("%", 1)[0])
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped
    return any(address in network for network in BLOCKED_NETWORKS)


def checked_hostname(url: str) -> str:
    """Hostname of an http(s) URL; ValueError for other schemes or internal names."""
    parsed = urlparse(url)
    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValueError(f"URL scheme not allowed: {parsed.scheme or '(none)'}")

    hostname = parsed.hostname
    if not hostname:
        raise ValueError("URL has no host")
    if hostname.lower().rstrip(".") in BLOCKED_HOSTNAMES:
        raise ValueError(f"URL points to an internal host: {hostname}")
    return hostname


async def validate_url(url: str) -> None:
    """
    Resolve the URL's host and reject it if any address is internal.

    Raises:
        ValueError: bad scheme, missing host, unresolvable or internal host
    """
    hostname = checked_hostname(url)

    loop = asyncio.get_running_loop()
    try:
        addr_info = await loop.getaddrinfo(hostname, None)
    except socket.gaierror as e:
        raise ValueError(f"Cannot resolve host: {hostname}") from e

    for *_, sockaddr in addr_info:
        if is_blocked_address(sockaddr[0]):
            logger.warning(f"SSRF blocked: {url} resolves to {sockaddr[0]}")
            raise ValueError(f"URL points to an internal address: {hostname}")
