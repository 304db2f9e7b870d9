"""Country lookup for client IP addresses."""

from __future__ import annotations

from abc import ABC, abstractmethod
from ipaddress import IPv4Address, IPv6Address

__all__ = ["GeoIpProvider", "NoopGeoIp"]


class GeoIpProvider(ABC):
    """Resolves an IP address to an ISO 3166-1 alpha-2 country code."""

    @abstractmethod
    async def lookup(self, ip: IPv4Address | IPv6Address) -> str | None:
        """Return the country code, or None when unknown."""


class NoopGeoIp(GeoIpProvider):
    """Provider that never knows the country; useful for local development."""

    async def lookup(self, ip: IPv4Address | IPv6Address) -> str | None:
        return None