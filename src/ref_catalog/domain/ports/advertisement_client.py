"""Port: reference advertisement client — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from ref_catalog.domain.entities import Advertisement
from ref_catalog.domain.value_objects import RepositoryAddress


class RefAdvertisementClient(Protocol):
    """Abstract contract for reading a remote's reference advertisement."""

    async def fetch_advertisement(self, address: RepositoryAddress) -> Advertisement:
        """Return every advertised reference without transferring object data.

        Raises ``ConfigurationError``, ``RefConnectionError``, ``ProtocolError``
        or ``FetchTimeoutError``.
        """
        ...
