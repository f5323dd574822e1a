"""Scheme-dispatching RefAdvertisementClient with a hard time ceiling."""

from __future__ import annotations

import asyncio
import logging
from typing import Mapping

from ref_catalog.domain.entities import Advertisement
from ref_catalog.domain.exceptions import ConfigurationError, FetchTimeoutError
from ref_catalog.domain.ports.advertisement_client import RefAdvertisementClient
from ref_catalog.domain.value_objects import RepositoryAddress
from ref_catalog.infrastructure.config import Settings
from ref_catalog.infrastructure.git_daemon_adapter import GitDaemonAdapter
from ref_catalog.infrastructure.smart_http_adapter import SmartHttpAdapter
from ref_catalog.infrastructure.ssh_adapter import SshAdapter

logger = logging.getLogger(__name__)


class GitRefAdvertisementClient:
    """Picks the transport for an address and bounds the whole fetch in time.

    Parameters
    ----------
    transports:
        ``{scheme: adapter}`` mapping. Each adapter must release its
        connection when the fetch is cancelled.
    timeout_seconds:
        Ceiling for connect + handshake + advertisement. On expiry the
        in-flight fetch is cancelled and ``FetchTimeoutError`` is raised.
    """

    def __init__(
        self,
        transports: Mapping[str, RefAdvertisementClient],
        timeout_seconds: float = 30.0,
    ) -> None:
        self._transports = dict(transports)
        self._timeout = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> GitRefAdvertisementClient:
        http = SmartHttpAdapter(
            user_agent=settings.user_agent,
            timeout=settings.fetch_timeout_seconds,
        )
        return cls(
            transports={
                "https": http,
                "http": http,
                "git": GitDaemonAdapter(default_port=settings.git_daemon_port),
                "ssh": SshAdapter(ssh_command=settings.ssh_command),
            },
            timeout_seconds=settings.fetch_timeout_seconds,
        )

    async def fetch_advertisement(self, address: RepositoryAddress) -> Advertisement:
        transport = self._transports.get(address.scheme)
        if transport is None:
            raise ConfigurationError(f"No transport available for scheme '{address.scheme}'")

        try:
            advertisement = await asyncio.wait_for(
                transport.fetch_advertisement(address), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            raise FetchTimeoutError(
                f"No complete reference advertisement from {address.display_url} "
                f"within {self._timeout:g} seconds"
            ) from exc

        logger.debug(
            "%s advertised %d refs (agent=%s)",
            address.display_url,
            len(advertisement.refs),
            advertisement.agent or "unknown",
        )
        return advertisement
