"""git:// adapter — implements the RefAdvertisementClient port over a raw TCP session."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ref_catalog.domain.entities import Advertisement
from ref_catalog.domain.exceptions import RefConnectionError
from ref_catalog.domain.value_objects import RepositoryAddress
from ref_catalog.infrastructure.wire_protocol import (
    FLUSH_PKT,
    PktLineReader,
    encode_pkt_line,
    read_advertisement,
)

logger = logging.getLogger(__name__)

DEFAULT_GIT_PORT = 9418


class GitDaemonAdapter:
    """Speaks to ``git daemon``: request line, advertisement, flush, hang up."""

    def __init__(self, default_port: int = DEFAULT_GIT_PORT) -> None:
        self._default_port = default_port

    async def fetch_advertisement(self, address: RepositoryAddress) -> Advertisement:
        port = address.port or self._default_port
        request = _upload_pack_request(address)
        try:
            reader, writer = await asyncio.open_connection(address.host, port)
        except (OSError, UnicodeError) as exc:
            # The idna codec rejects host labels longer than 63 characters.
            raise RefConnectionError(
                f"Cannot connect to {address.host}:{port}: {exc}"
            ) from exc

        logger.debug("Connected to %s:%s for %s", address.host, port, address.path)
        try:
            writer.write(request)
            await writer.drain()
            advertisement = await read_advertisement(PktLineReader(reader))

            # End the session before any negotiation starts.
            with contextlib.suppress(ConnectionError):
                writer.write(FLUSH_PKT)
                await writer.drain()
            return advertisement
        except OSError as exc:
            raise RefConnectionError(
                f"Connection to {address.host}:{port} failed: {exc}"
            ) from exc
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()


def _upload_pack_request(address: RepositoryAddress) -> bytes:
    """``git-upload-pack <path>\\0host=<host>[:<port>]\\0`` as a pkt-line."""
    host = address.netloc
    return encode_pkt_line(f"git-upload-pack {address.path}\0host={host}\0".encode("utf-8"))
