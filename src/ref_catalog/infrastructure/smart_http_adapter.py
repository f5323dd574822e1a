"""Smart HTTP adapter — implements the RefAdvertisementClient port for http(s) remotes."""

from __future__ import annotations

import logging

import httpx

from ref_catalog.domain.entities import Advertisement
from ref_catalog.domain.exceptions import FetchTimeoutError, RefConnectionError
from ref_catalog.domain.value_objects import RepositoryAddress
from ref_catalog.infrastructure.wire_protocol import (
    parse_info_refs,
    read_smart_http_advertisement,
)

logger = logging.getLogger(__name__)

_SMART_CONTENT_TYPE = "application/x-git-upload-pack-advertisement"


class SmartHttpAdapter:
    """Reads ``info/refs`` over HTTP, one short-lived ``httpx.AsyncClient`` per call."""

    def __init__(
        self,
        user_agent: str = "git/2.0 (ref-catalog)",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._headers: dict[str, str] = {
            "User-Agent": user_agent,
            "Accept": f"{_SMART_CONTENT_TYPE}, */*;q=0.1",
            "Pragma": "no-cache",
        }
        self._timeout = timeout
        self._transport = transport

    async def fetch_advertisement(self, address: RepositoryAddress) -> Advertisement:
        """GET {repo}/info/refs?service=git-upload-pack → Advertisement."""
        url = f"{address.scheme}://{address.netloc}{address.path.rstrip('/')}/info/refs"
        auth: httpx.BasicAuth | None = None
        if address.username:
            password = address.password.get_secret_value() if address.password else ""
            auth = httpx.BasicAuth(address.username, password)

        logger.debug("Requesting reference advertisement from %s", address.display_url)
        try:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            ) as client:
                resp = await client.get(
                    url,
                    params={"service": "git-upload-pack"},
                    headers=self._headers,
                    auth=auth,
                )
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(
                f"Timed out reading references from {address.display_url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RefConnectionError(
                f"Network error fetching references from {address.display_url}: {exc}"
            ) from exc

        self._raise_for_status(resp, address)

        content_type = resp.headers.get("content-type", "")
        if content_type.startswith(_SMART_CONTENT_TYPE):
            return await read_smart_http_advertisement(resp.content)

        logger.debug("%s answered with the dumb HTTP protocol", address.display_url)
        return parse_info_refs(resp.text)

    @staticmethod
    def _raise_for_status(resp: httpx.Response, address: RepositoryAddress) -> None:
        """Translate non-200 answers into connection errors."""
        if resp.status_code == 200:
            return

        if resp.status_code in (401, 403):
            raise RefConnectionError(
                f"Authentication failed for {address.display_url} (HTTP {resp.status_code})."
            )

        if resp.status_code == 404:
            raise RefConnectionError(f"Repository not found: {address.display_url}")

        raise RefConnectionError(
            f"{address.display_url} returned HTTP {resp.status_code}"
        )
