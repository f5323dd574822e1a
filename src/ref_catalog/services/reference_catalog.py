"""Reference catalog use case — the single entry point for the host system.

Depends only on the :class:`RefAdvertisementClient` port and the pure service
modules. Every failure is returned as a value attached to the call that
produced it; nothing is stored on the service between calls.
"""

from __future__ import annotations

import asyncio
import logging

from ref_catalog.domain.entities import (
    CatalogResult,
    ClassifiedRefList,
    ErrorKind,
    Failure,
    RefKind,
    Success,
)
from ref_catalog.domain.exceptions import (
    ConfigurationError,
    FetchTimeoutError,
    ProtocolError,
    RefCatalogError,
    RefConnectionError,
)
from ref_catalog.domain.ports.advertisement_client import RefAdvertisementClient
from ref_catalog.domain.value_objects import RepositoryAddress, SortSpec
from ref_catalog.infrastructure.advertisement_client import GitRefAdvertisementClient
from ref_catalog.infrastructure.config import Settings, get_settings
from ref_catalog.services.ref_classifier import classify
from ref_catalog.services.version_comparator import sort_names

logger = logging.getLogger(__name__)

_ERROR_KINDS: list[tuple[type[RefCatalogError], ErrorKind]] = [
    (ConfigurationError, ErrorKind.CONFIGURATION),
    (RefConnectionError, ErrorKind.CONNECTION),
    (ProtocolError, ErrorKind.PROTOCOL),
    (FetchTimeoutError, ErrorKind.TIMEOUT),
]

NO_REPOSITORY_MESSAGE = "There is no Git repository defined"


def _error_kind(exc: RefCatalogError) -> ErrorKind:
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(exc, exc_type):
            return kind
    raise TypeError(f"Unmapped catalog error {type(exc).__name__}") from exc


class ReferenceCatalogService:
    """Lists a remote's branches or tags as a sorted, display-ready list.

    Parameters
    ----------
    client:
        Adapter that reads a remote's reference advertisement.
    """

    def __init__(self, client: RefAdvertisementClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ReferenceCatalogService:
        """Wire the default git client from configuration."""
        return cls(GitRefAdvertisementClient.from_settings(settings or get_settings()))

    # ── Public entry points ─────────────────────────────────────────────

    async def list(
        self,
        address: RepositoryAddress | str | None,
        kind: RefKind | str,
        spec: SortSpec | None = None,
    ) -> CatalogResult:
        """Fetch, classify and sort; return ``Success`` or ``Failure``."""
        spec = spec or SortSpec()
        try:
            resolved = self._resolve_address(address)
            ref_kind = RefKind.from_code(kind)
            logger.info("Listing %ss of %s", ref_kind.value, resolved.display_url)
            advertisement = await self._client.fetch_advertisement(resolved)
        except RefCatalogError as exc:
            failure = Failure(kind=_error_kind(exc), message=str(exc))
            logger.warning("Reference listing failed (%s): %s", failure.kind.value, failure.message)
            return failure

        names = sort_names(classify(advertisement.refs, ref_kind), spec)
        logger.info("Found %d %ss in %s", len(names), ref_kind.value, resolved.display_url)
        return Success(refs=ClassifiedRefList(kind=ref_kind, names=tuple(names)))

    def list_blocking(
        self,
        address: RepositoryAddress | str | None,
        kind: RefKind | str,
        spec: SortSpec | None = None,
    ) -> CatalogResult:
        """Synchronous :meth:`list` for hosts without an event loop."""
        return asyncio.run(self.list(address, kind, spec))

    # ── Helpers ─────────────────────────────────────────────────────────

    @staticmethod
    def _resolve_address(address: RepositoryAddress | str | None) -> RepositoryAddress:
        if address is None:
            raise ConfigurationError(NO_REPOSITORY_MESSAGE)
        if isinstance(address, RepositoryAddress):
            return address
        return RepositoryAddress.parse(address)
