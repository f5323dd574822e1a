"""Domain exception hierarchy.

Inner layers raise these; the catalog service is the outermost boundary and
turns each one into a ``Failure`` value with the matching ``ErrorKind``.
"""

from __future__ import annotations


class RefCatalogError(Exception):
    """Base exception for the entire package."""


# ── Caller input ────────────────────────────────────────────────────────────


class ConfigurationError(RefCatalogError):
    """No repository address was supplied, or it cannot be used."""


# ── Transport errors ────────────────────────────────────────────────────────


class RefConnectionError(RefCatalogError):
    """The remote could not be reached or refused the session (incl. auth)."""


class FetchTimeoutError(RefCatalogError):
    """The remote did not finish its advertisement within the time ceiling."""


# ── Wire format ─────────────────────────────────────────────────────────────


class ProtocolError(RefCatalogError):
    """The reference advertisement was malformed or truncated."""
