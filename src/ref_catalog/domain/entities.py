"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from ref_catalog.domain.exceptions import ConfigurationError


class RefKind(str, Enum):
    """Which namespace of references the caller wants listed."""

    BRANCH = "branch"
    TAG = "tag"

    @classmethod
    def from_code(cls, code: RefKind | str) -> RefKind:
        """Accept the enum itself, its value, or a legacy ``PT_*`` code."""
        if isinstance(code, RefKind):
            return code
        normalised = code.strip()
        for kind, legacy in ((cls.BRANCH, "PT_BRANCH"), (cls.TAG, "PT_TAG")):
            if normalised == legacy or normalised.lower() == kind.value:
                return kind
        raise ConfigurationError(f"Wrong reference type: '{code}'")


class SortDirection(str, Enum):
    """Direction applied after the base ordering."""

    ASCENDING = "ascending"
    DESCENDING = "descending"

    @classmethod
    def from_code(cls, code: SortDirection | str) -> SortDirection:
        """Accept the enum itself, its value, or a legacy ``S_ASC``/``S_DESC`` code."""
        if isinstance(code, SortDirection):
            return code
        normalised = code.strip()
        for direction, legacy in ((cls.ASCENDING, "S_ASC"), (cls.DESCENDING, "S_DESC")):
            if normalised == legacy or normalised.lower() == direction.value:
                return direction
        raise ConfigurationError(f"Wrong sort order: '{code}'")


class ErrorKind(str, Enum):
    """Classification of a failed catalog request."""

    CONFIGURATION = "configuration"
    CONNECTION = "connection"
    PROTOCOL = "protocol"
    TIMEOUT = "timeout"


@dataclass(frozen=True, slots=True)
class AdvertisedRef:
    """One (name, revision) pair from a reference advertisement."""

    name: str  # full namespaced form, e.g. "refs/heads/main"
    revision_id: str
    peeled_id: str | None = None


@dataclass(frozen=True, slots=True)
class Advertisement:
    """Everything a remote sent before object negotiation would begin."""

    refs: tuple[AdvertisedRef, ...] = ()
    capabilities: tuple[str, ...] = ()

    @property
    def head_target(self) -> str | None:
        """Branch that the remote HEAD points at, if the server said so."""
        for capability in self.capabilities:
            if capability.startswith("symref=HEAD:"):
                return capability[len("symref=HEAD:") :]
        return None

    @property
    def agent(self) -> str | None:
        for capability in self.capabilities:
            if capability.startswith("agent="):
                return capability[len("agent=") :]
        return None


@dataclass(frozen=True, slots=True)
class ClassifiedRefList:
    """Short reference names of a single kind, in display order."""

    kind: RefKind
    names: tuple[str, ...] = field(default_factory=tuple)


# ── Catalog result (tagged variant) ─────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Success:
    """The full classified, sorted list."""

    refs: ClassifiedRefList

    @property
    def names(self) -> list[str]:
        return list(self.refs.names)


@dataclass(frozen=True, slots=True)
class Failure:
    """Why a single catalog request failed."""

    kind: ErrorKind
    message: str


CatalogResult = Union[Success, Failure]
