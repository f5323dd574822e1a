"""Reference classification — split an advertisement into branch and tag names."""

from __future__ import annotations

from typing import Iterable

from ref_catalog.domain.entities import AdvertisedRef, RefKind

BRANCH_PREFIX = "refs/heads/"
TAG_PREFIX = "refs/tags/"

_NAMESPACE_PREFIXES: dict[RefKind, str] = {
    RefKind.BRANCH: BRANCH_PREFIX,
    RefKind.TAG: TAG_PREFIX,
}


def kind_of(name: str) -> RefKind | None:
    """Return the namespace a full ref name belongs to, or *None* (HEAD, notes, pulls…)."""
    for kind, prefix in _NAMESPACE_PREFIXES.items():
        if name.startswith(prefix) and len(name) > len(prefix):
            return kind
    return None


def short_name(name: str) -> str:
    """Strip the branch/tag namespace prefix; other names are returned unchanged."""
    kind = kind_of(name)
    if kind is None:
        return name
    return name[len(_NAMESPACE_PREFIXES[kind]) :]


def classify(refs: Iterable[AdvertisedRef], kind: RefKind) -> list[str]:
    """Short names of every ref of *kind*, in advertisement order.

    An empty result is a legitimate repository state, not an error.
    """
    return [short_name(ref.name) for ref in refs if kind_of(ref.name) is kind]
