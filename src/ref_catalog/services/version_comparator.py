"""Version-aware name ordering.

Two modes share one entry point:

* plain — case-sensitive comparison of the whole string by code point;
* version-aware — names are split into maximal runs of ASCII digits and
  non-digits (``"v1.10.2-rc3"`` → ``v 1 . 10 . 2 -rc 3``) and compared token
  by token, so ``v1.9`` sorts before ``v1.10``.

Token policy in version-aware mode:

* digits vs digits — numeric magnitude of any length; on equal magnitude the
  run with more leading zeros comes first (``01`` before ``1``);
* text vs text — case-insensitive;
* digits vs text — digits first;
* a name whose tokens are a strict prefix of another's comes first;
* names equal on every token (only a difference in case) fall back to the
  plain order, so two distinct names never compare equal.

Both modes are key-based, which makes each a strict total order and makes
descending order the exact reverse of ascending order.
"""

from __future__ import annotations

import re
from functools import cmp_to_key
from typing import Any, Callable, Iterable

from ref_catalog.domain.value_objects import SortSpec

_TOKEN_RE = re.compile(r"[0-9]+|[^0-9]+")

# Token type ranks: numeric tokens precede textual ones at the same position.
_NUMERIC = 0
_TEXT = 1


def tokenize(name: str) -> list[str]:
    """Split *name* into alternating digit / non-digit runs."""
    return _TOKEN_RE.findall(name)


def _token_key(token: str) -> tuple[Any, ...]:
    if "0" <= token[0] <= "9":
        significant = token.lstrip("0")
        # Magnitude without int(): length first, then digits. Works for any length.
        return (_NUMERIC, len(significant), significant, -len(token))
    return (_TEXT, token.casefold())


def version_key(name: str) -> tuple[Any, ...]:
    """Sort key implementing the version-aware order."""
    return (tuple(_token_key(token) for token in tokenize(name)), name)


def compare(a: str, b: str, spec: SortSpec) -> int:
    """Return -1, 0 or 1 for *a* relative to *b* under *spec*."""
    if spec.version_aware:
        key_a: Any = version_key(a)
        key_b: Any = version_key(b)
    else:
        key_a, key_b = a, b

    result = (key_a > key_b) - (key_a < key_b)
    return -result if spec.descending else result


def sort_names(names: Iterable[str], spec: SortSpec) -> list[str]:
    """Return a new list of *names* ordered by :func:`compare`."""
    key = version_key if spec.version_aware else None
    return sorted(names, key=key, reverse=spec.descending)


def comparator_key(spec: SortSpec) -> Callable[[str], Any]:
    """``functools.cmp_to_key`` wrapper for callers that need a key object."""
    return cmp_to_key(lambda a, b: compare(a, b, spec))
