"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import unquote, urlsplit

from pydantic import SecretStr

from ref_catalog.domain.entities import SortDirection
from ref_catalog.domain.exceptions import ConfigurationError

SUPPORTED_SCHEMES: frozenset[str] = frozenset({"ssh", "https", "http", "git"})

# user@host:path — the scp-like shorthand git accepts for ssh remotes.
_SCP_LIKE_RE = re.compile(r"^(?:(?P<user>[^@/:]+)@)?(?P<host>[^@/:]+):(?P<path>.+)$")


@dataclass(frozen=True, slots=True)
class RepositoryAddress:
    """A single resolved remote repository.

    Credentials are carried opaquely for the transport that needs them and
    never appear in :attr:`display_url`, ``repr`` or logs.
    """

    scheme: str
    host: str
    path: str
    port: int | None = None
    username: str | None = None
    password: SecretStr | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.scheme not in SUPPORTED_SCHEMES:
            raise ConfigurationError(
                f"Unsupported repository scheme '{self.scheme}'. "
                f"Expected one of: {', '.join(sorted(SUPPORTED_SCHEMES))}"
            )
        if not self.host:
            raise ConfigurationError("Repository address has no host.")
        if not self.path or self.path == "/":
            raise ConfigurationError("Repository address has no path.")

    @classmethod
    def parse(cls, url: str) -> RepositoryAddress:
        """Parse a remote URL as git understands it.

        Accepts ``https://``, ``http://``, ``git://`` and ``ssh://`` URLs as
        well as the scp-like ``[user@]host:path`` form.
        """
        url = url.strip()
        if not url:
            raise ConfigurationError("There is no Git repository defined")

        if "://" not in url:
            match = _SCP_LIKE_RE.match(url)
            if not match:
                raise ConfigurationError(f"Cannot parse repository address: '{url}'")
            return cls(
                scheme="ssh",
                host=match["host"],
                path=match["path"],
                username=match["user"],
            )

        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        if scheme == "git+ssh" or scheme == "ssh+git":
            scheme = "ssh"
        try:
            port = parts.port
        except ValueError as exc:
            raise ConfigurationError(f"Invalid port in repository address: '{url}'") from exc

        password = SecretStr(unquote(parts.password)) if parts.password else None
        return cls(
            scheme=scheme,
            host=parts.hostname or "",
            path=parts.path,
            port=port,
            username=unquote(parts.username) if parts.username else None,
            password=password,
        )

    @property
    def netloc(self) -> str:
        """``host[:port]`` with IPv6 literals bracketed, no credentials."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}" if self.port is not None else host

    @property
    def display_url(self) -> str:
        user = f"{self.username}@" if self.username else ""
        if not self.path.startswith("/"):
            # scp-like form, path relative to the login directory
            return f"{user}{self.netloc}:{self.path}"
        return f"{self.scheme}://{user}{self.netloc}{self.path}"


@dataclass(frozen=True, slots=True)
class SortSpec:
    """How the classified names are ordered."""

    direction: SortDirection = SortDirection.ASCENDING
    version_aware: bool = False

    @classmethod
    def from_options(
        cls, sort_order: SortDirection | str, parse_version: bool = False
    ) -> SortSpec:
        """Build from the two user-facing settings (direction + version toggle)."""
        return cls(
            direction=SortDirection.from_code(sort_order),
            version_aware=bool(parse_version),
        )

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESCENDING
