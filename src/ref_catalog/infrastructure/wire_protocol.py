"""Git wire protocol (v0/v1) — pkt-line framing and reference advertisement parsing.

Only the part of the protocol that precedes object negotiation is
implemented: the remote's list of references and its capabilities.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import replace

from ref_catalog.domain.entities import AdvertisedRef, Advertisement
from ref_catalog.domain.exceptions import ProtocolError, RefConnectionError

FLUSH_PKT = b"0000"
MAX_PKT_LENGTH = 65520

_LENGTH_RE = re.compile(rb"^[0-9a-fA-F]{4}$")
_OBJECT_ID_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")

_CAPABILITIES_PLACEHOLDER = "capabilities^{}"
_PEELED_SUFFIX = "^{}"
_SMART_SERVICE_LINE = b"# service=git-upload-pack"


def encode_pkt_line(payload: bytes) -> bytes:
    """Frame *payload* as a single pkt-line."""
    length = len(payload) + 4
    if length > MAX_PKT_LENGTH:
        raise ProtocolError(f"pkt-line payload too long ({len(payload)} bytes)")
    return f"{length:04x}".encode("ascii") + payload


class PktLineReader:
    """Reads pkt-lines from an ``asyncio.StreamReader``."""

    def __init__(self, stream: asyncio.StreamReader) -> None:
        self._stream = stream
        self._packets_read = 0

    async def read(self) -> bytes | None:
        """Return the next payload, or ``None`` for a flush packet."""
        try:
            header = await self._stream.readexactly(4)
        except asyncio.IncompleteReadError as exc:
            if not exc.partial and self._packets_read == 0:
                raise RefConnectionError("The remote end hung up unexpectedly") from exc
            raise ProtocolError("Reference advertisement ended before its flush packet") from exc

        if not _LENGTH_RE.match(header):
            raise ProtocolError(f"Invalid pkt-line length header {header!r}")

        self._packets_read += 1
        length = int(header, 16)
        if length == 0:
            return None
        if length < 4:
            raise ProtocolError(f"Unexpected special packet {header.decode('ascii')} in advertisement")
        if length > MAX_PKT_LENGTH:
            raise ProtocolError(f"pkt-line length {length} exceeds {MAX_PKT_LENGTH}")

        try:
            return await self._stream.readexactly(length - 4)
        except asyncio.IncompleteReadError as exc:
            raise ProtocolError(
                f"Truncated pkt-line: expected {length - 4} bytes, got {len(exc.partial)}"
            ) from exc


def reader_for_bytes(data: bytes) -> PktLineReader:
    """Wrap an already-received body so it can be read like a stream."""
    stream = asyncio.StreamReader()
    stream.feed_data(data)
    stream.feed_eof()
    return PktLineReader(stream)


# ── Advertisement parsing ───────────────────────────────────────────────────


def _decode(payload: bytes) -> str:
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ProtocolError(f"Advertisement line is not valid UTF-8: {payload[:80]!r}") from exc
    return text[:-1] if text.endswith("\n") else text


def _check_object_id(object_id: str, line: str) -> None:
    if not _OBJECT_ID_RE.match(object_id):
        raise ProtocolError(f"Invalid object id in advertisement line {line!r}")


class _RefCollector:
    """Accumulates refs in advertisement order, enforcing name uniqueness."""

    def __init__(self) -> None:
        self.refs: list[AdvertisedRef] = []
        self._seen: set[str] = set()

    def add(self, revision_id: str, name: str) -> None:
        if name.endswith(_PEELED_SUFFIX):
            base = name[: -len(_PEELED_SUFFIX)]
            last = self.refs[-1] if self.refs else None
            if last is None or last.name != base or last.peeled_id is not None:
                raise ProtocolError(f"Peeled entry {name} does not follow {base}")
            self.refs[-1] = replace(last, peeled_id=revision_id)
            return

        if name in self._seen:
            raise ProtocolError(f"Duplicate reference {name} in advertisement")
        self._seen.add(name)
        self.refs.append(AdvertisedRef(name=name, revision_id=revision_id))


async def read_advertisement(reader: PktLineReader) -> Advertisement:
    """Read refs and capabilities up to the terminating flush packet."""
    collector = _RefCollector()
    capabilities: tuple[str, ...] = ()
    first = True

    while True:
        payload = await reader.read()
        if payload is None:
            break
        line = _decode(payload)

        if line.startswith("ERR "):
            raise RefConnectionError(f"Remote refused the request: {line[4:].strip()}")

        if first and line.startswith("version "):
            version = line[len("version ") :].strip()
            if version != "1":
                raise ProtocolError(f"Unsupported protocol version {version}")
            continue

        if line.startswith("shallow "):
            continue

        if first:
            first = False
            line, _, caps = line.partition("\0")
            capabilities = tuple(caps.split())
        elif "\0" in line:
            raise ProtocolError(f"Capabilities outside the first advertisement line: {line!r}")

        revision_id, sep, name = line.partition(" ")
        if not sep or not name or " " in name:
            raise ProtocolError(f"Malformed advertisement line {line!r}")
        _check_object_id(revision_id, line)

        if name == _CAPABILITIES_PLACEHOLDER:
            # Empty repository: only the capability line is sent.
            if collector.refs or revision_id.strip("0"):
                raise ProtocolError(f"Unexpected {_CAPABILITIES_PLACEHOLDER} line {line!r}")
            continue

        collector.add(revision_id, name)

    return Advertisement(refs=tuple(collector.refs), capabilities=capabilities)


async def read_smart_http_advertisement(body: bytes) -> Advertisement:
    """Parse an ``info/refs?service=git-upload-pack`` response body."""
    reader = reader_for_bytes(body)
    try:
        announcement = await reader.read()
    except RefConnectionError as exc:
        raise ProtocolError("Empty smart HTTP response") from exc
    if announcement is None or announcement.rstrip(b"\n") != _SMART_SERVICE_LINE:
        raise ProtocolError("Smart HTTP response does not start with the service announcement")

    # Skip anything up to the flush that closes the announcement section.
    while await reader.read() is not None:
        pass

    return await read_advertisement(reader)


def parse_info_refs(text: str) -> Advertisement:
    """Parse the dumb HTTP ``info/refs`` format (``<id>\\t<name>`` per line)."""
    collector = _RefCollector()
    for line in text.splitlines():
        if not line.strip():
            continue
        revision_id, sep, name = line.partition("\t")
        if not sep or not name:
            raise ProtocolError(f"Malformed info/refs line {line!r}")
        _check_object_id(revision_id, line)
        collector.add(revision_id, name)
    return Advertisement(refs=tuple(collector.refs))
