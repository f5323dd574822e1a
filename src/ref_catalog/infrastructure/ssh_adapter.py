"""ssh adapter — implements the RefAdvertisementClient port via the system ssh client."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex

from ref_catalog.domain.entities import Advertisement
from ref_catalog.domain.exceptions import RefConnectionError
from ref_catalog.domain.value_objects import RepositoryAddress
from ref_catalog.infrastructure.wire_protocol import (
    FLUSH_PKT,
    PktLineReader,
    read_advertisement,
)

logger = logging.getLogger(__name__)


class SshAdapter:
    """Runs ``git-upload-pack`` on the remote host and reads its advertisement.

    Authentication is left to the ssh client (agent, keys, config). ``BatchMode``
    keeps it from prompting, so a rejected login fails fast instead of hanging.
    Passwords embedded in the address are never passed on.
    """

    def __init__(self, ssh_command: str = "ssh") -> None:
        self._command = shlex.split(ssh_command)
        if not self._command:
            raise ValueError("ssh_command must not be empty")

    def build_argv(self, address: RepositoryAddress) -> list[str]:
        argv = [*self._command, "-o", "BatchMode=yes"]
        if address.port is not None:
            argv += ["-p", str(address.port)]
        target = f"{address.username}@{address.host}" if address.username else address.host
        argv += [target, f"git-upload-pack {shlex.quote(_remote_path(address.path))}"]
        return argv

    async def fetch_advertisement(self, address: RepositoryAddress) -> Advertisement:
        argv = self.build_argv(address)
        logger.debug("Running %s", " ".join(argv[:-1]))
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise RefConnectionError(
                f"Cannot start ssh command '{self._command[0]}': {exc}"
            ) from exc

        try:
            try:
                advertisement = await read_advertisement(PktLineReader(process.stdout))
            except RefConnectionError as exc:
                detail = await _stderr_text(process)
                raise RefConnectionError(f"{exc}: {detail}" if detail else str(exc)) from exc

            # Upload-pack exits once it sees a flush instead of a want list.
            with contextlib.suppress(ConnectionError):
                process.stdin.write(FLUSH_PKT)
                await process.stdin.drain()
                process.stdin.close()
            await process.wait()
            return advertisement
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()


def _remote_path(path: str) -> str:
    # ssh://host/~user/repo addresses a home directory, like git itself does.
    if path.startswith("/~"):
        return path[1:]
    return path


async def _stderr_text(process: asyncio.subprocess.Process) -> str:
    if process.stderr is None:
        return ""
    raw = await process.stderr.read()
    return raw.decode("utf-8", errors="replace").strip()
