"""
dagpush.publish.daemon — Push through a local Docker daemon.

Flow:
  1. connect to the daemon
  2. export the built image to <tmpdir>/dagpush-<name>_<tag>.tar (zstd layers)
  3. load the archive into the daemon
  4. read the loaded image ID out of the load output
  5. tag it as <registry>/<name>:<tag>
  6. push, with X-Registry-Auth when credentials are configured

The archive and every open handle are released on all exit paths.
"""

from __future__ import annotations

import base64
import json
import logging
import re
import tempfile
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Protocol

import anyio.to_thread
import dagger
import docker
from docker.errors import DockerException
from docker.utils import parse_repository_tag
from requests.exceptions import RequestException

from dagpush.config import ImageIdentity, RegistryConfig
from dagpush.errors import ConnectError, ExtractionError, StepError
from dagpush.publish.extract import extract_image_id
from dagpush.publish.strategy import PublishStrategy


logger = logging.getLogger(__name__)

EXPORT_COMPRESSION = dagger.ImageLayerCompression.Zstd

# docker-py passes socket drops and read timeouts through from requests
TRANSPORT_ERRORS = (DockerException, RequestException)


@dataclass(frozen=True)
class PushOptions:
    """Options for a daemon push. registry_auth is an encoded auth token."""
    registry_auth: str = ""


class Daemon(Protocol):
    def load(self, archive: BinaryIO) -> str: ...

    def tag(self, source: str, target: str) -> None: ...

    def push(self, ref: str, options: PushOptions) -> list[dict[str, Any]]: ...

    def close(self) -> None: ...


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# DOCKER ADAPTER
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class DockerDaemon:
    """Daemon backed by the Docker SDK's low-level API client."""

    def __init__(self, client: docker.DockerClient):
        self.client = client

    @classmethod
    def from_env(cls) -> DockerDaemon:
        """Connect using DOCKER_HOST / DOCKER_TLS_VERIFY / DOCKER_CERT_PATH."""
        try:
            client = docker.from_env()
        except TRANSPORT_ERRORS as e:
            raise ConnectError(
                "daemon", f"failed to create docker client: {e}",
            ) from e
        return cls(client)

    def load(self, archive: BinaryIO) -> str:
        """Stream an image archive into the daemon and return its output as text."""
        try:
            messages = list(self.client.api.load_image(archive) or [])
        except TRANSPORT_ERRORS as e:
            raise StepError("load", f"failed to load image: {e}") from e
        return "".join(_message_text(m) for m in messages)

    def tag(self, source: str, target: str) -> None:
        repository, tag = parse_repository_tag(target)
        try:
            ok = self.client.api.tag(source, repository, tag=tag)
        except TRANSPORT_ERRORS as e:
            raise StepError("tag", f"failed to tag image: {e}") from e
        if not ok:
            raise StepError(
                "tag", f"failed to tag image: daemon refused {source} -> {target}",
            )

    def push(self, ref: str, options: PushOptions) -> list[dict[str, Any]]:
        repository, tag = parse_repository_tag(ref)
        auth_config = None
        if options.registry_auth:
            # docker-py re-encodes the header itself, so hand it the record
            auth_config = decode_auth_token(options.registry_auth)

        try:
            stream = self.client.api.push(
                repository, tag=tag, stream=True, decode=True,
                auth_config=auth_config,
            )
            return list(stream)
        except TRANSPORT_ERRORS as e:
            raise StepError("push", f"failed to push image: {e}") from e

    def close(self) -> None:
        self.client.close()


def decode_auth_token(token: str) -> dict[str, str]:
    """Inverse of RegistryConfig.encode()."""
    return json.loads(base64.b64decode(token))


def _message_text(message: Any) -> str:
    if not isinstance(message, dict):
        return f"{message}\n"
    if "stream" in message:
        return str(message["stream"])
    for key in ("error", "status"):
        if key in message:
            return f"{message[key]}\n"
    return ""


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# STRATEGY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
def archive_path(image: ImageIdentity, directory: str | Path | None = None) -> Path:
    """Temporary archive path, unique per image name and tag."""
    base = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    safe = re.sub(r"[^A-Za-z0-9_.-]", "_", f"{image.name}_{image.tag}")
    return base / f"dagpush-{safe}.tar"


def _remove_archive(path: Path) -> None:
    logger.debug("Removing %s", path)
    path.unlink(missing_ok=True)


class DaemonPush(PublishStrategy):
    name = "daemon"

    def __init__(
        self,
        registry: RegistryConfig,
        image: ImageIdentity,
        connect: Callable[[], Daemon] = DockerDaemon.from_env,
        archive_dir: str | Path | None = None,
    ):
        super().__init__(registry, image)
        self.connect = connect
        self.archive_dir = archive_dir

    async def publish(self, container) -> str:
        with ExitStack() as stack:
            logger.info("Connecting to Docker daemon...")
            daemon = await anyio.to_thread.run_sync(self.connect)
            stack.callback(daemon.close)

            path = archive_path(self.image, self.archive_dir)
            stack.callback(_remove_archive, path)
            await self._export(container, path)

            logger.info("Loading image into Docker daemon...")
            try:
                tarball = stack.enter_context(open(path, "rb"))
            except OSError as e:
                raise StepError("load", f"failed to read tarball: {e}") from e
            output = await anyio.to_thread.run_sync(daemon.load, tarball)
            logger.debug("Load response: %s", output)

            source = extract_image_id(output)
            if not source:
                raise ExtractionError(output)

            target = self.target_ref
            logger.info("Tagging image %s as %s", source, target)
            await anyio.to_thread.run_sync(daemon.tag, source, target)

            options = PushOptions()
            if self.registry.has_credentials():
                options = PushOptions(registry_auth=self.registry.encode())

            logger.info("Pushing %s to registry...", target)
            messages = await anyio.to_thread.run_sync(daemon.push, target, options)
            _report_push(messages)

        logger.info("Pushed with Docker: %s", target)
        return target

    async def _export(self, container, path: Path) -> None:
        logger.info("Exporting image as tarball...")
        try:
            exported = await container.export(
                str(path), forced_compression=EXPORT_COMPRESSION,
            )
        except dagger.DaggerError as e:
            raise StepError("export", f"failed to export container: {e}") from e
        if not exported:
            raise StepError("export", f"failed to export container to {path}")


def _report_push(messages: list[dict[str, Any]]) -> None:
    """Log the drained push stream. Errors reported inside it do not fail the push."""
    for message in messages:
        if isinstance(message, dict) and message.get("error"):
            logger.warning("Push reported: %s", message["error"])
        else:
            logger.debug("Push response: %s", message)
