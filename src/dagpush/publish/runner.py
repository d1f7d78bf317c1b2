"""
dagpush.publish.runner — One publish, start to finish.

    connect engine → declare container → pick strategy → publish
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from contextlib import AsyncExitStack
from pathlib import Path
from typing import TextIO

import anyio
import dagger

from dagpush.build import build_container
from dagpush.config import Settings
from dagpush.errors import ConnectError
from dagpush.publish.daemon import Daemon, DaemonPush, DockerDaemon
from dagpush.publish.engine import EnginePush
from dagpush.publish.strategy import PublishOutcome, PublishStrategy


logger = logging.getLogger(__name__)


def select_strategy(
    settings: Settings,
    client,
    daemon_factory: Callable[[], Daemon] | None = None,
    archive_dir: str | Path | None = None,
) -> PublishStrategy:
    """Engine push unless the configuration explicitly turned it off."""
    if settings.use_dagger:
        logger.info("Using Dagger for push...")
        return EnginePush(client, settings.registry, settings.image)

    logger.info("Using Docker for push...")
    return DaemonPush(
        settings.registry,
        settings.image,
        connect=daemon_factory or DockerDaemon.from_env,
        archive_dir=archive_dir,
    )


async def run_publish(
    settings: Settings,
    daemon_factory: Callable[[], Daemon] | None = None,
    log_output: TextIO | None = None,
) -> PublishOutcome:
    """Build the image on the engine and publish it with the configured strategy."""
    config = dagger.Config(log_output=log_output or sys.stderr)

    async with AsyncExitStack() as stack:
        try:
            client = await stack.enter_async_context(dagger.Connection(config))
        except dagger.DaggerError as e:
            raise ConnectError("engine", f"Failed to connect: {e}") from e

        container = build_container(client, settings.build)
        strategy = select_strategy(settings, client, daemon_factory)
        logger.info("Publishing with %r", strategy)
        published = await strategy.publish(container)

    return PublishOutcome(published_ref=published, strategy=strategy.name)


def publish(settings: Settings, **kwargs) -> PublishOutcome:
    """Blocking wrapper around run_publish()."""
    return anyio.run(functools.partial(run_publish, settings, **kwargs))
