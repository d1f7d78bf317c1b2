"""
dagpush.publish.engine — Push straight from the build engine.
"""

from __future__ import annotations

import logging

import dagger

from dagpush.config import ImageIdentity, RegistryConfig
from dagpush.errors import StepError
from dagpush.publish.strategy import PublishStrategy


logger = logging.getLogger(__name__)

SECRET_NAME = "reg-pass"


class EnginePush(PublishStrategy):
    name = "engine"

    def __init__(self, client, registry: RegistryConfig, image: ImageIdentity):
        super().__init__(registry, image)
        self.client = client

    async def publish(self, container) -> str:
        ref = self.target_ref

        if self.registry.has_credentials():
            secret = self.client.set_secret(SECRET_NAME, self.registry.password)
            container = container.with_registry_auth(
                self.registry.address, self.registry.username, secret,
            )
        else:
            logger.debug("No registry credentials, pushing anonymously")

        try:
            pushed = await container.publish(ref)
        except dagger.DaggerError as e:
            raise StepError("push", f"failed to push: {e}") from e

        logger.info("Pushed with Dagger: %s", pushed)
        return pushed
