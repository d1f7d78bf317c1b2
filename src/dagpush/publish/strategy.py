"""
dagpush.publish.strategy — Common shape of a publish path.

Two strategies exist:

  engine  — the build engine pushes the image itself
  daemon  — the image is exported, loaded into a local container
            daemon, retagged and pushed through the daemon
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from dagpush.config import ImageIdentity, RegistryConfig


@dataclass(frozen=True)
class PublishOutcome:
    """Result of one successful publish."""
    published_ref: str
    strategy: str


class PublishStrategy(ABC):
    name: str = ""

    def __init__(self, registry: RegistryConfig, image: ImageIdentity):
        self.registry = registry
        self.image = image

    @property
    def target_ref(self) -> str:
        return self.image.full_ref(self.registry.address)

    @abstractmethod
    async def publish(self, container) -> str:
        """Push the built container and return the published reference."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.target_ref}>"
