"""
dagpush — Build a container image with Dagger and publish it.

Pushes either straight from the Dagger engine or, as a fallback,
through a local Docker daemon.
"""

from dagpush.errors import (
    PublishError, ConfigError, ConnectError, StepError, ExtractionError,
)
from dagpush.build import BuildSpec, build_container
from dagpush.config import (
    RegistryConfig, ImageIdentity, Settings, load_settings, use_engine,
)
from dagpush.publish import (
    extract_image_id,
    PublishOutcome, PublishStrategy, EnginePush, DaemonPush, DockerDaemon,
    PushOptions, publish, run_publish, select_strategy,
)

__version__ = "0.1.0"

__all__ = [
    # errors
    "PublishError",
    "ConfigError",
    "ConnectError",
    "StepError",
    "ExtractionError",
    # config
    "BuildSpec",
    "build_container",
    "RegistryConfig",
    "ImageIdentity",
    "Settings",
    "load_settings",
    "use_engine",
    # publish
    "extract_image_id",
    "PublishOutcome",
    "PublishStrategy",
    "EnginePush",
    "DaemonPush",
    "DockerDaemon",
    "PushOptions",
    "publish",
    "run_publish",
    "select_strategy",
]
