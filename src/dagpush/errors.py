"""
dagpush.errors — Error taxonomy.

Every failure the publish flow can surface derives from PublishError,
so the CLI has a single place to turn them into an exit status.
"""

from __future__ import annotations


class PublishError(Exception):
    pass


class ConfigError(PublishError):
    """A required setting is missing or the config file is unreadable."""


class ConnectError(PublishError):
    """The build engine or the container daemon could not be reached."""

    def __init__(self, target: str, message: str):
        super().__init__(message)
        self.target = target


class StepError(PublishError):
    """An external system rejected one step of a publish (export, load, tag, push)."""

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step


class ExtractionError(PublishError):
    """The daemon's load output did not name the image it loaded."""

    def __init__(self, output: str):
        super().__init__("could not determine loaded image ID")
        self.output = output
