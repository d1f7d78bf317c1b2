"""dagpush.publish — Publish strategies and the orchestration around them."""

from dagpush.publish.extract import extract_image_id
from dagpush.publish.strategy import PublishOutcome, PublishStrategy
from dagpush.publish.engine import EnginePush
from dagpush.publish.daemon import (
    Daemon, DaemonPush, DockerDaemon, PushOptions, archive_path,
)
from dagpush.publish.runner import publish, run_publish, select_strategy

__all__ = [
    "extract_image_id",
    "PublishOutcome", "PublishStrategy",
    "EnginePush",
    "Daemon", "DaemonPush", "DockerDaemon", "PushOptions", "archive_path",
    "publish", "run_publish", "select_strategy",
]
