"""
dagpush.build — Container definition handed to the build engine.

The default spec is a minimal Python hello-world image:

    python:3.11-slim
      └── /app/hello.py   (0755)
    workdir    /app
    entrypoint python3 hello.py
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from dagpush.errors import ConfigError


DEFAULT_BASE_IMAGE = "python:3.11-slim"
DEFAULT_WORKDIR = "/app"
DEFAULT_FILES = {
    "/app/hello.py": (
        "#!/usr/bin/env python3\n"
        "print('Hello World from Dagger!')"
    ),
}
DEFAULT_ENTRYPOINT = ["python3", "hello.py"]
FILE_PERMISSIONS = 0o755


@dataclass(frozen=True)
class BuildSpec:
    """What goes into the image."""
    base_image: str = DEFAULT_BASE_IMAGE
    workdir: str = DEFAULT_WORKDIR
    files: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FILES))
    entrypoint: list[str] = field(default_factory=lambda: list(DEFAULT_ENTRYPOINT))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildSpec:
        """Build a spec from the `build:` section of a config file."""
        if not isinstance(data, dict):
            raise ConfigError("'build' must be a mapping")

        spec = cls()
        files = data.get("files", spec.files)
        entrypoint = data.get("entrypoint", spec.entrypoint)
        if not isinstance(files, dict):
            raise ConfigError("'build.files' must map paths to contents")
        if isinstance(entrypoint, str):
            entrypoint = entrypoint.split()
        if not isinstance(entrypoint, list):
            raise ConfigError("'build.entrypoint' must be a string or a list")

        return cls(
            base_image=str(data.get("base_image", spec.base_image)),
            workdir=str(data.get("workdir", spec.workdir)),
            files={str(k): str(v) for k, v in files.items()},
            entrypoint=[str(a) for a in entrypoint],
        )


def build_container(client, spec: BuildSpec):
    """Declare the container on the engine. Nothing runs until it is published or exported."""
    container = client.container().from_(spec.base_image)
    for path, contents in spec.files.items():
        container = container.with_new_file(
            path, contents, permissions=FILE_PERMISSIONS,
        )
    return container.with_workdir(spec.workdir).with_entrypoint(spec.entrypoint)
