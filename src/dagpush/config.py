"""
dagpush.config — Registry, image and run settings.

Settings come from three layers, lowest precedence first:

    1. an optional YAML file (--config / $DAGPUSH_CONFIG)

        registry:
          address: registry.example.com
          username: bot
          password: s3cret
        image:
          name: hello
          tag: v1
        use_dagger: "false"
        build:
          base_image: python:3.11-slim
          entrypoint: [python3, hello.py]

    2. environment variables (REG_ADDR, REG_USER, REG_PASS,
       IMG_NAME, IMG_TAG, USE_DAGGER)

    3. explicit overrides passed by the caller (CLI options)
"""

from __future__ import annotations

import base64
import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dagpush.build import BuildSpec
from dagpush.errors import ConfigError


DEFAULT_TAG = "latest"

ENV_REGISTRY_ADDR = "REG_ADDR"
ENV_REGISTRY_USER = "REG_USER"
ENV_REGISTRY_PASS = "REG_PASS"
ENV_IMAGE_NAME = "IMG_NAME"
ENV_IMAGE_TAG = "IMG_TAG"
ENV_USE_DAGGER = "USE_DAGGER"
ENV_CONFIG_FILE = "DAGPUSH_CONFIG"


@dataclass(frozen=True)
class RegistryConfig:
    """Target registry and the optional credentials used to push to it."""
    address: str
    username: str = ""
    password: str = ""

    @classmethod
    def create(cls, address: str | None, username: str | None = None,
               password: str | None = None) -> RegistryConfig:
        if not address:
            raise ConfigError("registry address is required")
        return cls(
            address=address.removesuffix("/"),
            username=username or "",
            password=password or "",
        )

    def has_credentials(self) -> bool:
        return bool(self.username) and bool(self.password)

    def auth_config(self) -> dict[str, str]:
        return {
            "username": self.username,
            "password": self.password,
            "serveraddress": self.address,
        }

    def encode(self) -> str:
        """Base64 of the JSON auth record, as carried in X-Registry-Auth."""
        raw = json.dumps(self.auth_config(), sort_keys=True,
                         separators=(",", ":"))
        return base64.b64encode(raw.encode()).decode()


@dataclass(frozen=True)
class ImageIdentity:
    """Logical image name and tag."""
    name: str
    tag: str = DEFAULT_TAG

    @classmethod
    def create(cls, name: str | None, tag: str | None = None) -> ImageIdentity:
        if not name:
            raise ConfigError("image name is required")
        return cls(name=name, tag=tag or DEFAULT_TAG)

    def ref(self) -> str:
        return f"{self.name}:{self.tag}"

    def full_ref(self, registry_address: str) -> str:
        return f"{registry_address}/{self.ref()}"

    def __str__(self) -> str:
        return self.ref()


def use_engine(flag: str | None) -> bool:
    """Only an explicit "false" (any case) turns the engine push off."""
    return (flag or "").lower() != "false"


@dataclass(frozen=True)
class Settings:
    """Everything one publish run needs."""
    registry: RegistryConfig
    image: ImageIdentity
    use_dagger: bool = True
    build: BuildSpec = field(default_factory=BuildSpec)

    @property
    def strategy_name(self) -> str:
        return "engine" if self.use_dagger else "daemon"


def read_config_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML settings file."""
    cp = Path(path)
    if not cp.exists():
        raise ConfigError(f"Config file not found: {cp}")

    try:
        with open(cp) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cp}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{cp}: top level must be a mapping")
    return data


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' must be a mapping")
    return section


def load_settings(
    config_file: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, str | None] | None = None,
) -> Settings:
    """Resolve settings from file, environment and overrides.

    Override keys: address, username, password, name, tag, use_dagger.
    Raises ConfigError when the registry address or image name is missing.
    """
    if env is None:
        env = os.environ
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    if config_file is None:
        config_file = env.get(ENV_CONFIG_FILE) or None
    data = read_config_file(config_file) if config_file else {}

    reg_data = _section(data, "registry")
    img_data = _section(data, "image")

    def pick(key: str, env_key: str, section: Mapping[str, Any]) -> str | None:
        if key in overrides:
            return overrides[key]
        if env.get(env_key):
            return env[env_key]
        value = section.get(key)
        return str(value) if value is not None else None

    registry = RegistryConfig.create(
        pick("address", ENV_REGISTRY_ADDR, reg_data),
        pick("username", ENV_REGISTRY_USER, reg_data),
        pick("password", ENV_REGISTRY_PASS, reg_data),
    )
    image = ImageIdentity.create(
        pick("name", ENV_IMAGE_NAME, img_data),
        pick("tag", ENV_IMAGE_TAG, img_data),
    )
    flag = pick("use_dagger", ENV_USE_DAGGER, data)

    return Settings(
        registry=registry,
        image=image,
        use_dagger=use_engine(flag),
        build=BuildSpec.from_dict(data.get("build") or {}),
    )
