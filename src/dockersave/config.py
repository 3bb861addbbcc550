"""
Configuration for the docker-save post-processor.

Uses Pydantic BaseSettings for environment variable integration
and validation. A configuration is resolved once per post-processor
and is read-only afterwards.

Configuration sources (in order of precedence):
1. Raw mappings passed to ``resolve_config`` (later mappings win)
2. Environment variables (DOCKERSAVE_*)
3. Default values

Example:
    from dockersave.config import resolve_config

    config = resolve_config({"path": "image.tar"}, {"docker_path": "podman"})
    print(config.docker_path)  # podman

    # From a YAML file, with CLI flags layered on top
    config = resolve_config(load_config_file(Path("save.yaml")), {"path": "out.tar"})
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dockersave.constants import BUILDER_ID, DEFAULT_DOCKER_EXECUTABLE
from dockersave.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InterpolationContext:
    """Build-level values handed to the driver alongside the executable."""

    build_name: Optional[str] = None
    builder_type: Optional[str] = None
    user_variables: Dict[str, str] = field(default_factory=dict)


class DockerSaveConfig(BaseSettings):
    """
    Resolved options for one docker-save post-processor.

    All settings can be overridden via environment variables
    prefixed with DOCKERSAVE_.

    Example:
        export DOCKERSAVE_DOCKER_PATH=/usr/local/bin/docker
        export DOCKERSAVE_PATH=/tmp/image.tar
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCKERSAVE_",
        extra="forbid",
        frozen=True,
    )

    # Post-processor options
    docker_path: str = Field(
        default=DEFAULT_DOCKER_EXECUTABLE,
        description="Image runtime executable used by the default driver",
    )
    path: str = Field(
        ...,
        description="Destination file for the exported image archive",
    )

    # Common build options supplied by the host
    packer_build_name: Optional[str] = Field(
        default=None,
        description="Name of the build this post-processor runs in",
    )
    packer_builder_type: Optional[str] = Field(
        default=None,
        description="Type of the builder that started the chain",
    )
    packer_debug: bool = Field(
        default=False,
        description="Whether the build runs in debug mode",
    )
    packer_force: bool = Field(
        default=False,
        description="Whether the build was forced",
    )
    packer_on_error: Optional[str] = Field(
        default=None,
        description="Host behaviour on build errors (cleanup, abort, ask, run-cleanup-provisioner)",
    )
    packer_user_variables: Dict[str, str] = Field(
        default_factory=dict,
        description="User variables available to template expressions",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Logging level for dockersave",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log output format (json for log shippers, text for console)",
    )

    @field_validator("docker_path", mode="before")
    @classmethod
    def default_executable(cls, v: Any) -> Any:
        """Fall back to the conventional executable name when unset."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_DOCKER_EXECUTABLE
        return v

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in the destination path; other characters are kept as given."""
        if not v.strip():
            raise ValueError("path must not be empty")
        return os.path.expanduser(v)

    def interpolation_context(self) -> InterpolationContext:
        """Build the context handed to the default driver."""
        return InterpolationContext(
            build_name=self.packer_build_name,
            builder_type=self.packer_builder_type,
            user_variables=dict(self.packer_user_variables),
        )


def _format_validation_error(exc: ValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return messages


def resolve_config(*raws: Optional[Mapping[str, Any]]) -> DockerSaveConfig:
    """
    Merge raw option mappings and validate them.

    Args:
        *raws: Option mappings applied left to right; ``None`` is skipped

    Returns:
        Validated, immutable DockerSaveConfig

    Raises:
        ConfigurationError: If the merged options are invalid
    """
    merged: Dict[str, Any] = {}
    for raw in raws:
        if raw is None:
            continue
        if not isinstance(raw, Mapping):
            raise ConfigurationError(
                [f"expected a mapping of options, got {type(raw).__name__}"],
                plugin_type=BUILDER_ID,
            )
        merged.update(raw)

    try:
        config = DockerSaveConfig(**merged)
    except ValidationError as e:
        raise ConfigurationError(_format_validation_error(e), plugin_type=BUILDER_ID) from e

    logger.debug(f"Resolved configuration: path={config.path} docker_path={config.docker_path}")
    return config


def load_config_file(path: Path) -> Dict[str, Any]:
    """
    Load raw options from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        The mapping found at the root of the file

    Raises:
        ConfigurationError: If the file is missing, unparseable or not a mapping
    """
    if not path.exists():
        raise ConfigurationError([f"config file not found: {path}"], plugin_type=BUILDER_ID)

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError([f"invalid YAML in {path}: {e}"], plugin_type=BUILDER_ID) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            [f"expected a mapping at the root of {path}, got {type(data).__name__}"],
            plugin_type=BUILDER_ID,
        )
    return data


def config_schema() -> Dict[str, Any]:
    """JSON schema describing the accepted options."""
    return DockerSaveConfig.model_json_schema()
