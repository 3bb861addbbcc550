"""
Artifact handles passed between pipeline stages.

An artifact is produced by an upstream stage and only read here. The
post-processor checks ``builder_id`` against ``ACCEPTED_BUILDER_IDS`` and
hands ``id`` to the driver.

Usage::

    from dockersave.artifact import ImageArtifact, DOCKER_IMPORT_BUILDER_ID

    artifact = ImageArtifact(id="sha256:abc123", builder_id=DOCKER_IMPORT_BUILDER_ID)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Protocol, runtime_checkable

from dockersave.constants import (
    BUILDER_ID,
    DOCKER_IMPORT_BUILDER_ID,
    DOCKER_TAG_BUILDER_ID,
)

ACCEPTED_BUILDER_IDS: FrozenSet[str] = frozenset({
    DOCKER_IMPORT_BUILDER_ID,
    DOCKER_TAG_BUILDER_ID,
})

__all__ = [
    "ACCEPTED_BUILDER_IDS",
    "BUILDER_ID",
    "DOCKER_IMPORT_BUILDER_ID",
    "DOCKER_TAG_BUILDER_ID",
    "Artifact",
    "ImageArtifact",
    "is_saveable",
]


@runtime_checkable
class Artifact(Protocol):
    """Protocol for artifacts produced by upstream stages."""

    @property
    def id(self) -> str:
        """Image reference or digest."""
        ...

    @property
    def builder_id(self) -> str:
        """Identifier of the stage that produced the artifact."""
        ...


@dataclass(frozen=True)
class ImageArtifact:
    """A built container image, identified by reference or digest."""

    id: str
    builder_id: str

    def __str__(self) -> str:
        return f"Docker image: {self.id}"


def is_saveable(artifact: Artifact) -> bool:
    """Check whether an artifact came from a stage whose images can be saved."""
    return artifact.builder_id in ACCEPTED_BUILDER_IDS
