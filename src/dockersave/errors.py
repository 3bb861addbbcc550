"""
Exception taxonomy for dockersave.

Every failure of an export is raised to the caller as a subclass of
``DockerSaveError``. Nothing is retried at this layer.

- ``ConfigurationError`` - raw configuration failed validation
- ``ProvenanceError`` - artifact came from a stage that cannot be saved
- ``OutputFileError`` - destination archive could not be created
- ``ExportError`` - the driver failed; the partial archive is already removed
- ``DriverError`` - the default driver's command failed
- ``SaveCancelledError`` - the driver observed a cancellation request
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class DockerSaveError(Exception):
    """Base class for all dockersave errors."""


class ConfigurationError(DockerSaveError):
    """Raised when configuration cannot be resolved."""

    def __init__(self, errors: Sequence[str], plugin_type: str = "") -> None:
        self.errors: List[str] = list(errors)
        self.plugin_type = plugin_type
        header = f"Invalid configuration for {plugin_type}" if plugin_type else "Invalid configuration"
        details = "\n".join(f"* {e}" for e in self.errors)
        super().__init__(f"{header}:\n{details}" if details else header)


class ProvenanceError(DockerSaveError):
    """Raised when an artifact's builder id is not in the accepted set."""

    def __init__(self, builder_id: str) -> None:
        self.builder_id = builder_id
        super().__init__(
            f"Unknown artifact type: {builder_id}\n"
            f"Can only save Docker builder artifacts."
        )


class OutputFileError(DockerSaveError):
    """Raised when the destination file cannot be created."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Error creating output file: {cause}")


class ExportError(DockerSaveError):
    """Raised when the driver fails to save an image.

    The destination file has been removed by the time this surfaces.
    """

    def __init__(self, image_id: str, path: str, cause: BaseException) -> None:
        self.image_id = image_id
        self.path = path
        self.cause = cause
        super().__init__(f"Error saving image {image_id} to {path}: {cause}")


class DriverError(DockerSaveError):
    """Rich error for image runtime command failures."""

    def __init__(
        self,
        message: str,
        cmd: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        self.cmd = list(cmd or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class SaveCancelledError(DriverError):
    """Raised by a driver that stopped a save because cancel was requested."""
