"""
Docker-save post-processor.

Exports an image produced by the docker-import or docker-tag stages to
an archive on disk. The destination file is either complete and closed
when ``post_process`` returns, or it does not exist.

Usage::

    from dockersave.post_processor import DockerSavePostProcessor
    from dockersave.ui import ClickUi

    pp = DockerSavePostProcessor.configure({"path": "/tmp/out.tar"})
    result = pp.post_process(ClickUi(), artifact)
    assert result.artifact is artifact

Substituting the driver (tests, other runtimes)::

    pp = DockerSavePostProcessor(config, driver=FakeDriver())
"""

from __future__ import annotations

import logging
import os
import threading
from typing import Any, BinaryIO, Dict, Mapping, NamedTuple, Optional

from dockersave.artifact import Artifact, is_saveable
from dockersave.config import DockerSaveConfig, config_schema, resolve_config
from dockersave.driver import DockerDriver, Driver
from dockersave.errors import ExportError, OutputFileError, ProvenanceError
from dockersave.otel import (
    emit_save_completed,
    emit_save_failed,
    emit_save_started,
    post_process_span,
)
from dockersave.ui import Ui

logger = logging.getLogger(__name__)


class PostProcessResult(NamedTuple):
    """Outcome of a successful ``post_process`` call."""

    artifact: Artifact
    continue_chain: bool
    force_override: bool


def _remove_partial(path: str) -> None:
    """Delete a partially written archive; failures are logged, not raised."""
    try:
        os.remove(path)
    except OSError as e:
        logger.debug(f"Could not remove partial archive {path}: {e}")


class DockerSavePostProcessor:
    """
    Saves Docker builder artifacts to an archive file.

    Args:
        config: Resolved configuration
        driver: Export driver; defaults to a ``DockerDriver`` bound to
            ``config.docker_path``
    """

    def __init__(self, config: DockerSaveConfig, driver: Optional[Driver] = None):
        self.config = config
        if driver is None:
            driver = DockerDriver(
                executable=config.docker_path,
                ctx=config.interpolation_context(),
            )
        self.driver = driver

    @classmethod
    def configure(
        cls,
        *raws: Optional[Mapping[str, Any]],
        driver: Optional[Driver] = None,
    ) -> "DockerSavePostProcessor":
        """Resolve raw option mappings and build a post-processor."""
        return cls(resolve_config(*raws), driver=driver)

    @staticmethod
    def config_spec() -> Dict[str, Any]:
        """JSON schema of the accepted options."""
        return config_schema()

    def _create_output(self, path: str) -> BinaryIO:
        try:
            return open(path, "wb")
        except OSError as e:
            raise OutputFileError(path, e) from e

    def post_process(
        self,
        ui: Ui,
        artifact: Artifact,
        cancel: Optional[threading.Event] = None,
    ) -> PostProcessResult:
        """
        Save ``artifact`` to the configured path.

        Args:
            ui: Receives the progress messages
            artifact: Artifact from the docker-import or docker-tag stage
            cancel: Optional event handed to the driver

        Returns:
            PostProcessResult carrying the same artifact, with
            ``continue_chain=True`` and ``force_override=False``

        Raises:
            ProvenanceError: If the artifact came from another stage
            OutputFileError: If the destination cannot be created
            ExportError: If the driver failed; the file has been removed
        """
        if not is_saveable(artifact):
            raise ProvenanceError(artifact.builder_id)

        path = self.config.path

        with post_process_span(artifact, path):
            sink = self._create_output(path)

            try:
                with sink:
                    ui.message(f"Saving image: {artifact.id}")
                    emit_save_started(artifact.id, path)
                    self.driver.save_image(artifact.id, sink, cancel=cancel)
            except Exception as e:
                _remove_partial(path)
                emit_save_failed(artifact.id, path, e)
                raise ExportError(artifact.id, path, e) from e
            except BaseException:
                _remove_partial(path)
                raise

            ui.message(f"Saved to: {path}")
            emit_save_completed(artifact.id, path)

        logger.info(f"Saved image {artifact.id} to {path}")
        return PostProcessResult(artifact, True, False)
