"""
Docker CLI driver.

Runs ``<executable> save <image>`` and streams the archive into the
sink supplied by the caller. Works with any executable that implements
the ``save`` subcommand with docker's semantics (docker, podman, nerdctl).
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import threading
from typing import IO, BinaryIO, List, Optional

from dockersave.config import InterpolationContext
from dockersave.constants import (
    DEFAULT_DOCKER_EXECUTABLE,
    SAVE_COPY_CHUNK_BYTES,
    SAVE_POLL_INTERVAL_S,
    SAVE_TERMINATE_TIMEOUT_S,
)
from dockersave.errors import DriverError, SaveCancelledError

logger = logging.getLogger(__name__)


def _sink_fileno(sink: BinaryIO) -> Optional[int]:
    """Return the OS-level descriptor behind ``sink``, if it has one."""
    try:
        return sink.fileno()
    except (AttributeError, OSError, ValueError):
        return None


class DockerDriver:
    """
    Driver backed by the docker command line.

    Args:
        executable: Name or path of the image runtime binary
        ctx: Build-level context, attached to log records
    """

    def __init__(
        self,
        executable: str = DEFAULT_DOCKER_EXECUTABLE,
        ctx: Optional[InterpolationContext] = None,
    ):
        self.executable = executable
        self.ctx = ctx or InterpolationContext()

    def __repr__(self) -> str:
        return f"DockerDriver(executable={self.executable!r})"

    def verify(self) -> str:
        """
        Check that the executable can be found.

        Returns:
            Resolved path of the executable

        Raises:
            DriverError: If the executable is not on PATH
        """
        resolved = shutil.which(self.executable)
        if resolved is None:
            raise DriverError(
                f"{self.executable} not found in PATH.\n"
                f"Install docker or set docker_path to the runtime binary.",
                cmd=[self.executable],
            )
        return resolved

    def save_image(
        self,
        image_id: str,
        sink: BinaryIO,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Export an image to ``sink`` with ``<executable> save``.

        Args:
            image_id: Image reference or digest
            sink: Writable binary stream receiving the archive
            cancel: Optional event; when set the save is stopped

        Raises:
            DriverError: If the command cannot start or exits non-zero
            SaveCancelledError: If ``cancel`` was set before completion
        """
        cmd = [self.executable, "save", image_id]
        if cancel is not None and cancel.is_set():
            raise SaveCancelledError(f"Save of {image_id} cancelled before start", cmd=cmd)

        logger.info(
            f"Exporting image: {image_id}",
            extra={"build_name": self.ctx.build_name, "executable": self.executable},
        )

        fileno = _sink_fileno(sink)
        if fileno is not None:
            # The child writes to the descriptor directly
            sink.flush()

        with tempfile.TemporaryFile() as stderr:
            try:
                proc = subprocess.Popen(
                    cmd,
                    stdin=subprocess.DEVNULL,
                    stdout=fileno if fileno is not None else subprocess.PIPE,
                    stderr=stderr,
                )
            except FileNotFoundError as e:
                raise DriverError(
                    f"{self.executable} not found. Install docker or set docker_path.",
                    cmd=cmd,
                ) from e
            except OSError as e:
                raise DriverError(f"Error starting {self.executable}: {e}", cmd=cmd) from e

            copy_errors: List[BaseException] = []
            copier: Optional[threading.Thread] = None
            if fileno is None:
                copier = threading.Thread(
                    target=self._copy_stdout,
                    args=(proc, sink, copy_errors),
                    name=f"dockersave-copy-{proc.pid}",
                    daemon=True,
                )
                copier.start()

            try:
                returncode = self._wait(proc, cancel, cmd)
            finally:
                if proc.poll() is None:
                    proc.kill()
                    proc.wait()
                if copier is not None:
                    copier.join()
                if proc.stdout is not None:
                    proc.stdout.close()

            if copy_errors:
                raise DriverError(
                    f"Error writing image archive: {copy_errors[0]}",
                    cmd=cmd,
                ) from copy_errors[0]

            if returncode != 0:
                stderr.seek(0)
                stderr_text = stderr.read().decode("utf-8", errors="replace")
                raise DriverError(
                    f"Error exporting: exit status {returncode}\nStderr: {stderr_text}",
                    cmd=cmd,
                    returncode=returncode,
                    stderr=stderr_text,
                )

        logger.debug(f"Exported image {image_id} with {self.executable}")

    @staticmethod
    def _copy_stdout(
        proc: subprocess.Popen,
        sink: BinaryIO,
        errors: List[BaseException],
    ) -> None:
        """Copy piped stdout into a sink that has no file descriptor.

        Runs on a helper thread until EOF. A failed write kills the child
        so the waiting thread is released.
        """
        stdout: IO[bytes] = proc.stdout
        try:
            while True:
                chunk = stdout.read1(SAVE_COPY_CHUNK_BYTES)
                if not chunk:
                    return
                sink.write(chunk)
        except Exception as e:
            errors.append(e)
            proc.kill()

    def _wait(
        self,
        proc: subprocess.Popen,
        cancel: Optional[threading.Event],
        cmd: List[str],
    ) -> int:
        """Wait for the child, polling ``cancel`` between waits."""
        while True:
            try:
                return proc.wait(timeout=SAVE_POLL_INTERVAL_S)
            except subprocess.TimeoutExpired:
                if cancel is not None and cancel.is_set():
                    self._terminate(proc)
                    raise SaveCancelledError(f"Save cancelled: {' '.join(cmd)}", cmd=cmd)

    @staticmethod
    def _terminate(proc: subprocess.Popen) -> None:
        proc.terminate()
        try:
            proc.wait(timeout=SAVE_TERMINATE_TIMEOUT_S)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {proc.pid} ignored SIGTERM, killing")
            proc.kill()
            proc.wait()
