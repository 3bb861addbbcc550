"""
Tests for DockerDriver using shell scripts in place of the docker CLI.
"""

import io
import sys
import threading
import time

import pytest

from dockersave.config import InterpolationContext
from dockersave.driver import DockerDriver, Driver
from dockersave.errors import DriverError, SaveCancelledError

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="fake executables are POSIX shell scripts"
)


class TestProtocol:
    def test_docker_driver_is_a_driver(self):
        assert isinstance(DockerDriver(), Driver)

    def test_defaults(self):
        driver = DockerDriver()
        assert driver.executable == "docker"
        assert driver.ctx == InterpolationContext()


class TestSaveImage:
    """Successful runs of `<executable> save <id>`."""

    def test_streams_into_file(self, make_fake_docker, tmp_path):
        driver = DockerDriver(executable=make_fake_docker(r"printf '\001\002\003'"))
        out = tmp_path / "out.tar"

        with open(out, "wb") as sink:
            driver.save_image("sha256:abc123", sink)

        assert out.read_bytes() == b"\x01\x02\x03"

    def test_passes_save_and_image_id(self, make_fake_docker, tmp_path):
        driver = DockerDriver(executable=make_fake_docker('printf "%s|%s" "$1" "$2"'))
        out = tmp_path / "out.tar"

        with open(out, "wb") as sink:
            driver.save_image("my/app:1.0", sink)

        assert out.read_bytes() == b"save|my/app:1.0"

    def test_preserves_bytes_already_in_sink(self, make_fake_docker, tmp_path):
        driver = DockerDriver(executable=make_fake_docker("printf 'image'"))
        out = tmp_path / "out.tar"

        with open(out, "wb") as sink:
            sink.write(b"header-")
            driver.save_image("x", sink)

        assert out.read_bytes() == b"header-image"

    def test_streams_into_non_file_sink(self, make_fake_docker):
        driver = DockerDriver(executable=make_fake_docker(r"printf '\001\002\003'"))
        sink = io.BytesIO()

        driver.save_image("sha256:abc123", sink)

        assert sink.getvalue() == b"\x01\x02\x03"

    def test_large_output_through_pipe(self, make_fake_docker):
        driver = DockerDriver(
            executable=make_fake_docker("head -c 3000000 /dev/zero")
        )
        sink = io.BytesIO()

        driver.save_image("big", sink)

        assert len(sink.getvalue()) == 3000000


class TestSaveFailures:
    """Command failures become DriverError."""

    def test_non_zero_exit(self, make_fake_docker, tmp_path):
        driver = DockerDriver(
            executable=make_fake_docker(
                "printf 'partial'\necho 'No such image: missing' >&2\nexit 3"
            )
        )

        with open(tmp_path / "out.tar", "wb") as sink:
            with pytest.raises(DriverError) as exc_info:
                driver.save_image("missing", sink)

        err = exc_info.value
        assert err.returncode == 3
        assert "No such image: missing" in err.stderr
        assert str(err).startswith("Error exporting: exit status 3\nStderr: ")
        assert err.cmd[1:] == ["save", "missing"]

    def test_missing_executable(self, tmp_path):
        driver = DockerDriver(executable=str(tmp_path / "no-such-docker"))

        with pytest.raises(DriverError, match="not found"):
            driver.save_image("x", io.BytesIO())

    def test_sink_write_failure(self, make_fake_docker):
        class BrokenSink(io.RawIOBase):
            def writable(self):
                return True

            def write(self, data):
                raise OSError("disk full")

        driver = DockerDriver(executable=make_fake_docker("head -c 100000 /dev/zero"))

        with pytest.raises(DriverError, match="disk full"):
            driver.save_image("x", BrokenSink())


class TestCancellation:
    """A set cancel event stops the child."""

    def test_cancelled_before_start(self, make_fake_docker, tmp_path):
        marker = tmp_path / "ran"
        driver = DockerDriver(executable=make_fake_docker(f"touch {marker}"))
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(SaveCancelledError):
            driver.save_image("x", io.BytesIO(), cancel=cancel)

        assert not marker.exists()

    def test_cancel_running_save_to_file(self, make_fake_docker, tmp_path):
        driver = DockerDriver(executable=make_fake_docker("exec sleep 30"))
        cancel = threading.Event()
        timer = threading.Timer(0.2, cancel.set)
        timer.start()

        started = time.monotonic()
        try:
            with open(tmp_path / "out.tar", "wb") as sink:
                with pytest.raises(SaveCancelledError):
                    driver.save_image("x", sink, cancel=cancel)
        finally:
            timer.cancel()

        assert time.monotonic() - started < 10

    def test_cancel_running_save_to_pipe(self, make_fake_docker):
        driver = DockerDriver(executable=make_fake_docker("exec sleep 30"))
        cancel = threading.Event()
        timer = threading.Timer(0.2, cancel.set)
        timer.start()

        started = time.monotonic()
        try:
            with pytest.raises(SaveCancelledError):
                driver.save_image("x", io.BytesIO(), cancel=cancel)
        finally:
            timer.cancel()

        assert time.monotonic() - started < 10

    def test_cancelled_is_a_driver_error(self):
        assert issubclass(SaveCancelledError, DriverError)


class TestVerify:
    def test_finds_executable(self, make_fake_docker):
        path = make_fake_docker("exit 0")
        assert DockerDriver(executable=path).verify() == path

    def test_missing_executable(self):
        with pytest.raises(DriverError, match="not found in PATH"):
            DockerDriver(executable="definitely-not-a-docker-binary").verify()
