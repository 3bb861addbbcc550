"""
Export drivers for dockersave.

A driver serializes a named image into a writable binary sink. The
post-processor depends only on the ``Driver`` protocol, so tests and
alternative runtimes can substitute their own implementation.

Example:
    from dockersave.driver import DockerDriver

    driver = DockerDriver(executable="podman")
    with open("image.tar", "wb") as f:
        driver.save_image("alpine:3.20", f)
"""

from dockersave.driver.base import Driver
from dockersave.driver.docker import DockerDriver

__all__ = [
    "Driver",
    "DockerDriver",
]
