"""
Driver protocol.

Defines the interface the post-processor uses to serialize an image.
"""

from __future__ import annotations

import threading
from typing import BinaryIO, Optional, Protocol, runtime_checkable


@runtime_checkable
class Driver(Protocol):
    """
    Protocol defining the export driver interface.

    ``save_image`` writes the complete serialized image to ``sink`` before
    returning. On failure it raises, and ``sink`` may hold partial data
    that the caller must discard. Drivers that support cancellation stop
    and raise once ``cancel`` is set.
    """

    def save_image(
        self,
        image_id: str,
        sink: BinaryIO,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """Write the image named by ``image_id`` into ``sink``."""
        ...
