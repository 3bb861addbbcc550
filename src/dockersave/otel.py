"""
OTel span helpers for the docker-save post-processor.

``post_process_span`` opens the span an export runs in; the ``emit_*``
functions add events to whatever span is current, and do nothing when
that span is not recording.

Usage::

    from dockersave.otel import post_process_span, emit_save_completed

    with post_process_span(artifact, path):
        ...
        emit_save_completed(artifact.id, path)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from opentelemetry import trace as otel_trace

from dockersave.artifact import Artifact

logger = logging.getLogger(__name__)

_tracer = otel_trace.get_tracer("dockersave")

SPAN_NAME = "dockersave.post_process"


def _add_span_event(name: str, attributes: dict[str, str | int | float | bool]) -> None:
    """Add an event to the current OTel span if available."""
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)


@contextmanager
def post_process_span(artifact: Artifact, path: str) -> Generator[otel_trace.Span, None, None]:
    """Run the enclosed block inside a ``dockersave.post_process`` span."""
    with _tracer.start_as_current_span(
        SPAN_NAME,
        attributes={
            "dockersave.image_id": artifact.id,
            "dockersave.builder_id": artifact.builder_id,
            "dockersave.path": path,
        },
    ) as span:
        yield span


def emit_save_started(image_id: str, path: str) -> None:
    """Event name: ``dockersave.save_started``"""
    _add_span_event(
        "dockersave.save_started",
        {"dockersave.image_id": image_id, "dockersave.path": path},
    )


def emit_save_completed(image_id: str, path: str) -> None:
    """Event name: ``dockersave.save_completed``"""
    _add_span_event(
        "dockersave.save_completed",
        {"dockersave.image_id": image_id, "dockersave.path": path},
    )


def emit_save_failed(image_id: str, path: str, error: BaseException) -> None:
    """Event name: ``dockersave.save_failed``"""
    _add_span_event(
        "dockersave.save_failed",
        {
            "dockersave.image_id": image_id,
            "dockersave.path": path,
            "error.type": type(error).__name__,
            "error.message": str(error),
        },
    )
    logger.debug(f"Recorded save failure for {image_id}: {error}")
